"""
Tests for configuration management.

Covers the aggregation and quality policy dataclasses, TOML loading and
saving, and environment overrides.
"""

from datetime import timedelta
from pathlib import Path

import pytest
import tomli_w

from tickerlens.core.config import (
    AggregationConfig,
    ConfigManager,
    LoggingConfig,
    QualityPolicy,
    TickerLensConfig,
    get_default_config,
    load_config_from_env,
)
from tickerlens.core.exceptions import ConfigurationError
from tickerlens.core.models.fields import FieldCategory, FieldPath
from tickerlens.core.validation.tolerance import ToleranceRule


class TestAggregationConfig:
    """Test AggregationConfig."""

    def test_defaults(self):
        """Defaults match the documented policy."""
        config = AggregationConfig()

        assert config.required_fields == (FieldPath.PRICE_CURRENT, FieldPath.PRICE_CHANGE_PERCENT)
        assert config.max_age == timedelta(hours=24)
        assert (config.required_missing_penalty, config.category_missing_penalty, config.conflict_penalty) == (20, 10, 5)
        assert config.penalized_categories == (
            FieldCategory.TECHNICAL,
            FieldCategory.FUNDAMENTALS,
            FieldCategory.NEWS,
        )
        assert config.max_news_items == 5
        assert config.source_priority == ()

    def test_string_paths_are_normalized(self):
        """Field paths given as strings become vocabulary members."""
        config = AggregationConfig(
            required_fields=("price.current", "price.current"),
            tolerances={"fundamentals.per": ToleranceRule(absolute=0.1)},
            source_priority=("a", "b", "a"),
        )

        assert config.required_fields == (FieldPath.PRICE_CURRENT,)
        assert FieldPath.PER in config.tolerances
        assert config.source_priority == ("a", "b")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"required_fields": ("price.bogus",)},
            {"conflict_penalty": -1},
            {"max_age": timedelta(0)},
            {"max_news_items": 0},
            {"penalized_categories": ("volume",)},
        ],
    )
    def test_invalid_values_raise_configuration_error(self, kwargs):
        """Invalid settings are configuration errors."""
        with pytest.raises(ConfigurationError):
            AggregationConfig(**kwargs)

    def test_dict_round_trip(self):
        """to_dict output feeds back into from_dict."""
        config = AggregationConfig.from_dict(
            {
                "required_fields": ["price.current"],
                "source_priority": ["kabutan", "yahoo"],
                "max_age_hours": 6,
                "tolerances": {"price.volume": {"relative": 0.05}},
                "conflict_penalty": 7,
            }
        )

        assert config.max_age == timedelta(hours=6)
        assert config.tolerances[FieldPath.PRICE_VOLUME] == ToleranceRule(relative=0.05)
        assert AggregationConfig.from_dict(config.to_dict()) == config

    def test_from_dict_wraps_type_errors(self):
        """Malformed values surface as ConfigurationError."""
        with pytest.raises(ConfigurationError):
            AggregationConfig.from_dict({"max_age_hours": "soon"})
        with pytest.raises(ConfigurationError):
            AggregationConfig.from_dict({"tolerances": {"price.current": {"bogus": 1}}})


class TestQualityPolicy:
    """Test QualityPolicy."""

    def test_defaults(self):
        policy = QualityPolicy()

        assert (policy.price_weight, policy.technical_weight, policy.fundamental_weight, policy.news_weight) == (
            50.0,
            25.0,
            20.0,
            5.0,
        )
        assert policy.availability_threshold == 40.0

    def test_from_dict(self):
        policy = QualityPolicy.from_dict({"price_weight": 40, "technical_weight": 35})

        assert policy.technical_weight == 35.0
        assert QualityPolicy.from_dict(policy.to_dict()) == policy

    def test_invalid_policy(self):
        with pytest.raises(ConfigurationError):
            QualityPolicy(partial_price_ratio=1.5)
        with pytest.raises(ConfigurationError):
            QualityPolicy(availability_threshold=120)
        with pytest.raises(ConfigurationError):
            QualityPolicy.from_dict({"price_weight": "heavy"})
        with pytest.raises(ConfigurationError):
            QualityPolicy.from_dict({"unknown_weight": 1})


class TestTickerLensConfig:
    """Test the top level configuration."""

    def test_from_dict_sections(self):
        config = TickerLensConfig.from_dict(
            {
                "aggregation": {"source_priority": ["yahoo"]},
                "quality": {"news_weight": 5},
                "logging": {"level": "DEBUG"},
            }
        )

        assert config.aggregation.source_priority == ("yahoo",)
        assert config.logging == LoggingConfig(level="DEBUG")

    def test_invalid_logging_section(self):
        with pytest.raises(ConfigurationError):
            TickerLensConfig.from_dict({"logging": {"colour": True}})

    def test_default_config(self):
        assert get_default_config() == TickerLensConfig()


class TestConfigManager:
    """Test ConfigManager."""

    def test_missing_file_gives_defaults(self, tmp_path: Path):
        manager = ConfigManager(tmp_path / "missing.toml")

        assert manager.get_config() == TickerLensConfig()

    def test_loads_toml(self, tmp_path: Path):
        path = tmp_path / "config.toml"
        path.write_bytes(
            tomli_w.dumps({"aggregation": {"max_age_hours": 2, "source_priority": ["kabutan"]}}).encode("utf-8")
        )

        config = ConfigManager(path).get_config()

        assert config.aggregation.max_age == timedelta(hours=2)
        assert config.aggregation.source_priority == ("kabutan",)

    def test_invalid_file_falls_back_to_defaults(self, tmp_path: Path):
        path = tmp_path / "config.toml"
        path.write_text("[aggregation\nbroken", encoding="utf-8")

        assert ConfigManager(path).get_config() == TickerLensConfig()

    def test_invalid_values_fall_back_to_defaults(self, tmp_path: Path):
        path = tmp_path / "config.toml"
        path.write_text('[quality]\nprice_weight = 90\n', encoding="utf-8")

        assert ConfigManager(path).get_config() == TickerLensConfig()

    def test_update_and_save(self, tmp_path: Path):
        path = tmp_path / "nested" / "config.toml"
        manager = ConfigManager(path)

        manager.update_config(aggregation={"conflict_penalty": 9}, logging={"level": "DEBUG"})
        manager.save_config()

        reloaded = ConfigManager(path).get_config()
        assert reloaded.aggregation.conflict_penalty == 9
        assert reloaded.logging.level == "DEBUG"
        assert reloaded == manager.get_config()


class TestEnvironmentOverrides:
    """Test TICKERLENS_* environment variables."""

    def test_reads_overrides(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("TICKERLENS_MAX_AGE_HOURS", "12")
        monkeypatch.setenv("TICKERLENS_SOURCE_PRIORITY", "kabutan, yahoo,")
        monkeypatch.setenv("TICKERLENS_CONFLICT_PENALTY", "3")
        monkeypatch.setenv("TICKERLENS_LOGGING_LEVEL", "DEBUG")

        overrides = load_config_from_env()

        assert overrides == {
            "aggregation": {
                "max_age_hours": 12.0,
                "source_priority": ["kabutan", "yahoo"],
                "conflict_penalty": 3,
            },
            "logging": {"level": "DEBUG"},
        }

    def test_no_variables_no_overrides(self, monkeypatch: pytest.MonkeyPatch):
        for name in (
            "TICKERLENS_MAX_AGE_HOURS",
            "TICKERLENS_SOURCE_PRIORITY",
            "TICKERLENS_REQUIRED_FIELDS",
            "TICKERLENS_REQUIRED_MISSING_PENALTY",
            "TICKERLENS_CATEGORY_MISSING_PENALTY",
            "TICKERLENS_CONFLICT_PENALTY",
            "TICKERLENS_LOGGING_LEVEL",
            "TICKERLENS_LOGGING_FILE",
        ):
            monkeypatch.delenv(name, raising=False)

        assert load_config_from_env() == {}
