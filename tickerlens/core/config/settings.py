"""Configuration management - aggregation and quality policy settings."""

from __future__ import annotations

import os
import tomllib
from dataclasses import asdict, dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any

from loguru import logger

from tickerlens.core.exceptions import ConfigurationError
from tickerlens.core.models.fields import FieldCategory, FieldPath
from tickerlens.core.validation.tolerance import ToleranceRule

DEFAULT_REQUIRED_FIELDS = (FieldPath.PRICE_CURRENT, FieldPath.PRICE_CHANGE_PERCENT)
DEFAULT_PENALIZED_CATEGORIES = (FieldCategory.TECHNICAL, FieldCategory.FUNDAMENTALS, FieldCategory.NEWS)


def _to_path(value: FieldPath | str, setting: str) -> FieldPath:
    path = FieldPath.parse(value)
    if path is None:
        raise ConfigurationError(f"unknown field path '{value}'", setting=setting)
    return path


@dataclass(frozen=True)
class AggregationConfig:
    """Static policy for merging source records."""

    required_fields: tuple[FieldPath, ...] = DEFAULT_REQUIRED_FIELDS
    tolerances: dict[FieldPath, ToleranceRule] = field(default_factory=dict)
    source_priority: tuple[str, ...] = ()
    max_age: timedelta = timedelta(hours=24)
    required_missing_penalty: int = 20
    category_missing_penalty: int = 10
    conflict_penalty: int = 5
    penalized_categories: tuple[FieldCategory, ...] = DEFAULT_PENALIZED_CATEGORIES
    max_news_items: int = 5

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "required_fields",
            tuple(dict.fromkeys(_to_path(path, "required_fields") for path in self.required_fields)),
        )
        object.__setattr__(
            self,
            "tolerances",
            {_to_path(path, "tolerances"): rule for path, rule in self.tolerances.items()},
        )
        object.__setattr__(self, "source_priority", tuple(dict.fromkeys(self.source_priority)))
        try:
            categories = tuple(FieldCategory(category) for category in self.penalized_categories)
        except ValueError as exc:
            raise ConfigurationError(str(exc), setting="penalized_categories") from exc
        object.__setattr__(self, "penalized_categories", categories)
        for name in ("required_missing_penalty", "category_missing_penalty", "conflict_penalty"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must not be negative", setting=name)
        if self.max_age <= timedelta(0):
            raise ConfigurationError("max_age must be positive", setting="max_age")
        if self.max_news_items <= 0:
            raise ConfigurationError("max_news_items must be positive", setting="max_news_items")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AggregationConfig:
        kwargs: dict[str, Any] = {}
        try:
            if "required_fields" in data:
                kwargs["required_fields"] = tuple(data["required_fields"])
            if "source_priority" in data:
                kwargs["source_priority"] = tuple(str(item) for item in data["source_priority"])
            if "max_age_hours" in data:
                kwargs["max_age"] = timedelta(hours=float(data["max_age_hours"]))
            if "penalized_categories" in data:
                kwargs["penalized_categories"] = tuple(data["penalized_categories"])
            if "tolerances" in data:
                kwargs["tolerances"] = {
                    path: ToleranceRule(**rule) for path, rule in dict(data["tolerances"]).items()
                }
            for name in ("required_missing_penalty", "category_missing_penalty", "conflict_penalty", "max_news_items"):
                if name in data:
                    kwargs[name] = int(data[name])
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"invalid aggregation settings: {exc}", setting="aggregation") from exc
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "required_fields": [path.value for path in self.required_fields],
            "source_priority": list(self.source_priority),
            "max_age_hours": self.max_age.total_seconds() / 3600,
            "penalized_categories": [category.value for category in self.penalized_categories],
            "tolerances": {path.value: rule.to_dict() for path, rule in self.tolerances.items()},
            "required_missing_penalty": self.required_missing_penalty,
            "category_missing_penalty": self.category_missing_penalty,
            "conflict_penalty": self.conflict_penalty,
            "max_news_items": self.max_news_items,
        }


@dataclass(frozen=True)
class QualityPolicy:
    """Weights and thresholds of the completeness score.

    The 50/25/20/5 split and the 50% adequacy thresholds are defaults, not
    derived constants; deployments may tune them.
    """

    price_weight: float = 50.0
    technical_weight: float = 25.0
    fundamental_weight: float = 20.0
    news_weight: float = 5.0
    partial_price_ratio: float = 0.5
    technical_adequacy_threshold: float = 50.0
    fundamental_adequacy_threshold: float = 50.0
    availability_threshold: float = 40.0

    def __post_init__(self) -> None:
        weights = {
            "price_weight": self.price_weight,
            "technical_weight": self.technical_weight,
            "fundamental_weight": self.fundamental_weight,
            "news_weight": self.news_weight,
        }
        for name, weight in weights.items():
            if weight < 0:
                raise ConfigurationError(f"{name} must not be negative", setting=name)
        if abs(sum(weights.values()) - 100.0) > 1e-9:
            raise ConfigurationError(
                "quality weights must total 100",
                setting="weights",
                details={"weights": weights},
            )
        if not 0.0 <= self.partial_price_ratio <= 1.0:
            raise ConfigurationError("partial_price_ratio must be within 0..1", setting="partial_price_ratio")
        for name in ("technical_adequacy_threshold", "fundamental_adequacy_threshold", "availability_threshold"):
            if not 0.0 <= getattr(self, name) <= 100.0:
                raise ConfigurationError(f"{name} must be a percentage", setting=name)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QualityPolicy:
        try:
            return cls(**{key: float(value) for key, value in data.items()})
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"invalid quality policy: {exc}", setting="quality") from exc

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "INFO"
    file: str | None = None


@dataclass
class TickerLensConfig:
    """Top level tickerlens configuration."""

    aggregation: AggregationConfig = field(default_factory=AggregationConfig)
    quality: QualityPolicy = field(default_factory=QualityPolicy)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> TickerLensConfig:
        """Build a configuration from a (TOML shaped) dictionary."""
        try:
            logging_config = LoggingConfig(**config_dict.get("logging", {}))
        except TypeError as exc:
            raise ConfigurationError(f"invalid logging settings: {exc}", setting="logging") from exc
        return cls(
            aggregation=AggregationConfig.from_dict(config_dict.get("aggregation", {})),
            quality=QualityPolicy.from_dict(config_dict.get("quality", {})),
            logging=logging_config,
        )

    def to_dict(self) -> dict[str, Any]:
        logging_dict = {key: value for key, value in asdict(self.logging).items() if value is not None}
        return {
            "aggregation": self.aggregation.to_dict(),
            "quality": self.quality.to_dict(),
            "logging": logging_dict,
        }


class ConfigManager:
    """Loads and saves the TOML configuration file."""

    def __init__(self, config_path: Path | None = None):
        """Create the manager.

        Args:
            config_path: configuration file, defaults to ``~/.tickerlens/config.toml``
        """
        self.config_path = config_path or Path.home() / ".tickerlens" / "config.toml"
        self.config = self._load_config()

    def _load_config(self) -> TickerLensConfig:
        if not self.config_path.exists():
            return TickerLensConfig()

        try:
            with open(self.config_path, "rb") as f:
                config_dict = tomllib.load(f)
            return TickerLensConfig.from_dict(config_dict)
        except (OSError, tomllib.TOMLDecodeError, ConfigurationError) as e:
            logger.warning("Failed to load config, using defaults", path=str(self.config_path), error=str(e))
            return TickerLensConfig()

    def get_config(self) -> TickerLensConfig:
        return self.config

    def update_config(self, **updates: Any) -> None:
        """Deep-merge ``updates`` into the current configuration."""
        config_dict = self.config.to_dict()

        def deep_update(d: dict[str, Any], u: dict[str, Any]) -> dict[str, Any]:
            for k, v in u.items():
                if isinstance(v, dict):
                    d[k] = deep_update(d.get(k, {}), v)
                else:
                    d[k] = v
            return d

        deep_update(config_dict, updates)
        self.config = TickerLensConfig.from_dict(config_dict)

    def save_config(self) -> None:
        import tomli_w

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "wb") as f:
            tomli_w.dump(self.config.to_dict(), f)


def get_default_config() -> TickerLensConfig:
    return TickerLensConfig()


def load_config_from_env() -> dict[str, Any]:
    """Read ``TICKERLENS_*`` environment overrides into a config dictionary."""
    config: dict[str, Any] = {}

    aggregation_config: dict[str, Any] = {}
    max_age_hours = os.getenv("TICKERLENS_MAX_AGE_HOURS")
    if max_age_hours is not None:
        aggregation_config["max_age_hours"] = float(max_age_hours)
    source_priority = os.getenv("TICKERLENS_SOURCE_PRIORITY")
    if source_priority:
        aggregation_config["source_priority"] = [item.strip() for item in source_priority.split(",") if item.strip()]
    required_fields = os.getenv("TICKERLENS_REQUIRED_FIELDS")
    if required_fields:
        aggregation_config["required_fields"] = [item.strip() for item in required_fields.split(",") if item.strip()]
    for name in ("required_missing_penalty", "category_missing_penalty", "conflict_penalty"):
        raw = os.getenv(f"TICKERLENS_{name.upper()}")
        if raw is not None:
            aggregation_config[name] = int(raw)

    if aggregation_config:
        config["aggregation"] = aggregation_config

    logging_config: dict[str, Any] = {}
    logging_level = os.getenv("TICKERLENS_LOGGING_LEVEL")
    if logging_level is not None:
        logging_config["level"] = logging_level
    logging_file = os.getenv("TICKERLENS_LOGGING_FILE")
    if logging_file is not None:
        logging_config["file"] = logging_file

    if logging_config:
        config["logging"] = logging_config

    return config
