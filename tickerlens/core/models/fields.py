"""Closed vocabulary of canonical field paths."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FieldKind(str, Enum):
    """Declared value type of a field path."""

    NUMBER = "number"
    TEXT = "text"
    NEWS = "news"


class FieldCategory(str, Enum):
    """Data category a field path belongs to."""

    METADATA = "metadata"
    PRICE = "price"
    FUNDAMENTALS = "fundamentals"
    TECHNICAL = "technical"
    NEWS = "news"
    SENTIMENT = "sentiment"


class FieldPath(str, Enum):
    """Every dotted path the canonical record may carry."""

    COMPANY_NAME = "metadata.companyName"

    PRICE_CURRENT = "price.current"
    PRICE_CHANGE = "price.change"
    PRICE_CHANGE_PERCENT = "price.changePercent"
    PRICE_VOLUME = "price.volume"
    PRICE_MARKET_CAP = "price.marketCap"
    PRICE_OPEN = "price.open"
    PRICE_HIGH = "price.high"
    PRICE_LOW = "price.low"

    PER = "fundamentals.per"
    PBR = "fundamentals.pbr"
    ROE = "fundamentals.roe"
    DIVIDEND_YIELD = "fundamentals.dividendYield"
    EPS = "fundamentals.eps"
    LATEST_EARNINGS = "fundamentals.latestEarnings"

    MA25 = "technical.ma25"
    MA75 = "technical.ma75"
    MA200 = "technical.ma200"
    RSI = "technical.rsi"
    MACD_VALUE = "technical.macd.value"
    MACD_SIGNAL = "technical.macd.signal"
    MACD_HISTOGRAM = "technical.macd.histogram"

    NEWS = "news[]"

    SENTIMENT_OVERALL = "sentiment.overall"
    SENTIMENT_REASON = "sentiment.reason"

    @property
    def spec(self) -> FieldSpec:
        return FIELD_SPECS[self]

    @property
    def category(self) -> FieldCategory:
        return FIELD_SPECS[self].category

    @property
    def kind(self) -> FieldKind:
        return FIELD_SPECS[self].kind

    @classmethod
    def parse(cls, value: str | FieldPath) -> FieldPath | None:
        """Return the member for ``value`` or ``None`` when it is not in the vocabulary."""

        if isinstance(value, FieldPath):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class FieldSpec:
    """Declared type, category and default agreement tolerance of a path."""

    kind: FieldKind
    category: FieldCategory
    relative_tolerance: float = 0.0


def _number(category: FieldCategory, relative_tolerance: float = 0.0) -> FieldSpec:
    return FieldSpec(FieldKind.NUMBER, category, relative_tolerance)


def _text(category: FieldCategory) -> FieldSpec:
    return FieldSpec(FieldKind.TEXT, category)


PRICE_TOLERANCE = 0.01

FIELD_SPECS: dict[FieldPath, FieldSpec] = {
    FieldPath.COMPANY_NAME: _text(FieldCategory.METADATA),
    FieldPath.PRICE_CURRENT: _number(FieldCategory.PRICE, PRICE_TOLERANCE),
    FieldPath.PRICE_CHANGE: _number(FieldCategory.PRICE),
    FieldPath.PRICE_CHANGE_PERCENT: _number(FieldCategory.PRICE),
    FieldPath.PRICE_VOLUME: _number(FieldCategory.PRICE),
    FieldPath.PRICE_MARKET_CAP: _text(FieldCategory.PRICE),
    FieldPath.PRICE_OPEN: _number(FieldCategory.PRICE, PRICE_TOLERANCE),
    FieldPath.PRICE_HIGH: _number(FieldCategory.PRICE, PRICE_TOLERANCE),
    FieldPath.PRICE_LOW: _number(FieldCategory.PRICE, PRICE_TOLERANCE),
    FieldPath.PER: _number(FieldCategory.FUNDAMENTALS),
    FieldPath.PBR: _number(FieldCategory.FUNDAMENTALS),
    FieldPath.ROE: _number(FieldCategory.FUNDAMENTALS),
    FieldPath.DIVIDEND_YIELD: _number(FieldCategory.FUNDAMENTALS),
    FieldPath.EPS: _number(FieldCategory.FUNDAMENTALS),
    FieldPath.LATEST_EARNINGS: _text(FieldCategory.FUNDAMENTALS),
    FieldPath.MA25: _number(FieldCategory.TECHNICAL, PRICE_TOLERANCE),
    FieldPath.MA75: _number(FieldCategory.TECHNICAL, PRICE_TOLERANCE),
    FieldPath.MA200: _number(FieldCategory.TECHNICAL, PRICE_TOLERANCE),
    FieldPath.RSI: _number(FieldCategory.TECHNICAL),
    FieldPath.MACD_VALUE: _number(FieldCategory.TECHNICAL),
    FieldPath.MACD_SIGNAL: _number(FieldCategory.TECHNICAL),
    FieldPath.MACD_HISTOGRAM: _number(FieldCategory.TECHNICAL),
    FieldPath.NEWS: FieldSpec(FieldKind.NEWS, FieldCategory.NEWS),
    FieldPath.SENTIMENT_OVERALL: _text(FieldCategory.SENTIMENT),
    FieldPath.SENTIMENT_REASON: _text(FieldCategory.SENTIMENT),
}


def paths_in(category: FieldCategory) -> tuple[FieldPath, ...]:
    """Return the vocabulary members of ``category`` in declaration order."""

    return tuple(path for path in FieldPath if FIELD_SPECS[path].category is category)


class NewsItem(BaseModel):
    """One news headline reported by a collector."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    summary: str = ""
    published_at: datetime | None = Field(default=None, alias="publishedAt")
    url: str | None = None
    reliability: str | None = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("news title must not be blank")
        return value

    @field_validator("published_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @property
    def dedupe_key(self) -> str:
        return " ".join(self.title.lower().split())


__all__ = [
    "FIELD_SPECS",
    "FieldCategory",
    "FieldKind",
    "FieldPath",
    "FieldSpec",
    "NewsItem",
    "PRICE_TOLERANCE",
    "paths_in",
]
