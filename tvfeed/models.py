"""Chart data models: candles, symbol descriptions and server responses."""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

__all__ = [
    "ChartType",
    "DataPoint",
    "Subsession",
    "SymbolInfo",
    "ChartHistoricalData",
    "ChartResponseData",
    "GraphicDataResponse",
    "StudyResponseData",
    "ChartDataChanges",
    "closes",
    "opens",
    "highs",
    "lows",
    "volumes",
    "datetimes",
    "timestamps",
]


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object, got {type(data).__name__}")
    return data


def _require(data: Mapping[str, Any], key: str, what: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise ValueError(f"{what}: missing field {key!r}") from None


def _string(data: Mapping[str, Any], key: str, what: str) -> str:
    value = data.get(key, "")
    if not isinstance(value, str):
        raise ValueError(f"{what}: field {key!r} must be a string")
    return value


def _string_list(data: Mapping[str, Any], key: str, what: str) -> list[str]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"{what}: field {key!r} must be a list of strings")
    return list(value)


def _optional_string(data: Mapping[str, Any], key: str, what: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"{what}: field {key!r} must be a string")
    return value


def _points(data: Mapping[str, Any], key: str, what: str) -> list[DataPoint]:
    raw = _require(data, key, what)
    if not isinstance(raw, list):
        raise ValueError(f"{what}: field {key!r} must be a list")
    return [DataPoint.from_json(item) for item in raw]


class ChartType(Enum):
    """Non-standard chart types and the study that builds their bars."""

    HEIKIN_ASHI = "BarSetHeikenAshi@tv-basicstudies-60!"
    RENKO = "BarSetRenko@tv-prostudies-40!"
    LINE_BREAK = "BarSetPriceBreak@tv-prostudies-34!"
    KAGI = "BarSetKagi@tv-prostudies-34!"
    POINT_AND_FIGURE = "BarSetPnF@tv-prostudies-34!"
    RANGE = "BarSetRange@tv-basicstudies-72!"

    def __str__(self) -> str:
        return self.value


@dataclass
class DataPoint:
    """One bar: ``value`` holds time, open, high, low, close and volume."""

    index: int = 0
    value: list[float] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Any) -> DataPoint:
        data = _mapping(data, "data point")
        index = _require(data, "i", "data point")
        values = _require(data, "v", "data point")
        if not isinstance(values, list):
            raise ValueError("data point: field 'v' must be a list")
        try:
            return cls(int(index), [float(v) for v in values])
        except (TypeError, ValueError) as exc:
            raise ValueError(f"data point: invalid number ({exc})") from exc

    def to_json(self) -> dict[str, Any]:
        return {"index": self.index, "value": list(self.value)}

    def is_ohlcv(self) -> bool:
        return len(self.value) == 6

    def _field(self, position: int) -> float:
        return self.value[position] if self.is_ohlcv() else math.nan

    @property
    def timestamp(self) -> int:
        return int(self.value[0])

    @property
    def datetime(self) -> datetime:
        try:
            return datetime.fromtimestamp(self.timestamp, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise ValueError("Invalid timestamp") from exc

    @property
    def open(self) -> float:
        return self._field(1)

    @property
    def high(self) -> float:
        return self._field(2)

    @property
    def low(self) -> float:
        return self._field(3)

    @property
    def close(self) -> float:
        return self._field(4)

    @property
    def volume(self) -> float:
        return self._field(5)

    def validate(self) -> bool:
        """Whether the bar is a consistent, positive, finite candle."""
        o, h, l, c, v = self.open, self.high, self.low, self.close, self.volume
        return (
            not (c > h or c < l or h < l)
            and c > 0
            and o > 0
            and h > 0
            and l > 0
            and all(math.isfinite(x) for x in (c, o, h, l))
            and (math.isnan(v) or v >= 0.0)
        )

    def tr(self, prev_candle: DataPoint) -> float:
        return self.tr_close(prev_candle.close)

    def tr_close(self, prev_close: float) -> float:
        return max(self.high, prev_close) - min(self.low, prev_close)

    def clv(self) -> float:
        if self.high == self.low:
            return 0.0
        return (2.0 * self.close - self.low - self.high) / (self.high - self.low)

    def ohlc4(self) -> float:
        return (self.high + self.low + self.close + self.open) * 0.25

    def hl2(self) -> float:
        return (self.high + self.low) * 0.5

    def tp(self) -> float:
        return (self.high + self.low + self.close) / 3.0

    def volumed_price(self) -> float:
        return self.tp() * self.volume

    def is_rising(self) -> bool:
        return self.close > self.open

    def is_falling(self) -> bool:
        return self.close < self.open


def closes(points: Iterable[DataPoint]) -> Iterator[float]:
    return (p.close for p in points)


def opens(points: Iterable[DataPoint]) -> Iterator[float]:
    return (p.open for p in points)


def highs(points: Iterable[DataPoint]) -> Iterator[float]:
    return (p.high for p in points)


def lows(points: Iterable[DataPoint]) -> Iterator[float]:
    return (p.low for p in points)


def volumes(points: Iterable[DataPoint]) -> Iterator[float]:
    return (p.volume for p in points)


def datetimes(points: Iterable[DataPoint]) -> Iterator[datetime]:
    return (p.datetime for p in points)


def timestamps(points: Iterable[DataPoint]) -> Iterator[int]:
    return (p.timestamp for p in points)


@dataclass
class Subsession:
    """A trading subsession of a symbol."""

    id: str = ""
    description: str = ""
    private: bool = False
    session: str = ""
    session_display: str = ""

    @classmethod
    def from_json(cls, data: Any) -> Subsession:
        what = "subsession"
        data = _mapping(data, what)
        private = data.get("private", False)
        if not isinstance(private, bool):
            raise ValueError(f"{what}: field 'private' must be a boolean")
        return cls(
            id=_string(data, "id", what),
            description=_string(data, "description", what),
            private=private,
            session=_string(data, "session", what),
            session_display=_string(data, "session-display", what),
        )

    def _to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "private": self.private,
            "session": self.session,
            "sessionDisplay": self.session_display,
        }


# (attribute, key read from the server, key written out)
_SYMBOL_STRING_FIELDS = (
    ("id", "pro_name", "id"),
    ("name", "name", "name"),
    ("description", "description", "description"),
    ("exchange", "exchange", "exchange"),
    ("listed_exchange", "listed_exchange", "listed_exchange"),
    ("provider_id", "provider_id", "provider_id"),
    ("base_currency", "base_currency", "base_currency"),
    ("base_currency_id", "base_currency_id", "base_currency_id"),
    ("currency_id", "currency_id", "currency_id"),
    ("currency_code", "currency_code", "currency_code"),
    ("session_holidays", "sessionHolidays", "sessionHolidays"),
    ("timezone", "timezone", "timezone"),
    ("market_type", "type", "marketType"),
)


@dataclass
class SymbolInfo:
    """Description of a resolved symbol; missing fields are left empty."""

    id: str = ""
    name: str = ""
    description: str = ""
    exchange: str = ""
    listed_exchange: str = ""
    provider_id: str = ""
    base_currency: str = ""
    base_currency_id: str = ""
    currency_id: str = ""
    currency_code: str = ""
    session_holidays: str = ""
    subsessions: list[Subsession] = field(default_factory=list)
    timezone: str = ""
    market_type: str = ""
    typespecs: list[str] = field(default_factory=list)
    aliases: list[str] = field(default_factory=list)

    @property
    def symbol(self) -> str:
        return self.name

    @property
    def currency(self) -> str:
        return self.currency_id

    @classmethod
    def from_json(cls, data: Any) -> SymbolInfo:
        what = "symbol info"
        data = _mapping(data, what)
        values: dict[str, Any] = {
            attr: _string(data, key, what) for attr, key, _ in _SYMBOL_STRING_FIELDS
        }
        raw_subsessions = data.get("subsessions", [])
        if not isinstance(raw_subsessions, list):
            raise ValueError(f"{what}: field 'subsessions' must be a list")
        values["subsessions"] = [Subsession.from_json(s) for s in raw_subsessions]
        values["typespecs"] = _string_list(data, "typespecs", what)
        values["aliases"] = _string_list(data, "aliases", what)
        return cls(**values)

    def to_json(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            key: getattr(self, attr) for attr, _, key in _SYMBOL_STRING_FIELDS
        }
        result["subsessions"] = [s._to_json() for s in self.subsessions]
        result["typespecs"] = list(self.typespecs)
        result["aliases"] = list(self.aliases)
        return result


@dataclass
class ChartHistoricalData:
    """A symbol, the series it was loaded for, and its bars."""

    symbol_info: SymbolInfo = field(default_factory=SymbolInfo)
    series_info: Any = None
    data: list[DataPoint] = field(default_factory=list)

    def closes(self) -> Iterator[float]:
        return closes(self.data)

    def opens(self) -> Iterator[float]:
        return opens(self.data)

    def highs(self) -> Iterator[float]:
        return highs(self.data)

    def lows(self) -> Iterator[float]:
        return lows(self.data)

    def volumes(self) -> Iterator[float]:
        return volumes(self.data)

    def datetimes(self) -> Iterator[datetime]:
        return datetimes(self.data)

    def timestamps(self) -> Iterator[int]:
        return timestamps(self.data)


@dataclass
class ChartResponseData:
    """Series payload of a chart data message."""

    node: str | None
    series: list[DataPoint]

    @classmethod
    def from_json(cls, data: Any) -> ChartResponseData:
        what = "chart response"
        data = _mapping(data, what)
        return cls(
            node=_optional_string(data, "node", what),
            series=_points(data, "s", what),
        )


@dataclass
class GraphicDataResponse:
    """Raw graphics section of a study response."""

    d: str
    indexes: Any

    @classmethod
    def from_json(cls, data: Any) -> GraphicDataResponse:
        what = "graphic data"
        data = _mapping(data, what)
        d = _require(data, "d", what)
        if not isinstance(d, str):
            raise ValueError(f"{what}: field 'd' must be a string")
        return cls(d=d, indexes=_require(data, "indexes", what))


@dataclass
class StudyResponseData:
    """Study payload of a chart data message."""

    node: str | None
    studies: list[DataPoint]
    raw_graphics: GraphicDataResponse

    @classmethod
    def from_json(cls, data: Any) -> StudyResponseData:
        what = "study response"
        data = _mapping(data, what)
        return cls(
            node=_optional_string(data, "node", what),
            studies=_points(data, "st", what),
            raw_graphics=GraphicDataResponse.from_json(_require(data, "ns", what)),
        )


@dataclass
class ChartDataChanges:
    """Incremental change notice for a chart series."""

    changes: list[float]
    index: int
    index_diff: list[Any]
    marks: list[Any]
    zoffset: int

    @classmethod
    def from_json(cls, data: Any) -> ChartDataChanges:
        what = "chart data changes"
        data = _mapping(data, what)
        lists = {}
        for key in ("changes", "index_diff", "marks"):
            value = _require(data, key, what)
            if not isinstance(value, list):
                raise ValueError(f"{what}: field {key!r} must be a list")
            lists[key] = value
        try:
            return cls(
                changes=[float(c) for c in lists["changes"]],
                index=int(_require(data, "index", what)),
                index_diff=list(lists["index_diff"]),
                marks=list(lists["marks"]),
                zoffset=int(_require(data, "zoffset", what)),
            )
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{what}: invalid number ({exc})") from exc