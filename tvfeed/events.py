"""Feed state and the dispatch of server events to handlers."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from tvfeed.callbacks import EventCallback
from tvfeed.models import (
    ChartResponseData,
    DataPoint,
    StudyResponseData,
    SymbolInfo,
)
from tvfeed.options import ChartOptions, StudyOptions

__all__ = [
    "DataEvent",
    "TradingViewError",
    "QuoteStatusError",
    "SeriesInfo",
    "FeedState",
    "merge_quotes",
]

logger = logging.getLogger(__name__)


class DataEvent(Enum):
    """Data events sent by the server, by their wire name."""

    CHART_DATA = "timescale_update"
    CHART_DATA_UPDATE = "du"
    QUOTE_DATA = "qsd"
    SYMBOL_RESOLVED = "symbol_resolved"
    SERIES_COMPLETED = "series_completed"
    SERIES_LOADING = "series_loading"
    QUOTE_COMPLETED = "quote_completed"
    REPLAY_OK = "replay_ok"
    REPLAY_POINT = "replay_point"
    REPLAY_INSTANCE_ID = "replay_instance_id"
    REPLAY_RESOLUTIONS = "replay_resolutions"
    REPLAY_DATA_END = "replay_data_end"
    STUDY_LOADING = "study_loading"
    STUDY_COMPLETED = "study_completed"

    def __str__(self) -> str:
        return self.value


class TradingViewError(Exception):
    """An error reported by the server; ``kind`` is the event that carried it."""

    EVENTS = frozenset(
        {
            "critical_error",
            "protocol_error",
            "symbol_error",
            "series_error",
            "study_error",
            "replay_error",
        }
    )

    def __init__(self, kind: str) -> None:
        super().__init__(kind)
        self.kind = kind


class QuoteStatusError(TradingViewError):
    """A quote update arrived with a status other than ``ok``."""

    def __init__(self) -> None:
        super().__init__("quote_data_status_error")


@dataclass
class SeriesInfo:
    """A chart series: the chart session it lives in and how it was requested."""

    chart_session: str = ""
    options: ChartOptions = field(default_factory=ChartOptions)


def merge_quotes(previous: Mapping[str, Any], update: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``previous`` overlaid with every field the update sets."""
    merged = dict(previous)
    merged.update({key: value for key, value in update.items() if value is not None})
    return merged


def _payload(message: Sequence[Any], position: int) -> Any:
    try:
        return message[position]
    except IndexError:
        raise ValueError(f"message has no element at position {position}") from None


def _lookup(container: Any, key: str) -> Any:
    return container.get(key) if isinstance(container, Mapping) else None


_SIMPLE_EVENTS = {
    DataEvent.SERIES_COMPLETED: "on_series_completed",
    DataEvent.SERIES_LOADING: "on_series_loading",
    DataEvent.QUOTE_COMPLETED: "on_quote_completed",
    DataEvent.REPLAY_OK: "on_replay_ok",
    DataEvent.REPLAY_POINT: "on_replay_point",
    DataEvent.REPLAY_INSTANCE_ID: "on_replay_instance_id",
    DataEvent.REPLAY_RESOLUTIONS: "on_replay_resolutions",
    DataEvent.REPLAY_DATA_END: "on_replay_data_end",
    DataEvent.STUDY_LOADING: "on_study_loading",
    DataEvent.STUDY_COMPLETED: "on_study_completed",
}


@dataclass
class FeedState:
    """What a feed connection knows about its series, studies and quotes."""

    callbacks: EventCallback = field(default_factory=EventCallback)
    series_count: int = 0
    studies_count: int = 0
    series: dict[str, SeriesInfo] = field(default_factory=dict)
    studies: dict[str, str] = field(default_factory=dict)
    quotes: dict[str, dict[str, Any]] = field(default_factory=dict)
    quote_session: str = ""
    chart: tuple[SeriesInfo, list[DataPoint]] | None = None
    symbol_info: SymbolInfo | None = None

    def next_series_number(self) -> int:
        self.series_count += 1
        return self.series_count

    def next_study_number(self) -> int:
        self.studies_count += 1
        return self.studies_count

    def register_series(self, series_id: str, info: SeriesInfo) -> None:
        self.series[series_id] = info

    def register_study(self, indicator_id: str, study_id: str) -> None:
        self.studies[indicator_id] = study_id

    def handle_event(self, event: str | DataEvent, message: Sequence[Any]) -> None:
        """Update the state from one server event and call its handler."""
        message = list(message)
        if isinstance(event, DataEvent):
            kind: DataEvent | None = event
            name = event.value
        else:
            name = event
            try:
                kind = DataEvent(name)
            except ValueError:
                kind = None

        if kind in (DataEvent.CHART_DATA, DataEvent.CHART_DATA_UPDATE):
            logger.debug("received raw chart data: %r", message)
            try:
                self._handle_chart_data(message)
            except ValueError as exc:
                logger.error("chart data parsing error: %s", exc)
                self.callbacks.on_error(exc, message)
        elif kind is DataEvent.QUOTE_DATA:
            self._handle_quote_data(message)
        elif kind is DataEvent.SYMBOL_RESOLVED:
            self._handle_symbol_resolved(message)
        elif kind is not None:
            logger.debug("%s: %r", name, message)
            self.callbacks.handler(_SIMPLE_EVENTS[kind])(message)
        elif name in TradingViewError.EVENTS:
            logger.error("trading view error: %s", name)
            self.callbacks.on_error(TradingViewError(name), message)
        else:
            logger.warning("unknown event: %s", name)
            self.callbacks.on_unknown_event(name, message)

    def _handle_chart_data(self, message: list[Any]) -> None:
        body = _payload(message, 1)
        for series_id, info in list(self.series.items()):
            raw = _lookup(body, series_id)
            if raw is not None:
                points = ChartResponseData.from_json(raw).series
                self.chart = (info, points)
                self.callbacks.on_chart_data(info, list(points))
            else:
                logger.debug("received empty data on series: %r", info)
            if info.options.study_config is not None:
                self._handle_study_data(info.options.study_config, body)

    def _handle_study_data(self, options: StudyOptions, body: Any) -> None:
        for indicator_id, study_id in list(self.studies.items()):
            raw = _lookup(body, study_id)
            if raw is not None:
                logger.debug("study data received: %s", indicator_id)
                self.callbacks.on_study_data(options, StudyResponseData.from_json(raw))

    def _handle_quote_data(self, message: list[Any]) -> None:
        raw = message[1] if len(message) > 1 else None
        name, status, value = "", "", {}
        if isinstance(raw, Mapping):
            name = raw.get("n", "") if isinstance(raw.get("n", ""), str) else ""
            status = raw.get("s", "") if isinstance(raw.get("s", ""), str) else ""
            value = raw.get("v", {}) if isinstance(raw.get("v", {}), Mapping) else {}
        if status != "ok":
            logger.error("quote data status error: %r", raw)
            self.callbacks.on_error(QuoteStatusError(), message)
            return
        previous = self.quotes.get(name)
        self.quotes[name] = merge_quotes(previous, value) if previous else dict(value)
        for quote in self.quotes.values():
            self.callbacks.on_quote_data(dict(quote))

    def _handle_symbol_resolved(self, message: list[Any]) -> None:
        try:
            info = SymbolInfo.from_json(_payload(message, 2))
        except ValueError as exc:
            logger.error("symbol resolved parsing error: %s", exc)
            self.callbacks.on_error(exc, message)
            return
        self.symbol_info = info
        self.callbacks.on_symbol_info(info)