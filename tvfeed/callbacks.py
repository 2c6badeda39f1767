"""Handlers invoked for the events of a data feed."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, fields, replace
from typing import Any

__all__ = ["EventCallback"]

logger = logging.getLogger(__name__)

Handler = Callable[..., None]


def _default(name: str) -> Callable[[], Handler]:
    def factory() -> Handler:
        def handler(*args: Any) -> None:
            logger.debug("Callback trigger on %s: %r", name, args)

        return handler

    return factory


@dataclass(frozen=True)
class EventCallback:
    """The set of event handlers; unset handlers only log the event.

    Handlers for paired events take two arguments:
    ``on_chart_data(series_info, points)``, ``on_study_data(options, data)``,
    ``on_error(error, message)`` and ``on_unknown_event(event, message)``.
    All others take a single argument.
    """

    on_symbol_info: Handler = field(default_factory=_default("ON_SYMBOL_INFO"))
    on_series_loading: Handler = field(default_factory=_default("ON_SERIES_LOADING"))
    on_chart_data: Handler = field(default_factory=_default("ON_CHART_DATA"))
    on_series_completed: Handler = field(
        default_factory=_default("ON_SERIES_COMPLETED")
    )
    on_study_loading: Handler = field(default_factory=_default("ON_STUDY_LOADING"))
    on_study_data: Handler = field(default_factory=_default("ON_STUDY_DATA"))
    on_study_completed: Handler = field(default_factory=_default("ON_STUDY_COMPLETED"))
    on_quote_data: Handler = field(default_factory=_default("ON_QUOTE_DATA"))
    on_quote_completed: Handler = field(default_factory=_default("ON_QUOTE_COMPLETED"))
    on_replay_ok: Handler = field(default_factory=_default("ON_REPLAY_OK"))
    on_replay_point: Handler = field(default_factory=_default("ON_REPLAY_POINT"))
    on_replay_instance_id: Handler = field(
        default_factory=_default("ON_REPLAY_INSTANCE_ID")
    )
    on_replay_resolutions: Handler = field(
        default_factory=_default("ON_REPLAY_RESOLUTIONS")
    )
    on_replay_data_end: Handler = field(default_factory=_default("ON_REPLAY_DATA_END"))
    on_error: Handler = field(default_factory=_default("ON_ERROR"))
    on_unknown_event: Handler = field(default_factory=_default("ON_UNKNOWN_EVENT"))

    def __post_init__(self) -> None:
        for f in fields(self):
            if not callable(getattr(self, f.name)):
                raise TypeError(f"handler {f.name!r} is not callable")

    @classmethod
    def _names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))

    def with_handlers(self, **kwargs: Handler) -> EventCallback:
        """Return a copy with the given handlers replaced."""
        unknown = sorted(set(kwargs) - self._names())
        if unknown:
            raise TypeError(f"unknown event handler(s): {', '.join(unknown)}")
        return replace(self, **kwargs)

    def handler(self, name: str) -> Handler:
        """Look up a handler by its attribute name."""
        if name not in self._names():
            raise KeyError(name)
        return getattr(self, name)