"""Commands sent over a feed connection, and the chart set-up built from them."""

from __future__ import annotations

import json
import logging
import random
import string
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Protocol

from tvfeed.callbacks import EventCallback
from tvfeed.events import DataEvent, FeedState, SeriesInfo
from tvfeed.options import ChartOptions, StudyOptions

__all__ = ["WebSocket", "gen_session_id"]

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_letters
_ID_LENGTH = 12


def gen_session_id(prefix: str) -> str:
    """A fresh session id such as ``cs_AbCdEfGhIjKl``."""
    return f"{prefix}_{_gen_id()}"


def _gen_id() -> str:
    return "".join(random.choices(_ID_ALPHABET, k=_ID_LENGTH))


def _symbol_init(
    symbol: str,
    adjustment: str | None,
    currency: str | None,
    session_type: str | None,
    replay_session: str | None,
) -> str:
    spec: dict[str, Any] = {
        "adjustment": adjustment if adjustment is not None else "splits",
        "symbol": symbol,
    }
    if currency is not None:
        spec["currency-id"] = currency
    if session_type is not None:
        spec["session"] = session_type
    if replay_session is not None:
        spec["replay"] = replay_session
    return "=" + json.dumps(spec, separators=(",", ":"))


class Transport(Protocol):
    """What the feed needs from the underlying connection."""

    async def send(self, method: str, params: list[Any]) -> None: ...

    async def close(self) -> None: ...

    async def update_auth_token(self, auth_token: str) -> None: ...


# Loads the study described by the options and returns
# (indicator id, script type, study inputs).
StudyLoader = Callable[[StudyOptions], Awaitable[tuple[str, str, Any]]]


class WebSocket:
    """A feed connection: sends commands and dispatches incoming events."""

    def __init__(
        self,
        transport: Transport,
        callbacks: EventCallback | None = None,
        *,
        state: FeedState | None = None,
        study_loader: StudyLoader | None = None,
    ) -> None:
        self.transport = transport
        if state is None:
            state = FeedState(callbacks=callbacks or EventCallback())
        elif callbacks is not None:
            state.callbacks = callbacks
        self.state = state
        self.study_loader = study_loader

    async def _send(self, method: str, *params: Any) -> WebSocket:
        await self.transport.send(method, list(params))
        return self

    # Quote sessions

    async def create_quote_session(self) -> WebSocket:
        session = gen_session_id("qs")
        self.state.quote_session = session
        return await self._send("quote_create_session", session)

    async def delete_quote_session(self) -> WebSocket:
        return await self._send("quote_delete_session", self.state.quote_session)

    async def set_fields(self, fields: Iterable[str]) -> WebSocket:
        return await self._send("quote_set_fields", self.state.quote_session, *fields)

    async def add_symbols(self, symbols: Iterable[str]) -> WebSocket:
        return await self._send("quote_add_symbols", self.state.quote_session, *symbols)

    async def fast_symbols(self, symbols: Iterable[str]) -> WebSocket:
        return await self._send(
            "quote_fast_symbols", self.state.quote_session, *symbols
        )

    async def remove_symbols(self, symbols: Iterable[str]) -> WebSocket:
        return await self._send(
            "quote_remove_symbols", self.state.quote_session, *symbols
        )

    async def update_auth_token(self, auth_token: str) -> WebSocket:
        await self.transport.update_auth_token(auth_token)
        return self

    # Chart sessions

    async def set_locale(self, language: str, country: str) -> WebSocket:
        return await self._send("set_locale", language, country)

    async def set_data_quality(self, data_quality: str) -> WebSocket:
        return await self._send("set_data_quality", data_quality)

    async def set_timezone(self, session: str, timezone: Any) -> WebSocket:
        return await self._send("switch_timezone", session, str(timezone))

    async def create_chart_session(self, session: str) -> WebSocket:
        return await self._send("chart_create_session", session)

    async def create_replay_session(self, session: str) -> WebSocket:
        return await self._send("replay_create_session", session)

    async def add_replay_series(
        self, session: str, series_id: str, symbol: str, config: ChartOptions
    ) -> WebSocket:
        return await self._send(
            "replay_add_series",
            session,
            series_id,
            _symbol_init(
                symbol, config.adjustment, config.currency, config.session_type, None
            ),
            str(config.interval),
        )

    async def delete_chart_session(self, session: str) -> WebSocket:
        return await self._send("chart_delete_session", session)

    async def delete_replay_session(self, session: str) -> WebSocket:
        return await self._send("replay_delete_session", session)

    async def replay_step(self, session: str, series_id: str, step: int) -> WebSocket:
        return await self._send("replay_step", session, series_id, step)

    async def replay_start(
        self, session: str, series_id: str, interval: Any
    ) -> WebSocket:
        return await self._send("replay_start", session, series_id, str(interval))

    async def replay_stop(self, session: str, series_id: str) -> WebSocket:
        return await self._send("replay_stop", session, series_id)

    async def replay_reset(
        self, session: str, series_id: str, timestamp: int
    ) -> WebSocket:
        return await self._send("replay_reset", session, series_id, timestamp)

    async def request_more_data(
        self, session: str, series_id: str, num: int
    ) -> WebSocket:
        return await self._send("request_more_data", session, series_id, num)

    async def request_more_tickmarks(
        self, session: str, series_id: str, num: int
    ) -> WebSocket:
        return await self._send("request_more_tickmarks", session, series_id, num)

    async def create_study(
        self, session: str, study_id: str, series_id: str, script_type: Any, inputs: Any
    ) -> WebSocket:
        return await self._send(
            "create_study", session, study_id, "st1", series_id, str(script_type), inputs
        )

    async def modify_study(
        self, session: str, study_id: str, series_id: str, script_type: Any, inputs: Any
    ) -> WebSocket:
        return await self._send(
            "modify_study", session, study_id, "st1", series_id, str(script_type), inputs
        )

    async def remove_study(self, session: str, study_id: str) -> WebSocket:
        return await self._send("remove_study", session, study_id)

    async def _series_command(
        self,
        method: str,
        session: str,
        series_id: str,
        series_version: str,
        series_symbol_id: str,
        config: ChartOptions,
    ) -> WebSocket:
        return await self._send(
            method,
            session,
            series_id,
            series_version,
            series_symbol_id,
            str(config.interval),
            config.bar_count,
            config.range_param(),
        )

    async def create_series(
        self,
        session: str,
        series_id: str,
        series_version: str,
        series_symbol_id: str,
        config: ChartOptions,
    ) -> WebSocket:
        return await self._series_command(
            "create_series", session, series_id, series_version, series_symbol_id, config
        )

    async def modify_series(
        self,
        session: str,
        series_id: str,
        series_version: str,
        series_symbol_id: str,
        config: ChartOptions,
    ) -> WebSocket:
        return await self._series_command(
            "modify_series", session, series_id, series_version, series_symbol_id, config
        )

    async def remove_series(self, session: str, series_id: str) -> WebSocket:
        return await self._send("remove_series", session, series_id)

    async def resolve_symbol(
        self,
        session: str,
        symbol_series_id: str,
        symbol: str,
        config: ChartOptions,
        replay_session: str | None = None,
    ) -> WebSocket:
        return await self._send(
            "resolve_symbol",
            session,
            symbol_series_id,
            _symbol_init(
                symbol,
                config.adjustment,
                config.currency,
                config.session_type,
                replay_session,
            ),
        )

    async def delete(self) -> WebSocket:
        """Delete every chart session this feed created, then close the connection."""
        for info in list(self.state.series.values()):
            logger.debug("delete series: %r", info)
            await self.delete_chart_session(info.chart_session)
        await self.transport.close()
        return self

    # Higher-level set-up

    async def set_replay(
        self,
        symbol: str,
        options: ChartOptions,
        chart_session: str,
        symbol_series_id: str,
    ) -> WebSocket:
        replay_series_id = _gen_id()
        replay_session = gen_session_id("rs")
        await self.create_replay_session(replay_session)
        await self.add_replay_series(replay_session, replay_series_id, symbol, options)
        await self.replay_reset(replay_session, replay_series_id, options.replay_from)
        await self.resolve_symbol(
            chart_session, symbol_series_id, options.symbol, options, replay_session
        )
        return self

    async def _set_study(
        self, study: StudyOptions, chart_session: str, series_id: str
    ) -> None:
        if self.study_loader is None:
            raise ValueError("a study was requested but no study loader is configured")
        study_id = f"st{self.state.next_study_number()}"
        indicator_id, script_type, inputs = await self.study_loader(study)
        self.state.register_study(indicator_id, study_id)
        await self.create_study(chart_session, study_id, series_id, script_type, inputs)

    async def set_market(self, options: ChartOptions) -> WebSocket:
        """Open a chart session for a symbol and request its series."""
        number = self.state.next_series_number()
        symbol_series_id = f"sds_sym_{number}"
        series_id = f"sds_{number}"
        series_version = f"s{number}"
        chart_session = gen_session_id("cs")
        symbol = options.market_symbol()

        await self.create_chart_session(chart_session)
        if options.replay_mode:
            await self.set_replay(symbol, options, chart_session, symbol_series_id)
        else:
            await self.resolve_symbol(chart_session, symbol_series_id, symbol, options)

        await self.create_series(
            chart_session, series_id, series_version, symbol_series_id, options
        )

        if options.study_config is not None:
            await self._set_study(options.study_config, chart_session, series_id)

        self.state.register_series(
            series_id, SeriesInfo(chart_session=chart_session, options=options)
        )
        return self

    # Incoming events

    def handle_message(self, event: str | DataEvent, message: list[Any]) -> None:
        self.state.handle_event(event, message)

    def handle_error(self, error: Exception) -> None:
        self.state.callbacks.on_error(error, [])