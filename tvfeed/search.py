"""Symbol search, chart and quote tokens, drawings and Pine indicator lookups."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any
from urllib.parse import quote

import httpx

__all__ = [
    "Credentials",
    "BuiltinIndicators",
    "TradingViewAPIError",
    "NoChartTokenFound",
    "build_search_params",
    "advanced_search_symbol",
    "get_symbol",
    "search_symbols",
    "list_symbols",
    "get_chart_token",
    "get_quote_token",
    "get_drawing",
    "get_private_indicators",
    "get_builtin_indicators",
    "search_indicator",
    "get_indicator_metadata",
]

SEARCH_BASE_URL = "https://symbol-search.tradingview.com/symbol_search/v3/"
_PINE_FACADE_URL = "https://pine-facade.tradingview.com/pine-facade"
_PAGE_SIZE = 50
_MAX_CONCURRENT_PAGES = 30

_HEADERS = {
    "Origin": "https://www.tradingview.com",
    "Referer": "https://www.tradingview.com/",
}


class TradingViewAPIError(Exception):
    """The service answered, but not with what was asked for."""


class NoChartTokenFound(TradingViewAPIError):
    """The chart-token endpoint returned no token."""

    def __init__(self) -> None:
        super().__init__("No chart token found")


@dataclass(frozen=True)
class Credentials:
    """Cookies of a signed-in user."""

    id: int | str
    session: str
    session_signature: str
    device_token: str = ""

    def cookie_header(self) -> str:
        return (
            f"sessionid={self.session}; "
            f"sessionid_sign={self.session_signature}; "
            f"device_t={self.device_token};"
        )


class BuiltinIndicators(Enum):
    """Groups of built-in indicators."""

    ALL = "all"
    FUNDAMENTAL = "fundamental"
    STANDARD = "standard"
    CANDLESTICK = "candlestick"

    def filters(self) -> list[str]:
        if self is BuiltinIndicators.ALL:
            return ["fundamental", "standard", "candlestick"]
        return [self.value]


def _market_family(market_type: str) -> str:
    """Classify a search type such as ``stocks`` or ``crypto_dex`` into its family."""
    kind = (market_type or "").lower()
    if kind in ("", "all"):
        return "all"
    if kind.startswith("stock"):
        return "stocks"
    if kind.startswith("fund"):
        return "funds"
    if kind == "futures":
        return "futures"
    if kind == "forex":
        return "forex"
    if kind.startswith("crypto"):
        return "crypto"
    if kind in ("index", "indices"):
        return "indices"
    if kind in ("bond", "bonds"):
        return "bonds"
    if kind in ("economic", "economy"):
        return "economy"
    raise ValueError(f"unknown market type: {market_type!r}")


async def _get(
    credentials: Credentials | None,
    url: str,
    params: Sequence[tuple[str, str]] | Mapping[str, str] | None = None,
) -> httpx.Response:
    headers = dict(_HEADERS)
    if credentials is not None:
        headers["Cookie"] = credentials.cookie_header()
    async with httpx.AsyncClient(
        headers=headers, timeout=30.0, follow_redirects=True
    ) as client:
        response = await client.get(url, params=params)
    response.raise_for_status()
    return response


def build_search_params(
    search: str | None = None,
    exchange: str | None = None,
    market_type: str = "",
    country: str | None = None,
    domain: str = "production",
    futures_type: str | None = None,
    stock_sector: str | None = None,
    crypto_centralization: str | None = None,
    economic_source: str | None = None,
    economic_category: str | None = None,
) -> list[tuple[str, str]]:
    """Query parameters of a symbol search, in the order they are sent."""
    family = _market_family(market_type)
    params = [
        ("text", search or ""),
        ("exchange", exchange or ""),
        ("search_type", market_type),
        ("domain", domain),
    ]
    if country is not None:
        params.append(("country", str(country)))
        params.append(("sort_by_country", str(country)))
    if family == "futures" and futures_type is not None:
        params.append(("product", str(futures_type)))
    elif family == "stocks" and stock_sector is not None:
        params.append(("sector", str(stock_sector)))
    elif family == "crypto" and crypto_centralization is not None:
        params.append(("centralization", str(crypto_centralization)))
    elif family == "economy":
        if economic_source is not None:
            params.append(("source_id", str(economic_source)))
        if economic_category is not None:
            params.append(("economic_category", str(economic_category)))
    return params


async def advanced_search_symbol(
    search: str | None = None,
    exchange: str | None = None,
    market_type: str = "",
    start: int = 0,
    country: str | None = None,
    domain: str = "production",
    futures_type: str | None = None,
    stock_sector: str | None = None,
    crypto_centralization: str | None = None,
    economic_source: str | None = None,
    economic_category: str | None = None,
) -> dict[str, Any]:
    """Run one page of a symbol search and return the decoded response."""
    if start < 0:
        raise ValueError("start must not be negative")
    params = build_search_params(
        search,
        exchange,
        market_type,
        country,
        domain,
        futures_type,
        stock_sector,
        crypto_centralization,
        economic_source,
        economic_category,
    )
    params += [("hl", "0"), ("lang", "en"), ("start", str(start))]
    data = (await _get(None, SEARCH_BASE_URL, params)).json()
    if not isinstance(data, dict) or not isinstance(data.get("symbols", []), list):
        raise TradingViewAPIError("unexpected symbol search response")
    data.setdefault("symbols", [])
    return data


async def get_symbol(symbol: str, exchange: str) -> dict[str, Any] | None:
    """The first match for a symbol on an exchange, or None if none or on failure."""
    try:
        data = await advanced_search_symbol(search=symbol, exchange=exchange)
    except (httpx.HTTPError, ValueError, TradingViewAPIError):
        return None
    symbols = data["symbols"]
    return symbols[0] if symbols else None


async def search_symbols(search: str, exchange: str) -> list[dict[str, Any]]:
    data = await advanced_search_symbol(search=search, exchange=exchange)
    return data["symbols"]


async def list_symbols(
    exchange: str | None = None,
    market_type: str = "",
    country: str | None = None,
    domain: str | None = None,
) -> list[dict[str, Any]]:
    """Every symbol matching the filters, fetching the remaining pages concurrently."""
    exchange = exchange or ""
    domain = domain or "production"
    first = await advanced_search_symbol(
        exchange=exchange, market_type=market_type, country=country, domain=domain
    )
    symbols = list(first["symbols"])
    remaining = int(first.get("symbols_remaining", 0) or 0)

    semaphore = asyncio.Semaphore(_MAX_CONCURRENT_PAGES)

    async def page(start: int) -> list[dict[str, Any]]:
        async with semaphore:
            data = await advanced_search_symbol(
                exchange=exchange,
                market_type=market_type,
                country=country,
                domain=domain,
                start=start,
            )
        return data["symbols"]

    pages = await asyncio.gather(
        *(page(start) for start in range(_PAGE_SIZE, remaining, _PAGE_SIZE))
    )
    for found in pages:
        symbols.extend(found)
    return symbols


async def get_chart_token(credentials: Credentials, layout_id: str) -> str:
    data = (
        await _get(
            credentials,
            "https://www.tradingview.com/chart-token/",
            [("image_url", layout_id), ("user_id", str(credentials.id))],
        )
    ).json()
    token = data.get("token") if isinstance(data, dict) else None
    if not isinstance(token, str):
        raise NoChartTokenFound()
    return token


async def get_quote_token(credentials: Credentials) -> str:
    data = (await _get(credentials, "https://www.tradingview.com/quote_token")).json()
    if not isinstance(data, str):
        raise TradingViewAPIError("quote token response is not a string")
    return data


async def get_drawing(
    credentials: Credentials,
    layout_id: str,
    symbol: str,
    chart_id: str | None = None,
) -> dict[str, Any]:
    """The drawings stored for a chart layout; the shared chart when no id is given."""
    token = await get_chart_token(credentials, layout_id)
    url = (
        "https://charts-storage.tradingview.com/charts-storage/get/layout/"
        f"{layout_id}/sources"
    )
    params = [("chart_id", chart_id or "_shared"), ("jwt", token), ("symbol", symbol)]
    return (await _get(credentials, url, params)).json()


def _as_list(data: Any, what: str) -> list[Any]:
    if not isinstance(data, list):
        raise TradingViewAPIError(f"{what} response is not a list")
    return data


async def get_private_indicators(credentials: Credentials) -> list[dict[str, Any]]:
    response = await _get(
        credentials, f"{_PINE_FACADE_URL}/list", [("filter", "saved")]
    )
    return _as_list(response.json(), "private indicators")


async def get_builtin_indicators(
    indicator_type: BuiltinIndicators = BuiltinIndicators.ALL,
) -> list[dict[str, Any]]:
    async def fetch(kind: str) -> list[dict[str, Any]]:
        response = await _get(None, f"{_PINE_FACADE_URL}/list/", [("filter", kind)])
        return _as_list(response.json(), "builtin indicators")

    groups = await asyncio.gather(*(fetch(kind) for kind in indicator_type.filters()))
    return [indicator for group in groups for indicator in group]


async def search_indicator(
    credentials: Credentials | None, search: str, offset: int = 0
) -> list[dict[str, Any]]:
    data = (
        await _get(
            credentials,
            "https://www.tradingview.com/pubscripts-suggest-json/",
            [("search", search), ("offset", str(offset))],
        )
    ).json()
    results = data.get("results", []) if isinstance(data, dict) else []
    if not results:
        raise TradingViewAPIError("No results found")
    return results


async def get_indicator_metadata(
    credentials: Credentials | None, pinescript_id: str, pinescript_version: str
) -> dict[str, Any]:
    url = (
        f"{_PINE_FACADE_URL}/translate/"
        f"{quote(pinescript_id, safe='')}/{quote(pinescript_version, safe='')}"
    )
    data = (await _get(credentials, url)).json()
    if isinstance(data, dict) and data.get("success") is True:
        return data.get("result")
    raise TradingViewAPIError("Failed to get indicator metadata")