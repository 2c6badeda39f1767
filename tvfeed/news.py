"""News headlines and stories.

Headline items are the decoded JSON objects of the headlines endpoint; the
helpers here read their ``id``, ``storyPath``, ``link`` and ``relatedSymbols``.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from tvfeed.search import Credentials, TradingViewAPIError, _get, _market_family

__all__ = [
    "NewsArea",
    "NewsSection",
    "news_category",
    "list_news",
    "fetch_news",
    "story_url",
    "source_url",
    "related_symbols",
    "fetch_story_content",
    "fetch_source_html",
]

BASE_NEWS_URL = "https://news-headlines.tradingview.com/v2"
_SITE_URL = "https://www.tradingview.com"

_NEWS_CATEGORIES = {
    "all": "base",
    "stocks": "stock",
    "funds": "etf",
    "futures": "futures",
    "forex": "forex",
    "crypto": "crypto",
    "indices": "index",
    "bonds": "bond",
    "economy": "economic",
}


class NewsArea(Enum):
    WORLD = "WLD"
    AMERICAS = "AME"
    EUROPE = "EUR"
    ASIA = "ASI"
    OCEANIA = "OCN"
    AFRICA = "AFR"


class NewsSection(Enum):
    PRESS_RELEASE = "press_release"
    FINANCIAL_STATEMENT = "financial_statement"
    INSIDER_TRADING = "insider_trading"
    ESG = "esg"
    CORP_ACTIVITIES_ALL = "corp_activity"
    ANALYSIS_ALL = "analysis"
    ANALYSIS_RECOMMENDATIONS = "recommendation"
    ESTIMATES_AND_FORECASTS = "prediction"
    MARKET_TODAY = "markets_today"
    SURVEYS = "survey"


def news_category(market_type: str) -> str:
    """The news category for a market type; ``""`` or ``all`` gives ``base``."""
    return _NEWS_CATEGORIES[_market_family(market_type)]


def _as_dict(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise TradingViewAPIError(f"{what} response is not an object")
    return data


async def list_news(
    credentials: Credentials | None = None,
    category: str = "",
    area: NewsArea | None = None,
    section: NewsSection | None = None,
) -> dict[str, Any]:
    params = [
        ("category", news_category(category)),
        ("client", "web"),
        ("lang", "en"),
        ("streaming", "false"),
    ]
    if area is not None:
        params.append(("area", area.value))
    if section is not None:
        params.append(("section", section.value))
    response = await _get(credentials, f"{BASE_NEWS_URL}/headlines", params)
    return _as_dict(response.json(), "headlines")


async def fetch_news(story_id: str) -> dict[str, Any]:
    response = await _get(
        None, f"{BASE_NEWS_URL}/story", [("id", story_id), ("lang", "en")]
    )
    return _as_dict(response.json(), "story")


def story_url(item: Mapping[str, Any]) -> str:
    return f"{_SITE_URL}{item['storyPath']}"


def source_url(item: Mapping[str, Any]) -> str:
    """The original article's link if the item has one, else its story page."""
    link = item.get("link")
    if link:
        return str(link)
    return story_url(item)


def related_symbols(item: Mapping[str, Any]) -> list[str]:
    return [entry["symbol"] for entry in item.get("relatedSymbols") or []]


async def fetch_story_content(item: Mapping[str, Any]) -> dict[str, Any]:
    return await fetch_news(item["id"])


async def fetch_source_html(item: Mapping[str, Any]) -> str:
    return (await _get(None, source_url(item))).text