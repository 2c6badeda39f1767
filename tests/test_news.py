import httpx
import pytest
import respx

from tvfeed.news import (
    NewsArea,
    NewsSection,
    fetch_news,
    fetch_source_html,
    fetch_story_content,
    list_news,
    news_category,
    related_symbols,
    source_url,
    story_url,
)

NEWS_HOST = "news-headlines.tradingview.com"
STORY_ID = "tag:reuters.com,2024:newsml_L4N3E9476:0"

ITEMS = [
    {
        "id": STORY_ID,
        "title": "First",
        "storyPath": "/news/reuters.com,2024:newsml_L4N3E9476:0/",
        "relatedSymbols": [{"symbol": "NASDAQ:AAPL"}, {"symbol": "NYSE:IBM"}],
    },
    {
        "id": "second",
        "title": "Second",
        "storyPath": "/news/second/",
        "link": "https://news.example.com/article",
    },
]


@pytest.fixture
def router():
    with respx.mock(assert_all_called=False) as mock_router:
        yield mock_router


@pytest.mark.parametrize(
    "market_type, expected",
    [
        ("", "base"),
        ("all", "base"),
        ("stocks", "stock"),
        ("funds", "etf"),
        ("futures", "futures"),
        ("forex", "forex"),
        ("crypto", "crypto"),
        ("index", "index"),
        ("bond", "bond"),
        ("economic", "economic"),
    ],
)
def test_news_category(market_type, expected):
    assert news_category(market_type) == expected


def test_news_category_unknown():
    with pytest.raises(ValueError):
        news_category("marbles")


def test_story_and_source_urls():
    assert story_url(ITEMS[0]) == (
        "https://www.tradingview.com/news/reuters.com,2024:newsml_L4N3E9476:0/"
    )
    assert source_url(ITEMS[0]) == story_url(ITEMS[0])
    assert source_url(ITEMS[1]) == "https://news.example.com/article"


def test_related_symbols():
    assert related_symbols(ITEMS[0]) == ["NASDAQ:AAPL", "NYSE:IBM"]
    assert related_symbols(ITEMS[1]) == []


@pytest.mark.asyncio
async def test_list_news(router):
    route = router.route(host=NEWS_HOST, path="/v2/headlines").mock(
        return_value=httpx.Response(200, json={"items": ITEMS})
    )
    res = await list_news(section=NewsSection.ANALYSIS_ALL)
    assert [item["id"] for item in res["items"]] == [STORY_ID, "second"]
    params = route.calls.last.request.url.params
    assert params["category"] == "base"
    assert params["client"] == "web"
    assert params["lang"] == "en"
    assert params["streaming"] == "false"
    assert params["section"] == "analysis"
    assert "area" not in params


@pytest.mark.asyncio
async def test_list_news_with_area_and_category(router):
    route = router.route(host=NEWS_HOST, path="/v2/headlines").mock(
        return_value=httpx.Response(200, json={"items": []})
    )
    res = await list_news(category="crypto", area=NewsArea.ASIA)
    assert res == {"items": []}
    params = route.calls.last.request.url.params
    assert params["category"] == "crypto"
    assert params["area"] == "ASI"


@pytest.mark.asyncio
async def test_fetch_news(router):
    route = router.route(host=NEWS_HOST, path="/v2/story").mock(
        side_effect=lambda request: httpx.Response(
            200, json={"id": request.url.params["id"], "astDescription": {}}
        )
    )
    content = await fetch_news(STORY_ID)
    assert content["id"] == STORY_ID
    assert route.calls.last.request.url.params["lang"] == "en"

    router.route(host=NEWS_HOST, path="/v2/headlines").mock(
        return_value=httpx.Response(200, json={"items": ITEMS})
    )
    res = await list_news(section=NewsSection.ANALYSIS_ALL)
    contents = [await fetch_story_content(item) for item in res["items"][0:2]]
    assert [c["id"] for c in contents] == [STORY_ID, "second"]


@pytest.mark.asyncio
async def test_get_source_html(router):
    router.route(host=NEWS_HOST, path="/v2/headlines").mock(
        return_value=httpx.Response(200, json={"items": ITEMS[1:]})
    )
    router.route(host="news.example.com", path="/article").mock(
        return_value=httpx.Response(200, text="<html>story</html>")
    )
    res = await list_news(section=NewsSection.ANALYSIS_ALL)
    html = [await fetch_source_html(item) for item in res["items"][0:1]]
    assert html == ["<html>story</html>"]


@pytest.mark.asyncio
async def test_list_news_http_error(router):
    router.route(host=NEWS_HOST, path="/v2/headlines").mock(
        return_value=httpx.Response(503)
    )
    with pytest.raises(httpx.HTTPStatusError):
        await list_news()