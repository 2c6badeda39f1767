import httpx
import pytest
import respx

from tvfeed.search import (
    BuiltinIndicators,
    Credentials,
    NoChartTokenFound,
    TradingViewAPIError,
    advanced_search_symbol,
    build_search_params,
    get_builtin_indicators,
    get_chart_token,
    get_drawing,
    get_indicator_metadata,
    get_private_indicators,
    get_quote_token,
    get_symbol,
    list_symbols,
    search_indicator,
    search_symbols,
)

SEARCH_HOST = "symbol-search.tradingview.com"
SEARCH_PATH = "/symbol_search/v3/"


@pytest.fixture
def router():
    with respx.mock(assert_all_called=False) as mock_router:
        yield mock_router


@pytest.fixture
def credentials():
    return Credentials(
        id=42, session="secret", session_signature="placeholder", device_token="token"
    )


def test_cookie_header(credentials):
    assert (
        credentials.cookie_header()
        == "sessionid=secret; sessionid_sign=placeholder; device_t=token;"
    )


def test_build_search_params_basic():
    params = build_search_params("AAPL", "NASDAQ", "", None, "production")
    assert params == [
        ("text", "AAPL"),
        ("exchange", "NASDAQ"),
        ("search_type", ""),
        ("domain", "production"),
    ]


def test_build_search_params_country_adds_sort():
    params = dict(build_search_params(None, None, "", "US", "production"))
    assert params["country"] == "US"
    assert params["sort_by_country"] == "US"
    assert params["text"] == ""


def test_build_search_params_filters_follow_market_type():
    stock = dict(
        build_search_params(
            "X", "", "stocks", None, "production",
            futures_type="metals", stock_sector="finance",
        )
    )
    assert stock["sector"] == "finance"
    assert "product" not in stock

    economy = dict(
        build_search_params(
            "X", "", "economic", None, "production",
            economic_source="WB", economic_category="gdp", stock_sector="finance",
        )
    )
    assert economy["source_id"] == "WB"
    assert economy["economic_category"] == "gdp"
    assert "sector" not in economy


def test_build_search_params_rejects_unknown_market_type():
    with pytest.raises(ValueError):
        build_search_params("X", "", "marbles", None, "production")


@pytest.mark.asyncio
async def test_advanced_search_symbol_sends_params(router):
    route = router.route(host=SEARCH_HOST, path=SEARCH_PATH).mock(
        return_value=httpx.Response(
            200, json={"symbols_remaining": 0, "symbols": [{"symbol": "AAPL"}]}
        )
    )
    data = await advanced_search_symbol(search="AAPL", exchange="NASDAQ", start=5)
    assert data["symbols"] == [{"symbol": "AAPL"}]
    params = route.calls.last.request.url.params
    assert params["text"] == "AAPL"
    assert params["exchange"] == "NASDAQ"
    assert params["domain"] == "production"
    assert params["hl"] == "0"
    assert params["lang"] == "en"
    assert params["start"] == "5"


@pytest.mark.asyncio
async def test_get_symbol_first_match_or_none(router):
    route = router.route(host=SEARCH_HOST, path=SEARCH_PATH)
    route.mock(return_value=httpx.Response(200, json={"symbols": [{"symbol": "A"}, {"symbol": "B"}]}))
    assert await get_symbol("A", "NYSE") == {"symbol": "A"}
    route.mock(return_value=httpx.Response(200, json={"symbols": []}))
    assert await get_symbol("A", "NYSE") is None
    route.mock(return_value=httpx.Response(500))
    assert await get_symbol("A", "NYSE") is None


@pytest.mark.asyncio
async def test_search_symbols_returns_list(router):
    router.route(host=SEARCH_HOST, path=SEARCH_PATH).mock(
        return_value=httpx.Response(200, json={"symbols": [{"symbol": "BTCUSD"}]})
    )
    assert await search_symbols("BTC", "BINANCE") == [{"symbol": "BTCUSD"}]


@pytest.mark.asyncio
async def test_list_symbols_fetches_every_page_in_order(router):
    def page(request):
        start = int(request.url.params["start"])
        return httpx.Response(
            200,
            json={"symbols_remaining": 120, "symbols": [{"symbol": f"S{start}"}]},
        )

    route = router.route(host=SEARCH_HOST, path=SEARCH_PATH).mock(side_effect=page)
    symbols = await list_symbols(exchange="HOSE")
    assert symbols == [{"symbol": "S0"}, {"symbol": "S50"}, {"symbol": "S100"}]
    assert route.call_count == 3
    assert all(c.request.url.params["domain"] == "production" for c in route.calls)


@pytest.mark.asyncio
async def test_get_chart_token(router, credentials):
    route = router.route(host="www.tradingview.com", path="/chart-token/").mock(
        return_value=httpx.Response(200, json={"token": "token"})
    )
    assert await get_chart_token(credentials, "layout1") == "token"
    request = route.calls.last.request
    assert request.url.params["image_url"] == "layout1"
    assert request.url.params["user_id"] == "42"
    assert request.headers["cookie"] == credentials.cookie_header()


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"token": 7}])
async def test_get_chart_token_missing(router, credentials, body):
    router.route(host="www.tradingview.com", path="/chart-token/").mock(
        return_value=httpx.Response(200, json=body)
    )
    with pytest.raises(NoChartTokenFound):
        await get_chart_token(credentials, "layout1")


@pytest.mark.asyncio
async def test_get_quote_token(router, credentials):
    router.route(host="www.tradingview.com", path="/quote_token").mock(
        return_value=httpx.Response(200, json="token")
    )
    assert await get_quote_token(credentials) == "token"


@pytest.mark.asyncio
async def test_get_drawing_uses_shared_chart_by_default(router, credentials):
    router.route(host="www.tradingview.com", path="/chart-token/").mock(
        return_value=httpx.Response(200, json={"token": "token"})
    )
    route = router.route(
        host="charts-storage.tradingview.com",
        path="/charts-storage/get/layout/layout1/sources",
    ).mock(return_value=httpx.Response(200, json={"payload": {"sources": {}}}))
    drawing = await get_drawing(credentials, "layout1", "NASDAQ:AAPL")
    assert drawing == {"payload": {"sources": {}}}
    params = route.calls.last.request.url.params
    assert params["chart_id"] == "_shared"
    assert params["jwt"] == "token"
    assert params["symbol"] == "NASDAQ:AAPL"


@pytest.mark.asyncio
async def test_get_private_indicators(router, credentials):
    route = router.route(
        host="pine-facade.tradingview.com", path="/pine-facade/list"
    ).mock(return_value=httpx.Response(200, json=[{"scriptName": "Mine"}]))
    assert await get_private_indicators(credentials) == [{"scriptName": "Mine"}]
    assert route.calls.last.request.url.params["filter"] == "saved"


@pytest.mark.asyncio
async def test_get_builtin_indicators_all_in_order(router):
    def listing(request):
        return httpx.Response(200, json=[{"filter": request.url.params["filter"]}])

    router.route(host="pine-facade.tradingview.com", path="/pine-facade/list/").mock(
        side_effect=listing
    )
    result = await get_builtin_indicators(BuiltinIndicators.ALL)
    assert [item["filter"] for item in result] == ["fundamental", "standard", "candlestick"]
    single = await get_builtin_indicators(BuiltinIndicators.STANDARD)
    assert single == [{"filter": "standard"}]


@pytest.mark.asyncio
async def test_search_indicator(router):
    route = router.route(
        host="www.tradingview.com", path="/pubscripts-suggest-json/"
    ).mock(return_value=httpx.Response(200, json={"results": [{"scriptName": "RSI"}]}))
    assert await search_indicator(None, "rsi", 0) == [{"scriptName": "RSI"}]
    assert route.calls.last.request.url.params["search"] == "rsi"


@pytest.mark.asyncio
async def test_search_indicator_without_results(router):
    router.route(host="www.tradingview.com", path="/pubscripts-suggest-json/").mock(
        return_value=httpx.Response(200, json={"results": []})
    )
    with pytest.raises(TradingViewAPIError, match="No results found"):
        await search_indicator(None, "nothing", 0)


@pytest.mark.asyncio
async def test_get_indicator_metadata(router):
    route = router.route(host="pine-facade.tradingview.com").mock(
        return_value=httpx.Response(
            200, json={"success": True, "result": {"ilTemplate": "x"}}
        )
    )
    assert await get_indicator_metadata(None, "PUB;2187", "-1") == {"ilTemplate": "x"}
    assert route.calls.last.request.url.path == "/pine-facade/translate/PUB;2187/-1"


@pytest.mark.asyncio
async def test_get_indicator_metadata_failure(router):
    router.route(host="pine-facade.tradingview.com").mock(
        return_value=httpx.Response(200, json={"success": False, "reason": "no"})
    )
    with pytest.raises(TradingViewAPIError, match="Failed to get indicator metadata"):
        await get_indicator_metadata(None, "PUB;2187", "-1")