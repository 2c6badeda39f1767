# tvfeed

An asyncio client library for TradingView market data. It has these modules:

- `tvfeed.models`: candles (`DataPoint`), symbol descriptions (`SymbolInfo`, `Subsession`),
  and decoders for chart and study responses (`ChartResponseData`, `StudyResponseData`,
  `GraphicDataResponse`, `ChartDataChanges`). It also has `ChartType`.
- `tvfeed.options`: `ChartOptions` and `StudyOptions`, which say which series and which study to request.
- `tvfeed.study`: `InputValue` and `indicator_input_to_json` for study inputs.
- `tvfeed.callbacks`: `EventCallback`, the set of event handlers.
- `tvfeed.events`: `FeedState`, which decodes server events, keeps series, study and quote
  state, and calls your handlers. The module also has `DataEvent`, `SeriesInfo`,
  `merge_quotes`, `TradingViewError` and `QuoteStatusError`.
- `tvfeed.session`: `WebSocket`, which builds the protocol commands for chart, series, study,
  replay and quote sessions and sends them through a transport that you supply. The module
  also has `gen_session_id`.
- `tvfeed.search`: symbol search, chart and quote tokens, chart drawings, and Pine indicator
  lookups, all over HTTP.
- `tvfeed.news`: news headlines and stories.

## Installation

```
pip install tvfeed
```

To run the tests:

```
pip install "tvfeed[test]"
pytest
```

## Candles

```python
from tvfeed.models import DataPoint, closes

bars = [DataPoint.from_json({"i": 0, "v": [1700000000, 10, 12, 9, 11, 1000]})]
list(closes(bars))     # [11.0]
bars[0].is_rising()    # True
bars[0].high           # 12.0
bars[0].timestamp      # 1700000000
```

`open`, `high`, `low`, `close` and `volume` are properties. Each one is NaN unless the bar
holds exactly six values. `timestamp` and `datetime` (UTC) read the first value.

The methods are `validate()`, `tr(prev)`, `tr_close(prev_close)`, `clv()`, `ohlc4()`,
`hl2()`, `tp()`, `volumed_price()`, `is_rising()` and `is_falling()`.

The functions `closes`, `opens`, `highs`, `lows`, `volumes`, `datetimes` and `timestamps`
iterate over any iterable of bars. `ChartHistoricalData` has the same methods for its `data`.

## Chart options

```python
from tvfeed.options import ChartOptions

opts = ChartOptions.for_market("AAPL", "NASDAQ", "1D")
opts.market_symbol()   # "NASDAQ:AAPL"
opts.range_param()     # ""
ChartOptions(from_=1626220800, to=1628640000).range_param()  # "r,1626220800:1628640000"
opts.with_study("STD;RSI", "1", "Script")  # copy with study_config set
```

The options are frozen dataclasses. `bar_count` defaults to 500000. If you set `range`, it
takes precedence over `from_`/`to`. A negative `bar_count`, `from_` or `to` raises `ValueError`.

## Event handlers

```python
from tvfeed.callbacks import EventCallback

callbacks = EventCallback().with_handlers(
    on_chart_data=lambda series_info, points: print(points[-1]),
    on_error=lambda error, message: print("error:", error),
    on_quote_data=lambda quote: print(quote),
)
```

Four handlers take two arguments: `on_chart_data`, `on_study_data`, `on_error` and
`on_unknown_event`. Every other handler takes one argument. A handler you do not set logs the
event at debug level. `with_handlers` raises `TypeError` for a name that is not a handler.

## Sessions and events

`WebSocket` takes a transport. The transport is any object with these three coroutines:
`send(method, params)`, `close()` and `update_auth_token(token)`.

```python
import asyncio
from tvfeed.options import ChartOptions
from tvfeed.session import WebSocket

class Recorder:
    def __init__(self):
        self.sent = []
    async def send(self, method, params):
        self.sent.append((method, params))
    async def close(self):
        pass
    async def update_auth_token(self, auth_token):
        pass

async def main():
    transport = Recorder()
    ws = WebSocket(transport)
    await ws.set_market(ChartOptions.for_market("AAPL", "NASDAQ", "1D"))
    # transport.sent: chart_create_session, resolve_symbol, create_series
    ws.handle_message("timescale_update", ["cs_x", {"sds_1": {"s": [{"i": 0, "v": [1, 2, 3, 1, 2, 5]}]}}])

asyncio.run(main())
```

`set_market` also does these things:

- If `replay_mode` is set, it creates a replay session (see `set_replay`).
- If `study_config` is set, it creates a study. This needs a `study_loader`: a coroutine that
  takes the `StudyOptions` and returns `(indicator_id, script_type, inputs)`. Without one,
  `set_market` raises `ValueError`.

`handle_message` passes events to `FeedState.handle_event`. That method works as follows:

- Quote updates are merged per symbol.
- A resolved symbol is stored as `SymbolInfo`.
- Server error events reach `on_error` as `TradingViewError`.
- Unknown events reach `on_unknown_event`.

`delete()` deletes every chart session the feed created, then closes the transport.

## Search and indicators

```python
import asyncio
from tvfeed.search import search_symbols

symbols = asyncio.run(search_symbols("BTCUSD", "BINANCE"))
```

These functions return the decoded JSON (dicts and lists):

- `advanced_search_symbol`, `search_symbols`, `list_symbols` and `get_symbol`.
  `list_symbols` fetches the remaining pages concurrently. `get_symbol` returns `None`
  when there is no match or the request fails.
- `get_builtin_indicators(BuiltinIndicators...)`.
- `search_indicator`, which raises `TradingViewAPIError` when there are no results.
- `get_indicator_metadata`.

These functions need a `Credentials(id, session, session_signature, device_token)` object,
which holds the session cookies of a signed-in user:

- `get_chart_token`, which raises `NoChartTokenFound` when there is no token.
- `get_quote_token`, `get_drawing` and `get_private_indicators`.

HTTP failures surface as `httpx` errors.

## News

```python
import asyncio
from tvfeed.news import NewsSection, list_news, story_url

headlines = asyncio.run(list_news(section=NewsSection.ANALYSIS_ALL))
```

The other news functions are:

- `fetch_news(story_id)`.
- `story_url(item)`, `source_url(item)` and `related_symbols(item)`.
- `fetch_story_content(item)` and `fetch_source_html(item)`.

`category` takes a market type such as `"stocks"` or `"crypto"`. The default `""` means all markets.

## What the package does not do

- It does not open a websocket connection. It does not frame, read or keep alive the wire
  protocol. `WebSocket` only builds commands for the transport you give it, and `FeedState`
  only handles events that you feed to it.
- It does not fetch or translate Pine scripts into study inputs. You supply these through `study_loader`.
- It does not decode study graphics. `GraphicDataResponse` keeps them raw.
- It has no command-line tool.