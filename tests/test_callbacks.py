import logging

import pytest

from tvfeed.callbacks import EventCallback


def test_default_handler_logs_event_name(caplog):
    caplog.set_level(logging.DEBUG, logger="tvfeed.callbacks")
    EventCallback().on_chart_data("series", [1, 2])
    assert "ON_CHART_DATA" in caplog.text


def test_default_error_handler_logs(caplog):
    caplog.set_level(logging.DEBUG, logger="tvfeed.callbacks")
    EventCallback().handler("on_error")(ValueError("boom"), [])
    assert "ON_ERROR" in caplog.text
    assert "boom" in caplog.text


def test_with_handlers_replaces_and_keeps_original():
    received = []
    base = EventCallback()
    updated = base.with_handlers(on_quote_data=received.append)
    updated.on_quote_data({"lp": 1.0})
    base.on_quote_data({"lp": 2.0})
    assert received == [{"lp": 1.0}]
    assert updated.on_symbol_info is base.on_symbol_info


def test_two_argument_handler():
    received = []
    callbacks = EventCallback(on_unknown_event=lambda event, msg: received.append((event, msg)))
    callbacks.handler("on_unknown_event")("odd_event", ["x"])
    assert received == [("odd_event", ["x"])]


def test_with_handlers_rejects_unknown_name():
    with pytest.raises(TypeError):
        EventCallback().with_handlers(on_nothing=print)


def test_non_callable_handler_rejected():
    with pytest.raises(TypeError):
        EventCallback(on_error="not callable")


def test_handler_lookup_unknown_name():
    with pytest.raises(KeyError):
        EventCallback().handler("on_nothing")