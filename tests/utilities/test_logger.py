"""
Tests for the logging setup helpers.
"""

import structlog

from utilities.logger import build_processors


def test_json_renderer_last():
    processors = build_processors("json")
    assert isinstance(processors[-1], structlog.processors.JSONRenderer)


def test_console_renderer_last():
    processors = build_processors("console")
    assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)


def test_debug_adds_callsite_details():
    processors = build_processors("json", debug=True)
    assert any(isinstance(p, structlog.processors.CallsiteParameterAdder) for p in processors)
    assert not any(
        isinstance(p, structlog.processors.CallsiteParameterAdder) for p in build_processors("json")
    )
