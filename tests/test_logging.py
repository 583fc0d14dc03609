# Tests for JSON log formatting and request id context.

import json
import logging

from flowchat.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    reset_request_id,
    set_request_id,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("flowchat.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_basic_payload(self):
        payload = json.loads(JsonFormatter().format(_record()))
        assert payload["level"] == "INFO"
        assert payload["logger"] == "flowchat.test"
        assert payload["message"] == "hello world"
        assert "request_id" not in payload

    def test_extra_fields(self):
        record = _record(session_id="s-1", attempt=1, event="langflow_retry", latency_ms=12.5)
        payload = json.loads(JsonFormatter().format(record))
        assert payload["session_id"] == "s-1"
        assert payload["attempt"] == 1
        assert payload["event"] == "langflow_retry"
        assert payload["latency_ms"] == 12.5

    def test_request_id_from_context(self):
        token = set_request_id("req-42")
        try:
            record = _record()
            RequestIdFilter().filter(record)
            payload = json.loads(JsonFormatter().format(record))
        finally:
            reset_request_id(token)
        assert payload["request_id"] == "req-42"

        after = _record()
        RequestIdFilter().filter(after)
        assert after.request_id is None
