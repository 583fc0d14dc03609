import httpx
import pytest

from flowchat.core.settings import AppSettings


def make_settings(**overrides) -> AppSettings:
    values = {
        "langflow_base_url": "https://flows.example.com/",
        "langflow_flow_id": "flow/42",
        "langflow_api_key": "sk-test",
        "request_timeout_sec": 150.0,
    }
    values.update(overrides)
    return AppSettings(_env_file=None, **values)


class RecordingHandler:
    """httpx.MockTransport handler that replays queued outcomes."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes.pop(0)
        if callable(outcome):
            outcome = await outcome(request)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def settings() -> AppSettings:
    return make_settings()
