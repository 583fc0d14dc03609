import asyncio
import logging
import time
from typing import Any, Literal
from urllib.parse import quote

import httpx
from pydantic import BaseModel, Field

from flowchat.core.settings import AppSettings
from flowchat.providers.normalizer import extract_text

logger = logging.getLogger(__name__)

RUN_PATH = "/api/v1/run"
# Same unreserved set as encodeURIComponent.
FLOW_ID_SAFE_CHARS = "!*'()"
# Timeouts and connection resets get one more attempt, nothing else does.
MAX_RETRIES = 1


class FlowError(RuntimeError):
    """Base class for failures talking to the flow backend."""


class FlowConfigurationError(FlowError):
    pass


class FlowTimeoutError(FlowError):
    pass


class FlowStatusError(FlowError):
    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Langflow request failed ({status_code}): {detail}")


class FlowEmptyResponseError(FlowError):
    pass


class FlowResponseFormatError(FlowError):
    pass


class RunRequest(BaseModel):
    input_type: Literal["chat"] = "chat"
    output_type: Literal["chat"] = "chat"
    input_value: str
    tweaks: dict[str, Any] = Field(default_factory=dict)
    session_id: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


def is_connection_reset(exc: BaseException) -> bool:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, ConnectionResetError):
            return True
        message = str(current).lower()
        if "econnreset" in message or "connection reset" in message:
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return False


class LangflowClient:
    def __init__(self, settings: AppSettings, http_client: httpx.AsyncClient):
        self.settings = settings
        self._http_client = http_client
        self._timeout_sec = settings.request_timeout_sec

    @property
    def is_configured(self) -> bool:
        # Without a base URL the dev proxy is used, which only runs in dev mode.
        has_base = bool(self.settings.langflow_base_url or self.settings.dev_mode)
        return bool(
            has_base and self.settings.langflow_flow_id and self.settings.langflow_api_key
        )

    @property
    def base_url(self) -> str:
        base = self.settings.langflow_base_url
        if base and base.strip():
            return base.strip().removesuffix("/")
        return self.settings.dev_proxy_url

    def build_url(self, flow_id: str) -> str:
        return f"{self.base_url}{RUN_PATH}/{quote(flow_id, safe=FLOW_ID_SAFE_CHARS)}?stream=false"

    async def send_prompt(self, prompt: str, session_id: str | None = None) -> str:
        flow_id, api_key = self._require_credentials()
        url = self.build_url(flow_id)
        payload = RunRequest(input_value=prompt, session_id=session_id).to_payload()
        headers = {"Content-Type": "application/json", "x-api-key": api_key}

        start = time.monotonic()
        response = await self._post_with_retry(url, payload, headers, session_id)
        latency_ms = round((time.monotonic() - start) * 1000, 1)

        if not response.is_success:
            detail = response.text or response.reason_phrase
            logger.warning(
                "Langflow returned an error status",
                extra={
                    "session_id": session_id,
                    "status_code": response.status_code,
                    "latency_ms": latency_ms,
                    "event": "langflow_status_error",
                },
            )
            raise FlowStatusError(response.status_code, detail)

        try:
            data = response.json()
        except ValueError as exc:
            raise FlowResponseFormatError(
                f"Langflow returned a non-JSON body ({response.status_code})"
            ) from exc

        text = extract_text(data)
        if text is None:
            raise FlowEmptyResponseError("No text returned from Langflow response")

        logger.info(
            "Langflow run completed",
            extra={
                "session_id": session_id,
                "flow_id": flow_id,
                "latency_ms": latency_ms,
                "event": "langflow_run_done",
            },
        )
        return text

    def _require_credentials(self) -> tuple[str, str]:
        flow_id = self.settings.langflow_flow_id
        api_key = self.settings.langflow_api_key
        if not flow_id or not api_key:
            missing = [
                name
                for name, value in (
                    ("LANGFLOW_FLOW_ID", flow_id),
                    ("LANGFLOW_API_KEY", api_key),
                )
                if not value
            ]
            msg = (
                f"Langflow settings missing: {', '.join(missing)}. "
                "Please set LANGFLOW_FLOW_ID and LANGFLOW_API_KEY."
            )
            raise FlowConfigurationError(msg)
        return flow_id, api_key

    async def _post_with_retry(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str],
        session_id: str | None,
    ) -> httpx.Response:
        attempt = 0
        while True:
            attempt += 1
            try:
                return await self._post_once(url, payload, headers)
            except (TimeoutError, httpx.TimeoutException) as exc:
                if attempt > MAX_RETRIES:
                    msg = f"Langflow request timed out after {self._timeout_sec:g}s"
                    raise FlowTimeoutError(msg) from exc
                reason = "timeout"
            except httpx.TransportError as exc:
                if attempt > MAX_RETRIES or not is_connection_reset(exc):
                    raise
                reason = "connection_reset"

            logger.warning(
                "Langflow request interrupted (%s), retrying",
                reason,
                extra={"session_id": session_id, "attempt": attempt, "event": "langflow_retry"},
            )

    async def _post_once(
        self, url: str, payload: dict[str, Any], headers: dict[str, str]
    ) -> httpx.Response:
        async with asyncio.timeout(self._timeout_sec):
            return await self._http_client.post(
                url, json=payload, headers=headers, timeout=self._timeout_sec
            )
