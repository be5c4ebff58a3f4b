import asyncio
import json
import logging
import traceback
from typing import Any

import httpx

from src.config.logging import DiagnosticLog
from src.modules.relay.extractors import extract_reply
from src.modules.relay.models import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    TEMPERATURE,
    Provider,
    UpstreamResult,
)
from src.modules.relay.schemas import ChatRequest, ErrorEnvelope, ReplyEnvelope
from src.modules.relay.variants import model_variants

logger = logging.getLogger(__name__)

UPSTREAM_TIMEOUT = 15.0
SNIPPET_LENGTH = 800
NO_PROVIDER_ERROR = (
    "No API key configured on server (GROQ_API_KEY or OPENAI_API_KEY)"
)

Envelope = ReplyEnvelope | ErrorEnvelope


def _reject_constant(value: str) -> Any:
    raise ValueError(f"non-standard JSON constant {value}")


class RelayService:
    """Forwards chat requests to the configured upstream provider."""

    def __init__(
        self,
        provider: Provider | None,
        log: DiagnosticLog,
        timeout: float = UPSTREAM_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._provider = provider
        self._log = log
        self._timeout = timeout
        self._transport = transport

    @property
    def provider(self) -> Provider | None:
        return self._provider

    # ── Upstream call ───────────────────────────────────────────

    async def _post(self, client: httpx.AsyncClient, payload: dict) -> UpstreamResult:
        try:
            response = await asyncio.wait_for(
                client.post(
                    self._provider.endpoint,
                    json=payload,
                    headers={"Authorization": f"Bearer {self._provider.api_key}"},
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            return UpstreamResult(
                ok=False,
                status=0,
                error=f"Upstream request timed out after {self._timeout}s",
            )
        except httpx.RequestError as exc:
            return UpstreamResult(ok=False, status=0, error=str(exc) or type(exc).__name__)

        text = response.text
        try:
            parsed: Any = json.loads(text, parse_constant=_reject_constant)
        except ValueError:
            parsed = {"rawText": text}
        return UpstreamResult(
            ok=response.is_success,
            status=response.status_code,
            text=text,
            json=parsed,
        )

    async def _post_with_fallbacks(
        self, client: httpx.AsyncClient, payload: dict
    ) -> UpstreamResult:
        model = payload["model"]
        result = await self._post(client, payload)
        self._log.write("[proxy] upstream result status=", result.status, "ok=", result.ok)
        if result.ok or result.status != 404:
            return result

        self._log.write("[proxy] model not found, trying variants for", model)
        tried = {model}
        for variant in model_variants(model):
            if not variant or variant in tried:
                continue
            tried.add(variant)
            self._log.write("[proxy] trying variant:", variant)
            result = await self._post(client, {**payload, "model": variant})
            self._log.write(
                "[proxy] variant", variant, "status=", result.status, "ok=", result.ok
            )
            if result.ok or result.status != 404:
                break
        return result

    # ── Request handling ────────────────────────────────────────

    def _build_payload(self, request: ChatRequest) -> dict:
        return {
            "model": request.model or DEFAULT_MODEL,
            "messages": [
                {"role": m.role, "content": m.content} for m in request.messages
            ],
            "max_tokens": request.max_tokens or DEFAULT_MAX_TOKENS,
            "temperature": TEMPERATURE,
        }

    async def relay(self, request: ChatRequest) -> tuple[int, Envelope]:
        try:
            return await self._relay(request)
        except Exception as exc:
            self._log.write(
                "[proxy] handler exception:",
                str(exc),
                traceback.format_exc()[:1000],
            )
            logger.exception("Relay handler failed")
            return 500, ErrorEnvelope(error=str(exc) or type(exc).__name__)

    async def _relay(self, request: ChatRequest) -> tuple[int, Envelope]:
        if self._provider is None:
            self._log.write("[proxy] no API key configured")
            return 500, ErrorEnvelope(error=NO_PROVIDER_ERROR)

        payload = self._build_payload(request)
        self._log.write(
            "[proxy] incoming request provider=",
            self._provider.name,
            "model=",
            payload["model"],
            "messages=",
            len(payload["messages"]),
        )
        first = request.messages[0].content[:SNIPPET_LENGTH] if request.messages else ""
        self._log.write("[proxy] first message snippet:", first)

        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport
        ) as client:
            result = await self._post_with_fallbacks(client, payload)

        if not result.ok:
            self._log.write(
                "[proxy] upstream final failure:", result.status, result.error or result.text
            )
            return result.status or 500, ErrorEnvelope(
                error=result.text or result.error or "Upstream error"
            )

        reply = extract_reply(result.json)
        self._log.write("[proxy] reply length:", len(reply))
        return 200, ReplyEnvelope(reply=reply, raw=result.json)
