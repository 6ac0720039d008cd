"""Testes unitários para infra/http.py.

Valida retry apenas em GET, mapeamento de erros, circuit breaker e factory.
"""

from __future__ import annotations

import httpx
import pytest

from brainmate_chat.config.settings import Settings
from brainmate_chat.infra.circuit_breaker import BreakerState, CircuitBreakerConfig
from brainmate_chat.infra.http import (
    HttpClient,
    HttpClientConfig,
    HttpError,
    _calculate_backoff,
    _is_retryable_status,
    _sanitize_url,
    create_http_client,
)
from brainmate_chat.observability.correlation import correlation_scope


def _client(handler, **overrides) -> HttpClient:
    config = HttpClientConfig(
        base_url="http://api.test/api",
        max_retries=overrides.pop("max_retries", 2),
        backoff_base_seconds=0.0,
        **overrides,
    )
    return HttpClient(config, transport=httpx.MockTransport(handler))


class _Sequence:
    """Handler que devolve respostas em sequência e conta chamadas."""

    def __init__(self, *responses) -> None:
        self._responses = list(responses)
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        item = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(item, Exception):
            raise item
        return item


class TestHelpers:
    def test_sanitize_url_truncates_session_token(self) -> None:
        url = "/chat/sessions/abcdefghijklmnop/messages"
        assert _sanitize_url(url) == "/chat/sessions/abcdef***/messages"

    def test_sanitize_url_keeps_other_paths(self) -> None:
        assert _sanitize_url("/tutors/7") == "/tutors/7"

    @pytest.mark.parametrize(("status", "expected"), [(429, True), (500, True), (503, True), (404, False), (401, False)])
    def test_retryable_status(self, status, expected) -> None:
        assert _is_retryable_status(status) is expected

    def test_backoff_is_capped(self) -> None:
        assert _calculate_backoff(0, 1.0, 8.0) == 1.0
        assert _calculate_backoff(2, 1.0, 8.0) == 4.0
        assert _calculate_backoff(10, 1.0, 8.0) == 8.0


class TestRetryPolicy:
    @pytest.mark.asyncio
    async def test_get_retries_transient_status(self) -> None:
        handler = _Sequence(httpx.Response(500), httpx.Response(200, json=[]))
        response = await _client(handler).get("/chat/sessions/tok/messages")
        assert response.status_code == 200
        assert handler.calls == 2

    @pytest.mark.asyncio
    async def test_get_gives_up_after_max_retries(self) -> None:
        handler = _Sequence(httpx.Response(502))
        with pytest.raises(HttpError) as exc_info:
            await _client(handler, max_retries=2).get("/tutors/7")
        assert handler.calls == 3
        assert exc_info.value.is_retryable is True

    @pytest.mark.asyncio
    async def test_post_is_single_attempt(self) -> None:
        handler = _Sequence(httpx.Response(500), httpx.Response(200, json={}))
        with pytest.raises(HttpError) as exc_info:
            await _client(handler).post("/chat/message", json={"content": "hi"})
        assert handler.calls == 1
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self) -> None:
        handler = _Sequence(httpx.Response(404))
        with pytest.raises(HttpError) as exc_info:
            await _client(handler).get("/tutors/99")
        assert handler.calls == 1
        assert exc_info.value.status_code == 404
        assert exc_info.value.is_retryable is False

    @pytest.mark.asyncio
    async def test_timeout_is_retryable_transport_error(self) -> None:
        handler = _Sequence(httpx.ConnectTimeout("boom"), httpx.Response(200, json=[]))
        response = await _client(handler).get("/tutors/7")
        assert response.status_code == 200
        assert handler.calls == 2

    @pytest.mark.asyncio
    async def test_connection_error_on_post(self) -> None:
        handler = _Sequence(httpx.ConnectError("refused"))
        with pytest.raises(HttpError) as exc_info:
            await _client(handler).post("/chat/message", json={})
        assert exc_info.value.status_code is None
        assert exc_info.value.is_retryable is True


class TestCircuitBreakerIntegration:
    def _client(self, handler) -> HttpClient:
        return _client(
            handler,
            max_retries=0,
            circuit_breaker=CircuitBreakerConfig(enabled=True, fail_max=2, cooldown_seconds=60),
        )

    @pytest.mark.asyncio
    async def test_open_circuit_fails_resync_get_fast(self) -> None:
        handler = _Sequence(httpx.Response(503))
        client = self._client(handler)
        for _ in range(2):
            with pytest.raises(HttpError):
                await client.get("/chat/sessions/tok-1/messages")
        assert client.breaker.state == BreakerState.OPEN

        with pytest.raises(HttpError, match="Circuit breaker"):
            await client.get("/chat/sessions/tok-1/messages")
        assert handler.calls == 2

    @pytest.mark.asyncio
    async def test_post_goes_through_open_circuit(self) -> None:
        handler = _Sequence(httpx.Response(503), httpx.Response(503), httpx.Response(200, json={}))
        client = self._client(handler)
        for _ in range(2):
            with pytest.raises(HttpError):
                await client.get("/chat/sessions/tok-1/messages")

        response = await client.post("/chat/message", json={"content": "hi"})

        assert response.status_code == 200
        assert handler.calls == 3
        assert client.breaker.state == BreakerState.OPEN

    @pytest.mark.asyncio
    async def test_client_error_counts_as_reachable(self) -> None:
        handler = _Sequence(httpx.Response(503), httpx.Response(404), httpx.Response(503))
        client = self._client(handler)
        for _ in range(3):
            with pytest.raises(HttpError):
                await client.get("/chat/sessions/tok-1/messages")
        assert client.breaker.state == BreakerState.CLOSED


class TestCorrelationHeader:
    @pytest.mark.asyncio
    async def test_current_id_is_forwarded(self) -> None:
        seen: list[str | None] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers.get("x-correlation-id"))
            return httpx.Response(200, json={})

        client = _client(handler)
        await client.get("/health")
        with correlation_scope("chat-1"):
            await client.post("/chat/message", json={})

        assert seen == [None, "chat-1"]


class TestFactory:
    def test_create_http_client_from_settings(self) -> None:
        settings = Settings(api_base_url="http://api.test/api/", max_retries=4)
        client = create_http_client(settings)
        assert client._config.base_url == "http://api.test/api"
        assert client._config.max_retries == 4
        assert client._config.retry_methods == frozenset({"GET"})
        assert "User-Agent" in client._config.default_headers

    @pytest.mark.asyncio
    async def test_context_manager_closes(self) -> None:
        handler = _Sequence(httpx.Response(200, json={}))
        async with _client(handler) as client:
            await client.get("/health")
        assert client._client is None
