"""Transporte HTTP do cliente BrainMate (httpx) com timeout, retry e logging.

Regras do transporte:
- Sempre usar timeout
- Retry com backoff exponencial APENAS para métodos idempotentes (GET);
  POST de sessão e de mensagem nunca é repetido automaticamente
- Nunca logar corpo de requisição (conteúdo do aluno, senhas)
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import httpx

from brainmate_chat.infra.circuit_breaker import BreakerState, CircuitBreaker, CircuitBreakerConfig
from brainmate_chat.observability.correlation import CORRELATION_HEADER, get_correlation_id
from brainmate_chat.observability.logging import get_logger

if TYPE_CHECKING:
    from brainmate_chat.config.settings import Settings

logger: logging.Logger = get_logger(__name__)

# Tokens de sessão aparecem no path (/chat/sessions/<token>/messages)
_SESSION_PATH_PATTERN = re.compile(r"(/sessions/)([^/?]{6})[^/?]*")


def _sanitize_url(url: str) -> str:
    """Trunca session tokens presentes na URL para logging seguro."""
    return _SESSION_PATH_PATTERN.sub(r"\1\2***", url)


@dataclass
class HttpClientConfig:
    """Configuração do transporte HTTP."""

    base_url: str = ""
    timeout_seconds: float = 30.0
    max_retries: int = 2
    backoff_base_seconds: float = 1.0
    backoff_max_seconds: float = 8.0
    retry_methods: frozenset[str] = frozenset({"GET"})
    default_headers: dict[str, str] = field(default_factory=dict)
    circuit_breaker: CircuitBreakerConfig = field(default_factory=CircuitBreakerConfig)


class HttpError(Exception):
    """Falha de transporte ou status não-2xx, sem expor dados sensíveis."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        is_retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.is_retryable = is_retryable


def _is_retryable_status(status_code: int) -> bool:
    """429 e 5xx são transitórios."""
    return status_code == 429 or 500 <= status_code < 600


def _calculate_backoff(attempt: int, base_seconds: float, max_seconds: float) -> float:
    return min((2**attempt) * base_seconds, max_seconds)


def _transient_error(exc: Exception, method: str, url: str, attempt: int) -> HttpError:
    """Converte exceções httpx em HttpError; inesperadas são relançadas."""
    if isinstance(exc, httpx.TimeoutException):
        message = "Timeout"
    elif isinstance(exc, httpx.TransportError):
        message = "Erro de conexão"
    else:
        logger.error(
            "http_unexpected_error",
            extra={"method": method, "url": _sanitize_url(url), "error_type": type(exc).__name__},
        )
        raise HttpError(f"Erro inesperado: {type(exc).__name__}") from exc

    logger.warning(
        "http_transient_error",
        extra={
            "method": method,
            "url": _sanitize_url(url),
            "attempt": attempt + 1,
            "error": message,
        },
    )
    return HttpError(message, is_retryable=True)


class HttpClient:
    """Cliente HTTP assíncrono.

    Uso típico:
        async with HttpClient(config) as client:
            response = await client.get("/chat/sessions/tok/messages")

    `transport` permite injetar httpx.MockTransport / ASGITransport em testes.
    """

    def __init__(
        self,
        config: HttpClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or HttpClientConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._breaker = CircuitBreaker(self._config.circuit_breaker)

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                timeout=httpx.Timeout(self._config.timeout_seconds),
                headers=self._config.default_headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Fecha o cliente e libera conexões."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> HttpClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Executa requisição; GETs passam pelo circuit breaker do resync.

        O correlation id corrente segue no header `x-correlation-id`.

        Raises:
            HttpError: falha de transporte, status não-2xx ou circuito aberto
        """
        if not self._breaker.allow(method):
            logger.info(
                "http_circuit_open",
                extra={
                    "method": method,
                    "url": _sanitize_url(url),
                    "retry_after_seconds": round(self._breaker.retry_after, 2),
                },
            )
            raise HttpError("Circuit breaker aberto", is_retryable=False)

        correlation_id = get_correlation_id()
        if correlation_id:
            headers = dict(kwargs.pop("headers", None) or {})
            headers.setdefault(CORRELATION_HEADER, correlation_id)
            kwargs["headers"] = headers

        try:
            response = await self._request_with_retry(method, url, **kwargs)
        except HttpError as exc:
            if exc.is_retryable:
                state = self._breaker.record_failure(method)
                if state == BreakerState.OPEN:
                    logger.warning(
                        "http_circuit_opened",
                        extra={
                            "url": _sanitize_url(url),
                            "trips": self._breaker.trips,
                            "retry_after_seconds": round(self._breaker.retry_after, 2),
                        },
                    )
            elif exc.status_code is not None:
                self._breaker.record_response(method)
            raise

        self._breaker.record_response(method)
        return response

    async def _request_with_retry(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        client = await self._get_client()
        cfg = self._config
        attempts = cfg.max_retries + 1 if method.upper() in cfg.retry_methods else 1
        last_error: HttpError | None = None

        for attempt in range(attempts):
            logger.debug(
                "http_request",
                extra={"method": method, "url": _sanitize_url(url), "attempt": attempt + 1},
            )
            try:
                response = await client.request(method, url, **kwargs)
            except Exception as exc:
                last_error = _transient_error(exc, method, url, attempt)
            else:
                if response.is_success:
                    return response
                retryable = _is_retryable_status(response.status_code)
                last_error = HttpError(
                    f"HTTP {response.status_code}",
                    status_code=response.status_code,
                    is_retryable=retryable,
                )
                if not retryable:
                    logger.info(
                        "http_non_retryable_status",
                        extra={
                            "method": method,
                            "url": _sanitize_url(url),
                            "status_code": response.status_code,
                        },
                    )
                    raise last_error

            if attempt + 1 < attempts:
                backoff = _calculate_backoff(
                    attempt, cfg.backoff_base_seconds, cfg.backoff_max_seconds
                )
                logger.info(
                    "http_retry_backoff",
                    extra={"backoff_seconds": backoff, "next_attempt": attempt + 2},
                )
                await asyncio.sleep(backoff)

        if attempts > 1:
            logger.warning(
                "http_retries_exhausted",
                extra={"method": method, "url": _sanitize_url(url), "total_attempts": attempts},
            )
        raise last_error or HttpError("Falha sem resposta")

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(
        self,
        url: str,
        json: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        return await self.request("POST", url, json=json, **kwargs)


def create_http_client(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> HttpClient:
    """Factory do transporte a partir de Settings."""
    if settings is None:
        from brainmate_chat.config.settings import get_settings

        settings = get_settings()

    config = HttpClientConfig(
        base_url=settings.api_base_url.rstrip("/"),
        timeout_seconds=settings.request_timeout_seconds,
        max_retries=settings.max_retries,
        backoff_base_seconds=settings.retry_backoff_seconds,
        backoff_max_seconds=settings.retry_backoff_max_seconds,
        default_headers={"User-Agent": f"{settings.service_name}/{settings.version}"},
        circuit_breaker=CircuitBreakerConfig(
            enabled=settings.circuit_breaker_enabled,
            fail_max=settings.circuit_breaker_fail_max,
            cooldown_seconds=settings.circuit_breaker_cooldown_seconds,
            max_cooldown_seconds=settings.circuit_breaker_max_cooldown_seconds,
        ),
    )
    logger.info(
        "http_client_created",
        extra={"timeout_seconds": config.timeout_seconds, "max_retries": config.max_retries},
    )
    return HttpClient(config, transport=transport)
