"""Correlation id por sessão de chat, propagado até o backend.

O cliente abre um escopo por operação da ChatSession (`correlation_scope`);
o HttpClient envia o id corrente no header `x-correlation-id` e o backend de
referência reaproveita esse id nos seus logs, de modo que uma conversa pode
ser seguida ponta a ponta.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from starlette.types import ASGIApp, Message, Receive, Scope, Send

CORRELATION_HEADER = "x-correlation-id"

# Ids vindos de fora só são aceitos se forem curtos e sem caracteres de controle
_VALID_ID = re.compile(r"^[A-Za-z0-9._:-]{1,64}$")

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """Retorna o correlation_id corrente (ou vazio)."""

    return _correlation_id.get()


def new_correlation_id(candidate: str | None = None) -> str:
    """Aceita `candidate` se válido; senão gera um uuid4."""
    if candidate and _VALID_ID.match(candidate):
        return candidate
    return str(uuid.uuid4())


@contextmanager
def correlation_scope(correlation_id: str) -> Iterator[str]:
    """Define o id apenas durante o bloco; o valor anterior é restaurado.

    Tasks criadas dentro do bloco copiam o contexto e mantêm o id.
    """
    token = _correlation_id.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _correlation_id.reset(token)


class CorrelationIdMiddleware:
    """Middleware ASGI do backend de referência.

    Reaproveita o `x-correlation-id` enviado pelo cliente de chat (quando
    válido) e o devolve na resposta.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        incoming = None
        for name, value in scope.get("headers", []):
            if name.decode("latin-1").lower() == CORRELATION_HEADER:
                incoming = value.decode("latin-1")
                break
        correlation_id = new_correlation_id(incoming)

        async def send_with_header(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((CORRELATION_HEADER.encode(), correlation_id.encode()))
                message["headers"] = headers
            await send(message)

        with correlation_scope(correlation_id):
            await self.app(scope, receive, send_with_header)
