"""Hierarquia de erros do cliente de chat.

Erros de rede são capturados na fronteira da operação que os emitiu
(negociação, envio, resync) e traduzidos em transição de estado + aviso.
"""

from __future__ import annotations


class BrainMateError(Exception):
    """Base de todos os erros do brainmate_chat."""


# === Negociação ===
class NegotiationError(BrainMateError):
    """Falha ao estabelecer a sessão."""


class TutorNotFoundError(NegotiationError):
    """Tutor inexistente (terminal)."""


class InvalidPasswordError(NegotiationError):
    """Senha incorreta (recuperável)."""


class SessionCreationError(NegotiationError):
    """Falha ao criar sessão (retry manual)."""


class InvalidTransitionError(NegotiationError):
    """Transição não prevista na tabela de estados."""


# === Envio ===
class SessionNotActiveError(BrainMateError):
    """Envio tentado antes da sessão ficar ativa."""


class SendFailedError(BrainMateError):
    """Envio falhou (rede, status não-2xx ou payload malformado)."""

    def __init__(
        self, message: str, status_code: int | None = None, reason: str = "http_error"
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason


# === Decodificação ===
class ShapeError(BrainMateError):
    """Payload do backend não corresponde ao formato esperado."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field
