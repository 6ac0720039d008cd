"""Estados do ciclo de vida de uma sessão de chat no cliente.

- Uma view de chat montada = exatamente um dono de sessão
- ACTIVE é atingido no máximo uma vez por montagem (ou por senha verificada)
- Estados terminais não possuem transições de saída
"""

from __future__ import annotations

from enum import StrEnum


class NegotiationState(StrEnum):
    """Estados canônicos da negociação de sessão."""

    UNINITIALIZED = "uninitialized"
    """View montada; tutor ainda não carregado."""

    AWAITING_PASSWORD = "awaiting-password"
    """Tutor protegido por senha; aguardando candidato do aluno."""

    NEGOTIATING = "negotiating"
    """Criação de sessão em andamento (POST /chat/sessions)."""

    SESSION_FAILED = "session-failed"
    """Criação de sessão falhou; parada até retry manual."""

    ACTIVE = "active"
    """Token obtido; envio e resync habilitados."""

    UNAVAILABLE = "unavailable"
    """Tutor não existe; view sem saída com "voltar" manual."""

    TERMINATED = "terminated"
    """Sessão encerrada (navegação ou "end session")."""


TERMINAL_STATES = frozenset({
    NegotiationState.UNAVAILABLE,
    NegotiationState.TERMINATED,
})
"""Estados que encerram o fluxo (sem transições posteriores)."""

NON_TERMINAL_STATES = frozenset({
    s for s in NegotiationState if s not in TERMINAL_STATES
})
