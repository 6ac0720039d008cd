"""Eventos que disparam transições na negociação de sessão."""

from __future__ import annotations

from enum import StrEnum


class NegotiationEvent(StrEnum):
    """Eventos observados pelo negociador."""

    # === Carregamento do tutor ===
    TUTOR_OPEN = "TUTOR_OPEN"
    """Tutor carregado sem senha."""

    TUTOR_GATED = "TUTOR_GATED"
    """Tutor carregado com requiresPassword."""

    TUTOR_NOT_FOUND = "TUTOR_NOT_FOUND"
    """Backend respondeu 404 para o tutor."""

    TUTOR_LOAD_FAILED = "TUTOR_LOAD_FAILED"
    """Falha de rede ao carregar o tutor (retry manual)."""

    # === Senha ===
    PASSWORD_ACCEPTED = "PASSWORD_ACCEPTED"
    PASSWORD_REJECTED = "PASSWORD_REJECTED"

    # === Sessão ===
    SESSION_CREATED = "SESSION_CREATED"
    SESSION_CREATION_FAILED = "SESSION_CREATION_FAILED"
    RETRY_REQUESTED = "RETRY_REQUESTED"

    # === Encerramento ===
    TERMINATE = "TERMINATE"
