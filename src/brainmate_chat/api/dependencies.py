"""Dependências injetadas nas rotas."""

from __future__ import annotations

from fastapi import Request

from brainmate_chat.ai.tutor_responder import TutorResponder
from brainmate_chat.config.settings import Settings
from brainmate_chat.infra.chat_repository import InMemoryChatRepository


def get_settings(request: Request) -> Settings:
    """Retorna settings da aplicação."""

    return request.app.state.settings


def get_repository(request: Request) -> InMemoryChatRepository:
    """Retorna o repositório de tutores/sessões/mensagens."""

    return request.app.state.repository


def get_responder(request: Request) -> TutorResponder:
    return request.app.state.responder
