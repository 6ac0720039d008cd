"""Modelos de mensagem, tutor e sessão trocados com o backend BrainMate.

O wire usa camelCase (sessionToken, isOptimistic, needsClarification); os
modelos expõem snake_case via aliases do pydantic. Instâncias são imutáveis:
o MessageStore substitui entradas, nunca as altera.
"""

from __future__ import annotations

import itertools
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator
from pydantic.alias_generators import to_camel

OPTIMISTIC_ID_PREFIX = "temp-"

_WIRE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
    frozen=True,
)


class MessageRole(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ChatMode(StrEnum):
    """Modo pedido ao backend; não altera regras de reconciliação."""

    CHAT = "chat"
    LECTURE = "lecture"
    QUIZ = "quiz"
    EXAMPLES = "examples"
    FLASHCARDS = "flashcards"
    SUMMARY = "summary"


class ResourceLink(BaseModel):
    """Recurso externo sugerido (busca no YouTube/Google)."""

    model_config = _WIRE_CONFIG

    title: str
    search_query: str = ""
    description: str = ""


class MessageResources(BaseModel):
    model_config = _WIRE_CONFIG

    youtube_recommendations: list[ResourceLink] = Field(default_factory=list)
    google_search_links: list[ResourceLink] = Field(default_factory=list)


class MessageMetadata(BaseModel):
    """Metadados opcionais da resposta do tutor."""

    model_config = _WIRE_CONFIG

    emotion: str | None = None
    suggestions: list[str] = Field(default_factory=list)
    needs_clarification: bool = False
    resources: MessageResources | None = None


class ChatMessage(BaseModel):
    """Mensagem na visão local da conversa.

    `id` é inteiro quando confirmado pelo servidor e string `temp-<n>` enquanto
    otimista. `timestamp` é None até o servidor atribuir.
    """

    model_config = _WIRE_CONFIG

    id: StrictInt | str
    role: MessageRole
    content: str
    session_id: int | None = None
    timestamp: datetime | None = None
    metadata: MessageMetadata = Field(default_factory=MessageMetadata)
    is_optimistic: bool = False

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_or_default(cls, value: Any) -> Any:
        # Backend grava metadata NULL para mensagens do usuário
        return {} if value is None else value

    @field_validator("timestamp")
    @classmethod
    def _aware_timestamp(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @property
    def is_confirmed(self) -> bool:
        return not self.is_optimistic and not is_placeholder_id(self.id)


def is_placeholder_id(message_id: int | str) -> bool:
    """True para ids gerados no cliente (nunca colidem com inteiros do servidor)."""
    return isinstance(message_id, str) and message_id.startswith(OPTIMISTIC_ID_PREFIX)


class PlaceholderIds:
    """Contador monotônico de ids otimistas (`temp-1`, `temp-2`, ...)."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)

    def next(self) -> str:
        return f"{OPTIMISTIC_ID_PREFIX}{next(self._counter)}"


def optimistic_user_message(placeholder_id: str, content: str) -> ChatMessage:
    """Mensagem do usuário exibida antes da confirmação do servidor."""
    return ChatMessage(
        id=placeholder_id,
        role=MessageRole.USER,
        content=content,
        is_optimistic=True,
    )


class TutorDetails(BaseModel):
    """Tutor retornado por GET /tutors/{id} ou verify-password."""

    model_config = _WIRE_CONFIG

    id: int
    name: str
    subject: str = ""
    description: str | None = None
    requires_password: bool = False
    content: list[dict[str, Any]] = Field(default_factory=list)


class SessionInfo(BaseModel):
    """Sessão criada por POST /chat/sessions."""

    model_config = _WIRE_CONFIG

    id: int | None = None
    session_token: str = Field(min_length=1)
    tutor_id: int
    student_id: str | None = None
    created_at: datetime | None = None


class SendResult(BaseModel):
    """Par confirmado devolvido por POST /chat/message."""

    model_config = _WIRE_CONFIG

    user_message: ChatMessage
    assistant_message: ChatMessage
