"""Rotas HTTP do backend de referência (prefixo /api)."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from brainmate_chat.ai.tutor_responder import TutorResponder
from brainmate_chat.api.dependencies import get_repository, get_responder, get_settings
from brainmate_chat.config.settings import Settings
from brainmate_chat.domain.messages import ChatMode, MessageRole
from brainmate_chat.infra.chat_repository import InMemoryChatRepository
from brainmate_chat.observability.logging import get_logger, token_prefix

logger = get_logger(__name__)

router = APIRouter(prefix="/api")


class _CamelBody(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class PasswordBody(_CamelBody):
    password: str | None = None


class SessionBody(_CamelBody):
    tutor_id: int | None = None
    student_id: str | None = None


class MessageBody(_CamelBody):
    session_token: str | None = None
    content: str | None = None
    mode: str = ChatMode.CHAT.value
    language: str | None = None


def _wire(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json")


@router.get("/health")
def health(settings: Settings = Depends(get_settings)) -> dict[str, str]:
    """Healthcheck simples."""
    return {"status": "ok", "service": settings.service_name, "version": settings.version}


@router.get("/tutors/{tutor_id}")
def get_tutor(
    tutor_id: int,
    repository: InMemoryChatRepository = Depends(get_repository),
) -> dict[str, Any]:
    """Tutor protegido por senha devolve só dados básicos + requiresPassword."""
    tutor = repository.get_tutor(tutor_id)
    if tutor is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tutor not found")
    return _wire(tutor.public_view())


@router.post("/tutors/{tutor_id}/verify-password")
def verify_password(
    tutor_id: int,
    body: PasswordBody,
    repository: InMemoryChatRepository = Depends(get_repository),
) -> dict[str, Any]:
    tutor = repository.get_tutor(tutor_id)
    if tutor is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tutor not found")
    if tutor.password != body.password:
        logger.info("password_verification_rejected", extra={"tutor_id": tutor_id})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect password")
    return _wire(tutor.full_view())


@router.post("/chat/sessions")
def create_session(
    body: SessionBody,
    repository: InMemoryChatRepository = Depends(get_repository),
) -> dict[str, Any]:
    if not body.tutor_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Valid tutorId is required"
        )
    if repository.get_tutor(body.tutor_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tutor not found")
    session = repository.create_session(body.tutor_id, body.student_id)
    return _wire(session)


@router.get("/chat/sessions/{token}")
def get_session(
    token: str,
    repository: InMemoryChatRepository = Depends(get_repository),
) -> dict[str, Any]:
    session = repository.get_session(token)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return _wire(session)


@router.get("/chat/sessions/{token}/messages")
def list_messages(
    token: str,
    repository: InMemoryChatRepository = Depends(get_repository),
) -> list[dict[str, Any]]:
    session = repository.get_session(token)
    if session is None or session.id is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return [_wire(message) for message in repository.list_messages(session.id)]


@router.post("/chat/message")
async def send_message(
    body: MessageBody,
    settings: Settings = Depends(get_settings),
    repository: InMemoryChatRepository = Depends(get_repository),
    responder: TutorResponder = Depends(get_responder),
) -> dict[str, Any]:
    """Grava a mensagem do aluno, gera a resposta do tutor e devolve o par."""
    if not body.session_token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Session token is required"
        )
    if not body.content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Message content is required"
        )

    session = repository.get_session(body.session_token)
    if session is None or session.id is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    tutor = repository.get_tutor(session.tutor_id)
    if tutor is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tutor not found")

    user_message = repository.add_message(session.id, MessageRole.USER, body.content)
    history = [
        {"role": str(message.role), "content": message.content}
        for message in repository.list_messages(session.id)[-settings.history_window :]
    ]
    reply = await responder.respond(
        subject=tutor.subject,
        content_text=tutor.content_text,
        user_input=body.content,
        history=history[:-1],
        mode=body.mode,
        language=body.language or settings.default_language,
    )
    assistant_message = repository.add_message(
        session.id, MessageRole.ASSISTANT, reply.content, metadata=reply.metadata()
    )

    logger.info(
        "message_processed",
        extra={
            "session_token": token_prefix(session.session_token),
            "mode": body.mode,
            "llm": responder.uses_llm,
        },
    )
    return {"userMessage": _wire(user_message), "assistantMessage": _wire(assistant_message)}
