"""Repositório em memória de tutores, sessões e mensagens (backend de referência).

Apenas dev/testes: nada é persistido entre processos.
"""

from __future__ import annotations

import itertools
import logging
import secrets
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from brainmate_chat.domain.messages import ChatMessage, MessageRole, SessionInfo, TutorDetails
from brainmate_chat.observability.logging import get_logger, token_prefix

logger: logging.Logger = get_logger(__name__)


@dataclass
class TutorRecord:
    """Tutor armazenado; `password` nunca sai pelo wire."""

    id: int
    name: str
    subject: str = ""
    description: str | None = None
    is_public: bool = True
    password: str | None = None
    content: list[dict[str, Any]] = field(default_factory=list)

    @property
    def requires_password(self) -> bool:
        return not self.is_public and bool(self.password)

    @property
    def content_text(self) -> str:
        return "\n\n".join(str(item.get("content", "")) for item in self.content)

    def public_view(self) -> TutorDetails:
        """Tutor protegido expõe apenas dados básicos + requiresPassword."""
        if self.requires_password:
            return TutorDetails(
                id=self.id,
                name=self.name,
                subject=self.subject,
                description=self.description,
                requires_password=True,
            )
        return self.full_view()

    def full_view(self) -> TutorDetails:
        return TutorDetails(
            id=self.id,
            name=self.name,
            subject=self.subject,
            description=self.description,
            requires_password=False,
            content=list(self.content),
        )


class InMemoryChatRepository:
    """Armazenamento em memória (não usar em produção)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tutors: dict[int, TutorRecord] = {}
        self._sessions: dict[str, SessionInfo] = {}
        self._messages: dict[int, list[ChatMessage]] = {}
        self._tutor_ids = itertools.count(1)
        self._session_ids = itertools.count(1)
        self._message_ids = itertools.count(1)

    # === Tutores ===
    def add_tutor(
        self,
        name: str,
        subject: str = "",
        description: str | None = None,
        password: str | None = None,
        content: list[str] | None = None,
        tutor_id: int | None = None,
    ) -> TutorRecord:
        """Cadastra tutor; com senha o tutor deixa de ser público."""
        with self._lock:
            new_id = tutor_id if tutor_id is not None else next(self._tutor_ids)
            record = TutorRecord(
                id=new_id,
                name=name,
                subject=subject,
                description=description,
                is_public=password is None,
                password=password,
                content=[
                    {"id": index, "tutorId": new_id, "content": text}
                    for index, text in enumerate(content or [], start=1)
                ],
            )
            self._tutors[new_id] = record
        logger.debug("tutor_added", extra={"tutor_id": new_id})
        return record

    def get_tutor(self, tutor_id: int) -> TutorRecord | None:
        return self._tutors.get(tutor_id)

    # === Sessões ===
    def create_session(self, tutor_id: int, student_id: str | None = None) -> SessionInfo:
        with self._lock:
            session = SessionInfo(
                id=next(self._session_ids),
                session_token=secrets.token_urlsafe(16),
                tutor_id=tutor_id,
                student_id=student_id,
                created_at=datetime.now(tz=UTC),
            )
            self._sessions[session.session_token] = session
            self._messages[session.id] = []
        logger.info(
            "chat_session_stored",
            extra={"tutor_id": tutor_id, "session_token": token_prefix(session.session_token)},
        )
        return session

    def get_session(self, token: str) -> SessionInfo | None:
        return self._sessions.get(token)

    # === Mensagens ===
    def add_message(
        self,
        session_id: int,
        role: MessageRole,
        content: str,
        metadata: dict[str, Any] | None = None,
    ) -> ChatMessage:
        with self._lock:
            message = ChatMessage(
                id=next(self._message_ids),
                role=role,
                content=content,
                session_id=session_id,
                timestamp=datetime.now(tz=UTC),
                metadata=metadata,
            )
            self._messages.setdefault(session_id, []).append(message)
        return message

    def list_messages(self, session_id: int) -> list[ChatMessage]:
        """Mensagens da sessão em ordem de criação."""
        return list(self._messages.get(session_id, []))


def seed_demo_tutors(repository: InMemoryChatRepository) -> None:
    """Tutores de demonstração para dev local."""
    repository.add_tutor(
        name="Biology Buddy",
        subject="Biology",
        description="Friendly tutor for cell biology and photosynthesis.",
        content=["Photosynthesis converts light energy into chemical energy in chloroplasts."],
    )
    repository.add_tutor(
        name="Exam Coach",
        subject="History",
        description="Password-protected tutor for exam preparation.",
        password="letmein",
        content=["The French Revolution began in 1789."],
    )
