"""SendCoordinator: envio otimista com reconciliação ou rollback.

Sequência de um envio:
1. Rejeita no-op (texto vazio ou envio já pendente)
2. Anexa a mensagem otimista ANTES de despachar a requisição
3. POST /chat/message
4. Sucesso: troca a otimista pelo par confirmado, limpa o composer e só
   então entrega o texto do assistente à voz
5. Falha: remove a otimista e registra o aviso no mesmo passo síncrono;
   o composer mantém o texto

Nenhum retry automático: o usuário reenvia.
"""

from __future__ import annotations

import asyncio
import logging
from enum import StrEnum
from typing import TYPE_CHECKING

from brainmate_chat.adapters.brainmate.client import BrainMateApiClient
from brainmate_chat.application.message_store import MessageStore
from brainmate_chat.application.negotiator import SessionNegotiator
from brainmate_chat.application.notice_board import NoticeBoard
from brainmate_chat.domain import notices
from brainmate_chat.domain.errors import SendFailedError, SessionNotActiveError
from brainmate_chat.domain.messages import ChatMode, PlaceholderIds, optimistic_user_message
from brainmate_chat.domain.results import Err
from brainmate_chat.infra.http import HttpError
from brainmate_chat.observability.logging import get_logger

if TYPE_CHECKING:
    from brainmate_chat.application.composer import Composer
    from brainmate_chat.application.speech_bridge import SpeechBridge

logger: logging.Logger = get_logger(__name__)


class SendOutcome(StrEnum):
    SKIPPED = "skipped"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    DROPPED = "dropped"


class SendCoordinator:
    """Único dono do fluxo de envio de uma sessão."""

    def __init__(
        self,
        api: BrainMateApiClient,
        store: MessageStore,
        notice_board: NoticeBoard,
        negotiator: SessionNegotiator,
        composer: Composer | None = None,
        speech: SpeechBridge | None = None,
        language: str = "English",
        placeholder_ids: PlaceholderIds | None = None,
    ) -> None:
        self._api = api
        self._store = store
        self._notices = notice_board
        self._negotiator = negotiator
        self._composer = composer
        self._speech = speech
        self._placeholder_ids = placeholder_ids or PlaceholderIds()
        self.language = language
        self._pending = False
        self._closed = False
        self._tasks: set[asyncio.Task[SendOutcome]] = set()
        self.last_error: SendFailedError | None = None

    @property
    def is_pending(self) -> bool:
        """True enquanto um envio aguarda resposta (UI desabilita o input)."""
        return self._pending

    @property
    def is_typing(self) -> bool:
        """Indicador "tutor digitando"; mesmo ciclo de vida do envio pendente."""
        return self._pending and not self._closed

    async def send(self, content: str, mode: ChatMode | str = ChatMode.CHAT) -> SendOutcome:
        """Envia uma mensagem.

        Raises:
            SessionNotActiveError: sessão ainda não negociada (ou encerrada)
        """
        text = content.strip()
        if not text or self._pending or self._closed:
            return SendOutcome.SKIPPED

        token = self._negotiator.session_token
        if not self._negotiator.is_active or token is None:
            raise SessionNotActiveError("Sessão de chat não está ativa")

        self._pending = True
        try:
            placeholder_id = self._placeholder_ids.next()
            self._store.append(optimistic_user_message(placeholder_id, text))

            try:
                result = await self._api.send_message(token, text, mode, self.language)
            except HttpError as exc:
                failure = SendFailedError(str(exc), status_code=exc.status_code)
                return self._rollback(placeholder_id, failure)

            if self._closed:
                logger.info("send_result_dropped", extra={"temp_id": placeholder_id})
                return SendOutcome.DROPPED

            if isinstance(result, Err):
                failure = SendFailedError(str(result.error), reason="shape_error")
                return self._rollback(placeholder_id, failure, result.error.field)

            confirmed = result.value
            self.last_error = None
            self._store.replace_optimistic(
                placeholder_id, [confirmed.user_message, confirmed.assistant_message]
            )
            if self._composer is not None:
                self._composer.clear()
            logger.info(
                "message_confirmed",
                extra={
                    "temp_id": placeholder_id,
                    "user_message_id": confirmed.user_message.id,
                    "assistant_message_id": confirmed.assistant_message.id,
                    "mode": str(mode),
                },
            )
            if self._speech is not None:
                self._speech.speak(confirmed.assistant_message.content)
            return SendOutcome.CONFIRMED
        finally:
            self._pending = False

    def submit(self, content: str, mode: ChatMode | str = ChatMode.CHAT) -> asyncio.Task[SendOutcome]:
        """Agenda o envio (fire-and-forget para quem chama).

        Sessão inativa resolve como SKIPPED: a task nunca termina com exceção.
        """
        task = asyncio.create_task(self._send_detached(content, mode))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _send_detached(self, content: str, mode: ChatMode | str) -> SendOutcome:
        try:
            return await self.send(content, mode)
        except SessionNotActiveError:
            logger.info("send_skipped_session_inactive")
            return SendOutcome.SKIPPED

    def close(self) -> None:
        """Marca a view como encerrada; envio em voo tem o resultado descartado."""
        self._closed = True

    def _rollback(
        self,
        placeholder_id: str,
        failure: SendFailedError,
        field: str | None = None,
    ) -> SendOutcome:
        if self._closed:
            logger.info("send_result_dropped", extra={"temp_id": placeholder_id})
            return SendOutcome.DROPPED

        self.last_error = failure
        self._store.remove_optimistic(placeholder_id)
        self._notices.post(notices.MESSAGE_FAILED)
        logger.warning(
            "message_send_failed",
            extra={
                "temp_id": placeholder_id,
                "status_code": failure.status_code,
                "reason": failure.reason,
                "field": field,
            },
        )
        return SendOutcome.FAILED
