"""ChatSession: dono único do estado de uma view de chat montada.

Agrupa negociação, store, envio, resync e voz. Timers e flags de voo são
campos deste objeto (ou dos componentes que ele possui); o teardown em
`close()` cancela o poller, a utterance e o microfone. Um envio em voo não
é cancelado: o resultado tardio é descartado sem exceção.

Uso típico:
    async with create_chat_session(tutor_id=7) as chat:
        await chat.open()
        await chat.send("O que é fotossíntese?")
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from brainmate_chat.adapters.brainmate.client import BrainMateApiClient
from brainmate_chat.application.composer import Composer
from brainmate_chat.application.message_store import MessageStore
from brainmate_chat.application.negotiator import SessionNegotiator
from brainmate_chat.application.notice_board import NoticeBoard
from brainmate_chat.application.resync_poller import ResyncPoller
from brainmate_chat.application.send_coordinator import SendCoordinator, SendOutcome
from brainmate_chat.application.speech_bridge import SpeechBridge
from brainmate_chat.config.settings import DEFAULT_POLL_INTERVAL_SECONDS
from brainmate_chat.domain.messages import ChatMessage, ChatMode
from brainmate_chat.domain.protocols.speech import SpeechRecognizer, SpeechSynthesizer
from brainmate_chat.domain.session import NegotiationState
from brainmate_chat.infra.http import create_http_client
from brainmate_chat.observability.correlation import correlation_scope, new_correlation_id
from brainmate_chat.observability.logging import get_logger

if TYPE_CHECKING:
    import httpx

    from brainmate_chat.config.settings import Settings

logger: logging.Logger = get_logger(__name__)


class ChatSession:
    """Sessão de chat com um tutor (uma por view montada)."""

    def __init__(
        self,
        api: BrainMateApiClient,
        tutor_id: int,
        *,
        student_id: str | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        language: str = "English",
        mode: ChatMode | str = ChatMode.CHAT,
        voice_enabled: bool = False,
        synthesizer: SpeechSynthesizer | None = None,
        recognizer: SpeechRecognizer | None = None,
        correlation_id: str | None = None,
        owns_http: bool = False,
    ) -> None:
        self.correlation_id = new_correlation_id(correlation_id)
        self._api = api
        self._owns_http = owns_http
        self._closed = False
        self.mode = ChatMode(mode)

        self.notices = NoticeBoard()
        self.store = MessageStore()
        self.composer = Composer()
        self.negotiator = SessionNegotiator(api, tutor_id, self.notices, student_id=student_id)
        self.speech = SpeechBridge(
            synthesizer,
            recognizer,
            self.notices,
            voice_enabled=voice_enabled,
            language=language,
        )
        self.sender = SendCoordinator(
            api,
            self.store,
            self.notices,
            self.negotiator,
            composer=self.composer,
            speech=self.speech,
            language=language,
        )
        self.poller = ResyncPoller(api, self.store, self.negotiator, interval=poll_interval)
        self._unsubscribe_state = self.negotiator.subscribe(self._on_state_change)

    # ------------------------------------------------------------------
    # Estado
    # ------------------------------------------------------------------
    @property
    def state(self) -> NegotiationState:
        return self.negotiator.state

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return self.store.messages

    @property
    def language(self) -> str:
        return self.sender.language

    @property
    def is_closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Negociação
    # ------------------------------------------------------------------
    async def open(self) -> NegotiationState:
        """Carrega o tutor e negocia a sessão (no-op se já iniciado)."""
        with correlation_scope(self.correlation_id):
            return await self.negotiator.load()

    async def submit_password(self, candidate: str) -> NegotiationState:
        with correlation_scope(self.correlation_id):
            return await self.negotiator.submit_password(candidate)

    async def retry(self) -> NegotiationState:
        with correlation_scope(self.correlation_id):
            return await self.negotiator.retry()

    # ------------------------------------------------------------------
    # Envio
    # ------------------------------------------------------------------
    async def send(
        self, content: str | None = None, mode: ChatMode | str | None = None
    ) -> SendOutcome:
        """Envia `content` (ou o texto do composer) no modo corrente."""
        text = self.composer.text if content is None else content
        with correlation_scope(self.correlation_id):
            return await self.sender.send(text, mode or self.mode)

    def submit(
        self, content: str | None = None, mode: ChatMode | str | None = None
    ) -> asyncio.Task[SendOutcome]:
        text = self.composer.text if content is None else content
        # A task copia o contexto corrente e herda o id da sessão
        with correlation_scope(self.correlation_id):
            return self.sender.submit(text, mode or self.mode)

    def set_mode(self, mode: ChatMode | str) -> None:
        self.mode = ChatMode(mode)

    def set_language(self, language: str) -> None:
        """Idioma enviado ao backend e usado no locale de voz."""
        self.sender.language = language
        self.speech.language = language

    # ------------------------------------------------------------------
    # Voz
    # ------------------------------------------------------------------
    def toggle_voice(self) -> bool:
        self.speech.set_voice_enabled(not self.speech.voice_enabled)
        return self.speech.voice_enabled

    def start_listening(self, append: bool = False) -> bool:
        """Transcript substitui (ou anexa ao) texto do composer."""
        handler = self.composer.append_transcript if append else self.composer.replace
        return self.speech.start_listening(handler)

    def stop_listening(self) -> str | None:
        return self.speech.stop_listening()

    # ------------------------------------------------------------------
    # Ciclo de vida
    # ------------------------------------------------------------------
    async def close(self) -> None:
        """Teardown da view (idempotente)."""
        if self._closed:
            return
        self._closed = True
        self._unsubscribe_state()
        await self.poller.stop()
        self.sender.close()
        self.speech.close()
        self.store.clear()
        self.negotiator.terminate()
        if self._owns_http:
            await self._api.http.close()
        logger.info(
            "chat_session_closed",
            extra={"tutor_id": self.negotiator.tutor_id, "correlation_id": self.correlation_id},
        )

    async def __aenter__(self) -> ChatSession:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    def _on_state_change(self, state: NegotiationState) -> None:
        if state == NegotiationState.ACTIVE and not self._closed:
            self.poller.start()
        elif state == NegotiationState.TERMINATED:
            self.poller.cancel()


def create_chat_session(
    tutor_id: int,
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    synthesizer: SpeechSynthesizer | None = None,
    recognizer: SpeechRecognizer | None = None,
    student_id: str | None = None,
) -> ChatSession:
    """Factory a partir de Settings; a sessão é dona do transporte HTTP."""
    if settings is None:
        from brainmate_chat.config.settings import get_settings

        settings = get_settings()

    errors = settings.validate_api_config()
    if errors:
        raise ValueError("; ".join(errors))

    http = create_http_client(settings, transport=transport)
    return ChatSession(
        BrainMateApiClient(http),
        tutor_id,
        student_id=student_id,
        poll_interval=settings.poll_interval_seconds,
        language=settings.default_language,
        mode=settings.default_mode,
        voice_enabled=settings.voice_output_enabled,
        synthesizer=synthesizer,
        recognizer=recognizer,
        owns_http=True,
    )
