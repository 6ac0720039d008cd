"""SpeechBridge: voz opcional (TTS da resposta, STT para o composer).

Regras:
- No máximo uma utterance falando; uma nova cancela a anterior e callbacks
  da utterance substituída são ignorados
- Reconhecimento de resultado único; o indicador de escuta nunca fica ligado
  após resultado, erro ou fim
- Capacidades ausentes desabilitam a feature sem erro
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from brainmate_chat.application.notice_board import NoticeBoard
from brainmate_chat.application.speech_sanitizer import sanitize_for_speech
from brainmate_chat.domain import notices
from brainmate_chat.domain.protocols.speech import (
    RecognitionHandle,
    SpeechRecognizer,
    SpeechSynthesizer,
    UtteranceCallbacks,
)
from brainmate_chat.domain.speech import Utterance, UtteranceState, locale_for_language
from brainmate_chat.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

TranscriptHandler = Callable[[str], None]


class SpeechBridge:
    """Ponte entre o chat e os motores de fala da plataforma."""

    def __init__(
        self,
        synthesizer: SpeechSynthesizer | None,
        recognizer: SpeechRecognizer | None,
        notice_board: NoticeBoard,
        voice_enabled: bool = False,
        language: str = "English",
    ) -> None:
        self._synthesizer = synthesizer
        self._recognizer = recognizer
        self._notices = notice_board
        self.voice_enabled = voice_enabled
        self.language = language
        self._utterance_seq = 0
        self._current: Utterance | None = None
        self._handle: RecognitionHandle | None = None
        self._listening = False
        self._last_transcript: str | None = None

    # ------------------------------------------------------------------
    # Capacidades
    # ------------------------------------------------------------------
    @property
    def can_speak(self) -> bool:
        return self._synthesizer is not None

    @property
    def can_listen(self) -> bool:
        return self._recognizer is not None

    @property
    def locale(self) -> str:
        return locale_for_language(self.language)

    # ------------------------------------------------------------------
    # Saída de voz
    # ------------------------------------------------------------------
    @property
    def is_speaking(self) -> bool:
        return self._current is not None and self._current.state == UtteranceState.SPEAKING

    @property
    def current_utterance(self) -> Utterance | None:
        return self._current

    def speak(self, text: str) -> Utterance | None:
        """Fala o texto sanitizado, interrompendo a utterance atual."""
        if not self.voice_enabled or self._synthesizer is None:
            return None
        clean = sanitize_for_speech(text)
        if not clean:
            return None

        self.stop_speaking()
        self._utterance_seq += 1
        utterance = Utterance(utterance_id=self._utterance_seq, text=clean, locale=self.locale)
        self._current = utterance
        self._synthesizer.speak(clean, utterance.locale, self._callbacks_for(utterance))
        return utterance

    def stop_speaking(self) -> None:
        """Cancela a utterance atual (idempotente)."""
        current = self._current
        if current is not None and not current.is_final:
            current.state = UtteranceState.CANCELLED
            logger.debug("utterance_cancelled", extra={"utterance_id": current.utterance_id})
        if self._synthesizer is not None:
            self._synthesizer.cancel()

    def set_voice_enabled(self, enabled: bool) -> None:
        self.voice_enabled = enabled
        if not enabled:
            self.stop_speaking()

    def _callbacks_for(self, utterance: Utterance) -> UtteranceCallbacks:
        def _is_current() -> bool:
            # Eventos atrasados de uma utterance substituída não mexem no estado
            return self._current is utterance and utterance.state != UtteranceState.CANCELLED

        def _on_start() -> None:
            if _is_current():
                utterance.state = UtteranceState.SPEAKING

        def _on_end() -> None:
            if _is_current():
                utterance.state = UtteranceState.ENDED

        def _on_error(reason: str) -> None:
            if _is_current():
                utterance.state = UtteranceState.ERRORED
                logger.info(
                    "utterance_failed",
                    extra={"utterance_id": utterance.utterance_id, "reason": reason},
                )

        return UtteranceCallbacks(on_start=_on_start, on_end=_on_end, on_error=_on_error)

    # ------------------------------------------------------------------
    # Entrada de voz
    # ------------------------------------------------------------------
    @property
    def is_listening(self) -> bool:
        return self._listening

    @property
    def last_transcript(self) -> str | None:
        return self._last_transcript

    def start_listening(self, on_transcript: TranscriptHandler) -> bool:
        """Abre o microfone; o primeiro resultado vai para `on_transcript`."""
        if self._listening:
            return True
        if self._recognizer is None:
            self._notices.post(notices.VOICE_NOT_SUPPORTED)
            return False

        self._release_handle()
        handle = self._recognizer.open(self.locale)
        self._handle = handle
        self._listening = True

        def _on_result(transcript: str) -> None:
            if self._handle is not handle:
                return
            self._last_transcript = transcript
            self._finish_listening()
            on_transcript(transcript)

        def _on_error(reason: str) -> None:
            if self._handle is not handle:
                return
            logger.info("speech_recognition_failed", extra={"reason": reason})
            self._finish_listening()
            self._notices.post(notices.VOICE_INPUT_ERROR)

        def _on_end() -> None:
            if self._handle is handle:
                self._finish_listening()

        handle.start(_on_result, _on_error, _on_end)
        logger.debug("speech_recognition_started", extra={"locale": self.locale})
        return True

    def stop_listening(self) -> str | None:
        """Encerra a escuta; retorna o último transcript recebido."""
        if self._handle is not None:
            self._handle.stop()
        self._finish_listening()
        return self._last_transcript

    def close(self) -> None:
        """Teardown: cancela a fala e libera o microfone."""
        self.stop_speaking()
        self._current = None
        self._finish_listening()

    def _finish_listening(self) -> None:
        self._listening = False
        self._release_handle()

    def _release_handle(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.release()
