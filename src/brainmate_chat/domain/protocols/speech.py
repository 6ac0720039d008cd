"""Contratos das capacidades de fala (TTS/STT) da plataforma.

Ambas são opcionais: o SpeechBridge recebe None quando a plataforma não as
oferece e degrada sem erro. Callbacks são síncronos e chegam no event loop.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class UtteranceCallbacks:
    """Eventos de uma utterance submetida ao sintetizador."""

    on_start: Callable[[], None]
    on_end: Callable[[], None]
    on_error: Callable[[str], None]


class SpeechSynthesizer(ABC):
    """Text-to-speech: submit/cancel com eventos start/end/error."""

    @abstractmethod
    def speak(self, text: str, locale: str, callbacks: UtteranceCallbacks) -> None: ...

    @abstractmethod
    def cancel(self) -> None:
        """Interrompe qualquer utterance em andamento (idempotente)."""


class RecognitionHandle(ABC):
    """Handle nativo de reconhecimento (microfone). Resultado único, não contínuo."""

    @abstractmethod
    def start(
        self,
        on_result: Callable[[str], None],
        on_error: Callable[[str], None],
        on_end: Callable[[], None],
    ) -> None: ...

    @abstractmethod
    def stop(self) -> None: ...

    @abstractmethod
    def release(self) -> None:
        """Libera o microfone; o handle não pode mais ser usado."""


class SpeechRecognizer(ABC):
    """Speech-to-text: fábrica de handles por locale."""

    @abstractmethod
    def open(self, locale: str) -> RecognitionHandle: ...
