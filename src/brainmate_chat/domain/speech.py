"""Utterance efêmera e mapeamento idioma → locale."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

LANGUAGE_LOCALES: dict[str, str] = {
    "English": "en-US",
    "Hindi": "hi-IN",
    "Spanish": "es-ES",
    "French": "fr-FR",
    "German": "de-DE",
    "Japanese": "ja-JP",
    "Korean": "ko-KR",
    "Chinese": "zh-CN",
    "Arabic": "ar-SA",
}
DEFAULT_LOCALE = "en-US"


def locale_for_language(language: str | None) -> str:
    """Locale de reconhecimento/síntese; idioma desconhecido cai em en-US."""
    if not language:
        return DEFAULT_LOCALE
    return LANGUAGE_LOCALES.get(language, DEFAULT_LOCALE)


class UtteranceState(StrEnum):
    PENDING = "pending"
    SPEAKING = "speaking"
    ENDED = "ended"
    ERRORED = "errored"
    CANCELLED = "cancelled"


_FINAL_STATES = frozenset({UtteranceState.ENDED, UtteranceState.ERRORED, UtteranceState.CANCELLED})


@dataclass
class Utterance:
    """Fala submetida ao sintetizador (texto já sanitizado)."""

    utterance_id: int
    text: str
    locale: str
    state: UtteranceState = UtteranceState.PENDING

    @property
    def is_final(self) -> bool:
        return self.state in _FINAL_STATES
