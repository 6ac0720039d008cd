"""Protocolos de domínio (armazenamento de preferências e capacidades de fala)."""

from brainmate_chat.domain.protocols.key_value import KeyValueStore
from brainmate_chat.domain.protocols.speech import (
    RecognitionHandle,
    SpeechRecognizer,
    SpeechSynthesizer,
    UtteranceCallbacks,
)

__all__ = [
    "KeyValueStore",
    "RecognitionHandle",
    "SpeechRecognizer",
    "SpeechSynthesizer",
    "UtteranceCallbacks",
]
