"""Avisos exibidos ao usuário (toasts)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class NoticeLevel(StrEnum):
    INFO = "info"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Notice:
    title: str
    description: str
    level: NoticeLevel = NoticeLevel.DESTRUCTIVE
    transient: bool = False


# Avisos canônicos do fluxo de chat
TUTOR_NOT_FOUND = Notice("Tutor Not Found", "This tutor does not exist or is no longer available.")
INVALID_PASSWORD = Notice("Invalid Password", "The password you entered is incorrect")
CONNECTION_ERROR = Notice("Connection Error", "Unable to start chat session. Please try again.")
TUTOR_LOAD_ERROR = Notice("Connection Error", "Unable to load this tutor. Please try again.")
MESSAGE_FAILED = Notice("Message Failed", "Unable to send message. Please try again.")
VOICE_NOT_SUPPORTED = Notice("Voice Not Supported", "Voice input is not supported on this device.")
VOICE_INPUT_ERROR = Notice(
    "Voice Input Error", "Unable to capture voice input. Please try again.", transient=True
)
