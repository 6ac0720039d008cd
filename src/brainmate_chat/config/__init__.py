"""Configurações centralizadas do brainmate_chat.

Uso típico:
    from brainmate_chat.config import get_settings
"""

from brainmate_chat.config.settings import (
    DEFAULT_API_BASE_URL,
    DEFAULT_POLL_INTERVAL_SECONDS,
    THEME_KEY,
    TUTORIAL_SEEN_KEY_PREFIX,
    Settings,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "DEFAULT_API_BASE_URL",
    "DEFAULT_POLL_INTERVAL_SECONDS",
    "THEME_KEY",
    "TUTORIAL_SEEN_KEY_PREFIX",
]
