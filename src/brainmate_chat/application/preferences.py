"""Preferências persistidas do cliente: tema e tutoriais vistos."""

from __future__ import annotations

import logging
from enum import StrEnum

from brainmate_chat.config.settings import THEME_KEY, TUTORIAL_SEEN_KEY_PREFIX
from brainmate_chat.domain.protocols.key_value import KeyValueStore
from brainmate_chat.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


class Theme(StrEnum):
    LIGHT = "light"
    DARK = "dark"


class PreferencesStore:
    """Leitura/escrita de preferências sobre um KeyValueStore injetado."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    @property
    def theme(self) -> Theme:
        """Tema salvo; valor ausente ou desconhecido cai em light."""
        raw = self._store.get(THEME_KEY)
        try:
            return Theme(raw) if raw else Theme.LIGHT
        except ValueError:
            logger.debug("unknown_theme_value", extra={"value": raw})
            return Theme.LIGHT

    def set_theme(self, theme: Theme | str) -> Theme:
        value = Theme(theme)
        self._store.set(THEME_KEY, str(value))
        return value

    def toggle_theme(self) -> Theme:
        return self.set_theme(Theme.LIGHT if self.theme == Theme.DARK else Theme.DARK)

    def has_seen_tutorial(self, page: str) -> bool:
        return self._store.get(_tutorial_key(page)) == "true"

    def mark_tutorial_seen(self, page: str) -> None:
        self._store.set(_tutorial_key(page), "true")

    def reset_tutorial(self, page: str) -> None:
        self._store.remove(_tutorial_key(page))


def _tutorial_key(page: str) -> str:
    return f"{TUTORIAL_SEEN_KEY_PREFIX}{page}"
