"""Implementações de KeyValueStore para preferências do cliente."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from brainmate_chat.domain.protocols.key_value import KeyValueStore
from brainmate_chat.observability.logging import get_logger

if TYPE_CHECKING:
    from brainmate_chat.config.settings import Settings

logger: logging.Logger = get_logger(__name__)


class InMemoryKeyValueStore(KeyValueStore):
    """Armazenamento em memória (dev/testes)."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore(KeyValueStore):
    """Persistência em arquivo JSON (um objeto de strings).

    Arquivo corrompido é tratado como vazio e reescrito na próxima escrita.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        self._data = self._load()

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(
                "preferences_file_unreadable",
                extra={"path": str(self._path), "error_type": type(exc).__name__},
            )
            return {}
        if not isinstance(raw, dict):
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    def _flush(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(self._data, sort_keys=True), encoding="utf-8")
        tmp.replace(self._path)

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value
            self._flush()

    def remove(self, key: str) -> None:
        with self._lock:
            if self._data.pop(key, None) is not None:
                self._flush()


def create_key_value_store(settings: Settings) -> KeyValueStore:
    """Factory conforme BRAINMATE_PREFERENCES_BACKEND."""
    errors = settings.validate_preferences_config()
    if errors:
        raise ValueError("; ".join(errors))

    if settings.preferences_backend.lower() == "file":
        return JsonFileKeyValueStore(settings.preferences_path)
    return InMemoryKeyValueStore()
