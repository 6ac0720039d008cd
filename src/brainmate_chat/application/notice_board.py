"""NoticeBoard: fila de avisos visíveis ao usuário (toasts)."""

from __future__ import annotations

import logging
from collections.abc import Callable

from brainmate_chat.domain.notices import Notice
from brainmate_chat.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

NoticeListener = Callable[[Notice], None]


class NoticeBoard:
    """Registra avisos e repassa a listeners (a camada de UI)."""

    def __init__(self) -> None:
        self._records: list[Notice] = []
        self._listeners: list[NoticeListener] = []

    @property
    def records(self) -> tuple[Notice, ...]:
        return tuple(self._records)

    @property
    def latest(self) -> Notice | None:
        return self._records[-1] if self._records else None

    def post(self, notice: Notice) -> None:
        self._records.append(notice)
        logger.info("notice_posted", extra={"title": notice.title, "level": str(notice.level)})
        for listener in list(self._listeners):
            listener(notice)

    def subscribe(self, listener: NoticeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def clear(self) -> None:
        self._records.clear()
