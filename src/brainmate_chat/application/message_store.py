"""MessageStore: visão local ordenada da conversa.

Regras de reconciliação:
- Mensagens confirmadas ficam ordenadas por timestamp (estável por inserção);
  confirmadas sem timestamp herdam a posição da antecessora
- Otimistas ficam sempre no fim, na ordem de inserção, e só saem por
  replace_optimistic/remove_optimistic (nunca reordenadas)
- merge_from_server substitui apenas o conjunto confirmado; otimistas
  pendentes sobrevivem ao resync

Todas as mutações acontecem no event loop (sem locks); a regra de merge faz
o papel do mutex entre o SendCoordinator e o ResyncPoller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from brainmate_chat.domain.messages import ChatMessage
from brainmate_chat.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

StoreListener = Callable[[tuple[ChatMessage, ...]], None]

_EPOCH = datetime.min.replace(tzinfo=UTC)


def order_confirmed(messages: Iterable[ChatMessage]) -> list[ChatMessage]:
    """Ordena confirmadas por timestamp-then-insertion."""
    keyed: list[tuple[datetime, int, ChatMessage]] = []
    effective = _EPOCH
    for position, message in enumerate(messages):
        if message.timestamp is not None:
            effective = message.timestamp
        keyed.append((effective, position, message))
    keyed.sort(key=lambda item: (item[0], item[1]))
    return [message for _, _, message in keyed]


class MessageStore:
    """Sequência de mensagens do cliente (confirmadas + otimistas)."""

    def __init__(self) -> None:
        self._entries: list[ChatMessage] = []
        self._listeners: list[StoreListener] = []
        self._revision = 0

    # ------------------------------------------------------------------
    # Leitura
    # ------------------------------------------------------------------
    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return tuple(self._entries)

    @property
    def revision(self) -> int:
        """Incrementa a cada mudança do conjunto confirmado por envio local."""
        return self._revision

    @property
    def optimistic(self) -> tuple[ChatMessage, ...]:
        return tuple(m for m in self._entries if m.is_optimistic)

    def __len__(self) -> int:
        return len(self._entries)

    def find(self, message_id: int | str) -> ChatMessage | None:
        for message in self._entries:
            if message.id == message_id:
                return message
        return None

    # ------------------------------------------------------------------
    # Mutação
    # ------------------------------------------------------------------
    def append(self, message: ChatMessage) -> None:
        """Adiciona mensagem; otimista vai para o fim, confirmada é ordenada."""
        if message.is_optimistic:
            self._entries.append(message)
        else:
            confirmed = self._without_ids(self._confirmed(), {message.id})
            confirmed.append(message)
            self._entries = order_confirmed(confirmed) + list(self.optimistic)
            self._revision += 1
        self._notify()

    def replace_optimistic(self, temp_id: str, confirmed: Iterable[ChatMessage]) -> None:
        """Troca a entrada otimista pelas mensagens confirmadas do servidor.

        Ids confirmados já presentes (ex.: trazidos por um resync) são
        substituídos, nunca duplicados. temp_id desconhecido apenas anexa.
        """
        incoming = [m for m in confirmed if not m.is_optimistic]
        incoming_ids = {m.id for m in incoming}
        kept = self._without_ids(self._confirmed(), incoming_ids)
        pending = [m for m in self.optimistic if m.id != temp_id]
        self._entries = order_confirmed(kept + incoming) + pending
        self._revision += 1
        logger.debug(
            "optimistic_replaced",
            extra={"temp_id": temp_id, "confirmed_count": len(incoming)},
        )
        self._notify()

    def remove_optimistic(self, temp_id: str) -> bool:
        """Remove a entrada otimista; id desconhecido é no-op."""
        before = len(self._entries)
        self._entries = [m for m in self._entries if not (m.is_optimistic and m.id == temp_id)]
        removed = len(self._entries) != before
        if removed:
            logger.debug("optimistic_removed", extra={"temp_id": temp_id})
            self._notify()
        return removed

    def merge_from_server(
        self,
        server_messages: Iterable[ChatMessage],
        base_revision: int | None = None,
    ) -> bool:
        """Substitui as confirmadas pela lista do servidor, mantendo otimistas.

        `base_revision` é a revisão observada quando o fetch começou: se um
        envio foi reconciliado nesse meio tempo, a lista é antiga e é
        descartada (o próximo tick traz a versão nova).
        """
        if base_revision is not None and base_revision != self._revision:
            logger.debug(
                "resync_snapshot_stale",
                extra={"base_revision": base_revision, "revision": self._revision},
            )
            return False

        confirmed = order_confirmed(m for m in server_messages if not m.is_optimistic)
        pending = list(self.optimistic)
        merged = confirmed + pending
        if merged == self._entries:
            return True
        self._entries = merged
        self._notify()
        return True

    def clear(self) -> None:
        """Descarta tudo (teardown da view)."""
        if self._entries:
            self._entries = []
            self._notify()

    # ------------------------------------------------------------------
    # Observadores
    # ------------------------------------------------------------------
    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Registra listener; retorna função para cancelar a inscrição."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        snapshot = self.messages
        for listener in list(self._listeners):
            listener(snapshot)

    def _confirmed(self) -> list[ChatMessage]:
        return [m for m in self._entries if not m.is_optimistic]

    @staticmethod
    def _without_ids(
        messages: list[ChatMessage], ids: set[int | str]
    ) -> list[ChatMessage]:
        return [m for m in messages if m.id not in ids]
