"""ResyncPoller: refetch periódico da lista de mensagens da sessão.

Uma única task asyncio por sessão. Falhas de um tick são logadas e
descartadas (o próximo tick tenta de novo); nunca viram aviso ao usuário.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from brainmate_chat.adapters.brainmate.client import BrainMateApiClient
from brainmate_chat.application.message_store import MessageStore
from brainmate_chat.application.negotiator import SessionNegotiator
from brainmate_chat.config.settings import DEFAULT_POLL_INTERVAL_SECONDS
from brainmate_chat.domain.errors import ShapeError
from brainmate_chat.infra.http import HttpError
from brainmate_chat.observability.logging import get_logger, token_prefix

logger: logging.Logger = get_logger(__name__)


class ResyncPoller:
    """Mantém o MessageStore alinhado com o servidor (multi-aba, outros clientes)."""

    def __init__(
        self,
        api: BrainMateApiClient,
        store: MessageStore,
        negotiator: SessionNegotiator,
        interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval deve ser > 0")
        self._api = api
        self._store = store
        self._negotiator = negotiator
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> bool:
        """Inicia o loop; recusa se a sessão não está ativa ou já rodando."""
        if self.is_running:
            return True
        if not self._negotiator.is_active:
            logger.debug("resync_start_refused", extra={"state": str(self._negotiator.state)})
            return False
        self._task = asyncio.create_task(self._run())
        logger.info("resync_started", extra={"interval_seconds": self._interval})
        return True

    def cancel(self) -> None:
        """Cancela o loop sem aguardar (chamável de callbacks síncronos)."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        logger.info("resync_stopped")

    async def stop(self) -> None:
        """Cancela o loop e aguarda a task terminar (idempotente)."""
        task = self._task
        self.cancel()
        if task is None:
            return
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def poll_once(self) -> bool:
        """Executa um tick. Retorna True se a lista do servidor foi aplicada."""
        token = self._negotiator.session_token
        if not self._negotiator.is_active or token is None:
            return False

        base_revision = self._store.revision
        try:
            server_messages = await self._api.list_messages(token)
        except (HttpError, ShapeError) as exc:
            logger.warning(
                "resync_failed",
                extra={
                    "session_token": token_prefix(token),
                    "error_type": type(exc).__name__,
                    "status_code": getattr(exc, "status_code", None),
                },
            )
            return False

        if not self._negotiator.is_active:
            return False
        return self._store.merge_from_server(server_messages, base_revision=base_revision)

    async def _run(self) -> None:
        while True:
            try:
                await self.poll_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("resync_tick_crashed")
            await asyncio.sleep(self._interval)
