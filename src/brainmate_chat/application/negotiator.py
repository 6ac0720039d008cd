"""SessionNegotiator: máquina de estados que obtém o session token.

Fluxos:
- uninitialized → (tutor aberto) → negotiating → active
- uninitialized → awaiting-password → (senha ok) → negotiating → active
- senha errada volta para awaiting-password; tutor inexistente → unavailable
- falha ao criar sessão → session-failed (apenas retry manual)

Um único dono por view montada: o flag `_in_flight` impede que chamadas
repetidas (re-render, clique duplo) disparem duas criações de sessão.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from brainmate_chat.adapters.brainmate.client import BrainMateApiClient
from brainmate_chat.application.notice_board import NoticeBoard
from brainmate_chat.domain import notices
from brainmate_chat.domain.errors import (
    InvalidPasswordError,
    InvalidTransitionError,
    SessionCreationError,
    ShapeError,
    TutorNotFoundError,
)
from brainmate_chat.domain.messages import SessionInfo, TutorDetails
from brainmate_chat.domain.session import NegotiationEvent, NegotiationState, validate_transition
from brainmate_chat.infra.http import HttpError
from brainmate_chat.observability.logging import get_logger, token_prefix

logger: logging.Logger = get_logger(__name__)

StateListener = Callable[[NegotiationState], None]


class SessionNegotiator:
    """Negocia uma sessão de chat para um tutor."""

    def __init__(
        self,
        api: BrainMateApiClient,
        tutor_id: int,
        notice_board: NoticeBoard,
        student_id: str | None = None,
    ) -> None:
        self._api = api
        self._tutor_id = tutor_id
        self._notices = notice_board
        self._student_id = student_id
        self._state = NegotiationState.UNINITIALIZED
        self._tutor: TutorDetails | None = None
        self._session: SessionInfo | None = None
        self._in_flight = False
        self._listeners: list[StateListener] = []

    # ------------------------------------------------------------------
    # Estado observável
    # ------------------------------------------------------------------
    @property
    def state(self) -> NegotiationState:
        return self._state

    @property
    def tutor_id(self) -> int:
        return self._tutor_id

    @property
    def tutor(self) -> TutorDetails | None:
        return self._tutor

    @property
    def session(self) -> SessionInfo | None:
        return self._session

    @property
    def session_token(self) -> str | None:
        return self._session.session_token if self._session else None

    @property
    def is_active(self) -> bool:
        return self._state == NegotiationState.ACTIVE

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def requires_password(self) -> bool:
        return self._state == NegotiationState.AWAITING_PASSWORD

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Operações
    # ------------------------------------------------------------------
    async def load(self) -> NegotiationState:
        """Carrega o tutor e, se aberto, cria a sessão.

        No-op fora de `uninitialized` ou com requisição em andamento.
        """
        if self._in_flight or self._state != NegotiationState.UNINITIALIZED:
            return self._state

        self._in_flight = True
        try:
            try:
                tutor = await self._api.get_tutor(self._tutor_id)
            except TutorNotFoundError:
                if self._torn_down():
                    return self._state
                self._transition(NegotiationEvent.TUTOR_NOT_FOUND)
                self._notices.post(notices.TUTOR_NOT_FOUND)
                return self._state
            except (HttpError, ShapeError) as exc:
                if self._torn_down():
                    return self._state
                logger.warning(
                    "tutor_load_failed",
                    extra={"tutor_id": self._tutor_id, "error_type": type(exc).__name__},
                )
                self._transition(NegotiationEvent.TUTOR_LOAD_FAILED)
                self._notices.post(notices.TUTOR_LOAD_ERROR)
                return self._state

            if self._torn_down():
                return self._state
            self._tutor = tutor
            if tutor.requires_password:
                self._transition(NegotiationEvent.TUTOR_GATED)
                return self._state

            self._transition(NegotiationEvent.TUTOR_OPEN)
            await self._create_session()
            return self._state
        finally:
            self._in_flight = False

    async def submit_password(self, candidate: str) -> NegotiationState:
        """Verifica a senha; sucesso segue direto para a criação da sessão."""
        if (
            not candidate.strip()
            or self._in_flight
            or self._state != NegotiationState.AWAITING_PASSWORD
        ):
            return self._state

        self._in_flight = True
        try:
            try:
                tutor = await self._api.verify_password(self._tutor_id, candidate)
            except InvalidPasswordError:
                if self._torn_down():
                    return self._state
                logger.info("password_rejected", extra={"tutor_id": self._tutor_id})
                self._transition(NegotiationEvent.PASSWORD_REJECTED)
                self._notices.post(notices.INVALID_PASSWORD)
                return self._state
            except TutorNotFoundError:
                if self._torn_down():
                    return self._state
                self._transition(NegotiationEvent.TUTOR_NOT_FOUND)
                self._notices.post(notices.TUTOR_NOT_FOUND)
                return self._state
            except (HttpError, ShapeError) as exc:
                if self._torn_down():
                    return self._state
                # Falha de rede não é senha errada: mantém o prompt sem transição
                logger.warning(
                    "password_verification_failed",
                    extra={"tutor_id": self._tutor_id, "error_type": type(exc).__name__},
                )
                self._notices.post(notices.CONNECTION_ERROR)
                return self._state

            if self._torn_down():
                return self._state
            self._tutor = tutor
            self._transition(NegotiationEvent.PASSWORD_ACCEPTED)
            await self._create_session()
            return self._state
        finally:
            self._in_flight = False

    async def retry(self) -> NegotiationState:
        """Retry manual após falha (criação de sessão ou carga do tutor)."""
        if self._in_flight:
            return self._state
        if self._state == NegotiationState.UNINITIALIZED:
            return await self.load()
        if self._state != NegotiationState.SESSION_FAILED:
            return self._state

        self._in_flight = True
        try:
            self._transition(NegotiationEvent.RETRY_REQUESTED)
            await self._create_session()
            return self._state
        finally:
            self._in_flight = False

    def terminate(self) -> None:
        """Encerra a sessão (navegação ou "end session"); idempotente."""
        ok, _, _ = validate_transition(self._state, NegotiationEvent.TERMINATE)
        if ok:
            self._transition(NegotiationEvent.TERMINATE)

    # ------------------------------------------------------------------
    # Internos
    # ------------------------------------------------------------------
    async def _create_session(self) -> None:
        try:
            session = await self._api.create_session(self._tutor_id, self._student_id)
        except SessionCreationError:
            if self._torn_down():
                return
            self._transition(NegotiationEvent.SESSION_CREATION_FAILED)
            self._notices.post(notices.CONNECTION_ERROR)
            return

        if self._torn_down():
            # View encerrada durante a requisição: resultado descartado
            logger.info(
                "session_discarded_after_teardown",
                extra={"session_token": token_prefix(session.session_token)},
            )
            return

        self._session = session
        self._transition(NegotiationEvent.SESSION_CREATED)

    def _transition(self, event: NegotiationEvent) -> None:
        ok, next_state, reason = validate_transition(self._state, event)
        if not ok or next_state is None:
            logger.error(
                "invalid_negotiation_transition",
                extra={"state": str(self._state), "event": str(event), "reason": reason},
            )
            raise InvalidTransitionError(reason)

        previous = self._state
        self._state = next_state
        logger.info(
            "negotiation_transition",
            extra={
                "tutor_id": self._tutor_id,
                "from_state": str(previous),
                "to_state": str(next_state),
                "event": str(event),
            },
        )
        for listener in list(self._listeners):
            listener(next_state)

    def _torn_down(self) -> bool:
        return self._state == NegotiationState.TERMINATED
