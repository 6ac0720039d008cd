"""Cliente das rotas de tutor, sessão e mensagem do backend BrainMate.

Fronteira entre o protocolo de chat e o serviço REST:
- Traduz status HTTP em erros de domínio (404 → TutorNotFoundError, 401 →
  InvalidPasswordError)
- Decodifica respostas via decoders (Ok | Err), nunca repassa dict cru
- Nunca loga conteúdo de mensagens, senhas ou tokens completos
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from brainmate_chat.adapters.brainmate.decoders import (
    decode_messages,
    decode_send_result,
    decode_session,
    decode_tutor,
)
from brainmate_chat.domain.errors import (
    InvalidPasswordError,
    SessionCreationError,
    ShapeError,
    TutorNotFoundError,
)
from brainmate_chat.domain.messages import ChatMessage, ChatMode, SendResult, SessionInfo, TutorDetails
from brainmate_chat.domain.results import DecodeResult, Err
from brainmate_chat.infra.http import HttpClient, HttpError
from brainmate_chat.observability.logging import get_logger, token_prefix

logger: logging.Logger = get_logger(__name__)


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise ShapeError("Resposta JSON inválida") from exc


class BrainMateApiClient:
    """Operações REST usadas pela sessão de chat."""

    def __init__(self, http: HttpClient) -> None:
        self._http = http

    @property
    def http(self) -> HttpClient:
        return self._http

    async def get_tutor(self, tutor_id: int) -> TutorDetails:
        """GET /tutors/{id}.

        Raises:
            TutorNotFoundError: 404
            HttpError: demais falhas de transporte/status
            ShapeError: payload inválido
        """
        try:
            response = await self._http.get(f"/tutors/{tutor_id}")
        except HttpError as exc:
            if exc.status_code == 404:
                raise TutorNotFoundError(f"Tutor {tutor_id} não encontrado") from exc
            raise
        return self._unwrap(decode_tutor(_json_body(response)))

    async def verify_password(self, tutor_id: int, password: str) -> TutorDetails:
        """POST /tutors/{id}/verify-password → detalhes completos do tutor."""
        try:
            response = await self._http.post(
                f"/tutors/{tutor_id}/verify-password", json={"password": password}
            )
        except HttpError as exc:
            if exc.status_code == 401:
                raise InvalidPasswordError("Senha incorreta") from exc
            if exc.status_code == 404:
                raise TutorNotFoundError(f"Tutor {tutor_id} não encontrado") from exc
            raise
        return self._unwrap(decode_tutor(_json_body(response)))

    async def create_session(self, tutor_id: int, student_id: str | None = None) -> SessionInfo:
        """POST /chat/sessions. Qualquer falha vira SessionCreationError."""
        try:
            response = await self._http.post(
                "/chat/sessions", json={"tutorId": tutor_id, "studentId": student_id}
            )
            session = self._unwrap(decode_session(_json_body(response)))
        except (HttpError, ShapeError) as exc:
            logger.warning(
                "session_creation_failed",
                extra={"tutor_id": tutor_id, "error_type": type(exc).__name__},
            )
            raise SessionCreationError("Não foi possível criar a sessão") from exc

        logger.info(
            "session_created",
            extra={"tutor_id": tutor_id, "session_token": token_prefix(session.session_token)},
        )
        return session

    async def list_messages(self, session_token: str) -> list[ChatMessage]:
        """GET /chat/sessions/{token}/messages (lista completa, ordem do servidor)."""
        response = await self._http.get(f"/chat/sessions/{session_token}/messages")
        return self._unwrap(decode_messages(_json_body(response)))

    async def send_message(
        self,
        session_token: str,
        content: str,
        mode: ChatMode | str,
        language: str,
    ) -> DecodeResult[SendResult]:
        """POST /chat/message.

        Falhas de transporte/status levantam HttpError; payload malformado
        volta como Err(ShapeError) para o coordenador decidir o rollback.
        """
        response = await self._http.post(
            "/chat/message",
            json={
                "sessionToken": session_token,
                "content": content,
                "mode": str(mode),
                "language": language,
            },
        )
        try:
            body = _json_body(response)
        except ShapeError as exc:
            return Err(exc)
        return decode_send_result(body)

    @staticmethod
    def _unwrap(result: DecodeResult[Any]) -> Any:
        if isinstance(result, Err):
            raise result.error
        return result.value
