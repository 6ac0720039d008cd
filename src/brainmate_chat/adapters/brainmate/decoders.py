"""Decodificação validada dos payloads do backend BrainMate.

Cada função devolve Ok(valor) ou Err(ShapeError); nada aqui lança exceção
por payload malformado. Os consumidores decidem o caminho de falha pelo
variante do resultado, não por checagens ad hoc de None.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from brainmate_chat.domain.errors import ShapeError
from brainmate_chat.domain.messages import ChatMessage, SendResult, SessionInfo, TutorDetails
from brainmate_chat.domain.results import DecodeResult, Err, Ok

M = TypeVar("M", bound=BaseModel)

_SEND_FIELDS = ("userMessage", "assistantMessage")


def _shape_error(exc: ValidationError, prefix: str) -> Err:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    field = f"{prefix}.{location}" if location else prefix
    return Err(ShapeError(f"Campo inválido em {field}: {first.get('msg', 'erro')}", field=field))


def _validate(model: type[M], payload: Any, label: str) -> DecodeResult[M]:
    if not isinstance(payload, dict):
        return Err(ShapeError(f"{label} não é um objeto JSON", field=label))
    try:
        return Ok(model.model_validate(payload))
    except ValidationError as exc:
        return _shape_error(exc, label)


def _confirmed(message: ChatMessage, label: str) -> DecodeResult[ChatMessage]:
    """Mensagens do servidor precisam de id inteiro e nunca são otimistas."""
    if isinstance(message.id, bool) or not isinstance(message.id, int):
        return Err(ShapeError(f"{label}.id não é um id do servidor", field=f"{label}.id"))
    if message.is_optimistic:
        message = message.model_copy(update={"is_optimistic": False})
    return Ok(message)


def decode_send_result(payload: Any) -> DecodeResult[SendResult]:
    """Decodifica {userMessage, assistantMessage}; ausência de qualquer um é Err."""
    if not isinstance(payload, dict):
        return Err(ShapeError("Resposta de envio não é um objeto JSON"))
    for field in _SEND_FIELDS:
        if not payload.get(field):
            return Err(ShapeError(f"Resposta sem {field}", field=field))

    result = _validate(SendResult, payload, "send")
    if isinstance(result, Err):
        return result

    user = _confirmed(result.value.user_message, "userMessage")
    if isinstance(user, Err):
        return user
    assistant = _confirmed(result.value.assistant_message, "assistantMessage")
    if isinstance(assistant, Err):
        return assistant
    return Ok(SendResult(user_message=user.value, assistant_message=assistant.value))


def decode_messages(payload: Any) -> DecodeResult[list[ChatMessage]]:
    """Decodifica a lista completa de mensagens da sessão (resync)."""
    if not isinstance(payload, list):
        return Err(ShapeError("Lista de mensagens não é um array JSON", field="messages"))

    messages: list[ChatMessage] = []
    for index, item in enumerate(payload):
        label = f"messages[{index}]"
        decoded = _validate(ChatMessage, item, label)
        if isinstance(decoded, Err):
            return decoded
        confirmed = _confirmed(decoded.value, label)
        if isinstance(confirmed, Err):
            return confirmed
        messages.append(confirmed.value)
    return Ok(messages)


def decode_tutor(payload: Any) -> DecodeResult[TutorDetails]:
    return _validate(TutorDetails, payload, "tutor")


def decode_session(payload: Any) -> DecodeResult[SessionInfo]:
    return _validate(SessionInfo, payload, "session")
