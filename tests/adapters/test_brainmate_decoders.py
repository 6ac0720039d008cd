"""Testes dos decoders de payload do backend BrainMate."""

from __future__ import annotations

from datetime import UTC

from brainmate_chat.adapters.brainmate.decoders import (
    decode_messages,
    decode_send_result,
    decode_session,
    decode_tutor,
)
from brainmate_chat.domain.messages import MessageRole
from brainmate_chat.domain.results import Err, Ok


def _wire_message(message_id, role="user", content="hi", **extra):
    return {"id": message_id, "role": role, "content": content, **extra}


class TestDecodeSendResult:
    def test_happy_path(self) -> None:
        result = decode_send_result(
            {
                "userMessage": _wire_message(10, timestamp="2025-01-01T12:00:00"),
                "assistantMessage": _wire_message(
                    11,
                    "assistant",
                    "Hello!",
                    metadata={"emotion": "happy", "needsClarification": True},
                ),
            }
        )

        assert isinstance(result, Ok)
        assert result.value.user_message.id == 10
        assert result.value.user_message.timestamp.tzinfo == UTC
        assistant = result.value.assistant_message
        assert assistant.role == MessageRole.ASSISTANT
        assert assistant.metadata.emotion == "happy"
        assert assistant.metadata.needs_clarification is True

    def test_missing_assistant_message_is_error(self) -> None:
        result = decode_send_result({"userMessage": _wire_message(10)})
        assert isinstance(result, Err)
        assert result.error.field == "assistantMessage"

    def test_null_user_message_is_error(self) -> None:
        result = decode_send_result({"userMessage": None, "assistantMessage": _wire_message(11)})
        assert isinstance(result, Err)
        assert result.error.field == "userMessage"

    def test_placeholder_id_from_server_is_rejected(self) -> None:
        result = decode_send_result(
            {"userMessage": _wire_message("temp-1"), "assistantMessage": _wire_message(11)}
        )
        assert isinstance(result, Err)
        assert result.error.field == "userMessage.id"

    def test_server_messages_are_never_optimistic(self) -> None:
        result = decode_send_result(
            {
                "userMessage": _wire_message(10, isOptimistic=True),
                "assistantMessage": _wire_message(11, "assistant"),
            }
        )
        assert isinstance(result, Ok)
        assert result.value.user_message.is_optimistic is False

    def test_non_object_payload(self) -> None:
        assert isinstance(decode_send_result(["nope"]), Err)

    def test_invalid_role(self) -> None:
        result = decode_send_result(
            {"userMessage": _wire_message(10, "robot"), "assistantMessage": _wire_message(11)}
        )
        assert isinstance(result, Err)


class TestDecodeMessages:
    def test_list_without_timestamps_is_accepted(self) -> None:
        result = decode_messages([_wire_message(1), _wire_message(2, "assistant", metadata=None)])
        assert isinstance(result, Ok)
        assert [m.id for m in result.value] == [1, 2]
        assert result.value[1].metadata.suggestions == []

    def test_non_list_is_error(self) -> None:
        result = decode_messages({"messages": []})
        assert isinstance(result, Err)
        assert result.error.field == "messages"

    def test_bad_item_reports_index(self) -> None:
        result = decode_messages([_wire_message(1), {"id": 2}])
        assert isinstance(result, Err)
        assert result.error.field is not None
        assert result.error.field.startswith("messages[1]")

    def test_boolean_id_is_rejected(self) -> None:
        assert isinstance(decode_messages([_wire_message(True)]), Err)


class TestDecodeTutorAndSession:
    def test_gated_tutor(self) -> None:
        result = decode_tutor({"id": 8, "name": "Exam Coach", "requiresPassword": True})
        assert isinstance(result, Ok)
        assert result.value.requires_password is True

    def test_session_requires_token(self) -> None:
        result = decode_session({"id": 1, "sessionToken": "", "tutorId": 7})
        assert isinstance(result, Err)

    def test_session(self) -> None:
        result = decode_session({"id": 1, "sessionToken": "tok-1", "tutorId": 7})
        assert isinstance(result, Ok)
        assert result.value.session_token == "tok-1"
