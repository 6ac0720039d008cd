"""Testes da tabela de transições da negociação de sessão."""

from __future__ import annotations

import pytest

from brainmate_chat.domain.session import (
    NON_TERMINAL_STATES,
    TERMINAL_STATES,
    TRANSITIONS,
    NegotiationEvent,
    NegotiationState,
    validate_transition,
)

S = NegotiationState
E = NegotiationEvent


class TestValidTransitions:
    @pytest.mark.parametrize(
        ("state", "event", "expected"),
        [
            (S.UNINITIALIZED, E.TUTOR_OPEN, S.NEGOTIATING),
            (S.UNINITIALIZED, E.TUTOR_GATED, S.AWAITING_PASSWORD),
            (S.UNINITIALIZED, E.TUTOR_NOT_FOUND, S.UNAVAILABLE),
            (S.AWAITING_PASSWORD, E.PASSWORD_REJECTED, S.AWAITING_PASSWORD),
            (S.AWAITING_PASSWORD, E.PASSWORD_ACCEPTED, S.NEGOTIATING),
            (S.NEGOTIATING, E.SESSION_CREATED, S.ACTIVE),
            (S.NEGOTIATING, E.SESSION_CREATION_FAILED, S.SESSION_FAILED),
            (S.SESSION_FAILED, E.RETRY_REQUESTED, S.NEGOTIATING),
        ],
    )
    def test_table_entries(self, state, event, expected) -> None:
        ok, next_state, reason = validate_transition(state, event)
        assert ok is True
        assert next_state == expected
        assert reason == ""

    @pytest.mark.parametrize("state", sorted(NON_TERMINAL_STATES))
    def test_every_live_state_can_terminate(self, state) -> None:
        ok, next_state, _ = validate_transition(state, E.TERMINATE)
        assert ok is True
        assert next_state == S.TERMINATED


class TestInvalidTransitions:
    @pytest.mark.parametrize("state", sorted(TERMINAL_STATES))
    def test_terminal_states_have_no_exit(self, state) -> None:
        for event in NegotiationEvent:
            ok, next_state, reason = validate_transition(state, event)
            assert ok is False
            assert next_state is None
            assert "Terminal" in reason

    def test_active_cannot_renegotiate(self) -> None:
        ok, _, reason = validate_transition(S.ACTIVE, E.SESSION_CREATED)
        assert ok is False
        assert "No transition" in reason

    def test_password_only_in_awaiting_state(self) -> None:
        ok, _, _ = validate_transition(S.UNINITIALIZED, E.PASSWORD_ACCEPTED)
        assert ok is False

    def test_no_automatic_retry_from_negotiating(self) -> None:
        ok, _, _ = validate_transition(S.NEGOTIATING, E.RETRY_REQUESTED)
        assert ok is False


def test_active_is_reachable_only_from_negotiating() -> None:
    sources = {state for (state, _), target in TRANSITIONS.items() if target == S.ACTIVE}
    assert sources == {S.NEGOTIATING}
