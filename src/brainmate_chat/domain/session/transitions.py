"""Tabela de transições da negociação de sessão.

TRANSITIONS[(estado_atual, evento)] = próximo_estado. Validação pura, sem side effects.
"""

from __future__ import annotations

from brainmate_chat.domain.session.events import NegotiationEvent
from brainmate_chat.domain.session.states import (
    NON_TERMINAL_STATES,
    TERMINAL_STATES,
    NegotiationState,
)

S = NegotiationState
E = NegotiationEvent

TRANSITIONS: dict[tuple[NegotiationState, NegotiationEvent], NegotiationState] = {
    # === UNINITIALIZED → ... ===
    (S.UNINITIALIZED, E.TUTOR_OPEN): S.NEGOTIATING,
    (S.UNINITIALIZED, E.TUTOR_GATED): S.AWAITING_PASSWORD,
    (S.UNINITIALIZED, E.TUTOR_NOT_FOUND): S.UNAVAILABLE,
    (S.UNINITIALIZED, E.TUTOR_LOAD_FAILED): S.UNINITIALIZED,
    # === AWAITING_PASSWORD → ... ===
    (S.AWAITING_PASSWORD, E.PASSWORD_REJECTED): S.AWAITING_PASSWORD,
    (S.AWAITING_PASSWORD, E.PASSWORD_ACCEPTED): S.NEGOTIATING,
    (S.AWAITING_PASSWORD, E.TUTOR_NOT_FOUND): S.UNAVAILABLE,
    # === NEGOTIATING → ... ===
    (S.NEGOTIATING, E.SESSION_CREATED): S.ACTIVE,
    (S.NEGOTIATING, E.SESSION_CREATION_FAILED): S.SESSION_FAILED,
    # === SESSION_FAILED → ... (somente retry manual) ===
    (S.SESSION_FAILED, E.RETRY_REQUESTED): S.NEGOTIATING,
}

# Qualquer estado não terminal pode ser encerrado
for _state in NON_TERMINAL_STATES:
    TRANSITIONS[(_state, E.TERMINATE)] = S.TERMINATED


def validate_transition(
    current_state: NegotiationState, event: NegotiationEvent
) -> tuple[bool, NegotiationState | None, str]:
    """Valida se uma transição é permitida.

    Retorna:
    - (True, next_state, ""): transição válida
    - (False, None, motivo): transição inválida

    Nunca lança exceção; apenas valida.
    """
    if current_state in TERMINAL_STATES:
        return False, None, f"Terminal state {current_state} has no transitions"

    next_state = TRANSITIONS.get((current_state, event))
    if next_state is None:
        return False, None, f"No transition from {current_state} on event {event}"
    return True, next_state, ""
