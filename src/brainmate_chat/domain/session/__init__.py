"""Negociação de sessão: estados, eventos e transições.

Exporta:
- NegotiationState: estados do ciclo de vida
- NegotiationEvent: eventos observados
- validate_transition: validador puro
"""

from brainmate_chat.domain.session.events import NegotiationEvent
from brainmate_chat.domain.session.states import (
    NON_TERMINAL_STATES,
    TERMINAL_STATES,
    NegotiationState,
)
from brainmate_chat.domain.session.transitions import TRANSITIONS, validate_transition

__all__ = [
    "NegotiationState",
    "NegotiationEvent",
    "validate_transition",
    "TRANSITIONS",
    "TERMINAL_STATES",
    "NON_TERMINAL_STATES",
]
