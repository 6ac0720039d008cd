"""Circuit breaker do resync.

Só métodos idempotentes (GET por padrão) passam pelo breaker. O envio de
mensagem e a criação de sessão fazem uma única tentativa e nunca são
bloqueados nem contabilizados aqui.

Após `fail_max` GETs seguidos com falha transitória o circuito abre e os
GETs falham rápido durante o cool-down. Quando o cool-down expira o próximo
GET passa; se ele falhar de novo o circuito reabre na hora com o cool-down
dobrado (até `max_cooldown_seconds`). Qualquer resposta do servidor,
inclusive 4xx, zera o histórico.

Roda em um único event loop: sem lock.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum


class BreakerState(StrEnum):
    CLOSED = "closed"
    OPEN = "open"


@dataclass(frozen=True)
class CircuitBreakerConfig:
    """Configuração do breaker (desabilitado por padrão)."""

    enabled: bool = False
    fail_max: int = 3
    cooldown_seconds: float = 10.0
    max_cooldown_seconds: float = 120.0
    guarded_methods: frozenset[str] = frozenset({"GET"})


class CircuitBreaker:
    def __init__(
        self,
        config: CircuitBreakerConfig,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._config = config
        self._clock = clock or time.monotonic
        self._streak = 0
        self._trips = 0
        self._open_until: float | None = None

    @property
    def state(self) -> BreakerState:
        if self._open_until is not None and self._clock() < self._open_until:
            return BreakerState.OPEN
        return BreakerState.CLOSED

    @property
    def failure_streak(self) -> int:
        return self._streak

    @property
    def trips(self) -> int:
        """Aberturas desde a última resposta do servidor."""
        return self._trips

    @property
    def retry_after(self) -> float:
        """Segundos até o próximo GET ser permitido (0 se fechado)."""
        if self.state == BreakerState.CLOSED or self._open_until is None:
            return 0.0
        return self._open_until - self._clock()

    def guards(self, method: str) -> bool:
        return self._config.enabled and method.upper() in self._config.guarded_methods

    def allow(self, method: str) -> bool:
        if not self.guards(method):
            return True
        return self.state == BreakerState.CLOSED

    def record_response(self, method: str) -> None:
        """Servidor respondeu (2xx ou 4xx): alcançável de novo."""
        if not self.guards(method):
            return
        self._streak = 0
        self._trips = 0
        self._open_until = None

    def record_failure(self, method: str) -> BreakerState:
        """Falha transitória (rede, timeout, 5xx) em método protegido."""
        if not self.guards(method):
            return self.state

        self._streak += 1
        # Depois de uma abertura, uma falha já reabre
        if self._trips > 0 or self._streak >= self._config.fail_max:
            self._trip()
        return self.state

    def _trip(self) -> None:
        self._trips += 1
        cooldown = self._config.cooldown_seconds * 2 ** (self._trips - 1)
        self._open_until = self._clock() + min(cooldown, self._config.max_cooldown_seconds)
        self._streak = 0
