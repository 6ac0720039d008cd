"""Camada de infraestrutura: transporte HTTP e armazenamento local.

- HTTP: HttpClient, create_http_client (retry e circuit breaker só em GET; POST nunca é bloqueado)
- Preferências: InMemoryKeyValueStore, JsonFileKeyValueStore, create_key_value_store

Uso típico:
    from brainmate_chat.infra import create_http_client, create_key_value_store

Infraestrutura não decide regra de negócio; logs sem conteúdo de mensagens.
"""

from brainmate_chat.infra.circuit_breaker import BreakerState, CircuitBreaker, CircuitBreakerConfig
from brainmate_chat.infra.http import (
    HttpClient,
    HttpClientConfig,
    HttpError,
    create_http_client,
)
from brainmate_chat.infra.preferences_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    create_key_value_store,
)

__all__ = [
    "BreakerState",
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "HttpClient",
    "HttpClientConfig",
    "HttpError",
    "create_http_client",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "create_key_value_store",
]
