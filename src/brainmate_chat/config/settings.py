"""Configurações da aplicação via variáveis de ambiente.

Todas as configurações são carregadas de env vars com prefixo BRAINMATE_.
Nunca hardcode secrets (ex.: OPENAI_API_KEY) ou valores sensíveis.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

# -----------------------------------------------------------------------------
# Constantes da API BrainMate
# -----------------------------------------------------------------------------
DEFAULT_API_BASE_URL: str = "http://localhost:5000/api"
DEFAULT_POLL_INTERVAL_SECONDS: float = 5.0
THEME_KEY: str = "brainmate-theme"
TUTORIAL_SEEN_KEY_PREFIX: str = "tutorial_seen_"


class Settings(BaseSettings):
    """Configurações lidas do ambiente (prefixo BRAINMATE_)."""

    model_config = SettingsConfigDict(
        env_prefix="BRAINMATE_",
        case_sensitive=False,
    )

    # Aplicação
    service_name: str = "brainmate_chat"
    version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "INFO"
    log_format: str = "json"  # json | text

    # Backend REST
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout_seconds: float = 30.0
    max_retries: int = 2  # Apenas GET (resync); POST nunca é repetido
    retry_backoff_seconds: float = 1.0
    retry_backoff_max_seconds: float = 8.0
    circuit_breaker_enabled: bool = False
    circuit_breaker_fail_max: int = 3  # GETs seguidos com falha até abrir
    circuit_breaker_cooldown_seconds: float = 10.0  # Dobra a cada reabertura
    circuit_breaker_max_cooldown_seconds: float = 120.0

    # Sessão de chat
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    default_language: str = "English"
    default_mode: str = "chat"
    voice_output_enabled: bool = False

    # Preferências persistidas (tema, tutorial)
    preferences_backend: str = "memory"  # memory | file
    preferences_path: str | None = None

    # Backend de referência (api/)
    openai_enabled: bool = False  # Feature flag: fail-safe desligado
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    openai_timeout_seconds: float = 20.0
    history_window: int = 10  # Mensagens de contexto enviadas ao responder
    server_host: str = "127.0.0.1"
    server_port: int = 5000

    @property
    def is_production(self) -> bool:
        """Retorna True se ambiente é produção."""
        return self.environment.lower() in ("production", "prod")

    @property
    def is_development(self) -> bool:
        """Retorna True se ambiente é desenvolvimento."""
        return self.environment.lower() in ("development", "dev", "local")

    def validate_api_config(self) -> list[str]:
        """Valida URL base, timeouts e intervalo do poller.

        Retorna lista de erros (vazia = OK).
        """
        errors: list[str] = []
        if not self.api_base_url.startswith(("http://", "https://")):
            errors.append("BRAINMATE_API_BASE_URL deve começar com http:// ou https://")
        elif self.is_production and self.api_base_url.startswith("http://"):
            errors.append("BRAINMATE_API_BASE_URL deve usar https em production")
        if self.request_timeout_seconds <= 0:
            errors.append("BRAINMATE_REQUEST_TIMEOUT_SECONDS deve ser > 0")
        if self.max_retries < 0:
            errors.append("BRAINMATE_MAX_RETRIES não pode ser negativo")
        if self.poll_interval_seconds <= 0:
            errors.append("BRAINMATE_POLL_INTERVAL_SECONDS deve ser > 0")
        return errors

    def validate_preferences_config(self) -> list[str]:
        """Valida backend de preferências."""
        errors: list[str] = []
        backend = self.preferences_backend.lower()
        if backend not in {"memory", "file"}:
            errors.append("BRAINMATE_PREFERENCES_BACKEND inválido: use memory | file")
        if backend == "file" and not self.preferences_path:
            errors.append("BRAINMATE_PREFERENCES_BACKEND=file requer BRAINMATE_PREFERENCES_PATH")
        return errors

    def validate_responder_config(self) -> list[str]:
        """Valida configuração do responder do backend de referência."""
        errors: list[str] = []
        if self.openai_enabled and not self.openai_api_key:
            errors.append("BRAINMATE_OPENAI_ENABLED=true requer BRAINMATE_OPENAI_API_KEY")
        if self.history_window < 1:
            errors.append("BRAINMATE_HISTORY_WINDOW deve ser >= 1")
        return errors


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Retorna uma instância cacheada de Settings."""
    return Settings()
