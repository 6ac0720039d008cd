"""Fábrica da aplicação FastAPI (backend de referência do chat)."""

from __future__ import annotations

from fastapi import FastAPI

from brainmate_chat.ai.tutor_responder import create_tutor_responder
from brainmate_chat.api.routes import router
from brainmate_chat.config.settings import Settings, get_settings
from brainmate_chat.infra.chat_repository import InMemoryChatRepository, seed_demo_tutors
from brainmate_chat.observability.correlation import CorrelationIdMiddleware
from brainmate_chat.observability.logging import configure_logging, get_logger

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    repository: InMemoryChatRepository | None = None,
    seed_demo: bool = False,
) -> FastAPI:
    """Cria a aplicação FastAPI."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.service_name, settings.log_format)

    validation_errors: list[str] = []
    validation_errors.extend(settings.validate_responder_config())

    if validation_errors:
        error_msg = "; ".join(validation_errors)
        raise ValueError(f"Configuração inválida: {error_msg}")

    app = FastAPI(title=settings.service_name, version=settings.version)
    app.add_middleware(CorrelationIdMiddleware)
    app.include_router(router)

    if repository is None:
        repository = InMemoryChatRepository()
        if seed_demo:
            seed_demo_tutors(repository)

    app.state.settings = settings
    app.state.repository = repository
    app.state.responder = create_tutor_responder(settings)

    logger.info(
        "app_created",
        extra={"environment": settings.environment, "llm": app.state.responder.uses_llm},
    )
    return app
