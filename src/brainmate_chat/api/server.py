"""Sobe o backend de referência com uvicorn (dev local, tutores de demonstração).

Uso:
    brainmate-server
    python -m brainmate_chat.api.server

Requer o extra `server` (uvicorn).
"""

from __future__ import annotations

from brainmate_chat.api.app import create_app
from brainmate_chat.config.settings import Settings, get_settings
from brainmate_chat.observability.logging import get_logger

logger = get_logger(__name__)


def main(settings: Settings | None = None) -> None:
    import uvicorn

    settings = settings or get_settings()
    app = create_app(settings, seed_demo=True)
    logger.info(
        "server_starting",
        extra={"host": settings.server_host, "port": settings.server_port},
    )
    # log_config=None mantém o logging JSON configurado por create_app
    uvicorn.run(app, host=settings.server_host, port=settings.server_port, log_config=None)


if __name__ == "__main__":
    main()
