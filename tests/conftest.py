from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from brainmate_chat.adapters.brainmate.client import BrainMateApiClient
from brainmate_chat.api.app import create_app
from brainmate_chat.config.settings import Settings, get_settings
from brainmate_chat.infra.chat_repository import InMemoryChatRepository
from tests.helpers.builders import (
    GATED_TUTOR_ID,
    OPEN_TUTOR_ID,
    TUTOR_PASSWORD,
    make_session,
    make_tutor,
)
from tests.helpers.fake_speech import FakeRecognizer, FakeSynthesizer


@pytest.fixture()
def api() -> AsyncMock:
    """BrainMateApiClient falso: tutor aberto e sessão tok-1 por padrão."""
    mock = AsyncMock(spec=BrainMateApiClient)
    mock.get_tutor.return_value = make_tutor()
    mock.create_session.return_value = make_session()
    mock.list_messages.return_value = []
    return mock


@pytest.fixture()
def synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer()


@pytest.fixture()
def recognizer() -> FakeRecognizer:
    return FakeRecognizer()


# -----------------------------------------------------------------------------
# Backend de referência
# -----------------------------------------------------------------------------
@pytest.fixture()
def settings() -> Settings:
    return Settings(
        api_base_url="http://testserver/api",
        log_format="text",
        poll_interval_seconds=60.0,
        max_retries=0,
    )


@pytest.fixture()
def repository() -> InMemoryChatRepository:
    repo = InMemoryChatRepository()
    repo.add_tutor(
        name="Biology Buddy",
        subject="Biology",
        content=["Photosynthesis happens in chloroplasts."],
        tutor_id=OPEN_TUTOR_ID,
    )
    repo.add_tutor(
        name="Exam Coach",
        subject="History",
        password=TUTOR_PASSWORD,
        content=["The French Revolution began in 1789."],
        tutor_id=GATED_TUTOR_ID,
    )
    return repo


@pytest.fixture()
def app(settings: Settings, repository: InMemoryChatRepository):
    return create_app(settings, repository=repository)


@pytest.fixture()
def client(app):
    get_settings.cache_clear()
    with TestClient(app) as test_client:
        yield test_client
