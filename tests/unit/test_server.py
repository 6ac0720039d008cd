"""Testes da entrada uvicorn do backend de referência."""

from __future__ import annotations

import pytest

from brainmate_chat.api.server import main
from brainmate_chat.config.settings import Settings

uvicorn = pytest.importorskip("uvicorn")


def test_main_runs_seeded_app_on_configured_address(monkeypatch) -> None:
    calls: list[dict] = []

    def fake_run(app, **kwargs) -> None:
        calls.append({"app": app, **kwargs})

    monkeypatch.setattr(uvicorn, "run", fake_run)

    main(Settings(log_format="text", server_host="0.0.0.0", server_port=8080))

    assert len(calls) == 1
    assert calls[0]["host"] == "0.0.0.0"
    assert calls[0]["port"] == 8080
    assert calls[0]["log_config"] is None
    # Tutores de demonstração disponíveis
    assert calls[0]["app"].state.repository.get_tutor(1) is not None
