"""Serviços de conteúdo opacos (quiz, flashcards, tradução, voz).

O protocolo de chat não depende do formato interno dessas respostas: o
resultado é best-effort (ok + dict) e falhas nunca propagam para a view.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from brainmate_chat.infra.http import HttpClient, HttpError
from brainmate_chat.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class ContentResult:
    ok: bool
    data: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    status_code: int | None = None


class ContentServices:
    """Chamadas POST de geração de conteúdo."""

    def __init__(self, http: HttpClient) -> None:
        self._http = http

    async def generate_quiz(
        self, tutor_id: int, topic: str | None = None, num_questions: int = 5
    ) -> ContentResult:
        return await self._post(
            "quiz",
            f"/tutors/{tutor_id}/quiz",
            {"topic": topic, "numQuestions": num_questions},
        )

    async def generate_flashcards(
        self, tutor_id: int, topic: str | None = None, num_cards: int = 10
    ) -> ContentResult:
        return await self._post(
            "flashcards",
            f"/tutors/{tutor_id}/flashcards",
            {"topic": topic, "numCards": num_cards},
        )

    async def translate(self, text: str, target_language: str = "es") -> ContentResult:
        if not text.strip():
            return ContentResult(ok=False, error="Text is required")
        return await self._post(
            "translate", "/ai/translate", {"text": text, "targetLanguage": target_language}
        )

    async def synthesize_voice(
        self, text: str, voice: str = "alloy", speed: float = 1.0
    ) -> ContentResult:
        """Retorna {audioUrl, duration, ...} quando o backend suporta."""
        if not text.strip():
            return ContentResult(ok=False, error="Text is required")
        return await self._post(
            "voice_synthesis",
            "/ai/voice-synthesis",
            {"text": text, "voice": voice, "speed": speed},
        )

    async def _post(self, task: str, path: str, payload: dict[str, Any]) -> ContentResult:
        try:
            response = await self._http.post(path, json=payload)
            body = response.json()
        except HttpError as exc:
            logger.warning(
                "content_service_failed",
                extra={"task": task, "status_code": exc.status_code},
            )
            return ContentResult(ok=False, error=str(exc), status_code=exc.status_code)
        except ValueError:
            logger.warning("content_service_invalid_json", extra={"task": task})
            return ContentResult(ok=False, error="Resposta JSON inválida")

        if not isinstance(body, dict):
            # Quiz/flashcards podem vir como lista crua
            body = {"items": body}
        return ContentResult(ok=True, data=body, status_code=response.status_code)
