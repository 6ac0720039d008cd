"""Responder do tutor (backend de referência).

OpenAI quando habilitado (BRAINMATE_OPENAI_ENABLED); qualquer falha da API,
timeout ou resposta não parseável cai no fallback determinístico, de modo
que POST /chat/message sempre devolve o par user/assistant.
"""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING, Any

from openai import APIError, APITimeoutError, AsyncOpenAI
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from brainmate_chat.ai import tutor_prompts
from brainmate_chat.domain.messages import MessageResources
from brainmate_chat.observability.logging import get_logger

if TYPE_CHECKING:
    from brainmate_chat.config.settings import Settings

logger: logging.Logger = get_logger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_EMPTY_REPLY = "I couldn't process your request. Could you please rephrase it?"


class TutorReply(BaseModel):
    """Resposta do tutor antes de virar mensagem do assistente."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    content: str = Field(min_length=1)
    emotion: str = "neutral"
    suggestions: list[str] = Field(default_factory=list)
    needs_clarification: bool = False
    resources: MessageResources | None = None

    def metadata(self) -> dict[str, Any]:
        """Metadata no formato do wire (camelCase)."""
        return self.model_dump(by_alias=True, exclude={"content"}, exclude_none=True)


def parse_reply(raw_text: str) -> TutorReply:
    """Extrai o objeto JSON da resposta; texto livre vira o próprio conteúdo."""
    text = raw_text.strip()
    match = _JSON_OBJECT.search(text)
    if match:
        try:
            return TutorReply.model_validate(json.loads(match.group(0)))
        except (json.JSONDecodeError, ValidationError):
            logger.debug("tutor_reply_not_json")
    return TutorReply(content=text or _EMPTY_REPLY)


def fallback_reply(subject: str, mode: str, user_input: str) -> TutorReply:
    """Resposta determinística (sem LLM): mesma entrada = mesma saída."""
    topic = " ".join(user_input.split()[:8])
    area = subject or "this subject"
    return TutorReply(
        content=f"Let's work on \"{topic}\" in {area}. {tutor_prompts.mode_instruction(mode)}",
        emotion="neutral",
        suggestions=[f"Can you give me an example about {area}?", "Can you summarize that?"],
        needs_clarification=False,
    )


class TutorResponder:
    """Gera a resposta do assistente para uma mensagem do aluno."""

    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        model: str = "gpt-4o-mini",
        timeout_seconds: float = 20.0,
    ) -> None:
        self._client = client
        self._model = model
        self._timeout = timeout_seconds

    @property
    def uses_llm(self) -> bool:
        return self._client is not None

    async def respond(
        self,
        subject: str,
        content_text: str,
        user_input: str,
        history: list[dict[str, Any]],
        mode: str = "chat",
        language: str = "English",
    ) -> TutorReply:
        if self._client is None:
            return fallback_reply(subject, mode, user_input)

        system_prompt = tutor_prompts.build_system_prompt(subject, content_text, mode, language)
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=tutor_prompts.build_messages(system_prompt, history, user_input),
                temperature=0.8,
                max_tokens=2000,
                timeout=self._timeout,
            )
        except (APIError, APITimeoutError) as exc:
            logger.warning(
                "tutor_response_error",
                extra={"error_type": type(exc).__name__, "mode": mode},
            )
            return fallback_reply(subject, mode, user_input)

        return parse_reply(response.choices[0].message.content or "")


def create_tutor_responder(settings: Settings) -> TutorResponder:
    """Factory: OpenAI só com flag ligada e chave presente."""
    if settings.openai_enabled and settings.openai_api_key:
        client = AsyncOpenAI(api_key=settings.openai_api_key)
        logger.info("tutor_responder_openai", extra={"model": settings.openai_model})
        return TutorResponder(client, settings.openai_model, settings.openai_timeout_seconds)
    logger.info("tutor_responder_fallback")
    return TutorResponder()
