"""Prompts do tutor para o responder do backend de referência.

Responsabilidades:
- Montar o system prompt (assunto, idioma, modo, conteúdo do tutor)
- Manter a instrução de resposta em JSON estruturado
"""

from __future__ import annotations

from typing import Any

_CONTENT_LIMIT = 4000

_MODE_INSTRUCTIONS: dict[str, str] = {
    "chat": "Converse naturally, check understanding with short questions.",
    "lecture": "Give a structured mini-lecture with clear sections.",
    "quiz": "Ask one multiple-choice question at a time and wait for the answer.",
    "examples": "Teach through concrete, worked examples.",
    "flashcards": "Answer with short question/answer pairs suitable for flashcards.",
    "summary": "Summarize the topic in a few concise bullet points.",
}


def mode_instruction(mode: str) -> str:
    return _MODE_INSTRUCTIONS.get(mode, _MODE_INSTRUCTIONS["chat"])


def build_system_prompt(
    subject: str,
    content_text: str,
    mode: str,
    language: str,
) -> str:
    """System prompt do tutor; conteúdo truncado para caber no contexto."""
    language_rule = (
        f"You MUST respond entirely in {language}, including suggestions."
        if language and language != "English"
        else ""
    )
    return f"""You are an expert AI tutor specialized in {subject or "your subject area"}.
Only answer questions related to {subject or "your subject"}; politely redirect otherwise.
{language_rule}

Reference content (explain in your own words, do not recite):
{content_text[:_CONTENT_LIMIT]}

Mode: {mode}. {mode_instruction(mode)}

Respond with valid JSON only, in this exact format:
{{
  "content": "your answer",
  "emotion": "neutral",
  "suggestions": ["follow-up question"],
  "needsClarification": false
}}
"""


def build_messages(
    system_prompt: str,
    history: list[dict[str, Any]],
    user_input: str,
) -> list[dict[str, str]]:
    """Mensagens no formato chat.completions (system + histórico + usuário)."""
    messages = [{"role": "system", "content": system_prompt}]
    messages.extend(
        {"role": str(item["role"]), "content": str(item["content"])} for item in history
    )
    messages.append({"role": "user", "content": user_input})
    return messages
