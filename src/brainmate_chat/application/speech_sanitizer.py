"""Limpeza de texto antes da síntese de voz.

Remove marcação que o sintetizador leria em voz alta:
- Links markdown viram apenas o texto do link
- Símbolos de ênfase/título (# * _ `) e citação no início da linha
- Emoji e símbolos decorativos
"""

from __future__ import annotations

import re
from re import Pattern

_PATTERNS: dict[str, Pattern[str]] = {
    # [texto](url) → texto
    "link": re.compile(r"\[([^\]]+)\]\([^)]+\)"),
    "markdown": re.compile(r"[#*_`]"),
    "quote": re.compile(r"^\s*>+\s?", re.MULTILINE),
    # Pictogramas, emoticons, transporte, símbolos diversos, dingbats e seletores
    "emoji": re.compile(
        "["
        "\U0001f000-\U0001faff"
        "\u2600-\u27bf"
        "\u2b00-\u2bff"
        "\ufe0f\u200d"
        "]"
    ),
    "whitespace": re.compile(r"\s+"),
}


def sanitize_for_speech(text: str) -> str:
    """Texto pronto para o sintetizador (pode resultar em string vazia).

    Exemplos:
        >>> sanitize_for_speech("**Ótimo!** Veja [este vídeo](https://youtu.be/x) 🎥")
        'Ótimo! Veja este vídeo'
    """
    if not text:
        return ""

    result = _PATTERNS["link"].sub(r"\1", text)
    result = _PATTERNS["quote"].sub("", result)
    result = _PATTERNS["markdown"].sub("", result)
    result = _PATTERNS["emoji"].sub("", result)
    return _PATTERNS["whitespace"].sub(" ", result).strip()
