"""Estado da caixa de composição."""

from __future__ import annotations


class Composer:
    """Texto em edição. Só é limpo após envio confirmado."""

    def __init__(self, text: str = "") -> None:
        self._text = text

    @property
    def text(self) -> str:
        return self._text

    @property
    def is_blank(self) -> bool:
        return not self._text.strip()

    def set_text(self, text: str) -> None:
        self._text = text

    def replace(self, transcript: str) -> None:
        self._text = transcript

    def append_transcript(self, transcript: str) -> None:
        """Anexa transcript ao texto existente, separado por espaço."""
        transcript = transcript.strip()
        if not transcript:
            return
        self._text = f"{self._text.rstrip()} {transcript}" if self._text.strip() else transcript

    def clear(self) -> None:
        self._text = ""
