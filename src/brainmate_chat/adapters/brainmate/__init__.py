"""Adapter REST do backend BrainMate (tutores, sessões, mensagens, conteúdo)."""

from brainmate_chat.adapters.brainmate.client import BrainMateApiClient
from brainmate_chat.adapters.brainmate.content import ContentResult, ContentServices

__all__ = ["BrainMateApiClient", "ContentResult", "ContentServices"]
