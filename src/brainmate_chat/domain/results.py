"""Resultado tagueado da decodificação na fronteira com o backend."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from brainmate_chat.domain.errors import ShapeError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Payload válido e decodificado."""

    value: T


@dataclass(frozen=True)
class Err:
    """Payload rejeitado pela validação."""

    error: ShapeError


DecodeResult = Ok[T] | Err
