"""Identifier strategies.

Storage layers generate identifiers for new records; the ``id`` type only
parses an identifier that has already been chosen. Strategies may be
synchronous or return an awaitable.
"""
from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from typing import Any, Awaitable, Mapping, Protocol, Union, runtime_checkable

from recordcast.core.config import get_settings


@runtime_checkable
class IdStrategy(Protocol):
    def make_id(self, record: Mapping[str, Any]) -> Union[Any, Awaitable[Any]]: ...


@dataclass(frozen=True, slots=True)
class RandomIdStrategy:
    """Random non-negative integer below ``upper_bound``.

    Good enough for tests and in-memory stores, not for anything that
    needs uniqueness guarantees.
    """
    upper_bound: int = field(default_factory=lambda: get_settings().ID_UPPER_BOUND)

    def make_id(self, record: Mapping[str, Any]) -> int:
        return secrets.randbelow(self.upper_bound)
