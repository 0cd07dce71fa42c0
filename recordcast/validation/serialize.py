"""Reference-preserving JSON codec for the ``serialize`` type.

jsonpickle encodes repeated and self-referencing containers as
``{"py/id": n}`` markers, so cyclic graphs survive a round trip.
Decoding only accepts the structural tags plain data produces; payloads
carrying object, function or reduce tags are rejected before jsonpickle
sees them.
"""
from __future__ import annotations

import json
from typing import Any, Protocol, runtime_checkable

import jsonpickle

ALLOWED_TAGS = frozenset({"py/id", "py/tuple", "py/set"})


@runtime_checkable
class Codec(Protocol):
    """Structured encode/decode provider. Both directions may raise."""

    def encode(self, value: Any) -> str: ...

    def decode(self, payload: str) -> Any: ...


class UnsafePayloadError(ValueError):
    pass


def _check_tags(node: Any, depth: int = 0) -> None:
    if depth > 200:
        raise UnsafePayloadError("Payload nested too deeply")
    if isinstance(node, dict):
        for key, child in node.items():
            if key.startswith("py/") and key not in ALLOWED_TAGS:
                raise UnsafePayloadError(f"Tag not allowed in payload: {key}")
            _check_tags(child, depth + 1)
    elif isinstance(node, list):
        for child in node:
            _check_tags(child, depth + 1)


class CyclicJSONCodec:
    """jsonpickle-backed codec for plain data graphs (dict, list, tuple, set, scalars)."""

    __slots__ = ()

    def encode(self, value: Any) -> str:
        return jsonpickle.encode(value, make_refs=True)

    def decode(self, payload: str) -> Any:
        if not isinstance(payload, str):
            raise TypeError(f"Expected str payload, got {type(payload).__name__}")
        _check_tags(json.loads(payload))
        return jsonpickle.decode(payload, safe=True)


DEFAULT_CODEC = CyclicJSONCodec()
