"""Canonical JSON encoding shared by the transport and the cache."""

from functools import lru_cache
from typing import Any, Type, TypeVar

from pydantic import TypeAdapter

T = TypeVar("T")


@lru_cache(maxsize=None)
def type_adapter(tp: Any) -> TypeAdapter:
    return TypeAdapter(tp)


def encode(value: Any, kind: Any) -> bytes:
    # by_alias keeps the wire field names, so cached bytes decode like API bodies
    return type_adapter(kind).dump_json(value, by_alias=True)


def decode_json(data: bytes, kind: Type[T]) -> T:
    """Raises ``pydantic.ValidationError`` on any mismatch."""
    return type_adapter(kind).validate_json(data)
