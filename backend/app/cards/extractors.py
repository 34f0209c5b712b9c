"""
Ordered extractor chains.

An extractor is a pure function taking the source object and returning a value,
or None when it has nothing to offer. A chain is evaluated in order and the first
non-None result wins, so the priority of every field alias stays visible in one
list and each extractor can be tested on its own.
"""
from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Optional, TypeVar

T = TypeVar("T")

Extractor = Callable[[Any], Optional[T]]


def first_match(extractors: Iterable[Extractor], obj: Any) -> Optional[T]:
    for extract in extractors:
        value = extract(obj)
        if value is not None:
            return value
    return None


def get_path(obj: Any, *path: str) -> Any:
    """Walk nested mappings; None as soon as a step is missing or not a mapping."""
    cur = obj
    for key in path:
        if not isinstance(cur, Mapping):
            return None
        cur = cur.get(key)
    return cur


def text_field(*path: str) -> Extractor[str]:
    """Non-empty string at path, else None."""

    def extract(obj: Any) -> Optional[str]:
        value = get_path(obj, *path)
        if isinstance(value, str) and value.strip():
            return value
        return None

    return extract


def list_field(*path: str) -> Extractor[list]:
    def extract(obj: Any) -> Optional[list]:
        value = get_path(obj, *path)
        return value if isinstance(value, list) else None

    return extract


def mapping_field(*path: str) -> Extractor[Mapping]:
    def extract(obj: Any) -> Optional[Mapping]:
        value = get_path(obj, *path)
        return value if isinstance(value, Mapping) else None

    return extract
