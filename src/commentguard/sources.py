"""
Source enumerators.

A source yields (text, source_handle) pairs on every scan. It may repeat
texts already seen; the engine deduplicates by text.
"""

from typing import Any, Iterable, List, Optional, Protocol, Sequence, Tuple


class Source(Protocol):
    def items(self) -> Iterable[Tuple[str, Any]]:
        ...


class StaticSource:
    """In-memory source, handy for files, stdin and tests."""

    def __init__(self, items: Optional[Sequence[Tuple[str, Any]]] = None):
        self._items: List[Tuple[str, Any]] = list(items or [])

    @classmethod
    def from_texts(cls, texts: Iterable[str]) -> "StaticSource":
        """Build a source whose handles are 1-based positions."""
        return cls([(text, idx) for idx, text in enumerate(texts, start=1)])

    def add(self, text: str, handle: Any = None) -> None:
        self._items.append((text, handle))

    def items(self) -> List[Tuple[str, Any]]:
        return list(self._items)
