from __future__ import annotations

from collections.abc import Iterable
from typing import Generic, TypeVar


T = TypeVar("T")


class Lookahead(Generic[T]):
    """Single-slot buffer over a forward-only iterable.

    The first item is pulled on construction, so ``peek()`` is always ready.
    ``None`` marks the end of the underlying sequence, so the iterable must
    not itself yield ``None``.
    """

    def __init__(self, items: Iterable[T]) -> None:
        self._iter = iter(items)
        self._peek: T | None = None
        self._fill()

    def _fill(self) -> None:
        self._peek = next(self._iter, None)

    def peek(self) -> T | None:
        return self._peek

    def advance(self) -> T | None:
        item = self._peek
        self._fill()
        return item

    def at_end(self) -> bool:
        return self._peek is None
