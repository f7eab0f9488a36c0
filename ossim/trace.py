from __future__ import annotations

from typing import Generic, Iterable, List, Optional, Tuple, TypeVar

T = TypeVar("T")


class TraceRecorder(Generic[T]):
    """
    Ordered, append-only record of the decisions an engine makes.

    Engines append entries while they simulate and call :meth:`freeze` once at
    the end; the frozen tuple is what callers get back. Appending after the
    trace is frozen is a programming error.
    """

    def __init__(self) -> None:
        self._entries: List[T] = []
        self._frozen: Optional[Tuple[T, ...]] = None

    def append(self, entry: T) -> None:
        if self._frozen is not None:
            raise RuntimeError("trace is already frozen")
        self._entries.append(entry)

    def extend(self, entries: Iterable[T]) -> None:
        for entry in entries:
            self.append(entry)

    @property
    def last(self) -> Optional[T]:
        return self._entries[-1] if self._entries else None

    @property
    def frozen(self) -> bool:
        return self._frozen is not None

    def freeze(self) -> Tuple[T, ...]:
        if self._frozen is None:
            self._frozen = tuple(self._entries)
        return self._frozen

    def __len__(self) -> int:
        return len(self._entries)
