"""Index slicing for batched writes."""

from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class Batch:
    """Inclusive index range ``[i, j]`` into a sequence."""

    i: int
    j: int

    @property
    def size(self) -> int:
        return self.j - self.i + 1

    def slice(self) -> slice:
        return slice(self.i, self.j + 1)


class Batcher:
    """Yield contiguous batches covering ``[0, length - 1]`` exactly once.

    Every batch holds at most ``batch_size`` items; only the last one may be
    smaller. A non-positive ``length`` or ``batch_size`` yields no batches.

    Calling :meth:`batch` after :meth:`has_next` turned false returns
    ``Batch(0, 0)`` rather than raising, so callers must check first.
    """

    def __init__(self, length: int, batch_size: int) -> None:
        self._length = length
        self._batch_size = batch_size
        self._i = 0
        self._j = min(batch_size - 1, length - 1)
        self._has_next = batch_size > 0 and length > 0

    def has_next(self) -> bool:
        return self._has_next

    def batch(self) -> Batch:
        if not self._has_next:
            return Batch(0, 0)

        current = Batch(self._i, self._j)

        self._i = self._j + 1
        self._j = min(self._j + self._batch_size, self._length - 1)
        if self._i > self._length - 1:
            self._has_next = False

        return current

    def __iter__(self) -> Iterator[Batch]:
        while self.has_next():
            yield self.batch()
