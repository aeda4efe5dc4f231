"""Fixed-size buffering of normalized records ahead of bulk storage."""

import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000

T = TypeVar("T")


class BatchWriter(Generic[T]):
    """Accumulate records and hand them to a bulk store in fixed-size batches.

    A batch is flushed as soon as the buffer reaches ``batch_size``. When used
    as an async context manager the remainder is flushed on a clean exit only;
    if the block raises (including on cancellation) the pending batch is
    discarded and batches already stored are left untouched.

    Store failures are never caught here.
    """

    def __init__(
        self,
        store: Callable[[list[T]], Awaitable[Any]],
        batch_size: int = DEFAULT_BATCH_SIZE,
        name: str = "records",
    ):
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self._store = store
        self.batch_size = batch_size
        self.name = name
        self._buffer: list[T] = []
        self.batches_flushed = 0
        self.records_flushed = 0

    def __len__(self) -> int:
        return len(self._buffer)

    async def add(self, item: T) -> None:
        self._buffer.append(item)
        if len(self._buffer) >= self.batch_size:
            await self.flush()

    async def extend(self, items: Iterable[T]) -> None:
        """Append items in order, flushing whenever the threshold is reached."""
        for item in items:
            await self.add(item)

    async def flush(self) -> None:
        if not self._buffer:
            return

        batch = list(self._buffer)
        await self._store(batch)
        self._buffer.clear()

        self.batches_flushed += 1
        self.records_flushed += len(batch)
        logger.debug(
            "Flushed %d %s (batch %d, %d total)",
            len(batch),
            self.name,
            self.batches_flushed,
            self.records_flushed,
        )

    async def __aenter__(self) -> "BatchWriter[T]":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is None:
            await self.flush()
        elif self._buffer:
            logger.debug("Discarding %d unflushed %s", len(self._buffer), self.name)
            self._buffer.clear()
