"""
Client-side bulk processing.

BatchProcessor runs a callable over many items in chunks, pausing between
chunks to stay clear of the API rate limit, and collects failures instead of
stopping at the first one. For server-side bulk jobs see AsyncBatches.
"""

import itertools
import time
from collections.abc import Callable, Generator, Iterable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from ._logging import logger

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_CHUNK_SIZE = 50
DEFAULT_DELAY = 0.1


@dataclass(frozen=True)
class BatchError:
    """A failed item, with its position: chunk number and index inside the chunk."""

    item: Any
    error: Exception
    chunk: int
    index: int


@dataclass
class BatchResult(Generic[R]):
    successful: int = 0
    failed: int = 0
    results: list[R] = field(default_factory=list)
    errors: list[BatchError] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.successful + self.failed

    @property
    def success_rate(self) -> float:
        """Percentage of successful items (0.0 for an empty batch)."""
        return self.successful / self.total * 100 if self.total else 0.0

    def is_full_success(self) -> bool:
        return self.failed == 0

    def has_successes(self) -> bool:
        return self.successful > 0

    def has_errors(self) -> bool:
        return self.failed > 0

    @property
    def error_messages(self) -> list[str]:
        return [str(error.error) for error in self.errors]

    def to_dict(self) -> dict[str, Any]:
        """Summary suitable for logging."""
        return {
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "success_rate": round(self.success_rate, 2),
            "errors": [
                {"message": str(error.error), "chunk": error.chunk, "index": error.index}
                for error in self.errors
            ],
        }


def _chunks(items: Iterable[T], size: int) -> Generator[list[T], None, None]:
    iterator = iter(items)
    while batch := list(itertools.islice(iterator, size)):
        yield batch


class BatchProcessor:
    """
    Usage:
        processor = BatchProcessor(chunk_size=25, delay=0.5)
        result = processor.process(ids, client.subscriptions.activate)
        if result.has_errors():
            logger.error("Activation failed", extra=result.to_dict())
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE, delay: float = DEFAULT_DELAY) -> None:
        self.chunk_size = max(1, chunk_size)
        self.delay = max(0.0, delay)

    def _sleep_between_chunks(self) -> None:
        if self.delay > 0:
            time.sleep(self.delay)

    def process(
        self,
        items: Iterable[T],
        processor: Callable[[T], R],
        error_handler: Callable[[T, Exception], None] | None = None,
    ) -> BatchResult[R]:
        """
        Applies ``processor`` to every item. A failing item is recorded, passed to
        ``error_handler`` if given, and processing continues with the next one.
        """
        result: BatchResult[R] = BatchResult()

        for chunk_index, chunk in enumerate(_chunks(items, self.chunk_size)):
            if chunk_index > 0:
                self._sleep_between_chunks()

            for item_index, item in enumerate(chunk):
                try:
                    result.results.append(processor(item))
                    result.successful += 1
                except Exception as e:
                    result.failed += 1
                    result.errors.append(BatchError(item, e, chunk_index, item_index))
                    logger.warning(
                        "Batch item failed",
                        extra={"chunk": chunk_index, "index": item_index, "error": str(e)},
                    )
                    if error_handler is not None:
                        error_handler(item, e)

        logger.info(
            "Batch finished",
            extra={"successful": result.successful, "failed": result.failed},
        )
        return result

    def iter_process(
        self, items: Iterable[T], processor: Callable[[T], R]
    ) -> Generator[R | BatchError, None, None]:
        """Like process(), but yields each result (or BatchError) as soon as it is ready."""
        for chunk_index, chunk in enumerate(_chunks(items, self.chunk_size)):
            if chunk_index > 0:
                self._sleep_between_chunks()

            for item_index, item in enumerate(chunk):
                try:
                    yield processor(item)
                except Exception as e:
                    yield BatchError(item, e, chunk_index, item_index)

    def map(self, items: Iterable[T], mapper: Callable[[T], R]) -> list[R]:
        """Results of the successful items only."""
        return self.process(items, mapper).results
