"""Generation tracking for dispatch batches.

Every dispatch opens a batch with a new, strictly increasing generation id.
Opening a batch makes every earlier one stale; stale batches keep running but
their results are dropped before publication.
"""

from dataclasses import dataclass, field

from src.contracts.discover_v1 import Category, SearchQuery
from src.core.logger import logger


@dataclass
class DispatchBatch:
    generation: int
    query: SearchQuery
    pending: set[Category] = field(default_factory=set)


class InvalidationController:
    """Sole owner of the generation counter and the in-flight batch.

    All methods run on the event loop thread, so no locking is needed; only
    this object writes the counter.
    """

    def __init__(self) -> None:
        self._generation = 0
        self._batch: DispatchBatch | None = None

    @property
    def current_generation(self) -> int:
        return self._generation

    @property
    def in_flight(self) -> DispatchBatch | None:
        return self._batch

    def begin_batch(
        self, query: SearchQuery, sources: list[Category] | None = None
    ) -> int:
        self._generation += 1
        if self._batch is not None:
            logger.debug(
                "Invalidation: batch #%s superseded by #%s",
                self._batch.generation,
                self._generation,
            )
        self._batch = DispatchBatch(
            generation=self._generation,
            query=query,
            pending=set(sources or []),
        )
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def settle(self, generation: int, source: Category) -> None:
        """Mark one source of the batch as settled. No-op for stale batches."""
        if self._batch is not None and self._batch.generation == generation:
            self._batch.pending.discard(source)

    def complete(self, generation: int) -> None:
        if self._batch is not None and self._batch.generation == generation:
            self._batch = None

    def invalidate(self) -> int:
        """Make every in-flight batch stale without starting a new one."""
        self._generation += 1
        self._batch = None
        return self._generation
