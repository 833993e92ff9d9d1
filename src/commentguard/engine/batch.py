"""
Escalation queue and batch processor.

Pending escalations are drained by a single asyncio task in bounded
batches. Each batch is dispatched concurrently; every item falls back to
Suspicious on failure, so one bad item never aborts its batch. Results are
reconciled into the record cache as escalation results, which makes any
result that outlived a reset a no-op.

The loop stops once the capability is no longer ready. Pending items stay
queued, and results of a batch that was in flight at that moment are
discarded so fallback verdicts never overwrite keyword verdicts.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, List, Optional, Set

from ..capability.base import SessionProvider
from ..classify.hybrid import classify_with_external
from ..classify.rules import Tier
from .cache import Record, RecordCache, ReconcileOutcome


logger = logging.getLogger(__name__)


DEFAULT_BATCH_SIZE = 5
DEFAULT_INTER_BATCH_DELAY_MS = 100


@dataclass
class QueueItem:
    """A record awaiting confirmation by the external classifier."""
    fingerprint: str
    source_handle: Any = None
    epoch: int = 0


class EscalationQueue:
    """FIFO of pending escalations; a fingerprint is queued at most once."""

    def __init__(self):
        self._items: Deque[QueueItem] = deque()
        self._pending: Set[str] = set()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, fp: str) -> bool:
        return fp in self._pending

    def enqueue(self, item: QueueItem) -> bool:
        """Append an item. Returns False if its fingerprint is already pending."""
        if item.fingerprint in self._pending:
            return False
        self._items.append(item)
        self._pending.add(item.fingerprint)
        return True

    def take(self, n: int) -> List[QueueItem]:
        """Remove and return up to n items from the head."""
        batch = []
        while self._items and len(batch) < n:
            item = self._items.popleft()
            self._pending.discard(item.fingerprint)
            batch.append(item)
        return batch

    def clear(self) -> None:
        self._items.clear()
        self._pending.clear()


class BatchProcessor:
    """
    Single-flight drain loop over an EscalationQueue.

    Args:
        queue: Escalation queue to drain
        cache: Record cache receiving the results
        capability: Provider of the external classifier session
        batch_size: Items classified concurrently per batch
        inter_batch_delay_ms: Pause between batches
        timeout: Per-item classification timeout in seconds
        on_update: Called with each record touched by a result
        on_batch: Called after every batch has been reconciled
    """

    def __init__(
        self,
        queue: EscalationQueue,
        cache: RecordCache,
        capability: Optional[SessionProvider],
        batch_size: int = DEFAULT_BATCH_SIZE,
        inter_batch_delay_ms: int = DEFAULT_INTER_BATCH_DELAY_MS,
        timeout: Optional[float] = None,
        on_update: Optional[Callable[[Record], None]] = None,
        on_batch: Optional[Callable[[], None]] = None,
    ):
        self.queue = queue
        self.cache = cache
        self.capability = capability
        self.batch_size = max(1, int(batch_size))
        self.inter_batch_delay = max(0, int(inter_batch_delay_ms)) / 1000.0
        self.timeout = timeout
        self.on_update = on_update
        self.on_batch = on_batch
        self._processing = False
        self._task: Optional[asyncio.Task] = None

    @property
    def processing(self) -> bool:
        return self._processing

    def start(self) -> Optional[asyncio.Task]:
        """
        Start draining the queue.

        A no-op (returns None) while a drain is already running, when the
        queue is empty, or when the capability is not ready. Must be called
        from a running event loop.

        Returns:
            The drain task, or None if nothing was started
        """
        if self._processing:
            logger.debug("Drain already running, start request dropped")
            return None

        if not len(self.queue):
            return None

        if self.capability is None or not self.capability.is_ready:
            return None

        self._processing = True
        self._task = asyncio.get_running_loop().create_task(self._drain())
        return self._task

    async def wait_idle(self) -> None:
        """Wait for the current drain, if any, to finish."""
        task = self._task
        if task is not None and not task.done():
            await task

    async def _drain(self) -> None:
        try:
            while len(self.queue):
                if self.capability is None or not self.capability.is_ready:
                    logger.info("Capability no longer ready, %d escalation(s) left queued", len(self.queue))
                    break

                batch = self.queue.take(self.batch_size)
                logger.info("Escalating batch of %d (%d left)", len(batch), len(self.queue))

                tiers = await asyncio.gather(*(
                    classify_with_external(item.fingerprint, self.capability, self.timeout)
                    for item in batch
                ))

                if not self.capability.is_ready:
                    logger.info("Capability closed mid-batch, discarding %d result(s)", len(batch))
                    break

                for item, tier in zip(batch, tiers):
                    self._reconcile(item, tier)

                if self.on_batch:
                    try:
                        self.on_batch()
                    except Exception:
                        logger.exception("Batch callback failed")

                await asyncio.sleep(self.inter_batch_delay)
        finally:
            self._processing = False

    def _reconcile(self, item: QueueItem, tier: Tier) -> None:
        outcome = self.cache.reconcile(
            item.fingerprint,
            tier,
            from_escalation=True,
            epoch=item.epoch,
        )

        if outcome == ReconcileOutcome.STALE:
            return

        if outcome == ReconcileOutcome.RECLASSIFIED:
            logger.info("Reclassified %r -> %s", item.fingerprint[:50], tier.value)

        record = self.cache.get(item.fingerprint)
        if record is not None and self.on_update:
            try:
                self.on_update(record)
            except Exception:
                logger.exception("Update callback failed for %r", item.fingerprint[:50])
