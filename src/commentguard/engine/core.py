"""
Scan engine for commentguard.

One ScanEngine per monitored context (a video, a chat) owns the record
cache, stats, escalation queue, batch processor and capability lifecycle.

Flow:
    source text -> keyword pass -> cache + stats -> sink
    keyword hit (not override) + capability ready -> escalation queue
    batch processor -> reconciliation -> cache + stats -> sink
"""

import logging
from typing import Any, Optional

from ..capability.base import ExternalClassifier
from ..classify.rules import KeywordMatch, Tier, match_keywords
from ..config import EngineConfig
from .batch import BatchProcessor, EscalationQueue, QueueItem
from .cache import Record, RecordCache, Stats, fingerprint
from .lifecycle import CapabilityLifecycle


logger = logging.getLogger(__name__)


ESCALATED_TIERS = (Tier.SPAM, Tier.SUSPICIOUS)


class ScanEngine:
    """
    Incremental classifier over a comment source.

    Args:
        source: Source enumerator yielding (text, handle) pairs
        sink: Presentation sink (apply / clear_all / update_stats), or None
        config: Engine configuration
        classifier: External classifier capability, or None for
            keyword-only mode
    """

    def __init__(
        self,
        source,
        sink=None,
        config: Optional[EngineConfig] = None,
        classifier: Optional[ExternalClassifier] = None,
    ):
        self.config = config or EngineConfig()
        self.tables = self.config.keyword_tables()
        self.source = source
        self.sink = sink
        self.highlights_visible = True

        self.cache = RecordCache()
        self.queue = EscalationQueue()
        self.capability = CapabilityLifecycle(
            classifier,
            config={"system_prompt": self.config.system_prompt},
            on_ready=self.escalate_suspicious,
        )
        self.processor = BatchProcessor(
            self.queue,
            self.cache,
            self.capability,
            batch_size=self.config.batch_size,
            inter_batch_delay_ms=self.config.inter_batch_delay_ms,
            timeout=self.config.classify_timeout_s,
            on_update=self._on_escalated,
            on_batch=self._emit_stats,
        )

    @property
    def external_enabled(self) -> bool:
        return self.capability.is_ready

    async def start(self) -> None:
        """Bring up the external classifier, if any."""
        await self.capability.start()

    async def close(self) -> None:
        await self.capability.close()

    async def wait_idle(self) -> None:
        """Wait until pending escalations have been drained."""
        await self.processor.wait_idle()

    def scan(self) -> Stats:
        """
        Classify every new text from the source.

        Texts already cached only get their marker re-applied. New keyword
        hits are queued for escalation when the capability is ready.

        Returns:
            Stats snapshot
        """
        queued = 0

        for text, handle in self.source.items():
            fp = fingerprint(text)
            if not fp:
                continue

            record = self.cache.get(fp)
            if record is not None:
                self._mark(handle, record.tier)
                continue

            match = match_keywords(fp, self.tables)
            self.cache.reconcile(fp, match.tier, source_handle=handle, locked=match.terminal)
            self._mark(handle, match.tier)

            if self._should_escalate(match) and self._enqueue(fp, handle):
                queued += 1

        if queued:
            logger.info("Queued %d comment(s) for escalation", queued)
            self.processor.start()

        self._emit_stats()
        return self.get_stats()

    def escalate_suspicious(self) -> int:
        """
        Queue every cached Suspicious record and start draining.

        Called when the capability becomes ready.

        Returns:
            Number of records queued
        """
        queued = 0
        for record in self.cache.by_tier(Tier.SUSPICIOUS):
            if not record.locked and self._enqueue(record.fingerprint, record.source_handle):
                queued += 1

        if queued:
            logger.info("Re-analyzing %d suspicious comment(s)", queued)
            self.processor.start()
        return queued

    def reset(self) -> None:
        """Clear cache, queue and stats. In-flight escalations become no-ops."""
        self.cache.clear()
        self.queue.clear()
        if self.sink is not None:
            self.sink.clear_all()
        self._emit_stats()

    # Control surface

    def get_stats(self) -> Stats:
        return self.cache.stats.copy()

    def rescan(self) -> Stats:
        """Full reset, then scan."""
        self.reset()
        return self.scan()

    def toggle_highlights(self) -> bool:
        """Flip marker visibility. Returns the new visibility."""
        self.highlights_visible = not self.highlights_visible

        if self.highlights_visible:
            self.scan()
        elif self.sink is not None:
            self.sink.clear_all()

        return self.highlights_visible

    # Internals

    def _should_escalate(self, match: KeywordMatch) -> bool:
        return (
            not match.terminal
            and match.tier in ESCALATED_TIERS
            and self.capability.is_ready
        )

    def _enqueue(self, fp: str, handle: Any) -> bool:
        return self.queue.enqueue(QueueItem(fp, handle, self.cache.epoch))

    def _mark(self, handle: Any, tier: Tier) -> None:
        if self.sink is not None and self.highlights_visible:
            self.sink.apply(handle, tier)

    def _on_escalated(self, record: Record) -> None:
        self._mark(record.source_handle, record.tier)

    def _emit_stats(self) -> None:
        if self.sink is not None:
            self.sink.update_stats(self.get_stats(), self.external_enabled)
