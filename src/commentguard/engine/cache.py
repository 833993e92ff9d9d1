"""
Record cache and running stats.

One Record per fingerprint. Stats are updated incrementally on every
reconciliation so that, at every point,

    total == spam + suspicious + safe

and each counter equals the number of cached records in that tier.
All mutation is synchronous, so it is atomic with respect to other asyncio
tasks.
"""

import enum
import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from ..classify.rules import Tier


logger = logging.getLogger(__name__)


def fingerprint(text: Optional[str]) -> str:
    """Identity key for a text: surrounding whitespace stripped, case kept."""
    return (text or "").strip()


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Record:
    """Classification record for one distinct text."""
    fingerprint: str
    tier: Tier
    source_handle: Any = None
    updated_at: Optional[datetime] = None
    # Override matches: never escalated, never overwritten
    locked: bool = False


@dataclass
class Stats:
    """Running tier counters."""
    total: int = 0
    spam: int = 0
    suspicious: int = 0
    safe: int = 0

    def bump(self, tier: Tier, delta: int) -> None:
        setattr(self, tier.value, getattr(self, tier.value) + delta)

    def copy(self) -> "Stats":
        return Stats(self.total, self.spam, self.suspicious, self.safe)

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


class ReconcileOutcome(str, enum.Enum):
    INSERTED = "inserted"
    RECLASSIFIED = "reclassified"
    UNCHANGED = "unchanged"
    STALE = "stale"


class RecordCache:
    """
    Fingerprint-keyed record store with its stats.

    The cache carries an epoch that is bumped by clear(). Escalation results
    tagged with an older epoch are stale and never touch the cache.
    """

    def __init__(self):
        self._records: Dict[str, Record] = {}
        self.stats = Stats()
        self.epoch = 0

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, fp: str) -> bool:
        return fp in self._records

    def __iter__(self) -> Iterator[Record]:
        return iter(list(self._records.values()))

    def get(self, fp: str) -> Optional[Record]:
        return self._records.get(fp)

    def by_tier(self, tier: Tier) -> List[Record]:
        return [r for r in self._records.values() if r.tier == tier]

    def reconcile(
        self,
        fp: str,
        tier: Tier,
        source_handle: Any = None,
        from_escalation: bool = False,
        epoch: Optional[int] = None,
        locked: bool = False,
    ) -> ReconcileOutcome:
        """
        Apply a (fingerprint, tier) pair to the cache and stats.

        Args:
            fp: Fingerprint
            tier: Incoming tier
            source_handle: Caller-owned handle, stored on insert only
            from_escalation: True when applying an external classifier result
            epoch: Epoch the escalation was queued in
            locked: Mark a newly inserted record as an override match

        Returns:
            ReconcileOutcome
        """
        record = self._records.get(fp)

        if from_escalation:
            if epoch is not None and epoch != self.epoch:
                logger.debug("Dropping escalation result from epoch %s (now %s)", epoch, self.epoch)
                return ReconcileOutcome.STALE
            if record is None:
                logger.debug("Dropping escalation result for evicted record")
                return ReconcileOutcome.STALE
            if record.locked:
                return ReconcileOutcome.UNCHANGED

        if record is None:
            self._records[fp] = Record(
                fingerprint=fp,
                tier=tier,
                source_handle=source_handle,
                updated_at=_now(),
                locked=locked,
            )
            self.stats.total += 1
            self.stats.bump(tier, 1)
            return ReconcileOutcome.INSERTED

        if record.tier == tier:
            return ReconcileOutcome.UNCHANGED

        self.stats.bump(record.tier, -1)
        self.stats.bump(tier, 1)
        record.tier = tier
        record.updated_at = _now()
        return ReconcileOutcome.RECLASSIFIED

    def clear(self) -> None:
        """Drop every record, zero the stats and start a new epoch."""
        self._records.clear()
        self.stats = Stats()
        self.epoch += 1
