"""
Engine module for commentguard.

Owns the record cache, running stats, escalation queue, batch processor
and capability lifecycle for one monitored context.
"""

from .cache import Record, RecordCache, ReconcileOutcome, Stats, fingerprint
from .batch import BatchProcessor, EscalationQueue, QueueItem
from .lifecycle import CapabilityLifecycle, CapabilityState
from .tasks import PeriodicTask, ScheduledTask
from .core import ScanEngine
from .monitor import CommentMonitor

__all__ = [
    "Record",
    "RecordCache",
    "ReconcileOutcome",
    "Stats",
    "fingerprint",
    "BatchProcessor",
    "EscalationQueue",
    "QueueItem",
    "CapabilityLifecycle",
    "CapabilityState",
    "PeriodicTask",
    "ScheduledTask",
    "ScanEngine",
    "CommentMonitor",
]
