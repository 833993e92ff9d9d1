"""
Scan triggers around a ScanEngine.

Source changes trigger a debounced scan, a periodic task rescans to pick
up anything missed, and switching to a different context (another video
or chat) resets the engine and scans again once the new context settles.
"""

import logging
from typing import Any, Optional

from .core import ScanEngine
from .tasks import PeriodicTask, ScheduledTask


logger = logging.getLogger(__name__)


class CommentMonitor:
    def __init__(self, engine: ScanEngine):
        config = engine.config
        self.engine = engine
        self.context_id: Optional[Any] = None
        self.debounce = ScheduledTask(config.debounce_ms / 1000.0, self._scan)
        self.settle = ScheduledTask(config.context_settle_ms / 1000.0, self._scan)
        self.periodic = PeriodicTask(
            config.rescan_interval_ms / 1000.0,
            self._scan,
            max_runs=config.max_periodic_rescans,
        )

    def start(self, context_id: Optional[Any] = None) -> None:
        """Initial scan, then periodic rescans. Needs a running loop."""
        self.context_id = context_id
        self.engine.scan()
        self.periodic.start()

    def stop(self) -> None:
        self.debounce.cancel()
        self.settle.cancel()
        self.periodic.stop()

    def notify_change(self) -> None:
        """The source changed; scan once things go quiet."""
        self.debounce.reschedule()

    def switch_context(self, context_id: Any) -> bool:
        """
        Move to another context.

        Returns:
            True if the context changed and the engine was reset
        """
        if context_id is None or context_id == self.context_id:
            return False

        logger.info("New context detected: %s", context_id)
        self.context_id = context_id
        self.debounce.cancel()
        self.engine.reset()
        self.settle.reschedule()
        return True

    def _scan(self) -> None:
        self.engine.scan()
