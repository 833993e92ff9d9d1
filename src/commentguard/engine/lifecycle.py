"""
Capability lifecycle management.

Tracks whether the external classifier can be used:

    UNAVAILABLE -> (probe) -> INITIALIZING -> READY | FAILED

Nothing here is fatal to the engine. Until READY, classification runs in
keyword-only mode.
"""

import enum
import logging
from typing import Any, Callable, Dict, Optional

from ..capability.base import Availability, ClassifierSession, ExternalClassifier


logger = logging.getLogger(__name__)


class CapabilityState(str, enum.Enum):
    UNAVAILABLE = "unavailable"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


class CapabilityLifecycle:
    """
    Owns the external classifier session.

    Args:
        classifier: External classifier, or None for keyword-only mode
        config: Passed to classifier.initialize()
        on_ready: Called once the session is ready
    """

    def __init__(
        self,
        classifier: Optional[ExternalClassifier] = None,
        config: Optional[Dict[str, Any]] = None,
        on_ready: Optional[Callable[[], None]] = None,
    ):
        self.classifier = classifier
        self.config = config or {}
        self.on_ready = on_ready
        self.state = CapabilityState.UNAVAILABLE
        self.availability: Optional[Availability] = None
        self.last_error: Optional[str] = None
        self._session: Optional[ClassifierSession] = None

    @property
    def is_ready(self) -> bool:
        return self.state == CapabilityState.READY

    @property
    def session(self) -> Optional[ClassifierSession]:
        return self._session

    async def start(self) -> CapabilityState:
        """
        Probe and initialize the classifier.

        Returns:
            The resulting state
        """
        if self.classifier is None:
            return self.state

        if self.state in (CapabilityState.INITIALIZING, CapabilityState.READY):
            return self.state

        try:
            self.availability = await self.classifier.probe()
        except Exception as e:
            logger.warning("Classifier probe failed: %s", e)
            self.last_error = str(e)
            self.state = CapabilityState.FAILED
            return self.state

        if self.availability != Availability.AVAILABLE:
            logger.info("Classifier not available (%s), running keyword-only", self.availability.value)
            self.state = CapabilityState.UNAVAILABLE
            return self.state

        self.state = CapabilityState.INITIALIZING

        try:
            self._session = await self.classifier.initialize(self.config)
        except Exception as e:
            logger.warning("Classifier initialization failed: %s", e)
            self.last_error = str(e)
            self.state = CapabilityState.FAILED
            return self.state

        self.state = CapabilityState.READY
        self.last_error = None
        logger.info("External classification enabled")

        if self.on_ready:
            self.on_ready()

        return self.state

    async def close(self) -> None:
        """Release the session and fall back to keyword-only mode."""
        session, self._session = self._session, None
        self.state = CapabilityState.UNAVAILABLE
        if session is not None:
            await session.close()
