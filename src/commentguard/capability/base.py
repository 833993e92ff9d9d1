"""
Interfaces for the external classification capability.

The capability is probed, initialized into a session, and then asked to
classify single texts. Response parsing is owned by
commentguard.classify.hybrid, not by the capability.
"""

import enum
from typing import Any, Dict, Optional, Protocol


class Availability(str, enum.Enum):
    """Probe outcome."""
    AVAILABLE = "available"
    # Backend reachable but the model must be pulled first
    DOWNLOADABLE = "downloadable"
    UNAVAILABLE = "unavailable"


class ClassifierSession(Protocol):
    async def classify(self, text: str) -> str:
        """Return the backend's free-text verdict for a text."""
        ...

    async def close(self) -> None:
        ...


class ExternalClassifier(Protocol):
    async def probe(self) -> Availability:
        ...

    async def initialize(self, config: Dict[str, Any]) -> ClassifierSession:
        ...


class SessionProvider(Protocol):
    """Anything that can tell whether a ready session exists."""

    @property
    def is_ready(self) -> bool:
        ...

    @property
    def session(self) -> Optional[ClassifierSession]:
        ...
