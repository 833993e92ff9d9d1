"""
Test doubles shared across the suite: scripted classifier session and
classifier, an always-ready capability, and a recording sink.
"""

import asyncio
from typing import Any, Dict, List, Optional, Tuple

from commentguard.capability import Availability
from commentguard.errors import CapabilityError


class FakeSession:
    """Scripted classifier session that records calls and concurrency."""

    def __init__(
        self,
        responses: Optional[Dict[str, str]] = None,
        default: str = "safe",
        delay: float = 0.0,
        fail_on: Tuple[str, ...] = (),
        gate: Optional[asyncio.Event] = None,
    ):
        self.responses = responses or {}
        self.default = default
        self.delay = delay
        self.fail_on = fail_on
        self.gate = gate
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    async def classify(self, text: str) -> str:
        self.calls.append(text)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.delay:
                await asyncio.sleep(self.delay)
            if text in self.fail_on:
                raise CapabilityError("backend exploded")
            return self.responses.get(text, self.default)
        finally:
            self.in_flight -= 1

    async def close(self) -> None:
        self.closed = True


class FakeClassifier:
    def __init__(
        self,
        session: Optional[FakeSession] = None,
        availability: Availability = Availability.AVAILABLE,
        probe_error: Optional[Exception] = None,
        init_error: Optional[Exception] = None,
    ):
        self.session = session or FakeSession()
        self.availability = availability
        self.probe_error = probe_error
        self.init_error = init_error
        self.init_config: Optional[Dict[str, Any]] = None

    async def probe(self) -> Availability:
        if self.probe_error is not None:
            raise self.probe_error
        return self.availability

    async def initialize(self, config: Dict[str, Any]) -> FakeSession:
        self.init_config = config
        if self.init_error is not None:
            raise self.init_error
        return self.session


class ReadyCapability:
    def __init__(self, session: Optional[FakeSession]):
        self.session = session
        self.is_ready = True


class RecordingSink:
    def __init__(self):
        self.applied: List[Tuple[Any, Any]] = []
        self.marks: Dict[Any, Any] = {}
        self.clears = 0
        self.snapshots: List[Tuple[Any, bool]] = []

    def apply(self, source_handle: Any, tier: Any) -> None:
        self.applied.append((source_handle, tier))
        self.marks[source_handle] = tier

    def clear_all(self) -> None:
        self.clears += 1
        self.marks.clear()

    def update_stats(self, stats: Any, external_enabled: bool) -> None:
        self.snapshots.append((stats, external_enabled))


class BrokenSink(RecordingSink):
    """Sink whose stats and marker updates fail after the first few calls."""

    def __init__(self, fail_stats_after: int = 1, fail_apply_after: Optional[int] = None):
        super().__init__()
        self.fail_stats_after = fail_stats_after
        self.fail_apply_after = fail_apply_after

    def apply(self, source_handle: Any, tier: Any) -> None:
        if self.fail_apply_after is not None and len(self.applied) >= self.fail_apply_after:
            raise BrokenPipeError("display went away")
        super().apply(source_handle, tier)

    def update_stats(self, stats: Any, external_enabled: bool) -> None:
        if len(self.snapshots) >= self.fail_stats_after:
            raise BrokenPipeError("display went away")
        super().update_stats(stats, external_enabled)


SCENARIO_TEXTS = [
    "Buy now and get rich quick!",
    "Check out my similar content",
    "Great explanation of the topic",
    "FREE MONEY! Click here!",
    "This is really helpful, thanks!",
]
