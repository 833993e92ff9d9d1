"""
Pytest fixtures for commentguard tests.
"""

import pytest

from commentguard.config import EngineConfig

from tests.fakes import RecordingSink


@pytest.fixture
def fast_config() -> EngineConfig:
    return EngineConfig(inter_batch_delay_ms=0, classify_timeout_s=1.0)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
