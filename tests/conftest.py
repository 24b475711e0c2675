"""Shared pytest fixtures for all tests."""

from datetime import datetime
from typing import List, Tuple

import pytest

from engine.advisory import AdvisoryChannel, InlineExecutor
from engine.stage_engine import StageEngine

FIXED_NOW = datetime(2026, 10, 18, 9, 5, 7)


class RecordingAdvisor:
    """Advisor double that remembers what it was asked."""

    def __init__(self, reply: str = "Noted.") -> None:
        self.reply = reply
        self.calls: List[Tuple[int, str, str]] = []

    def status(self):
        from content.providers.base import ProviderStatus
        return ProviderStatus(True, "test", "recording")

    def request_feedback(self, stage, choice_label, result_label):
        self.calls.append((stage, choice_label, result_label))
        return f"{self.reply} ({stage})"


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def engine(fixed_clock):
    """Fresh engine at the intro screen."""
    return StageEngine(clock=fixed_clock)


@pytest.fixture
def started_engine(engine):
    """Engine on Sector 1."""
    engine.start_session()
    return engine


@pytest.fixture
def advisor():
    return RecordingAdvisor()


@pytest.fixture
def channel(engine, advisor):
    """Inline consultant channel attached to `engine`."""
    return AdvisoryChannel(advisor, executor=InlineExecutor(), config=engine.config).attach(engine)


@pytest.fixture
def on_stage(engine):
    """Place the engine mid-run: on_stage(stage, cash=..., brand=...)."""

    def _place(stage: int, cash: int = 10_000, brand: int = 0) -> StageEngine:
        engine.state.stage = stage
        engine.state.cash = cash
        engine.state.brand = brand
        return engine

    return _place
