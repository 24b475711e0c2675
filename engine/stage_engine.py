"""engine.stage_engine

The Stage Engine: owns GameState plus the two scratch structures and is the
only thing that mutates them.

Callers (UI, headless runner) go through engine.pipeline.decide() for
choices; the raw operations here are the building blocks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Union

from core.effects import apply_delta
from core.state import (
    DECISION_STAGES,
    START_CASH,
    EnergyAllocation,
    GameState,
    LogType,
    Stage,
    Status,
    ValueEquation,
    default_start_state,
)

from .config import EngineConfig
from .logging import Clock, format_money, make_log_entry, push_log

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionStarted:
    session_id: int


@dataclass(frozen=True)
class SessionReset:
    session_id: int


@dataclass(frozen=True)
class DecisionResolved:
    """A decision was applied. Consumers must not feed anything back into the engine."""

    session_id: int
    stage: int
    choice_label: str
    result_label: str


EngineEvent = Union[SessionStarted, SessionReset, DecisionResolved]
Listener = Callable[[EngineEvent], None]


class StageEngine:
    def __init__(self, config: EngineConfig = EngineConfig(), *, clock: Clock = datetime.now) -> None:
        self.config = config
        self.clock = clock
        self.state: GameState = default_start_state()
        self.value_eq = ValueEquation()
        self.energy = EnergyAllocation()
        self.session_id = 0
        self._listeners: List[Listener] = []

    # -------------------------
    # Events
    # -------------------------

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def emit(self, event: EngineEvent) -> None:
        # a failing listener is logged and skipped
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener %r failed on %s", listener, type(event).__name__)

    # -------------------------
    # Operations
    # -------------------------

    def apply_choice(self, cash_delta: int, brand_delta: int) -> bool:
        """cash += cash_delta; brand += brand_delta; status recomputed.

        Returns False (and changes nothing) once the run is over or when the
        current stage has no decision screen.
        """
        s = self.state
        if s.status is not Status.PLAYING:
            logger.warning("apply_choice ignored: run is %s", s.status.value)
            return False
        if s.stage not in DECISION_STAGES:
            logger.warning("apply_choice ignored: stage %s has no decision", s.stage)
            return False

        s.cash, s.brand, s.status = apply_delta(s.cash, s.brand, s.stage, (cash_delta, brand_delta))
        return True

    def advance_stage(self) -> bool:
        s = self.state
        if s.status is not Status.PLAYING:
            logger.warning("advance_stage ignored: run is %s", s.status.value)
            return False
        if s.stage not in DECISION_STAGES:
            logger.warning("advance_stage ignored: stage %s", s.stage)
            return False

        s.stage = int(s.stage) + 1
        return True

    def start_session(self) -> bool:
        s = self.state
        if s.stage != Stage.INTRO or s.status is not Status.PLAYING:
            logger.warning("start_session ignored: stage %s", s.stage)
            return False

        s.stage = int(Stage.POSITIONING)
        self.append_log(f"SIMULATION STARTED: INITIALIZING RUNWAY {format_money(START_CASH)}", LogType.SUCCESS)
        self.emit(SessionStarted(self.session_id))
        return True

    def reset_session(self) -> None:
        """Back to stage 0 with default state and scratch. Works from any state."""
        self.state = default_start_state()
        self.reset_scratch()
        self.session_id += 1
        self.emit(SessionReset(self.session_id))

    def reset_scratch(self) -> None:
        self.value_eq = ValueEquation()
        self.energy = EnergyAllocation()

    def append_log(self, message: str, type: LogType = LogType.INFO) -> None:
        entry = make_log_entry(message, type, clock=self.clock)
        self.state.logs = push_log(self.state.logs, entry, self.config.log_capacity)
