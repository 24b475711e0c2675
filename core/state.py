"""
core.state
Core domain data models (UI/LLM independent).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, List


START_CASH = 10_000
START_BRAND = 0

BANKRUPT_CASH = 0          # cash <= this -> lost
BRAND_COLLAPSE = -50       # brand <= this -> lost
WIN_CASH = 100_000
WIN_BRAND = 50

LOG_CAPACITY = 50

SLIDER_MIN = 1
SLIDER_MAX = 10
SLIDER_DEFAULT = 5

ENERGY_DEFAULT = 25
ENERGY_BUDGET = 100


def clamp(x: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, x))


class Stage(IntEnum):
    """Every value `GameState.stage` can hold.

    1..8 are the decision sectors. INTRO is the pre-game screen and
    AFTERMATH is what a surviving run lands on after the Close.
    """

    INTRO = 0
    POSITIONING = 1
    OFFER = 2
    MESSAGING = 3
    CONTENT = 4
    HUNT = 5
    FORTRESS = 6
    HIRING = 7
    CLOSE = 8
    AFTERMATH = 9


FINAL_STAGE = Stage.CLOSE
DECISION_STAGES = tuple(s for s in Stage if Stage.POSITIONING <= s <= Stage.CLOSE)


class Status(str, Enum):
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"


class LogType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class LogEntry:
    type: LogType
    message: str
    timestamp: str  # HH:MM:SS


@dataclass
class GameState:
    """Authoritative game data.

    Mutated in place by engine.stage_engine.StageEngine only. Presentation
    flags (intro finished, thinking indicator, consultant text) live elsewhere.
    """

    cash: int = START_CASH
    brand: int = START_BRAND
    stage: int = Stage.INTRO
    status: Status = Status.PLAYING
    logs: List[LogEntry] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status is not Status.PLAYING


@dataclass
class ValueEquation:
    """Offer-stage sliders. Values are kept in [1, 10] by set()."""

    dream: int = SLIDER_DEFAULT
    likelihood: int = SLIDER_DEFAULT
    time_delay: int = SLIDER_DEFAULT
    effort: int = SLIDER_DEFAULT

    def set(self, name: str, value: int) -> None:
        if name not in VALUE_EQUATION_FIELDS:
            raise ValueError(f"Unknown value-equation input: {name}")
        setattr(self, name, clamp(int(value), SLIDER_MIN, SLIDER_MAX))


VALUE_EQUATION_FIELDS = ("dream", "likelihood", "time_delay", "effort")


@dataclass
class EnergyAllocation:
    """Hunt-stage effort pools. Individually unconstrained; the sum gates the hunt."""

    warm: int = ENERGY_DEFAULT
    cold: int = ENERGY_DEFAULT
    content: int = ENERGY_DEFAULT
    ads: int = ENERGY_DEFAULT

    @property
    def total(self) -> int:
        return int(self.warm + self.cold + self.content + self.ads)

    def set(self, name: str, value: int) -> None:
        if name not in ENERGY_FIELDS:
            raise ValueError(f"Unknown energy pool: {name}")
        setattr(self, name, int(value))


ENERGY_FIELDS = ("warm", "cold", "content", "ads")


def state_to_dict(s: GameState) -> Dict[str, object]:
    """Plain snapshot (used by decision records and the debug page)."""
    return {
        "cash": int(s.cash),
        "brand": int(s.brand),
        "stage": int(s.stage),
        "status": s.status.value,
        "logs": len(s.logs),
    }


def default_start_state() -> GameState:
    """Baseline start state.

    Keep it in core so headless tests and UI share the same baseline.
    """
    return GameState(
        cash=START_CASH,
        brand=START_BRAND,
        stage=Stage.INTRO,
        status=Status.PLAYING,
        logs=[],
    )
