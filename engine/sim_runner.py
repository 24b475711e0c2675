"""engine.sim_runner

Headless runner for quick sanity checks.

This keeps tests deterministic and CI-friendly by avoiding network calls:
the consultant is the offline advisor run inline.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from content.providers.base import AdvisoryProvider
from content.providers.offline import OfflineAdvisor
from core.state import Stage, Status

from .advisory import AdvisoryChannel, InlineExecutor
from .config import EngineConfig
from .pipeline import DecisionResult, decide
from .stage_engine import StageEngine


# The "category of one" answer at every sector. Survives, but the
# fixed payouts alone never reach the $100k win line.
BEST_PRACTICE_PATH = ("C", "A", "B", "B", "A", "B", "B", "B")
# Every commodity instinct. Goes bankrupt before the Close.
COMMODITY_PATH = ("A", "A", "A", "A", "A", "A", "A", "A")

BEST_VALUE_EQUATION = {"dream": 10, "likelihood": 10, "time_delay": 1, "effort": 1}
BEST_ENERGY = {"warm": 40, "cold": 20, "content": 40, "ads": 0}


def run_headless_session(
    path: Sequence[str] = BEST_PRACTICE_PATH,
    *,
    value_equation: Optional[Mapping[str, int]] = None,
    energy: Optional[Mapping[str, int]] = None,
    provider: Optional[AdvisoryProvider] = None,
    config: EngineConfig = EngineConfig(),
) -> Dict[str, Any]:
    """Play `path` (one option key per sector) and return a summary.

    Stops early when the run ends or a decision is rejected.
    """
    engine = StageEngine(config)
    channel = AdvisoryChannel(provider or OfflineAdvisor(), executor=InlineExecutor(), config=config).attach(engine)

    engine.start_session()
    results: List[DecisionResult] = []

    for key in path:
        if engine.state.status is not Status.PLAYING or engine.state.stage == Stage.AFTERMATH:
            break
        if engine.state.stage == Stage.OFFER:
            for name, v in dict(value_equation or {}).items():
                engine.value_eq.set(name, v)
        if engine.state.stage == Stage.HUNT:
            for name, v in dict(energy or {}).items():
                engine.energy.set(name, v)

        res = decide(engine, key)
        results.append(res)
        if not res.accepted:
            break

    return {
        "final": engine.state,
        "results": results,
        "consultant": channel.message,
        "engine": engine,
    }
