"""
core.selfcheck
Minimal "it runs" proof for the core rules.

Run:
  python -m core.selfcheck
"""

from __future__ import annotations

from dataclasses import asdict

from .effects import apply_delta, hunt_delta, hunt_permitted, offer_delta, resolve_status
from .stages import Payout, get_stage_spec
from .state import (
    BRAND_COLLAPSE,
    DECISION_STAGES,
    EnergyAllocation,
    Stage,
    Status,
    ValueEquation,
    default_start_state,
)


def run_best_practice_smoke() -> None:
    state = default_start_state()
    state.stage = int(Stage.POSITIONING)

    eq = ValueEquation(dream=10, likelihood=10, time_delay=1, effort=1)
    energy = EnergyAllocation(warm=40, cold=20, content=40, ads=0)

    for stage in DECISION_STAGES:
        spec = get_stage_spec(stage)
        assert spec is not None
        opt = next((o for o in spec.options if o.highlight), spec.options[0])

        if opt.payout is Payout.OFFER:
            delta = offer_delta(eq)
        elif opt.payout is Payout.HUNT:
            assert hunt_permitted(energy)
            delta = hunt_delta(energy)
        else:
            delta = opt.delta

        state.cash, state.brand, state.status = apply_delta(state.cash, state.brand, state.stage, delta)

        # invariants
        assert state.status is resolve_status(state.cash, state.brand, state.stage)
        assert state.status is not Status.LOST, f"lost at stage {stage}"
        assert state.brand > BRAND_COLLAPSE

        state.stage = int(state.stage) + 1

    assert state.stage == Stage.AFTERMATH
    assert state.status is Status.PLAYING

    print("OK: 8-stage core smoke test passed.")
    print("Final state:", asdict(state))


if __name__ == "__main__":
    run_best_practice_smoke()
