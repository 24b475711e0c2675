"""engine.pipeline

Core decision flow (headless).

Responsibilities:
- Turn (current stage, option key) into a (cash, brand) delta
- Apply it, resolve status, advance, write the log book
- Emit DecisionResolved for the consultant

This layer is UI-agnostic.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from core.effects import Delta, hunt_delta, hunt_permitted, offer_delta, offer_score
from core.stages import OFFER_RESULT_HIT, OFFER_RESULT_MISS, OptionSpec, Payout, get_stage_spec
from core.state import ENERGY_BUDGET, LogType, Stage, Status

from .logging import format_delta, format_money
from .stage_engine import DecisionResolved, StageEngine


@dataclass(frozen=True)
class DecisionResult:
    stage: int
    option: str
    accepted: bool
    cash_delta: int = 0
    brand_delta: int = 0
    cash_before: int = 0
    brand_before: int = 0
    cash_after: int = 0
    brand_after: int = 0
    status: str = Status.PLAYING.value
    choice_label: str = ""
    result_label: str = ""
    reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _rejected(engine: StageEngine, option: str, reason: str) -> DecisionResult:
    s = engine.state
    return DecisionResult(
        stage=int(s.stage),
        option=str(option),
        accepted=False,
        cash_before=int(s.cash),
        brand_before=int(s.brand),
        cash_after=int(s.cash),
        brand_after=int(s.brand),
        status=s.status.value,
        reason=reason,
    )


def option_delta(engine: StageEngine, opt: OptionSpec) -> Delta:
    if opt.payout is Payout.OFFER:
        return offer_delta(engine.value_eq)
    if opt.payout is Payout.HUNT:
        return hunt_delta(engine.energy)
    if opt.delta is None:
        raise ValueError(f"Option {opt.key} has no fixed delta")
    return opt.delta


def result_label_for(engine: StageEngine, opt: OptionSpec, delta: Delta) -> str:
    if opt.payout is Payout.OFFER:
        score = offer_score(engine.value_eq)
        outcome = OFFER_RESULT_HIT if delta[0] > 0 else OFFER_RESULT_MISS
        return f"Score {score:.1f}. {outcome}"
    if opt.payout is Payout.HUNT:
        e = engine.energy
        return (
            f"{opt.result_label} Energy {e.total}/{ENERGY_BUDGET} "
            f"(warm {e.warm}, cold {e.cold}, content {e.content}, ads {e.ads})."
        )
    return opt.result_label


def decide(engine: StageEngine, option_key: str) -> DecisionResult:
    """Apply the player's option for the current stage and advance.

    Raises ValueError for an option key the stage does not offer. A hunt over
    the energy budget, or any decision after the run has ended, is returned
    as a rejected result with no state change.
    """
    s = engine.state
    if s.status is not Status.PLAYING:
        return _rejected(engine, option_key, f"run is {s.status.value}")

    spec = get_stage_spec(s.stage)
    if spec is None:
        return _rejected(engine, option_key, f"no decision at stage {int(s.stage)}")

    opt = spec.option(option_key)

    if opt.payout is Payout.HUNT and not hunt_permitted(engine.energy):
        reason = f"energy {engine.energy.total}/{ENERGY_BUDGET} over budget"
        engine.append_log(f"HUNT BLOCKED: {reason}", LogType.WARNING)
        return _rejected(engine, opt.key, reason)

    stage = int(s.stage)
    cash_before, brand_before = int(s.cash), int(s.brand)
    delta = option_delta(engine, opt)
    result_label = result_label_for(engine, opt, delta)

    engine.apply_choice(delta[0], delta[1])
    s = engine.state

    engine.append_log(
        f"{opt.choice_label.upper()}: {format_delta(delta[0], delta[1])}",
        LogType.SUCCESS if delta[0] >= 0 else LogType.WARNING,
    )

    if opt.payout in (Payout.OFFER, Payout.HUNT):
        engine.reset_scratch()

    if s.status is Status.LOST:
        engine.append_log(f"BANKRUPT: Runway {format_money(s.cash)}, Brand {s.brand}", LogType.ERROR)
    elif s.status is Status.WON:
        engine.append_log(f"CATEGORY KING: Runway {format_money(s.cash)}, Brand {s.brand}", LogType.SUCCESS)
    else:
        engine.advance_stage()
        if s.stage == Stage.AFTERMATH:
            engine.append_log("SYSTEM UPDATE: All sectors cleared. You survived, but you are not king.", LogType.INFO)
        else:
            engine.append_log(f"SYSTEM UPDATE: Advancing to Sector {s.stage}", LogType.INFO)

    engine.emit(DecisionResolved(engine.session_id, stage, opt.choice_label, result_label))

    return DecisionResult(
        stage=stage,
        option=opt.key,
        accepted=True,
        cash_delta=int(delta[0]),
        brand_delta=int(delta[1]),
        cash_before=cash_before,
        brand_before=brand_before,
        cash_after=int(s.cash),
        brand_after=int(s.brand),
        status=s.status.value,
        choice_label=opt.choice_label,
        result_label=result_label,
    )


def preview_delta(engine: StageEngine, option_key: str) -> Optional[Delta]:
    """Delta the option would apply right now; None when not applicable."""
    spec = get_stage_spec(engine.state.stage)
    if spec is None:
        return None
    opt = spec.option(option_key)
    if opt.payout is Payout.HUNT and not hunt_permitted(engine.energy):
        return None
    return option_delta(engine, opt)
