"""
core.stages
Stage catalog: the eight sectors, their scenario line and the options on offer.

Kept in core so the rules and the UI read the same table.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from .effects import Delta
from .state import DECISION_STAGES, Stage


class Payout(str, Enum):
    FIXED = "fixed"    # delta is a constant of the option
    OFFER = "offer"    # delta comes from the value-equation score
    HUNT = "hunt"      # delta comes from the energy allocation


@dataclass(frozen=True)
class OptionSpec:
    key: str
    label: str
    choice_label: str       # sent to the consultant
    result_label: str       # sent to the consultant
    payout: Payout = Payout.FIXED
    delta: Optional[Delta] = None
    highlight: bool = False  # the "category of one" answer; UI styling only


@dataclass(frozen=True)
class StageSpec:
    stage: Stage
    title: str
    scenario: str
    options: Tuple[OptionSpec, ...]

    def option(self, key: str) -> OptionSpec:
        for opt in self.options:
            if opt.key == str(key).strip().upper():
                return opt
        raise ValueError(f"Unknown option {key!r} for stage {int(self.stage)}")


OFFER_RESULT_HIT = "Grand Slam Offer. They feel stupid saying no."
OFFER_RESULT_MISS = "Commodity offer. Nobody cares."


CATALOG: Dict[Stage, StageSpec] = {
    Stage.POSITIONING: StageSpec(
        stage=Stage.POSITIONING,
        title="Sector 1: Positioning",
        scenario="A competitor launches a product 10% cheaper than yours.",
        options=(
            OptionSpec("A", "Lower prices to match.", "Price Drop", "Race to the bottom.", delta=(-2_000, -15)),
            OptionSpec("B", "Add features to justify price.", "More Features", "Complexity kills.", delta=(-4_000, 5)),
            OptionSpec("C", "Niche down and rename category.", "Niche Down", "Blue Ocean Strategy.", delta=(0, 25), highlight=True),
        ),
    ),
    Stage.OFFER: StageSpec(
        stage=Stage.OFFER,
        title="Sector 2: The Offer",
        scenario="Tune the value equation. Dream outcome and likelihood up, time delay and effort down.",
        options=(
            OptionSpec("A", "Deploy offer.", "Deploy Offer", OFFER_RESULT_HIT, payout=Payout.OFFER, highlight=True),
        ),
    ),
    Stage.MESSAGING: StageSpec(
        stage=Stage.MESSAGING,
        title="Sector 3: Messaging",
        scenario="Write the one line that goes on the homepage.",
        options=(
            OptionSpec("A", '"We leverage synergistic paradigms."', "Jargon Headline", "Nobody understood a word.", delta=(-1_500, -15)),
            OptionSpec("B", '"We get your weekends back."', "Outcome Headline", "Clarity converts.", delta=(4_000, 10), highlight=True),
        ),
    ),
    Stage.CONTENT: StageSpec(
        stage=Stage.CONTENT,
        title="Sector 4: Content",
        scenario="Pick the piece you publish this quarter.",
        options=(
            OptionSpec("A", '"Buy our great product."', "Sales Pitch Post", "Scrolled past.", delta=(-1_000, 0)),
            OptionSpec("B", "\"The Insider's Guide to [Niche].\"", "Insider's Guide", "Value first, trust follows.", delta=(3_000, 20), highlight=True),
        ),
    ),
    Stage.HUNT: StageSpec(
        stage=Stage.HUNT,
        title="Sector 5: The Hunt",
        scenario="Split 100 units of energy across warm outreach, cold outreach, content and ads.",
        options=(
            OptionSpec("A", "Hunt.", "Lead Hunt", "Pipeline filled.", payout=Payout.HUNT, highlight=True),
        ),
    ),
    Stage.FORTRESS: StageSpec(
        stage=Stage.FORTRESS,
        title="Sector 6: Money",
        scenario="The first real profit hits the account.",
        options=(
            OptionSpec("A", "Buy a Rolex (Liabilities)", "Rolex", "Liabilities dressed up as status.", delta=(-20_000, 20)),
            OptionSpec("B", "Reinvest in Ads (Assets)", "Reinvest", "Assets compound.", delta=(-10_000, 10), highlight=True),
        ),
    ),
    Stage.HIRING: StageSpec(
        stage=Stage.HIRING,
        title="Sector 7: Hiring",
        scenario="You need a first key hire.",
        options=(
            OptionSpec("A", "The Mercenary ($150k, 9-5)", "The Mercenary", "Paid for hours, not outcomes.", delta=(-12_000, -5)),
            OptionSpec("B", "The Patriot (Mission-driven)", "The Patriot", "Mission beats money.", delta=(-6_000, 20), highlight=True),
        ),
    ),
    Stage.CLOSE: StageSpec(
        stage=Stage.CLOSE,
        title="Sector 8: Closing",
        scenario="\"It's too expensive.\"",
        options=(
            OptionSpec("A", "\"I'll give you a discount.\"", "Discount", "Your price was fake all along.", delta=(-10_000, -20)),
            OptionSpec("B", '"Money aside, does it solve the problem?"', "Reframe", "Value over price.", delta=(40_000, 30), highlight=True),
        ),
    ),
}

# Every decision stage must have an entry; fail at import, not mid-game.
_missing = [s for s in DECISION_STAGES if s not in CATALOG]
if _missing:
    raise RuntimeError(f"Stage catalog incomplete: {_missing}")


def as_stage(n: int) -> Stage:
    try:
        return Stage(int(n))
    except ValueError:
        raise ValueError(f"No such stage: {n}") from None


def get_stage_spec(n: int) -> Optional[StageSpec]:
    """Spec for a stage number; None for the intro and aftermath screens."""
    stage = as_stage(n)
    if stage in (Stage.INTRO, Stage.AFTERMATH):
        return None
    return CATALOG[stage]


def stage_name(n: int) -> str:
    stage = as_stage(n)
    if stage is Stage.INTRO:
        return "Intro"
    if stage is Stage.AFTERMATH:
        return "Aftermath"
    return CATALOG[stage].title
