"""
core.effects
Economy / physics rules:
- status resolution (win / loss thresholds)
- offer score (value equation)
- hunt payout and its energy gate
- pure delta application
"""

from __future__ import annotations

from typing import Tuple

from .state import (
    BANKRUPT_CASH,
    BRAND_COLLAPSE,
    ENERGY_BUDGET,
    FINAL_STAGE,
    WIN_BRAND,
    WIN_CASH,
    EnergyAllocation,
    Status,
    ValueEquation,
)


Delta = Tuple[int, int]  # (cash, brand)

OFFER_SCORE_THRESHOLD = 5.0
OFFER_HIT: Delta = (7_000, 15)
OFFER_MISS: Delta = (-3_000, -5)

HUNT_CASH_PER_ENERGY = 100
HUNT_CASH_PER_AD = 200
HUNT_BRAND = 10


def resolve_status(cash: int, brand: int, stage: int) -> Status:
    """Status implied by a (cash, brand, stage) triple.

    Loss is checked first (cash, then brand) so it wins over a simultaneous
    win. `stage` is the stage the decision was taken on, before advancing.
    """
    if cash <= BANKRUPT_CASH:
        return Status.LOST
    if brand <= BRAND_COLLAPSE:
        return Status.LOST
    if int(stage) == int(FINAL_STAGE) and cash >= WIN_CASH and brand >= WIN_BRAND:
        return Status.WON
    return Status.PLAYING


def apply_delta(cash: int, brand: int, stage: int, delta: Delta) -> Tuple[int, int, Status]:
    """Apply a (cash, brand) delta and resolve status (pure function)."""
    new_cash = int(cash) + int(delta[0])
    new_brand = int(brand) + int(delta[1])
    return new_cash, new_brand, resolve_status(new_cash, new_brand, stage)


def offer_score(eq: ValueEquation) -> float:
    return (eq.dream * eq.likelihood) / (max(1, eq.time_delay) * max(1, eq.effort))


def offer_delta(eq: ValueEquation) -> Delta:
    return OFFER_HIT if offer_score(eq) >= OFFER_SCORE_THRESHOLD else OFFER_MISS


def hunt_permitted(energy: EnergyAllocation) -> bool:
    return energy.total <= ENERGY_BUDGET


def hunt_delta(energy: EnergyAllocation) -> Delta:
    """Cash from total effort minus the ad spend; does not check the gate."""
    cash = energy.total * HUNT_CASH_PER_ENERGY - energy.ads * HUNT_CASH_PER_AD
    return int(cash), HUNT_BRAND
