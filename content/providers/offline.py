"""content.providers.offline

Deterministic consultant without a network call.

Used when no API key is configured and by the headless runner / tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from ..schemas import FALLBACK_ERROR, FeedbackRequestError, make_request
from .base import ProviderStatus


STAGE_LINES: Dict[int, str] = {
    1: "Competing on price is a race you win by going broke first. Own a category or be a line item.",
    2: "An offer is math, not poetry. Raise the dream, cut the wait. Otherwise you're selling hours.",
    3: "If your grandmother can't repeat your headline, the market won't either.",
    4: "Content that asks before it gives is an ad nobody paid to see.",
    5: "Leads are a volume game until they aren't. Know which channel actually pays you back.",
    6: "Status symbols are liabilities with good lighting. Buy assets.",
    7: "Hire for the mission and pay for the outcome. Mercenaries leave at the first better offer.",
    8: "The moment you discount, you told them your price was a guess.",
}


@dataclass
class OfflineAdvisor:
    def status(self) -> ProviderStatus:
        return ProviderStatus(True, "offline", "canned", note="no API key; canned consultant lines")

    def request_feedback(self, stage: int, choice_label: str, result_label: str) -> str:
        try:
            req = make_request(stage, choice_label, result_label)
        except FeedbackRequestError:
            return FALLBACK_ERROR
        return f"{req.choice}? {STAGE_LINES[req.stage]}"
