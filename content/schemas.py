"""content.schemas

Contracts for the consultant call:
- FeedbackRequest: what the engine hands over after a decision.
- Feedback: what comes back (text + where it came from).

Validation here is strict; the provider turns a failed validation into the
fallback line rather than an exception.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict

from core.state import DECISION_STAGES


FALLBACK_ERROR = "The market doesn't wait for your connection to stabilize. Make a decision and move."
FALLBACK_EMPTY = "Execution is the only thing that matters. Move to the next stage."

MAX_LABEL_CHARS = 200


class FeedbackRequestError(ValueError):
    pass


@dataclass(frozen=True)
class FeedbackRequest:
    stage: int
    choice: str
    result: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Feedback:
    text: str
    source: str          # model name, "offline" or "fallback"
    error: str = ""

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"


def make_request(stage: Any, choice: Any, result: Any) -> FeedbackRequest:
    try:
        stage_i = int(stage)
    except (TypeError, ValueError):
        raise FeedbackRequestError(f"stage must be an integer, got {stage!r}") from None
    req = FeedbackRequest(
        stage=stage_i,
        choice=str(choice or "").strip()[:MAX_LABEL_CHARS],
        result=str(result or "").strip()[:MAX_LABEL_CHARS],
    )
    validate_request(req)
    return req


def validate_request(req: FeedbackRequest) -> None:
    if req.stage not in DECISION_STAGES:
        raise FeedbackRequestError(f"stage out of range: {req.stage}")
    if not req.choice:
        raise FeedbackRequestError("choice label is empty")
    if not req.result:
        raise FeedbackRequestError("result label is empty")
