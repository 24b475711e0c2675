"""content.providers.base

Provider interfaces.

A provider's job is to turn (stage, choice, result) into one short line from
the consultant. It must never raise to the caller: every failure ends in a
fixed fallback line.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class ProviderStatus:
    ok: bool
    backend: str
    model: str
    note: str = ""
    error: str = ""


class AdvisoryProvider(Protocol):
    def status(self) -> ProviderStatus: ...

    def request_feedback(self, stage: int, choice_label: str, result_label: str) -> str:
        """Return the consultant's line. Never raises."""
        ...
