"""content.parsing

Cleanup for consultant replies.

Models sometimes wrap a one-paragraph answer in code fences or quotes, or use
smart quotes and hard line breaks. We only normalize text; length is asked
for in the prompt and not enforced here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class CleanResult:
    text: str
    raw: str
    error: str = ""

    @property
    def ok(self) -> bool:
        return bool(self.text) and not self.error


_FENCE_RE = re.compile(r"```(?:\w+)?\s*(.*?)```", re.DOTALL)
_WS_RE = re.compile(r"\s+")
_WRAPPING_QUOTES = ('"', "'")


def strip_code_fences(s: str) -> str:
    s = (s or "").strip()
    m = _FENCE_RE.search(s)
    if m:
        return (m.group(1) or "").strip()
    return s


def normalize_smart_quotes(s: str) -> str:
    return (
        (s or "")
        .replace("\u201c", '"')
        .replace("\u201d", '"')
        .replace("\u2018", "'")
        .replace("\u2019", "'")
        .replace("\u00a0", " ")
    )


def strip_wrapping_quotes(s: str) -> str:
    s = (s or "").strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in _WRAPPING_QUOTES:
        return s[1:-1].strip()
    return s


def collapse_whitespace(s: str) -> str:
    return _WS_RE.sub(" ", s or "").strip()


def word_count(s: str) -> int:
    return len((s or "").split())


def clean_feedback_text(raw: str) -> CleanResult:
    """Normalize a model reply. An empty result is reported as an error."""
    raw = str(raw or "")
    s = strip_code_fences(raw)
    s = normalize_smart_quotes(s)
    s = collapse_whitespace(s)
    s = strip_wrapping_quotes(s)
    if not s:
        return CleanResult(text="", raw=raw, error="empty reply")
    return CleanResult(text=s, raw=raw)
