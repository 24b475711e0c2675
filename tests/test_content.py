"""Tests for content.parsing, content.prompts and content.schemas."""

import pytest

from content.parsing import clean_feedback_text, strip_code_fences, word_count
from content.prompts import MAX_WORDS, SYSTEM_INSTRUCTION, build_feedback_prompt
from content.schemas import FeedbackRequestError, make_request


class TestCleanFeedbackText:
    def test_code_fence_and_newlines(self):
        res = clean_feedback_text("```text\nShort.\nPunchy.\n```")
        assert res.ok
        assert res.text == "Short. Punchy."

    def test_keeps_inner_quotes(self):
        assert clean_feedback_text('He said "no" twice.').text == 'He said "no" twice.'

    def test_empty_is_error(self):
        res = clean_feedback_text("  \n ")
        assert not res.ok
        assert res.error == "empty reply"

    def test_no_fence_passthrough(self):
        assert strip_code_fences("  plain  ") == "plain"


class TestPrompts:
    def test_feedback_prompt(self):
        p = build_feedback_prompt(stage=8, choice="Reframe", result="Value over price.")
        assert p == (
            'Current Stage: 8 (Sector 8: Closing). User made the choice: "Reframe". '
            'The game result was: "Value over price.". Provide your brutal feedback.'
        )

    def test_system_instruction_sets_word_cap(self):
        assert f"under {MAX_WORDS} words" in SYSTEM_INSTRUCTION
        assert word_count(SYSTEM_INSTRUCTION) > MAX_WORDS


class TestFeedbackRequest:
    def test_trims_labels(self):
        req = make_request("4", "  Sales Pitch Post ", "Scrolled past.")
        assert req.to_dict() == {"stage": 4, "choice": "Sales Pitch Post", "result": "Scrolled past."}

    @pytest.mark.parametrize("stage", [0, 9, "abc", None])
    def test_bad_stage(self, stage):
        with pytest.raises(FeedbackRequestError):
            make_request(stage, "x", "y")

    def test_empty_result(self):
        with pytest.raises(FeedbackRequestError, match="result"):
            make_request(2, "Deploy Offer", "   ")
