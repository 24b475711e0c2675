"""Tests for content.providers.gemini.GeminiProvider (no network: fake client)."""

from types import SimpleNamespace

import pytest

import content.providers.gemini as gemini_module
from content.prompts import SYSTEM_INSTRUCTION
from content.providers.gemini import GeminiProvider
from content.providers.offline import OfflineAdvisor
from content.schemas import FALLBACK_EMPTY, FALLBACK_ERROR
from engine.config import AdvisoryConfig


class FakeModels:
    def __init__(self, replies):
        # model name -> text, or an Exception to raise
        self.replies = replies
        self.calls = []

    def generate_content(self, *, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        reply = self.replies.get(model, "")
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(text=reply)


def make_provider(replies, models=("m-1", "m-2")):
    client = SimpleNamespace(models=FakeModels(replies))
    cfg = AdvisoryConfig(api_keys=["test-key"], models=models)
    return GeminiProvider.from_config(cfg, client=client), client.models


class TestRequestFeedback:
    def test_returns_cleaned_text(self):
        provider, models = make_provider({"m-1": '  "Good. Now   don’t get comfortable."  '})
        text = provider.request_feedback(1, "Niche Down", "Blue Ocean Strategy.")
        assert text == "Good. Now don't get comfortable."
        assert provider.model_in_use == "m-1"

    def test_sends_prompt_and_generation_params(self):
        provider, models = make_provider({"m-1": "Fine."})
        provider.request_feedback(3, "Outcome Headline", "Clarity converts.")
        call = models.calls[0]
        assert 'User made the choice: "Outcome Headline"' in call["contents"]
        assert call["contents"].startswith("Current Stage: 3")
        assert call["config"]["temperature"] == pytest.approx(0.8)
        assert call["config"]["top_p"] == pytest.approx(0.95)
        assert call["config"]["system_instruction"] == SYSTEM_INSTRUCTION

    def test_falls_through_failing_model(self):
        provider, models = make_provider({"m-1": RuntimeError("404 model"), "m-2": "Second opinion."})
        assert provider.request_feedback(2, "Deploy Offer", "Score 1.0.") == "Second opinion."
        assert [c["model"] for c in models.calls] == ["m-1", "m-2"]
        assert provider.model_in_use == "m-2"

    def test_all_models_fail_gives_error_fallback(self):
        provider, _ = make_provider({"m-1": RuntimeError("quota"), "m-2": RuntimeError("quota")})
        feedback = provider.get_feedback(4, "Insider's Guide", "Value first.")
        assert feedback.text == FALLBACK_ERROR
        assert feedback.is_fallback
        assert "quota" in feedback.error

    def test_empty_reply_gives_empty_fallback(self):
        provider, _ = make_provider({"m-1": "", "m-2": "   "})
        assert provider.request_feedback(5, "Lead Hunt", "Pipeline filled.") == FALLBACK_EMPTY

    def test_fenced_empty_reply_is_malformed(self):
        provider, _ = make_provider({"m-1": "```\n```"})
        assert provider.request_feedback(6, "Rolex", "Liabilities.") == FALLBACK_EMPTY

    def test_invalid_request_skips_network(self):
        provider, models = make_provider({"m-1": "unused"})
        assert provider.request_feedback(9, "x", "y") == FALLBACK_ERROR
        assert provider.request_feedback(3, "", "y") == FALLBACK_ERROR
        assert models.calls == []


class TestKeyRotation:
    @pytest.fixture
    def clients(self, monkeypatch):
        """genai.Client replaced by a per-key fake; k1 is out of quota."""
        built = {}
        replies = {"k1": {"m-1": RuntimeError("quota")}, "k2": {"m-1": "Second key works."}}

        def fake_client(*, api_key):
            client = SimpleNamespace(models=FakeModels(replies[api_key]))
            built[api_key] = client
            return client

        monkeypatch.setattr(gemini_module.genai, "Client", fake_client)
        return built

    def test_failing_key_falls_over_to_next(self, clients):
        provider = GeminiProvider(api_keys=["k1", "k2"], models=("m-1",))
        assert provider.request_feedback(5, "Lead Hunt", "Pipeline filled.") == "Second key works."
        assert provider.api_keys == ["k2", "k1"]
        assert len(clients["k1"].models.calls) == 1
        assert len(clients["k2"].models.calls) == 1

    def test_rotation_skipped_when_key_already_moved(self, clients):
        provider = GeminiProvider(api_keys=["k1", "k2"], models=("m-1",))
        provider._rotate_key("k1")
        provider._rotate_key("k1")
        assert provider.api_keys == ["k2", "k1"]

    def test_every_key_failing_gives_error_fallback(self, monkeypatch):
        def quota_client(*, api_key):
            return SimpleNamespace(models=FakeModels({"m-1": RuntimeError(f"quota {api_key}")}))

        monkeypatch.setattr(gemini_module.genai, "Client", quota_client)
        provider = GeminiProvider(api_keys=["k1", "k2"], models=("m-1",))
        feedback = provider.get_feedback(5, "Lead Hunt", "Pipeline filled.")
        assert feedback.text == FALLBACK_ERROR
        assert "quota" in feedback.error


class TestNoCredentials:
    def test_missing_key_degrades(self):
        provider = GeminiProvider(api_keys=[])
        assert not provider.status().ok
        assert provider.request_feedback(1, "Price Drop", "Race to the bottom.") == FALLBACK_ERROR

    def test_offline_advisor(self):
        advisor = OfflineAdvisor()
        assert advisor.status().backend == "offline"
        assert advisor.request_feedback(8, "Discount", "fake price").startswith("Discount? ")
        assert advisor.request_feedback(0, "x", "y") == FALLBACK_ERROR
