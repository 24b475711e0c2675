"""content.providers.gemini

Gemini provider (LLM) for the consultant.

- Uses google-genai.
- Never raises from request_feedback(): failures end in a fixed fallback line
  and are logged for diagnostics.

Important: This provider is UI-agnostic (no Streamlit dependency).
Secrets/env loading is done in the Streamlit app / engine.config.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from google import genai

from engine.config import DEFAULT_MODELS, AdvisoryConfig

from ..parsing import clean_feedback_text
from ..prompts import SYSTEM_INSTRUCTION, build_feedback_prompt
from ..schemas import FALLBACK_EMPTY, FALLBACK_ERROR, Feedback, FeedbackRequestError, make_request
from .base import ProviderStatus

logger = logging.getLogger(__name__)


@dataclass
class GeminiProvider:
    api_keys: List[str]
    models: Tuple[str, ...] = DEFAULT_MODELS
    temperature: float = 0.8
    top_p: float = 0.95
    max_output_tokens: int = 256

    # runtime
    backend: str = "none"  # genai | none
    model_in_use: str = ""
    last_error: str = ""

    _client: Any = field(default=None, repr=False)
    # shared by the channel's worker threads: guards api_keys/_client/model_in_use
    _lock: Any = field(default_factory=threading.Lock, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.api_keys = [k.strip() for k in (self.api_keys or []) if str(k).strip()]
        if self._client is not None:
            # injected client (tests, custom transport)
            self.backend = "genai"
            self.model_in_use = self.models[0] if self.models else ""
            return
        self._init_backend()

    @staticmethod
    def from_config(cfg: AdvisoryConfig, client: Any = None) -> "GeminiProvider":
        return GeminiProvider(
            api_keys=list(cfg.api_keys),
            models=tuple(cfg.models),
            temperature=float(cfg.temperature),
            top_p=float(cfg.top_p),
            max_output_tokens=int(cfg.max_output_tokens),
            _client=client,
        )

    def _init_backend(self) -> None:
        self._client = None
        self.backend = "none"
        self.model_in_use = ""

        if not self.api_keys:
            self.last_error = "No API key configured."
            return

        try:
            self._client = genai.Client(api_key=self.api_keys[0])
        except Exception as e:
            self.last_error = f"google-genai client failed: {e}"
            logger.warning("Gemini client init failed: %s", e)
            return

        self.backend = "genai"
        self.model_in_use = self.models[0] if self.models else ""
        self.last_error = ""

    def status(self) -> ProviderStatus:
        if self.backend == "none":
            return ProviderStatus(False, "none", "", note="", error=str(self.last_error or ""))
        return ProviderStatus(True, self.backend, self.model_in_use, note="", error="")

    def _rotate_key(self, failed_key: str = "") -> None:
        with self._lock:
            if len(self.api_keys) <= 1:
                return
            if failed_key and self.api_keys[0] != failed_key:
                # another worker already moved past this key
                return
            self.api_keys = self.api_keys[1:] + self.api_keys[:1]
            self._init_backend()

    def _generation_config(self) -> Dict[str, Any]:
        return {
            "system_instruction": SYSTEM_INSTRUCTION,
            "temperature": float(self.temperature),
            "top_p": float(self.top_p),
            "max_output_tokens": int(self.max_output_tokens),
        }

    def _generate_text(self, prompt: str) -> str:
        """First non-empty reply across models (then keys).

        Returns "" when every call answered but none had text; raises when
        nothing answered at all.
        """
        last_err: Optional[Exception] = None
        answered = False

        for _ in range(max(1, len(self.api_keys))):
            with self._lock:
                client = self._client if self.backend == "genai" else None
                key = self.api_keys[0] if self.api_keys else ""
            if client is not None:
                for m in self.models:
                    try:
                        resp = client.models.generate_content(
                            model=m,
                            contents=prompt,
                            config=self._generation_config(),
                        )
                    except Exception as e:
                        last_err = e
                        logger.debug("Gemini %s failed: %s", m, e)
                        continue
                    answered = True
                    txt = (getattr(resp, "text", "") or "").strip()
                    if txt:
                        with self._lock:
                            self.model_in_use = m
                        return txt

            if answered:
                return ""
            self._rotate_key(key)

        if answered:
            return ""
        raise RuntimeError(f"Gemini error: {last_err}" if last_err else "Gemini backend unavailable.")

    def get_feedback(self, stage: int, choice_label: str, result_label: str) -> Feedback:
        try:
            req = make_request(stage, choice_label, result_label)
        except FeedbackRequestError as e:
            logger.warning("Consultant request rejected: %s", e)
            return Feedback(FALLBACK_ERROR, "fallback", error=str(e))

        if self.backend == "none":
            return Feedback(FALLBACK_ERROR, "fallback", error=str(self.last_error or "backend unavailable"))

        prompt = build_feedback_prompt(stage=req.stage, choice=req.choice, result=req.result)
        try:
            raw = self._generate_text(prompt)
        except Exception as e:
            self.last_error = f"{type(e).__name__}: {e}"
            logger.warning("Consultant error: %s", self.last_error)
            return Feedback(FALLBACK_ERROR, "fallback", error=self.last_error)

        cleaned = clean_feedback_text(raw)
        if not cleaned.ok:
            logger.info("Consultant reply unusable (%s), using fallback", cleaned.error)
            return Feedback(FALLBACK_EMPTY, "fallback", error=cleaned.error)
        return Feedback(cleaned.text, self.model_in_use)

    def request_feedback(self, stage: int, choice_label: str, result_label: str) -> str:
        return self.get_feedback(stage, choice_label, result_label).text
