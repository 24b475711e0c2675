"""engine.config

Engine / advisory configuration passed from UI.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Tuple

from core.state import LOG_CAPACITY


IDLE_MESSAGE = "STANDBY. BOOTING STRATEGY ENGINE..."
GREETING_MESSAGE = "Welcome. You are a commodity. Let's fix that. Sector 1: Positioning."

API_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")

DEFAULT_MODELS = (
    "gemini-3-flash-preview",
    "gemini-2.5-flash",
    "gemini-2.0-flash",
)


@dataclass(frozen=True)
class EngineConfig:
    log_capacity: int = LOG_CAPACITY
    idle_message: str = IDLE_MESSAGE
    greeting_message: str = GREETING_MESSAGE


def split_api_keys(raw: str) -> List[str]:
    """'k1, k2' -> ['k1', 'k2'] (rotation order)."""
    return [k.strip() for k in str(raw or "").split(",") if k.strip()]


@dataclass(frozen=True)
class AdvisoryConfig:
    api_keys: List[str] = field(default_factory=list)
    models: Tuple[str, ...] = DEFAULT_MODELS
    temperature: float = 0.8
    top_p: float = 0.95
    max_output_tokens: int = 256
    max_workers: int = 2

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_keys)

    @staticmethod
    def from_env(env: Optional[Mapping[str, str]] = None) -> "AdvisoryConfig":
        """First non-empty of GEMINI_API_KEY / GOOGLE_API_KEY / API_KEY."""
        env = os.environ if env is None else env
        for name in API_KEY_ENV_VARS:
            keys = split_api_keys(env.get(name, ""))
            if keys:
                return AdvisoryConfig(api_keys=keys)
        return AdvisoryConfig(api_keys=[])
