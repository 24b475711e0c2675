"""Category of One core (pure domain, no UI / no LLM)."""

API_VERSION = "core-v1-20261018"
