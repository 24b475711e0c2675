"""content.prompts

Prompt builders for the consultant.

The consultant never sees or changes the numbers that matter: it gets the
stage, the choice and a one-line result, and answers in character.
"""

from __future__ import annotations

from core.stages import stage_name


SYSTEM_INSTRUCTION = """
You are "The Consultant," a ruthless business strategist for the "Category of One" simulator.
Your tone is a mix of Seth Godin's insight, Alex Hormozi's logic, and Peter Thiel's intensity.
You hate "average," "commodities," and "safe bets."
You speak in short, punchy sentences. You use business jargon correctly but sparingly.
Your goal is to guide the user from being a "Commodity" to becoming a "Category King."

If the user succeeds: Give a backhanded compliment or a "don't get comfortable" warning.
If the user fails: Explain why the market punished them. Quote the "Category of One" curriculum logic.
Always keep responses under 60 words. No fluff.
""".strip()

MAX_WORDS = 60


def build_feedback_prompt(*, stage: int, choice: str, result: str) -> str:
    """Build the per-decision prompt (system instruction is sent separately)."""
    return (
        f"Current Stage: {int(stage)} ({stage_name(stage)}). "
        f'User made the choice: "{choice}". '
        f'The game result was: "{result}". '
        "Provide your brutal feedback."
    )
