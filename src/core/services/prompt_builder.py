"""Construcción de prompts para el proveedor IA.

Función pura: mismos posts + mismo handle => mismos bytes. Nada de fechas,
aleatoriedad ni config aquí.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.domain.models import ContentBatch

SYSTEM_PROMPT = (
    "You are the CogSec Checker, a sharp-tongued but good-natured analyst of online "
    "cognitive security. You read someone's recent posts and rank how well they resist "
    "manipulation, hype and engagement bait. You are funny, specific and never cruel "
    "about protected traits. You always answer in the exact format you are given."
)

OUTPUT_GRAMMAR = (
    "x: <integer from -10 to 10>\n"
    "y: <integer from -10 to 10>\n"
    "Explanation: <two to four sentences>"
)


@dataclass(frozen=True)
class PromptPair:
    system: str
    user: str


def render_posts(batch: ContentBatch) -> str:
    # Un post por línea, numerado 1..N en el orden del proveedor.
    return "\n".join(f"{index}. {item.text}" for index, item in enumerate(batch.items, start=1))


def build_prompts(batch: ContentBatch, identifier: str) -> PromptPair:
    user = (
        f"Here are the {len(batch)} most recent posts from @{identifier}:\n\n"
        f"{render_posts(batch)}\n\n"
        "Rank this account on two axes:\n"
        "- x: cognitive security, from -10 (believes and reposts anything) "
        "to 10 (verifies everything, impossible to bait).\n"
        "- y: originality, from -10 (pure NPC, repeats the timeline) "
        "to 10 (fully independent thinker).\n\n"
        "Reply with exactly these three labelled fields and nothing else:\n"
        f"{OUTPUT_GRAMMAR}\n\n"
        f"In the explanation, roast @{identifier} by name and reference their posts."
    )
    return PromptPair(system=SYSTEM_PROMPT, user=user)
