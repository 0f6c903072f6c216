"""Render retrieval results as prompt context."""

from __future__ import annotations

from .models import RetrievalResult

CONTEXT_HEADER = "Context from knowledge base:"


def format_context(result: RetrievalResult) -> str:
    """Numbered list of matches with their source; empty result gives ``""``."""

    if not result.matches:
        return ""

    lines = [CONTEXT_HEADER, ""]
    for number, match in enumerate(result.matches, start=1):
        lines.append(f"[{number}] {match.document.text}")
        source = match.document.source
        if source:
            lines.append(f"    Source: {source}")
        lines.append("")
    return "\n".join(lines).strip()


def augment_prompt(context: str, user_text: str) -> str:
    """Prepend retrieved context to the user text; unchanged when there is none."""

    if not context:
        return user_text
    return f"{context}\n\nUser question: {user_text}"
