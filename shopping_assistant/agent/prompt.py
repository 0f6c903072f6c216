"""Fixed prompt and reply texts used by the orchestrator."""

SYSTEM_PROMPT = (
    "You are a helpful assistant. You help users manage their shopping list and answer questions.\n"
    "Use the shopping list tools whenever the user asks to add, remove, change, show or clear items; "
    "never claim a change you did not make with a tool.\n"
    "When context from the knowledge base is provided, prefer it over guessing.\n"
    "\n"
    "Be concise and friendly in your responses."
)

FALLBACK_REPLY = (
    "Sorry, I ran into a problem while working on that. Please try again in a moment."
)


def placeholder_reply(user_text: str) -> str:
    """Deterministic answer used when no completion provider is configured."""

    return (
        f'I received your message: "{user_text}"\n\n'
        "The AI assistant is not configured right now, so I can't act on it. "
        "Set OPENROUTER_API_KEY to enable it. "
        "Your shopping list is still available at /api/items."
    )
