import pytest

from shopping_assistant.memory.models import ConversationTurn, Role
from shopping_assistant.memory.window import ContextWindow


def turn(key, content, role=Role.USER):
    return ConversationTurn(conversation_id=key, role=role, content=content)


def test_unknown_key_reads_empty():
    window = ContextWindow(max_turns=3)

    assert window.read("nobody") == []
    assert len(window) == 0


def test_keeps_most_recent_turns_in_order():
    window = ContextWindow(max_turns=3)
    for number in range(5):
        window.append("conv", turn("conv", f"m{number}"))

    assert [t.content for t in window.read("conv")] == ["m2", "m3", "m4"]


def test_keys_do_not_share_state():
    window = ContextWindow(max_turns=2)
    window.append("a", turn("a", "for a"))
    window.extend("b", [turn("b", "b1"), turn("b", "b2"), turn("b", "b3")])

    assert [t.content for t in window.read("a")] == ["for a"]
    assert [t.content for t in window.read("b")] == ["b2", "b3"]
    assert len(window) == 2


def test_read_returns_a_copy():
    window = ContextWindow(max_turns=2)
    window.append("conv", turn("conv", "hi"))

    window.read("conv").clear()

    assert len(window.read("conv")) == 1


def test_loader_seeds_first_touch_only():
    calls = []

    def loader(key, limit):
        calls.append((key, limit))
        return [turn(key, "old question"), turn(key, "old answer", Role.ASSISTANT)]

    window = ContextWindow(max_turns=4, loader=loader)
    window.append("conv", turn("conv", "new"))
    window.read("conv")

    assert calls == [("conv", 4)]
    assert [t.content for t in window.read("conv")] == ["old question", "old answer", "new"]


def test_rejects_non_positive_size():
    with pytest.raises(ValueError):
        ContextWindow(max_turns=0)
