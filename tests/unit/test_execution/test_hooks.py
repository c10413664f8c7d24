"""Tests for turn lifecycle hooks."""

from __future__ import annotations

import pytest

from agents_context.execution.hooks import HookEntry, HookRegistry, HookType

pytestmark = pytest.mark.asyncio


# ============================================================================
# Registration Tests
# ============================================================================


class TestRegistration:
    """Tests for registering and removing hooks."""

    async def test_register_directly(self):
        registry = HookRegistry()

        entry = registry.register(HookType.PRE_TURN, lambda context, **kw: None, name="noop")

        assert isinstance(entry, HookEntry)
        assert registry.get_hooks(HookType.PRE_TURN) == [entry]

    async def test_register_as_decorator(self):
        registry = HookRegistry()

        @registry.register(HookType.POST_TURN)
        def after_turn(context, **kwargs):
            pass

        hooks = registry.get_hooks(HookType.POST_TURN)
        assert [h.name for h in hooks] == ["after_turn"]

    async def test_register_by_string(self):
        registry = HookRegistry()
        registry.register("on_compaction", lambda context, **kw: None)
        assert len(registry.get_hooks(HookType.ON_COMPACTION)) == 1

    async def test_unregister_by_name(self):
        registry = HookRegistry()
        registry.register(HookType.PRE_TURN, lambda context, **kw: None, name="a")
        registry.register(HookType.POST_TURN, lambda context, **kw: None, name="a")
        registry.register(HookType.POST_TURN, lambda context, **kw: None, name="b")

        assert registry.unregister(name="a") == 2
        assert [h.name for h in registry.get_hooks(HookType.POST_TURN)] == ["b"]

    async def test_unregister_everything(self):
        registry = HookRegistry()
        registry.register(HookType.PRE_TURN, lambda context, **kw: None)
        registry.register(HookType.ON_COMPACTION, lambda context, **kw: None)

        assert registry.unregister() == 2
        assert registry.get_hooks(HookType.ON_COMPACTION) == []

    async def test_unregister_by_type(self):
        registry = HookRegistry()
        registry.register(HookType.PRE_TURN, lambda context, **kw: None)
        registry.register(HookType.POST_TURN, lambda context, **kw: None)

        assert registry.unregister(hook_type=HookType.PRE_TURN) == 1
        assert registry.get_hooks(HookType.PRE_TURN) == []
        assert len(registry.get_hooks(HookType.POST_TURN)) == 1

    async def test_clear(self):
        registry = HookRegistry()
        registry.register(HookType.PRE_TURN, lambda context, **kw: None)
        registry.register(HookType.ON_STATE_CHANGE, lambda context, **kw: None)

        registry.clear()

        assert registry.get_hooks(HookType.PRE_TURN) == []
        assert registry.get_hooks(HookType.ON_STATE_CHANGE) == []


# ============================================================================
# Firing Tests
# ============================================================================


class TestFiring:
    """Tests for firing hooks."""

    async def test_priority_order(self):
        registry = HookRegistry()
        order = []
        registry.register(HookType.PRE_TURN, lambda context, **kw: order.append("late"), priority=10)
        registry.register(HookType.PRE_TURN, lambda context, **kw: order.append("early"), priority=-1)

        await registry.fire(HookType.PRE_TURN)

        assert order == ["early", "late"]

    async def test_sync_and_async_callbacks(self):
        registry = HookRegistry()
        calls = []

        def sync_hook(context, **kwargs):
            calls.append(("sync", kwargs["turn"]))

        async def async_hook(context, **kwargs):
            calls.append(("async", kwargs["turn"]))

        registry.register(HookType.PRE_TURN, sync_hook)
        registry.register(HookType.PRE_TURN, async_hook)

        await registry.fire(HookType.PRE_TURN, turn=3)

        assert calls == [("sync", 3), ("async", 3)]

    async def test_context_carries_session_and_data(self):
        registry = HookRegistry()
        contexts = []
        registry.register(HookType.ON_COMPACTION, lambda context, **kw: contexts.append(context))

        await registry.fire(HookType.ON_COMPACTION, session_id="s-1", summary_text="We covered qubits.")

        context = contexts[0]
        assert context.hook_type == HookType.ON_COMPACTION
        assert context.session_id == "s-1"
        assert context.get("summary_text") == "We covered qubits."
        assert context.get("missing", "default") == "default"

    async def test_failing_hook_does_not_propagate(self):
        registry = HookRegistry()
        calls = []

        def broken(context, **kwargs):
            raise RuntimeError("boom")

        registry.register(HookType.POST_TURN, broken, priority=0)
        registry.register(HookType.POST_TURN, lambda context, **kw: calls.append("ran"), priority=1)

        await registry.fire(HookType.POST_TURN)

        assert calls == ["ran"]

    async def test_equal_priority_keeps_registration_order(self):
        registry = HookRegistry()
        order = []
        for label in ("first", "second", "third"):
            registry.register(HookType.POST_TURN, lambda context, label=label, **kw: order.append(label))

        await registry.fire(HookType.POST_TURN)

        assert order == ["first", "second", "third"]

    async def test_unregistered_hook_not_fired(self):
        registry = HookRegistry()
        calls = []
        registry.register(HookType.PRE_TURN, lambda context, **kw: calls.append("x"), name="quiet")

        registry.unregister(HookType.PRE_TURN, name="quiet")
        await registry.fire(HookType.PRE_TURN)

        assert calls == []

    async def test_fire_without_hooks(self):
        registry = HookRegistry()

        await registry.fire(HookType.ON_STATE_CHANGE, session_id="s-1", new_state="idle")
