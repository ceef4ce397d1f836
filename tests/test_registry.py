"""Tests for the subscriber registry."""

from __future__ import annotations

from unittest.mock import MagicMock

from panelhub.registry import Subscriber, SubscriberRegistry


def test_register_returns_distinct_handles(make_channel):
    reg = SubscriberRegistry()
    h1 = reg.register(Subscriber(make_channel()))
    h2 = reg.register(Subscriber(make_channel()))
    assert h1 != h2
    assert len(reg) == 2
    assert h1 in reg and h2 in reg


def test_deregister_removes(make_channel):
    reg = SubscriberRegistry()
    h = reg.register(Subscriber(make_channel()))
    assert reg.deregister(h) is True
    assert h not in reg
    assert len(reg) == 0


def test_deregister_is_idempotent(make_channel):
    hook = MagicMock()
    reg = SubscriberRegistry()
    keep = reg.register(Subscriber(make_channel()))
    h = reg.register(Subscriber(make_channel(), on_detach=hook))

    assert reg.deregister(h) is True
    assert reg.deregister(h) is False

    hook.assert_called_once_with()
    assert keep in reg


def test_deregister_unknown_handle_is_noop():
    reg = SubscriberRegistry()
    assert reg.deregister(12345) is False


def test_deregister_survives_failing_hook(make_channel):
    reg = SubscriberRegistry()
    h = reg.register(Subscriber(make_channel(), on_detach=MagicMock(side_effect=RuntimeError)))
    assert reg.deregister(h) is True
    assert len(reg) == 0


def test_for_each_in_registration_order(make_channel):
    reg = SubscriberRegistry()
    channels = [make_channel() for _ in range(4)]
    for ch in channels:
        reg.register(Subscriber(ch))

    seen = []
    reg.for_each(lambda sub: seen.append(sub.channel))

    assert seen == channels


def test_for_each_drops_failing_subscriber_and_continues(make_channel, broken_channel):
    hook = MagicMock()
    reg = SubscriberRegistry()
    first = make_channel()
    last = make_channel()
    reg.register(Subscriber(first))
    bad = reg.register(Subscriber(broken_channel, on_detach=hook))
    reg.register(Subscriber(last))

    reg.for_each(lambda sub: sub.channel.send("frame"))

    assert first.frames == ["frame"]
    assert last.frames == ["frame"]
    assert bad not in reg
    assert len(reg) == 2
    hook.assert_called_once_with()


def test_for_each_skips_subscriber_removed_mid_pass(make_channel):
    reg = SubscriberRegistry()
    a = make_channel()
    b = make_channel()
    reg.register(Subscriber(a))
    hb = reg.register(Subscriber(b))

    def deliver(sub):
        sub.channel.send("frame")
        if sub.channel is a:
            reg.deregister(hb)

    reg.for_each(deliver)

    assert a.frames == ["frame"]
    assert b.frames == []


def test_for_each_ignores_subscriber_added_mid_pass(make_channel):
    reg = SubscriberRegistry()
    a = make_channel()
    late = make_channel()
    reg.register(Subscriber(a))

    def deliver(sub):
        sub.channel.send("frame")
        if sub.channel is a:
            reg.register(Subscriber(late))

    reg.for_each(deliver)

    assert late.frames == []
    assert len(reg) == 2


def test_clear_runs_every_hook(make_channel):
    hooks = [MagicMock(), MagicMock()]
    reg = SubscriberRegistry()
    for hook in hooks:
        reg.register(Subscriber(make_channel(), on_detach=hook))

    assert reg.clear() == 2
    assert len(reg) == 0
    for hook in hooks:
        hook.assert_called_once_with()
