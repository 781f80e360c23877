"""Tests for namespaced event names and wildcard matching."""

import pytest

from scopewire.event_bus import EventBus, match_event
from scopewire.exceptions import InvalidArgumentsError


@pytest.mark.parametrize(
    ("registered", "emitted", "expected"),
    [
        ("user.created", "user.created", True),
        ("user.*", "user.created", True),
        ("user.*", "user.profile.saved", False),
        ("user.**", "user.profile.saved", True),
        ("user.**", "user", True),
        ("*.created", "order.created", True),
        ("**.saved", "user.profile.saved", True),
        ("user.created", "user.*", True),
        ("user.*", "order.created", False),
        ("user", "user.created", False),
    ],
)
def test_match_event(registered: str, emitted: str, expected: bool):
    assert match_event(registered, emitted, ".") is expected


def test_match_event_custom_delimiter():
    assert match_event("user::*", "user::created", "::") is True
    assert match_event("user.*", "user::created", "::") is False


class TestWildcardBus:
    """Test cases for an EventBus with wildcards enabled."""

    def test_wildcard_listener_receives_matching_events(self):
        bus = EventBus(wildcard=True)
        received = []
        bus.on("user.*", lambda user_id: received.append(user_id))

        assert bus.emit("user.created", 1) is True
        assert bus.emit("user.deleted", 2) is True
        assert bus.emit("order.created", 3) is False

        assert received == [1, 2]

    def test_wildcard_emit_reaches_concrete_listeners(self):
        bus = EventBus(wildcard=True)
        received = []
        bus.on("user.created", lambda: received.append("created"))
        bus.on("user.deleted", lambda: received.append("deleted"))

        bus.emit("user.*")

        assert received == ["created", "deleted"]

    def test_dispatch_order_follows_registration_across_patterns(self):
        bus = EventBus(wildcard=True)
        order = []
        bus.on("a.b", lambda: order.append(1))
        bus.on("a.*", lambda: order.append(2))
        bus.on("a.b", lambda: order.append(3))

        bus.emit("a.b")

        assert order == [1, 2, 3]

    def test_listeners_include_matching_patterns(self):
        bus = EventBus(wildcard=True)

        def exact():
            pass

        def pattern():
            pass

        bus.on("a.b", exact)
        bus.on("a.*", pattern)

        assert bus.listeners("a.b") == [exact, pattern]

    def test_without_wildcard_star_is_literal(self):
        bus = EventBus()
        received = []
        bus.on("user.*", lambda: received.append("pattern"))

        bus.emit("user.created")
        bus.emit("user.*")

        assert received == ["pattern"]

    def test_once_on_pattern(self):
        bus = EventBus(wildcard=True)
        received = []
        bus.once("job.**", lambda name: received.append(name))

        bus.emit("job.build.done", "build")
        bus.emit("job.test.done", "test")

        assert received == ["build"]
        assert bus.listeners("job.**") == []

    @pytest.mark.parametrize("event_name", [1, None, ("user", "*")])
    def test_removal_and_lookup_reject_non_string_names(self, event_name):
        bus = EventBus(wildcard=True)
        bus.on("user.*", print)

        with pytest.raises(InvalidArgumentsError):
            bus.off(event_name, print)
        with pytest.raises(InvalidArgumentsError):
            bus.listeners(event_name)
        if event_name is not None:
            with pytest.raises(InvalidArgumentsError):
                bus.remove_all_listeners(event_name)

        assert bus.listeners("user.created") == [print]
