"""Tests for apply / call / callp dependency injection."""

import pytest

from scopewire import ABSENT, InvalidArgumentsError, Registry, TypeArgumentError, current_registry, forge, inject
from scopewire.registry import plan_for


def repeat(message, repeat_count):
    return message * repeat_count


MESSAGES = [
    {"id": 1, "uid": "alice", "body": "message 1"},
    {"id": 2, "uid": "bob", "body": "message 2"},
]
USERS = [{"id": "alice", "age": 18}, {"id": "bob", "age": 20}]


class UserRepository:
    def find(self, user_id):
        return next(u for u in USERS if u["id"] == user_id)


class MessageRepository:
    def find(self, message_id, user):
        message = dict(next(m for m in MESSAGES if m["id"] == message_id))
        message["user"] = user.find(message["uid"])
        return message


@pytest.fixture
def root() -> Registry:
    registry = forge()
    registry.set({"repeat": repeat, "repeat_count": 5})
    return registry


class TestPlan:
    def test_names_from_signature(self):
        assert plan_for(repeat).names == ("message", "repeat_count")
        assert plan_for(repeat).variadic is False

    def test_names_from_bound_method_skip_self(self):
        assert plan_for(MessageRepository().find).names == ("message_id", "user")

    def test_keyword_only_parameters_are_not_injected(self):
        def fn(a, *args, b=None, **kwargs):
            pass

        plan = plan_for(fn)
        assert plan.names == ("a",)
        assert plan.variadic is True

    def test_decorator_overrides_signature(self):
        @inject("message", "repeat_count")
        def fn(msg, count):
            return msg * count

        assert plan_for(fn).names == ("message", "repeat_count")

    def test_explicit_names_override_decorator(self):
        @inject("a")
        def fn(x):
            return x

        assert plan_for(fn, ["b"]).names == ("b",)

    def test_defaults_line_up_with_names(self):
        def fn(a, b=2, *, c=3):
            pass

        plan = plan_for(fn)
        assert plan.defaults == (ABSENT, 2)
        assert plan.default_for(0) is None
        assert plan.default_for(1) == 2

    def test_inject_rejects_non_string_names(self):
        with pytest.raises(InvalidArgumentsError):
            inject("a", 1)


class TestApply:
    def test_resolves_registry_then_positional(self, root: Registry):
        assert root.apply(root.repeat, ["hoge"]) == "hogehogehogehogehoge"

    def test_injects_objects(self, root: Registry):
        root.set({"message": MessageRepository(), "user": UserRepository()})

        actual = root.apply(root.message.find, [1])

        assert actual == {
            "id": 1,
            "uid": "alice",
            "body": "message 1",
            "user": {"id": "alice", "age": 18},
        }

    def test_factories_are_consulted_after_values(self, root: Registry):
        root.factory("suffix", lambda: "!")

        assert root.apply(lambda prefix, suffix: prefix + suffix, ["hi"]) == "hi!"

    def test_each_positional_argument_used_once(self, root: Registry):
        assert root.apply(lambda a, b, c: (a, b, c), [1, 2]) == (1, 2, None)

    def test_tuple_is_accepted(self, root: Registry):
        assert root.apply(root.repeat, ("ab",)) == "ab" * 5

    @pytest.mark.parametrize("args", ["hoge", {"message": "hoge"}, 42, None])
    def test_rejects_non_sequence(self, root: Registry, args):
        with pytest.raises(TypeArgumentError):
            root.apply(root.repeat, args)

    def test_rejects_non_callable(self, root: Registry):
        with pytest.raises(InvalidArgumentsError):
            root.apply("repeat", [])

    def test_explicit_names(self, root: Registry):
        assert root.apply(lambda x, y: x * y, ["ab"], names=["message", "repeat_count"]) == "ab" * 5

    def test_stored_falsy_value_does_not_fall_through(self, root: Registry):
        root.value("repeat_count", 0)
        assert root.apply(root.repeat, ["hoge", 3]) == ""

    def test_variadic_receives_leftover_arguments(self, root: Registry):
        def collect(repeat_count, *rest):
            return repeat_count, rest

        assert root.apply(collect, [1, 2, 3]) == (5, (1, 2, 3))

    def test_registry_is_bound_as_context(self, root: Registry):
        child = root.child()
        assert current_registry() is None
        assert child.apply(lambda: current_registry(), []) is child
        assert current_registry() is None


class TestCall:
    def test_resolves_registry_then_params(self, root: Registry):
        assert root.call(root.repeat, "hoge") == "hogehogehogehogehoge"

    def test_exec_is_alias(self, root: Registry):
        assert root.exec(root.repeat, "hoge") == "hogehogehogehogehoge"

    def test_injects_objects(self, root: Registry):
        root.set({"message": MessageRepository(), "user": UserRepository()})

        assert root.call(root.message.find, 2)["user"] == {"id": "bob", "age": 20}

    def test_function_without_parameters(self, root: Registry):
        def no_args(*args):
            return args

        assert root.call(no_args) == ()

    def test_unresolved_parameters_are_none(self, root: Registry):
        assert root.call(lambda unknown: unknown) is None

    def test_unresolved_parameter_keeps_its_default(self, root: Registry):
        assert root.call(lambda a, b=2: (a, b), 1) == (1, 2)

    def test_registry_value_wins_over_default(self, root: Registry):
        assert root.call(lambda repeat_count=1: repeat_count) == 5

    def test_falsy_argument_wins_over_default(self, root: Registry):
        assert root.call(lambda a=1: a, 0) == 0

    def test_values_from_parent_scope(self, root: Registry):
        child = root.child()
        assert child.call(repeat, "x") == "xxxxx"


class TestCallp:
    def test_props_take_precedence(self, root: Registry):
        assert root.callp(root.repeat, {"message": "hoge"}) == "hogehogehogehogehoge"
        assert root.callp(root.repeat, {"message": "hoge", "repeat_count": 2}) == "hogehoge"

    def test_execp_is_alias(self, root: Registry):
        assert root.execp(root.repeat, {"message": "a"}) == "aaaaa"

    def test_falsy_prop_is_used(self, root: Registry):
        assert root.callp(root.repeat, {"message": "hoge", "repeat_count": 0}) == ""

    def test_no_positional_fallback(self, root: Registry):
        assert root.callp(lambda missing, repeat_count: (missing, repeat_count), {}) == (None, 5)

    def test_missing_prop_keeps_its_default(self, root: Registry):
        assert root.callp(lambda a, b="fallback": (a, b), {"a": 1}) == (1, "fallback")

    def test_factory_fallback(self, root: Registry):
        root.factory("stamp", lambda: "fresh")
        assert root.callp(lambda stamp: stamp, {}) == "fresh"

    @pytest.mark.parametrize("props", [["hoge"], "hoge", None])
    def test_rejects_non_mapping(self, root: Registry, props):
        with pytest.raises(InvalidArgumentsError):
            root.callp(root.repeat, props)
