"""Dependency injection for callables invoked through a Registry.

A callable's dependencies are identified by an ordered list of parameter
names. The list is taken from, in order of priority:

1. an explicit ``names=`` argument of ``apply``/``call``/``callp``
2. the ``@inject(...)`` decorator
3. the callable's signature (positional parameters only)

```python
@inject("message", "repeat_count")
def repeat(msg, count):
    return msg * count

registry.value("repeat_count", 5)
registry.apply(repeat, ["hoge"])  # "hogehogehogehogehoge"
```
"""

import inspect
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from loguru import logger

from scopewire.constants import ABSENT
from scopewire.context import bind_registry
from scopewire.exceptions import InvalidArgumentsError, TypeArgumentError

if TYPE_CHECKING:
    from .registry import Registry

F = TypeVar("F", bound=Callable[..., Any])

INJECT_ATTRIBUTE = "__inject__"

_POSITIONAL_KINDS = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def inject(*names: str) -> Callable[[F], F]:
    """Declare the ordered dependency names of a callable.

    Args:
        *names: One name per positional parameter, in order

    Raises:
        InvalidArgumentsError: If a name is not a string
    """
    for name in names:
        if not isinstance(name, str):
            raise InvalidArgumentsError(f"Injection names must be strings, got: {name!r}")

    def decorator(fn: F) -> F:
        setattr(fn, INJECT_ATTRIBUTE, tuple(names))
        return fn

    return decorator


@dataclass(frozen=True)
class InjectionPlan:
    """Parameter names to resolve, and whether leftover arguments are passed on.

    ``defaults`` lines up with ``names``: the declared default of the
    positional parameter at the same index, or ``ABSENT`` when it has none.
    """

    names: tuple[str, ...]
    variadic: bool = False
    defaults: tuple[Any, ...] = ()

    def default_for(self, index: int) -> Any:
        """Value passed for an unresolved name: its declared default, else None."""
        if index < len(self.defaults) and self.defaults[index] is not ABSENT:
            return self.defaults[index]
        return None


def _signature(fn: Callable[..., Any]) -> inspect.Signature | None:
    try:
        return inspect.signature(fn)
    except (TypeError, ValueError):
        # Some builtins have no introspectable signature
        return None


def plan_for(fn: Callable[..., Any], names: Iterable[str] | None = None) -> InjectionPlan:
    """Build the injection plan for ``fn``."""
    signature = _signature(fn)
    if signature is None:
        return InjectionPlan(tuple(names if names is not None else getattr(fn, INJECT_ATTRIBUTE, ())), True)

    parameters = signature.parameters.values()
    variadic = any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in parameters)
    positional = [p for p in parameters if p.kind in _POSITIONAL_KINDS]
    defaults = tuple(ABSENT if p.default is inspect.Parameter.empty else p.default for p in positional)

    if names is None:
        names = getattr(fn, INJECT_ATTRIBUTE, None)
    if names is None:
        names = (p.name for p in positional)

    return InjectionPlan(tuple(names), variadic, defaults)


class InjectionResolver:
    """Resolve parameter names of a callable against one Registry node."""

    def __init__(self, registry: "Registry"):
        self._registry = registry

    def _from_registry(self, name: str) -> Any:
        value = self._registry.value(name)
        if value is ABSENT:
            value = self._registry.factory(name)
        return value

    def resolve_positional(self, plan: InjectionPlan, pool: Sequence[Any]) -> list[Any]:
        """Resolve names as value, then factory, then the next unused pool element.

        A name left unresolved gets its parameter's declared default, or None.
        """
        remaining = iter(pool)
        resolved = []
        for index, name in enumerate(plan.names):
            value = self._from_registry(name)
            if value is ABSENT:
                value = next(remaining, ABSENT)
            resolved.append(plan.default_for(index) if value is ABSENT else value)

        if plan.variadic:
            resolved.extend(remaining)
        return resolved

    def resolve_properties(self, plan: InjectionPlan, props: Mapping[str, Any]) -> list[Any]:
        """Resolve names as property, then value, then factory."""
        resolved = []
        for index, name in enumerate(plan.names):
            value = props[name] if name in props else self._from_registry(name)
            resolved.append(plan.default_for(index) if value is ABSENT else value)
        return resolved

    def invoke(self, fn: Callable[..., Any], args: list[Any]) -> Any:
        logger.trace(f"Invoking {fn} with {len(args)} injected arguments")
        with bind_registry(self._registry):
            return fn(*args)

    @staticmethod
    def _check_callable(fn: Any) -> None:
        if not callable(fn):
            raise InvalidArgumentsError(f"Expected a callable, got: {fn!r}")

    def apply(self, fn: Callable[..., Any], args: Sequence[Any], names: Iterable[str] | None = None) -> Any:
        """Invoke ``fn`` with registry values, falling back to ``args`` in order.

        Raises:
            TypeArgumentError: If ``args`` is not an ordered sequence
            InvalidArgumentsError: If ``fn`` is not callable
        """
        if isinstance(args, (str, bytes)) or not isinstance(args, Sequence):
            raise TypeArgumentError(f"Argument list has wrong type: {type(args).__name__}")
        self._check_callable(fn)
        return self.invoke(fn, self.resolve_positional(plan_for(fn, names), args))

    def call(self, fn: Callable[..., Any], params: Sequence[Any], names: Iterable[str] | None = None) -> Any:
        """Invoke ``fn`` with registry values, falling back to call-site ``params``."""
        self._check_callable(fn)
        return self.invoke(fn, self.resolve_positional(plan_for(fn, names), params))

    def callp(self, fn: Callable[..., Any], props: Mapping[str, Any], names: Iterable[str] | None = None) -> Any:
        """Invoke ``fn`` with ``props`` taking precedence over registry values.

        Raises:
            InvalidArgumentsError: If ``fn`` is not callable or ``props`` is not a mapping
        """
        self._check_callable(fn)
        if not isinstance(props, Mapping):
            raise InvalidArgumentsError(f"Properties must be a mapping, got: {type(props).__name__}")
        return self.invoke(fn, self.resolve_properties(plan_for(fn, names), props))
