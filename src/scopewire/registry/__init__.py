"""Registry nodes and dependency injection."""

from .injection import InjectionPlan, InjectionResolver, inject, plan_for
from .registry import Registry, forge

__all__ = [
    "InjectionPlan",
    "InjectionResolver",
    "Registry",
    "forge",
    "inject",
    "plan_for",
]
