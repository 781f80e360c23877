"""Hierarchical dependency registry with a per-node event bus."""

from loguru import logger

from .constants import ABSENT
from .context import bind_registry, current_registry
from .event_bus import EventBus
from .exceptions import (
    InvalidArgumentsError,
    ModuleLoadError,
    NameConflictError,
    ReservedNameError,
    ScopewireError,
    TypeArgumentError,
)
from .registry import Registry, forge, inject
from .settings import Settings, get_settings

# Silent until the application opts in via scopewire.logging.setup_logging()
logger.disable(__name__)

__all__ = [
    "ABSENT",
    "EventBus",
    "InvalidArgumentsError",
    "ModuleLoadError",
    "NameConflictError",
    "Registry",
    "ReservedNameError",
    "ScopewireError",
    "Settings",
    "TypeArgumentError",
    "bind_registry",
    "current_registry",
    "forge",
    "get_settings",
    "inject",
]
