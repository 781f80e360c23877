"""Submodule 1."""


def install(registry):
    registry.value("submod1", {"name": "submodule-1"})
