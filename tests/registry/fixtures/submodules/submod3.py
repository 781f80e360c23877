"""Submodule 3."""


def install(registry):
    registry.value("submod3", {"name": "submodule-3"})
