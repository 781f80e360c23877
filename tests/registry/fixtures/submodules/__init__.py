"""Index module, skipped when the directory is installed."""


def install(registry):
    registry.value("index_loaded", True)
