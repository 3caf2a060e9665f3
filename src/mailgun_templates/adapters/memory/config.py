"""In-memory configuration and logging adapters for testing.

Provides functions that satisfy the same Protocols as production adapters
but operate entirely in memory -- no filesystem, no logging framework.
"""

from __future__ import annotations

from lib_layered_config import Config


def get_config_in_memory(
    *,
    profile: str | None = None,
    start_dir: str | None = None,
) -> Config:
    """Return an empty in-memory Config."""
    return Config({}, {})


def init_logging_in_memory(config: Config) -> None:
    """No-op -- satisfies the InitLogging protocol without side effects."""


__all__ = [
    "get_config_in_memory",
    "init_logging_in_memory",
]
