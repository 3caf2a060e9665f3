"""Configuration adapter - layered loading and CLI overrides.

Contents:
    * :mod:`.loader` - lib_layered_config loading with caching
    * :mod:`.overrides` - ``--set`` and ``NAME=VALUE`` argument parsing
"""

from __future__ import annotations

from .loader import get_config, get_default_config_path, validate_profile
from .overrides import apply_overrides, parse_assignment, parse_assignments

__all__ = [
    "apply_overrides",
    "get_config",
    "get_default_config_path",
    "parse_assignment",
    "parse_assignments",
    "validate_profile",
]
