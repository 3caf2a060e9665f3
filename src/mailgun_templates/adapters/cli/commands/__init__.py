"""CLI command implementations.

Contents:
    * :func:`.info.cli_info` - package metadata
    * :func:`.send_cmd.cli_send` - send a templated message
"""

from __future__ import annotations

from .info import cli_info
from .send_cmd import cli_send

__all__ = ["cli_info", "cli_send"]
