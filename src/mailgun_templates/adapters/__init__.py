"""Adapters layer - infrastructure and framework integrations.

Contains adapter implementations that connect the application to external
systems and frameworks (Mailgun HTTP API, configuration, logging, CLI).

Contents:
    * :mod:`.config` - Layered configuration loading and overrides
    * :mod:`.mailgun` - Mailgun settings and HTTP transport
    * :mod:`.events` - In-process event dispatching
    * :mod:`.logging` - Logging setup with lib_log_rich
    * :mod:`.memory` - In-memory adapters for tests
    * :mod:`.cli` - Click CLI framework integration
"""

from __future__ import annotations

__all__: list[str] = []
