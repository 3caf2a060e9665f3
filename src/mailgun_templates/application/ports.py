"""Application ports: callable Protocol definitions for adapter functions.

Each Protocol class defines a ``__call__`` method whose signature exactly
matches the corresponding adapter callable. Module-level functions and
callable adapter instances satisfy these protocols via structural
subtyping (PEP 544).

System Role:
    Sits between domain and adapters. Infrastructure types (``Config``,
    ``MailgunConfig``) are imported under ``TYPE_CHECKING`` only so the
    application layer stays free of adapter imports at runtime.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol

from ..domain.events import MessageSent, SendResponse

if TYPE_CHECKING:
    from lib_layered_config import Config

    from ..adapters.mailgun.config import MailgunConfig


class GetConfig(Protocol):
    """Load layered configuration with application defaults."""

    def __call__(self, *, profile: str | None = ..., start_dir: str | None = ...) -> Config: ...


class InitLogging(Protocol):
    """Initialize lib_log_rich runtime with the provided configuration."""

    def __call__(self, config: Config) -> None: ...


class LoadMailgunConfigFromDict(Protocol):
    """Load MailgunConfig from a configuration dictionary."""

    def __call__(self, config_dict: Mapping[str, Any]) -> MailgunConfig: ...


class SendMessage(Protocol):
    """Deliver an encoded message through the provider's messages endpoint.

    Transport errors (network, authentication, API validation) propagate
    unchanged. ``close`` releases pooled connections.
    """

    def __call__(self, domain: str, fields: Mapping[str, Any]) -> SendResponse: ...

    def close(self) -> None: ...


class BuildTransport(Protocol):
    """Create a SendMessage transport bound to the given provider settings."""

    def __call__(self, config: MailgunConfig) -> SendMessage: ...


class DispatchEvent(Protocol):
    """Publish a domain event to interested subscribers."""

    def __call__(self, event: MessageSent) -> None: ...


__all__ = [
    "BuildTransport",
    "DispatchEvent",
    "GetConfig",
    "InitLogging",
    "LoadMailgunConfigFromDict",
    "SendMessage",
]
