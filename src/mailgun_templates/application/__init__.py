"""Application layer - use cases and port definitions.

Contains the services that orchestrate a send (client, channel) and the
port protocols that define the interfaces for adapter implementations.

Contents:
    * :mod:`.ports` - Callable Protocol definitions for adapter functions
    * :mod:`.client` - Send client encoding messages for the transport
    * :mod:`.channel` - Notification channel with routing and defaults
"""

from __future__ import annotations

from .channel import MailgunNotification, MessageDefaults, TemplatesChannel, prepare_message
from .client import TemplatesClient
from .ports import (
    BuildTransport,
    DispatchEvent,
    GetConfig,
    InitLogging,
    LoadMailgunConfigFromDict,
    SendMessage,
)

__all__ = [
    # Services
    "MailgunNotification",
    "MessageDefaults",
    "TemplatesChannel",
    "TemplatesClient",
    "prepare_message",
    # Ports
    "BuildTransport",
    "DispatchEvent",
    "GetConfig",
    "InitLogging",
    "LoadMailgunConfigFromDict",
    "SendMessage",
]
