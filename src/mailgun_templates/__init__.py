"""Mailgun templated messages for notification-driven applications.

Public surface, routed through the architectural layers:

- Domain: the message model, address resolution and routing
- Application: the send client and the notification channel
- Composition: wired services and channel construction
- Metadata: package information

Example:
    >>> from mailgun_templates import TemplatedMessage
    >>> TemplatedMessage("welcome").to("jane@example.com").param("name", "Jane").to_wire_format()["v:name"]
    '"Jane"'
"""

from __future__ import annotations

# Metadata
from .__init__conf__ import print_info

# Application exports
from .application.channel import MailgunNotification, MessageDefaults, TemplatesChannel, prepare_message
from .application.client import TemplatesClient

# Composition exports (wired adapters)
from .composition import AppServices, build_channel, build_production, build_testing, get_config

# Domain exports
from .domain.errors import AssertionViolation, ConfigurationError, DateConstructionError, SerializationError
from .domain.events import MessageSent, SendResponse
from .domain.message import TemplatedMessage
from .domain.routing import CHANNEL_NAME, route_notification
from .domain.targets import resolve_target

__all__ = [
    "CHANNEL_NAME",
    "AppServices",
    "AssertionViolation",
    "ConfigurationError",
    "DateConstructionError",
    "MailgunNotification",
    "MessageDefaults",
    "MessageSent",
    "SendResponse",
    "SerializationError",
    "TemplatedMessage",
    "TemplatesChannel",
    "TemplatesClient",
    "build_channel",
    "build_production",
    "build_testing",
    "get_config",
    "prepare_message",
    "print_info",
    "resolve_target",
    "route_notification",
]
