"""Domain layer - pure message logic with no I/O or framework dependencies.

Contents:
    * :mod:`.targets` - Mail target resolution
    * :mod:`.message` - Templated message model and wire encoding
    * :mod:`.routing` - Recipient routing for notifiable entities
    * :mod:`.events` - Transport responses and domain events
    * :mod:`.errors` - Domain exception types
"""

from __future__ import annotations

from .errors import AssertionViolation, ConfigurationError, DateConstructionError, SerializationError
from .events import MessageSent, SendResponse
from .message import TemplatedMessage
from .routing import CHANNEL_NAME, FALLBACK_CHANNEL_NAME, Notifiable, route_notification
from .targets import MailTarget, reduce_address, resolve_target

__all__ = [
    # Message
    "TemplatedMessage",
    # Targets
    "MailTarget",
    "reduce_address",
    "resolve_target",
    # Routing
    "CHANNEL_NAME",
    "FALLBACK_CHANNEL_NAME",
    "Notifiable",
    "route_notification",
    # Events
    "MessageSent",
    "SendResponse",
    # Errors
    "AssertionViolation",
    "ConfigurationError",
    "DateConstructionError",
    "SerializationError",
]
