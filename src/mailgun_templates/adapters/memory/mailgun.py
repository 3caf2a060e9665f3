"""In-memory Mailgun adapters for testing.

Provides transport and event callables that satisfy the same Protocols as
production adapters but perform no HTTP requests.

Contents:
    * :class:`TransportSpy` - Captures sent messages for test assertions.
    * :class:`EventRecorder` - Captures dispatched domain events.
    * :func:`load_mailgun_config_from_dict_in_memory` - In-memory config loader.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from mailgun_templates.domain.events import MessageSent, SendResponse

from ..mailgun.config import MailgunConfig

QUEUED_MESSAGE = "Queued. Thank you."


def _empty_message_list() -> list[dict[str, Any]]:
    """Create an empty typed list for message records."""
    return []


def _empty_event_list() -> list[MessageSent]:
    return []


@dataclass
class TransportSpy:
    """Captures transport calls for test assertions.

    Each test should create its own TransportSpy instance to avoid
    cross-test pollution. The spy is callable with the SendMessage
    signature and can also stand in for a transport factory via
    :meth:`build`.

    Attributes:
        sent_messages: Captured ``{"domain", "fields"}`` records.
        configs: Provider settings passed to :meth:`build`.
        raise_exception: When set, sending raises this exception.
        closed: Set once the transport has been closed.

    Example:
        >>> spy = TransportSpy()
        >>> spy("mg.example.com", {"template": "welcome"}).message
        'Queued. Thank you.'
        >>> len(spy.sent_messages)
        1
    """

    sent_messages: list[dict[str, Any]] = field(default_factory=_empty_message_list)
    configs: list[MailgunConfig] = field(default_factory=list)
    raise_exception: Exception | None = None
    closed: bool = False

    def clear(self) -> None:
        """Reset captured data for next test."""
        self.sent_messages.clear()
        self.configs.clear()
        self.raise_exception = None
        self.closed = False

    def build(self, config: MailgunConfig) -> TransportSpy:
        """Record *config* and return the spy itself as the transport."""
        self.configs.append(config)
        return self

    def __call__(self, domain: str, fields: Mapping[str, Any]) -> SendResponse:
        """Record the call and return a synthetic Mailgun response.

        Raises:
            Exception: If raise_exception is set, raises that exception
                without recording the message.
        """
        if self.raise_exception is not None:
            raise self.raise_exception
        self.sent_messages.append({"domain": domain, "fields": dict(fields)})
        return SendResponse(id=f"<{len(self.sent_messages)}@{domain}>", message=QUEUED_MESSAGE)

    def close(self) -> None:
        self.closed = True


@dataclass
class EventRecorder:
    """Captures dispatched domain events.

    Example:
        >>> recorder = EventRecorder()
        >>> recorder(MessageSent(message_id="<1@mg.example.com>", message=QUEUED_MESSAGE))
        >>> [event.message_id for event in recorder.events]
        ['<1@mg.example.com>']
    """

    events: list[MessageSent] = field(default_factory=_empty_event_list)

    def __call__(self, event: MessageSent) -> None:
        self.events.append(event)


def load_mailgun_config_from_dict_in_memory(config_dict: Mapping[str, Any]) -> MailgunConfig:
    """Parse Mailgun config from dict using the real Pydantic model."""
    raw = config_dict.get("mailgun", {})
    return MailgunConfig.model_validate(raw if raw else {})


__all__ = [
    "QUEUED_MESSAGE",
    "EventRecorder",
    "TransportSpy",
    "load_mailgun_config_from_dict_in_memory",
]
