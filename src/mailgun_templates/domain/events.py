"""Transport responses and domain events."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SendResponse:
    """Mailgun's answer to an accepted message.

    Attributes:
        id: Message id assigned by Mailgun (``<...@domain>``).
        message: Human-readable status, usually ``"Queued. Thank you."``.
    """

    id: str
    message: str


@dataclass(frozen=True, slots=True)
class MessageSent:
    """Dispatched after Mailgun accepted a templated message.

    Example:
        >>> event = MessageSent(message_id="<1@mg.example.com>", message="Queued. Thank you.")
        >>> event.message_id
        '<1@mg.example.com>'
    """

    message_id: str
    message: str


__all__ = ["MessageSent", "SendResponse"]
