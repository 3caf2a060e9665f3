"""Notification channel delivering templated messages through Mailgun.

The channel is the seam between an application's notifications and the
send client: it asks the notification for its message, finds a recipient
when the message has none, applies configured defaults, and sends.

Contents:
    * :class:`MessageDefaults` - sender and reply headers applied when unset.
    * :class:`MailgunNotification` - shape expected from notifications.
    * :class:`TemplatesChannel` - the channel itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from ..domain.errors import AssertionViolation
from ..domain.events import SendResponse
from ..domain.message import TemplatedMessage
from ..domain.routing import route_notification
from .client import TemplatesClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MessageDefaults:
    """Configured fallbacks for messages that leave these fields unset."""

    sender: str | None = None
    reply_to: str | None = None
    return_path: str | None = None


class MailgunNotification(Protocol):
    """Notification that can render itself as a templated message."""

    def to_mailgun(self, notifiable: Any) -> TemplatedMessage: ...


def _build_message(notifiable: object, notification: object) -> TemplatedMessage:
    hook = getattr(notification, "to_mailgun", None)
    if not callable(hook):
        raise AssertionViolation(f"Expected {type(notification).__name__}.to_mailgun() to be callable")

    message = hook(notifiable)
    if not isinstance(message, TemplatedMessage):
        raise AssertionViolation(f"Expected TemplatedMessage instance, got {type(message).__name__}")
    return message


def prepare_message(
    notifiable: object,
    notification: MailgunNotification | object,
    defaults: MessageDefaults | None = None,
) -> TemplatedMessage | None:
    """Build the message for *notification*, addressed and with defaults applied.

    Returns:
        The ready-to-send message, or None when no recipient could be
        resolved.

    Raises:
        AssertionViolation: When the notification breaks the channel
            contract.

    Example:
        >>> class Receipt:
        ...     def to_mailgun(self, notifiable):
        ...         return TemplatedMessage("receipt")
        >>> prepare_message("jane@example.com", Receipt(), MessageDefaults(reply_to="help@example.com")).headers
        {'reply-to': ['help@example.com']}
        >>> prepare_message(None, Receipt()) is None
        True
    """
    message = _build_message(notifiable, notification)

    if not message.has_recipient():
        recipient = route_notification(notifiable, notification)
        if not recipient:
            logger.info(
                "No recipient resolved, skipping templated message",
                extra={"template": message.template_name, "notifiable": type(notifiable).__name__},
            )
            return None
        message.to(recipient)

    _apply_defaults(message, defaults if defaults is not None else MessageDefaults())
    return message


def _apply_defaults(message: TemplatedMessage, defaults: MessageDefaults) -> None:
    if not message.has_sender() and defaults.sender:
        message.from_(defaults.sender)
    if not message.has_reply_to() and defaults.reply_to:
        message.reply_to(defaults.reply_to)
    if not message.has_return_path() and defaults.return_path:
        message.return_path(defaults.return_path)


class TemplatesChannel:
    """Send notifications as Mailgun templated messages.

    Example:
        >>> from mailgun_templates.adapters.memory import EventRecorder, TransportSpy
        >>> spy = TransportSpy()
        >>> channel = TemplatesChannel(
        ...     TemplatesClient(spy, EventRecorder(), "mg.example.com"),
        ...     MessageDefaults(sender="Shop <shop@example.com>"),
        ... )
        >>> class Welcome:
        ...     def to_mailgun(self, notifiable):
        ...         return TemplatedMessage("welcome")
        >>> response = channel.send("jane@example.com", Welcome())
        >>> spy.sent_messages[0]["fields"]["from"]
        'Shop <shop@example.com>'
    """

    def __init__(self, client: TemplatesClient, defaults: MessageDefaults | None = None) -> None:
        self._client = client
        self._defaults = defaults if defaults is not None else MessageDefaults()

    @property
    def defaults(self) -> MessageDefaults:
        return self._defaults

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> TemplatesChannel:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def send(self, notifiable: object, notification: MailgunNotification | object) -> SendResponse | None:
        """Deliver *notification* to *notifiable*.

        Args:
            notifiable: Bare address, or entity routed with
                :func:`~mailgun_templates.domain.routing.route_notification`.
            notification: Object exposing ``to_mailgun(notifiable)``.

        Returns:
            The transport response, or None when no recipient could be
            resolved. Nothing is sent in that case.

        Raises:
            AssertionViolation: When the notification breaks the channel
                contract.
        """
        message = prepare_message(notifiable, notification, self._defaults)
        if message is None:
            return None
        return self._client.send(message)


__all__ = [
    "MailgunNotification",
    "MessageDefaults",
    "TemplatesChannel",
    "prepare_message",
]
