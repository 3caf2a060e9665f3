"""Recipient routing for notifiable entities.

A *notifiable* is whatever the application wants to notify: a bare address
string, a model exposing ``route_notification_for(channel, notification)``,
or an object with a plain ``email`` attribute.

Contents:
    * :data:`CHANNEL_NAME` - routing key queried first.
    * :data:`FALLBACK_CHANNEL_NAME` - generic mail routing key queried second.
    * :class:`RoutesNotifications` / :class:`HasEmail` - accepted shapes.
    * :func:`route_notification` - resolve a delivery address.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from .errors import AssertionViolation
from .targets import reduce_address

CHANNEL_NAME = "mailgun"
FALLBACK_CHANNEL_NAME = "mail"

_SCALARS = (int, float, complex, bytes, bytearray)


@runtime_checkable
class RoutesNotifications(Protocol):
    """Entity that answers per-channel routing questions."""

    def route_notification_for(self, channel: str, notification: Any) -> object: ...


@runtime_checkable
class HasEmail(Protocol):
    """Entity exposing a plain ``email`` attribute."""

    email: str | None


Notifiable = str | RoutesNotifications | HasEmail
"""Union of the notifiable shapes understood by :func:`route_notification`."""


def _type_name(value: object) -> str:
    return type(value).__name__


def _ask_route(notifiable: RoutesNotifications, channel: str, notification: Any) -> object:
    address = notifiable.route_notification_for(channel, notification)
    if address is not None and not isinstance(address, (str, Mapping, Sequence)):
        raise AssertionViolation(
            f"Expected route for {channel!r} to be a string, mapping, sequence, or None, "
            f"got {_type_name(address)!r} instead"
        )
    return address


def route_notification(notifiable: object, notification: Any = None) -> str | None:
    """Resolve the address a notification should be delivered to.

    Lookup order, first non-empty answer wins:

    1. a string notifiable is the address itself;
    2. ``route_notification_for("mailgun", ...)``, then ``("mail", ...)``;
    3. the notifiable's ``email`` attribute.

    Mapping answers such as ``{"jane@example.com": "Jane"}`` are reduced to
    the address.

    Args:
        notifiable: Bare address or entity to route for.
        notification: Passed through to the routing hook as context.

    Returns:
        The address, or None when the entity has none. No address is not an
        error; callers skip sending.

    Raises:
        AssertionViolation: When the notifiable is a non-string scalar, or a
            routing hook or ``email`` attribute has an unsupported type.

    Examples:
        >>> route_notification("jane@example.com")
        'jane@example.com'

        >>> class User:
        ...     email = "jane@example.com"
        >>> route_notification(User())
        'jane@example.com'

        >>> class Routed:
        ...     email = "ignored@example.com"
        ...     def route_notification_for(self, channel, notification):
        ...         return {"jane@example.com": "Jane"} if channel == "mail" else None
        >>> route_notification(Routed())
        'jane@example.com'
    """
    if isinstance(notifiable, str):
        return notifiable
    if isinstance(notifiable, _SCALARS):
        raise AssertionViolation(
            f"Expected notifiable to be an address string or an entity, got {_type_name(notifiable)!r} instead"
        )

    address: object = None
    route = getattr(notifiable, "route_notification_for", None)
    if callable(route):
        address = _ask_route(notifiable, CHANNEL_NAME, notification)  # type: ignore[arg-type]
        if not address:
            address = _ask_route(notifiable, FALLBACK_CHANNEL_NAME, notification)  # type: ignore[arg-type]

    if not address:
        email = getattr(notifiable, "email", None)
        if email:
            if not isinstance(email, str):
                raise AssertionViolation(
                    f"Expected {_type_name(notifiable)}.email to be a string, got {_type_name(email)!r} instead"
                )
            address = email

    address = reduce_address(address) if address else None
    if address is not None and not isinstance(address, str):
        raise AssertionViolation(
            f"Expected resolved address to be a string or None, got {_type_name(address)!r} instead"
        )
    return address or None


__all__ = [
    "CHANNEL_NAME",
    "FALLBACK_CHANNEL_NAME",
    "HasEmail",
    "Notifiable",
    "RoutesNotifications",
    "route_notification",
]
