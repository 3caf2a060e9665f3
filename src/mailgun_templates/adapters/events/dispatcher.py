"""In-process event dispatcher for domain events.

Logs every dispatched event and forwards it to subscribed listeners in
subscription order. Listener errors propagate to the dispatching caller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from mailgun_templates.domain.events import MessageSent

logger = logging.getLogger(__name__)

Listener = Callable[[MessageSent], None]


class EventDispatcher:
    """DispatchEvent implementation with a simple subscriber list.

    Example:
        >>> dispatcher = EventDispatcher()
        >>> seen = []
        >>> dispatcher.subscribe(seen.append)
        >>> dispatcher(MessageSent(message_id="<1@mg.example.com>", message="Queued. Thank you."))
        >>> seen[0].message_id
        '<1@mg.example.com>'
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def __call__(self, event: MessageSent) -> None:
        logger.info(
            "Templated message sent",
            extra={"message_id": event.message_id, "status": event.message},
        )
        for listener in self._listeners:
            listener(event)


__all__ = ["EventDispatcher", "Listener"]
