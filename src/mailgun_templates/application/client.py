"""Send client forwarding encoded templated messages to the transport."""

from __future__ import annotations

import logging

from ..domain.events import MessageSent, SendResponse
from ..domain.message import TemplatedMessage
from .ports import DispatchEvent, SendMessage

logger = logging.getLogger(__name__)


class TemplatesClient:
    """Encode templated messages and hand them to the provider transport.

    Args:
        send_message: Transport delivering the wire mapping for a domain.
        dispatch_event: Receives :class:`MessageSent` after each success.
        domain: Sending domain used when a message does not set its own.

    Example:
        >>> from mailgun_templates.adapters.memory import EventRecorder, TransportSpy
        >>> spy, recorder = TransportSpy(), EventRecorder()
        >>> client = TemplatesClient(spy, recorder, "mg.example.com")
        >>> response = client.send(TemplatedMessage("welcome").to("jane@example.com"))
        >>> spy.sent_messages[0]["domain"]
        'mg.example.com'
        >>> recorder.events[0].message_id == response.id
        True
    """

    def __init__(self, send_message: SendMessage, dispatch_event: DispatchEvent, domain: str) -> None:
        self._send_message = send_message
        self._dispatch_event = dispatch_event
        self._domain = domain

    @property
    def domain(self) -> str:
        return self._domain

    def close(self) -> None:
        """Release the transport's connections."""
        self._send_message.close()

    def send(self, message: TemplatedMessage) -> SendResponse:
        """Send *message* and announce it with a :class:`MessageSent` event.

        The message is only read, never modified.

        Returns:
            The transport's response carrying the Mailgun message id.

        Raises:
            SerializationError: When a template parameter cannot be encoded.
            httpx.HTTPError: Transport failures, propagated unchanged; no
                event is dispatched.
        """
        fields = message.to_wire_format()
        domain = message.domain or self._domain

        logger.info(
            "Sending templated message",
            extra={"template": message.template_name, "domain": domain, "recipient": message.recipient},
        )
        response = self._send_message(domain, fields)
        logger.info(
            "Templated message accepted",
            extra={"template": message.template_name, "message_id": response.id},
        )

        self._dispatch_event(MessageSent(message_id=response.id, message=response.message))
        return response


__all__ = ["TemplatesClient"]
