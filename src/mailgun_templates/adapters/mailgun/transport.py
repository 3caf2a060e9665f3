"""Mailgun HTTP transport.

Posts encoded templated messages to Mailgun's ``/v3/{domain}/messages``
endpoint using httpx. Errors are not retried or translated: callers see
``httpx.HTTPStatusError`` for API rejections and ``httpx.TransportError``
for network failures.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import httpx
import orjson

from mailgun_templates.domain.errors import ConfigurationError
from mailgun_templates.domain.events import SendResponse

from .config import MailgunConfig

logger = logging.getLogger(__name__)

API_USER = "api"


def _form_value(value: Any) -> Any:
    """Convert a wire value into something httpx can form-encode.

    Lists become repeated fields; nested option mappings are sent as JSON.

    Examples:
        >>> _form_value(["a", "b"])
        ['a', 'b']
        >>> _form_value({"b": 1})
        '{"b":1}'
        >>> _form_value(True)
        True
    """
    if isinstance(value, Mapping):
        return orjson.dumps(value).decode()
    if isinstance(value, Sequence) and not isinstance(value, str):
        return [_form_value(item) for item in value]
    return value


def build_form(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Prepare a wire-format mapping for ``application/x-www-form-urlencoded``."""
    return {key: _form_value(value) for key, value in fields.items()}


def _parse_response(response: httpx.Response) -> SendResponse:
    payload = orjson.loads(response.content)
    return SendResponse(id=str(payload.get("id", "")), message=str(payload.get("message", "")))


class MailgunTransport:
    """SendMessage implementation backed by the Mailgun HTTP API.

    Args:
        config: Provider settings; ``secret`` is required.
        http_client: Optional preconfigured httpx client (tests pass one
            built on ``httpx.MockTransport``). The transport takes
            ownership and closes it in :meth:`close`.

    Raises:
        ConfigurationError: When no API secret is configured.
    """

    def __init__(self, config: MailgunConfig, *, http_client: httpx.Client | None = None) -> None:
        if config.secret is None:
            raise ConfigurationError("No Mailgun API secret configured (mailgun.secret is empty)")
        self._config = config
        self._secret = config.secret
        self._http_client = http_client if http_client is not None else httpx.Client(timeout=config.timeout)

    def messages_url(self, domain: str) -> str:
        """Return the messages endpoint for *domain*.

        Example:
            >>> transport = MailgunTransport(MailgunConfig(secret="key-123"))
            >>> transport.messages_url("mg.example.com")
            'https://api.mailgun.net/v3/mg.example.com/messages'
        """
        return f"{self._config.endpoint}/v3/{domain}/messages"

    def close(self) -> None:
        """Close the underlying httpx client, injected ones included."""
        self._http_client.close()

    def __enter__(self) -> MailgunTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __call__(self, domain: str, fields: Mapping[str, Any]) -> SendResponse:
        """Post *fields* for *domain* and return Mailgun's response.

        Raises:
            httpx.HTTPStatusError: Mailgun rejected the request (4xx/5xx).
            httpx.TransportError: The request could not be completed.
        """
        url = self.messages_url(domain)
        logger.debug("Posting message to Mailgun", extra={"url": url, "field_count": len(fields)})

        response = self._http_client.post(
            url,
            data=build_form(fields),
            auth=(API_USER, self._secret),
            timeout=self._config.timeout,
        )
        response.raise_for_status()
        return _parse_response(response)


def build_mailgun_transport(config: MailgunConfig) -> MailgunTransport:
    """Create the production transport for *config*."""
    return MailgunTransport(config)


__all__ = [
    "MailgunTransport",
    "build_form",
    "build_mailgun_transport",
]
