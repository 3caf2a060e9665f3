"""Templated message model and its Mailgun wire encoding.

A :class:`TemplatedMessage` names a template stored at Mailgun and carries
everything needed to render and deliver it: envelope addresses, custom
headers, delivery options (``o:*``) and template variables (``v:*``).
Messages are built fluently and encoded once by the send client.

Contents:
    * :class:`TemplatedMessage` - mutable message builder.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime, timezone as dt_timezone, tzinfo
from email.utils import format_datetime, parsedate_to_datetime
from typing import Any, cast
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import orjson
from dateutil.parser import isoparse

from .errors import DateConstructionError, SerializationError
from .targets import resolve_target

HEADER_PREFIX = "h:"
OPTION_PREFIX = "o:"
PARAM_PREFIX = "v:"

HeaderValue = str | Sequence[str]


def _normalize_header_name(name: str) -> str:
    return name.lower().removeprefix(HEADER_PREFIX)


def _set_path(target: dict[str, Any], path: str, value: Any) -> None:
    """Assign *value* at a dotted *path*, creating intermediate dicts."""
    keys = path.split(".")
    node = target
    for key in keys[:-1]:
        child = node.get(key)
        if not isinstance(child, dict):
            child = {}
            node[key] = child
        node = cast("dict[str, Any]", child)
    node[keys[-1]] = value


def _has_path(target: Mapping[str, Any], path: str) -> bool:
    if path in target:
        return True
    node: Any = target
    for key in path.split("."):
        if not isinstance(node, Mapping) or key not in node:
            return False
        node = cast("Mapping[str, Any]", node)[key]
    return True


def _forget_path(target: dict[str, Any], path: str) -> None:
    if path in target:
        del target[path]
        return
    keys = path.split(".")
    node: Any = target
    for key in keys[:-1]:
        node = node.get(key) if isinstance(node, dict) else None
        if node is None:
            return
    if isinstance(node, dict):
        cast("dict[str, Any]", node).pop(keys[-1], None)


def _infer_timezone(timezone: tzinfo | str | None) -> tzinfo:
    if timezone is None:
        return dt_timezone.utc
    if isinstance(timezone, tzinfo):
        return timezone
    try:
        return ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise DateConstructionError(f"Unknown timezone: {timezone!r}") from exc


def _parse_datetime(value: str, zone: tzinfo) -> datetime:
    """Parse ISO-8601 or RFC 2822 text; naive values are read in *zone*."""
    try:
        parsed = isoparse(value)
    except (ValueError, OverflowError):
        try:
            parsed = parsedate_to_datetime(value)
        except (TypeError, ValueError, IndexError) as exc:
            raise DateConstructionError(f"Invalid delivery time: {value!r}") from exc

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=zone)
    return parsed.astimezone(zone)


class TemplatedMessage:
    """A message rendered from a Mailgun template.

    The template name is fixed at construction. Every other field is
    optional and may be set through raw setters (returning ``None``) or
    fluent methods (returning the message itself).

    Address fields are resolved with :func:`~.targets.resolve_target` when
    they are written, so getters always return ``"addr"`` or
    ``"Name <addr>"`` strings.

    Example:
        >>> message = TemplatedMessage.for_template("welcome").to("a@b.com").param("name", "Jo")
        >>> message.to_wire_format()
        {'v:name': '"Jo"', 'template': 'welcome', 'to': 'a@b.com'}
    """

    def __init__(self, template_name: str, params: Mapping[str, Any] | None = None) -> None:
        if not isinstance(template_name, str) or not template_name:
            raise ValueError("Template name must be a non-empty string")

        self._template_name = template_name
        self._template_version: str | None = None
        self._recipient: str | None = None
        self._sender: str | None = None
        self._carbon_copy: str | None = None
        self._blind_carbon_copy: str | None = None
        self._subject: str | None = None
        self._domain: str | None = None
        self._headers: dict[str, list[str]] = {}
        self._options: dict[str, Any] = {}
        self._params: dict[str, Any] = {}

        if params:
            self.set_params(params)

    @classmethod
    def for_template(cls, template_name: str) -> TemplatedMessage:
        """Create a message for *template_name*.

        Example:
            >>> TemplatedMessage.for_template("welcome").template_name
            'welcome'
        """
        return cls(template_name)

    def __repr__(self) -> str:
        return f"TemplatedMessage(template_name={self._template_name!r}, recipient={self._recipient!r})"

    # ------------------------------------------------------------------ template

    @property
    def template_name(self) -> str:
        return self._template_name

    @property
    def template_version(self) -> str | None:
        return self._template_version

    def set_template_version(self, version: str) -> None:
        self._template_version = version

    def version(self, version: str) -> TemplatedMessage:
        """Pin the template version (``t:version``)."""
        self.set_template_version(version)
        return self

    # ------------------------------------------------------------------ envelope

    @property
    def recipient(self) -> str | None:
        return self._recipient

    @property
    def sender(self) -> str | None:
        return self._sender

    @property
    def carbon_copy(self) -> str | None:
        return self._carbon_copy

    @property
    def blind_carbon_copy(self) -> str | None:
        return self._blind_carbon_copy

    @property
    def subject(self) -> str | None:
        return self._subject

    @property
    def domain(self) -> str | None:
        return self._domain

    def set_recipient(self, recipient: object) -> None:
        self._recipient = resolve_target(recipient)

    def set_sender(self, sender: object) -> None:
        self._sender = resolve_target(sender)

    def set_carbon_copy(self, carbon_copy: object) -> None:
        self._carbon_copy = resolve_target(carbon_copy)

    def set_blind_carbon_copy(self, blind_carbon_copy: object) -> None:
        self._blind_carbon_copy = resolve_target(blind_carbon_copy)

    def set_subject(self, subject: str) -> None:
        self._subject = subject

    def set_domain(self, domain: str) -> None:
        self._domain = domain

    def has_recipient(self) -> bool:
        return self._recipient is not None

    def has_sender(self) -> bool:
        return self._sender is not None

    def has_domain(self) -> bool:
        return self._domain is not None

    def to(self, recipient: object) -> TemplatedMessage:
        self.set_recipient(recipient)
        return self

    def from_(self, sender: object) -> TemplatedMessage:
        self.set_sender(sender)
        return self

    def cc(self, carbon_copy: object) -> TemplatedMessage:
        self.set_carbon_copy(carbon_copy)
        return self

    def bcc(self, blind_carbon_copy: object) -> TemplatedMessage:
        self.set_blind_carbon_copy(blind_carbon_copy)
        return self

    def with_subject(self, subject: str) -> TemplatedMessage:
        self.set_subject(subject)
        return self

    def via(self, domain: str) -> TemplatedMessage:
        """Send through *domain* instead of the client's default domain."""
        self.set_domain(domain)
        return self

    # ------------------------------------------------------------------ headers

    @property
    def headers(self) -> dict[str, list[str]]:
        return {name: list(values) for name, values in self._headers.items()}

    def add_header(self, name: str, value: HeaderValue, replace: bool = False) -> None:
        """Append *value* to the header *name*.

        Header names are case-insensitive and may carry Mailgun's ``h:``
        prefix. Existing values are kept unless *replace* is set.

        Example:
            >>> message = TemplatedMessage("welcome")
            >>> message.add_header("H:X-Campaign", "spring")
            >>> message.add_header("x-campaign", ["summer", "autumn"])
            >>> message.headers
            {'x-campaign': ['spring', 'summer', 'autumn']}
            >>> message.add_header("X-Campaign", "winter", replace=True)
            >>> message.headers
            {'x-campaign': ['winter']}
        """
        normalized = _normalize_header_name(name)
        if replace or normalized not in self._headers:
            self._headers[normalized] = []
        values = [value] if isinstance(value, str) else list(value)
        self._headers[normalized].extend(values)

    def set_headers(self, headers: Mapping[str, HeaderValue]) -> None:
        for name, value in headers.items():
            self.add_header(name, value)

    def has_header(self, name: str) -> bool:
        return _normalize_header_name(name) in self._headers

    def remove_header(self, name: str) -> None:
        self._headers.pop(_normalize_header_name(name), None)

    def set_reply_to(self, reply_to: object) -> None:
        target = resolve_target(reply_to)
        if target:
            self.add_header("reply-to", target, replace=True)

    def set_return_path(self, return_path: object) -> None:
        target = resolve_target(return_path)
        if target:
            self.add_header("return-path", target, replace=True)

    def has_reply_to(self) -> bool:
        return self.has_header("reply-to")

    def has_return_path(self) -> bool:
        return self.has_header("return-path")

    def header(self, name: str, value: HeaderValue, replace: bool = False) -> TemplatedMessage:
        self.add_header(name, value, replace)
        return self

    def with_headers(self, headers: Mapping[str, HeaderValue]) -> TemplatedMessage:
        self.set_headers(headers)
        return self

    def without_header(self, name: str) -> TemplatedMessage:
        self.remove_header(name)
        return self

    def reply_to(self, reply_to: object) -> TemplatedMessage:
        self.set_reply_to(reply_to)
        return self

    def return_path(self, return_path: object) -> TemplatedMessage:
        self.set_return_path(return_path)
        return self

    # ------------------------------------------------------------------ options

    @property
    def options(self) -> dict[str, Any]:
        return dict(self._options)

    def add_option(self, name: str, value: Any) -> None:
        """Set the Mailgun option *name*; dotted names nest.

        Example:
            >>> message = TemplatedMessage("welcome")
            >>> message.add_option("o:tracking", True)
            >>> message.add_option("a.b", 1)
            >>> message.options
            {'tracking': True, 'a': {'b': 1}}
        """
        _set_path(self._options, name.removeprefix(OPTION_PREFIX), value)

    def set_options(self, options: Mapping[str, Any]) -> None:
        for name, value in options.items():
            self.add_option(name, value)

    def has_option(self, name: str) -> bool:
        return _has_path(self._options, name.removeprefix(OPTION_PREFIX))

    def remove_option(self, name: str) -> None:
        _forget_path(self._options, name.removeprefix(OPTION_PREFIX))

    def option(self, name: str, value: Any) -> TemplatedMessage:
        self.add_option(name, value)
        return self

    def with_options(self, options: Mapping[str, Any]) -> TemplatedMessage:
        self.set_options(options)
        return self

    def without_option(self, name: str) -> TemplatedMessage:
        self.remove_option(name)
        return self

    def deliver_at(self, when: datetime | str, timezone: tzinfo | str | None = None) -> TemplatedMessage:
        """Schedule delivery, stored as the RFC 2822 ``deliverytime`` option.

        Naive datetimes are taken as UTC and converted to *timezone*; naive
        strings are read as wall-clock time in *timezone*.
        Relative expressions such as ``"tomorrow"`` or ``"+1 hour"`` are not
        understood; pass a computed datetime instead.

        Args:
            when: A datetime, or an ISO-8601 / RFC 2822 string.
            timezone: A tzinfo, an IANA zone name, or None for UTC.

        Raises:
            DateConstructionError: When *when* cannot be parsed or the
                timezone is unknown.

        Example:
            >>> message = TemplatedMessage("welcome").deliver_at("2022-07-13T10:27:13")
            >>> message.options["deliverytime"]
            'Wed, 13 Jul 2022 10:27:13 +0000'
        """
        zone = _infer_timezone(timezone)
        if isinstance(when, datetime):
            moment = when if when.tzinfo is not None else when.replace(tzinfo=dt_timezone.utc)
            moment = moment.astimezone(zone)
        elif isinstance(when, str):
            moment = _parse_datetime(when, zone)
        else:
            raise DateConstructionError(f"Expected datetime or string, got {type(when).__name__}")

        return self.option("deliverytime", format_datetime(moment))

    def dkim(self, enabled: bool = True) -> TemplatedMessage:
        return self.option("dkim", "yes" if enabled else "no")

    def test_mode(self, enabled: bool = True) -> TemplatedMessage:
        return self.option("testmode", "yes" if enabled else "no")

    def require_tls(self, enabled: bool = True) -> TemplatedMessage:
        return self.option("require-tls", enabled)

    def skip_verification(self, enabled: bool = True) -> TemplatedMessage:
        return self.option("skip-verification", enabled)

    def tracking(self, enabled: bool = True) -> TemplatedMessage:
        return self.option("tracking", enabled)

    def tracking_clicks(self, enabled: bool = True) -> TemplatedMessage:
        return self.option("tracking-clicks", enabled)

    def tracking_opens(self, enabled: bool = True) -> TemplatedMessage:
        return self.option("tracking-opens", enabled)

    def tag(self, tag: str | Sequence[str]) -> TemplatedMessage:
        return self.option("tag", tag if isinstance(tag, str) else list(tag))

    # ------------------------------------------------------------------ params

    @property
    def params(self) -> dict[str, Any]:
        return dict(self._params)

    def add_param(self, name: str, value: Any) -> None:
        _set_path(self._params, name.removeprefix(PARAM_PREFIX), value)

    def set_params(self, params: Mapping[str, Any]) -> None:
        for name, value in params.items():
            self.add_param(name, value)

    def has_param(self, name: str) -> bool:
        return _has_path(self._params, name.removeprefix(PARAM_PREFIX))

    def remove_param(self, name: str) -> None:
        _forget_path(self._params, name.removeprefix(PARAM_PREFIX))

    def param(self, name: str, value: Any) -> TemplatedMessage:
        self.add_param(name, value)
        return self

    def with_params(self, params: Mapping[str, Any]) -> TemplatedMessage:
        self.set_params(params)
        return self

    def without_param(self, name: str) -> TemplatedMessage:
        self.remove_param(name)
        return self

    # ------------------------------------------------------------------ encoding

    def _encoded_options(self) -> dict[str, Any]:
        return {f"{OPTION_PREFIX}{name}": value for name, value in self._options.items() if value}

    def _encoded_headers(self) -> dict[str, list[str]]:
        encoded: dict[str, list[str]] = {}
        for name, values in self._headers.items():
            kept = [value for value in values if value]
            if kept:
                encoded[f"{HEADER_PREFIX}{name}"] = kept
        return encoded

    def _encoded_params(self) -> dict[str, str]:
        encoded: dict[str, str] = {}
        for name, value in self._params.items():
            try:
                encoded[f"{PARAM_PREFIX}{name}"] = orjson.dumps(value, option=orjson.OPT_NON_STR_KEYS).decode()
            except orjson.JSONEncodeError as exc:
                raise SerializationError(f"Parameter {name!r} cannot be JSON-encoded: {exc}") from exc
        return encoded

    def to_wire_format(self) -> dict[str, Any]:
        """Encode the message into Mailgun's flat form-field mapping.

        Options with falsy values, empty headers, and unset envelope fields
        are omitted entirely. Template parameters are always present, each
        encoded as a compact JSON document.

        Returns:
            Mapping of ``o:*``, ``h:*``, ``v:*`` and envelope keys.

        Raises:
            SerializationError: When a parameter cannot be JSON-encoded.

        Example:
            >>> TemplatedMessage("welcome").to_wire_format()
            {'template': 'welcome'}
            >>> TemplatedMessage("welcome").param("x", False).option("y", False).to_wire_format()
            {'v:x': 'false', 'template': 'welcome'}
        """
        envelope = {
            "bcc": self._blind_carbon_copy,
            "cc": self._carbon_copy,
            "from": self._sender,
            "subject": self._subject,
            "t:version": self._template_version,
            "template": self._template_name,
            "to": self._recipient,
        }
        wire: dict[str, Any] = {
            **self._encoded_options(),
            **self._encoded_headers(),
            **self._encoded_params(),
        }
        wire.update((key, value) for key, value in envelope.items() if value)
        return wire


__all__ = [
    "HeaderValue",
    "TemplatedMessage",
]
