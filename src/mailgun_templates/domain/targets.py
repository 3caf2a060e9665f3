"""Mail target resolution.

A *mail target* identifies a recipient, sender, or copy address in one of
the shapes applications commonly pass around:

* ``"jane@example.com"`` or ``"Jane Smith <jane@example.com>"``
* ``{"address": "jane@example.com", "name": "Jane Smith"}``
* ``{"address": "jane@example.com"}``
* ``["jane@example.com"]``
* ``{"jane@example.com": "Jane Smith"}``

Contents:
    * :data:`MailTarget` - union of the accepted shapes.
    * :func:`resolve_target` - normalise a target to ``"addr"`` / ``"Name <addr>"``.
    * :func:`reduce_address` - collapse a routing result to a bare address.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

MailTarget = str | Mapping[Any, Any] | Sequence[str] | None
"""Union of all shapes accepted by :func:`resolve_target`."""

_ADDRESS_KEY = "address"
_NAME_KEY = "name"


def _format_named(name: object, address: str) -> str:
    if isinstance(name, str) and name:
        return f"{name} <{address}>"
    return address


def _resolve_mapping(target: Mapping[Any, Any]) -> str | None:
    address = target.get(_ADDRESS_KEY)
    if isinstance(address, str) and address:
        return _format_named(target.get(_NAME_KEY), address)

    # {0: "jane@example.com"}, the mapping form of a one-element list
    positional = target.get(0)
    if isinstance(positional, str) and positional:
        return positional

    if not target or _NAME_KEY in target:
        return None

    key = next(iter(target))
    if isinstance(key, str) and key:
        return _format_named(target[key], key)
    return None


def resolve_target(target: object) -> str | None:
    """Normalise a mail target to a single address string.

    Never raises: unsupported or ambiguous shapes resolve to ``None``. An
    explicit ``name``/``address`` pair takes priority over the
    ``{address: name}`` fallback.

    Args:
        target: Any value; see :data:`MailTarget` for the supported shapes.

    Returns:
        ``"address"`` or ``"Name <address>"``, or ``None``.

    Examples:
        >>> resolve_target("jane@example.com")
        'jane@example.com'
        >>> resolve_target({"address": "jane@example.com", "name": "Jane"})
        'Jane <jane@example.com>'
        >>> resolve_target({"address": "jane@example.com"})
        'jane@example.com'
        >>> resolve_target(["jane@example.com"])
        'jane@example.com'
        >>> resolve_target({"jane@example.com": "Jane"})
        'Jane <jane@example.com>'
        >>> resolve_target([]) is None
        True
        >>> resolve_target(42) is None
        True
    """
    if isinstance(target, str):
        return target or None
    if isinstance(target, Mapping):
        return _resolve_mapping(target)
    if isinstance(target, Sequence) and not isinstance(target, (bytes, bytearray)):
        first = target[0] if target else None
        return first if isinstance(first, str) and first else None
    return None


def reduce_address(value: object) -> object:
    """Collapse a mapping or list routing result to its address part.

    Routing hooks may answer with ``{"jane@example.com": "Jane"}`` or
    ``["jane@example.com"]``; only the address is kept. Strings and other
    values pass through unchanged so callers can type-check the result.

    Examples:
        >>> reduce_address({"jane@example.com": "Jane Smith"})
        'jane@example.com'
        >>> reduce_address({0: "jane@example.com"})
        'jane@example.com'
        >>> reduce_address(["jane@example.com"])
        'jane@example.com'
        >>> reduce_address("jane@example.com")
        'jane@example.com'
    """
    if isinstance(value, Mapping):
        if not value:
            return None
        key = next(iter(value))
        return key if isinstance(key, str) else value[key]
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value[0] if value else None
    return value


__all__ = [
    "MailTarget",
    "reduce_address",
    "resolve_target",
]
