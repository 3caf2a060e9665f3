"""Domain-specific exceptions for typed error handling at boundaries."""

from __future__ import annotations


class ConfigurationError(Exception):
    """Missing, invalid, or incomplete configuration.

    Raised when required Mailgun settings (API secret, sending domain) are
    absent. Typically caught at CLI boundaries to provide user-friendly
    error messages.

    Example:
        >>> err = ConfigurationError("No Mailgun API secret configured")
        >>> str(err)
        'No Mailgun API secret configured'
    """


class DateConstructionError(ValueError):
    """A delivery time or timezone could not be interpreted.

    Raised by :meth:`TemplatedMessage.deliver_at` for unparseable date
    strings and unknown timezone names.

    Example:
        >>> err = DateConstructionError("Invalid delivery time: 'soon'")
        >>> isinstance(err, ValueError)
        True
    """


class SerializationError(ValueError):
    """A template parameter could not be JSON-encoded for the wire format.

    Example:
        >>> err = SerializationError("Parameter 'user' is not JSON serializable")
        >>> str(err)
        "Parameter 'user' is not JSON serializable"
    """


class AssertionViolation(AssertionError):
    """The integrating application broke a channel contract.

    Raised for programmer errors such as a notification without a
    ``to_mailgun`` hook, or a routing hook returning an unsupported type.
    These are not runtime conditions to recover from.

    Example:
        >>> err = AssertionViolation("Expected Welcome.to_mailgun() to be callable")
        >>> isinstance(err, AssertionError)
        True
    """


__all__ = [
    "AssertionViolation",
    "ConfigurationError",
    "DateConstructionError",
    "SerializationError",
]
