"""Mailgun configuration model and loader.

Provides the MailgunConfig Pydantic model for validated, immutable provider
settings and the loader function to create it from configuration
dictionaries.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from mailgun_templates.application.channel import MessageDefaults

DEFAULT_ENDPOINT = "https://api.mailgun.net"


class MailgunConfig(BaseModel):
    """Validated, immutable Mailgun configuration.

    Example:
        >>> config = MailgunConfig(secret="key-123", domain="mg.example.com")
        >>> config.endpoint
        'https://api.mailgun.net'
    """

    model_config = ConfigDict(frozen=True)

    secret: str | None = None
    endpoint: str = DEFAULT_ENDPOINT
    domain: str | None = None
    from_address: str | None = None
    reply_to: str | None = None
    return_path: str | None = None
    timeout: float = 30.0

    @field_validator("secret", "domain", "from_address", "reply_to", "return_path", mode="before")
    @classmethod
    def _coerce_empty_string_to_none(cls, v: str | None) -> str | None:
        """Coerce empty or whitespace-only strings to None.

        Treats empty strings from config files as "not configured" rather
        than explicit empty values, so an empty secret never reaches the
        API as credentials.
        """
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("endpoint", mode="before")
    @classmethod
    def _default_blank_endpoint(cls, v: Any) -> Any:
        """Fall back to the US endpoint for blank values and drop a trailing slash.

        Examples:
            >>> MailgunConfig._default_blank_endpoint("")
            'https://api.mailgun.net'
            >>> MailgunConfig._default_blank_endpoint("https://api.eu.mailgun.net/")
            'https://api.eu.mailgun.net'
        """
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_ENDPOINT
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v

    @model_validator(mode="after")
    def _validate_config(self) -> MailgunConfig:
        """Reject non-positive timeouts and endpoints without a scheme.

        Example:
            >>> MailgunConfig(timeout=0)  # doctest: +IGNORE_EXCEPTION_DETAIL
            Traceback (most recent call last):
            ...
            ValidationError: ...
        """
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if not self.endpoint.startswith(("http://", "https://")):
            raise ValueError(f"endpoint must be an http(s) URL, got {self.endpoint!r}")
        return self

    def __repr__(self) -> str:
        """Return string representation with the API secret redacted.

        Example:
            >>> config = MailgunConfig(secret="key-123")
            >>> "key-123" in repr(config)
            False
            >>> "[REDACTED]" in repr(config)
            True
        """
        fields: list[str] = []
        for name, value in self:
            if name == "secret" and value is not None:
                fields.append(f"{name}='[REDACTED]'")
            else:
                fields.append(f"{name}={value!r}")
        return f"MailgunConfig({', '.join(fields)})"

    def to_message_defaults(self) -> MessageDefaults:
        """Extract the per-message fallbacks applied by the channel.

        Example:
            >>> MailgunConfig(from_address="shop@example.com").to_message_defaults().sender
            'shop@example.com'
        """
        return MessageDefaults(
            sender=self.from_address,
            reply_to=self.reply_to,
            return_path=self.return_path,
        )


def load_mailgun_config_from_dict(config_dict: Mapping[str, Any]) -> MailgunConfig:
    """Load MailgunConfig from a configuration dictionary.

    Bridges lib_layered_config's dictionary output with the typed
    MailgunConfig Pydantic model. Single-parse validation at the boundary.

    Args:
        config_dict: Configuration dictionary typically from lib_layered_config.
            Expected to have a 'mailgun' section.

    Returns:
        Configured Mailgun settings with defaults for missing values.

    Example:
        >>> config = load_mailgun_config_from_dict(
        ...     {"mailgun": {"secret": "key-123", "domain": "mg.example.com"}}
        ... )
        >>> config.domain
        'mg.example.com'
        >>> load_mailgun_config_from_dict({}).secret is None
        True
    """
    section: Any = config_dict.get("mailgun", {})

    # Non-dict section (e.g. "mailgun": "invalid") fails validation with a clear message
    if not isinstance(section, Mapping):
        return MailgunConfig.model_validate(section)

    return MailgunConfig.model_validate(dict(cast(Mapping[str, Any], section)))


__all__ = [
    "DEFAULT_ENDPOINT",
    "MailgunConfig",
    "load_mailgun_config_from_dict",
]
