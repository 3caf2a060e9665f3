"""Mailgun adapter - provider settings and HTTP transport.

Structure:
    * :mod:`.config` - Mailgun configuration model and loader
    * :mod:`.transport` - httpx-based messages endpoint client

Contents:
    * :class:`.config.MailgunConfig` - Mailgun configuration container
    * :func:`.config.load_mailgun_config_from_dict` - Config dict loader
    * :class:`.transport.MailgunTransport` - SendMessage implementation
    * :func:`.transport.build_mailgun_transport` - Production transport factory
"""

from __future__ import annotations

from .config import MailgunConfig, load_mailgun_config_from_dict
from .transport import MailgunTransport, build_form, build_mailgun_transport

__all__ = [
    "MailgunConfig",
    "MailgunTransport",
    "build_form",
    "build_mailgun_transport",
    "load_mailgun_config_from_dict",
]
