"""Composition root wiring adapters to application ports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

# Configuration services
from ..adapters.config.loader import get_config

# Event services
from ..adapters.events.dispatcher import EventDispatcher

# Logging services
from ..adapters.logging.setup import init_logging

# Mailgun services
from ..adapters.mailgun.config import MailgunConfig, load_mailgun_config_from_dict
from ..adapters.mailgun.transport import build_mailgun_transport
from ..application.channel import TemplatesChannel
from ..application.client import TemplatesClient
from ..domain.errors import ConfigurationError

# Static conformance assertions; pyright checks each adapter against its Protocol.
if TYPE_CHECKING:
    from ..adapters.memory import EventRecorder, TransportSpy
    from ..application.ports import (
        BuildTransport,
        DispatchEvent,
        GetConfig,
        InitLogging,
        LoadMailgunConfigFromDict,
    )

    _assert_get_config: GetConfig = get_config
    _assert_init_logging: InitLogging = init_logging
    _assert_load_mailgun_config_from_dict: LoadMailgunConfigFromDict = load_mailgun_config_from_dict
    _assert_build_transport: BuildTransport = build_mailgun_transport
    _assert_dispatch_event: DispatchEvent = EventDispatcher()


@dataclass(frozen=True, slots=True)
class AppServices:
    """Frozen container holding all application port implementations."""

    get_config: GetConfig
    init_logging: InitLogging
    load_mailgun_config_from_dict: LoadMailgunConfigFromDict
    build_transport: BuildTransport
    dispatch_event: DispatchEvent


def build_production() -> AppServices:
    """Wire production adapters into an AppServices container."""
    return AppServices(
        get_config=get_config,
        init_logging=init_logging,
        load_mailgun_config_from_dict=load_mailgun_config_from_dict,
        build_transport=build_mailgun_transport,
        dispatch_event=EventDispatcher(),
    )


def build_testing(*, spy: TransportSpy | None = None, recorder: EventRecorder | None = None) -> AppServices:
    """Wire in-memory adapters into an AppServices container.

    Args:
        spy: TransportSpy that captures sent messages; a fresh one when None.
        recorder: EventRecorder that captures MessageSent events; a fresh
            one when None.
    """
    from ..adapters.memory import (
        EventRecorder,
        TransportSpy,
        get_config_in_memory,
        init_logging_in_memory,
        load_mailgun_config_from_dict_in_memory,
    )

    transport_spy = spy if spy is not None else TransportSpy()

    return AppServices(
        get_config=get_config_in_memory,
        init_logging=init_logging_in_memory,
        load_mailgun_config_from_dict=load_mailgun_config_from_dict_in_memory,
        build_transport=transport_spy.build,
        dispatch_event=recorder if recorder is not None else EventRecorder(),
    )


def build_channel(services: AppServices, mailgun_config: MailgunConfig) -> TemplatesChannel:
    """Create a ready-to-send channel from *services* and provider settings.

    Raises:
        ConfigurationError: When no sending domain is configured, or the
            transport refuses the settings (missing API secret).

    Example:
        >>> from mailgun_templates.adapters.memory import TransportSpy
        >>> spy = TransportSpy()
        >>> channel = build_channel(build_testing(spy=spy), MailgunConfig(domain="mg.example.com"))
        >>> channel.defaults.sender is None
        True
        >>> build_channel(build_testing(), MailgunConfig())  # doctest: +IGNORE_EXCEPTION_DETAIL
        Traceback (most recent call last):
        ...
        ConfigurationError: No Mailgun sending domain configured
    """
    if not mailgun_config.domain:
        raise ConfigurationError("No Mailgun sending domain configured (mailgun.domain is empty)")
    transport = services.build_transport(mailgun_config)
    client = TemplatesClient(transport, services.dispatch_event, mailgun_config.domain)
    return TemplatesChannel(client, mailgun_config.to_message_defaults())


__all__ = [
    # Configuration
    "get_config",
    # Logging
    "init_logging",
    # Mailgun
    "build_mailgun_transport",
    "load_mailgun_config_from_dict",
    # Composition
    "AppServices",
    "build_channel",
    "build_production",
    "build_testing",
]
