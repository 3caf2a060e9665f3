"""In-memory adapter implementations for testing.

Provides lightweight implementations of all application ports that operate
entirely in memory -- no filesystem, no HTTP, no logging framework.

Contents:
    * :mod:`.config` - In-memory configuration and logging adapters
    * :mod:`.mailgun` - In-memory transport and event adapters
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .config import get_config_in_memory, init_logging_in_memory
from .mailgun import (
    QUEUED_MESSAGE,
    EventRecorder,
    TransportSpy,
    load_mailgun_config_from_dict_in_memory,
)

# Static conformance assertions
if TYPE_CHECKING:
    from mailgun_templates.application.ports import (
        DispatchEvent,
        GetConfig,
        InitLogging,
        LoadMailgunConfigFromDict,
        SendMessage,
    )

    _assert_get_config: GetConfig = get_config_in_memory
    _assert_init_logging: InitLogging = init_logging_in_memory
    _assert_load_mailgun_config: LoadMailgunConfigFromDict = load_mailgun_config_from_dict_in_memory
    _assert_send_message: SendMessage = TransportSpy()
    _assert_dispatch_event: DispatchEvent = EventRecorder()

__all__ = [
    "QUEUED_MESSAGE",
    "EventRecorder",
    "TransportSpy",
    "get_config_in_memory",
    "init_logging_in_memory",
    "load_mailgun_config_from_dict_in_memory",
]
