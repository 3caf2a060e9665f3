"""Shared pytest fixtures for CLI, adapter and module-entry tests.

Fixtures read as plain English and are discovered implicitly by pytest.
"""

from __future__ import annotations

import contextlib
import os
import re
import tempfile
from collections.abc import Callable, Iterator
from dataclasses import dataclass, fields
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx
import lib_cli_exit_tools
import pytest
from click.testing import CliRunner
from lib_layered_config import Config

if TYPE_CHECKING:
    from mailgun_templates.adapters.memory import EventRecorder, TransportSpy
    from mailgun_templates.composition import AppServices

_COVERAGE_BASENAME = ".coverage.mailgun_templates"


def _purge_stale_coverage_files(cov_path: Path) -> None:
    """Delete leftover SQLite database and journal files from crashed runs."""
    for suffix in ("", "-journal", "-wal", "-shm"):
        with contextlib.suppress(FileNotFoundError):
            Path(str(cov_path) + suffix).unlink()


def pytest_configure(config: pytest.Config) -> None:
    """Keep the coverage database on a local temp directory.

    Runs before ``pytest-cov`` creates its ``Coverage()`` object so the
    ``COVERAGE_FILE`` value is picked up however pytest is invoked.
    """
    if "COVERAGE_FILE" not in os.environ:
        cov_path = Path(tempfile.gettempdir()) / _COVERAGE_BASENAME
        _purge_stale_coverage_files(cov_path)
        os.environ["COVERAGE_FILE"] = str(cov_path)


def _load_dotenv() -> None:
    """Load .env file when it exists for integration test configuration."""
    from dotenv import load_dotenv

    env_file = Path(__file__).parent.parent / ".env"
    if env_file.exists():
        load_dotenv(env_file)


_load_dotenv()

ANSI_ESCAPE_PATTERN = re.compile(r"\x1B\[[0-?]*[ -/]*[@-~]")
CONFIG_FIELDS: tuple[str, ...] = tuple(field.name for field in fields(type(lib_cli_exit_tools.config)))

MAILGUN_READY_SECTION: dict[str, Any] = {
    "secret": "key-test",
    "domain": "mg.example.com",
    "from_address": "Shop <shop@example.com>",
}


def _remove_ansi_codes(text: str) -> str:
    """Return *text* stripped of ANSI escape sequences."""
    return ANSI_ESCAPE_PATTERN.sub("", text)


def _snapshot_cli_config() -> dict[str, object]:
    """Capture every attribute from ``lib_cli_exit_tools.config``."""
    return {name: getattr(lib_cli_exit_tools.config, name) for name in CONFIG_FIELDS}


def _restore_cli_config(snapshot: dict[str, object]) -> None:
    """Reapply a configuration snapshot captured by ``_snapshot_cli_config``."""
    for name, value in snapshot.items():
        setattr(lib_cli_exit_tools.config, name, value)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a fresh CliRunner per test.

    Use ``result.stdout`` for clean output (e.g. JSON parsing) so log lines
    on stderr do not contaminate it.
    """
    return CliRunner()


@pytest.fixture
def production_factory() -> Callable[[], AppServices]:
    """Provide the production services factory for tests that need real wiring."""
    from mailgun_templates.composition import build_production

    return build_production


@pytest.fixture
def strip_ansi() -> Callable[[str], str]:
    """Return a helper that strips ANSI escape sequences from a string."""

    def _strip(value: str) -> str:
        return _remove_ansi_codes(value)

    return _strip


@pytest.fixture
def managed_traceback_state() -> Iterator[None]:
    """Reset traceback flags to a known baseline and restore after the test."""
    lib_cli_exit_tools.reset_config()
    lib_cli_exit_tools.config.traceback = False
    lib_cli_exit_tools.config.traceback_force_color = False
    snapshot = _snapshot_cli_config()
    try:
        yield
    finally:
        _restore_cli_config(snapshot)


@pytest.fixture
def clear_config_cache() -> Iterator[None]:
    """Clear the get_config lru_cache before each test.

    Only clears before, not after, so a monkeypatched loader without
    ``cache_clear`` does not break teardown.
    """
    from mailgun_templates.adapters.config import loader as config_mod

    config_mod.get_config.cache_clear()
    yield


@pytest.fixture
def config_factory() -> Callable[[dict[str, Any]], Config]:
    """Create real Config instances from test data dicts without filesystem I/O."""

    def _factory(data: dict[str, Any]) -> Config:
        return Config(data, {})

    return _factory


@pytest.fixture
def transport_spy() -> TransportSpy:
    """Provide a fresh TransportSpy capturing every message handed to Mailgun."""
    from mailgun_templates.adapters.memory import TransportSpy

    return TransportSpy()


@pytest.fixture
def event_recorder() -> EventRecorder:
    """Provide a fresh EventRecorder capturing MessageSent events."""
    from mailgun_templates.adapters.memory import EventRecorder

    return EventRecorder()


@pytest.fixture
def inject_config(
    clear_config_cache: None,
) -> Callable[[Config], Callable[[], AppServices]]:
    """Return a factory that provides production services with an injected Config.

    Only replaces the I/O boundary (``get_config``), not the Config object.

    Example:
        def test_info(cli_runner, config_factory, inject_config) -> None:
            factory = inject_config(config_factory({"mailgun": {"domain": "mg.example.com"}}))
            result = cli_runner.invoke(cli, ["info"], obj=factory)
    """
    from mailgun_templates.composition import AppServices, build_production

    def _inject(config: Config) -> Callable[[], AppServices]:
        def _fake_get_config(**_kwargs: Any) -> Config:
            return config

        prod = build_production()
        test_services = AppServices(
            get_config=_fake_get_config,
            init_logging=prod.init_logging,
            load_mailgun_config_from_dict=prod.load_mailgun_config_from_dict,
            build_transport=prod.build_transport,
            dispatch_event=prod.dispatch_event,
        )
        return lambda: test_services

    return _inject


@pytest.fixture
def inject_config_with_profile_capture(
    clear_config_cache: None,
) -> Callable[[Config, list[str | None]], Callable[[], AppServices]]:
    """Return a factory whose get_config records every ``profile`` it is asked for."""
    from mailgun_templates.composition import AppServices, build_production

    def _inject(config: Config, captured_profiles: list[str | None]) -> Callable[[], AppServices]:
        def _capturing_get_config(*, profile: str | None = None, **_kwargs: Any) -> Config:
            captured_profiles.append(profile)
            return config

        prod = build_production()
        test_services = AppServices(
            get_config=_capturing_get_config,
            init_logging=prod.init_logging,
            load_mailgun_config_from_dict=prod.load_mailgun_config_from_dict,
            build_transport=prod.build_transport,
            dispatch_event=prod.dispatch_event,
        )
        return lambda: test_services

    return _inject


@pytest.fixture
def inject_test_services() -> Callable[[], Callable[[], AppServices]]:
    """Return the build_testing factory for full in-memory testing."""
    from mailgun_templates.composition import build_testing

    def _inject() -> Callable[[], AppServices]:
        return build_testing

    return _inject


@dataclass
class MailgunCliContext:
    """Services factory plus the spies a ``send`` story asserts on.

    Attributes:
        factory: Callable that returns wired AppServices for CLI invocation.
        spy: TransportSpy receiving every message the channel sends.
        recorder: EventRecorder receiving every MessageSent event.
    """

    factory: Callable[[], Any]
    spy: TransportSpy
    recorder: EventRecorder


@pytest.fixture
def mailgun_cli_context(
    clear_config_cache: None,
) -> Callable[[dict[str, Any]], MailgunCliContext]:
    """Create a ``send`` test context from a ``[mailgun]`` section dict.

    Configuration and transport are in memory; logging is real so the
    command's ``lib_log_rich.runtime.bind`` works as in production.

    Example:
        def test_send(cli_runner, mailgun_cli_context) -> None:
            ctx = mailgun_cli_context({"secret": "key", "domain": "mg.example.com"})
            result = cli_runner.invoke(cli, ["send", "welcome", "--to", "a@b.com"], obj=ctx.factory)
            assert ctx.spy.sent_messages[0]["fields"]["template"] == "welcome"
    """
    from mailgun_templates.adapters.memory import (
        EventRecorder,
        TransportSpy,
        load_mailgun_config_from_dict_in_memory,
    )
    from mailgun_templates.composition import AppServices, build_production

    def _create(mailgun_data: dict[str, Any]) -> MailgunCliContext:
        spy = TransportSpy()
        recorder = EventRecorder()
        config = Config({"mailgun": mailgun_data}, {})
        prod = build_production()

        def _fake_get_config(**_kwargs: Any) -> Config:
            return config

        test_services = AppServices(
            get_config=_fake_get_config,
            init_logging=prod.init_logging,
            load_mailgun_config_from_dict=load_mailgun_config_from_dict_in_memory,
            build_transport=spy.build,
            dispatch_event=recorder,
        )
        return MailgunCliContext(factory=lambda: test_services, spy=spy, recorder=recorder)

    return _create


@pytest.fixture
def mailgun_ready_section() -> dict[str, Any]:
    """Return a ``[mailgun]`` section with secret, domain and sender configured."""
    return dict(MAILGUN_READY_SECTION)


@pytest.fixture
def mock_mailgun() -> Callable[..., tuple[httpx.Client, list[httpx.Request]]]:
    """Return a factory for an httpx client backed by ``httpx.MockTransport``.

    The factory takes ``status`` and ``json`` for the canned response (or a
    ``raises`` exception) and returns the client plus the list that captures
    every request it receives.
    """

    def _create(
        *,
        status: int = 200,
        json: dict[str, Any] | None = None,
        raises: Exception | None = None,
    ) -> tuple[httpx.Client, list[httpx.Request]]:
        captured: list[httpx.Request] = []
        body = json if json is not None else {"id": "<20240101.1@mg.example.com>", "message": "Queued. Thank you."}

        def _handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            if raises is not None:
                raise raises
            return httpx.Response(status, json=body)

        return httpx.Client(transport=httpx.MockTransport(_handler)), captured

    return _create
