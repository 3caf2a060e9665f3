"""Tests for the logging configuration model.

LoggingConfigModel validation and RuntimeConfig translation are tested
here. The init_logging function is exercised via CLI tests in
test_cli_core.py.
"""

# pyright: reportPrivateUsage=false

from __future__ import annotations

import pytest
from lib_layered_config import Config

from mailgun_templates.adapters.logging import setup as logging_setup
from mailgun_templates.adapters.logging.setup import LoggingConfigModel


@pytest.mark.os_agnostic
def test_logging_config_model_allows_extra_fields() -> None:
    """Extra fields pass through for lib_log_rich RuntimeConfig."""
    parsed = LoggingConfigModel.model_validate({"service": "test", "environment": "dev", "custom_field": "value"})

    assert parsed.service == "test"
    assert parsed.environment == "dev"
    extra = parsed.model_dump(exclude={"service", "environment"}, exclude_none=True)
    assert extra == {"custom_field": "value"}


@pytest.mark.os_agnostic
def test_logging_config_model_defaults() -> None:
    """Empty input produces sensible defaults."""
    parsed = LoggingConfigModel.model_validate({})

    assert parsed.service is None
    assert parsed.environment == "prod"


@pytest.mark.os_agnostic
def test_runtime_config_service_falls_back_to_package_name() -> None:
    """Unconfigured services are named after the package."""
    runtime_config = logging_setup._build_runtime_config(Config({}, {}))

    assert runtime_config.service == "mailgun_templates"
    assert runtime_config.environment == "prod"


@pytest.mark.os_agnostic
def test_runtime_config_uses_configured_service_and_environment() -> None:
    """The lib_log_rich section names the service and environment."""
    config = Config({"lib_log_rich": {"service": "shop-mailer", "environment": "staging"}}, {})

    runtime_config = logging_setup._build_runtime_config(config)

    assert runtime_config.service == "shop-mailer"
    assert runtime_config.environment == "staging"
