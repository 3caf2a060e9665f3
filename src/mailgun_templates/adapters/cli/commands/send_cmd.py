"""``send`` command: deliver a templated message from the command line.

The message is built from the options, handed to the notification channel
with the ``--to`` address as the notifiable, and sent through the
configured transport. ``--dry-run`` stops after the channel has prepared
the message and prints the form fields instead.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, NoReturn

import httpx
import lib_log_rich.runtime
import orjson
import rich_click as click
from pydantic import ValidationError

from mailgun_templates.adapters.config.overrides import parse_assignment, parse_assignments
from mailgun_templates.application.channel import prepare_message
from mailgun_templates.domain.errors import ConfigurationError
from mailgun_templates.domain.events import SendResponse
from mailgun_templates.domain.message import TemplatedMessage

from ..constants import CLICK_CONTEXT_SETTINGS
from ..context import CLIContext, get_cli_context
from ..exit_codes import ExitCode

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandLineNotification:
    """Notification wrapping a message assembled from CLI options."""

    message: TemplatedMessage

    def to_mailgun(self, notifiable: Any) -> TemplatedMessage:
        return self.message


@dataclass(frozen=True, slots=True)
class SendOptions:
    """Raw ``send`` options as Click delivered them."""

    template: str
    to: str
    from_address: str | None = None
    cc: str | None = None
    bcc: str | None = None
    subject: str | None = None
    version: str | None = None
    domain: str | None = None
    reply_to: str | None = None
    return_path: str | None = None
    params: tuple[str, ...] = ()
    options: tuple[str, ...] = ()
    headers: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    deliver_at: str | None = None
    timezone: str | None = None
    test_mode: bool = False


def build_message(opts: SendOptions) -> TemplatedMessage:
    """Assemble a :class:`TemplatedMessage` from parsed CLI options.

    The recipient is left unset; the channel routes ``--to``.

    Raises:
        ValueError: For an empty template name, a malformed ``NAME=VALUE``
            argument, or an unparseable delivery time or timezone.

    Example:
        >>> message = build_message(SendOptions(template="welcome", to="a@b.com", params=("name=Jo",)))
        >>> message.params
        {'name': 'Jo'}
    """
    message = TemplatedMessage(opts.template, parse_assignments(opts.params))
    if opts.version:
        message.version(opts.version)
    if opts.from_address:
        message.from_(opts.from_address)
    if opts.cc:
        message.cc(opts.cc)
    if opts.bcc:
        message.bcc(opts.bcc)
    if opts.subject:
        message.with_subject(opts.subject)
    if opts.domain:
        message.via(opts.domain)
    if opts.reply_to:
        message.reply_to(opts.reply_to)
    if opts.return_path:
        message.return_path(opts.return_path)

    message.with_options(parse_assignments(opts.options))
    for raw in opts.headers:
        assignment = parse_assignment(raw, coerce=False)
        message.header(assignment.name, str(assignment.value))
    if opts.tags:
        message.tag(list(opts.tags))
    if opts.deliver_at:
        message.deliver_at(opts.deliver_at, opts.timezone)
    if opts.test_mode:
        message.test_mode()
    return message


def _dry_run(cli_ctx: CLIContext, opts: SendOptions) -> None:
    mailgun_config = cli_ctx.services.load_mailgun_config_from_dict(cli_ctx.config.as_dict())
    notification = CommandLineNotification(build_message(opts))
    message = prepare_message(opts.to, notification, mailgun_config.to_message_defaults())
    if message is None:
        _fail_no_recipient(opts.to)
    payload = {"domain": message.domain or mailgun_config.domain, "fields": message.to_wire_format()}
    click.echo(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode())


def _send(cli_ctx: CLIContext, opts: SendOptions) -> None:
    from mailgun_templates.composition import build_channel

    mailgun_config = cli_ctx.services.load_mailgun_config_from_dict(cli_ctx.config.as_dict())
    with build_channel(cli_ctx.services, mailgun_config) as channel:
        response = channel.send(opts.to, CommandLineNotification(build_message(opts)))
    if response is None:
        _fail_no_recipient(opts.to)
    _report_success(response, opts)


def _report_success(response: SendResponse, opts: SendOptions) -> None:
    click.echo(f"\nMessage queued: {response.id}")
    if response.message:
        click.echo(f"Mailgun: {response.message}")
    logger.info(
        "Templated message sent via CLI",
        extra={"template": opts.template, "recipient": opts.to, "message_id": response.id},
    )


def _fail_no_recipient(to: str) -> NoReturn:
    logger.warning("No recipient resolved", extra={"recipient": to})
    click.echo(f"\nError: No recipient could be resolved from {to!r}", err=True)
    raise SystemExit(ExitCode.INVALID_ARGUMENT)


def _fail(
    exc: Exception,
    log_message: str,
    user_message: str,
    exit_code: ExitCode,
    *,
    log_traceback: bool = False,
) -> NoReturn:
    logger.error(
        log_message,
        extra={"error": str(exc), "error_type": type(exc).__name__},
        exc_info=log_traceback,
    )
    click.echo(f"\nError: {user_message} - {exc}", err=True)
    raise SystemExit(exit_code)


def execute_with_delivery_error_handling(operation: Callable[[], None]) -> None:
    """Run *operation* and translate failures into exit codes.

    Handlers run most specific first:

    1. ConfigurationError, pydantic ValidationError -> CONFIG_ERROR (78)
    2. ValueError (bad template, parameter, date) -> INVALID_ARGUMENT (22)
    3. httpx.TimeoutException -> TIMEOUT (110)
    4. httpx.HTTPStatusError, httpx.HTTPError -> DELIVERY_FAILURE (69)
    5. anything else -> GENERAL_ERROR (1)

    Set ``DEVELOPMENT_MODE`` to re-raise unexpected errors with their
    traceback.

    Raises:
        SystemExit: On any handled error.
    """
    try:
        operation()
    except (ConfigurationError, ValidationError) as exc:
        _fail(exc, "Mailgun configuration error", "Configuration error", ExitCode.CONFIG_ERROR)
    except ValueError as exc:
        _fail(exc, "Invalid message parameters", "Invalid message parameters", ExitCode.INVALID_ARGUMENT)
    except httpx.TimeoutException as exc:
        _fail(exc, "Mailgun request timed out", "Request timed out", ExitCode.TIMEOUT)
    except httpx.HTTPStatusError as exc:
        rejection = f"Mailgun rejected the message with HTTP {exc.response.status_code}"
        _fail(exc, "Mailgun rejected the message", rejection, ExitCode.DELIVERY_FAILURE)
    except httpx.HTTPError as exc:
        _fail(exc, "Mailgun delivery failed", "Failed to send message", ExitCode.DELIVERY_FAILURE)
    except Exception as exc:
        if os.environ.get("DEVELOPMENT_MODE"):
            raise
        _fail(
            exc,
            "Unexpected error sending templated message",
            "Unexpected error",
            ExitCode.GENERAL_ERROR,
            log_traceback=True,
        )


@click.command("send", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("template")
@click.option("--to", "to", required=True, help="Recipient, e.g. 'Jane <jane@example.com>'")
@click.option("--from", "from_address", default=None, help="Sender (defaults to mailgun.from_address)")
@click.option("--cc", default=None, help="Carbon-copy recipient")
@click.option("--bcc", default=None, help="Blind carbon-copy recipient")
@click.option("--subject", default=None, help="Subject, overriding the template's own")
@click.option("--version", "version", default=None, help="Template version tag")
@click.option("--domain", default=None, help="Sending domain (defaults to mailgun.domain)")
@click.option("--reply-to", default=None, help="Reply-To address (defaults to mailgun.reply_to)")
@click.option("--return-path", default=None, help="Return-Path address (defaults to mailgun.return_path)")
@click.option(
    "--param", "params", multiple=True, metavar="NAME=VALUE", help="Template variable, JSON values allowed (repeatable)"
)
@click.option("--option", "options", multiple=True, metavar="NAME=VALUE", help="Mailgun o: option (repeatable)")
@click.option("--header", "headers", multiple=True, metavar="NAME=VALUE", help="Custom MIME header (repeatable)")
@click.option("--tag", "tags", multiple=True, help="Message tag (repeatable)")
@click.option("--deliver-at", default=None, metavar="WHEN", help="Scheduled delivery, ISO-8601 or RFC 2822")
@click.option("--timezone", default=None, metavar="TZ", help="IANA zone used to read --deliver-at (default UTC)")
@click.option("--test-mode", is_flag=True, default=False, help="Ask Mailgun to accept but not deliver")
@click.option("--dry-run", is_flag=True, default=False, help="Print the request fields as JSON instead of sending")
@click.pass_context
def cli_send(
    ctx: click.Context,
    template: str,
    to: str,
    from_address: str | None,
    cc: str | None,
    bcc: str | None,
    subject: str | None,
    version: str | None,
    domain: str | None,
    reply_to: str | None,
    return_path: str | None,
    params: tuple[str, ...],
    options: tuple[str, ...],
    headers: tuple[str, ...],
    tags: tuple[str, ...],
    deliver_at: str | None,
    timezone: str | None,
    test_mode: bool,
    dry_run: bool,
) -> None:
    """Send TEMPLATE to a recipient through the Mailgun messages API.

    Example:
        >>> from click.testing import CliRunner
        >>> # Real invocation tested in test_cli_send.py
    """
    if timezone and not deliver_at:
        raise click.UsageError("--timezone requires --deliver-at")

    cli_ctx = get_cli_context(ctx)
    opts = SendOptions(
        template=template,
        to=to,
        from_address=from_address,
        cc=cc,
        bcc=bcc,
        subject=subject,
        version=version,
        domain=domain,
        reply_to=reply_to,
        return_path=return_path,
        params=params,
        options=options,
        headers=headers,
        tags=tags,
        deliver_at=deliver_at,
        timezone=timezone,
        test_mode=test_mode,
    )
    extra = {"command": "send", "template": template, "recipient": to, "dry_run": dry_run}

    with lib_log_rich.runtime.bind(job_id="cli-send", extra=extra):
        logger.info("Sending templated message", extra={"template": template, "recipient": to})
        if dry_run:
            execute_with_delivery_error_handling(lambda: _dry_run(cli_ctx, opts))
        else:
            execute_with_delivery_error_handling(lambda: _send(cli_ctx, opts))


__all__ = [
    "CommandLineNotification",
    "SendOptions",
    "build_message",
    "cli_send",
    "execute_with_delivery_error_handling",
]
