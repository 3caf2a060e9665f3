"""Static package metadata surfaced to CLI commands and documentation.

Values are kept in sync with ``pyproject.toml`` at release time.

Contents:
    * Module-level metadata constants (name, version, shell command, ...).
    * ``LAYEREDCONF_*`` identifiers consumed by the configuration loader.
    * :func:`print_info` - render the metadata block for the ``info`` command.
"""

from __future__ import annotations

name = "mailgun_templates"
title = "Send Mailgun templated messages from notification channels"
version = "1.2.0"
homepage = "https://github.com/matchory/mailgun-templates"
author = "Matchory GmbH"
author_email = "dev@matchory.com"
shell_command = "mailgun-templates"

#: Vendor, application and slug drive the platform-specific config paths.
LAYEREDCONF_VENDOR: str = "matchory"
LAYEREDCONF_APP: str = "mailgun-templates"
LAYEREDCONF_SLUG: str = "mailgun-templates"


def print_info() -> None:
    """Print the summarised metadata block used by the ``info`` command.

    Example:
        >>> print_info()  # doctest: +ELLIPSIS
        Info for mailgun_templates:
        ...
    """
    fields = [
        ("name", name),
        ("title", title),
        ("version", version),
        ("homepage", homepage),
        ("author", author),
        ("author_email", author_email),
        ("shell_command", shell_command),
    ]
    pad = max(len(label) for label, _ in fields)
    lines = [f"Info for {name}:", ""]
    lines.extend(f"    {label.ljust(pad)} = {value}" for label, value in fields)
    print("\n".join(lines))
