"""``KEY=VALUE`` parsing for CLI arguments.

Two flavours share the same splitting and value coercion rules:

* ``--set SECTION.KEY[.SUBKEY...]=VALUE`` deep-merges into the layered
  :class:`~lib_layered_config.Config` via :func:`apply_overrides`.
* ``--param``, ``--option`` and ``--header`` on ``send`` become flat
  ``(name, value)`` pairs via :func:`parse_assignment`.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import cast

import orjson
from lib_layered_config import Config

CoercedValue = str | int | float | bool | None | list[object] | dict[str, object]
"""Anything :func:`coerce_value` can return."""


@dataclass(frozen=True, slots=True)
class Assignment:
    """One parsed ``NAME=VALUE`` pair."""

    name: str
    value: CoercedValue


@dataclass(frozen=True, slots=True)
class ConfigOverride:
    """One parsed ``--set`` override addressed by section and key path."""

    section: str
    key_path: tuple[str, ...]
    value: CoercedValue


def coerce_value(raw: str) -> CoercedValue:
    """Interpret *raw* as JSON when possible, otherwise keep the string.

    Examples:
        >>> coerce_value("30")
        30
        >>> coerce_value("false")
        False
        >>> coerce_value('{"plan": "pro"}')
        {'plan': 'pro'}
        >>> coerce_value("Ada Lovelace")
        'Ada Lovelace'
        >>> coerce_value("")
        ''
    """
    if not raw:
        return raw
    try:
        return orjson.loads(raw)
    except ValueError:  # orjson.JSONDecodeError
        return raw


def parse_assignment(raw: str, *, coerce: bool = True) -> Assignment:
    """Split ``NAME=VALUE`` at the first ``=``.

    Args:
        raw: Argument as typed on the command line.
        coerce: Run the value through :func:`coerce_value`; headers pass
            ``False`` so numeric-looking values stay strings.

    Raises:
        ValueError: If ``=`` is missing or the name is blank.

    Examples:
        >>> parse_assignment("count=3")
        Assignment(name='count', value=3)
        >>> parse_assignment("X-Campaign=42", coerce=False)
        Assignment(name='X-Campaign', value='42')
        >>> parse_assignment("url=https://example.com/?a=b").value
        'https://example.com/?a=b'
    """
    name, separator, value = raw.partition("=")
    name = name.strip()
    if not separator:
        raise ValueError(f"Invalid assignment {raw!r}: expected NAME=VALUE")
    if not name:
        raise ValueError(f"Invalid assignment {raw!r}: name is empty")
    return Assignment(name=name, value=coerce_value(value) if coerce else value)


def parse_assignments(raw_values: Iterable[str], *, coerce: bool = True) -> dict[str, CoercedValue]:
    """Parse repeated ``NAME=VALUE`` arguments; later names win.

    Example:
        >>> parse_assignments(["a=1", "b=x", "a=2"])
        {'a': 2, 'b': 'x'}
    """
    parsed: dict[str, CoercedValue] = {}
    for raw in raw_values:
        assignment = parse_assignment(raw, coerce=coerce)
        parsed[assignment.name] = assignment.value
    return parsed


def parse_override(raw: str) -> ConfigOverride:
    """Parse a ``--set`` argument into section, key path and value.

    Raises:
        ValueError: If ``=`` is missing, the path has no dot, or any path
            component is empty.

    Examples:
        >>> parse_override("mailgun.domain=mg.example.com")
        ConfigOverride(section='mailgun', key_path=('domain',), value='mg.example.com')
        >>> parse_override("mailgun.timeout=5").value
        5
    """
    assignment = parse_assignment(raw)
    section, dot, rest = assignment.name.partition(".")
    if not dot:
        raise ValueError(f"Invalid override {raw!r}: key must look like SECTION.KEY")
    key_path = tuple(rest.split("."))
    if not section or not all(key_path):
        raise ValueError(f"Invalid override {raw!r}: empty section or key component")
    return ConfigOverride(section=section, key_path=key_path, value=assignment.value)


def _merge_into(tree: dict[str, object], override: ConfigOverride) -> None:
    node = tree
    for part in (override.section, *override.key_path[:-1]):
        child = node.setdefault(part, {})
        if not isinstance(child, dict):
            dotted = ".".join((override.section, *override.key_path))
            raise ValueError(f"Override {dotted!r} conflicts with a scalar at {part!r}")
        node = cast("dict[str, object]", child)
    node[override.key_path[-1]] = override.value


def apply_overrides(config: Config, raw_overrides: tuple[str, ...]) -> Config:
    """Return *config* with every ``--set`` override merged in.

    Raises:
        ValueError: If any override is malformed.

    Examples:
        >>> cfg = Config({"mailgun": {"timeout": 30}}, {})
        >>> apply_overrides(cfg, ("mailgun.timeout=5",))["mailgun"]["timeout"]
        5
        >>> apply_overrides(cfg, ()) is cfg
        True
    """
    if not raw_overrides:
        return config
    tree: dict[str, object] = {}
    for raw in raw_overrides:
        _merge_into(tree, parse_override(raw))
    return config.with_overrides(tree)


__all__ = [
    "Assignment",
    "CoercedValue",
    "ConfigOverride",
    "apply_overrides",
    "coerce_value",
    "parse_assignment",
    "parse_assignments",
    "parse_override",
]
