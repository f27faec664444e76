"""
Help text rendering for option dataclasses.

The renderer reads the same descriptor tables the parser uses, plus the
``about`` record of each dataclass. It never influences parsing.
"""

import dataclasses
import enum
import sys
import textwrap
from typing import IO, Any, Optional, Type

from .descriptor import (
    HELP_LONG,
    HELP_SHORT,
    FieldDescriptor,
    TypeCategory,
    describe,
    describe_merged,
    get_about,
)
from .multi import Multi

LINE_WIDTH = 80
MAX_OPTION_COLUMN = 32

_METAVARS = {
    TypeCategory.INTEGER: "INT",
    TypeCategory.FLOAT: "FLOAT",
    TypeCategory.STRING: "STRING",
    TypeCategory.BOOLEAN: "BOOL",
}


def _metavar(descriptor: FieldDescriptor) -> str:
    if descriptor.choices:
        return "{" + ",".join(descriptor.choices) + "}"
    if descriptor.width is not None:
        return descriptor.width.label.upper()
    return _METAVARS[descriptor.leaf]


def _format_default(default_value: Any) -> Optional[str]:
    if default_value is dataclasses.MISSING or default_value is None:
        return None
    if isinstance(default_value, Multi):
        if not default_value:
            return None
        default_value = list(default_value)
    if isinstance(default_value, enum.Enum):
        return default_value.name
    return str(default_value)


def _format_description(descriptor: FieldDescriptor) -> str:
    """Append repeat and default value info to the field's help text."""
    parts = [descriptor.help] if descriptor.help else []
    if descriptor.category is TypeCategory.MULTI:
        parts.append(f"(repeatable, max {descriptor.capacity})")
    default_text = _format_default(descriptor.default)
    if default_text is not None:
        parts.append(f"(default: {default_text})")
    return " ".join(parts)


def _option_label(descriptor: FieldDescriptor) -> str:
    short = f"-{descriptor.short}, " if descriptor.short else "    "
    label = short + descriptor.long
    if not descriptor.is_flag:
        label += f" <{_metavar(descriptor)}>"
    return label


def _format_rows(rows: list[tuple[str, str]]) -> list[str]:
    column = min(max(len(label) for label, _ in rows), MAX_OPTION_COLUMN) + 4
    lines = []
    for label, description in rows:
        head = f"  {label}"
        if not description.strip():
            lines.append(head)
            continue
        wrapped = textwrap.wrap(description, width=max(LINE_WIDTH - column, 20))
        if len(head) + 2 > column:
            lines.append(head)
        else:
            lines.append(head.ljust(column) + wrapped.pop(0))
        lines.extend(" " * column + line for line in wrapped)
    return lines


def _section(
    title: str, descriptors: tuple[FieldDescriptor, ...], with_help: bool
) -> list[str]:
    rows = [(_option_label(d), _format_description(d)) for d in descriptors]
    if with_help:
        rows.append((f"-{HELP_SHORT}, {HELP_LONG}", "Show this help message and exit"))
    if not rows:
        return []
    return [f"{title}:"] + _format_rows(rows)


def _join_blocks(*blocks: list[str]) -> str:
    return "\n\n".join("\n".join(block) for block in blocks if block) + "\n"


def format_usage(cls: Type[Any]) -> str:
    """
    Render the help text of a single option dataclass.

    Args:
        cls: The option dataclass type.

    Returns:
        str: Usage line, description and the option list.
    """
    table = describe(cls)
    about = get_about(cls)
    usage = about.usage or f"{about.name} [options] [args...]"
    return _join_blocks(
        [f"Usage: {usage}"],
        [about.desc] if about.desc else [],
        _section("Options", table.fields, with_help=True),
    )


def format_merged_usage(global_cls: Type[Any], sub_cls: Type[Any]) -> str:
    """
    Render the help text of a subcommand together with the global options.

    The usage line and description come from the subcommand's ``about``
    record when it sets them, else from the global one.
    """
    table = describe_merged(global_cls, sub_cls)
    global_about = get_about(global_cls)
    sub_about = get_about(sub_cls)
    usage = (
        sub_about.usage
        or f"{global_about.name} [global options] {sub_about.name} [options] [args...]"
    )
    desc = sub_about.desc or global_about.desc
    return _join_blocks(
        [f"Usage: {usage}"],
        [desc] if desc else [],
        _section("Global options", table.for_owner(global_cls), with_help=True),
        _section("Command options", table.for_owner(sub_cls), with_help=False),
    )


def print_usage(cls: Type[Any], writer: Optional[IO[str]] = None) -> None:
    """Write the help text of ``cls`` to ``writer`` (default: sys.stdout)."""
    (writer or sys.stdout).write(format_usage(cls))


def print_merged_usage(
    global_cls: Type[Any], sub_cls: Type[Any], writer: Optional[IO[str]] = None
) -> None:
    """Write the merged help text to ``writer`` (default: sys.stdout)."""
    (writer or sys.stdout).write(format_merged_usage(global_cls, sub_cls))
