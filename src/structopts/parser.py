"""
structopts - declarative command-line parsing into dataclasses.

This module holds the parse drivers. ``parse`` fills one option dataclass
from a token list; ``parse_merged`` fills a global and a subcommand
dataclass from one token list, git style. Defaults are whatever the caller's
instances hold before the call; the drivers only write parsed values.

Example:
    @dataclass
    class Opts:
        port: u16 = 8080
        verbose: bool = False
        meta: ClassVar[dict] = {"port": Meta(short="p", help="Port to bind")}

    opts = Opts()
    try:
        files = parse(Opts, opts, ["-p", "9000", "index.html"])
    except HelpRequested:
        print_usage(Opts)
"""

import dataclasses
import enum
import logging
import sys
from typing import Any, Optional, Sequence, Type, TypeVar, Union

from result import Err, Ok, Result

from .coerce import append_value, coerce_value
from .descriptor import (
    DescriptorTable,
    FieldDescriptor,
    TypeCategory,
    describe,
    describe_merged,
)
from .errors import HelpRequested, MissingValue, StructoptsError
from .matcher import SEPARATOR, TokenKind, match_token
from .multi import Multi

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=enum.Enum)


def _check_destination(cls: Type[Any], dest: Any) -> None:
    if not isinstance(dest, cls):
        raise TypeError(
            f"Destination must be an instance of {cls.__name__}, got {type(dest).__name__}"
        )
    if dataclasses.is_dataclass(cls) and cls.__dataclass_params__.frozen:
        raise TypeError(f"Destination {cls.__name__} is frozen and cannot be written to")


def _resolve_args(args: Optional[Sequence[str]]) -> list[str]:
    return list(sys.argv[1:] if args is None else args)


def _store(
    descriptor: FieldDescriptor, dest: Any, text: Optional[str], first: bool
) -> None:
    """
    Coerce ``text`` (None for a bare flag) and write it into ``dest``.

    On the first occurrence of a multi field in a parse, the field's current
    value is replaced by an empty accumulator of the declared capacity.
    """
    value = True if text is None else coerce_value(descriptor, text)

    if descriptor.category is TypeCategory.MULTI:
        if first:
            setattr(dest, descriptor.name, Multi(descriptor.capacity, descriptor.leaf_type))
        append_value(descriptor, getattr(dest, descriptor.name), value)
    else:
        setattr(dest, descriptor.name, value)


def _drive(
    table: DescriptorTable,
    destinations: dict[Any, Any],
    args: list[str],
    skip_subcommand: bool = False,
) -> list[str]:
    """
    Walk ``args`` once, left to right, writing options into ``destinations``.

    Args:
        table: Descriptor table used to match tokens.
        destinations: Maps each owner dataclass in the table to its instance.
        args: Tokens to parse, without the program name.
        skip_subcommand: Drop the first positional token instead of
            collecting it.

    Returns:
        list[str]: Positional tokens in order of appearance.

    Raises:
        HelpRequested: On ``--help`` or ``-h``.
        ParseError: On the first unknown option, missing value or bad value.
    """
    positionals: list[str] = []
    seen: set[FieldDescriptor] = set()
    pending_subcommand = skip_subcommand
    index = 0

    while index < len(args):
        token = args[index]
        index += 1
        match = match_token(table, token)

        if match.kind is TokenKind.SEPARATOR:
            positionals.extend(args[index:])
            break
        if match.kind is TokenKind.HELP:
            raise HelpRequested(*table.owners)
        if match.kind is TokenKind.POSITIONAL:
            if pending_subcommand:
                pending_subcommand = False
                logger.debug("Skipping subcommand token %r", token)
            else:
                positionals.append(token)
            continue

        descriptor = match.descriptor
        text = match.inline
        if text is None and not descriptor.is_flag:
            if index >= len(args):
                raise MissingValue(descriptor.name, token)
            text = args[index]
            index += 1
        _store(descriptor, destinations[descriptor.owner], text, descriptor not in seen)
        seen.add(descriptor)

    return positionals


def parse(cls: Type[Any], dest: Any, args: Optional[Sequence[str]] = None) -> list[str]:
    """
    Parse command-line tokens into an option dataclass instance.

    Args:
        cls: The option dataclass type.
        dest: An instance of ``cls`` holding the defaults; parsed values are
            written into it.
        args: Tokens to parse, excluding the program name. If None, uses
            sys.argv[1:].

    Returns:
        list[str]: Positional arguments in order of appearance.

    Raises:
        HelpRequested: If ``--help`` or ``-h`` appears before any ``--``.
        ParseError: If a token is an unknown option, lacks its value, or
            holds a value that cannot be coerced. Fields written before the
            failing token keep their new values.
        DescriptorError: If ``cls`` is not a usable option dataclass.
    """
    table = describe(cls)
    _check_destination(cls, dest)
    positionals = _drive(table, {cls: dest}, _resolve_args(args))
    logger.debug("Parsed %s with %d positional(s)", cls.__name__, len(positionals))
    return positionals


def parse_merged(
    global_cls: Type[Any],
    sub_cls: Type[Any],
    global_dest: Any,
    sub_dest: Any,
    args: Optional[Sequence[str]] = None,
) -> list[str]:
    """
    Parse a git-style command line against global and subcommand options.

    Both option sets are matched as one namespace, so global options may
    appear before or after the subcommand name. The first positional token
    is taken to be the subcommand name (resolve it beforehand with
    find_subcmd) and is not returned.

    Args:
        global_cls: Dataclass type of the options shared by all subcommands.
        sub_cls: Dataclass type of the selected subcommand's options.
        global_dest: Instance of ``global_cls`` to write into.
        sub_dest: Instance of ``sub_cls`` to write into.
        args: Tokens to parse, excluding the program name. If None, uses
            sys.argv[1:].

    Returns:
        list[str]: Positional arguments after the subcommand name.

    Raises:
        NameCollision: If both dataclasses declare the same long or short name.
        HelpRequested: If ``--help`` or ``-h`` appears before any ``--``.
        ParseError: On the first failing token, as with parse.
    """
    table = describe_merged(global_cls, sub_cls)
    _check_destination(global_cls, global_dest)
    _check_destination(sub_cls, sub_dest)
    destinations = {global_cls: global_dest, sub_cls: sub_dest}
    positionals = _drive(table, destinations, _resolve_args(args), skip_subcommand=True)
    logger.debug(
        "Parsed %s/%s with %d positional(s)",
        global_cls.__name__,
        sub_cls.__name__,
        len(positionals),
    )
    return positionals


def find_subcmd(enum_cls: Type[E], args: Optional[Sequence[str]] = None) -> Optional[E]:
    """
    Return the first member of ``enum_cls`` whose name appears in ``args``.

    Matching is case-sensitive and stops at a ``--`` separator.

    Example:
        class Command(enum.Enum):
            build = enum.auto()
            test = enum.auto()

        find_subcmd(Command, ["--verbose", "build"])  # Command.build
    """
    for token in _resolve_args(args):
        if token == SEPARATOR:
            break
        if token in enum_cls.__members__:
            return enum_cls[token]
    return None


def safe_parse(
    cls: Type[Any], dest: Any, args: Optional[Sequence[str]] = None
) -> Result[list[str], Union[StructoptsError, HelpRequested]]:
    """
    Like parse, but return the outcome instead of raising.

    Returns:
        Result[list[str], Exception]:
            - Ok with the positional arguments,
            - Err with the ParseError, DescriptorError or HelpRequested raised.
    """
    try:
        return Ok(parse(cls, dest, args))
    except (StructoptsError, HelpRequested) as e:
        return Err(e)


def safe_parse_merged(
    global_cls: Type[Any],
    sub_cls: Type[Any],
    global_dest: Any,
    sub_dest: Any,
    args: Optional[Sequence[str]] = None,
) -> Result[list[str], Union[StructoptsError, HelpRequested]]:
    """Like parse_merged, but return Ok(positionals) or Err(exception)."""
    try:
        return Ok(parse_merged(global_cls, sub_cls, global_dest, sub_dest, args))
    except (StructoptsError, HelpRequested) as e:
        return Err(e)
