"""
Field descriptor derivation.

A descriptor table lists, for one option dataclass, every field's long name,
short alias, help text, type category and default value. Tables are derived
from the dataclass shape alone and cached per type, so deriving the same type
twice always yields equal tables.
"""

import dataclasses
import enum
import functools
import logging
import types
import typing
from collections.abc import Mapping
from typing import Any, Iterator, Literal, Optional, Type, Union

from .errors import DescriptorError, NameCollision
from .multi import MultiAlias
from .typedefs import About, IntWidth, Meta, as_about, as_meta

logger = logging.getLogger(__name__)

HELP_LONG = "--help"
HELP_SHORT = "h"

_CACHE_SIZE = 256

_UNION_TYPES: tuple[Any, ...] = (Union,)
if hasattr(types, "UnionType"):
    _UNION_TYPES += (types.UnionType,)


class TypeCategory(enum.Enum):
    """Value category of an option, inferred from its annotation."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    ENUM = "enum"
    LITERAL = "literal"
    OPTIONAL = "optional"
    MULTI = "multi"


@dataclasses.dataclass(frozen=True)
class FieldDescriptor:
    """
    Read-only description of one option field.

    For OPTIONAL and MULTI fields, ``leaf`` and ``leaf_type`` describe the
    wrapped type; for every other category they repeat ``category`` and the
    field's own type. ``leaf_type`` is the Enum class for ENUM leaves and
    the tuple of allowed values for LITERAL leaves.
    """

    name: str
    long: str
    category: TypeCategory
    leaf: TypeCategory
    leaf_type: Any
    owner: Any
    short: Optional[str] = None
    help: Optional[str] = None
    width: Optional[IntWidth] = None
    capacity: Optional[int] = None
    default: Any = dataclasses.field(
        default_factory=lambda: dataclasses.MISSING, compare=False
    )

    @property
    def qualified_name(self) -> str:
        return f"{self.owner.__name__}.{self.name}"

    @property
    def is_flag(self) -> bool:
        """True when the option may appear without a value."""
        return self.leaf is TypeCategory.BOOLEAN

    @property
    def choices(self) -> tuple[str, ...]:
        if self.leaf is TypeCategory.ENUM:
            return tuple(member.name for member in self.leaf_type)
        if self.leaf is TypeCategory.LITERAL:
            return tuple(str(choice) for choice in self.leaf_type)
        return ()


class DescriptorTable:
    """
    Ordered field descriptors of one or more option dataclasses.

    Lookup maps for long and short names are built on construction; any
    duplicate name, including the reserved ``--help``/``-h``, raises
    NameCollision.
    """

    def __init__(self, owners: tuple[Any, ...], fields: tuple[FieldDescriptor, ...]):
        self.owners = owners
        self.fields = fields
        self._by_long: dict[str, FieldDescriptor] = {}
        self._by_short: dict[str, FieldDescriptor] = {}
        for descriptor in fields:
            self._register(descriptor)

    def _register(self, descriptor: FieldDescriptor) -> None:
        if descriptor.long == HELP_LONG:
            raise NameCollision(descriptor.qualified_name, "help", HELP_LONG)
        if descriptor.short == HELP_SHORT:
            raise NameCollision(descriptor.qualified_name, "help", f"-{HELP_SHORT}")

        existing = self._by_long.get(descriptor.long)
        if existing is not None:
            raise NameCollision(
                existing.qualified_name, descriptor.qualified_name, descriptor.long
            )
        self._by_long[descriptor.long] = descriptor

        if descriptor.short is not None:
            existing = self._by_short.get(descriptor.short)
            if existing is not None:
                raise NameCollision(
                    existing.qualified_name,
                    descriptor.qualified_name,
                    f"-{descriptor.short}",
                )
            self._by_short[descriptor.short] = descriptor

    def by_long(self, long: str) -> Optional[FieldDescriptor]:
        return self._by_long.get(long)

    def by_short(self, short: str) -> Optional[FieldDescriptor]:
        return self._by_short.get(short)

    def for_owner(self, owner: Any) -> tuple[FieldDescriptor, ...]:
        return tuple(d for d in self.fields if d.owner is owner)

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DescriptorTable):
            return NotImplemented
        return self.owners == other.owners and self.fields == other.fields

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        owners = ", ".join(owner.__name__ for owner in self.owners)
        return f"DescriptorTable({owners}: {[d.long for d in self.fields]})"


def long_name(field_name: str) -> str:
    """Return the long option for a field name, e.g. ``dry_run`` -> ``--dry-run``."""
    return "--" + field_name.replace("_", "-")


def _get_optional_inner_type(type_hint: Any) -> Optional[Any]:
    """
    If type_hint is Optional[T] (i.e., Union[T, None]), return T.
    Otherwise, return None.
    """
    if typing.get_origin(type_hint) in _UNION_TYPES:
        args = typing.get_args(type_hint)
        non_none_args = [a for a in args if a is not type(None)]
        if len(non_none_args) == 1 and type(None) in args:
            return non_none_args[0]
    return None


def _leaf_info(
    type_hint: Any, field_name: str
) -> tuple[TypeCategory, Any, Optional[IntWidth]]:
    """
    Classify a non-wrapper annotation.

    Returns:
        Tuple of (category, leaf_type, width).
    """
    width = None
    if typing.get_origin(type_hint) is typing.Annotated:
        base, *extras = typing.get_args(type_hint)
        width = next((e for e in extras if isinstance(e, IntWidth)), None)
        type_hint = base
        if width is not None and type_hint is not int:
            raise DescriptorError(
                f"Field '{field_name}': IntWidth applies to int, not {type_hint!r}"
            )

    if type_hint is bool:
        return TypeCategory.BOOLEAN, bool, None
    if type_hint is int:
        return TypeCategory.INTEGER, int, width
    if type_hint is float:
        return TypeCategory.FLOAT, float, None
    if isinstance(type_hint, type) and issubclass(type_hint, enum.Enum):
        if not len(type_hint):
            raise DescriptorError(f"Field '{field_name}': enum {type_hint.__name__} is empty")
        return TypeCategory.ENUM, type_hint, None
    if typing.get_origin(type_hint) is Literal:
        return TypeCategory.LITERAL, typing.get_args(type_hint), None
    if isinstance(type_hint, MultiAlias) or _get_optional_inner_type(type_hint):
        raise DescriptorError(
            f"Field '{field_name}': {type_hint!r} cannot be nested inside Optional or Multi"
        )
    return TypeCategory.STRING, str, None


def _field_meta(field: dataclasses.Field, override: Optional[Meta]) -> Meta:
    """Merge field metadata with the class-level ``meta`` entry, which wins."""
    short = field.metadata.get("short")
    help_text = field.metadata.get("help")
    if override is not None:
        if override.short is not None:
            short = override.short
        if override.help is not None:
            help_text = override.help
    return Meta(short=short, help=help_text)


def _get_field_default(field: dataclasses.Field) -> Any:
    """Extract the default value from a dataclass field."""
    if field.default is not dataclasses.MISSING:
        return field.default
    elif field.default_factory is not dataclasses.MISSING:
        return field.default_factory()
    return dataclasses.MISSING


def _check_short(short: Any, field_name: str) -> None:
    if not isinstance(short, str) or len(short) != 1 or short == "-":
        raise DescriptorError(
            f"Field '{field_name}': short alias must be a single character, got {short!r}"
        )


def _class_attr(cls: Type[Any], name: str) -> Any:
    """Read a class-level table, ignoring dataclass fields that share its name."""
    if name in {f.name for f in dataclasses.fields(cls)}:
        return None
    return getattr(cls, name, None)


def _class_meta(cls: Type[Any]) -> dict[str, Meta]:
    table = _class_attr(cls, "meta") or {}
    if not isinstance(table, Mapping):
        raise DescriptorError(f"{cls.__name__}.meta must be a mapping of field names")
    return {name: as_meta(entry) for name, entry in table.items()}


def _build_descriptor(
    cls: Type[Any], field: dataclasses.Field, type_hint: Any, meta: Meta
) -> FieldDescriptor:
    category = None
    capacity = None
    inner = type_hint

    if isinstance(type_hint, MultiAlias):
        category = TypeCategory.MULTI
        capacity = type_hint.capacity
        inner = type_hint.item_type
    else:
        optional_inner = _get_optional_inner_type(type_hint)
        if optional_inner is not None:
            category = TypeCategory.OPTIONAL
            inner = optional_inner

    leaf, leaf_type, width = _leaf_info(inner, field.name)
    if meta.short is not None:
        _check_short(meta.short, field.name)

    return FieldDescriptor(
        name=field.name,
        long=long_name(field.name),
        category=category or leaf,
        leaf=leaf,
        leaf_type=leaf_type,
        owner=cls,
        short=meta.short,
        help=meta.help,
        width=width,
        capacity=capacity,
        default=_get_field_default(field),
    )


def describe(cls: Type[Any]) -> DescriptorTable:
    """
    Derive the descriptor table for an option dataclass.

    Args:
        cls: The dataclass type whose fields are the options.

    Returns:
        DescriptorTable: One descriptor per field, in declaration order.

    Raises:
        DescriptorError: If ``cls`` is not a dataclass type, an annotation
            cannot be resolved, or the ``meta`` table is malformed.
        NameCollision: If two fields share a long or short name.
    """
    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        raise DescriptorError(f"Expected a dataclass type, got {cls!r}")
    return _describe(cls)


@functools.lru_cache(maxsize=_CACHE_SIZE)
def _describe(cls: Type[Any]) -> DescriptorTable:
    try:
        hints = typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as e:
        raise DescriptorError(
            f"Cannot resolve annotations of {cls.__name__}: {e}"
        ) from e

    fields = dataclasses.fields(cls)
    meta_table = _class_meta(cls)
    unknown = set(meta_table) - {f.name for f in fields}
    if unknown:
        raise DescriptorError(
            f"{cls.__name__}.meta names unknown fields: {', '.join(sorted(unknown))}"
        )

    descriptors = tuple(
        _build_descriptor(
            cls, f, hints.get(f.name, f.type), _field_meta(f, meta_table.get(f.name))
        )
        for f in fields
    )
    table = DescriptorTable((cls,), descriptors)
    logger.debug("Derived %r", table)
    return table


def merge_tables(
    global_table: DescriptorTable, sub_table: DescriptorTable
) -> DescriptorTable:
    """
    Combine a global and a subcommand table into one matching namespace.

    Raises:
        NameCollision: If a long or short name appears in both tables.
    """
    return DescriptorTable(
        global_table.owners + sub_table.owners, global_table.fields + sub_table.fields
    )


def describe_merged(global_cls: Type[Any], sub_cls: Type[Any]) -> DescriptorTable:
    """Derive the merged table for a global/subcommand pair."""
    describe(global_cls)
    describe(sub_cls)
    return _describe_merged(global_cls, sub_cls)


@functools.lru_cache(maxsize=_CACHE_SIZE)
def _describe_merged(global_cls: Type[Any], sub_cls: Type[Any]) -> DescriptorTable:
    return merge_tables(_describe(global_cls), _describe(sub_cls))


def get_about(cls: Type[Any]) -> About:
    """Return the ``about`` record of ``cls``; the name defaults to the class name."""
    about = as_about(_class_attr(cls, "about"))
    if about.name is None:
        about = dataclasses.replace(about, name=cls.__name__.lower())
    return about
