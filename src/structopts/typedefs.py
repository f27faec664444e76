"""
Annotation helpers and metadata records for option dataclasses.

Fixed-width integers are plain ``int`` values at runtime; the width only
narrows which text the coercer accepts::

    @dataclass
    class Opts:
        port: u16 = 8080
        meta: ClassVar[dict] = {"port": Meta(short="p", help="Port to bind")}
        about: ClassVar[About] = About(name="serve", desc="Serve files")
"""

from dataclasses import dataclass
from typing import Annotated, Any, Mapping, Optional, Union

from .errors import DescriptorError


@dataclass(frozen=True)
class IntWidth:
    """Bit width and signedness of a fixed-width integer option."""

    bits: int
    signed: bool = True

    @property
    def min_value(self) -> int:
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max_value(self) -> int:
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1

    @property
    def label(self) -> str:
        return f"{'i' if self.signed else 'u'}{self.bits}"


i8 = Annotated[int, IntWidth(8)]
i16 = Annotated[int, IntWidth(16)]
i32 = Annotated[int, IntWidth(32)]
i64 = Annotated[int, IntWidth(64)]
u8 = Annotated[int, IntWidth(8, signed=False)]
u16 = Annotated[int, IntWidth(16, signed=False)]
u32 = Annotated[int, IntWidth(32, signed=False)]
u64 = Annotated[int, IntWidth(64, signed=False)]


@dataclass(frozen=True)
class Meta:
    """Per-field overrides: a one-character short alias and help text."""

    short: Optional[str] = None
    help: Optional[str] = None


@dataclass(frozen=True)
class About:
    """Program-level metadata used only when rendering usage."""

    name: Optional[str] = None
    desc: Optional[str] = None
    usage: Optional[str] = None


def as_meta(value: Union[Meta, Mapping[str, Any], None]) -> Meta:
    """Normalize a ``meta`` table entry given as a Meta or a plain mapping."""
    if value is None:
        return Meta()
    if isinstance(value, Meta):
        return value
    if isinstance(value, Mapping):
        unknown = set(value) - {"short", "help"}
        if unknown:
            raise DescriptorError(f"Unknown meta keys: {', '.join(sorted(unknown))}")
        return Meta(short=value.get("short"), help=value.get("help"))
    raise DescriptorError(f"Meta entries must be Meta or a mapping, got {type(value).__name__}")


def as_about(value: Union[About, Mapping[str, Any], None]) -> About:
    """Normalize an ``about`` record given as an About or a plain mapping."""
    if value is None:
        return About()
    if isinstance(value, About):
        return value
    if isinstance(value, Mapping):
        return About(
            name=value.get("name"), desc=value.get("desc"), usage=value.get("usage")
        )
    raise DescriptorError(f"about must be About or a mapping, got {type(value).__name__}")
