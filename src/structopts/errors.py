"""
Exception types raised by structopts.

Parse-time failures derive from ParseError, problems with the option
dataclass itself derive from DescriptorError. HelpRequested is not an
error: it signals that the caller should render usage and stop.
"""

from typing import Any, Optional


class StructoptsError(Exception):
    """Base class for every error raised by structopts."""


class ParseError(StructoptsError):
    """A command line could not be parsed against the option structure."""


class UnknownOption(ParseError):
    """A dash-prefixed token does not name any known option."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"Unknown option: {token}")


class MissingValue(ParseError):
    """An option that takes a value was the last token on the command line."""

    def __init__(self, field: str, option: Optional[str] = None) -> None:
        self.field = field
        self.option = option
        shown = option or field
        super().__init__(f"Missing value for option '{shown}'")


class CoercionFailure(ParseError, ValueError):
    """Raw text could not be converted to the field's declared type."""

    def __init__(self, field: str, raw: str, reason: str) -> None:
        self.field = field
        self.raw = raw
        self.reason = reason
        super().__init__(f"Invalid value for '{field}': {raw!r} ({reason})")


class CapacityExceeded(ParseError):
    """A repeatable option was given more times than its capacity allows."""

    def __init__(self, field: Optional[str], capacity: int) -> None:
        self.field = field
        self.capacity = capacity
        if field is None:
            message = f"Capacity of {capacity} exceeded"
        else:
            message = f"Option '{field}' accepts at most {capacity} values"
        super().__init__(message)


class DescriptorError(StructoptsError, TypeError):
    """The option structure cannot be turned into a descriptor table."""


class NameCollision(DescriptorError):
    """Two fields resolve to the same long or short option name."""

    def __init__(self, field_a: str, field_b: str, name: str) -> None:
        self.field_a = field_a
        self.field_b = field_b
        self.name = name
        super().__init__(
            f"Option name conflict: '{name}' is used by both '{field_a}' and '{field_b}'"
        )


class ConfigError(StructoptsError, ValueError):
    """A configuration file could not be loaded into an option structure."""


class HelpRequested(Exception):
    """
    Raised when ``--help`` or ``-h`` is found on the command line.

    Attributes:
        option_types: The option dataclass(es) being parsed, in the order
            they were given to the driver, so the caller can pass them on
            to the usage renderer.
    """

    def __init__(self, *option_types: Any) -> None:
        self.option_types = option_types
        super().__init__("Help requested")
