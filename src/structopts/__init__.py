"""
structopts - declarative command-line parsing into dataclasses.

Declare a dataclass whose fields are typed options with defaults; structopts
derives long names, short aliases, value coercion and help text from the
dataclass shape. It supports plain and git-style (global + subcommand)
command lines, repeatable options, and loading defaults from YAML or JSON.
"""

import logging

from .config import load_defaults
from .descriptor import (
    DescriptorTable,
    FieldDescriptor,
    TypeCategory,
    describe,
    get_about,
    merge_tables,
)
from .errors import (
    CapacityExceeded,
    CoercionFailure,
    ConfigError,
    DescriptorError,
    HelpRequested,
    MissingValue,
    NameCollision,
    ParseError,
    StructoptsError,
    UnknownOption,
)
from .multi import Multi
from .parser import (
    find_subcmd,
    parse,
    parse_merged,
    safe_parse,
    safe_parse_merged,
)
from .typedefs import About, IntWidth, Meta, i8, i16, i32, i64, u8, u16, u32, u64
from .usage import format_merged_usage, format_usage, print_merged_usage, print_usage

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "1.0.0"
__all__ = [
    "About",
    "CapacityExceeded",
    "CoercionFailure",
    "ConfigError",
    "DescriptorError",
    "DescriptorTable",
    "FieldDescriptor",
    "HelpRequested",
    "IntWidth",
    "Meta",
    "MissingValue",
    "Multi",
    "NameCollision",
    "ParseError",
    "StructoptsError",
    "TypeCategory",
    "UnknownOption",
    "describe",
    "find_subcmd",
    "format_merged_usage",
    "format_usage",
    "get_about",
    "i8",
    "i16",
    "i32",
    "i64",
    "load_defaults",
    "merge_tables",
    "parse",
    "parse_merged",
    "print_merged_usage",
    "print_usage",
    "safe_parse",
    "safe_parse_merged",
    "u8",
    "u16",
    "u32",
    "u64",
]
