#!/usr/bin/env python3
"""
Example script demonstrating the usage of structopts.

This script shows how to declare an option dataclass with different field
types, short aliases and help text, and parse the command line into it.

Try:
    python basic_example.py -p 9000 --mode slow -I src -I lib input.txt
    python basic_example.py --help
"""

import enum
import sys
from dataclasses import dataclass, field
from typing import ClassVar, Optional

from structopts import (
    About,
    HelpRequested,
    Meta,
    Multi,
    ParseError,
    parse,
    print_usage,
    u16,
)


class Mode(enum.Enum):
    fast = "fast"
    slow = "slow"


@dataclass
class ServeConfig:
    """Configuration for a small file server."""

    host: str = field(default="127.0.0.1", metadata={"help": "Address to bind"})
    port: u16 = field(default=8080, metadata={"short": "p", "help": "Port to bind"})
    mode: Mode = field(default=Mode.fast, metadata={"help": "Serving mode"})
    verbose: bool = field(default=False, metadata={"short": "v"})
    user: Optional[str] = None
    include: Multi[str, 4] = field(default_factory=Multi[str, 4])

    meta: ClassVar[dict] = {
        "verbose": Meta(help="Enable verbose output"),
        "user": Meta(short="u", help="Drop privileges to this user"),
        "include": Meta(short="I", help="Directory to serve"),
    }
    about: ClassVar[About] = About(name="serve", desc="Serve files over HTTP.")


def main() -> None:
    """Main function demonstrating the parser."""
    config = ServeConfig()

    try:
        files = parse(ServeConfig, config, sys.argv[1:])
    except HelpRequested:
        print_usage(ServeConfig)
        return
    except ParseError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(2)

    print("Parsed Configuration:")
    print("-" * 30)
    print(f"Host: {config.host}")
    print(f"Port: {config.port}")
    print(f"Mode: {config.mode.name}")
    print(f"Verbose: {config.verbose}")
    print(f"User: {config.user}")
    print(f"Include: {list(config.include)}")
    print(f"Files: {files}")


if __name__ == "__main__":
    main()
