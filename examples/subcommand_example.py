#!/usr/bin/env python3
"""
Example of a git-style command line with global and per-command options.

Defaults for the global options may come from a YAML or JSON file given in
the TOOL_CONFIG environment variable; the command line overrides them.

Try:
    python subcommand_example.py -v build --release -j 8 app.c
    python subcommand_example.py test --filter unit -- --not-an-option
    python subcommand_example.py build --help
"""

import enum
import os
import sys
from dataclasses import dataclass, field
from typing import ClassVar

from structopts import (
    About,
    HelpRequested,
    Meta,
    ParseError,
    find_subcmd,
    load_defaults,
    parse_merged,
    print_merged_usage,
)


class Command(enum.Enum):
    build = enum.auto()
    test = enum.auto()


@dataclass
class GlobalConfig:
    verbose: bool = field(
        default=False, metadata={"short": "v", "help": "Chatty output"}
    )
    color: bool = field(default=True, metadata={"help": "Colorize output"})

    about: ClassVar[About] = About(name="tool", desc="Build and test a project.")


@dataclass
class BuildConfig:
    release: bool = field(default=False, metadata={"help": "Optimized build"})
    jobs: int = field(default=1, metadata={"help": "Parallel jobs"})

    meta: ClassVar[dict] = {"jobs": Meta(short="j")}
    about: ClassVar[About] = About(name="build")


@dataclass
class TestConfig:
    filter: str = field(
        default="", metadata={"short": "f", "help": "Only run matching tests"}
    )

    about: ClassVar[About] = About(name="test")


SUBCOMMANDS = {Command.build: BuildConfig, Command.test: TestConfig}


def main() -> None:
    args = sys.argv[1:]
    command = find_subcmd(Command, args)
    if command is None:
        print(f"usage: tool [-v] {{{','.join(Command.__members__)}}} ...", file=sys.stderr)
        sys.exit(2)

    config_path = os.environ.get("TOOL_CONFIG")
    if config_path:
        global_config = load_defaults(GlobalConfig, config_path)
    else:
        global_config = GlobalConfig()
    sub_cls = SUBCOMMANDS[command]
    sub_config = sub_cls()

    try:
        rest = parse_merged(GlobalConfig, sub_cls, global_config, sub_config, args)
    except HelpRequested:
        print_merged_usage(GlobalConfig, sub_cls)
        return
    except ParseError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(2)

    print(f"command: {command.name}")
    print(f"global:  {global_config}")
    print(f"options: {sub_config}")
    print(f"args:    {rest}")


if __name__ == "__main__":
    main()
