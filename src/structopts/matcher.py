"""
Classification of a single command-line token against a descriptor table.
"""

import enum
from dataclasses import dataclass
from typing import Optional

from .descriptor import HELP_LONG, HELP_SHORT, DescriptorTable, FieldDescriptor
from .errors import UnknownOption

SEPARATOR = "--"


class TokenKind(enum.Enum):
    LONG = "long"
    SHORT = "short"
    SEPARATOR = "separator"
    HELP = "help"
    POSITIONAL = "positional"


@dataclass(frozen=True)
class Match:
    """
    Outcome of matching one token.

    ``inline`` is the value attached to the token itself (``--port=80`` or
    ``-p80``), or None when the token carries no value. An empty inline
    value (``--name=``) is the empty string, not None.
    """

    kind: TokenKind
    token: str
    descriptor: Optional[FieldDescriptor] = None
    inline: Optional[str] = None


def match_token(table: DescriptorTable, token: str) -> Match:
    """
    Classify ``token``.

    Long names are only looked up for tokens starting with ``--``, short
    aliases only for single-dash tokens. A short alias takes the rest of its
    token as an inline value, so ``-xvf`` is ``-x`` with value ``vf``, never
    three bundled flags. A bare ``-`` is positional.

    Raises:
        UnknownOption: If a dash-prefixed token names no known option.
    """
    if token == SEPARATOR:
        return Match(TokenKind.SEPARATOR, token)

    if token.startswith("--"):
        if token == HELP_LONG:
            return Match(TokenKind.HELP, token)
        name, sep, value = token.partition("=")
        descriptor = table.by_long(name)
        if descriptor is None:
            raise UnknownOption(token)
        return Match(TokenKind.LONG, token, descriptor, value if sep else None)

    if token.startswith("-") and token != "-":
        if token == "-" + HELP_SHORT:
            return Match(TokenKind.HELP, token)
        descriptor = table.by_short(token[1])
        if descriptor is None:
            raise UnknownOption(token)
        inline = token[2:]
        return Match(TokenKind.SHORT, token, descriptor, inline if inline else None)

    return Match(TokenKind.POSITIONAL, token)
