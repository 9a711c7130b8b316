"""
Lexer and parser for the rewrite rule language.

Rule text is a loose sequence of identifiers and quoted strings:

    add_dynamic_image,replace("article/(.*).svg"|"article/$1.png"),remove(".ads")

An identifier starts a new rule, a string becomes the next argument of the
last rule. Everything else (commas, parentheses, pipes, whitespace) is noise.
Malformed text never raises; it only yields fewer rules or arguments.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass
import logging
import re
from typing import Iterator
import warnings

logger = logging.getLogger(__name__)


IDENT_RE = re.compile(r"[^\W\d]\w*")  # Cannot start with a digit; "2x" reads as noise "2" then "x"
STRING_RE = re.compile(r'"(?:[^"\\\n]|\\.)*"')  # Double-quoted, backslash escapes


@dataclass(frozen=True)
class Rule:
    """A parsed rule: a name and its positional string arguments."""

    name: str
    args: tuple[str, ...] = ()


def parse_rules(text: str) -> list[Rule]:
    """Parse rule text into an ordered list of rules.

    Args:
        text: Raw rule text, e.g. ``remove(".spam"),nl2br``

    Returns:
        Rules in the order they appear. Strings found before the first
        identifier are dropped.

    Examples:
        >>> parse_rules('add_dynamic_image,replace("a"|"b")')
        [Rule(name='add_dynamic_image', args=()), Rule(name='replace', args=('a', 'b'))]
    """
    names: list[str] = []
    args: list[list[str]] = []

    for kind, value in _tokens(text or ""):
        if kind == "ident":
            names.append(value)
            args.append([])
        elif args:
            args[-1].append(value)

    return [Rule(name=name, args=tuple(values)) for name, values in zip(names, args)]


def _tokens(text: str) -> Iterator[tuple[str, str]]:
    """Yield (kind, value) tokens, kind being "ident" or "string"."""
    pos = 0
    length = len(text)
    while pos < length:
        char = text[pos]

        match = IDENT_RE.match(text, pos)
        if match is not None:
            yield "ident", match.group(0)
            pos = match.end()
            continue

        if char == '"':
            match = STRING_RE.match(text, pos)
            if match is None:
                logger.debug("Unterminated string in rule text", extra={"position": pos})
                return
            yield "string", _unquote(match.group(0))
            pos = match.end()
            continue

        pos += 1


def _unquote(literal: str) -> str:
    """Unquote a double-quoted literal, keeping the raw body when escapes are invalid."""
    try:
        with warnings.catch_warnings():
            # Unknown escapes such as "\s" are kept verbatim
            warnings.simplefilter("ignore")
            value = ast.literal_eval(literal)
    except (SyntaxError, ValueError):
        return literal[1:-1]
    return value if isinstance(value, str) else literal[1:-1]
