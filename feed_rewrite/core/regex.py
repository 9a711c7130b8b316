"""
Regular expression helpers shared by the content and URL rewriters.

Rule authors write replacement templates with ``$1``/``${1}``/``$name``
references and ``$$`` for a literal dollar sign. Backslashes in templates
are literal.
"""

from __future__ import annotations

import logging
import re
from typing import Callable

logger = logging.getLogger(__name__)


TEMPLATE_REF_RE = re.compile(r"\$(?:(\$)|\{(\w+)\}|(\w+))")


def compile_pattern(pattern: str) -> re.Pattern[str] | None:
    """Compile a user supplied pattern, returning None when it is invalid."""
    try:
        return re.compile(pattern)
    except re.error as exc:
        logger.warning(
            "Invalid regular expression in rewrite rule",
            extra={"pattern": pattern, "error": str(exc)},
        )
        return None


def template_replacer(template: str) -> Callable[[re.Match[str]], str]:
    """Build a ``re.sub`` callback expanding ``$``-style group references.

    References to groups that do not exist expand to an empty string.

    Examples:
        >>> re.sub(r"tt(.+)\\.gif", template_replacer("$1.jpg"), "tt42.gif")
        '42.jpg'
    """

    def replace(match: re.Match[str]) -> str:
        def expand(ref: re.Match[str]) -> str:
            if ref.group(1):
                return "$"
            name = ref.group(2) or ref.group(3)
            return _group(match, name)

        return TEMPLATE_REF_RE.sub(expand, template)

    return replace


def _group(match: re.Match[str], name: str) -> str:
    key: int | str = int(name) if name.isdigit() else name
    try:
        value = match.group(key)
    except IndexError:
        return ""
    return value or ""
