"""
Entry rewriter: selects, decodes and applies rewrite rules.

The rule source is the feed's custom rule text when set, otherwise the
predefined rules of the entry's site. The PDF download link rule always
runs last. Rules run in order, each one reading the current title or
content and writing the new value back to the entry.
"""

from __future__ import annotations

import logging

from ..config import RewriteConfig
from ..core.rules import parse_rules
from ..core.types import Entry, Feed
from .actions import AddPdfDownloadLink, RewriteAction, RewriteContext, decode_rules
from .predefined import predefined_rules_for
from .url import rewrite_entry_url

logger = logging.getLogger(__name__)


def rewrite(
    entry_url: str,
    entry: Entry,
    custom_rules: str = "",
    config: RewriteConfig | None = None,
) -> Entry:
    """Apply content rewrite rules to an entry in place.

    Args:
        entry_url: URL used for rule selection and URL-based rules
        entry: The entry to rewrite; its title and content are replaced
        custom_rules: Per-feed rule text; overrides the predefined rules when not blank
        config: Embed settings for the video rules, defaults to RewriteConfig()

    Returns:
        The same entry, for chaining
    """
    rules_text = custom_rules if custom_rules and custom_rules.strip() else predefined_rules_for(entry_url)
    actions = build_actions(rules_text, entry_url)

    logger.debug(
        "Rewrite rules applied",
        extra={"rules": [type(action).__name__ for action in actions], "entry_url": entry_url},
    )

    ctx = RewriteContext(entry_url=entry_url, config=config or RewriteConfig())
    for action in actions:
        if action.target == "title":
            entry.title = action.apply(entry.title, ctx)
        else:
            entry.content = action.apply(entry.content, ctx)
    return entry


def build_actions(rules_text: str, entry_url: str = "") -> list[RewriteAction]:
    """Parse and decode rule text, appending the terminal PDF link action."""
    actions = decode_rules(parse_rules(rules_text), entry_url)
    actions.append(AddPdfDownloadLink())
    return actions


def apply_feed_rules(feed: Feed, entry: Entry, config: RewriteConfig | None = None) -> Entry:
    """Rewrite the entry URL, then its content, using the feed's rules."""
    entry.url = rewrite_entry_url(feed, entry)
    return rewrite(entry.url, entry, feed.rewrite_rules, config)
