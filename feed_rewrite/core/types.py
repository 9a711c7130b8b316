"""
Core data types for the rewrite engine.

This module defines the structures handed to the engine by the ingestion
pipeline:
- Entry: A fetched feed item whose title and content get rewritten
- Feed: The per-feed settings carrying custom rewrite rules
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Entry:
    """A feed entry as seen by the rewrite engine.

    The caller owns the entry; the rewriter replaces ``title`` and
    ``content`` in place once per applied rule.

    Attributes:
        url: The entry URL, used for per-site rule selection and video embeds
        title: The entry headline
        content: The entry HTML body
    """
    url: str
    title: str = ""
    content: str = ""


@dataclass
class Feed:
    """Feed-level settings consumed by the engine.

    Attributes:
        id: Feed identifier, only used for log context
        feed_url: Feed URL, only used for log context
        rewrite_rules: Custom content rule text overriding predefined rules
        url_rewrite_rules: Entry URL rule of the form rewrite("regex"|"replacement")
    """
    id: int = 0
    feed_url: str = ""
    rewrite_rules: str = ""
    url_rewrite_rules: str = ""
