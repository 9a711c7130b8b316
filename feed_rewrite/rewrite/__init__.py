"""
Rule selection and application.

This package holds the predefined site rules, the transformation
library and the rewriter applying them to entries.
"""

from .rewriter import apply_feed_rules, build_actions, rewrite
from .predefined import predefined_rules_for
from .referer import get_referer_for_url
from .url import rewrite_entry_url

__all__ = [
    "rewrite",
    "apply_feed_rules",
    "build_actions",
    "predefined_rules_for",
    "get_referer_for_url",
    "rewrite_entry_url",
]
