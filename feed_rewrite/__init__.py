"""
Feed Rewrite - content rewrite rule engine for feed entries.

This package post-processes a fetched feed entry's title and HTML content
with a small rule language (``remove(".ads"),add_dynamic_image``), per-site
predefined rules and a library of HTML transformations.

Main entry point is ``rewrite`` or the CLI via the `feed-rewrite` command.

Example:
    $ feed-rewrite content https://xkcd.com/1912/ -i content.html
"""

__all__ = [
    "__version__",
    "Entry",
    "Feed",
    "Rule",
    "parse_rules",
    "rewrite",
    "apply_feed_rules",
    "rewrite_entry_url",
    "get_referer_for_url",
    "predefined_rules_for",
    "AppConfig",
    "RewriteConfig",
    "load_config",
]
__version__ = "0.1.0"

from .config import AppConfig, RewriteConfig, load_config
from .core.rules import Rule, parse_rules
from .core.types import Entry, Feed
from .rewrite.predefined import predefined_rules_for
from .rewrite.referer import get_referer_for_url
from .rewrite.rewriter import apply_feed_rules, rewrite
from .rewrite.url import rewrite_entry_url
