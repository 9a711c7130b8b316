from __future__ import annotations

import logging
import re

from ..core.regex import compile_pattern, template_replacer
from ..core.types import Entry, Feed

logger = logging.getLogger(__name__)


# Format: rewrite("regex"|"replacement")
URL_REWRITE_RULE_RE = re.compile(r'rewrite\("(.*)"\|"(.*)"\)')


def rewrite_entry_url(feed: Feed, entry: Entry) -> str:
    """Return the entry URL rewritten by the feed's URL rewrite rule.

    The original URL is returned when the feed has no rule, the rule is not
    of the form ``rewrite("regex"|"replacement")`` or its regex is invalid.
    """
    url = entry.url
    rule = (feed.url_rewrite_rules or "").strip()
    if not rule:
        return url

    parts = URL_REWRITE_RULE_RE.fullmatch(rule)
    if parts is None:
        logger.debug(
            "Cannot find search and replace terms for URL rewrite rule",
            extra={"entry_url": url, "feed_id": feed.id, "url_rewrite_rules": feed.url_rewrite_rules},
        )
        return url

    pattern = compile_pattern(parts.group(1))
    if pattern is None:
        logger.error(
            "Failed on regexp compilation",
            extra={"url_rewrite_rules": feed.url_rewrite_rules, "feed_id": feed.id},
        )
        return url

    rewritten = pattern.sub(template_replacer(parts.group(2)), url)
    logger.debug(
        "Rewriting entry URL",
        extra={
            "original_entry_url": url,
            "rewritten_entry_url": rewritten,
            "feed_id": feed.id,
            "feed_url": feed.feed_url,
        },
    )
    return rewritten
