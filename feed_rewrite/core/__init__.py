"""
Core domain models and the rule language.

This package contains data types and parsing code that is
independent of any specific transformation.
"""

from .types import Entry, Feed
from .rules import Rule, parse_rules

__all__ = [
    "Entry",
    "Feed",
    "Rule",
    "parse_rules",
]
