from __future__ import annotations

import logging

from feed_rewrite.config import LoggingConfig
from feed_rewrite.logging_utils import ContextFormatter, setup_logging


def test_context_formatter_appends_extra_fields():
    record = logging.LogRecord("feed_rewrite.test", logging.WARNING, __file__, 1, "Rule skipped", None, None)
    record.rule = "replace"
    record.entry_url = "https://example.org/"

    text = ContextFormatter("%(message)s").format(record)

    assert text == "Rule skipped [rule='replace' entry_url='https://example.org/']"


def test_context_formatter_without_extras():
    record = logging.LogRecord("feed_rewrite.test", logging.INFO, __file__, 1, "Plain", None, None)

    assert ContextFormatter("%(message)s").format(record) == "Plain"


def test_setup_logging_configures_package_logger():
    logger = setup_logging(LoggingConfig(level="debug"))

    assert logger.name == "feed_rewrite"
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert logger.propagate is False


def test_setup_logging_without_console():
    logger = setup_logging(LoggingConfig(level="nonsense", console=False))

    assert logger.handlers == []
    assert logger.level == logging.INFO
