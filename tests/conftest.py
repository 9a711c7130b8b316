import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Undo setup_logging so caplog keeps seeing records from later tests."""
    yield
    logger = logging.getLogger("feed_rewrite")
    logger.handlers = []
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
