"""
Tests for structured logging setup.
"""

import logging

from ticketgate.core.logging import setup_logging


def test_setup_logging_is_idempotent():
    """Running the lifespan twice must not duplicate output."""
    setup_logging()
    setup_logging()

    names = [h.get_name() for h in logging.getLogger().handlers]
    assert names.count("ticketgate") == 1
