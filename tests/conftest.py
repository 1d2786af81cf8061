"""Shared fixtures"""
import logging
import pytest
import structlog


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo handler changes made by setup_structured_logging"""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()
