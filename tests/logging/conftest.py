import logging

import pytest

from kubeclient.utilities.loggers import ObjectFormatter


@pytest.fixture(autouse=True)
def _clear_own_handlers():
    logger = logging.getLogger()
    logger.handlers[:] = [
        handler for handler in logger.handlers
        if not isinstance(handler, logging.StreamHandler) or
           not isinstance(handler.formatter, ObjectFormatter)
    ]
    original_handlers = logger.handlers[:]
    original_level = logger.level
    low_level = {name: (logging.getLogger(name).propagate, logging.getLogger(name).handlers[:])
                 for name in ['asyncio', 'aiohttp']}
    yield
    logger.handlers[:] = original_handlers
    logger.setLevel(original_level)
    for name, (propagate, handlers) in low_level.items():
        logging.getLogger(name).propagate = propagate
        logging.getLogger(name).handlers[:] = handlers
