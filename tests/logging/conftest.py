import logging

import pytest


@pytest.fixture(autouse=True)
def _caplog_all_levels(caplog):
    caplog.set_level(0)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    logger = logging.getLogger()
    original_handlers = logger.handlers[:]
    original_level = logger.level
    asyncio_logger = logging.getLogger('asyncio')
    original_asyncio = asyncio_logger.propagate, asyncio_logger.handlers[:]
    yield
    logger.handlers[:] = original_handlers
    logger.setLevel(original_level)
    asyncio_logger.propagate, asyncio_logger.handlers[:] = original_asyncio
