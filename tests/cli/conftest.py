import logging

import pytest
from click.testing import CliRunner


@pytest.fixture(autouse=True)
def _restore_root_logger():
    logger = logging.getLogger()
    original_handlers = logger.handlers[:]
    original_level = logger.level
    yield
    logger.handlers[:] = original_handlers
    logger.setLevel(original_level)


@pytest.fixture()
def invoke():
    from cwoperator.cli import main
    runner = CliRunner()

    def invoke_fn(args, **kwargs):
        return runner.invoke(main, args, **kwargs)
    return invoke_fn
