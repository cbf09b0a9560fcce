import asyncio
import functools
import logging

import click.testing
import pytest

from kubeclient.cli import main


@pytest.fixture(autouse=True)
def _restore_root_handlers():
    # Every invocation configures the logging anew; the handlers outlive the runner's streams.
    logger = logging.getLogger()
    handlers = logger.handlers[:]
    level = logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


@pytest.fixture()
def runner():
    runner = click.testing.CliRunner()
    return runner


@pytest.fixture()
def invoke(runner):
    return functools.partial(runner.invoke, main)


@pytest.fixture()
def invoke_in_thread(invoke):
    """
    Invoke the CLI while the fake API keeps serving in the test's event loop.

    The CLI starts its own event loop, which cannot be done in the running one.
    """
    async def invoke_fn(*args, **kwargs):
        return await asyncio.to_thread(invoke, *args, **kwargs)
    return invoke_fn


@pytest.fixture()
def real_run(mocker):
    return mocker.patch('kubeclient.cli.run', return_value='ok')
