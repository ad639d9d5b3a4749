import json
import logging
import re

import pytest

from cwoperator._cogs.clients import auth
from cwoperator._cogs.configs.configuration import OperatorSettings
from cwoperator._cogs.structs.credentials import ConnectionInfo
from cwoperator._core.actions.loggers import AgentLogger


@pytest.fixture()
def settings():
    settings = OperatorSettings()
    settings.networking.error_backoffs = []
    settings.reconciling.conflict_backoffs = [0]
    return settings


@pytest.fixture()
def body():
    """ A minimal custom resource, as if it was read from the cluster. """
    return {
        'apiVersion': 'cloudwatch.aws.amazon.com/v1alpha1',
        'kind': 'AmazonCloudWatchAgent',
        'metadata': {'name': 'agent', 'namespace': 'ns', 'uid': 'uid-agent'},
        'spec': {'mode': 'deployment', 'config': '{}'},
    }


@pytest.fixture()
def logger(body):
    return AgentLogger(body=body)


#
# Mocks for the K8s API. No external calls must be made under any circumstances:
# all the requests go to the local `aresponses` server, which pretends to be K8s.
#

@pytest.fixture()
def hostname():
    """ A fake hostname to be used in all aiohttp/aresponses tests. """
    return 'fake-host'


@pytest.fixture()
async def api_context(hostname):
    context = auth.APIContext(ConnectionInfo(server=f'https://{hostname}'))
    try:
        yield context
    finally:
        await context.close()


@pytest.fixture()
def enforced_context(api_context):
    """
    Make the API client wrappers use one specific context for the test.

    The context variable is set in a sync fixture, so that the test's task
    inherits it (the async fixtures run in their own copies of the context).
    """
    token = auth.context_var.set(api_context)
    try:
        yield api_context
    finally:
        auth.context_var.reset(token)


@pytest.fixture()
def resp_mocker(enforced_context, aresponses, mocker):
    """
    A factory of server-side callbacks for `aresponses` with mocking/spying.

    The value of the fixture is a function, which return a coroutine mock.
    That coroutine mock should be passed to `aresponses.add` as a response
    callback function. When called, it calls the mock defined by the function's
    arguments (specifically, return_value or side_effects).

    The request's payload & query are stored in the mock's ``payloads``
    & ``queries`` lists, one per call, since the request's content can be
    read inside of the handler only.

    Sample usage::

        def test_me(resp_mocker):
            response = aiohttp.web.json_response({'a': 'b'})
            callback = resp_mocker(return_value=response)
            aresponses.add(hostname, '/path/', 'get', callback)
            do_something()
            assert callback.called
            assert callback.call_count == 1
    """
    def resp_maker(*args, **kwargs):
        actual_response = mocker.MagicMock(*args, **kwargs)

        async def resp_mock_effect(request):
            text = await request.text()
            try:
                data = json.loads(text) if text else None
            except json.JSONDecodeError:
                data = text
            resp_mock.payloads.append(data)
            resp_mock.queries.append(dict(request.query))

            # Get a response/error as it was intended (via return_value/side_effect).
            return actual_response()

        resp_mock = mocker.AsyncMock(side_effect=resp_mock_effect)
        resp_mock.payloads = []
        resp_mock.queries = []
        return resp_mock
    return resp_maker


#
# Helpers for the logging checks.
#

@pytest.fixture()
def assert_logs(caplog):
    """
    A function to assert the logs are present (by pattern).

    The listed message patterns MUST be present, in the order specified.
    Some other log messages can also be present, but they are ignored.
    """
    caplog.set_level(logging.DEBUG)

    def assert_logs_fn(patterns, prohibited=[], strict=False):
        __traceback_hide__ = True
        remaining_patterns = list(patterns)
        for message in caplog.messages:
            # The expected pattern is at position 0.
            # Looking-ahead: if one of the following patterns matches, while the
            # 0th does not, then the log message is missing, and we fail the test.
            for idx, pattern in enumerate(remaining_patterns):
                m = re.search(pattern, message)
                if m:
                    if idx == 0:
                        remaining_patterns[:1] = []
                        break  # out of `remaining_patterns` cycle
                    else:
                        skipped_patterns = remaining_patterns[:idx]
                        raise AssertionError(f"Few patterns were skipped: {skipped_patterns!r}")
                elif strict:
                    raise AssertionError(f"Unexpected log message: {message!r}")

            # Check that the prohibited patterns do not appear in any message.
            for pattern in prohibited:
                m = re.search(pattern, message)
                if m:
                    raise AssertionError(f"Prohibited log pattern found: {message!r} ~ {pattern!r}")

        # If all patterns have been matched in order, we are done.
        # if some are left, but the messages are over, then we fail.
        if remaining_patterns:
            raise AssertionError(f"Few patterns were missed: {remaining_patterns!r}")

    return assert_logs_fn
