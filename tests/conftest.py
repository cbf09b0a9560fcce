import asyncio
import dataclasses
import io
import json
import logging
import re
import sys
from typing import Any, Dict, List, Optional, Tuple

import aiohttp.web
import pytest

from kubeclient.clients.auth import APIContext
from kubeclient.clients.cluster import Kubernetes
from kubeclient.structs.configuration import ClientSettings
from kubeclient.structs.credentials import ConnectionInfo
from kubeclient.utilities.loggers import ObjectPrefixingTextFormatter, configure


#
# The fake K8s API: a real local aiohttp server with the canned responses.
#

def status(code: int, message: str, reason: str = 'Failure') -> Dict[str, Any]:
    """ A K8s ``Status`` object, as returned with the erroneous responses. """
    return {
        'apiVersion': 'v1',
        'kind': 'Status',
        'metadata': {},
        'status': 'Failure',
        'message': message,
        'reason': reason,
        'code': code,
    }


@dataclasses.dataclass(frozen=True)
class Request:
    """ A request as seen by the fake server, preserved for the later assertions. """
    method: str
    path: str
    raw_path: str
    query: Dict[str, str]
    headers: Dict[str, str]
    data: Any


@dataclasses.dataclass()
class Response:
    status: int = 200
    json: Any = None
    text: Optional[str] = None
    content_type: str = 'application/json'
    delay: Optional[float] = None  # before the headers
    stall: Optional[float] = None  # after the headers and the text (a partial body)


class FakeAPI:
    """
    A registry of the canned responses by the method & path, and a log of the requests.

    The responses are served in the order they were added for the same
    method & path; the last one stays forever (so that the repeated requests
    see the same state). Unknown paths are answered with 404 & a ``Status``,
    as a real K8s API would do for the absent resources.

    Sample usage::

        async def test_me(fake_api, k8s):
            fake_api.add('get', '/api/v1/namespaces/default/pods/pod1', json={...})
            await k8s.pods().get('pod1')
            assert fake_api.requests[0].method == 'GET'
    """

    def __init__(self) -> None:
        super().__init__()
        self.server: str = ''
        self.requests: List[Request] = []
        self._responses: Dict[Tuple[str, str], List[Response]] = {}

    def add(self, method: str, path: str, **kwargs: Any) -> None:
        key = (method.upper(), path)
        self._responses.setdefault(key, []).append(Response(**kwargs))

    def add_status(self, method: str, path: str, code: int, message: str,
                   reason: str = 'Failure') -> None:
        self.add(method, path, status=code, json=status(code, message, reason))

    def calls(self, method: str, path: str) -> List[Request]:
        return [r for r in self.requests if r.method == method.upper() and r.path == path]

    async def handle(self, request: aiohttp.web.BaseRequest) -> aiohttp.web.StreamResponse:

        # The request's content can be read inside of the handler only. We preserve
        # the data into a conventional field, so that they could be asserted later.
        raw = await request.read()
        try:
            data = json.loads(raw) if raw else None
        except json.JSONDecodeError:
            data = raw
        self.requests.append(Request(
            method=request.method,
            path=request.path,
            raw_path=request.raw_path,
            query=dict(request.query),
            headers=dict(request.headers),
            data=data,
        ))

        queue = self._responses.get((request.method, request.path), [])
        if not queue:
            return aiohttp.web.json_response(status(404, f"{request.path} not found", 'NotFound'),
                                             status=404)

        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if response.delay is not None:
            await asyncio.sleep(response.delay)
        if response.stall is not None:
            stream = aiohttp.web.StreamResponse(status=response.status,
                                                headers={'Content-Type': response.content_type})
            await stream.prepare(request)
            await stream.write((response.text or '').encode('utf-8'))
            await asyncio.sleep(response.stall)
            return stream
        if response.text is not None:
            return aiohttp.web.Response(text=response.text, status=response.status,
                                        content_type=response.content_type)
        return aiohttp.web.json_response(response.json, status=response.status)


@pytest.fixture()
async def fake_api(aiohttp_raw_server):
    api = FakeAPI()
    server = await aiohttp_raw_server(api.handle)
    api.server = f'http://{server.host}:{server.port}'
    return api


@pytest.fixture()
def info(fake_api):
    return ConnectionInfo(server=fake_api.server, token='fake-token')


@pytest.fixture()
def settings():
    return ClientSettings()


@pytest.fixture()
async def context(info):
    async with APIContext(info) as context:
        yield context


@pytest.fixture()
def k8s(context, settings):
    return Kubernetes(context=context, settings=settings)


@pytest.fixture()
def logger():
    return logging.getLogger('kubeclient.tests')


#
# Helpers for the logging checks.
#


@pytest.fixture()
def logstream(caplog):
    """ Prefixing is done at the final output. We have to intercept it. """

    logger = logging.getLogger()
    handlers = list(logger.handlers)

    # Setup all log levels of sub-libraries. A side-effect: the handlers are also added.
    configure(verbose=True)

    # Remove any stream handlers added in the step above. But keep the caplog's handlers.
    for handler in list(logger.handlers):
        if isinstance(handler, logging.StreamHandler) and handler.stream is sys.stderr:
            logger.removeHandler(handler)

    # Inject our stream-intercepting handler.
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    formatter = ObjectPrefixingTextFormatter('prefix %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    try:
        with caplog.at_level(logging.DEBUG):
            yield stream
    finally:
        logger.removeHandler(handler)
        logger.handlers[:] = handlers  # undo `configure()`


@pytest.fixture()
def assert_logs(caplog):
    """
    A function to assert the logs are present (by pattern).

    The listed message patterns MUST be present, in the order specified.
    Some other log messages can also be present, but they are ignored.
    """
    def assert_logs_fn(patterns, prohibited=[]):
        __traceback_hide__ = True
        remaining_patterns = list(patterns)
        for message in caplog.messages:
            if remaining_patterns and re.search(remaining_patterns[0], message):
                remaining_patterns[:1] = []

            # Check that the prohibited patterns do not appear in any message.
            for pattern in prohibited:
                if re.search(pattern, message):
                    raise AssertionError(f"Prohibited log pattern found: {message!r} ~ {pattern!r}")

        if remaining_patterns:
            raise AssertionError(f"Few patterns were missed: {remaining_patterns!r}")

    return assert_logs_fn
