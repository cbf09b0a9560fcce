"""
K8s API errors.

The underlying client library (now, ``aiohttp``) can be replaced in the future.
We cannot rely on embedding its exceptions all over the code of the library.
Hence, we have our own hierarchy of exceptions, and the exceptions of the HTTP
library are never leaked to the callers: they are chained as the causes of our
own specialised errors -- for better explainability of errors in the stack traces.

The hierarchy is:

* `ConfigError` -- bad credentials/certificate material or an unusable setup.
* `UrlError` -- the server URL cannot be joined with an API path.
* `TransportError` -- sending, connecting, reading, or timing out.
* `DecodeError` -- malformed JSON/YAML or a malformed ``Status`` body.
* `ManifestError` -- a manifest is not applicable (no name, unknown kind).
* `ApplyError` -- a manifest file has failed to apply (the cause is chained).
* `APIError` -- a well-formed ``Status`` with a non-2xx HTTP status.

Some selected reasons of K8s API errors are made into their own classes,
so that they could be intercepted and handled in other places of the library.
All other reasons are raised as the base error class and are indistinguishable
from each other (except via the exception's fields).

"Not found" is not a separate outcome of the API calls: it is `APINotFoundError`
everywhere except in the existence checks, where it is a regular ``False``.
"""
import asyncio
import collections.abc
import json
import os
from typing import Any, Collection, Optional, Union

import aiohttp
from typing_extensions import Literal, TypedDict


class RawStatusCause(TypedDict):
    field: str
    reason: str
    message: str


class RawStatusDetails(TypedDict):
    name: str
    uid: str
    retryAfterSeconds: int
    kind: str
    group: str
    causes: Collection[RawStatusCause]


# https://kubernetes.io/docs/reference/generated/kubernetes-api/v1.19/#status-v1-meta
class RawStatus(TypedDict, total=False):
    apiVersion: str
    kind: Literal["Status"]
    metadata: Any
    code: int
    status: Literal["Success", "Failure"]
    reason: str
    message: str
    details: RawStatusDetails


class KubeClientError(Exception):
    """ The base class for all errors raised by the library. """


class ConfigError(KubeClientError):
    """ Raised when the credentials or certificates cannot be used. """


class UrlError(KubeClientError):
    """ Raised when the server URL cannot be joined with the API path. """


class TransportError(KubeClientError):
    """ Raised when the request cannot be sent or the response cannot be read. """


class DecodeError(KubeClientError):
    """
    Raised when the payload cannot be decoded.

    For the erroneous responses (non-2xx), the HTTP status is remembered,
    so that the error is still distinguishable by status when the server
    (or a proxy in front of it) responds with something other than a ``Status``.
    """

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class ManifestError(KubeClientError):
    """ Raised when a manifest lacks the fields needed to route it. """


class ApplyError(KubeClientError):
    """ Raised when a manifest file fails to apply; the original error is the cause. """

    def __init__(self, path: Union[str, "os.PathLike[str]"], exc: Exception) -> None:
        super().__init__(f"Failed to apply {os.fspath(path)}: {exc}")
        self.path = os.fspath(path)


class APIError(KubeClientError):

    def __init__(
            self,
            payload: Optional[RawStatus],
            *,
            status: int,
            method: Optional[str] = None,
            url: Optional[str] = None,
    ) -> None:
        message = payload.get('message') if payload else None
        super().__init__(message, payload)
        self._status = status
        self._payload = payload
        self._method = method
        self._url = url

    def __str__(self) -> str:
        if self._method is not None and self._url is not None:
            return f"Failed to {self._method.upper()} {self._url}: {self.message}"
        return str(self.message)

    @property
    def status(self) -> int:
        return self._status

    @property
    def code(self) -> Optional[int]:
        return self._payload.get('code') if self._payload else None

    @property
    def reason(self) -> Optional[str]:
        return self._payload.get('reason') if self._payload else None

    @property
    def message(self) -> Optional[str]:
        return self._payload.get('message') if self._payload else None

    @property
    def details(self) -> Optional[RawStatusDetails]:
        return self._payload.get('details') if self._payload else None

    @property
    def method(self) -> Optional[str]:
        return self._method

    @property
    def url(self) -> Optional[str]:
        return self._url


class APIUnauthorizedError(APIError):
    pass


class APIForbiddenError(APIError):
    pass


class APINotFoundError(APIError):
    pass


class APIConflictError(APIError):
    pass


def is_success(response: aiohttp.ClientResponse) -> bool:
    return 200 <= response.status < 300


async def check_response(
        response: aiohttp.ClientResponse,
) -> None:
    """
    Check for specialised K8s errors, and raise with extended information.

    Every non-2xx status is an error here, including 404 and 3xx.
    The body of an erroneous response must be a well-formed ``Status``;
    otherwise, the response is undecodable and `DecodeError` is raised.
    """
    if is_success(response):
        return

    method = response.method
    url = str(response.url)

    # Read the response's body before it is closed: it is not readable afterwards.
    try:
        payload = await response.json(content_type=None)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"Failed to decode the error response of {method} {url} as Status: {e}",
                          status=response.status) from e
    except (aiohttp.ClientPayloadError, aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
        raise TransportError(f"Failed to read the error response of {method} {url}: {e}") from e
    finally:
        response.release()

    # Better be safe: who knows which sensitive information can be dumped unless kind==Status.
    if (
        not isinstance(payload, collections.abc.Mapping) or
        payload.get('kind') != 'Status' or
        not isinstance(payload.get('message'), str)
    ):
        raise DecodeError(f"Failed to decode the error response of {method} {url} as Status: "
                          f"HTTP {response.status} with no Status body.", status=response.status)

    cls = (
        APIUnauthorizedError if response.status == 401 else
        APIForbiddenError if response.status == 403 else
        APINotFoundError if response.status == 404 else
        APIConflictError if response.status == 409 else
        APIError
    )
    raise cls(payload, status=response.status, method=method, url=url)


async def parse_response(
        response: aiohttp.ClientResponse,
) -> Any:
    """
    Check the response for errors, and either raise or return the parsed data.
    """
    await check_response(response)
    try:
        return await response.json(content_type=None)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"Failed to decode the response of {response.method} {response.url} "
                          f"as JSON: {e}") from e
    except (aiohttp.ClientPayloadError, aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
        raise TransportError(f"Failed to read the response of {response.method} {response.url}: "
                             f"{e}") from e
    finally:
        response.release()
