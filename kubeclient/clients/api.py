"""
The raw HTTP verbs of the K8s API: one call is exactly one HTTP request.

There are no retries here or anywhere above: a failure is reported
to the caller as is, with the aiohttp errors converted to our own ones.
"""
import asyncio
from typing import Any, Collection, Mapping, Optional

import aiohttp

from kubeclient.clients import auth, errors
from kubeclient.structs import configuration, references
from kubeclient.utilities import typedefs


async def request(
        method: str,
        url: str,  # relative to the server/api root, or absolute.
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        payload: Optional[object] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        tolerated: Collection[int] = (),
        logger: typedefs.Logger,
) -> aiohttp.ClientResponse:
    """
    Perform one request and check its response for errors.

    The tolerated statuses are not checked: the caller takes care of them
    (e.g. 404 in the existence checks). The response is returned unread.
    """
    if '://' not in url:
        url = references.join_url(context.server, url)

    if timeout is None:
        timeout = aiohttp.ClientTimeout(
            total=settings.networking.request_timeout,
            sock_connect=settings.networking.connect_timeout,
        )

    what = f"{method.upper()} {url}"
    try:
        data = aiohttp.JsonPayload(payload) if payload is not None else None
    except (TypeError, ValueError) as e:
        raise errors.DecodeError(f"Failed to encode the payload of {what} as JSON: {e}") from e

    logger.debug(f"Requesting: {what}")
    try:
        response = await context.session.request(
            method=method,
            url=url,
            data=data,
            headers=headers,
            timeout=timeout,
        )
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise errors.TransportError(f"Failed to {what}: {e!r}") from e

    logger.debug(f"Responded with HTTP {response.status}: {what}")
    if response.status not in tolerated:
        await errors.check_response(response)  # but do not parse it!
    return response


async def health(
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        logger: typedefs.Logger,
) -> str:
    response = await request(
        method='get',
        url='/healthz',
        context=context,
        settings=settings,
        logger=logger,
    )
    try:
        return await response.text()
    except (aiohttp.ClientPayloadError, aiohttp.ClientConnectionError,
            asyncio.TimeoutError, UnicodeDecodeError) as e:
        raise errors.TransportError(f"Failed to read the health status: {e!r}") from e
    finally:
        response.release()


async def check(
        url: str,
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        logger: typedefs.Logger,
) -> Any:
    """ Fetch an arbitrary API endpoint as JSON (e.g. ``/version`` or ``/api``). """
    return await get(url, context=context, settings=settings, logger=logger)


async def exists(
        url: str,
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> bool:
    """
    Check if the resource exists: 404 is a regular ``False`` here, not an error.

    The found resource is still decoded: a malformed body of a successful
    response is an error, not an existing resource (nor a missing one).
    """
    response = await request(
        method='get',
        url=url,
        timeout=timeout,
        tolerated={404},
        context=context,
        settings=settings,
        logger=logger,
    )
    if response.status == 404:
        response.release()
        return False
    await errors.parse_response(response)
    return True


async def get(
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> Any:
    response = await request(
        method='get',
        url=url,
        headers=headers,
        timeout=timeout,
        context=context,
        settings=settings,
        logger=logger,
    )
    return await errors.parse_response(response)


async def post(
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        payload: Optional[object] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> Any:
    response = await request(
        method='post',
        url=url,
        payload=payload,
        headers=headers,
        timeout=timeout,
        context=context,
        settings=settings,
        logger=logger,
    )
    return await errors.parse_response(response)


async def put(
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        payload: Optional[object] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> Any:
    response = await request(
        method='put',
        url=url,
        payload=payload,
        headers=headers,
        timeout=timeout,
        context=context,
        settings=settings,
        logger=logger,
    )
    return await errors.parse_response(response)


async def delete(
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        payload: Optional[object] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> None:
    """
    Delete the resource. The body of the response (the deleted object or a Status) is ignored.
    """
    response = await request(
        method='delete',
        url=url,
        payload=payload,
        headers=headers,
        timeout=timeout,
        context=context,
        settings=settings,
        logger=logger,
    )
    response.release()
