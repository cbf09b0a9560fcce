import base64
import binascii
import contextlib
import logging
import os
import ssl
import tempfile
import types
from typing import Dict, Optional, Type, Union

import aiohttp

from kubeclient.clients import errors
from kubeclient.structs import credentials
from kubeclient.utilities import versions

logger = logging.getLogger(__name__)


class APIContext:
    """
    A container for an aiohttp session and the server's base URL.

    The container is constructed once per connection info, and then shared
    by all the clients derived from it (e.g. per-namespace handles).
    Nothing in it changes after the construction, so the sharing is safe.

    As with all aiohttp sessions, the context must be constructed
    and used inside of the same running event loop.
    """

    # The main contained object used by the API methods.
    session: aiohttp.ClientSession

    # Contextual information for URL building.
    server: str

    def __init__(
            self,
            info: credentials.ConnectionInfo,
    ) -> None:
        super().__init__()
        self.server = info.server
        self.session = self.make_aiohttp_session(info)

    async def __aenter__(self) -> "APIContext":
        return self

    async def __aexit__(
            self,
            exc_type: Optional[Type[BaseException]],
            exc_val: Optional[BaseException],
            exc_tb: Optional[types.TracebackType],
    ) -> None:
        await self.close()

    def make_aiohttp_session(self, info: credentials.ConnectionInfo) -> aiohttp.ClientSession:
        context = make_ssl_context(info)
        headers = make_headers(info)
        auth = make_basic_auth(info)
        return aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(
                limit=0,
                ssl=context,
            ),
            headers=headers,
            auth=auth,
        )

    async def close(self) -> None:
        await self.session.close()


def make_ssl_context(info: credentials.ConnectionInfo) -> ssl.SSLContext:
    """
    Build the SSL context for both the server verification and the client certificates.

    Any unusable certificate material is reported as `ConfigError`,
    with the SSL/OS error chained as the cause.
    """
    if info.ca_path is not None and info.ca_data is not None:
        raise errors.ConfigError("Only one of the CA path and the CA data can be set, not both.")

    has_cert = bool(info.certificate_path or info.certificate_data)
    has_pkey = bool(info.private_key_path or info.private_key_data)
    if has_cert != has_pkey:
        raise errors.ConfigError("The client certificate and the private key must be set together.")

    try:
        # Some SSL data are not accepted directly, so we have to use temp files.
        # Do not even create temporary files if there is no need. It can be a readonly filesystem.
        with contextlib.ExitStack() as stack:

            cert_path: Union[str, "os.PathLike[str]", None]
            if info.certificate_path:
                cert_path = info.certificate_path
            elif info.certificate_data:
                cert_file = stack.enter_context(tempfile.NamedTemporaryFile(buffering=0))
                cert_file.write(decode_to_pem(info.certificate_data).encode('ascii'))
                cert_path = cert_file.name
            else:
                cert_path = None

            pkey_path: Union[str, "os.PathLike[str]", None]
            if info.private_key_path:
                pkey_path = info.private_key_path
            elif info.private_key_data:
                pkey_file = stack.enter_context(tempfile.NamedTemporaryFile(buffering=0))
                pkey_file.write(decode_to_pem(info.private_key_data).encode('ascii'))
                pkey_path = pkey_file.name
            else:
                pkey_path = None

            context = ssl.create_default_context(
                purpose=ssl.Purpose.SERVER_AUTH,
                cafile=info.ca_path,
                cadata=decode_to_pem(info.ca_data) if info.ca_data is not None else None,
            )
            if cert_path and pkey_path:
                context.load_cert_chain(certfile=cert_path, keyfile=pkey_path)

    except (ssl.SSLError, OSError, ValueError, binascii.Error) as e:
        raise errors.ConfigError(f"Failed to load the SSL certificates or keys: {e}") from e

    if info.skip_hostname_check or info.insecure:
        context.check_hostname = False
    if info.insecure:
        context.verify_mode = ssl.CERT_NONE

    return context


def make_headers(info: credentials.ConnectionInfo) -> Dict[str, str]:
    """
    Build the static headers: the self-identification and the token authorization.

    The explicit scheme (with or without a token) wins over the bearer token.
    Both win over the basic auth, which is then not used at all (see `make_basic_auth`).
    """
    headers: Dict[str, str] = {
        'User-Agent': f'kubeclient/{versions.version or "unknown"}',
    }

    # The token auth part.
    if info.scheme and info.token:
        headers['Authorization'] = f'{info.scheme} {info.token}'
    elif info.scheme:
        headers['Authorization'] = f'{info.scheme}'
    elif info.token:
        headers['Authorization'] = f'Bearer {info.token}'

    return headers


def make_basic_auth(info: credentials.ConnectionInfo) -> Optional[aiohttp.BasicAuth]:
    """
    Build the basic auth for the session, unless the token authorization is used.

    aiohttp renders it as the only `Authorization` header of the requests.
    """
    if not (info.username and info.password):
        return None
    elif info.scheme or info.token:
        logger.debug("Basic credentials are ignored: the token authorization is used instead.")
        return None
    else:
        return aiohttp.BasicAuth(info.username, info.password)


def decode_to_pem(data: Union[str, bytes]) -> str:
    if isinstance(data, str) and data.startswith('-----BEGIN '):
        return data
    elif isinstance(data, bytes) and data.startswith(b'-----BEGIN '):
        return data.decode('ascii')
    else:
        return base64.b64decode(data).decode('ascii')
