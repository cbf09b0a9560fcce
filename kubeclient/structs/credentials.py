"""
Authentication-related structures.

A minimally sufficient data structure is introduced to bring all the
credentials together in a structured and type-annotated way. Parsing
of kubeconfig files is not done here: the caller (e.g. the CLI) decides
where the values come from.

The information is passed to the HTTP protocol and TCP/SSL connection only,
i.e. everything usable in a generic HTTP client, and nothing more than that:

* TCP server host & port.
* SSL verification/ignorance flags.
* SSL certificate authority.
* SSL client certificate and its private key.
* HTTP ``Authorization: Basic username:password``.
* HTTP ``Authorization: Bearer token`` (or other schemes: Bearer, Digest, etc).

.. seealso::
    :class:`kubeclient.clients.auth.APIContext`.
"""
import dataclasses
from typing import Optional, Union

# Certificates & keys can be given as PEM texts or as base64-encoded PEM texts (as in kubeconfigs).
PemData = Union[str, bytes]


@dataclasses.dataclass(frozen=True)
class ConnectionInfo:
    """
    A single endpoint with specific credentials and connection flags to use.

    The hostname verification is on by default. Kubeconfigs often point to
    the servers by IP addresses, which are not covered by the certificates'
    SANs: for these, ``skip_hostname_check=True`` must be set explicitly.
    The certificate chain is still verified then, unlike with ``insecure``.

    If both a token (or a scheme) and the basic credentials are set,
    the token wins: only one ``Authorization`` header is ever sent.
    """
    server: str  # e.g. "https://localhost:443"
    ca_path: Optional[str] = None
    ca_data: Optional[PemData] = None
    insecure: Optional[bool] = None
    skip_hostname_check: bool = False
    username: Optional[str] = None
    password: Optional[str] = None
    scheme: Optional[str] = None  # RFC-7235/5.1: e.g. Bearer, Basic, Digest, etc.
    token: Optional[str] = None
    certificate_path: Optional[str] = None
    certificate_data: Optional[PemData] = None
    private_key_path: Optional[str] = None
    private_key_data: Optional[PemData] = None
