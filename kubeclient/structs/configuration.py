"""
All configuration flags, options, settings to fine-tune the client.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

Some of the settings are flags, some are scalars, some are optional,
some are not (but all of them have reasonable defaults).
"""
import dataclasses
from typing import Optional


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: Optional[float] = None
    """
    A timeout for the whole request (connecting, sending, receiving), in seconds.

    If ``None`` (the default), the requests are not limited in time,
    and the caller is responsible for cancelling them if needed.
    """

    connect_timeout: Optional[float] = None
    """
    A timeout for establishing the connection (incl. the SSL handshake), in seconds.
    """


@dataclasses.dataclass
class ClientSettings:
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
