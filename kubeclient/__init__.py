"""
The main kubeclient module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the library's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from kubeclient.clients.api import (
    request,
    health,
    check,
    exists,
    get,
    post,
    put,
    delete,
)
from kubeclient.clients.applying import (
    apply_path,
    apply_file,
    apply_manifest,
)
from kubeclient.clients.auth import (
    APIContext,
)
from kubeclient.clients.cluster import (
    Kubernetes,
)
from kubeclient.clients.errors import (
    KubeClientError,
    ConfigError,
    UrlError,
    TransportError,
    DecodeError,
    ManifestError,
    ApplyError,
    APIError,
    APIUnauthorizedError,
    APIForbiddenError,
    APINotFoundError,
    APIConflictError,
)
from kubeclient.clients.resources import (
    ResourceClient,
    ScalableResourceClient,
)
from kubeclient.structs.bodies import (
    Object,
    ConfigMap,
    Secret,
    Pod,
    Service,
    Node,
    Namespace,
    Deployment,
    DaemonSet,
    StatefulSet,
    NetworkPolicy,
    Scale,
)
from kubeclient.structs.configuration import (
    ClientSettings,
    NetworkingSettings,
)
from kubeclient.structs.credentials import (
    ConnectionInfo,
)
from kubeclient.structs.kinds import (
    Kind,
    REGISTRY,
    UnknownKindError,
    lookup,
)
from kubeclient.structs.references import (
    KindDescriptor,
    KindRoute,
    ResourceRoute,
    ListQuery,
    api_root,
)
from kubeclient.utilities.loggers import (
    LogFormat,
    ObjectLogger,
    configure,
)
from kubeclient.utilities.typedefs import (
    Logger,
)
from kubeclient.utilities.versions import (
    version as __version__,
)

__all__ = [
    'request', 'health', 'check', 'exists', 'get', 'post', 'put', 'delete',
    'apply_path', 'apply_file', 'apply_manifest',
    'APIContext',
    'Kubernetes',
    'KubeClientError',
    'ConfigError',
    'UrlError',
    'TransportError',
    'DecodeError',
    'ManifestError',
    'ApplyError',
    'APIError',
    'APIUnauthorizedError',
    'APIForbiddenError',
    'APINotFoundError',
    'APIConflictError',
    'ResourceClient', 'ScalableResourceClient',
    'Object',
    'ConfigMap', 'Secret', 'Pod', 'Service', 'Node', 'Namespace',
    'Deployment', 'DaemonSet', 'StatefulSet', 'NetworkPolicy',
    'Scale',
    'ClientSettings', 'NetworkingSettings',
    'ConnectionInfo',
    'Kind', 'REGISTRY', 'UnknownKindError', 'lookup',
    'KindDescriptor', 'KindRoute', 'ResourceRoute', 'ListQuery', 'api_root',
    'LogFormat', 'ObjectLogger', 'configure',
    'Logger',
    '__version__',
]
