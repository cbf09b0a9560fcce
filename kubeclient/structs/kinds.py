"""
The registry of the supported resource kinds.

The registry is closed and static: one entry per supported kind, built once
at import time, read-only afterwards. It is the single source of routing
truth for both the typed clients (bound to kinds via the object classes)
and the manifest applier (looked up by the ``kind`` field of the manifests).
"""
import enum
import types
from typing import Mapping, Union

from kubeclient.structs import references


class Kind(str, enum.Enum):
    CONFIG_MAP = 'ConfigMap'
    SECRET = 'Secret'
    POD = 'Pod'
    SERVICE = 'Service'
    NODE = 'Node'
    NAMESPACE = 'Namespace'
    DEPLOYMENT = 'Deployment'
    DAEMON_SET = 'DaemonSet'
    STATEFUL_SET = 'StatefulSet'
    NETWORK_POLICY = 'NetworkPolicy'

    def __str__(self) -> str:
        return str(self.value)


class UnknownKindError(LookupError):
    """ Raised when a kind is not in the registry. """


DEFAULT_NAMESPACE = 'default'

REGISTRY: Mapping[Kind, references.KindDescriptor] = types.MappingProxyType({
    Kind.CONFIG_MAP: references.KindDescriptor(
        kind='ConfigMap', group='', version='v1', plural='configmaps',
        namespaced=True, default_namespace=DEFAULT_NAMESPACE,
    ),
    Kind.SECRET: references.KindDescriptor(
        kind='Secret', group='', version='v1', plural='secrets',
        namespaced=True, default_namespace=DEFAULT_NAMESPACE,
    ),
    Kind.POD: references.KindDescriptor(
        kind='Pod', group='', version='v1', plural='pods',
        namespaced=True, default_namespace=DEFAULT_NAMESPACE,
    ),
    Kind.SERVICE: references.KindDescriptor(
        kind='Service', group='', version='v1', plural='services',
        namespaced=True, default_namespace=DEFAULT_NAMESPACE,
    ),
    Kind.NODE: references.KindDescriptor(
        kind='Node', group='', version='v1', plural='nodes',
        namespaced=False,
    ),
    Kind.NAMESPACE: references.KindDescriptor(
        kind='Namespace', group='', version='v1', plural='namespaces',
        namespaced=False,
    ),
    Kind.DEPLOYMENT: references.KindDescriptor(
        kind='Deployment', group='apps', version='v1', plural='deployments',
        namespaced=True, default_namespace=DEFAULT_NAMESPACE,
        subresources=frozenset({'scale', 'status'}),
    ),
    Kind.DAEMON_SET: references.KindDescriptor(
        kind='DaemonSet', group='apps', version='v1', plural='daemonsets',
        namespaced=True, default_namespace=DEFAULT_NAMESPACE,
        subresources=frozenset({'status'}),
    ),
    Kind.STATEFUL_SET: references.KindDescriptor(
        kind='StatefulSet', group='apps', version='v1', plural='statefulsets',
        namespaced=True, default_namespace=DEFAULT_NAMESPACE,
        subresources=frozenset({'scale', 'status'}),
    ),
    Kind.NETWORK_POLICY: references.KindDescriptor(
        kind='NetworkPolicy', group='networking.k8s.io', version='v1', plural='networkpolicies',
        namespaced=True, default_namespace=DEFAULT_NAMESPACE,
    ),
})


def lookup(kind: Union[str, Kind]) -> references.KindDescriptor:
    """
    Find the kind's descriptor by the kind itself or by its name (as in YAML files).
    """
    try:
        return REGISTRY[Kind(kind)]
    except ValueError:
        raise UnknownKindError(f"Unsupported kind: {kind!r}") from None
