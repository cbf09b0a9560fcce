"""
Routing: everything needed to turn a kind, a namespace, and a name into a URL.

The routes are transient values: they are built for one call, used to form
one URL, and then discarded. All the dynamic path segments (namespaces,
plural names, resource names) are percent-encoded; the API prefixes are not,
since they come from the static registry of kinds or from the manifests'
``apiVersion`` fields, which are validated before use.
"""
import dataclasses
import re
import urllib.parse
from typing import FrozenSet, Iterable, List, Mapping, NewType, Optional, Sequence, Tuple

from kubeclient.clients import errors

# A specific really existing addressable namespace (at least, the one assumed to be so).
# Made as a NewType for stricter type-checking to avoid collisions with other strings.
NamespaceName = NewType('NamespaceName', str)

# A namespace reference usable in the API calls. `None` means cluster-wide API calls.
Namespace = Optional[NamespaceName]

# Query parameters are ordered pairs: the order is preserved, but means nothing to the server.
QueryPairs = Sequence[Tuple[str, str]]

# Detect bare API versions (the core API): e.g. "v1", but not "apps/v1" or "v1.example.com".
K8S_VERSION_PATTERN = re.compile(r'^v\d+(?:(?:alpha|beta)\d+)?$')


def api_root(api_version: str) -> str:
    """
    Resolve the API root for an ``apiVersion`` as seen in the objects.

    Bare versions (``v1``) belong to the core API (``/api``),
    everything else (``apps/v1``, ``networking.k8s.io/v1``) -- to the groups.
    """
    return '/api' if K8S_VERSION_PATTERN.match(api_version) else '/apis'


def api_prefix(api_version: str) -> str:
    """ The full path prefix of an API version: e.g. ``/api/v1``, ``/apis/apps/v1``. """
    api_version = api_version.strip('/')
    if not api_version or '?' in api_version or '#' in api_version:
        raise errors.UrlError(f"Unsupported API version: {api_version!r}")
    return f'{api_root(api_version)}/{api_version}'


def quote(segment: str) -> str:
    return urllib.parse.quote(segment, safe='')


def join_url(server: str, path: str) -> str:
    """
    Join the server's base URL with an absolute or relative API path.

    The server can have a path prefix of its own (e.g. behind a proxy),
    which is kept: the API path is appended to it, not replaced.
    """
    try:
        parsed = urllib.parse.urlsplit(server)
    except ValueError as e:
        raise errors.UrlError(f"Cannot parse the server URL {server!r}: {e}") from e
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        raise errors.UrlError(f"The server URL must be http(s)://host[:port]: {server!r}")
    if parsed.query or parsed.fragment:
        raise errors.UrlError(f"The server URL must have no query or fragment: {server!r}")
    return server.rstrip('/') + '/' + path.lstrip('/')


def encode_query(query: Optional[QueryPairs]) -> str:
    return urllib.parse.urlencode(list(query), encoding='utf-8') if query else ''


@dataclasses.dataclass(frozen=True)
class KindDescriptor:
    """
    A reference to a very specific built-in resource kind.

    It is used to form the K8s API URLs. Generally, K8s API only needs
    an API group, an API version, and a plural name of the resource.
    The scoping and the default namespace decide on the namespace segment.
    """

    kind: str
    """
    The resource's kind (as in YAML files); e.g. ``"Pod"``, ``"Deployment"``.
    """

    group: str
    """
    The resource's API group; e.g. ``"apps"``, ``"networking.k8s.io"``.
    For Core v1 API resources, an empty string: ``""``.
    """

    version: str
    """
    The resource's API version; e.g. ``"v1"``, ``"v1beta1"``, etc.
    """

    plural: str
    """
    The resource's plural name; e.g. ``"pods"``, ``"configmaps"``.
    It is used as an API endpoint, together with API group & version.
    """

    namespaced: bool = True
    """
    Whether the resource is namespaced (``True``) or cluster-scoped (``False``).
    """

    default_namespace: Optional[str] = None
    """
    The namespace used when no namespace is requested explicitly.
    Ignored for the cluster-scoped resources.
    """

    subresources: FrozenSet[str] = frozenset()
    """
    The resource's subresources, if served; e.g. ``{"scale"}``.
    """

    def __repr__(self) -> str:
        return f'{self.plural}.{self.version}.{self.group}'.strip('.')

    @property
    def api_version(self) -> str:
        # Strip heading/trailing slashes if group is absent (e.g. for pods).
        return f'{self.group}/{self.version}'.strip('/')

    @property
    def api_prefix(self) -> str:
        return api_prefix(self.api_version)

    def resolve_namespace(self, namespace: Optional[str] = None) -> Namespace:
        """
        Get the effective namespace for this kind.

        An explicit namespace wins, then the kind's default namespace.
        Cluster-scoped kinds never have a namespace, even if it is requested.
        """
        if not self.namespaced:
            return None
        elif namespace is not None:
            return NamespaceName(namespace)
        elif self.default_namespace is not None:
            return NamespaceName(self.default_namespace)
        else:
            return None

    def kind_route(
            self,
            *,
            namespace: Namespace = None,
            query: Optional[QueryPairs] = None,
    ) -> "KindRoute":
        return KindRoute(
            api=self.api_prefix,
            namespace=namespace if self.namespaced else None,
            plural=self.plural,
            query=tuple(query) if query else None,
        )

    def resource_route(
            self,
            name: str,
            *,
            namespace: Namespace = None,
            subresource: Optional[str] = None,
            query: Optional[QueryPairs] = None,
    ) -> "ResourceRoute":
        return ResourceRoute(
            api=self.api_prefix,
            namespace=namespace if self.namespaced else None,
            plural=self.plural,
            name=name,
            subresource=subresource,
            query=tuple(query) if query else None,
        )


@dataclasses.dataclass(frozen=True)
class KindRoute:
    """
    A route to the collection of objects of a kind: used to list & create.

    Renders as ``{api}/[namespaces/{namespace}/]{plural}[?query]``.
    """
    api: str
    plural: str
    namespace: Namespace = None
    query: Optional[Tuple[Tuple[str, str], ...]] = None

    def _segments(self) -> List[str]:
        segments = [self.api.rstrip('/')]
        if self.namespace is not None:
            segments.extend(['namespaces', quote(self.namespace)])
        segments.append(quote(self.plural))
        return segments

    @property
    def path(self) -> str:
        query = encode_query(self.query)
        path = '/'.join(self._segments())
        return path + ('?' if query else '') + query

    def build(self, server: str) -> str:
        return join_url(server, self.path)


@dataclasses.dataclass(frozen=True)
class ResourceRoute(KindRoute):
    """
    A route to one specific object: used to check, get, delete, and scale.

    Renders as ``{api}/[namespaces/{namespace}/]{plural}/{name}[/{subresource}][?query]``.
    """
    name: str = ''
    subresource: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise errors.UrlError("Specific resources require a non-empty name.")

    def _segments(self) -> List[str]:
        segments = super()._segments()
        segments.append(quote(self.name))
        if self.subresource is not None:
            segments.append(quote(self.subresource))
        return segments


@dataclasses.dataclass(frozen=True)
class ListQuery:
    """
    Optional filters and modifiers of the listing requests.

    The builder-like methods return modified copies; the original is intact::

        query = ListQuery().with_label_selector('app=foo').with_timeout_seconds(10)
    """
    field_selector: Optional[Mapping[str, str]] = None
    label_selector: Optional[str] = None
    resource_version: Optional[str] = None
    timeout_seconds: Optional[str] = None

    def with_field_selector(self, field_selector: Mapping[str, str]) -> "ListQuery":
        return dataclasses.replace(self, field_selector=dict(field_selector))

    def with_label_selector(self, label_selector: str) -> "ListQuery":
        return dataclasses.replace(self, label_selector=label_selector)

    def with_resource_version(self, resource_version: str) -> "ListQuery":
        return dataclasses.replace(self, resource_version=resource_version)

    def with_timeout_seconds(self, timeout_seconds: int) -> "ListQuery":
        return dataclasses.replace(self, timeout_seconds=str(timeout_seconds))

    def as_query_pairs(self) -> List[Tuple[str, str]]:
        pairs: List[Tuple[str, str]] = []
        if self.field_selector:
            pairs.append(('fieldSelector', format_selector(self.field_selector.items())))
        if self.label_selector is not None:
            pairs.append(('labelSelector', self.label_selector))
        if self.resource_version is not None:
            pairs.append(('resourceVersion', self.resource_version))
        if self.timeout_seconds is not None:
            pairs.append(('timeoutSeconds', self.timeout_seconds))
        return pairs


def format_selector(items: Iterable[Tuple[str, str]]) -> str:
    return ','.join(f'{key}={value}' for key, value in items)
