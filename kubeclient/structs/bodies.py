"""
All the structures coming from/to the Kubernetes API.

Everything marked "raw" is a plain unwrapped unprocessed data as JSON-decoded
from Kubernetes API. The typed objects are dicts too (so they are serialised
as is), but are bound to the kinds of the registry and expose the fields
that are commonly used by the callers.

Only the well-known fields are declared. The servers add and the callers use
arbitrary fields at runtime: they are kept in the dicts as they are.

The typed objects follow one contract, which the generic clients rely on:

* ``kind`` class attribute -- the binding to the registry of kinds;
* `Object.descriptor` -- the routing information of that kind;
* `Object.from_body` / `Object.to_body` -- the (de)serialisation;
* `Object.from_list` -- unwrapping of the list envelopes (``items``).
"""
import base64
import copy
import datetime
from typing import Any, ClassVar, Dict, Iterable, List, Mapping, MutableMapping, \
                   Optional, Tuple, Type, TypeVar, Union, cast

import iso8601
from typing_extensions import TypedDict

from kubeclient.clients import errors
from kubeclient.structs import kinds, references

Labels = Mapping[str, str]
Annotations = Mapping[str, str]


class RawMeta(TypedDict, total=False):
    uid: str
    name: str
    namespace: str
    labels: Labels
    annotations: Annotations
    resourceVersion: str
    creationTimestamp: str


class RawBody(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawMeta
    spec: Mapping[str, Any]
    status: Mapping[str, Any]


class RawList(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: Mapping[str, Any]
    items: List[RawBody]


_O = TypeVar('_O', bound='Object')


class Object(Dict[str, Any]):
    """
    A generic object of a kind known to the registry.

    Subclasses bind themselves to a kind via the ``kind`` class attribute.
    The routing is never stored in the objects: it is always taken
    from the registry, so that the registry remains the only source of it.
    """

    kind: ClassVar[kinds.Kind]

    def __init__(
            self,
            body: Optional[Mapping[str, Any]] = None,
            *,
            name: Optional[str] = None,
            namespace: Optional[str] = None,
    ) -> None:
        super().__init__(copy.deepcopy(dict(body)) if body is not None else {})
        if name is not None:
            self.setdefault('metadata', {})['name'] = name
        if namespace is not None:
            self.setdefault('metadata', {})['namespace'] = namespace

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({dict(self)!r})'

    @classmethod
    def descriptor(cls) -> references.KindDescriptor:
        return kinds.lookup(cls.kind)

    @classmethod
    def from_body(cls: Type[_O], raw: Any) -> _O:
        if not isinstance(raw, Mapping):
            raise errors.DecodeError(f"Expected a {cls.kind} object, got {type(raw).__name__}.")
        return cls(raw)

    @classmethod
    def from_list(cls: Type[_O], raw: Any) -> List[_O]:
        """
        Unwrap the list envelope into the typed objects, in the server's order.

        The list items usually have no ``kind`` & ``apiVersion`` of their own,
        so they are restored from the list's envelope (``ConfigMapList`` etc).
        """
        if not isinstance(raw, Mapping) or not isinstance(raw.get('items', []), list):
            raise errors.DecodeError(f"Expected a {cls.kind} list, got {type(raw).__name__}.")

        items: List[_O] = []
        for item in raw.get('items', []):
            obj = cls.from_body(item)
            if 'kind' in raw:
                obj.setdefault('kind', raw['kind'][:-4] if raw['kind'][-4:] == 'List' else raw['kind'])
            if 'apiVersion' in raw:
                obj.setdefault('apiVersion', raw['apiVersion'])
            items.append(obj)
        return items

    def to_body(self) -> RawBody:
        body = cast(MutableMapping[str, Any], copy.deepcopy(dict(self)))
        body.setdefault('apiVersion', self.descriptor().api_version)
        body.setdefault('kind', self.descriptor().kind)
        return cast(RawBody, body)

    @property
    def metadata(self) -> Dict[str, Any]:
        return cast(Dict[str, Any], self.setdefault('metadata', {}))

    @property
    def name(self) -> Optional[str]:
        return cast(Optional[str], self.get('metadata', {}).get('name'))

    @property
    def namespace(self) -> Optional[str]:
        return cast(Optional[str], self.get('metadata', {}).get('namespace'))

    @property
    def uid(self) -> Optional[str]:
        return cast(Optional[str], self.get('metadata', {}).get('uid'))

    @property
    def resource_version(self) -> Optional[str]:
        return cast(Optional[str], self.get('metadata', {}).get('resourceVersion'))

    @property
    def labels(self) -> Labels:
        return cast(Labels, self.get('metadata', {}).get('labels', {}))

    @property
    def annotations(self) -> Annotations:
        return cast(Annotations, self.get('metadata', {}).get('annotations', {}))

    @property
    def creation_timestamp(self) -> Optional[datetime.datetime]:
        value = self.get('metadata', {}).get('creationTimestamp')
        return iso8601.parse_date(value) if value is not None else None

    @property
    def spec(self) -> Dict[str, Any]:
        return cast(Dict[str, Any], self.setdefault('spec', {}))

    @property
    def status(self) -> Mapping[str, Any]:
        return cast(Mapping[str, Any], self.get('status', {}))


class ConfigMap(Object):
    kind = kinds.Kind.CONFIG_MAP

    @property
    def data(self) -> Dict[str, str]:
        return cast(Dict[str, str], self.setdefault('data', {}))

    def insert(self, key: str, value: str) -> "ConfigMap":
        self.data[key] = value
        return self

    def append(self, items: Union[Mapping[str, str], Iterable[Tuple[str, str]]]) -> "ConfigMap":
        self.data.update(items)
        return self


class Secret(Object):
    """
    A secret with its values base64-encoded on the wire.

    The values are encoded when inserted and decoded when retrieved,
    so the callers work with the raw bytes only.
    """
    kind = kinds.Kind.SECRET

    @property
    def data(self) -> Dict[str, str]:
        return cast(Dict[str, str], self.setdefault('data', {}))

    def insert(self, key: str, value: Union[str, bytes]) -> "Secret":
        raw = value.encode('utf-8') if isinstance(value, str) else value
        self.data[key] = base64.b64encode(raw).decode('ascii')
        return self

    def append(self, items: Union[Mapping[str, Union[str, bytes]],
                                  Iterable[Tuple[str, Union[str, bytes]]]]) -> "Secret":
        pairs = items.items() if isinstance(items, Mapping) else items
        for key, value in pairs:
            self.insert(key, value)
        return self

    def get_value(self, key: str) -> Optional[bytes]:
        encoded = self.get('data', {}).get(key)
        if encoded is None:
            return None
        try:
            return base64.b64decode(encoded, validate=True)
        except ValueError as e:
            raise errors.DecodeError(f"The secret's value {key!r} is not base64-encoded: {e}") from e


class Pod(Object):
    kind = kinds.Kind.POD


class Service(Object):
    kind = kinds.Kind.SERVICE


class Node(Object):
    kind = kinds.Kind.NODE


class Namespace(Object):
    kind = kinds.Kind.NAMESPACE


class NetworkPolicy(Object):
    kind = kinds.Kind.NETWORK_POLICY


class DaemonSet(Object):
    kind = kinds.Kind.DAEMON_SET


class _Replicated(Object):

    @property
    def replicas(self) -> Optional[int]:
        return cast(Optional[int], self.get('spec', {}).get('replicas'))

    @replicas.setter
    def replicas(self, value: int) -> None:
        self.spec['replicas'] = value


class Deployment(_Replicated):
    kind = kinds.Kind.DEPLOYMENT


class StatefulSet(_Replicated):
    kind = kinds.Kind.STATEFUL_SET


class Scale(Dict[str, Any]):
    """
    The ``scale`` subresource of the scalable kinds (``autoscaling/v1``).
    """

    API_VERSION = 'autoscaling/v1'

    @classmethod
    def build(cls, *, name: str, namespace: Optional[str], replicas: int) -> "Scale":
        metadata: Dict[str, str] = {'name': name}
        if namespace is not None:
            metadata['namespace'] = namespace
        return cls({
            'apiVersion': cls.API_VERSION,
            'kind': 'Scale',
            'metadata': metadata,
            'spec': {'replicas': replicas},
        })

    @classmethod
    def from_body(cls, raw: Any) -> "Scale":
        if not isinstance(raw, Mapping):
            raise errors.DecodeError(f"Expected a Scale object, got {type(raw).__name__}.")
        return cls(raw)

    @property
    def replicas(self) -> Optional[int]:
        return cast(Optional[int], self.get('spec', {}).get('replicas'))

    @property
    def observed_replicas(self) -> Optional[int]:
        return cast(Optional[int], self.get('status', {}).get('replicas'))
