"""
The typed per-kind clients.

One generic client serves all the kinds: it knows nothing about a specific
kind except its object class, which in turn is bound to the registry of kinds.
Hence, the routing is always taken from the registry, and adding a kind
is just a matter of adding an object class and a registry entry.

The clients are immutable: the namespace override produces a new client,
which shares the same transport (session, credentials, settings).
"""
import dataclasses
import logging
from typing import Generic, List, Optional, Type, TypeVar

from kubeclient.clients import api, auth, errors
from kubeclient.structs import bodies, configuration, references
from kubeclient.utilities import typedefs

_T = TypeVar('_T', bound=bodies.Object)

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class ResourceClient(Generic[_T]):
    cls: Type[_T]
    context: auth.APIContext
    settings: configuration.ClientSettings = dataclasses.field(
        default_factory=configuration.ClientSettings)
    override: Optional[str] = None  # the requested namespace, if any.
    logger: typedefs.Logger = logger

    @property
    def descriptor(self) -> references.KindDescriptor:
        return self.cls.descriptor()

    @property
    def effective_namespace(self) -> references.Namespace:
        return self.descriptor.resolve_namespace(self.override)

    def namespace(self, namespace: str) -> "ResourceClient[_T]":
        """ A copy of the client bound to another namespace; the transport is shared. """
        if not self.descriptor.namespaced:
            self.logger.debug(f"Namespace {namespace!r} is ignored for cluster-scoped "
                              f"{self.descriptor.kind}.")
        return dataclasses.replace(self, override=namespace)

    def kind_route(self, *, query: Optional[references.QueryPairs] = None) -> references.KindRoute:
        return self.descriptor.kind_route(namespace=self.effective_namespace, query=query)

    def resource_route(self, name: str, *, subresource: Optional[str] = None) -> references.ResourceRoute:
        return self.descriptor.resource_route(
            name, namespace=self.effective_namespace, subresource=subresource)

    async def exists(self, name: str) -> bool:
        return await api.exists(
            url=self.resource_route(name).path,
            context=self.context,
            settings=self.settings,
            logger=self.logger,
        )

    async def get(self, name: str) -> _T:
        raw = await api.get(
            url=self.resource_route(name).path,
            context=self.context,
            settings=self.settings,
            logger=self.logger,
        )
        return self.cls.from_body(raw)

    async def list(self, query: Optional[references.ListQuery] = None) -> List[_T]:
        pairs = query.as_query_pairs() if query is not None else None
        raw = await api.get(
            url=self.kind_route(query=pairs).path,
            context=self.context,
            settings=self.settings,
            logger=self.logger,
        )
        return self.cls.from_list(raw)

    async def create(self, obj: _T) -> _T:
        """
        Create the object as is, in the client's effective namespace unless the object has one.

        The caller's object is not modified; the server's representation is returned.
        """
        body = obj.to_body()
        namespace = self.effective_namespace
        if namespace is not None:
            metadata = body.setdefault('metadata', {})
            metadata.setdefault('namespace', namespace)

        raw = await api.post(
            url=self.kind_route().path,
            payload=body,
            context=self.context,
            settings=self.settings,
            logger=self.logger,
        )
        return self.cls.from_body(raw)

    async def delete(self, name: str) -> None:
        await api.delete(
            url=self.resource_route(name).path,
            context=self.context,
            settings=self.settings,
            logger=self.logger,
        )


_S = TypeVar('_S', bound=bodies.Object)


@dataclasses.dataclass(frozen=True)
class ScalableResourceClient(ResourceClient[_S]):
    """ A client of the kinds with the ``scale`` subresource (deployments, statefulsets). """

    async def scale(self, name: str, replicas: int) -> bodies.Scale:
        namespace = self.effective_namespace
        if namespace is None:
            raise errors.ConfigError(f"Cannot scale {self.descriptor.kind} {name!r} "
                                     f"with no namespace.")

        body = bodies.Scale.build(name=name, namespace=namespace, replicas=replicas)
        raw = await api.put(
            url=self.resource_route(name, subresource='scale').path,
            payload=body,
            context=self.context,
            settings=self.settings,
            logger=self.logger,
        )
        return bodies.Scale.from_body(raw)
