"""
The user-facing handle of a cluster: the entry point to all the clients.

A handle is cheap and immutable. The namespace override produces a new
handle with the same transport: the session is shared, never re-created.
Closing any of the handles closes the shared session for all of them.
"""
import dataclasses
import logging
import os
import types
from typing import Any, List, Optional, Type, TypeVar, Union

from kubeclient.clients import api, applying, auth
from kubeclient.clients.resources import ResourceClient, ScalableResourceClient
from kubeclient.structs import bodies, configuration, credentials, references
from kubeclient.utilities import typedefs

_T = TypeVar('_T', bound=bodies.Object)

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Kubernetes:
    """
    A connected cluster with an optional namespace override.

    Usage::

        async with Kubernetes.from_info(ConnectionInfo(server=...)) as k8s:
            maps = await k8s.namespace('ns1').config_maps().list()
    """
    context: auth.APIContext
    settings: configuration.ClientSettings = dataclasses.field(
        default_factory=configuration.ClientSettings)
    override: Optional[str] = None  # the requested namespace, if any.
    logger: typedefs.Logger = logger

    @classmethod
    def from_info(
            cls,
            info: credentials.ConnectionInfo,
            settings: Optional[configuration.ClientSettings] = None,
            *,
            namespace: Optional[str] = None,
    ) -> "Kubernetes":
        """ Connect to a cluster. Must be called inside of a running event loop. """
        return cls(
            context=auth.APIContext(info),
            settings=settings if settings is not None else configuration.ClientSettings(),
            override=namespace,
        )

    async def __aenter__(self) -> "Kubernetes":
        return self

    async def __aexit__(
            self,
            exc_type: Optional[Type[BaseException]],
            exc_val: Optional[BaseException],
            exc_tb: Optional[types.TracebackType],
    ) -> None:
        await self.close()

    async def close(self) -> None:
        await self.context.close()

    def namespace(self, namespace: str) -> "Kubernetes":
        return dataclasses.replace(self, override=namespace)

    def resources(self, cls: Type[_T]) -> ResourceClient[_T]:
        """ A client of any kind known to the registry, by its object class. """
        client_cls = (
            ScalableResourceClient
            if 'scale' in cls.descriptor().subresources else
            ResourceClient
        )
        return client_cls(
            cls=cls,
            context=self.context,
            settings=self.settings,
            override=self.override,
            logger=self.logger,
        )

    def scalable(self, cls: Type[_T]) -> ScalableResourceClient[_T]:
        return ScalableResourceClient(
            cls=cls,
            context=self.context,
            settings=self.settings,
            override=self.override,
            logger=self.logger,
        )

    def config_maps(self) -> ResourceClient[bodies.ConfigMap]:
        return self.resources(bodies.ConfigMap)

    def secrets(self) -> ResourceClient[bodies.Secret]:
        return self.resources(bodies.Secret)

    def pods(self) -> ResourceClient[bodies.Pod]:
        return self.resources(bodies.Pod)

    def services(self) -> ResourceClient[bodies.Service]:
        return self.resources(bodies.Service)

    def nodes(self) -> ResourceClient[bodies.Node]:
        return self.resources(bodies.Node)

    def namespaces(self) -> ResourceClient[bodies.Namespace]:
        return self.resources(bodies.Namespace)

    def network_policies(self) -> ResourceClient[bodies.NetworkPolicy]:
        return self.resources(bodies.NetworkPolicy)

    def daemon_sets(self) -> ResourceClient[bodies.DaemonSet]:
        return self.resources(bodies.DaemonSet)

    def deployments(self) -> ScalableResourceClient[bodies.Deployment]:
        return self.scalable(bodies.Deployment)

    def stateful_sets(self) -> ScalableResourceClient[bodies.StatefulSet]:
        return self.scalable(bodies.StatefulSet)

    async def health(self) -> str:
        return await api.health(context=self.context, settings=self.settings, logger=self.logger)

    async def healthy(self) -> bool:
        return (await self.health()).strip() == 'ok'

    async def check(self, route: Union[str, references.KindRoute]) -> Any:
        """ Fetch an arbitrary endpoint: either a route or a raw path (e.g. ``/version``). """
        url = route.path if isinstance(route, references.KindRoute) else route
        return await api.check(url, context=self.context, settings=self.settings, logger=self.logger)

    async def apply_path(self, path: Union[str, "os.PathLike[str]"]) -> List[Any]:
        return await applying.apply_path(
            path,
            context=self.context,
            settings=self.settings,
            logger=self.logger,
        )
