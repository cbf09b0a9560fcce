import asyncio
import functools
import json
import sys
from typing import Any, Awaitable, Callable, Optional, Tuple, TypeVar

import click

from kubeclient.clients import cluster, errors
from kubeclient.structs import bodies, configuration, credentials, references
from kubeclient.utilities import loggers

_T = TypeVar('_T')

# The CLI-visible kinds: by their lower-cased names as in kubectl (e.g. "configmap").
OBJECT_CLASSES = {
    cls.kind.value.lower(): cls
    for cls in [
        bodies.ConfigMap, bodies.Secret, bodies.Pod, bodies.Service,
        bodies.Node, bodies.Namespace, bodies.NetworkPolicy,
        bodies.Deployment, bodies.DaemonSet, bodies.StatefulSet,
    ]
}


class LogFormatParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.name.lower() for v in loggers.LogFormat])

    def convert(self, value: Any, param: Any, ctx: Any) -> loggers.LogFormat:
        name: str = super().convert(value, param, ctx)
        return loggers.LogFormat[name.upper()]


class KindParamType(click.Choice):
    name = 'kind'

    def __init__(self) -> None:
        super().__init__(choices=sorted(OBJECT_CLASSES), case_sensitive=False)

    def convert(self, value: Any, param: Any, ctx: Any) -> Any:
        name: str = super().convert(value, param, ctx)
        return OBJECT_CLASSES[name.lower()]


def logging_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to configure logging in all commands the same way."""
    @click.option('-v', '--verbose', is_flag=True)
    @click.option('-d', '--debug', is_flag=True)
    @click.option('-q', '--quiet', is_flag=True)
    @click.option('--log-format', type=LogFormatParamType(), default='plain')
    @click.option('--log-refkey', type=str)
    @click.option('--log-prefix/--no-log-prefix', default=None)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(verbose: bool, quiet: bool, debug: bool,
                log_format: loggers.LogFormat = loggers.LogFormat.PLAIN,
                log_prefix: Optional[bool] = False,
                log_refkey: Optional[str] = None,
                *args: Any, **kwargs: Any) -> Any:
        loggers.configure(debug=debug, verbose=verbose, quiet=quiet,
                          log_format=log_format, log_refkey=log_refkey, log_prefix=log_prefix)
        return fn(*args, **kwargs)

    return wrapper


def connection_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to build the connection info in all commands the same way."""
    @click.option('--server', type=str, required=True, envvar='KUBECLIENT_SERVER')
    @click.option('--certificate-authority', 'ca_path', type=click.Path(dir_okay=False))
    @click.option('--client-certificate', 'certificate_path', type=click.Path(dir_okay=False))
    @click.option('--client-key', 'private_key_path', type=click.Path(dir_okay=False))
    @click.option('--token', type=str, envvar='KUBECLIENT_TOKEN')
    @click.option('--username', type=str, envvar='KUBECLIENT_USERNAME')
    @click.option('--password', type=str, envvar='KUBECLIENT_PASSWORD')
    @click.option('--insecure-skip-tls-verify', 'insecure', is_flag=True, default=False)
    @click.option('--skip-hostname-check', is_flag=True, default=False)
    @click.option('--request-timeout', type=float)
    @click.option('-n', '--namespace', type=str, envvar='KUBECLIENT_NAMESPACE')
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(server: str,
                ca_path: Optional[str],
                certificate_path: Optional[str],
                private_key_path: Optional[str],
                token: Optional[str],
                username: Optional[str],
                password: Optional[str],
                insecure: bool,
                skip_hostname_check: bool,
                request_timeout: Optional[float],
                namespace: Optional[str],
                *args: Any, **kwargs: Any) -> Any:
        info = credentials.ConnectionInfo(
            server=server,
            ca_path=ca_path,
            certificate_path=certificate_path,
            private_key_path=private_key_path,
            token=token,
            username=username,
            password=password,
            insecure=insecure,
            skip_hostname_check=skip_hostname_check,
        )
        settings = configuration.ClientSettings()
        settings.networking.request_timeout = request_timeout
        return fn(*args, info=info, settings=settings, namespace=namespace, **kwargs)

    return wrapper


def run(
        info: credentials.ConnectionInfo,
        settings: configuration.ClientSettings,
        namespace: Optional[str],
        fn: Callable[[cluster.Kubernetes], Awaitable[_T]],
) -> _T:
    """
    Run one operation against the cluster and report the library's errors as CLI errors.
    """
    async def _run() -> _T:
        # The session must be created inside of the event loop.
        async with cluster.Kubernetes.from_info(info, settings, namespace=namespace) as k8s:
            return await fn(k8s)

    try:
        return asyncio.run(_run())
    except errors.KubeClientError as e:
        raise click.ClickException(str(e)) from e


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, sort_keys=True, default=str))


@click.version_option(prog_name='kubeclient')
@click.group(name='kubeclient', context_settings=dict(
    auto_envvar_prefix='KUBECLIENT',
))
def main() -> None:
    pass


@main.command()
@logging_options
@connection_options
def health(
        info: credentials.ConnectionInfo,
        settings: configuration.ClientSettings,
        namespace: Optional[str],
) -> None:
    """ Check the cluster's health endpoint. """
    status = run(info, settings, namespace, lambda k8s: k8s.health())
    click.echo(status.strip())
    if status.strip() != 'ok':
        sys.exit(1)


@main.command()
@logging_options
@connection_options
@click.argument('kind', type=KindParamType())
@click.argument('name', type=str)
def get(
        info: credentials.ConnectionInfo,
        settings: configuration.ClientSettings,
        namespace: Optional[str],
        kind: Any,
        name: str,
) -> None:
    """ Print one resource as JSON. """
    obj = run(info, settings, namespace, lambda k8s: k8s.resources(kind).get(name))
    echo_json(obj)


@main.command(name='list')
@logging_options
@connection_options
@click.argument('kind', type=KindParamType())
@click.option('-l', '--selector', 'label_selector', type=str)
@click.option('--field-selector', 'field_selectors', type=str, multiple=True,
              help='A key=value pair; can be repeated.')
def list_(
        info: credentials.ConnectionInfo,
        settings: configuration.ClientSettings,
        namespace: Optional[str],
        kind: Any,
        label_selector: Optional[str],
        field_selectors: Tuple[str, ...],
) -> None:
    """ Print the names of the resources of a kind, one per line. """
    query = references.ListQuery(label_selector=label_selector)
    if field_selectors:
        query = query.with_field_selector(dict(parse_pair(item) for item in field_selectors))
    objs = run(info, settings, namespace, lambda k8s: k8s.resources(kind).list(query))
    for obj in objs:
        prefix = f"{obj.namespace}/" if obj.namespace else ""
        click.echo(f"{prefix}{obj.name}")


@main.command()
@logging_options
@connection_options
@click.argument('kind', type=KindParamType())
@click.argument('name', type=str)
def delete(
        info: credentials.ConnectionInfo,
        settings: configuration.ClientSettings,
        namespace: Optional[str],
        kind: Any,
        name: str,
) -> None:
    """ Delete one resource. """
    run(info, settings, namespace, lambda k8s: k8s.resources(kind).delete(name))
    click.echo(f"Deleted {kind.kind} {name!r}.")


@main.command()
@logging_options
@connection_options
@click.argument('path', type=click.Path(file_okay=False))
def apply(
        info: credentials.ConnectionInfo,
        settings: configuration.ClientSettings,
        namespace: Optional[str],
        path: str,
) -> None:
    """ Create the resources from the manifests in a directory, unless they exist. """
    results = run(info, settings, namespace, lambda k8s: k8s.apply_path(path))
    click.echo(f"Applied {len(results)} manifest(s) from {path}.")


def parse_pair(item: str) -> Tuple[str, str]:
    key, sep, value = item.partition('=')
    if not sep or not key:
        raise click.BadParameter(f"Expected key=value, got {item!r}.")
    return key, value
