"""
Applying the manifest files from a directory: create if absent, keep if present.

The manifests are routed by their own fields (``apiVersion``, ``kind``,
``metadata.name``, ``metadata.namespace``), so only the registry of kinds
is needed to build the URLs: the typed clients are not involved.

Existing resources are never updated: this is "ensure presence", not a merge.
Hence, applying the same directory twice is idempotent (as long as nothing
else deletes the resources in between).
"""
import json
import logging
import os
import pathlib
from typing import Any, List, Mapping, Optional, Tuple, Union

import yaml

from kubeclient.clients import api, auth, errors
from kubeclient.structs import configuration, kinds, references
from kubeclient.utilities import loggers, typedefs

logger = logging.getLogger(__name__)

MANIFEST_EXTENSIONS = {'.json', '.yaml'}

PathLike = Union[str, "os.PathLike[str]"]


class ManifestLoader(yaml.SafeLoader):
    """
    A safe YAML loader with the timestamps kept as strings, as they are in JSON.

    The manifests are sent as JSON, which has no dates: e.g. ``released: 2024-01-01``
    in the annotations must remain a string, not become a ``datetime.date``.
    """


ManifestLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != 'tag:yaml.org,2002:timestamp']
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


async def apply_path(
        path: PathLike,
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        logger: typedefs.Logger = logger,
) -> List[Any]:
    """
    Apply all the manifests in the top level of a directory, one by one.

    Only the ``.json`` & ``.yaml`` files are considered (case-insensitive);
    other files & the subdirectories are silently skipped. The files are
    processed in the order of their names. The first failure stops the walk.

    :return: the decoded responses for every applied file, in the processing order.
    """
    path = pathlib.Path(path)
    if not path.is_dir():
        raise errors.ManifestError(f"The manifests' directory does not exist: {path}")

    results: List[Any] = []
    for filepath in sorted(path.iterdir(), key=lambda p: p.name):
        if not filepath.is_file():
            continue
        if filepath.suffix.lower() not in MANIFEST_EXTENSIONS:
            logger.debug(f"Skipping a non-manifest file: {filepath}")
            continue

        try:
            result = await apply_file(filepath, context=context, settings=settings, logger=logger)
        except errors.KubeClientError as e:
            raise errors.ApplyError(filepath, e) from e
        results.append(result)
    return results


async def apply_file(
        path: PathLike,
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        logger: typedefs.Logger = logger,
) -> Any:
    """
    Apply one manifest file: create the resource unless it already exists.

    :return: the created resource, or the existing one as it is in the cluster.
    """
    body = load_manifest(path)
    return await apply_manifest(body, context=context, settings=settings, logger=logger)


async def apply_manifest(
        body: Mapping[str, Any],
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        logger: typedefs.Logger = logger,
) -> Any:
    api_version, kind, name, namespace = parse_manifest(body)
    try:
        descriptor = kinds.lookup(kind)
    except kinds.UnknownKindError as e:
        raise errors.ManifestError(str(e)) from e

    # The manifest's own apiVersion wins over the registry's: the manifests are sent as is.
    namespace = descriptor.resolve_namespace(namespace)
    api_path = references.api_prefix(api_version)
    collection = references.KindRoute(api=api_path, plural=descriptor.plural, namespace=namespace)
    resource = references.ResourceRoute(api=api_path, plural=descriptor.plural,
                                        namespace=namespace, name=name)

    objlogger = loggers.ObjectLogger(logger if isinstance(logger, logging.Logger) else logger.logger,
                                     body=body)
    response = await api.request(
        method='get',
        url=resource.path,
        tolerated={404},
        context=context,
        settings=settings,
        logger=logger,
    )
    if response.status != 404:
        existing = await errors.parse_response(response)
        objlogger.info(f"Already exists {kind} {name!r}.")
        return existing

    response.release()
    created = await api.post(
        url=collection.path,
        payload=body,
        context=context,
        settings=settings,
        logger=logger,
    )
    objlogger.info(f"Created {kind} {name!r}.")
    return created


def load_manifest(path: PathLike) -> Any:
    """ Parse a manifest file as JSON or YAML, by its extension. """
    path = pathlib.Path(path)
    try:
        text = path.read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        raise errors.DecodeError(f"The manifest is not a UTF-8 text: {path}: {e}") from e
    except OSError as e:
        raise errors.ManifestError(f"The manifest cannot be read: {path}: {e}") from e

    if path.suffix.lower() == '.json':
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise errors.DecodeError(f"The manifest is not a valid JSON: {path}: {e}") from e
    else:
        try:
            return yaml.load(text, Loader=ManifestLoader)
        except yaml.YAMLError as e:
            raise errors.DecodeError(f"The manifest is not a valid YAML: {path}: {e}") from e


def parse_manifest(body: Any) -> Tuple[str, str, str, Optional[str]]:
    """
    Extract the routing fields of a manifest: ``apiVersion``, ``kind``, name, namespace.
    """
    if not isinstance(body, Mapping):
        raise errors.ManifestError(f"The manifest must be a mapping, got {type(body).__name__}.")

    api_version = body.get('apiVersion')
    kind = body.get('kind')
    metadata = body.get('metadata')
    name = metadata.get('name') if isinstance(metadata, Mapping) else None
    namespace = metadata.get('namespace') if isinstance(metadata, Mapping) else None
    if not isinstance(api_version, str) or not api_version:
        raise errors.ManifestError("The manifest has no apiVersion.")
    if not isinstance(kind, str) or not kind:
        raise errors.ManifestError("The manifest has no kind.")
    if not isinstance(name, str) or not name:
        raise errors.ManifestError(f"The {kind} manifest has no metadata.name.")
    if namespace is not None and not isinstance(namespace, str):
        raise errors.ManifestError(f"The {kind} manifest has a non-string metadata.namespace.")
    return api_version, kind, name, namespace
