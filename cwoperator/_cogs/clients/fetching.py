from collections.abc import Mapping

from cwoperator._cogs.clients import api, errors
from cwoperator._cogs.configs import configuration
from cwoperator._cogs.helpers import typedefs
from cwoperator._cogs.structs import bodies, references


async def read_obj(
        *,
        settings: configuration.OperatorSettings,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        logger: typedefs.Logger,
) -> bodies.RawBody | None:
    """
    Read a single object by its name; return ``None`` if it does not exist.
    """
    try:
        obj: bodies.RawBody = await api.get(
            url=resource.get_url(namespace=namespace, name=name),
            logger=logger,
            settings=settings,
        )
    except errors.APINotFoundError:
        return None
    obj.setdefault('apiVersion', resource.api_version)
    obj.setdefault('kind', resource.kind)
    return obj


async def list_objs(
        *,
        settings: configuration.OperatorSettings,
        resource: references.Resource,
        namespace: references.Namespace,
        labels: Mapping[str, str] | None = None,
        logger: typedefs.Logger,
) -> tuple[list[bodies.RawBody], str | None]:
    """
    List the objects of specific resource type, optionally filtered by labels.

    The list's items are augmented with ``apiVersion`` & ``kind``,
    since K8s API only puts them to the list itself, not to the items.
    """
    params = {'labelSelector': build_label_selector(labels)} if labels else None
    rsp = await api.get(
        url=resource.get_url(namespace=namespace, params=params),
        logger=logger,
        settings=settings,
    )

    items: list[bodies.RawBody] = []
    resource_version = rsp.get('metadata', {}).get('resourceVersion', None)
    for item in rsp.get('items', []):
        if 'kind' in rsp:
            item.setdefault('kind', rsp['kind'][:-4] if rsp['kind'][-4:] == 'List' else rsp['kind'])
        else:
            item.setdefault('kind', resource.kind)
        item.setdefault('apiVersion', rsp.get('apiVersion', resource.api_version))
        items.append(item)

    return items, resource_version


def build_label_selector(labels: Mapping[str, str]) -> str:
    """ Render the labels as a selector: ``k1=v1,k2=v2``, sorted by keys. """
    return ','.join(f'{key}={labels[key]}' for key in sorted(labels))
