from typing import cast

from cwoperator._cogs.clients import api
from cwoperator._cogs.configs import configuration
from cwoperator._cogs.helpers import typedefs
from cwoperator._cogs.structs import bodies, references


async def replace_obj(
        *,
        settings: configuration.OperatorSettings,
        resource: references.Resource,
        body: bodies.RawBody,
        logger: typedefs.Logger,
) -> bodies.RawBody:
    """
    Replace an existing object entirely (``PUT``).

    The body must carry ``metadata.resourceVersion`` as it was read:
    if the object has been modified since then, K8s API responds with
    HTTP 409 Conflict, raised as :class:`errors.APIConflictError`.
    """
    meta = body.get('metadata', {})
    namespace = cast(references.Namespace, meta.get('namespace'))
    replaced_body: bodies.RawBody = await api.put(
        url=resource.get_url(namespace=namespace if resource.namespaced else None,
                             name=meta.get('name')),
        payload=body,
        logger=logger,
        settings=settings,
    )
    return replaced_body
