from typing import cast

from cwoperator._cogs.clients import api
from cwoperator._cogs.configs import configuration
from cwoperator._cogs.helpers import typedefs
from cwoperator._cogs.structs import bodies, references


async def create_obj(
        *,
        settings: configuration.OperatorSettings,
        resource: references.Resource,
        body: bodies.RawBody,
        logger: typedefs.Logger,
) -> bodies.RawBody:
    """
    Create an object. The namespace & name are taken from the body.

    Raises :class:`errors.APIConflictError` if the object already exists.
    """
    namespace = cast(references.Namespace, body.get('metadata', {}).get('namespace'))
    created_body: bodies.RawBody = await api.post(
        url=resource.get_url(namespace=namespace if resource.namespaced else None),
        payload=body,
        logger=logger,
        settings=settings,
    )
    return created_body
