from collections.abc import Mapping
from typing import Any

from cwoperator._cogs.clients import api, errors
from cwoperator._cogs.configs import configuration
from cwoperator._cogs.helpers import typedefs
from cwoperator._cogs.structs import bodies, references


async def patch_status(
        *,
        settings: configuration.OperatorSettings,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        status: Mapping[str, Any],
        logger: typedefs.Logger,
) -> bodies.RawBody | None:
    """
    Merge-patch (RFC 7386) the status of an object, never touching its spec.

    The status subresource is used if the resource has it: then, K8s API
    ignores any other fields in the patch, so the concurrent changes of the spec
    by other actors are not clobbered.

    Returns ``None`` if the underlying object is absent, as detected by trying
    to patch it and failing with HTTP 404. This can happen if the object was
    deleted externally during the processing.
    """
    as_subresource = 'status' in resource.subresources
    try:
        patched_body: bodies.RawBody = await api.patch(
            url=resource.get_url(namespace=namespace, name=name,
                                 subresource='status' if as_subresource else None),
            headers={'Content-Type': 'application/merge-patch+json'},
            payload={'status': dict(status)},
            settings=settings,
            logger=logger,
        )
    except errors.APINotFoundError:
        return None
    return patched_body
