"""
Garbage collection of the objects that are no longer desired.

The owned objects are found by the labels of the custom resource (without
the component label, so that all components are covered), and indexed by
their UIDs. Those not applied in the current pass are deleted.
"""
from collections.abc import Collection, Iterable

from cwoperator._cogs.clients import deleting, fetching
from cwoperator._cogs.configs import configuration
from cwoperator._cogs.helpers import typedefs
from cwoperator._cogs.structs import bodies, references, specs
from cwoperator._core.manifests import labels
from cwoperator._core.reactor.applying import OBJECT_ERRORS
from cwoperator._core.reactor.errors import PruningError, ReconciliationError

OwnedObjectIndex = dict[str, bodies.RawBody]


def owned_resources(settings: configuration.OperatorSettings) -> tuple[references.Resource, ...]:
    if settings.reconciling.openshift_routes:
        return references.OWNED_RESOURCES + (references.ROUTES,)
    return references.OWNED_RESOURCES


async def index_owned(
        agent: specs.Agent,
        *,
        resources: Iterable[references.Resource],
        settings: configuration.OperatorSettings,
        logger: typedefs.Logger,
) -> OwnedObjectIndex:
    """
    List all the objects of the custom resource, of all the owned kinds.

    Any listing failure fails the whole indexing: with a partial index,
    it is impossible to say which objects are orphaned.
    """
    selector = labels.owned_labels(agent)
    namespace = references.NamespaceName(agent.namespace)
    index: OwnedObjectIndex = {}
    for resource in resources:
        try:
            items, _ = await fetching.list_objs(resource=resource, namespace=namespace, labels=selector,
                                                settings=settings, logger=logger)
        except OBJECT_ERRORS as e:
            raise PruningError(f"Failed to list {resource!r}; nothing is pruned: {e}") from e
        for item in items:
            uid = bodies.get_uid(item)
            if uid is not None:
                index[uid] = item
    return index


async def prune(
        agent: specs.Agent,
        *,
        desired_uids: Collection[str],
        settings: configuration.OperatorSettings,
        logger: typedefs.Logger,
) -> list[bodies.RawBody]:
    """
    Delete the owned objects that are not desired. Return the deleted ones.

    Objects already absent (HTTP 404) count as deleted. The other deletion
    errors do not stop the pruning, but are reported in one batch at the end.
    """
    resources = owned_resources(settings)
    index = await index_owned(agent, resources=resources, settings=settings, logger=logger)

    deleted: list[bodies.RawBody] = []
    failures: list[BaseException] = []
    for uid, body in index.items():
        if uid in desired_uids:
            continue

        what = bodies.describe(body)
        resource = references.resource_for(body, resources)
        meta = body.get('metadata', {})
        namespace = references.NamespaceName(meta['namespace']) if resource.namespaced else None
        try:
            existed = await deleting.delete_obj(resource=resource, namespace=namespace, name=meta['name'],
                                                settings=settings, logger=logger)
        except OBJECT_ERRORS as e:
            logger.error(f"Failed to delete the orphaned {what}: {e}")
            failures.append(e)
        else:
            if existed:
                logger.info(f"Orphaned {what} is deleted.")
            else:
                logger.debug(f"Orphaned {what} is already gone.")
            deleted.append(body)

    if failures:
        raise ReconciliationError(f"Failed to delete {len(failures)} orphaned object(s).", failures)
    return deleted
