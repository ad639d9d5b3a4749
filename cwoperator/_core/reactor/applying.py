"""
Applying the desired objects to the cluster, one by one.

Every object is read, merged, and written only if it differs from the existing
one. A write conflict (HTTP 409) means that someone has changed the object
between our read & write: the object is re-read and re-merged, and the write
is retried with a backoff. Other errors fail only this object: the remaining
objects are still applied, and the errors are reported in one batch.
"""
import asyncio
import dataclasses
import itertools
from collections.abc import Iterable, Mapping
from typing import Any

import aiohttp

from cwoperator._cogs.clients import creating, deleting, errors, fetching, replacing
from cwoperator._cogs.configs import configuration
from cwoperator._cogs.helpers import typedefs
from cwoperator._cogs.structs import bodies, references
from cwoperator._core.reactor import mutating

# The errors that fail one object, but not the whole pass.
OBJECT_ERRORS = (errors.APIError, aiohttp.ClientError, asyncio.TimeoutError)


@dataclasses.dataclass
class ApplyOutcome:
    """
    The results of applying all the desired objects of one pass.
    """
    uids: set[str] = dataclasses.field(default_factory=set)
    results: dict[str, mutating.MutationResult] = dataclasses.field(default_factory=dict)
    errors: list[BaseException] = dataclasses.field(default_factory=list)

    @property
    def writes(self) -> int:
        skipped = (mutating.MutationResult.UNCHANGED, mutating.MutationResult.FAILED)
        return sum(1 for result in self.results.values() if result not in skipped)


async def apply_obj(
        desired: Mapping[str, Any],
        *,
        owner: Mapping[str, Any],
        settings: configuration.OperatorSettings,
        logger: typedefs.Logger,
) -> tuple[mutating.MutationResult, bodies.RawBody | None]:
    """
    Bring one object to its desired state. Return the result and the live object.

    On immutable conflicts, the existing object is deleted; it will be created
    in its desired state on the next pass. No live object is returned then.
    """
    resource = references.resource_for(desired)
    body: dict[str, Any] = dict(desired)
    if resource.namespaced and settings.reconciling.owner_references:
        body = {**body, 'metadata': dict(body.get('metadata', {}))}
        bodies.append_owner_reference(body, owner)

    meta = body.get('metadata', {})
    name: str = meta['name']
    namespace = references.NamespaceName(meta['namespace']) if resource.namespaced else None
    what = bodies.describe(body)

    backoffs = settings.reconciling.conflict_backoffs
    backoff: float | None
    for attempt, backoff in enumerate(itertools.chain(backoffs, [None]), start=1):
        existing = await fetching.read_obj(resource=resource, namespace=namespace, name=name,
                                           settings=settings, logger=logger)
        mutation = mutating.mutate(body, existing)
        try:
            match mutation.result:
                case mutating.MutationResult.UNCHANGED:
                    logger.debug(f"{what} is unchanged.")
                    return mutation.result, existing
                case mutating.MutationResult.IMMUTABLE_CONFLICT:
                    logger.warning(f"{mutating.describe_conflicts(body, mutation.conflicts)}; "
                                   f"deleting it to be re-created on the next pass.")
                    await deleting.delete_obj(resource=resource, namespace=namespace, name=name,
                                              settings=settings, logger=logger)
                    return mutation.result, None
                case mutating.MutationResult.CREATED if mutation.body is not None:
                    live = await creating.create_obj(resource=resource, body=mutation.body,
                                                     settings=settings, logger=logger)
                    logger.info(f"{what} is created.")
                    return mutation.result, live
                case mutating.MutationResult.UPDATED if mutation.body is not None:
                    live = await replacing.replace_obj(resource=resource, body=mutation.body,
                                                       settings=settings, logger=logger)
                    logger.info(f"{what} is updated.")
                    return mutation.result, live
                case _:
                    raise RuntimeError(f"Unexpected mutation of {what}: {mutation!r}")
        except errors.APIConflictError as e:
            if backoff is None:
                raise
            logger.info(f"Conflict on writing {what} (attempt #{attempt}); retrying in {backoff}s: {e}")
            await asyncio.sleep(backoff)

    raise RuntimeError("Broken retryable routine.")  # impossible, but needed for type-checking.


async def apply_all(
        desired: Iterable[Mapping[str, Any]],
        *,
        owner: Mapping[str, Any],
        settings: configuration.OperatorSettings,
        logger: typedefs.Logger,
) -> ApplyOutcome:
    """
    Apply all the objects in their order, collecting the errors.

    The UIDs of the live objects are remembered as the desired ones,
    so that they are not pruned in the same pass.
    """
    outcome = ApplyOutcome()
    for obj in desired:
        what = bodies.describe(obj)
        try:
            result, live = await apply_obj(obj, owner=owner, settings=settings, logger=logger)
        except OBJECT_ERRORS as e:
            logger.error(f"Failed to apply {what}: {e}")
            outcome.results[what] = mutating.MutationResult.FAILED
            outcome.errors.append(e)
            continue

        outcome.results[what] = result
        uid = bodies.get_uid(live) if live is not None else None
        if uid is not None:
            outcome.uids.add(uid)
    return outcome

