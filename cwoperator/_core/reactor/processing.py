"""
One reconcile pass of one custom resource, from its body to its status.

The steps are strictly sequential: build the desired objects, apply them,
prune the orphaned ones, report the status. Any failure is posted as a K8s
event to the custom resource, and re-raised for the caller to requeue.
The pass is idempotent: with no changes, the second pass makes no writes
except for the status.
"""
import dataclasses
import logging
from collections.abc import Mapping
from typing import Any

from cwoperator._cogs.clients import events
from cwoperator._cogs.configs import configuration
from cwoperator._cogs.helpers import typedefs
from cwoperator._cogs.structs import bodies, specs
from cwoperator._core.manifests import building, params
from cwoperator._core.reactor import applying, pruning, reporting
from cwoperator._core.reactor.errors import PruningError, ReconciliationError

ERROR_REASON = 'Error'


@dataclasses.dataclass(frozen=True)
class PassOutcome:
    applied: applying.ApplyOutcome
    pruned: list[bodies.RawBody]
    health: reporting.Health | None


async def post_event(
        body: Mapping[str, Any],
        *,
        type: str,
        reason: str,
        message: str,
        settings: configuration.OperatorSettings,
        logger: typedefs.Logger,
) -> None:
    level = logging.WARNING if type == 'Warning' else logging.INFO
    if settings.posting.enabled and level >= settings.posting.level:
        await events.post_event(ref=bodies.build_object_reference(body), type=type, reason=reason,
                                message=message, settings=settings, logger=logger)


async def reconcile(
        body: Mapping[str, Any],
        *,
        settings: configuration.OperatorSettings,
        logger: typedefs.Logger,
) -> PassOutcome:
    """
    Reconcile the cluster to the custom resource's body.

    The orphaned objects are pruned only if all the desired objects were applied:
    an object that failed to apply has no known UID, and would look orphaned.
    The status is reported only if everything else has succeeded.
    """
    try:
        agent = specs.parse_agent(body)
        desired = building.build(params.make_params(agent, settings=settings, logger=logger))
        logger.debug(f"Reconciling {len(desired)} desired object(s).")

        applied = await applying.apply_all(desired, owner=body, settings=settings, logger=logger)
        failures: list[BaseException] = list(applied.errors)

        pruned: list[bodies.RawBody] = []
        if failures:
            logger.warning("Some objects have failed to apply; skipping the pruning.")
        else:
            try:
                pruned = await pruning.prune(agent, desired_uids=applied.uids,
                                             settings=settings, logger=logger)
            except PruningError as e:
                logger.error(str(e))
                failures.append(e)
            except ReconciliationError as e:
                failures.extend(e.errors)

        if failures:
            raise ReconciliationError("Reconciliation has failed.", failures)

        try:
            health = await reporting.report(agent, settings=settings, logger=logger)
        except applying.OBJECT_ERRORS as e:
            raise ReconciliationError("Failed to report the status.", [e]) from e

    except ReconciliationError as e:
        await post_event(body, type='Warning', reason=ERROR_REASON, message=str(e),
                         settings=settings, logger=logger)
        raise

    logger.info(f"Reconciled: {applied.writes} write(s), {len(pruned)} deletion(s).")
    if health is not None and health.reportable:
        await post_event(body, type=health.type, reason=health.reason, message=health.message,
                         settings=settings, logger=logger)
    return PassOutcome(applied=applied, pruned=pruned, health=health)
