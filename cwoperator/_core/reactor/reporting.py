"""
The status of the custom resource, as observed from its workload.

The status is fully re-computed on every successful pass and overwrites
the previous one: nothing is accumulated across the passes.
"""
import dataclasses
from collections.abc import Mapping
from typing import Any

from cwoperator._cogs.clients import fetching, patching
from cwoperator._cogs.configs import configuration
from cwoperator._cogs.helpers import typedefs
from cwoperator._cogs.structs import bodies, references, specs
from cwoperator._core.manifests import labels, names

COMPONENT_NAME = 'CloudWatch Agent'

WORKLOAD_RESOURCES: Mapping[specs.Mode, references.Resource] = {
    specs.Mode.DEPLOYMENT: references.DEPLOYMENTS,
    specs.Mode.STATEFULSET: references.STATEFULSETS,
    specs.Mode.DAEMONSET: references.DAEMONSETS,
}


@dataclasses.dataclass(frozen=True)
class Health:
    """ The readiness of the workload's pods, and its interpretation for the events. """
    ready: int
    total: int

    @property
    def type(self) -> str:
        return 'Normal' if self.ready == self.total else 'Warning'

    @property
    def reason(self) -> str:
        if self.ready == self.total:
            return 'ComponentHealthy'
        elif self.ready == 0:
            return 'ComponentUnhealthy'
        else:
            return 'ComponentPartiallyHealthy'

    @property
    def message(self) -> str:
        state = {
            'ComponentHealthy': 'healthy',
            'ComponentUnhealthy': 'unhealthy',
            'ComponentPartiallyHealthy': 'partially healthy',
        }[self.reason]
        return f"{COMPONENT_NAME} is {state}: {self.ready}/{self.total} pods ready"

    @property
    def reportable(self) -> bool:
        """ Nothing to report if no pods are expected (e.g. scaled to zero). """
        return self.total > 0


def read_replicas(mode: specs.Mode, workload: Mapping[str, Any] | None) -> tuple[int, int]:
    """ The ready & total numbers of the workload's pods. """
    status = (workload or {}).get('status') or {}
    if mode == specs.Mode.DAEMONSET:
        return int(status.get('numberReady') or 0), int(status.get('desiredNumberScheduled') or 0)
    return int(status.get('readyReplicas') or 0), int(status.get('replicas') or 0)


def read_image(workload: Mapping[str, Any] | None) -> str:
    containers = ((((workload or {}).get('spec') or {}).get('template') or {}).get('spec') or {}).get('containers')
    return str(containers[0].get('image') or '') if containers else ''


def version_from_image(image: str, default: str) -> str:
    """ The tag of the image: everything after the last colon, if any. """
    parts = image.split(':')
    return parts[-1] if len(parts) >= 2 and parts[-1] else default


def compute_status(
        agent: specs.Agent,
        workload: Mapping[str, Any] | None,
        *,
        settings: configuration.OperatorSettings,
) -> dict[str, Any]:
    """
    Compute the status of the custom resource from its workload.

    The sidecar mode has no workload, so the status carries no scale:
    the sidecars are counted as parts of the other pods, not of the agent.
    """
    default_image = agent.spec.image or settings.manifests.agent_image
    if agent.spec.mode == specs.Mode.SIDECAR:
        return {
            'version': version_from_image(default_image, settings.manifests.default_version),
            'image': default_image,
            'scale': {'replicas': 0, 'statusReplicas': '', 'selector': ''},
        }

    ready, total = read_replicas(agent.spec.mode, workload)
    image = read_image(workload) or default_image
    return {
        'version': version_from_image(image, settings.manifests.default_version),
        'image': image,
        'scale': {
            'replicas': total,
            'statusReplicas': f'{ready}/{total}',
            'selector': fetching.build_label_selector(labels.selector_labels(agent)),
        },
    }


async def report(
        agent: specs.Agent,
        *,
        settings: configuration.OperatorSettings,
        logger: typedefs.Logger,
) -> Health | None:
    """
    Read the workload, store the status in the custom resource, return the health.

    Only the status subresource is patched: the spec is never touched here.
    """
    workload: bodies.RawBody | None = None
    resource = WORKLOAD_RESOURCES.get(agent.spec.mode)
    if resource is not None:
        workload = await fetching.read_obj(resource=resource,
                                           namespace=references.NamespaceName(agent.namespace),
                                           name=names.workload(agent.name),
                                           settings=settings, logger=logger)
        if workload is None:
            logger.info(f"The {resource.kind} is absent; reporting it as having no pods.")

    status = compute_status(agent, workload, settings=settings)
    patched = await patching.patch_status(resource=references.AGENTS,
                                          namespace=references.NamespaceName(agent.namespace),
                                          name=agent.name, status=status,
                                          settings=settings, logger=logger)
    if patched is None:
        logger.warning("The custom resource is gone; its status is not stored.")

    if resource is None:
        return None
    ready, total = read_replicas(agent.spec.mode, workload)
    return Health(ready=ready, total=total)
