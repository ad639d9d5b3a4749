from typing import Any

from cwoperator._cogs.structs import references
from cwoperator._core.manifests import labels, names
from cwoperator._core.manifests.params import Manifest, Params

DEFAULT_CPU_UTILIZATION = 90


def autoscaler(params: Params) -> Manifest | None:
    """
    A HorizontalPodAutoscaler of the custom resource itself (via its scale subresource).

    Only created when the maximum of replicas is set. If neither CPU nor memory
    targets are set, the CPU target is used with the default utilization.
    """
    spec = params.agent.spec.autoscaler
    if spec is None or spec.max_replicas is None:
        return None

    metrics: list[dict[str, Any]] = []
    cpu = spec.target_cpu_utilization
    if cpu is None and spec.target_memory_utilization is None:
        cpu = DEFAULT_CPU_UTILIZATION
    for resource, utilization in [('cpu', cpu), ('memory', spec.target_memory_utilization)]:
        if utilization is not None:
            metrics.append({
                'type': 'Resource',
                'resource': {
                    'name': resource,
                    'target': {'type': 'Utilization', 'averageUtilization': utilization},
                },
            })

    hpa_spec: dict[str, Any] = {
        'scaleTargetRef': {
            'apiVersion': references.AGENTS.api_version,
            'kind': references.AGENTS.kind,
            'name': params.agent.name,
        },
        'minReplicas': spec.min_replicas or params.agent.spec.replicas or 1,
        'maxReplicas': spec.max_replicas,
        'metrics': metrics,
    }
    if spec.behavior:
        hpa_spec['behavior'] = spec.behavior

    name = names.autoscaler(params.agent.name)
    return {
        'apiVersion': 'autoscaling/v2',
        'kind': 'HorizontalPodAutoscaler',
        'metadata': params.metadata(name),
        'spec': hpa_spec,
    }


def disruption_budget(params: Params) -> Manifest | None:
    spec = params.agent.spec.pod_disruption_budget
    if spec is None:
        params.logger.debug("The disruption budget is not set; skipping it.")
        return None

    pdb_spec: dict[str, Any] = {'selector': {'matchLabels': labels.selector_labels(params.agent)}}
    if spec.min_available is not None:
        pdb_spec['minAvailable'] = spec.min_available
    if spec.max_unavailable is not None:
        pdb_spec['maxUnavailable'] = spec.max_unavailable

    name = names.disruption_budget(params.agent.name)
    return {
        'apiVersion': 'policy/v1',
        'kind': 'PodDisruptionBudget',
        'metadata': params.metadata(name),
        'spec': pdb_spec,
    }
