"""
The agent's workload: a Deployment, a StatefulSet, or a DaemonSet, by the mode.

The pods are the same for all modes: one agent container with its configs
mounted from the ConfigMaps. The optional fields are only put if they are set,
so that the generated objects are stable and comparable to the live ones
(K8s API omits the empty fields too).
"""
from collections.abc import Mapping
from typing import Any

from cwoperator._cogs.structs import specs
from cwoperator._core.manifests import accounts, labels, names
from cwoperator._core.manifests.params import Manifest, Params

WINDOWS_SELECTOR = 'kubernetes.io/os'


def _compact(fields: Mapping[str, Any]) -> dict[str, Any]:
    """ Remove the unset fields: ``None`` and the empty strings or collections. """
    return {key: val for key, val in fields.items() if val is not None and val != '' and val != [] and val != {}}


def config_mount_path(params: Params) -> str:
    if params.agent.spec.node_selector.get(WINDOWS_SELECTOR) == 'windows':
        return params.settings.manifests.windows_config_mount_path
    return params.settings.manifests.config_mount_path


def container(params: Params) -> dict[str, Any]:
    spec = params.agent.spec
    args = sorted(f'--{key}={val}' for key, val in spec.args.items())
    env = [
        *spec.env,
        {'name': 'POD_NAME', 'valueFrom': {'fieldRef': {'fieldPath': 'metadata.name'}}},
    ]
    mounts = [
        {'name': names.CONFIG_VOLUME, 'mountPath': config_mount_path(params)},
        *spec.volume_mounts,
    ]
    return _compact({
        'name': names.CONTAINER,
        'image': params.image,
        'imagePullPolicy': spec.image_pull_policy,
        'args': args,
        'env': env,
        'envFrom': list(spec.env_from),
        'ports': [port.as_container_port() for port in params.ports],
        'volumeMounts': mounts,
        'resources': spec.resources,
        'securityContext': spec.security_context,
        'lifecycle': spec.lifecycle,
    })


def volumes(params: Params) -> list[dict[str, Any]]:
    """
    The config volume & the user-provided volumes.

    With the collector's config, both ConfigMaps are projected into one volume,
    so that both files are in the same directory of the container.
    """
    agent = params.agent
    primary = {
        'name': names.config_map(agent.name),
        'items': [{'key': names.CONFIG_ENTRY, 'path': names.CONFIG_ENTRY}],
    }
    if agent.spec.otel_config:
        secondary = {
            'name': names.otel_config_map(agent.name),
            'items': [{'key': names.OTEL_CONFIG_ENTRY, 'path': names.OTEL_CONFIG_ENTRY}],
        }
        config_volume = {
            'name': names.CONFIG_VOLUME,
            'projected': {'sources': [{'configMap': primary}, {'configMap': secondary}]},
        }
    else:
        config_volume = {'name': names.CONFIG_VOLUME, 'configMap': primary}
    return [config_volume, *params.agent.spec.volumes]


def pod_template(params: Params, name: str) -> dict[str, Any]:
    spec = params.agent.spec
    return {
        'metadata': {
            'labels': params.labels(name),
            'annotations': labels.pod_annotations(params.agent, patterns=params.annotation_patterns),
        },
        'spec': _compact({
            'serviceAccountName': accounts.service_account_name(params.agent),
            'containers': [container(params)],
            'volumes': volumes(params),
            'dnsPolicy': 'ClusterFirstWithHostNet' if spec.host_network else 'ClusterFirst',
            'hostNetwork': True if spec.host_network else None,
            'tolerations': list(spec.tolerations),
            'nodeSelector': dict(spec.node_selector),
            'securityContext': spec.pod_security_context,
            'priorityClassName': spec.priority_class_name,
            'affinity': spec.affinity,
            'topologySpreadConstraints': list(spec.topology_spread_constraints),
            'terminationGracePeriodSeconds': spec.termination_grace_period_seconds,
        }),
    }


def deployment(params: Params) -> Manifest | None:
    name = names.workload(params.agent.name)
    spec = params.agent.spec
    return {
        'apiVersion': 'apps/v1',
        'kind': 'Deployment',
        'metadata': params.metadata(name),
        'spec': _compact({
            'replicas': spec.replicas,
            'selector': {'matchLabels': labels.selector_labels(params.agent)},
            'template': pod_template(params, name),
            'strategy': spec.deployment_update_strategy,
        }),
    }


def statefulset(params: Params) -> Manifest | None:
    name = names.workload(params.agent.name)
    spec = params.agent.spec
    return {
        'apiVersion': 'apps/v1',
        'kind': 'StatefulSet',
        'metadata': params.metadata(name),
        'spec': _compact({
            'serviceName': names.service(params.agent.name),
            'replicas': spec.replicas,
            'selector': {'matchLabels': labels.selector_labels(params.agent)},
            'template': pod_template(params, name),
            'podManagementPolicy': 'Parallel',
        }),
    }


def daemonset(params: Params) -> Manifest | None:
    name = names.workload(params.agent.name)
    spec = params.agent.spec
    return {
        'apiVersion': 'apps/v1',
        'kind': 'DaemonSet',
        'metadata': params.metadata(name),
        'spec': _compact({
            'selector': {'matchLabels': labels.selector_labels(params.agent)},
            'template': pod_template(params, name),
            'updateStrategy': spec.daemonset_update_strategy,
        }),
    }


WORKLOADS = {
    specs.Mode.DEPLOYMENT: deployment,
    specs.Mode.STATEFULSET: statefulset,
    specs.Mode.DAEMONSET: daemonset,
}
