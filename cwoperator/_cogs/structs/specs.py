"""
A typed view of the ``AmazonCloudWatchAgent`` custom resource.

The raw body is interpreted once per pass into frozen dataclasses, so that
the builders never deal with the missing keys, nulls, or wrong types.
The nested K8s structures that are copied into the manifests as they are
(e.g. resources, tolerations, affinity) remain raw and are never modified.
"""
import dataclasses
import enum
from collections.abc import Mapping
from typing import Any

from cwoperator._cogs.structs.ports import PortDescriptor


class Mode(str, enum.Enum):
    DEPLOYMENT = 'deployment'
    DAEMONSET = 'daemonset'
    STATEFULSET = 'statefulset'
    SIDECAR = 'sidecar'


class IngressType(str, enum.Enum):
    INGRESS = 'ingress'
    ROUTE = 'route'


class IngressRuleType(str, enum.Enum):
    PATH = 'path'
    SUBDOMAIN = 'subdomain'


class RouteTermination(str, enum.Enum):
    INSECURE = 'insecure'
    EDGE = 'edge'
    PASSTHROUGH = 'passthrough'
    REENCRYPT = 'reencrypt'


@dataclasses.dataclass(frozen=True)
class AutoscalerSpec:
    min_replicas: int | None = None
    max_replicas: int | None = None
    target_cpu_utilization: int | None = None
    target_memory_utilization: int | None = None
    behavior: Mapping[str, Any] | None = None


@dataclasses.dataclass(frozen=True)
class DisruptionBudgetSpec:
    min_available: int | str | None = None
    max_unavailable: int | str | None = None


@dataclasses.dataclass(frozen=True)
class IngressSpec:
    type: IngressType | None = None
    rule_type: IngressRuleType = IngressRuleType.PATH
    hostname: str = ''
    annotations: Mapping[str, str] = dataclasses.field(default_factory=dict)
    tls: tuple[Mapping[str, Any], ...] = ()
    ingress_class_name: str | None = None
    route_termination: str | None = None


@dataclasses.dataclass(frozen=True)
class AgentSpec:
    mode: Mode = Mode.DEPLOYMENT
    config: str = ''
    otel_config: str = ''
    ports: tuple[PortDescriptor, ...] = ()
    image: str = ''
    image_pull_policy: str | None = None
    replicas: int | None = None
    args: Mapping[str, str] = dataclasses.field(default_factory=dict)
    env: tuple[Mapping[str, Any], ...] = ()
    env_from: tuple[Mapping[str, Any], ...] = ()
    resources: Mapping[str, Any] | None = None
    security_context: Mapping[str, Any] | None = None
    pod_security_context: Mapping[str, Any] | None = None
    volumes: tuple[Mapping[str, Any], ...] = ()
    volume_mounts: tuple[Mapping[str, Any], ...] = ()
    node_selector: Mapping[str, str] = dataclasses.field(default_factory=dict)
    tolerations: tuple[Mapping[str, Any], ...] = ()
    affinity: Mapping[str, Any] | None = None
    topology_spread_constraints: tuple[Mapping[str, Any], ...] = ()
    priority_class_name: str | None = None
    host_network: bool = False
    service_account: str = ''
    pod_annotations: Mapping[str, str] = dataclasses.field(default_factory=dict)
    lifecycle: Mapping[str, Any] | None = None
    termination_grace_period_seconds: int | None = None
    daemonset_update_strategy: Mapping[str, Any] | None = None
    deployment_update_strategy: Mapping[str, Any] | None = None
    autoscaler: AutoscalerSpec | None = None
    pod_disruption_budget: DisruptionBudgetSpec | None = None
    ingress: IngressSpec = dataclasses.field(default_factory=IngressSpec)


@dataclasses.dataclass(frozen=True)
class Agent:
    """
    The custom resource as needed for the manifests: its identity & its spec.
    """
    name: str
    namespace: str
    uid: str | None
    labels: Mapping[str, str]
    annotations: Mapping[str, str]
    spec: AgentSpec


def parse_agent(body: Mapping[str, Any]) -> Agent:
    """
    Interpret the custom resource's raw body.

    Invalid enum values (e.g. an unknown mode) raise ``ValueError``:
    they are expected to be rejected by the CRD schema before reaching here.
    """
    meta = body.get('metadata') or {}
    spec = body.get('spec') or {}
    return Agent(
        name=meta['name'],
        namespace=meta.get('namespace') or 'default',
        uid=meta.get('uid'),
        labels=dict(meta.get('labels') or {}),
        annotations=dict(meta.get('annotations') or {}),
        spec=parse_spec(spec),
    )


def parse_spec(spec: Mapping[str, Any]) -> AgentSpec:
    autoscaler = spec.get('autoscaler')
    pdb = spec.get('podDisruptionBudget')
    ingress = spec.get('ingress') or {}
    return AgentSpec(
        mode=Mode(spec.get('mode') or Mode.DEPLOYMENT.value),
        config=spec.get('config') or '',
        otel_config=spec.get('otelConfig') or '',
        ports=tuple(PortDescriptor.from_spec(port) for port in spec.get('ports') or []),
        image=spec.get('image') or '',
        image_pull_policy=spec.get('imagePullPolicy'),
        replicas=spec.get('replicas'),
        args=dict(spec.get('args') or {}),
        env=tuple(spec.get('env') or []),
        env_from=tuple(spec.get('envFrom') or []),
        resources=spec.get('resources'),
        security_context=spec.get('securityContext'),
        pod_security_context=spec.get('podSecurityContext'),
        volumes=tuple(spec.get('volumes') or []),
        volume_mounts=tuple(spec.get('volumeMounts') or []),
        node_selector=dict(spec.get('nodeSelector') or {}),
        tolerations=tuple(spec.get('tolerations') or []),
        affinity=spec.get('affinity'),
        topology_spread_constraints=tuple(spec.get('topologySpreadConstraints') or []),
        priority_class_name=spec.get('priorityClassName'),
        host_network=bool(spec.get('hostNetwork')),
        service_account=spec.get('serviceAccount') or '',
        pod_annotations=dict(spec.get('podAnnotations') or {}),
        lifecycle=spec.get('lifecycle'),
        termination_grace_period_seconds=spec.get('terminationGracePeriodSeconds'),
        daemonset_update_strategy=spec.get('updateStrategy') or spec.get('daemonSetUpdateStrategy'),
        deployment_update_strategy=spec.get('deploymentUpdateStrategy'),
        autoscaler=None if autoscaler is None else AutoscalerSpec(
            min_replicas=autoscaler.get('minReplicas'),
            max_replicas=autoscaler.get('maxReplicas'),
            target_cpu_utilization=autoscaler.get('targetCPUUtilization'),
            target_memory_utilization=autoscaler.get('targetMemoryUtilization'),
            behavior=autoscaler.get('behavior'),
        ),
        pod_disruption_budget=None if pdb is None else DisruptionBudgetSpec(
            min_available=pdb.get('minAvailable'),
            max_unavailable=pdb.get('maxUnavailable'),
        ),
        ingress=IngressSpec(
            type=IngressType(ingress['type']) if ingress.get('type') else None,
            rule_type=IngressRuleType(ingress.get('ruleType') or IngressRuleType.PATH.value),
            hostname=ingress.get('hostname') or '',
            annotations=dict(ingress.get('annotations') or {}),
            tls=tuple(ingress.get('tls') or []),
            ingress_class_name=ingress.get('ingressClassName'),
            route_termination=(ingress.get('route') or {}).get('termination') or (
                RouteTermination.EDGE.value if ingress.get('type') == IngressType.ROUTE.value else None
            ),
        ),
    )
