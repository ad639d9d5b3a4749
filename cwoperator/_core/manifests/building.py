"""
The pipeline of the builders: from the custom resource to the desired objects.

The builders are pure functions of the params: the same custom resource
with the same settings always gives the same objects, in the same order.
The builders that have nothing to build (e.g. no ports, or no autoscaling)
return ``None``, and are skipped.
"""
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from cwoperator._cogs.configs import configuration
from cwoperator._cogs.helpers import typedefs
from cwoperator._cogs.structs import specs
from cwoperator._core.manifests import accounts, autoscaling, configmaps, ingresses, services, workloads
from cwoperator._core.manifests.params import Manifest, Params, make_params

Builder = Callable[[Params], Manifest | None]

COMMON_BUILDERS: Sequence[Builder] = (
    configmaps.config_map,
    configmaps.otel_config_map,
    autoscaling.autoscaler,
    accounts.service_account,
    services.service,
    services.headless_service,
    services.monitoring_service,
    ingresses.ingress,
)


def builders_for(mode: specs.Mode) -> list[Builder]:
    """ The builders of the mode: its workload first (if any), then the common ones. """
    match mode:
        case specs.Mode.DEPLOYMENT | specs.Mode.STATEFULSET:
            return [workloads.WORKLOADS[mode], autoscaling.disruption_budget, *COMMON_BUILDERS]
        case specs.Mode.DAEMONSET:
            return [workloads.WORKLOADS[mode], *COMMON_BUILDERS]
        case _:
            return list(COMMON_BUILDERS)


def build(params: Params) -> list[Manifest]:
    objs: list[Manifest] = []
    for builder in builders_for(params.agent.spec.mode):
        obj = builder(params)
        if obj is not None:
            objs.append(obj)
    objs.extend(ingresses.routes(params))
    return objs


def build_agent(
        body: Mapping[str, Any],
        *,
        settings: configuration.OperatorSettings,
        logger: typedefs.Logger,
) -> list[Manifest]:
    """ Build the desired objects of the custom resource's raw body. """
    agent = specs.parse_agent(body)
    params = make_params(agent, settings=settings, logger=logger)
    if agent.spec.mode == specs.Mode.SIDECAR:
        logger.debug("Not building the workload for the sidecar mode.")
    return build(params)
