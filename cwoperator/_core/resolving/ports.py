"""
The exposed ports of the agent: the inferred ones merged with the explicit ones.

The agent's JSON config gives the primary ports. The collector's YAML config,
if present, adds its receivers' ports unless their numbers are already taken.
The explicit ports of the custom resource replace the inferred ones by name.
"""
import dataclasses
from collections.abc import Iterable, Mapping, Sequence

from cwoperator._cogs.helpers import naming, typedefs
from cwoperator._cogs.structs import ports, specs
from cwoperator._core.resolving import agentconfig, collectorconfig, configs


def sanitize(
        candidates: Iterable[ports.PortDescriptor],
        *,
        logger: typedefs.Logger,
) -> list[ports.PortDescriptor]:
    """
    Truncate the port names to the allowed length, and drop the invalid ports.
    """
    result: list[ports.PortDescriptor] = []
    for port in candidates:
        name = naming.truncate('%s', naming.PORT_NAME_MAX_LENGTH, port.name)
        if name != port.name:
            logger.info(f"Truncating the port name {port.name!r} to {name!r}.")
        errors = naming.port_name_errors(name) + naming.port_number_errors(port.number)
        if errors:
            logger.info(f"Dropping the invalid port {name!r} ({port.number}): {'; '.join(errors)}.")
            continue
        result.append(dataclasses.replace(port, name=name))
    return result


def filter_port(
        candidate: ports.PortDescriptor,
        taken: Sequence[ports.PortDescriptor],
        *,
        logger: typedefs.Logger,
) -> ports.PortDescriptor | None:
    """
    Fit a new port among the taken ones, renaming it if needed.

    A taken number means the port is already exposed: it is skipped.
    A taken name is replaced with ``port-<number>``; if that one is taken too,
    the port is dropped.
    """
    if any(port.number == candidate.number for port in taken):
        logger.debug(f"Port {candidate.name!r} ({candidate.number}) is already exposed; skipping.")
        return None

    names = {port.name for port in taken}
    if candidate.name in names:
        fallback = f'port-{candidate.number}'
        if fallback in names:
            logger.info(f"Dropping the port {candidate.name!r} ({candidate.number}): "
                        f"both the name and the fallback name {fallback!r} are taken.")
            return None
        return dataclasses.replace(candidate, name=fallback)

    return candidate


def resolve_ports(
        spec: specs.AgentSpec,
        *,
        agent_parsers: Sequence[tuple[str, agentconfig.AgentParser]] = agentconfig.AGENT_PARSERS,
        receiver_parsers: Mapping[str, collectorconfig.ReceiverParser] = collectorconfig.RECEIVER_PARSERS,
        logger: typedefs.Logger,
) -> list[ports.PortDescriptor]:
    """
    Resolve the ports to be exposed by the container & the services, sorted by name.
    """
    inferred = agentconfig.resolve_agent_ports(spec.config, parsers=agent_parsers, logger=logger)
    resolved = sanitize(inferred, logger=logger)

    if spec.otel_config:
        extras = collectorconfig.resolve_collector_ports(spec.otel_config, parsers=receiver_parsers, logger=logger)
        for candidate in sanitize(extras, logger=logger):
            port = filter_port(candidate, resolved, logger=logger)
            if port is not None:
                resolved.append(port)

    by_name = {port.name: port for port in resolved}
    for port in spec.ports:
        by_name[port.name] = port
    return ports.sorted_by_name(by_name.values())


def resolve_metrics_port(spec: specs.AgentSpec, *, logger: typedefs.Logger) -> int:
    """
    The port of the agent's own telemetry, as exposed by the monitoring service.
    """
    try:
        return configs.metrics_port(spec.otel_config, spec.config)
    except configs.ConfigError as e:
        logger.error(f"Error resolving the metrics port; using {configs.DEFAULT_METRICS_PORT}: {e}")
        return configs.DEFAULT_METRICS_PORT
