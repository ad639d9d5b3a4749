"""
Ports of the agent's own JSON config, by the enabled feature blocks.

Every feature is interpreted by its parser, which yields the groups of ports.
A group is claimed atomically: either all its ports are exposed, or none.
The ports are claimed by their numbers, so the first group to claim a number
wins, and all later groups with the same number are dropped with a log.
This is why the parsers' order matters, and why it is explicit
in :data:`AGENT_PARSERS` rather than implied by the config's keys.
"""
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from cwoperator._cogs.helpers import typedefs
from cwoperator._cogs.structs import ports
from cwoperator._core.resolving import configs

PortGroup = tuple[ports.PortDescriptor, ...]
AgentParser = Callable[[str, Mapping[str, Any], typedefs.Logger], list[PortGroup]]

# The prefix of the ports with the explicitly configured addresses.
EXPLICIT_PREFIX = 'cwa-'

APP_SIGNALS_PORTS: PortGroup = (
    ports.PortDescriptor(name='appsignals-grpc', number=4315, feature='application_signals'),
    ports.PortDescriptor(name='appsignals-http', number=4316, feature='application_signals'),
    ports.PortDescriptor(name='appsignals-xray', number=2000, feature='application_signals'),
)
EMF_PORTS: PortGroup = (
    ports.PortDescriptor(name='emf-tcp', number=25888, protocol=ports.Protocol.TCP, feature='emf'),
    ports.PortDescriptor(name='emf-udp', number=25888, protocol=ports.Protocol.UDP, feature='emf'),
)


def _address(block: Mapping[str, Any], key: str) -> str:
    value = block.get(key)
    return value if isinstance(value, str) else ''


def _addressed_port(
        feature: str,
        address: str,
        *,
        name: str,
        number: int,
        protocol: ports.Protocol,
        logger: typedefs.Logger,
) -> list[PortGroup]:
    """
    A single port: either at its default number, or at the configured address.

    The explicitly addressed ports are distinguished by the name prefix.
    Unparseable addresses are logged, and the feature exposes no ports.
    """
    if address:
        try:
            number = configs.port_from_endpoint(address)
        except configs.ConfigError as e:
            logger.error(f"Error parsing the port of {name!r} from the address {address!r}: {e}")
            return []
        name = EXPLICIT_PREFIX + name
    return [(ports.PortDescriptor(name=name, number=number, protocol=protocol, feature=feature),)]


def parse_application_signals(
        feature: str,
        config: Mapping[str, Any],
        logger: typedefs.Logger,
) -> list[PortGroup]:
    block = configs.dig(config, 'logs', 'metrics_collected', 'application_signals')
    if block is None:
        block = configs.dig(config, 'logs', 'metrics_collected', 'app_signals')
    return [] if block is None else [APP_SIGNALS_PORTS]


def parse_statsd(
        feature: str,
        config: Mapping[str, Any],
        logger: typedefs.Logger,
) -> list[PortGroup]:
    block = configs.dig(config, 'metrics', 'metrics_collected', 'statsd')
    if block is None:
        return []
    return _addressed_port(feature, _address(block, 'service_address'),
                           name='statsd', number=8125, protocol=ports.Protocol.UDP, logger=logger)


def parse_collectd(
        feature: str,
        config: Mapping[str, Any],
        logger: typedefs.Logger,
) -> list[PortGroup]:
    block = configs.dig(config, 'metrics', 'metrics_collected', 'collectd')
    if block is None:
        return []
    return _addressed_port(feature, _address(block, 'service_address'),
                           name='collectd', number=25826, protocol=ports.Protocol.UDP, logger=logger)


def parse_jmx(
        feature: str,
        config: Mapping[str, Any],
        logger: typedefs.Logger,
) -> list[PortGroup]:
    block = configs.dig(config, 'metrics', 'metrics_collected', 'jmx')
    if block is None:
        return []
    return [(ports.PortDescriptor(name='jmx-http', number=4314, feature=feature),)]


def parse_emf(
        feature: str,
        config: Mapping[str, Any],
        logger: typedefs.Logger,
) -> list[PortGroup]:
    block = configs.dig(config, 'logs', 'metrics_collected', 'emf')
    return [] if block is None else [EMF_PORTS]


def parse_otlp(
        feature: str,
        config: Mapping[str, Any],
        logger: typedefs.Logger,
) -> list[PortGroup]:
    block = configs.dig(config, 'traces', 'traces_collected', 'otlp')
    if block is None:
        return []
    return [
        *_addressed_port(feature, _address(block, 'grpc_endpoint'),
                         name='otlp-grpc', number=4317, protocol=ports.Protocol.TCP, logger=logger),
        *_addressed_port(feature, _address(block, 'http_endpoint'),
                         name='otlp-http', number=4318, protocol=ports.Protocol.TCP, logger=logger),
    ]


def parse_xray(
        feature: str,
        config: Mapping[str, Any],
        logger: typedefs.Logger,
) -> list[PortGroup]:
    block = configs.dig(config, 'traces', 'traces_collected', 'xray')
    if block is None:
        return []
    groups = _addressed_port(feature, _address(block, 'bind_address'),
                             name='aws-traces', number=2000, protocol=ports.Protocol.UDP, logger=logger)
    proxy = configs.dig(block, 'tcp_proxy')
    if proxy is not None:
        groups += _addressed_port(feature, _address(proxy, 'bind_address'),
                                  name='aws-proxy', number=2000, protocol=ports.Protocol.TCP, logger=logger)
    return groups


# The order is the priority of the features when they claim the same port numbers.
AGENT_PARSERS: Sequence[tuple[str, AgentParser]] = (
    ('application_signals', parse_application_signals),
    ('statsd', parse_statsd),
    ('collectd', parse_collectd),
    ('jmx', parse_jmx),
    ('emf', parse_emf),
    ('otlp', parse_otlp),
    ('xray', parse_xray),
)


class PortClaims:
    """
    The ports claimed so far, keyed by their numbers.
    """

    def __init__(self) -> None:
        super().__init__()
        self._claims: dict[int, PortGroup] = {}

    def claim(self, group: PortGroup, *, logger: typedefs.Logger) -> bool:
        numbers = sorted({port.number for port in group})
        taken = [number for number in numbers if number in self._claims]
        for number in taken:
            logger.info(f"Duplicate port has been configured in the agent config for port {number}; "
                        f"dropping {', '.join(port.name for port in group)}.")
        if taken:
            return False
        for number in numbers:
            self._claims[number] = tuple(port for port in group if port.number == number)
        return True

    @property
    def exposed(self) -> list[ports.PortDescriptor]:
        return ports.sorted_by_name(port for group in self._claims.values() for port in group)


def resolve_agent_ports(
        text: str,
        *,
        parsers: Sequence[tuple[str, AgentParser]] = AGENT_PARSERS,
        logger: typedefs.Logger,
) -> list[ports.PortDescriptor]:
    """
    Infer the exposed ports from the agent's JSON config, sorted by name.

    A malformed config exposes no ports: it is logged, but is not fatal,
    so that the rest of the agent's objects are still reconciled.
    """
    try:
        config = configs.parse_agent_config(text)
    except configs.ConfigError as e:
        logger.error(f"Error parsing the agent config: {e}")
        return []

    claims = PortClaims()
    for feature, parser in parsers:
        for group in parser(feature, config, logger):
            claims.claim(group, logger=logger)
    return claims.exposed
