"""
Ports of the collector's YAML config, by the receivers used in the pipelines.

The receivers are interpreted by their type (the part of the name before ``/``)
with the parsers of :data:`RECEIVER_PARSERS`; unknown types expose a port only
if they have an explicit ``endpoint``. The scrapers expose nothing.
"""
from collections.abc import Callable, Mapping
from typing import Any

from cwoperator._cogs.helpers import naming, typedefs
from cwoperator._cogs.structs import ports
from cwoperator._core.resolving import configs

ReceiverParser = Callable[[str, Mapping[str, Any], typedefs.Logger], list[ports.PortDescriptor]]


def _endpoint_port(name: str, config: Mapping[str, Any], logger: typedefs.Logger) -> int | None:
    endpoint = config.get('endpoint')
    if not isinstance(endpoint, str) or not endpoint:
        return None
    try:
        return configs.port_from_endpoint(endpoint)
    except configs.ConfigError as e:
        logger.info(f"Receiver {name!r} has an unparseable endpoint {endpoint!r}: {e}")
        return None


def parse_scraper(
        name: str,
        config: Mapping[str, Any],
        logger: typedefs.Logger,
) -> list[ports.PortDescriptor]:
    return []


def parse_generic(
        name: str,
        config: Mapping[str, Any],
        logger: typedefs.Logger,
) -> list[ports.PortDescriptor]:
    number = _endpoint_port(name, config, logger)
    if number is None:
        return []
    return [ports.PortDescriptor(name=naming.port_name(name, number), number=number, feature=name)]


def single_port_parser(
        default: int,
        protocol: ports.Protocol = ports.Protocol.TCP,
        app_protocol: str | None = None,
) -> ReceiverParser:
    """ A parser for the receivers with one port: the endpoint's or the default one. """
    def parse(
            name: str,
            config: Mapping[str, Any],
            logger: typedefs.Logger,
    ) -> list[ports.PortDescriptor]:
        number = _endpoint_port(name, config, logger) or default
        return [ports.PortDescriptor(
            name=naming.port_name(name, number),
            number=number,
            protocol=protocol,
            feature=name,
            app_protocol=app_protocol,
        )]
    return parse


def multi_protocol_parser(
        *protocols: tuple[str, int, ports.Protocol, str | None],
) -> ReceiverParser:
    """
    A parser for the receivers with a port per protocol, e.g. OTLP's gRPC & HTTP.

    Only the protocols listed in the receiver's ``protocols`` block are exposed.
    """
    def parse(
            name: str,
            config: Mapping[str, Any],
            logger: typedefs.Logger,
    ) -> list[ports.PortDescriptor]:
        block = configs.dig(config, 'protocols') or {}
        result: list[ports.PortDescriptor] = []
        for key, default, protocol, app_protocol in protocols:
            if key not in block:
                continue
            settings = block[key] if isinstance(block[key], Mapping) else {}
            number = _endpoint_port(f'{name}/{key}', settings, logger) or default
            result.append(ports.PortDescriptor(
                name=naming.port_name(f'{name}-{key}', number),
                number=number,
                protocol=protocol,
                feature=name,
                app_protocol=app_protocol,
            ))
        return result
    return parse


RECEIVER_PARSERS: Mapping[str, ReceiverParser] = {
    'otlp': multi_protocol_parser(
        ('grpc', 4317, ports.Protocol.TCP, 'grpc'),
        ('http', 4318, ports.Protocol.TCP, 'http'),
    ),
    'jaeger': multi_protocol_parser(
        ('grpc', 14250, ports.Protocol.TCP, 'grpc'),
        ('thrift_http', 14268, ports.Protocol.TCP, 'http'),
        ('thrift_compact', 6831, ports.Protocol.UDP, None),
        ('thrift_binary', 6832, ports.Protocol.UDP, None),
    ),
    'awsxray': single_port_parser(2000, ports.Protocol.UDP),
    'statsd': single_port_parser(8125, ports.Protocol.UDP),
    'zipkin': single_port_parser(9411, ports.Protocol.TCP, 'http'),
    'carbon': single_port_parser(2003),
    'collectd': single_port_parser(8081),
    'fluentforward': single_port_parser(8006),
    'influxdb': single_port_parser(8086),
    'opencensus': single_port_parser(55678),
    'sapm': single_port_parser(7276),
    'signalfx': single_port_parser(9943),
    'splunk_hec': single_port_parser(8088),
    'wavefront': single_port_parser(2003),
    'zipkin_scribe': single_port_parser(9410),
    'prometheus': parse_scraper,
    'hostmetrics': parse_scraper,
    'kubeletstats': parse_scraper,
    'awscontainerinsightreceiver': parse_scraper,
    'k8s_cluster': parse_scraper,
    'filelog': parse_scraper,
}


def enabled_receivers(config: Mapping[str, Any]) -> dict[str, Mapping[str, Any]]:
    """
    Get the receivers used in any of the pipelines, sorted by their names.

    The receivers declared but not used in the pipelines are not running,
    so they expose nothing.
    """
    receivers = configs.dig(config, 'receivers')
    if not receivers:
        raise configs.ConfigError("No receivers are declared in the collector config.")

    used: set[str] = set()
    pipelines = configs.dig(config, 'service', 'pipelines') or {}
    for pipeline in pipelines.values():
        if isinstance(pipeline, Mapping):
            used.update(name for name in pipeline.get('receivers') or [] if isinstance(name, str))

    return {
        name: receivers[name] if isinstance(receivers[name], Mapping) else {}
        for name in sorted(receivers)
        if name in used
    }


def resolve_collector_ports(
        text: str,
        *,
        parsers: Mapping[str, ReceiverParser] = RECEIVER_PARSERS,
        logger: typedefs.Logger,
) -> list[ports.PortDescriptor]:
    """
    Infer the exposed ports from the collector's YAML config, sorted by name.
    """
    try:
        config = configs.parse_collector_config(text)
        receivers = enabled_receivers(config)
    except configs.ConfigError as e:
        logger.error(f"Error parsing the collector config: {e}")
        return []

    result: list[ports.PortDescriptor] = []
    for name, receiver in receivers.items():
        parser = parsers.get(name.split('/')[0], parse_generic)
        result.extend(parser(name, receiver, logger))
    return ports.sorted_by_name(result)
