"""
Decoding of the agent's configs and extraction of the ports from the addresses.

The configs are opaque to the operator: only the presence of some blocks
and some addresses in them matter. Any malformed config is reported as
:class:`ConfigError`, which the resolvers log and degrade gracefully.
"""
import json
import re
from collections.abc import Mapping
from typing import Any

import yaml

# E.g. "0.0.0.0:4317", ":4317", "localhost:4317", "udp://127.0.0.1:8125".
_PORT_IN_ENDPOINT = re.compile(r':([0-9]+)')

DEFAULT_METRICS_PORT = 8888


class ConfigError(Exception):
    """ Raised when a config cannot be decoded or interpreted. """


def parse_agent_config(text: str) -> Mapping[str, Any]:
    """ Decode the agent's JSON config: it must be a JSON object. """
    try:
        config = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Cannot parse the agent config as JSON: {e}") from e
    if not isinstance(config, Mapping):
        raise ConfigError(f"The agent config must be a JSON object, got {type(config).__name__}.")
    return config


def parse_collector_config(text: str) -> Mapping[str, Any]:
    """ Decode the collector's YAML config: it must be a YAML mapping. """
    try:
        config = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot parse the collector config as YAML: {e}") from e
    if config is None:
        return {}
    if not isinstance(config, Mapping):
        raise ConfigError(f"The collector config must be a YAML mapping, got {type(config).__name__}.")
    return config


def port_from_endpoint(endpoint: str) -> int:
    """
    Extract the port from the address: the first ``:<digits>`` in it.

    Absent or zero ports are errors: the port cannot be guessed from the address.
    """
    match = _PORT_IN_ENDPOINT.search(endpoint)
    port = int(match.group(1)) if match else 0
    if port == 0:
        raise ConfigError(f"The port should not be empty in {endpoint!r}.")
    return port


def dig(config: Mapping[str, Any], *keys: str) -> Mapping[str, Any] | None:
    """
    Get a nested block of the config, or ``None`` if any of the keys is absent.

    Only the mappings are considered as blocks: ``null`` or scalars are "absent".
    """
    value: Any = config
    for key in keys:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value if isinstance(value, Mapping) else None


def metrics_port(*texts: str) -> int:
    """
    Get the port of the agent's own telemetry from the first config that has it.

    The address is at ``service.telemetry.metrics.address`` as in the collector's
    configs. If absent, or if it has no port, the default port is used.
    Unparseable configs are skipped: their errors are reported by the resolvers.
    """
    for text in texts:
        if not text:
            continue
        try:
            config = parse_collector_config(text)
        except ConfigError:
            continue
        address = (dig(config, 'service', 'telemetry', 'metrics') or {}).get('address')
        if isinstance(address, str) and address:
            host, sep, port = address.rpartition(':')
            if not sep or not port:
                return DEFAULT_METRICS_PORT
            try:
                return int(port)
            except ValueError:
                raise ConfigError(f"Invalid port in the telemetry address {address!r}.")
    return DEFAULT_METRICS_PORT
