import pytest

from cwoperator._core.resolving.configs import DEFAULT_METRICS_PORT, ConfigError, dig, \
                                               metrics_port, parse_agent_config, \
                                               parse_collector_config, port_from_endpoint


def test_agent_config_is_a_json_object():
    assert parse_agent_config('{"a": {"b": 1}}') == {'a': {'b': 1}}


@pytest.mark.parametrize('text', ['', '{', 'not json', '[1, 2]', '"str"'])
def test_agent_config_errors(text):
    with pytest.raises(ConfigError):
        parse_agent_config(text)


def test_collector_config_is_a_yaml_mapping():
    assert parse_collector_config('receivers:\n  otlp: {}\n') == {'receivers': {'otlp': {}}}


def test_empty_collector_config_is_an_empty_mapping():
    assert parse_collector_config('') == {}


@pytest.mark.parametrize('text', ['- a\n- b\n', 'a: [b\n'])
def test_collector_config_errors(text):
    with pytest.raises(ConfigError):
        parse_collector_config(text)


@pytest.mark.parametrize('endpoint, expected', [
    ('0.0.0.0:4317', 4317),
    (':4317', 4317),
    ('localhost:1234', 1234),
    ('udp://127.0.0.1:8125', 8125),
])
def test_port_from_endpoint(endpoint, expected):
    assert port_from_endpoint(endpoint) == expected


@pytest.mark.parametrize('endpoint', ['0.0.0.0', '0.0.0.0:0', 'localhost:', ''])
def test_port_from_endpoint_errors(endpoint):
    with pytest.raises(ConfigError, match="should not be empty"):
        port_from_endpoint(endpoint)


def test_dig_finds_nested_blocks():
    config = {'a': {'b': {'c': {}}}}
    assert dig(config, 'a', 'b') == {'c': {}}
    assert dig(config, 'a', 'b', 'c') == {}


@pytest.mark.parametrize('config', [
    {},
    {'a': None},
    {'a': 'scalar'},
    {'a': {'b': None}},
    {'a': {'b': 123}},
])
def test_dig_treats_non_mappings_as_absent(config):
    assert dig(config, 'a', 'b') is None


def test_metrics_port_defaults():
    assert metrics_port() == DEFAULT_METRICS_PORT
    assert metrics_port('', '{}') == DEFAULT_METRICS_PORT


def test_metrics_port_from_the_first_config_with_an_address():
    otel = 'service:\n  telemetry:\n    metrics:\n      address: 0.0.0.0:9999\n'
    agent = '{"service": {"telemetry": {"metrics": {"address": ":7777"}}}}'
    assert metrics_port(otel, agent) == 9999
    assert metrics_port('', agent) == 7777


def test_metrics_port_without_a_port_is_default():
    otel = 'service:\n  telemetry:\n    metrics:\n      address: localhost\n'
    assert metrics_port(otel) == DEFAULT_METRICS_PORT


def test_metrics_port_skips_unparseable_configs():
    agent = '{"service": {"telemetry": {"metrics": {"address": ":7777"}}}}'
    assert metrics_port('a: [b\n', agent) == 7777


def test_metrics_port_with_an_invalid_port():
    otel = 'service:\n  telemetry:\n    metrics:\n      address: localhost:abc\n'
    with pytest.raises(ConfigError, match="Invalid port"):
        metrics_port(otel)
