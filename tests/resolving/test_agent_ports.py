import json

import pytest

from cwoperator._cogs.structs.ports import PortDescriptor, Protocol
from cwoperator._core.resolving.agentconfig import AGENT_PARSERS, APP_SIGNALS_PORTS, EMF_PORTS, \
                                                   PortClaims, resolve_agent_ports


def _resolve(config, logger, **kwargs):
    text = config if isinstance(config, str) else json.dumps(config)
    return {port.name: (port.number, port.protocol) for port in resolve_agent_ports(text, logger=logger, **kwargs)}


def test_empty_config_exposes_nothing(logger):
    assert _resolve({}, logger) == {}


def test_null_blocks_expose_nothing(logger):
    assert _resolve({'metrics': {'metrics_collected': {'statsd': None}}}, logger) == {}


@pytest.mark.parametrize('text', ['', '{', 'not json', '[]'])
def test_malformed_config_exposes_nothing(logger, assert_logs, text):
    assert _resolve(text, logger) == {}
    assert_logs(["Error parsing the agent config"])


@pytest.mark.parametrize('key', ['application_signals', 'app_signals'])
def test_application_signals(logger, key):
    ports = _resolve({'logs': {'metrics_collected': {key: {}}}}, logger)
    assert ports == {
        'appsignals-grpc': (4315, Protocol.TCP),
        'appsignals-http': (4316, Protocol.TCP),
        'appsignals-xray': (2000, Protocol.TCP),
    }


def test_statsd_default(logger):
    ports = _resolve({'metrics': {'metrics_collected': {'statsd': {}}}}, logger)
    assert ports == {'statsd': (8125, Protocol.UDP)}


def test_statsd_with_an_address(logger):
    config = {'metrics': {'metrics_collected': {'statsd': {'service_address': ':8135'}}}}
    ports = _resolve(config, logger)
    assert ports == {'cwa-statsd': (8135, Protocol.UDP)}


def test_collectd_with_an_address(logger):
    config = {'metrics': {'metrics_collected': {'collectd': {'service_address': 'udp://127.0.0.1:25836'}}}}
    ports = _resolve(config, logger)
    assert ports == {'cwa-collectd': (25836, Protocol.UDP)}


def test_jmx(logger):
    ports = _resolve({'metrics': {'metrics_collected': {'jmx': {}}}}, logger)
    assert ports == {'jmx-http': (4314, Protocol.TCP)}


def test_emf_exposes_both_protocols_on_one_number(logger):
    ports = resolve_agent_ports(json.dumps({'logs': {'metrics_collected': {'emf': {}}}}), logger=logger)
    assert ports == sorted(EMF_PORTS, key=lambda port: port.name)


def test_otlp_defaults(logger):
    ports = _resolve({'traces': {'traces_collected': {'otlp': {}}}}, logger)
    assert ports == {'otlp-grpc': (4317, Protocol.TCP), 'otlp-http': (4318, Protocol.TCP)}


def test_otlp_with_addresses(logger):
    config = {'traces': {'traces_collected': {'otlp': {
        'grpc_endpoint': '0.0.0.0:1234',
        'http_endpoint': '0.0.0.0:2345',
    }}}}
    ports = _resolve(config, logger)
    assert ports == {'cwa-otlp-grpc': (1234, Protocol.TCP), 'cwa-otlp-http': (2345, Protocol.TCP)}


def test_xray_with_a_proxy_on_other_addresses(logger):
    config = {'traces': {'traces_collected': {'xray': {
        'bind_address': '0.0.0.0:2800',
        'tcp_proxy': {'bind_address': '0.0.0.0:2900'},
    }}}}
    ports = _resolve(config, logger)
    assert ports == {'cwa-aws-traces': (2800, Protocol.UDP), 'cwa-aws-proxy': (2900, Protocol.TCP)}


def test_xray_proxy_on_the_default_number_is_a_duplicate(logger, assert_logs):
    config = {'traces': {'traces_collected': {'xray': {'tcp_proxy': {}}}}}
    ports = _resolve(config, logger)
    assert ports == {'aws-traces': (2000, Protocol.UDP)}
    assert_logs(["Duplicate port has been configured in the agent config for port 2000"])


def test_zero_port_is_an_error_and_exposes_nothing(logger, assert_logs):
    config = {'metrics': {'metrics_collected': {'statsd': {'service_address': ':0'}}}}
    assert _resolve(config, logger) == {}
    assert_logs(["Error parsing the port of 'statsd'"])


def test_missing_port_is_an_error_and_exposes_nothing(logger, assert_logs):
    config = {'metrics': {'metrics_collected': {'statsd': {'service_address': 'localhost'}}}}
    assert _resolve(config, logger) == {}
    assert_logs(["Error parsing the port of 'statsd'"])


def test_application_signals_win_over_xray(logger, assert_logs):
    config = {
        'logs': {'metrics_collected': {'application_signals': {}}},
        'traces': {'traces_collected': {'xray': {}}},
    }
    ports = _resolve(config, logger)
    assert ports['appsignals-xray'] == (2000, Protocol.TCP)
    assert 'aws-traces' not in ports
    assert_logs(["Duplicate port .* for port 2000"])


def test_emf_group_is_dropped_atomically(logger, assert_logs):
    config = {
        'metrics': {'metrics_collected': {'statsd': {'service_address': ':25888'}}},
        'logs': {'metrics_collected': {'emf': {}}},
    }
    ports = _resolve(config, logger)
    assert ports == {'cwa-statsd': (25888, Protocol.UDP)}
    assert_logs(["Duplicate port .* for port 25888; dropping emf-tcp, emf-udp"])


def test_application_signals_group_is_dropped_atomically(logger):
    def fake_parser(feature, config, logger):
        return [(PortDescriptor(name='first', number=4316),)]

    parsers = [('first', fake_parser), *AGENT_PARSERS]
    ports = _resolve({'logs': {'metrics_collected': {'application_signals': {}}}}, logger, parsers=parsers)
    assert ports == {'first': (4316, Protocol.TCP)}


def test_the_order_of_the_blocks_does_not_matter(logger):
    config1 = {
        'logs': {'metrics_collected': {'application_signals': {}}},
        'traces': {'traces_collected': {'xray': {}}},
    }
    config2 = {
        'traces': {'traces_collected': {'xray': {}}},
        'logs': {'metrics_collected': {'application_signals': {}}},
    }
    assert _resolve(config1, logger) == _resolve(config2, logger)


def test_results_are_sorted_by_name(logger):
    config = {
        'metrics': {'metrics_collected': {'statsd': {}, 'collectd': {}, 'jmx': {}}},
        'traces': {'traces_collected': {'otlp': {}}},
    }
    ports = resolve_agent_ports(json.dumps(config), logger=logger)
    assert [port.name for port in ports] == ['collectd', 'jmx-http', 'otlp-grpc', 'otlp-http', 'statsd']


def test_port_claims(logger):
    claims = PortClaims()
    assert claims.claim(APP_SIGNALS_PORTS, logger=logger)
    assert not claims.claim((PortDescriptor(name='x', number=2000),), logger=logger)
    assert claims.claim((PortDescriptor(name='y', number=2001),), logger=logger)
    assert [port.name for port in claims.exposed] == [
        'appsignals-grpc', 'appsignals-http', 'appsignals-xray', 'y',
    ]
