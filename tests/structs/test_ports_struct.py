from cwoperator._cogs.structs.ports import PortDescriptor, Protocol, sorted_by_name


def test_container_port():
    port = PortDescriptor(name='statsd', number=8125, protocol=Protocol.UDP, app_protocol='x')
    assert port.as_container_port() == {'name': 'statsd', 'containerPort': 8125, 'protocol': 'UDP'}


def test_service_port_minimal():
    port = PortDescriptor(name='jmx-http', number=4314)
    assert port.as_service_port() == {'name': 'jmx-http', 'port': 4314, 'protocol': 'TCP'}


def test_service_port_with_hints():
    port = PortDescriptor(name='otlp-grpc', number=4317, app_protocol='grpc', target_port=14317)
    assert port.as_service_port() == {
        'name': 'otlp-grpc',
        'port': 4317,
        'protocol': 'TCP',
        'appProtocol': 'grpc',
        'targetPort': 14317,
    }


def test_sorted_by_name():
    ports = [PortDescriptor(name='b', number=1), PortDescriptor(name='a', number=2)]
    assert [port.name for port in sorted_by_name(ports)] == ['a', 'b']
