"""
Network ports of the agent, as inferred from its configs or set explicitly.
"""
import dataclasses
import enum
from collections.abc import Iterable, Mapping
from typing import Any


class Protocol(str, enum.Enum):
    TCP = 'TCP'
    UDP = 'UDP'
    SCTP = 'SCTP'


@dataclasses.dataclass(frozen=True)
class PortDescriptor:
    """
    A single exposed port: the same for the container & for the services.
    """

    name: str
    number: int
    protocol: Protocol = Protocol.TCP

    feature: str = ''
    """
    Which agent feature or collector receiver has requested this port;
    e.g. ``"statsd"``, ``"otlp/custom"``. Informational only: not exposed.
    """

    app_protocol: str | None = None
    """
    An application protocol hint for the service port; e.g. ``"grpc"``.
    """

    target_port: int | str | None = None
    """
    A target port of the service, if differs from the port's number.
    Only used for the explicitly specified ports.
    """

    def as_container_port(self) -> dict[str, Any]:
        return {
            'name': self.name,
            'containerPort': self.number,
            'protocol': self.protocol.value,
        }

    def as_service_port(self) -> dict[str, Any]:
        port: dict[str, Any] = {
            'name': self.name,
            'port': self.number,
            'protocol': self.protocol.value,
        }
        if self.app_protocol is not None:
            port['appProtocol'] = self.app_protocol
        if self.target_port is not None:
            port['targetPort'] = self.target_port
        return port

    @classmethod
    def from_spec(cls, raw: Mapping[str, Any]) -> 'PortDescriptor':
        """ Interpret a service port as written in the custom resource. """
        return cls(
            name=raw['name'],
            number=int(raw['port']),
            protocol=Protocol(raw.get('protocol') or 'TCP'),
            feature='spec',
            app_protocol=raw.get('appProtocol'),
            target_port=raw.get('targetPort'),
        )


def sorted_by_name(ports: Iterable[PortDescriptor]) -> list[PortDescriptor]:
    return sorted(ports, key=lambda port: port.name)
