"""
The inputs of the builders, resolved once per pass.
"""
import dataclasses
import re
from typing import Any

from cwoperator._cogs.configs import configuration
from cwoperator._cogs.helpers import typedefs
from cwoperator._cogs.structs import specs
from cwoperator._cogs.structs.ports import PortDescriptor
from cwoperator._core.manifests import labels
from cwoperator._core.resolving import ports as resolving

# A generated object: a plain JSON-like dict, ready to be sent to K8s API.
Manifest = dict[str, Any]


@dataclasses.dataclass(frozen=True)
class Params:
    """
    Everything the builders need: the custom resource, its ports, the settings.

    The ports are resolved once and shared by the container & the services,
    so that they always expose the same ports.
    """
    agent: specs.Agent
    ports: tuple[PortDescriptor, ...]
    metrics_port: int
    settings: configuration.OperatorSettings
    logger: typedefs.Logger

    @property
    def image(self) -> str:
        return self.agent.spec.image or self.settings.manifests.agent_image

    @property
    def label_patterns(self) -> list[re.Pattern[str]]:
        return self.settings.filtering.label_patterns

    @property
    def annotation_patterns(self) -> list[re.Pattern[str]]:
        return self.settings.filtering.annotation_patterns

    def labels(self, name: str) -> dict[str, str]:
        return labels.labels(self.agent, name, image=self.image, patterns=self.label_patterns)

    def annotations(self) -> dict[str, str]:
        return labels.annotations(self.agent, patterns=self.annotation_patterns)

    def metadata(self, name: str) -> dict[str, Any]:
        return {
            'name': name,
            'namespace': self.agent.namespace,
            'labels': self.labels(name),
            'annotations': self.annotations(),
        }


def make_params(
        agent: specs.Agent,
        *,
        settings: configuration.OperatorSettings,
        logger: typedefs.Logger,
) -> Params:
    return Params(
        agent=agent,
        ports=tuple(resolving.resolve_ports(agent.spec, logger=logger)),
        metrics_port=resolving.resolve_metrics_port(agent.spec, logger=logger),
        settings=settings,
        logger=logger,
    )
