from cwoperator._core.manifests import names
from cwoperator._core.manifests.params import Manifest, Params


def config_map(params: Params) -> Manifest | None:
    name = names.config_map(params.agent.name)
    return {
        'apiVersion': 'v1',
        'kind': 'ConfigMap',
        'metadata': params.metadata(name),
        'data': {names.CONFIG_ENTRY: params.agent.spec.config},
    }


def otel_config_map(params: Params) -> Manifest | None:
    """ The collector's config, if the custom resource has one. """
    if not params.agent.spec.otel_config:
        return None
    name = names.otel_config_map(params.agent.name)
    return {
        'apiVersion': 'v1',
        'kind': 'ConfigMap',
        'metadata': params.metadata(name),
        'data': {names.OTEL_CONFIG_ENTRY: params.agent.spec.otel_config},
    }
