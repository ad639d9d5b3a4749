"""
Services of the agent: the main one, the headless one, and the monitoring one.

The cluster IPs are never set here: they are allocated by K8s on creation,
and then retained from the existing objects on every update.
"""
from cwoperator._cogs.structs import specs
from cwoperator._core.manifests import labels, names
from cwoperator._core.manifests.params import Manifest, Params

HEADLESS_LABEL = 'operator.opentelemetry.io/collector-headless-service'
HEADLESS_EXISTS = 'Exists'
SERVING_CERT_ANNOTATION = 'service.beta.openshift.io/serving-cert-secret-name'


def service(params: Params) -> Manifest | None:
    if not params.ports:
        params.logger.debug("The agent's configs yield no ports to expose; skipping the services.")
        return None

    traffic_policy = 'Local' if params.agent.spec.mode == specs.Mode.DAEMONSET else 'Cluster'
    name = names.service(params.agent.name)
    return {
        'apiVersion': 'v1',
        'kind': 'Service',
        'metadata': params.metadata(name),
        'spec': {
            'internalTrafficPolicy': traffic_policy,
            'selector': labels.selector_labels(params.agent),
            'ports': [port.as_service_port() for port in params.ports],
        },
    }


def headless_service(params: Params) -> Manifest | None:
    """
    The same service, but headless: to resolve the individual pods via DNS.
    """
    obj = service(params)
    if obj is None:
        return None

    name = names.headless_service(params.agent.name)
    meta = params.metadata(name)
    meta['labels'] = dict(sorted((meta['labels'] | {HEADLESS_LABEL: HEADLESS_EXISTS}).items()))
    meta['annotations'] = dict(sorted(({SERVING_CERT_ANNOTATION: f'{name}-tls'} | meta['annotations']).items()))
    obj['metadata'] = meta
    obj['spec']['clusterIP'] = 'None'
    return obj


def monitoring_service(params: Params) -> Manifest | None:
    """ The service for scraping the agent's own metrics. Exists even with no other ports. """
    name = names.monitoring_service(params.agent.name)
    return {
        'apiVersion': 'v1',
        'kind': 'Service',
        'metadata': params.metadata(name),
        'spec': {
            'selector': labels.selector_labels(params.agent),
            'ports': [{'name': 'monitoring', 'port': params.metrics_port, 'protocol': 'TCP'}],
        },
    }
