"""
External access to the agent's ports: an Ingress, or OpenShift Routes.

Both route to the main service by the port names, one path/host per port.
"""
from cwoperator._cogs.helpers import naming
from cwoperator._cogs.structs import specs
from cwoperator._core.manifests import names
from cwoperator._core.manifests.params import Manifest, Params

ROUTE_TERMINATIONS: dict[str, str | None] = {
    specs.RouteTermination.INSECURE.value: None,
    specs.RouteTermination.EDGE.value: 'edge',
    specs.RouteTermination.PASSTHROUGH.value: 'passthrough',
    specs.RouteTermination.REENCRYPT.value: 'reencrypt',
}


def _backend(params: Params, port_name: str) -> dict[str, object]:
    return {'service': {'name': names.service(params.agent.name), 'port': {'name': port_name}}}


def _metadata(params: Params, name: str) -> dict[str, object]:
    # K8s drops the empty maps on storing, so they would never match the existing object.
    meta: dict[str, object] = {key: val for key, val in params.metadata(name).items() if key != 'annotations'}
    annotations = params.agent.spec.ingress.annotations
    if annotations:
        meta['annotations'] = dict(sorted(annotations.items()))
    return meta


def ingress(params: Params) -> Manifest | None:
    spec = params.agent.spec.ingress
    if spec.type != specs.IngressType.INGRESS:
        return None
    if not params.ports:
        params.logger.debug("The agent's configs yield no ports to expose; skipping the ingress.")
        return None

    rules: list[dict[str, object]]
    match spec.rule_type:
        case specs.IngressRuleType.SUBDOMAIN:
            rules = []
            for port in params.ports:
                port_name = naming.port_name(port.name, port.number)
                host = port_name if spec.hostname in ('', '*') else f'{port_name}.{spec.hostname}'
                rules.append({
                    'host': host,
                    'http': {'paths': [{
                        'path': '/',
                        'pathType': 'Prefix',
                        'backend': _backend(params, port_name),
                    }]},
                })
        case _:
            paths = [
                {
                    'path': f'/{port.name}',
                    'pathType': 'Prefix',
                    'backend': _backend(params, naming.port_name(port.name, port.number)),
                }
                for port in params.ports
            ]
            rule: dict[str, object] = {'http': {'paths': paths}}
            if spec.hostname:
                rule['host'] = spec.hostname
            rules = [rule]

    name = names.ingress(params.agent.name)
    ingress_spec: dict[str, object] = {'rules': rules}
    if spec.tls:
        ingress_spec['tls'] = list(spec.tls)
    if spec.ingress_class_name:
        ingress_spec['ingressClassName'] = spec.ingress_class_name
    return {
        'apiVersion': 'networking.k8s.io/v1',
        'kind': 'Ingress',
        'metadata': _metadata(params, name),
        'spec': ingress_spec,
    }


def routes(params: Params) -> list[Manifest]:
    """
    One route per exposed port, if the custom resource asks for the routes.

    Unknown TLS terminations produce no routes at all rather than insecure ones.
    The routes are built only where they are also pruned, i.e. on OpenShift.
    """
    spec = params.agent.spec.ingress
    if spec.type != specs.IngressType.ROUTE:
        return []
    if not params.settings.reconciling.openshift_routes:
        params.logger.warning("The routes are requested, but the OpenShift routes are not enabled; skipping.")
        return []
    if params.agent.spec.mode == specs.Mode.SIDECAR:
        params.logger.debug("The routes are not supported in the sidecar mode; skipping.")
        return []
    if spec.route_termination not in ROUTE_TERMINATIONS:
        params.logger.warning(f"Unsupported route termination {spec.route_termination!r}; skipping the routes.")
        return []
    if not params.ports:
        params.logger.debug("The agent's configs yield no ports to expose; skipping the routes.")
        return []

    termination = ROUTE_TERMINATIONS[spec.route_termination]
    result: list[Manifest] = []
    for port in params.ports:
        port_name = naming.port_name(port.name, port.number)
        name = names.route(params.agent.name, port.name)
        route_spec: dict[str, object] = {
            'to': {'kind': 'Service', 'name': names.service(params.agent.name)},
            'port': {'targetPort': port_name},
            'wildcardPolicy': 'None',
        }
        if spec.hostname:
            route_spec['host'] = f'{port_name}.{spec.hostname}'
        if termination is not None:
            route_spec['tls'] = {'termination': termination}
        result.append({
            'apiVersion': 'route.openshift.io/v1',
            'kind': 'Route',
            'metadata': _metadata(params, name),
            'spec': route_spec,
        })
    return result
