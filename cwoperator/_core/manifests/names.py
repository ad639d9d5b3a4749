"""
Names of the generated objects, derived from the custom resource's name.

All names are valid DNS labels of at most 63 characters, and the suffixes
(e.g. ``-headless``) are preserved when the custom resource's name is long.
"""
from cwoperator._cogs.helpers import naming

CONTAINER = 'otc-container'
CONFIG_VOLUME = 'otc-internal'
CONFIG_ENTRY = 'cwagentconfig.json'
OTEL_CONFIG_ENTRY = 'cwagentotelconfig.yaml'


def _name(template: str, *values: str) -> str:
    return naming.dns_name(naming.truncate(template, naming.DNS_LABEL_MAX_LENGTH, *values))


def workload(agent_name: str) -> str:
    return _name('%s', agent_name)


def config_map(agent_name: str) -> str:
    return _name('%s', agent_name)


def otel_config_map(agent_name: str) -> str:
    return _name('%s-otel', agent_name)


def service_account(agent_name: str) -> str:
    return _name('%s', agent_name)


def service(agent_name: str) -> str:
    return _name('%s', agent_name)


def headless_service(agent_name: str) -> str:
    return _name('%s-headless', service(agent_name))


def monitoring_service(agent_name: str) -> str:
    return _name('%s-monitoring', service(agent_name))


def ingress(agent_name: str) -> str:
    return _name('%s-ingress', agent_name)


def route(agent_name: str, port_name: str) -> str:
    return _name('%s-%s-route', port_name, agent_name)


def autoscaler(agent_name: str) -> str:
    return _name('%s', agent_name)


def disruption_budget(agent_name: str) -> str:
    return _name('%s', agent_name)
