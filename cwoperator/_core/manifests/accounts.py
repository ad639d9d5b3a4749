from cwoperator._cogs.structs import specs
from cwoperator._core.manifests import names
from cwoperator._core.manifests.params import Manifest, Params


def service_account_name(agent: specs.Agent) -> str:
    """ The account of the pods: either the user-provided one, or the generated one. """
    return agent.spec.service_account or names.service_account(agent.name)


def service_account(params: Params) -> Manifest | None:
    if params.agent.spec.service_account:
        return None
    name = names.service_account(params.agent.name)
    return {
        'apiVersion': 'v1',
        'kind': 'ServiceAccount',
        'metadata': params.metadata(name),
    }
