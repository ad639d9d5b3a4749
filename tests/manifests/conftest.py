import copy
import json

import pytest

from cwoperator._cogs.structs.specs import parse_agent
from cwoperator._core.manifests.params import make_params

OTLP_CONFIG = json.dumps({'traces': {'traces_collected': {'otlp': {}}}})


@pytest.fixture()
def params_factory(body, settings, logger):
    """ Build the params of the custom resource with some fields of the spec overridden. """
    def factory(**spec):
        agent_body = copy.deepcopy(body)
        agent_body['spec'].update(spec)
        return make_params(parse_agent(agent_body), settings=settings, logger=logger)
    return factory


@pytest.fixture()
def params(params_factory):
    return params_factory(config=OTLP_CONFIG)


@pytest.fixture()
def openshift(settings):
    settings.reconciling.openshift_routes = True
    return settings
