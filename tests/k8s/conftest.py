import pytest

from cwoperator._cogs.structs.references import CONFIGMAPS


@pytest.fixture(autouse=True)
def _enforced_api_server(enforced_context):
    pass


@pytest.fixture()
def resource():
    """ The resource used in the tests. Usually mocked, so it does not matter. """
    return CONFIGMAPS
