import pytest


@pytest.fixture()
def read_obj(mocker):
    return mocker.patch('cwoperator._cogs.clients.fetching.read_obj', return_value=None)


@pytest.fixture()
def list_objs(mocker):
    return mocker.patch('cwoperator._cogs.clients.fetching.list_objs', return_value=([], None))


@pytest.fixture()
def create_obj(mocker):
    async def created(*, body, **_):
        return {**body, 'metadata': {**body['metadata'], 'uid': f"uid-{body['metadata']['name']}"}}
    return mocker.patch('cwoperator._cogs.clients.creating.create_obj', side_effect=created)


@pytest.fixture()
def replace_obj(mocker):
    async def replaced(*, body, **_):
        return body
    return mocker.patch('cwoperator._cogs.clients.replacing.replace_obj', side_effect=replaced)


@pytest.fixture()
def delete_obj(mocker):
    return mocker.patch('cwoperator._cogs.clients.deleting.delete_obj', return_value=True)


@pytest.fixture()
def patch_status(mocker):
    return mocker.patch('cwoperator._cogs.clients.patching.patch_status', return_value={})


@pytest.fixture()
def post_event(mocker):
    return mocker.patch('cwoperator._cogs.clients.events.post_event')


@pytest.fixture()
def configmap():
    return {
        'apiVersion': 'v1',
        'kind': 'ConfigMap',
        'metadata': {'name': 'agent', 'namespace': 'ns', 'labels': {'a': '1'}},
        'data': {'cwagentconfig.json': '{}'},
    }
