import aiohttp.web
import pytest

from cwoperator._cogs.clients.creating import create_obj
from cwoperator._cogs.clients.deleting import delete_obj
from cwoperator._cogs.clients.errors import APIConflictError
from cwoperator._cogs.clients.patching import patch_status
from cwoperator._cogs.clients.replacing import replace_obj
from cwoperator._cogs.structs.references import AGENTS


@pytest.fixture()
def obj():
    return {'apiVersion': 'v1', 'kind': 'ConfigMap', 'metadata': {'name': 'cm', 'namespace': 'ns'}}


async def test_create(resp_mocker, aresponses, hostname, resource, settings, logger, obj):
    post_mock = resp_mocker(return_value=aiohttp.web.json_response({**obj, 'x': 'y'}))
    aresponses.add(hostname, resource.get_url(namespace='ns'), 'post', post_mock)

    created = await create_obj(resource=resource, body=obj, settings=settings, logger=logger)
    assert created == {**obj, 'x': 'y'}
    assert post_mock.payloads == [obj]


async def test_create_when_exists(resp_mocker, aresponses, hostname, resource, settings, logger, obj):
    post_mock = resp_mocker(return_value=aresponses.Response(status=409))
    aresponses.add(hostname, resource.get_url(namespace='ns'), 'post', post_mock)

    with pytest.raises(APIConflictError):
        await create_obj(resource=resource, body=obj, settings=settings, logger=logger)


async def test_replace(resp_mocker, aresponses, hostname, resource, settings, logger, obj):
    put_mock = resp_mocker(return_value=aiohttp.web.json_response(obj))
    aresponses.add(hostname, resource.get_url(namespace='ns', name='cm'), 'put', put_mock)

    replaced = await replace_obj(resource=resource, body=obj, settings=settings, logger=logger)
    assert replaced == obj
    assert put_mock.payloads == [obj]


async def test_delete(resp_mocker, aresponses, hostname, resource, settings, logger):
    delete_mock = resp_mocker(return_value=aiohttp.web.json_response({}))
    aresponses.add(hostname, resource.get_url(namespace='ns', name='cm'), 'delete', delete_mock)

    existed = await delete_obj(resource=resource, namespace='ns', name='cm', settings=settings, logger=logger)
    assert existed is True
    assert delete_mock.payloads == [{'propagationPolicy': 'Background'}]


async def test_delete_when_absent(resp_mocker, aresponses, hostname, resource, settings, logger):
    delete_mock = resp_mocker(return_value=aresponses.Response(status=404))
    aresponses.add(hostname, resource.get_url(namespace='ns', name='cm'), 'delete', delete_mock)

    existed = await delete_obj(resource=resource, namespace='ns', name='cm', settings=settings, logger=logger)
    assert existed is False


async def test_patch_status_via_the_subresource(resp_mocker, aresponses, hostname, settings, logger):
    patch_mock = resp_mocker(return_value=aiohttp.web.json_response({'status': {'x': 'y'}}))
    aresponses.add(hostname, AGENTS.get_url(namespace='ns', name='agent', subresource='status'), 'patch', patch_mock)

    patched = await patch_status(resource=AGENTS, namespace='ns', name='agent', status={'x': 'y'},
                                 settings=settings, logger=logger)
    assert patched == {'status': {'x': 'y'}}
    assert patch_mock.payloads == [{'status': {'x': 'y'}}]
    request = patch_mock.call_args[0][0]
    assert request.headers['Content-Type'] == 'application/merge-patch+json'


async def test_patch_status_when_absent(resp_mocker, aresponses, hostname, settings, logger):
    patch_mock = resp_mocker(return_value=aresponses.Response(status=404))
    aresponses.add(hostname, AGENTS.get_url(namespace='ns', name='agent', subresource='status'), 'patch', patch_mock)

    patched = await patch_status(resource=AGENTS, namespace='ns', name='agent', status={'x': 'y'},
                                 settings=settings, logger=logger)
    assert patched is None
