import json

import pytest
import yaml

from cwoperator._cogs.clients.errors import APIForbiddenError
from cwoperator._cogs.structs.credentials import ConnectionInfo, LoginError
from cwoperator._core.reactor.applying import ApplyOutcome
from cwoperator._core.reactor.errors import ReconciliationError
from cwoperator._core.reactor.mutating import MutationResult
from cwoperator._core.reactor.processing import PassOutcome


@pytest.fixture()
def manifest_path(tmp_path, body):
    agent = {**body, 'spec': {
        'mode': 'deployment',
        'config': json.dumps({'logs': {'metrics_collected': {'emf': {}}}}),
    }}
    other = {'apiVersion': 'v1', 'kind': 'Namespace', 'metadata': {'name': 'ns'}}
    path = tmp_path / 'agent.yaml'
    path.write_text(yaml.safe_dump_all([other, agent]))
    return path


@pytest.fixture()
def login(mocker):
    return mocker.patch('cwoperator._core.intents.piggybacking.login',
                        return_value=ConnectionInfo(server='https://fake-host', default_namespace='ctx-ns'))


@pytest.fixture()
def read_obj(mocker, body):
    return mocker.patch('cwoperator._cogs.clients.fetching.read_obj', return_value=body)


@pytest.fixture()
def reconcile(mocker):
    outcome = PassOutcome(
        applied=ApplyOutcome(results={
            'ConfigMap ns/agent': MutationResult.CREATED,
            'Deployment ns/agent': MutationResult.UNCHANGED,
        }),
        pruned=[{'kind': 'Service', 'metadata': {'name': 'agent-headless'}}],
        health=None,
    )
    return mocker.patch('cwoperator._core.reactor.processing.reconcile', return_value=outcome)


def test_help(invoke):
    result = invoke(['--help'])
    assert result.exit_code == 0
    assert 'render' in result.output
    assert 'reconcile' in result.output


def test_version(invoke):
    result = invoke(['--version'])
    assert result.exit_code == 0
    assert result.output.startswith('cwoperator, version ')


def test_render_prints_the_desired_objects(invoke, manifest_path):
    result = invoke(['render', '-q', str(manifest_path)])
    assert result.exit_code == 0, result.output

    objs = list(yaml.safe_load_all(result.stdout))
    kinds = [obj['kind'] for obj in objs]
    assert kinds[0] == 'Deployment'
    assert 'ConfigMap' in kinds
    assert 'Service' in kinds
    assert 'Namespace' not in kinds

    service = next(obj for obj in objs if obj['kind'] == 'Service' and obj['metadata']['name'] == 'agent')
    assert {'name': 'emf-tcp', 'port': 25888, 'protocol': 'TCP'}.items() <= service['spec']['ports'][0].items()


def test_render_uses_the_agent_image_option(invoke, manifest_path):
    result = invoke(['render', '-q', '--agent-image', 'repo/agent:7.7', str(manifest_path)])
    assert result.exit_code == 0, result.output

    objs = list(yaml.safe_load_all(result.stdout))
    deployment = next(obj for obj in objs if obj['kind'] == 'Deployment')
    assert deployment['spec']['template']['spec']['containers'][0]['image'] == 'repo/agent:7.7'


def test_render_requires_an_existing_file(invoke, tmp_path):
    result = invoke(['render', str(tmp_path / 'absent.yaml')])
    assert result.exit_code == 2


def test_reconcile_prints_the_results(invoke, login, read_obj, reconcile):
    result = invoke(['reconcile', '-q', 'agent', '-n', 'ns'])
    assert result.exit_code == 0, result.output
    assert result.stdout == (
        "ConfigMap ns/agent: created\n"
        "Deployment ns/agent: unchanged\n"
        "Service agent-headless: pruned\n"
    )
    assert read_obj.call_args.kwargs['namespace'] == 'ns'
    assert read_obj.call_args.kwargs['name'] == 'agent'
    assert reconcile.call_args.args[0] is read_obj.return_value


def test_reconcile_uses_the_default_namespace_of_the_context(invoke, login, read_obj, reconcile):
    result = invoke(['reconcile', 'agent'])
    assert result.exit_code == 0, result.output
    assert read_obj.call_args.kwargs['namespace'] == 'ctx-ns'


def test_reconcile_passes_the_settings(invoke, login, read_obj, reconcile):
    result = invoke(['reconcile', 'agent', '--openshift-routes', '--label-filter', 'team.*'])
    assert result.exit_code == 0, result.output
    settings = reconcile.call_args.kwargs['settings']
    assert settings.reconciling.openshift_routes is True
    assert settings.filtering.labels == ('team.*',)


def test_reconcile_of_absent_agents(invoke, login, read_obj, reconcile):
    read_obj.return_value = None
    result = invoke(['reconcile', 'agent', '-n', 'ns'])
    assert result.exit_code == 1
    assert "AmazonCloudWatchAgent ns/agent is not found." in result.output
    assert reconcile.call_count == 0


def test_reconcile_failures(invoke, login, read_obj, reconcile):
    error = APIForbiddenError({'message': 'forbidden'}, status=403)
    reconcile.side_effect = ReconciliationError("Reconciliation has failed.", [error])
    result = invoke(['reconcile', 'agent', '-n', 'ns'])
    assert result.exit_code == 1
    assert "Error: Reconciliation has failed. (403) forbidden" in result.output


def test_login_failures(invoke, login, read_obj, reconcile):
    login.side_effect = LoginError("Cannot authenticate neither in-cluster, nor via kubeconfig.")
    result = invoke(['reconcile', 'agent', '-n', 'ns'])
    assert result.exit_code == 1
    assert "Error: Cannot authenticate" in result.output
    assert read_obj.call_count == 0
