import json

import pytest

from cwoperator._cogs.structs.specs import Mode
from cwoperator._core.manifests import autoscaling, workloads
from cwoperator._core.manifests.building import build, build_agent, builders_for

OTLP_CONFIG = json.dumps({'traces': {'traces_collected': {'otlp': {}}}})


def _kinds_and_names(objs):
    return [(obj['kind'], obj['metadata']['name']) for obj in objs]


def test_minimal_deployment(params_factory):
    objs = build(params_factory())
    assert _kinds_and_names(objs) == [
        ('Deployment', 'agent'),
        ('ConfigMap', 'agent'),
        ('ServiceAccount', 'agent'),
        ('Service', 'agent-monitoring'),
    ]


def test_deployment_with_ports(params_factory):
    objs = build(params_factory(config=OTLP_CONFIG))
    assert _kinds_and_names(objs) == [
        ('Deployment', 'agent'),
        ('ConfigMap', 'agent'),
        ('ServiceAccount', 'agent'),
        ('Service', 'agent'),
        ('Service', 'agent-headless'),
        ('Service', 'agent-monitoring'),
    ]


def test_everything_in_order(params_factory, settings):
    objs = build(params_factory(
        config=OTLP_CONFIG,
        otelConfig='receivers: {}\n',
        autoscaler={'maxReplicas': 3},
        podDisruptionBudget={'maxUnavailable': 1},
        ingress={'type': 'ingress'},
    ))
    assert [obj['kind'] for obj in objs] == [
        'Deployment',
        'PodDisruptionBudget',
        'ConfigMap',
        'ConfigMap',
        'HorizontalPodAutoscaler',
        'ServiceAccount',
        'Service',
        'Service',
        'Service',
        'Ingress',
    ]


def test_routes_are_the_last(params_factory, openshift):
    objs = build(params_factory(config=OTLP_CONFIG, ingress={'type': 'route'}))
    assert [obj['kind'] for obj in objs][-2:] == ['Route', 'Route']
    assert 'Ingress' not in [obj['kind'] for obj in objs]


def test_routes_are_not_built_off_openshift(params_factory):
    objs = build(params_factory(config=OTLP_CONFIG, ingress={'type': 'route'}))
    assert 'Route' not in [obj['kind'] for obj in objs]


@pytest.mark.parametrize('mode, kind', [
    ('deployment', 'Deployment'),
    ('statefulset', 'StatefulSet'),
    ('daemonset', 'DaemonSet'),
])
def test_workload_by_mode(params_factory, mode, kind):
    objs = build(params_factory(mode=mode))
    assert objs[0]['kind'] == kind
    assert objs[0]['apiVersion'] == 'apps/v1'


def test_sidecar_has_no_workload(params_factory):
    objs = build(params_factory(mode='sidecar', config=OTLP_CONFIG, podDisruptionBudget={'minAvailable': 1}))
    kinds = [obj['kind'] for obj in objs]
    assert not {'Deployment', 'StatefulSet', 'DaemonSet', 'PodDisruptionBudget'} & set(kinds)
    assert 'ConfigMap' in kinds


def test_daemonset_has_no_disruption_budget(params_factory):
    objs = build(params_factory(mode='daemonset', podDisruptionBudget={'minAvailable': 1}))
    assert 'PodDisruptionBudget' not in [obj['kind'] for obj in objs]


def test_builders_for_modes():
    assert builders_for(Mode.DEPLOYMENT)[:2] == [workloads.deployment, autoscaling.disruption_budget]
    assert builders_for(Mode.STATEFULSET)[:2] == [workloads.statefulset, autoscaling.disruption_budget]
    assert builders_for(Mode.DAEMONSET)[0] == workloads.daemonset
    assert autoscaling.disruption_budget not in builders_for(Mode.DAEMONSET)
    assert workloads.deployment not in builders_for(Mode.SIDECAR)


def test_building_is_idempotent(body, settings, logger):
    body['spec'] = {'config': OTLP_CONFIG, 'autoscaler': {'maxReplicas': 3}, 'ingress': {'type': 'ingress'}}
    objs1 = build_agent(body, settings=settings, logger=logger)
    objs2 = build_agent(body, settings=settings, logger=logger)
    assert objs1 == objs2
    assert json.dumps(objs1) == json.dumps(objs2)


def test_body_is_not_modified(body, settings, logger):
    body['spec'] = {'config': OTLP_CONFIG, 'env': [{'name': 'A', 'value': 'a'}]}
    before = json.dumps(body, sort_keys=True)
    build_agent(body, settings=settings, logger=logger)
    assert json.dumps(body, sort_keys=True) == before


def test_all_objects_are_namespaced_and_labelled(params_factory):
    objs = build(params_factory(config=OTLP_CONFIG, ingress={'type': 'route'}))
    for obj in objs:
        assert obj['metadata']['namespace'] == 'ns'
        assert obj['metadata']['labels']['app.kubernetes.io/managed-by'] == 'amazon-cloudwatch-agent-operator'
        assert obj['metadata']['labels']['app.kubernetes.io/instance'] == 'ns.agent'
