import dataclasses

import pytest

from kubeclient.clients.errors import APINotFoundError, ConfigError
from kubeclient.clients.resources import ScalableResourceClient
from kubeclient.structs.bodies import Deployment, Scale


async def test_scale_deployment(fake_api, k8s):
    fake_api.add('put', '/apis/apps/v1/namespaces/ns1/deployments/web/scale', json={
        'apiVersion': 'autoscaling/v1',
        'kind': 'Scale',
        'metadata': {'name': 'web', 'namespace': 'ns1'},
        'spec': {'replicas': 3},
        'status': {'replicas': 1},
    })
    scale = await k8s.namespace('ns1').deployments().scale('web', 3)

    assert isinstance(scale, Scale)
    assert scale.replicas == 3
    assert scale.observed_replicas == 1
    assert fake_api.requests[0].method == 'PUT'
    assert fake_api.requests[0].data == {
        'apiVersion': 'autoscaling/v1',
        'kind': 'Scale',
        'metadata': {'name': 'web', 'namespace': 'ns1'},
        'spec': {'replicas': 3},
    }


async def test_scale_stateful_set_in_the_default_namespace(fake_api, k8s):
    fake_api.add('put', '/apis/apps/v1/namespaces/default/statefulsets/db/scale', json={})
    await k8s.stateful_sets().scale('db', 0)
    assert fake_api.requests[0].data['metadata'] == {'name': 'db', 'namespace': 'default'}
    assert fake_api.requests[0].data['spec'] == {'replicas': 0}


async def test_scale_of_a_missing_resource(fake_api, k8s):
    with pytest.raises(APINotFoundError):
        await k8s.deployments().scale('web', 3)


async def test_scale_without_a_namespace(fake_api, k8s, mocker):
    descriptor = dataclasses.replace(Deployment.descriptor(), default_namespace=None)
    mocker.patch.object(Deployment, 'descriptor', return_value=descriptor)
    client = ScalableResourceClient(cls=Deployment, context=k8s.context, settings=k8s.settings)

    with pytest.raises(ConfigError):
        await client.scale('web', 3)
    assert not fake_api.requests
