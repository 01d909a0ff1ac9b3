# tests/integration_host_test/conftest.py
"""Pytest configuration for the integration host unit tests"""
import logging
import os

import pytest

from integration.host.config import HostConfig
from integration.host.environment import TestEnvironmentConfig
from integration.host.request import TestEnvironmentRequest

from fakes import RecordingProvisioner, RecordingSuiteRunner

# Configure logging for tests
logging.basicConfig(level=logging.INFO)


@pytest.fixture(autouse=True)
def _clean_host_environment(monkeypatch):
    """Keep the developer's host settings out of the tests."""
    monkeypatch.delenv("INTEGRATION_HOST_CONFIG_PATH", raising=False)
    for name in ("TEST_REGION", "TEST_PROVISIONER", "TEST_SUITE_COMMAND"):
        monkeypatch.delenv(name, raising=False)
    for name in list(os.environ):
        if name.startswith("TEST_NO_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def host_config():
    return HostConfig(region="us-east-1")


@pytest.fixture
def provisioner(host_config):
    return RecordingProvisioner(host_config)


@pytest.fixture
def runner():
    return RecordingSuiteRunner()


@pytest.fixture
def environment_factory(host_config, provisioner, runner):
    """Factory the dispatcher uses to build environments from the recording fakes."""
    def build(request):
        return TestEnvironmentConfig.build(request, host_config, provisioner=provisioner, runner=runner)
    return build


@pytest.fixture
def mysql_aurora_request():
    return TestEnvironmentRequest.from_dict({
        'engine': 'mysql',
        'deployment': 'aurora',
        'region': 'us-east-1',
    })


@pytest.fixture
def static_databases():
    """A ``databases`` config section describing a two-instance Aurora MySQL cluster."""
    return {
        'mysql': {
            'aurora': {
                'username': 'admin',
                'password': 'secret',
                'database': 'test',
                'cluster_endpoint': 'test-cluster.cluster-xyz.us-east-1.rds.amazonaws.com',
                'cluster_endpoint_port': 3306,
                'instance_endpoint_suffix': 'xyz.us-east-1.rds.amazonaws.com',
                'instance_endpoint_port': 3306,
                'instances': [
                    {'instance_id': 'instance-1', 'host': 'instance-1.xyz.us-east-1.rds.amazonaws.com'},
                    {'instance_id': 'instance-2', 'host': 'instance-2.xyz.us-east-1.rds.amazonaws.com'},
                ],
            },
        },
    }
