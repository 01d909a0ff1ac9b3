# tests/integration_host_test/test_static_provisioner.py
import pytest

from integration.host.config import HostConfig
from integration.host.errors import ConfigurationError, ProvisioningError
from integration.host.provisioner import ProvisionerRegistry, StaticProvisioner, provisioner_registry
from integration.host.request import TestEnvironmentRequest

from fakes import RecordingProvisioner


@pytest.fixture
def static_provisioner(static_databases):
    return StaticProvisioner(HostConfig(databases=static_databases))


def test_provision_from_configured_endpoints(static_provisioner):
    request = TestEnvironmentRequest(engine="mysql", deployment="aurora", num_instances=2,
                                     region="us-west-2", engine_version="8.0")

    info = static_provisioner.provision(request)

    assert info.request is request
    assert info.region == "us-west-2"
    assert info.engine_version == "8.0"
    assert info.database_info.username == "admin"
    assert [i.instance_id for i in info.database_info.instances] == ["instance-1", "instance-2"]
    assert info.random_base


def test_instances_are_trimmed_to_request(static_provisioner, mysql_aurora_request):
    info = static_provisioner.provision(mysql_aurora_request)
    assert [i.instance_id for i in info.database_info.instances] == ["instance-1"]


def test_each_provision_gets_a_fresh_random_base(static_provisioner, mysql_aurora_request):
    first = static_provisioner.provision(mysql_aurora_request)
    second = static_provisioner.provision(mysql_aurora_request)
    assert first.random_base != second.random_base


def test_missing_entry_fails(static_provisioner):
    with pytest.raises(ProvisioningError, match="aurora-limitless"):
        static_provisioner.provision(TestEnvironmentRequest(engine="pg", deployment="aurora-limitless"))


def test_too_few_instances_fails(static_provisioner):
    request = TestEnvironmentRequest(engine="mysql", deployment="aurora", num_instances=3)
    with pytest.raises(ProvisioningError, match="2 instance"):
        static_provisioner.provision(request)


def test_invalid_entry_fails(mysql_aurora_request):
    provisioner = StaticProvisioner(HostConfig(databases={'mysql': {'aurora': {'password': 'secret'}}}))
    with pytest.raises(ProvisioningError, match="Invalid database configuration"):
        provisioner.provision(mysql_aurora_request)


def test_deprovision_is_a_no_op(static_provisioner, mysql_aurora_request):
    info = static_provisioner.provision(mysql_aurora_request)
    static_provisioner.deprovision(info)
    static_provisioner.deprovision(info)


def test_default_registry_creates_static_provisioner():
    assert "static" in provisioner_registry.names()
    assert isinstance(provisioner_registry.create(HostConfig()), StaticProvisioner)


def test_registry_selects_configured_provisioner():
    registry = ProvisionerRegistry()
    registry.register("recording", RecordingProvisioner)
    config = HostConfig(provisioner="recording")

    provisioner = registry.create(config)

    assert isinstance(provisioner, RecordingProvisioner)
    assert provisioner.config is config


def test_registry_rejects_unknown_names():
    with pytest.raises(ConfigurationError, match="Unknown provisioner"):
        ProvisionerRegistry().get("terraform")


def test_registry_rejects_non_provisioners():
    with pytest.raises(TypeError):
        ProvisionerRegistry().register("broken", dict)


def test_engine_default_port_fills_missing_ports():
    databases = {'pg': {'multi-az-instance': {
        'username': 'postgres',
        'instances': [{'instance_id': 'instance-1', 'host': 'instance-1.example.com'}],
    }}}
    provisioner = StaticProvisioner(HostConfig(databases=databases))

    info = provisioner.provision(TestEnvironmentRequest(engine="pg", deployment="multi-az-instance"))

    assert info.database_info.instances[0].port == 5432


def test_request_without_deployment_is_rejected(static_provisioner):
    with pytest.raises(ProvisioningError, match="names no deployment"):
        static_provisioner.provision(TestEnvironmentRequest(engine="mysql"))
