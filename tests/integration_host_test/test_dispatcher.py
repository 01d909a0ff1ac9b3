# tests/integration_host_test/test_dispatcher.py
import warnings

import pytest

from integration.host.dispatcher import PHASE_PROVISIONING, PHASE_SUITE, ScenarioDispatcher
from integration.host.environment import TestEnvironmentConfig
from integration.host.errors import (
    InvalidScenarioCombinationError,
    ProvisioningError,
    ReleaseWarning,
    SuiteFailure,
)
from integration.host.request import TestEnvironmentRequest
from integration.host.scenarios import DEBUG_SCENARIO, ENGINE_SCENARIOS, get_scenario
from integration.host.types import DatabaseEngineDeployment

from fakes import RecordingProvisioner, RecordingSuiteRunner


def _request(engine, deployment, **kwargs):
    return TestEnvironmentRequest(engine=engine, deployment=deployment, **kwargs)


def _dispatcher(host_config, provisioner, runner):
    def build(request):
        return TestEnvironmentConfig.build(request, host_config, provisioner=provisioner, runner=runner)
    return ScenarioDispatcher(host_config, environment_factory=build)


def test_mysql_aurora_end_to_end(host_config, provisioner, runner, environment_factory, mysql_aurora_request):
    dispatcher = ScenarioDispatcher(host_config, environment_factory=environment_factory)

    result = dispatcher.dispatch(mysql_aurora_request, get_scenario("mysql-aurora"))

    assert result.passed
    assert result.error is None
    assert result.release_error is None
    assert provisioner.provisioned == [mysql_aurora_request]
    assert runner.runs == [("mysql", "aurora")]
    assert len(provisioner.released) == 1
    assert provisioner.outstanding == 0


def test_provisioning_failure_for_aurora_limitless(host_config, runner):
    provisioner = RecordingProvisioner(host_config, fail_for=("aurora-limitless",))
    dispatcher = _dispatcher(host_config, provisioner, runner)
    request = _request("pg", "aurora-limitless", region="us-east-1")

    result = dispatcher.dispatch(request, get_scenario("pg-aurora-limitless"))

    assert not result.passed
    assert result.phase == PHASE_PROVISIONING
    assert isinstance(result.error, ProvisioningError)
    assert runner.runs == []
    assert provisioner.outstanding == 0


def test_debug_scenario_ignores_request_engine(host_config, provisioner, runner):
    dispatcher = _dispatcher(host_config, provisioner, runner)

    for engine in ("mysql", "pg", "mariadb"):
        result = dispatcher.dispatch(_request(engine, "docker"), DEBUG_SCENARIO)
        assert result.passed

    assert runner.debug_runs == ["in-container"] * 3
    assert runner.runs == []
    assert provisioner.outstanding == 0


@pytest.mark.parametrize("scenario", ENGINE_SCENARIOS, ids=lambda s: s.name)
def test_every_scenario_acquires_and_releases_once(host_config, scenario):
    provisioner = RecordingProvisioner(host_config)
    runner = RecordingSuiteRunner(fail_for=(scenario.topology,))
    dispatcher = _dispatcher(host_config, provisioner, runner)
    request = _request(scenario.engine, scenario.deployment)

    result = dispatcher.dispatch(request, scenario)

    assert not result.passed
    assert result.phase == PHASE_SUITE
    assert len(provisioner.provisioned) == 1
    assert len(provisioner.released) == 1
    assert runner.runs == [(scenario.driver_family, scenario.topology)]


def test_unexpected_suite_error_still_releases(host_config, provisioner, mysql_aurora_request):
    runner = RecordingSuiteRunner(crash_for=("aurora",))
    dispatcher = _dispatcher(host_config, provisioner, runner)

    with pytest.raises(RuntimeError, match="connection reset"):
        dispatcher.run(mysql_aurora_request, get_scenario("mysql-aurora"))

    assert provisioner.outstanding == 0


def test_mismatched_request_is_a_provisioning_failure(host_config, provisioner, runner):
    dispatcher = _dispatcher(host_config, provisioner, runner)
    request = _request("pg", "multi-az-instance")

    result = dispatcher.dispatch(request, get_scenario("mysql-aurora"))

    assert result.phase == PHASE_PROVISIONING
    assert isinstance(result.error, InvalidScenarioCombinationError)
    assert provisioner.provisioned == []
    assert runner.runs == []


def test_unexpected_factory_error_is_wrapped(host_config, mysql_aurora_request):
    def broken_factory(request):
        raise OSError("quota exceeded")

    dispatcher = ScenarioDispatcher(host_config, environment_factory=broken_factory)

    with pytest.raises(ProvisioningError, match="quota exceeded"):
        dispatcher.acquire(mysql_aurora_request, get_scenario("mysql-aurora"))


def test_run_reraises_suite_failure(host_config, provisioner, mysql_aurora_request):
    runner = RecordingSuiteRunner(fail_for=("aurora",))
    dispatcher = _dispatcher(host_config, provisioner, runner)

    with pytest.raises(SuiteFailure) as excinfo:
        dispatcher.run(mysql_aurora_request, get_scenario("mysql-aurora"))

    assert excinfo.value.returncode == 1
    assert provisioner.outstanding == 0


def test_release_failure_does_not_mask_suite_failure(host_config, mysql_aurora_request):
    provisioner = RecordingProvisioner(host_config, fail_release=True)
    runner = RecordingSuiteRunner(fail_for=("aurora",))
    dispatcher = _dispatcher(host_config, provisioner, runner)

    result = dispatcher.dispatch(mysql_aurora_request, get_scenario("mysql-aurora"))

    assert isinstance(result.error, SuiteFailure)
    assert result.release_error is not None
    assert "release failed" in result.summary


def test_release_failure_on_passing_run_warns(host_config, runner, mysql_aurora_request):
    provisioner = RecordingProvisioner(host_config, fail_release=True)
    dispatcher = _dispatcher(host_config, provisioner, runner)

    with pytest.warns(ReleaseWarning):
        result = dispatcher.run(mysql_aurora_request, get_scenario("mysql-aurora"))

    assert result.passed
    assert len(provisioner.released) == 1


def test_scenarios_are_order_independent(host_config):
    mysql = (_request("mysql", "aurora"), get_scenario("mysql-aurora"))
    pg = (_request("pg", "multi-az-cluster", num_instances=3), get_scenario("pg-multi-az-cluster"))

    def outcomes(pairs):
        provisioner = RecordingProvisioner(host_config)
        runner = RecordingSuiteRunner(fail_for=("multi-az-cluster",))
        results = _dispatcher(host_config, provisioner, runner).run_all(pairs)
        assert provisioner.outstanding == 0
        return {r.scenario.name: (r.passed, r.phase) for r in results}

    assert outcomes([mysql, pg]) == outcomes([pg, mysql])


def test_run_all_continues_after_failures(host_config):
    provisioner = RecordingProvisioner(host_config, fail_for=("aurora-limitless",))
    runner = RecordingSuiteRunner()
    dispatcher = _dispatcher(host_config, provisioner, runner)

    results = dispatcher.run_all([
        (_request("pg", "aurora-limitless"), get_scenario("pg-aurora-limitless")),
        (_request("pg", "aurora"), get_scenario("pg-aurora")),
    ])

    assert [r.passed for r in results] == [False, True]
    assert runner.runs == [("pg", "aurora")]


def test_passing_run_emits_no_warning(host_config, provisioner, runner, mysql_aurora_request):
    dispatcher = _dispatcher(host_config, provisioner, runner)

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        result = dispatcher.run(mysql_aurora_request, get_scenario("mysql-aurora"))

    assert result.passed
    assert result.summary.startswith("PASS mysql-aurora")


def test_request_without_deployment_takes_the_scenarios(host_config, provisioner, runner):
    """{engine: mysql, region: us-east-1} runs on the Aurora environment of mysql-aurora"""
    dispatcher = _dispatcher(host_config, provisioner, runner)
    request = TestEnvironmentRequest.from_dict({'engine': 'mysql', 'region': 'us-east-1'})

    result = dispatcher.dispatch(request, get_scenario("mysql-aurora"))

    assert result.passed
    assert provisioner.provisioned[0].deployment is DatabaseEngineDeployment.AURORA
    assert provisioner.provisioned[0].region == "us-east-1"
    assert result.request.deployment is DatabaseEngineDeployment.AURORA
    assert runner.runs == [("mysql", "aurora")]
    assert provisioner.outstanding == 0


def test_request_without_deployment_still_checks_engine(host_config, provisioner, runner):
    dispatcher = _dispatcher(host_config, provisioner, runner)
    request = TestEnvironmentRequest.from_dict({'engine': 'pg', 'region': 'us-east-1'})

    result = dispatcher.dispatch(request, get_scenario("mysql-aurora"))

    assert isinstance(result.error, InvalidScenarioCombinationError)
    assert provisioner.provisioned == []
