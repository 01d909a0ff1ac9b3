# src/integration/host/plugin.py
"""pytest plugin exposing scenario entry points.

Loaded through the ``pytest11`` entry point. A scenario entry point is a test
marked with ``@pytest.mark.integration_host("<scenario>")`` that takes the
``test_environment_request`` argument; it is parameterized with every request
the provider generates for that scenario:

    @pytest.mark.integration_host("mysql-aurora")
    def test_mysql_aurora(scenario_dispatcher, test_environment_request):
        scenario_dispatcher.run(test_environment_request, get_scenario("mysql-aurora"))

Host scenarios provision real infrastructure, so they only run when pytest is
invoked with ``--integration-host``.
"""
from pathlib import Path

import pytest

from .config import HostConfig, load_config
from .dispatcher import ScenarioDispatcher
from .provider import TestEnvironmentProvider, request_ids
from .scenarios import get_scenario

MARKER = "integration_host"
REQUEST_ARGUMENT = "test_environment_request"


def pytest_addoption(parser):
    group = parser.getgroup("integration-host")
    group.addoption(
        "--integration-host",
        action="store_true",
        default=False,
        help="run integration host scenarios against provisioned environments",
    )
    group.addoption(
        "--integration-host-config",
        default=None,
        help="integration host configuration file",
    )


def pytest_configure(config):
    config.addinivalue_line("markers", f"{MARKER}(scenario): integration host scenario entry point")


def _host_config(config) -> HostConfig:
    cached = getattr(config, "_integration_host_config", None)
    if cached is None:
        path = config.getoption("--integration-host-config")
        cached = load_config(Path(path) if path else None)
        config._integration_host_config = cached
    return cached


def pytest_generate_tests(metafunc):
    if REQUEST_ARGUMENT not in metafunc.fixturenames:
        return
    marker = metafunc.definition.get_closest_marker(MARKER)
    if marker is None or not marker.args:
        raise pytest.UsageError(
            f"{metafunc.definition.nodeid} takes {REQUEST_ARGUMENT} but has no {MARKER}(scenario) marker")

    if not metafunc.config.getoption("--integration-host"):
        metafunc.parametrize(
            REQUEST_ARGUMENT,
            [pytest.param(None, marks=pytest.mark.skip(reason="needs --integration-host"))],
            ids=["disabled"],
        )
        return

    scenario = get_scenario(marker.args[0])
    requests = TestEnvironmentProvider(_host_config(metafunc.config)).requests_for(scenario)
    metafunc.parametrize(REQUEST_ARGUMENT, requests, ids=request_ids(requests))


@pytest.fixture(scope="session")
def integration_host_config(pytestconfig) -> HostConfig:
    return _host_config(pytestconfig)


@pytest.fixture
def scenario_dispatcher(integration_host_config) -> ScenarioDispatcher:
    return ScenarioDispatcher(integration_host_config)
