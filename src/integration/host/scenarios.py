# src/integration/host/scenarios.py
"""Integration scenario catalog

Each scenario pairs a driver family with a topology. The catalog is fixed at
import time; the pytest entry points and the CLI look scenarios up by name.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional, Tuple

from .errors import UnknownScenarioError
from .request import TestEnvironmentRequest
from .types import (
    DRIVER_FAMILY_ENGINES,
    IN_CONTAINER_TOPOLOGY,
    PERFORMANCE_FAMILY_SUFFIX,
    TOPOLOGY_DEPLOYMENTS,
    DatabaseEngine,
    DatabaseEngineDeployment,
)


class SuiteKind(str, Enum):
    ENGINE = "engine"
    DIAGNOSTIC = "diagnostic"


@dataclass(frozen=True)
class Scenario:
    """One (driver family, topology) pair under test."""

    driver_family: Optional[str]
    topology: str
    kind: SuiteKind = SuiteKind.ENGINE

    @property
    def name(self) -> str:
        if self.kind is SuiteKind.DIAGNOSTIC:
            return "debug"
        return f"{self.driver_family}-{self.topology}"

    @property
    def is_diagnostic(self) -> bool:
        return self.kind is SuiteKind.DIAGNOSTIC

    @property
    def is_performance(self) -> bool:
        return bool(self.driver_family) and self.driver_family.endswith(PERFORMANCE_FAMILY_SUFFIX)

    @property
    def engine(self) -> Optional[DatabaseEngine]:
        if self.is_diagnostic:
            return None
        prefix = self.driver_family.split("-", 1)[0]
        return DRIVER_FAMILY_ENGINES[prefix]

    @property
    def deployment(self) -> Optional[DatabaseEngineDeployment]:
        return TOPOLOGY_DEPLOYMENTS.get(self.topology)

    def accepts(self, request: TestEnvironmentRequest) -> bool:
        """Whether ``request`` describes an environment this scenario can run on.

        The diagnostic scenario runs on anything; its request's engine is ignored.
        A request without a deployment takes the scenario's own.
        """
        if self.is_diagnostic:
            return True
        if request.deployment is not None and request.deployment != self.deployment:
            return False
        return request.engine == self.engine

    def resolve(self, request: TestEnvironmentRequest) -> TestEnvironmentRequest:
        """Fill in a missing deployment from this scenario.

        The diagnostic scenario has no deployment of its own and runs on Docker.
        """
        if request.deployment is not None:
            return request
        return replace(request, deployment=self.deployment or DatabaseEngineDeployment.DOCKER)


def _engine_scenario(driver_family: str, topology: str) -> Scenario:
    return Scenario(driver_family=driver_family, topology=topology)


ENGINE_SCENARIOS: Tuple[Scenario, ...] = (
    _engine_scenario("mysql", "aurora"),
    _engine_scenario("pg", "aurora"),
    _engine_scenario("pg", "aurora-limitless"),
    _engine_scenario("mysql", "multi-az-cluster"),
    _engine_scenario("pg", "multi-az-cluster"),
    _engine_scenario("mysql", "multi-az-instance"),
    _engine_scenario("pg", "multi-az-instance"),
    _engine_scenario("mysql-ef", "aurora"),
    _engine_scenario("mysql-ef", "multi-az-cluster"),
    _engine_scenario("mysql-ef", "multi-az-instance"),
    _engine_scenario("mysql-nh", "aurora"),
    _engine_scenario("mysql-nh", "multi-az-cluster"),
    _engine_scenario("mysql-nh", "multi-az-instance"),
    _engine_scenario("pg-nh", "aurora"),
    _engine_scenario("pg-nh", "multi-az-cluster"),
    _engine_scenario("pg-nh", "aurora-limitless"),
    _engine_scenario("pg-nh", "multi-az-instance"),
    _engine_scenario("mysql-rw-split-perf", "aurora"),
    _engine_scenario("pg-rw-split-perf", "aurora"),
)

DEBUG_SCENARIO = Scenario(driver_family=None, topology=IN_CONTAINER_TOPOLOGY, kind=SuiteKind.DIAGNOSTIC)

# Scenario name -> scenario mapping table
SCENARIO_MAP: Dict[str, Scenario] = {}


def register_scenario(scenario: Scenario):
    """Register an integration scenario under its name"""
    if scenario.name in SCENARIO_MAP:
        raise ValueError(f"Scenario {scenario.name} is already registered")
    SCENARIO_MAP[scenario.name] = scenario


def get_scenario(name: str) -> Scenario:
    """Look up a scenario by name, e.g. ``mysql-aurora`` or ``debug``."""
    try:
        return SCENARIO_MAP[name]
    except KeyError:
        raise UnknownScenarioError(name) from None


def get_enabled_scenarios() -> Dict[str, Scenario]:
    """
    Returns the map of all declared scenarios. The CLI uses this for
    ``--list`` and as the default selection.
    """
    return dict(SCENARIO_MAP)


def _register_default_scenarios():
    for scenario in ENGINE_SCENARIOS:
        register_scenario(scenario)
    register_scenario(DEBUG_SCENARIO)


_register_default_scenarios()
