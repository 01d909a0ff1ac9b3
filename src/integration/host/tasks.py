# src/integration/host/tasks.py
"""Named test tasks.

A task selects exactly one scenario together with the exclusion flags that
narrow request generation down to the environments that scenario needs, e.g.
``test-all-mysql-aurora`` runs ``mysql-aurora`` with every non-MySQL engine,
non-Aurora deployment, Docker, performance and blue/green request excluded.
"""
from dataclasses import dataclass
from typing import Dict, FrozenSet

from .errors import UnknownTaskError
from .scenarios import DEBUG_SCENARIO, ENGINE_SCENARIOS, Scenario
from .types import DatabaseEngine, TOPOLOGY_DEPLOYMENTS


@dataclass(frozen=True)
class Task:
    name: str
    scenario: Scenario
    exclusions: FrozenSet[str]


_COMMON_EXCLUSIONS = frozenset({"docker", "performance", "bg", "traces-telemetry", "metrics-telemetry"})
_PERFORMANCE_EXCLUSIONS = frozenset({
    "docker", "multi-az-cluster", "multi-az-instance", "aurora-limitless", "iam", "secrets-manager",
    "instances-1", "instances-2", "instances-3", "bg",
})


def _engine_exclusions(engine: DatabaseEngine) -> FrozenSet[str]:
    if engine is DatabaseEngine.MYSQL:
        return frozenset({"pg-driver", "pg-engine", "mariadb-engine"})
    return frozenset({"mysql-driver", "mysql-engine", "mariadb-driver", "mariadb-engine"})


def exclusions_for(scenario: Scenario) -> FrozenSet[str]:
    """Exclusion flags that leave only the environments ``scenario`` runs on."""
    if scenario.is_diagnostic:
        return frozenset()
    engine_flags = _engine_exclusions(scenario.engine) | {"mariadb-driver", "mariadb-engine"}
    if scenario.is_performance:
        return _PERFORMANCE_EXCLUSIONS | engine_flags
    other_topologies = frozenset(t for t in TOPOLOGY_DEPLOYMENTS if t != scenario.topology)
    flags = _COMMON_EXCLUSIONS | _engine_exclusions(scenario.engine) | other_topologies
    if scenario.topology == "aurora-limitless":
        flags |= {"failover"}
    return flags


def task_name(scenario: Scenario) -> str:
    if scenario.is_diagnostic:
        return "debug"
    engine, _, variant = scenario.driver_family.partition("-")
    if scenario.is_performance:
        return f"test-{scenario.topology}-{engine}-rw-splitting-performance"
    name = f"test-all-{engine}-{scenario.topology}"
    return f"{name}-{variant}" if variant else name


TASK_MAP: Dict[str, Task] = {}


def _register_default_tasks():
    for scenario in ENGINE_SCENARIOS + (DEBUG_SCENARIO,):
        name = task_name(scenario)
        TASK_MAP[name] = Task(name=name, scenario=scenario, exclusions=exclusions_for(scenario))


def get_task(name: str) -> Task:
    try:
        return TASK_MAP[name]
    except KeyError:
        raise UnknownTaskError(name) from None


_register_default_tasks()
