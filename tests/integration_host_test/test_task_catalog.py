# tests/integration_host_test/test_task_catalog.py
import pytest

from integration.host.errors import UnknownTaskError
from integration.host.scenarios import ENGINE_SCENARIOS, get_scenario
from integration.host.tasks import TASK_MAP, exclusions_for, get_task, task_name


@pytest.mark.parametrize("scenario_name, expected", [
    ("mysql-aurora", "test-all-mysql-aurora"),
    ("pg-aurora-limitless", "test-all-pg-aurora-limitless"),
    ("mysql-ef-multi-az-instance", "test-all-mysql-multi-az-instance-ef"),
    ("pg-nh-multi-az-cluster", "test-all-pg-multi-az-cluster-nh"),
    ("mysql-rw-split-perf-aurora", "test-aurora-mysql-rw-splitting-performance"),
    ("debug", "debug"),
])
def test_task_names(scenario_name, expected):
    assert task_name(get_scenario(scenario_name)) == expected


def test_every_scenario_has_a_task():
    assert len(TASK_MAP) == len(ENGINE_SCENARIOS) + 1
    assert {task.scenario.name for task in TASK_MAP.values()} == {s.name for s in ENGINE_SCENARIOS} | {"debug"}


def test_unknown_task_raises():
    with pytest.raises(UnknownTaskError):
        get_task("test-all-oracle-aurora")


def test_mysql_aurora_exclusions():
    """test-all-mysql-aurora keeps only MySQL on Aurora"""
    assert get_task("test-all-mysql-aurora").exclusions == frozenset({
        "docker", "performance", "bg", "traces-telemetry", "metrics-telemetry",
        "pg-driver", "pg-engine", "mariadb-engine",
        "aurora-limitless", "multi-az-cluster", "multi-az-instance",
    })


def test_pg_exclusions_drop_mysql_and_mariadb():
    exclusions = exclusions_for(get_scenario("pg-nh-multi-az-instance"))

    assert {"mysql-driver", "mysql-engine", "mariadb-driver", "mariadb-engine"} <= exclusions
    assert {"aurora", "aurora-limitless", "multi-az-cluster"} <= exclusions
    assert "multi-az-instance" not in exclusions
    assert "failover" not in exclusions


def test_limitless_excludes_failover():
    assert "failover" in exclusions_for(get_scenario("pg-aurora-limitless"))


def test_performance_exclusions():
    exclusions = exclusions_for(get_scenario("mysql-rw-split-perf-aurora"))

    assert {"instances-1", "instances-2", "instances-3", "iam", "secrets-manager", "docker", "bg"} <= exclusions
    assert "performance" not in exclusions
    assert "aurora" not in exclusions
    assert {"pg-engine", "mariadb-engine"} <= exclusions


def test_debug_task_has_no_exclusions():
    assert get_task("debug").exclusions == frozenset()
