# src/integration/host/provider.py
"""
Generates the TestEnvironmentRequest values the scenario entry points are
parameterized with.

Requests are the cross product of engines, deployments and instance counts,
narrowed by the exclusion flags in HostConfig (``docker``, ``pg-engine``,
``instances-2`` and so on). Each scenario then keeps only the requests it
accepts, see ``requests_for``.
"""
import logging
from typing import Dict, List, Set, Tuple

from .config import HostConfig
from .request import TestEnvironmentRequest
from .scenarios import Scenario
from .types import DatabaseEngine, DatabaseEngineDeployment, EnvironmentFeature

logger = logging.getLogger(__name__)

# Instance counts each deployment is exercised with.
DEPLOYMENT_INSTANCES: Dict[DatabaseEngineDeployment, Tuple[int, ...]] = {
    DatabaseEngineDeployment.DOCKER: (1, 2, 3),
    DatabaseEngineDeployment.AURORA: (1, 2, 3),
    DatabaseEngineDeployment.AURORA_LIMITLESS: (1,),
    DatabaseEngineDeployment.RDS_MULTI_AZ_CLUSTER: (3,),
    DatabaseEngineDeployment.RDS_MULTI_AZ_INSTANCE: (1,),
}

PERFORMANCE_INSTANCES = 5

BLUE_GREEN_DEPLOYMENTS = (DatabaseEngineDeployment.AURORA, DatabaseEngineDeployment.RDS_MULTI_AZ_INSTANCE)

CLOUD_DEPLOYMENTS = frozenset(DEPLOYMENT_INSTANCES) - {DatabaseEngineDeployment.DOCKER}


def is_supported(engine: DatabaseEngine, deployment: DatabaseEngineDeployment) -> bool:
    """Whether an engine can be deployed in the given shape at all."""
    if engine is DatabaseEngine.MARIADB:
        return deployment in (DatabaseEngineDeployment.DOCKER, DatabaseEngineDeployment.RDS_MULTI_AZ_INSTANCE)
    if deployment is DatabaseEngineDeployment.AURORA_LIMITLESS:
        return engine is DatabaseEngine.PG
    return True


class TestEnvironmentProvider:
    """Builds environment requests from a HostConfig."""

    __test__ = False

    def __init__(self, config: HostConfig):
        self.config = config

    def _excluded(self, flag: str) -> bool:
        return flag in self.config.exclusions

    def _engines(self) -> List[DatabaseEngine]:
        return [e for e in DatabaseEngine if not self._excluded(f"{e.value}-engine")]

    def _deployments(self) -> List[DatabaseEngineDeployment]:
        return [d for d in DatabaseEngineDeployment if not self._excluded(d.value)]

    def _features(self, deployment: DatabaseEngineDeployment, num_instances: int) -> Set[EnvironmentFeature]:
        features: Set[EnvironmentFeature] = set()
        if deployment in CLOUD_DEPLOYMENTS:
            features.add(EnvironmentFeature.AWS_CREDENTIALS_ENABLED)
            if not self._excluded("iam"):
                features.add(EnvironmentFeature.IAM)
            if not self._excluded("secrets-manager"):
                features.add(EnvironmentFeature.SECRETS_MANAGER)
        if (num_instances > 1 and not self._excluded("failover")
                and deployment in (DatabaseEngineDeployment.AURORA,
                                   DatabaseEngineDeployment.RDS_MULTI_AZ_CLUSTER,
                                   DatabaseEngineDeployment.DOCKER)):
            features.add(EnvironmentFeature.FAILOVER_SUPPORTED)
        if not self._excluded("network-outages"):
            features.add(EnvironmentFeature.NETWORK_OUTAGES_ENABLED)
        if not self._excluded("traces-telemetry"):
            features.add(EnvironmentFeature.TELEMETRY_TRACES_ENABLED)
        if not self._excluded("metrics-telemetry"):
            features.add(EnvironmentFeature.TELEMETRY_METRICS_ENABLED)
        if self._excluded("mysql-driver"):
            features.add(EnvironmentFeature.SKIP_MYSQL_DRIVER_TESTS)
        if self._excluded("pg-driver"):
            features.add(EnvironmentFeature.SKIP_PG_DRIVER_TESTS)
        if self._excluded("mariadb-driver"):
            features.add(EnvironmentFeature.SKIP_MARIADB_DRIVER_TESTS)
        return features

    def _request(self, engine: DatabaseEngine, deployment: DatabaseEngineDeployment,
                 num_instances: int, features: Set[EnvironmentFeature]) -> TestEnvironmentRequest:
        return TestEnvironmentRequest(
            engine=engine,
            deployment=deployment,
            num_instances=num_instances,
            features=frozenset(features),
            region=self.config.region,
            engine_version=self.config.engine_version(engine.value),
        )

    def requests(self) -> List[TestEnvironmentRequest]:
        """All requests the current exclusion flags allow, in a stable order."""
        result: List[TestEnvironmentRequest] = []
        for engine in self._engines():
            for deployment in self._deployments():
                if not is_supported(engine, deployment):
                    continue
                for num_instances in DEPLOYMENT_INSTANCES[deployment]:
                    if self._excluded(f"instances-{num_instances}"):
                        continue
                    result.append(self._request(engine, deployment, num_instances,
                                                self._features(deployment, num_instances)))

                if not self._excluded("bg") and deployment in BLUE_GREEN_DEPLOYMENTS:
                    features = self._features(deployment, 1)
                    features.add(EnvironmentFeature.BLUE_GREEN_DEPLOYMENT)
                    result.append(self._request(engine, deployment, 1, features))

                if (not self._excluded("performance") and deployment is DatabaseEngineDeployment.AURORA):
                    features = self._features(deployment, PERFORMANCE_INSTANCES)
                    features.add(EnvironmentFeature.PERFORMANCE)
                    result.append(self._request(engine, deployment, PERFORMANCE_INSTANCES, features))

        logger.debug(f"Generated {len(result)} environment request(s)")
        return result

    def requests_for(self, scenario: Scenario) -> List[TestEnvironmentRequest]:
        """Requests a scenario can run against.

        Performance scenarios only take PERFORMANCE requests and no other
        engine scenario takes them. The diagnostic scenario takes everything.
        """
        if scenario.is_diagnostic:
            return self.requests()
        selected = []
        for request in self.requests():
            if not scenario.accepts(request):
                continue
            if request.has_feature(EnvironmentFeature.PERFORMANCE) != scenario.is_performance:
                continue
            selected.append(request)
        return selected


def request_ids(requests: List[TestEnvironmentRequest]) -> List[str]:
    """Parameter ids for pytest, de-duplicated by suffixing a counter."""
    seen: Dict[str, int] = {}
    ids = []
    for request in requests:
        name = request.display_name
        count = seen.get(name, 0)
        seen[name] = count + 1
        ids.append(name if count == 0 else f"{name}-{count}")
    return ids
