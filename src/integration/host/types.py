# src/integration/host/types.py
from enum import Enum
from typing import Dict


class DatabaseEngine(str, Enum):
    """Database engines a test environment can be built for."""
    MYSQL = "mysql"
    PG = "pg"
    MARIADB = "mariadb"


class DatabaseEngineDeployment(str, Enum):
    """Deployment shapes a test environment can take."""
    DOCKER = "docker"
    AURORA = "aurora"
    AURORA_LIMITLESS = "aurora-limitless"
    RDS_MULTI_AZ_CLUSTER = "multi-az-cluster"
    RDS_MULTI_AZ_INSTANCE = "multi-az-instance"


class EnvironmentFeature(str, Enum):
    """Optional capabilities switched on for a test environment."""
    IAM = "iam"
    SECRETS_MANAGER = "secrets-manager"
    FAILOVER_SUPPORTED = "failover-supported"
    NETWORK_OUTAGES_ENABLED = "network-outages-enabled"
    AWS_CREDENTIALS_ENABLED = "aws-credentials-enabled"
    PERFORMANCE = "performance"
    BLUE_GREEN_DEPLOYMENT = "blue-green-deployment"
    SKIP_MYSQL_DRIVER_TESTS = "skip-mysql-driver-tests"
    SKIP_PG_DRIVER_TESTS = "skip-pg-driver-tests"
    SKIP_MARIADB_DRIVER_TESTS = "skip-mariadb-driver-tests"
    TELEMETRY_TRACES_ENABLED = "telemetry-traces-enabled"
    TELEMETRY_METRICS_ENABLED = "telemetry-metrics-enabled"


# Topology identifier -> deployment. "in-container" has no deployment of its own.
TOPOLOGY_DEPLOYMENTS: Dict[str, DatabaseEngineDeployment] = {
    "aurora": DatabaseEngineDeployment.AURORA,
    "aurora-limitless": DatabaseEngineDeployment.AURORA_LIMITLESS,
    "multi-az-cluster": DatabaseEngineDeployment.RDS_MULTI_AZ_CLUSTER,
    "multi-az-instance": DatabaseEngineDeployment.RDS_MULTI_AZ_INSTANCE,
}

IN_CONTAINER_TOPOLOGY = "in-container"

# Driver family prefix -> engine; "mysql-nh" and "mysql-rw-split-perf" both resolve to MYSQL.
DRIVER_FAMILY_ENGINES: Dict[str, DatabaseEngine] = {
    "mysql": DatabaseEngine.MYSQL,
    "pg": DatabaseEngine.PG,
}

PERFORMANCE_FAMILY_SUFFIX = "-rw-split-perf"

# Port used when the configuration names a host without one.
DEFAULT_PORTS: Dict[DatabaseEngine, int] = {
    DatabaseEngine.MYSQL: 3306,
    DatabaseEngine.MARIADB: 3306,
    DatabaseEngine.PG: 5432,
}
