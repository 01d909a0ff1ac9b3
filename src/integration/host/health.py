# src/integration/host/health.py
"""Connectivity check run on a freshly provisioned environment.

Every instance endpoint is asked for ``SELECT 1``. Instances that do not
answer are retried for a fixed number of rounds before the environment is
declared unusable.
"""
import logging
import time
from typing import Callable, List, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from .config import HealthCheckConfig
from .errors import ProvisioningError
from .info import TestEnvironmentInfo, TestInstanceInfo
from .types import DatabaseEngine

logger = logging.getLogger(__name__)

DRIVER_NAMES = {
    DatabaseEngine.MYSQL: "mysql+mysqlconnector",
    DatabaseEngine.MARIADB: "mysql+mysqlconnector",
    DatabaseEngine.PG: "postgresql+psycopg2",
}


def instance_url(info: TestEnvironmentInfo, instance: TestInstanceInfo) -> URL:
    database_info = info.database_info
    return URL.create(
        DRIVER_NAMES[info.request.engine],
        username=database_info.username,
        password=database_info.password,
        host=instance.host,
        port=instance.port,
        database=database_info.default_db_name,
    )


def ping_instance(info: TestEnvironmentInfo, instance: TestInstanceInfo, connect_timeout: int) -> bool:
    engine = create_engine(
        instance_url(info, instance),
        poolclass=NullPool,
        connect_args={'connect_timeout': connect_timeout},
    )
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.debug(f"Instance {instance.instance_id} is not reachable yet: {e}")
        return False
    finally:
        engine.dispose()


def check_connectivity(info: TestEnvironmentInfo, config: HealthCheckConfig,
                       ping: Optional[Callable[[TestEnvironmentInfo, TestInstanceInfo, int], bool]] = None,
                       sleep: Callable[[float], None] = time.sleep) -> None:
    """Wait until every instance of ``info`` answers, or raise ProvisioningError."""
    ping = ping or ping_instance
    pending: List[TestInstanceInfo] = list(info.database_info.instances)

    for attempt in range(1, config.attempts + 1):
        pending = [i for i in pending if not ping(info, i, config.connect_timeout)]
        if not pending:
            logger.debug(f"All instances reachable after {attempt} attempt(s)")
            return
        if attempt < config.attempts:
            logger.info(f"{len(pending)} instance(s) not reachable, retrying in {config.interval}s "
                        f"(attempt {attempt}/{config.attempts})")
            sleep(config.interval)

    names = ", ".join(i.instance_id for i in pending)
    raise ProvisioningError(f"Instances not reachable after {config.attempts} attempt(s): {names}")
