# src/integration/host/provisioner.py
"""
Provisioner interface and registry.

A provisioner turns a TestEnvironmentRequest into a running environment
(described by TestEnvironmentInfo) and tears it down again. Provisioners are
registered by name; HostConfig.provisioner selects which one
TestEnvironmentConfig.build() uses.

Only the ``static`` provisioner ships with the host. It serves endpoints that
already exist, read from the ``databases`` configuration section:

    databases:
      mysql:
        aurora:
          username: admin
          password: secret
          database: test
          cluster_endpoint: my-cluster.cluster-xyz.us-east-1.rds.amazonaws.com
          cluster_endpoint_port: 3306
          instances:
            - {instance_id: instance-1, host: instance-1.xyz.us-east-1.rds.amazonaws.com, port: 3306}
"""
import logging
import secrets
from abc import ABC, abstractmethod
from typing import Dict, Type

from .config import HostConfig
from .errors import ConfigurationError, ProvisioningError
from .info import TestDatabaseInfo, TestEnvironmentInfo
from .request import TestEnvironmentRequest
from .types import DEFAULT_PORTS

logger = logging.getLogger(__name__)


class Provisioner(ABC):
    """Builds and tears down test environments."""

    def __init__(self, config: HostConfig):
        self.config = config

    @abstractmethod
    def provision(self, request: TestEnvironmentRequest) -> TestEnvironmentInfo:
        """Build an environment for ``request``; raise ProvisioningError on failure."""
        pass

    @abstractmethod
    def deprovision(self, info: TestEnvironmentInfo) -> None:
        """Tear down an environment previously returned by ``provision``."""
        pass


class StaticProvisioner(Provisioner):
    """Serves pre-provisioned databases listed in the configuration."""

    def provision(self, request: TestEnvironmentRequest) -> TestEnvironmentInfo:
        if request.deployment is None:
            raise ProvisioningError(f"Request {request.display_name} names no deployment")
        engine = request.engine.value
        deployment = request.deployment.value
        entry = self.config.databases.get(engine, {}).get(deployment)
        if not entry:
            raise ProvisioningError(f"No {engine} database configured for deployment {deployment}")

        try:
            database_info = TestDatabaseInfo.from_config(entry, default_port=DEFAULT_PORTS[request.engine])
        except (KeyError, TypeError, ValueError) as e:
            raise ProvisioningError(f"Invalid database configuration for {engine}/{deployment}: {e}") from e

        if len(database_info.instances) < request.num_instances:
            raise ProvisioningError(
                f"{engine}/{deployment} has {len(database_info.instances)} instance(s) configured, "
                f"request needs {request.num_instances}")
        database_info.instances = database_info.instances[:request.num_instances]

        info = TestEnvironmentInfo(
            request=request,
            database_info=database_info,
            region=request.region,
            engine_version=request.engine_version,
            random_base=secrets.token_hex(4),
        )
        logger.debug(f"Using pre-provisioned {engine}/{deployment} environment {info.random_base}")
        return info

    def deprovision(self, info: TestEnvironmentInfo) -> None:
        # Nothing was created, so there is nothing to delete.
        logger.debug(f"Released pre-provisioned environment {info.random_base}")


class ProvisionerRegistry:
    """Maps provisioner names to their implementations."""

    def __init__(self):
        self._provisioners: Dict[str, Type[Provisioner]] = {}

    def register(self, name: str, provisioner_class: Type[Provisioner]):
        if not (isinstance(provisioner_class, type) and issubclass(provisioner_class, Provisioner)):
            raise TypeError(f"{provisioner_class!r} is not a Provisioner subclass")
        self._provisioners[name] = provisioner_class

    def get(self, name: str) -> Type[Provisioner]:
        try:
            return self._provisioners[name]
        except KeyError:
            raise ConfigurationError(f"Unknown provisioner: {name}") from None

    def create(self, config: HostConfig) -> Provisioner:
        return self.get(config.provisioner)(config)

    def names(self):
        return sorted(self._provisioners)


# Create a single, global instance of the ProvisionerRegistry.
provisioner_registry = ProvisionerRegistry()

provisioner_registry.register("static", StaticProvisioner)
