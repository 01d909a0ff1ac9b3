# src/integration/host/environment.py
"""Scoped test environment handle.

    with TestEnvironmentConfig.build(request, config) as env:
        env.run_tests("mysql", "aurora")

The handle owns everything provisioned for one scenario run and releases it
exactly once when the ``with`` block exits, whatever the outcome.
"""
import logging
from typing import Optional

from .config import HostConfig
from .errors import IntegrationHostError, ProvisioningError
from .health import check_connectivity
from .info import TestEnvironmentInfo
from .provisioner import Provisioner, provisioner_registry
from .request import TestEnvironmentRequest
from .suite import CommandSuiteRunner, SuiteRunner

logger = logging.getLogger(__name__)


class TestEnvironmentConfig:
    """A provisioned environment bound to one request."""

    __test__ = False

    def __init__(self, request: TestEnvironmentRequest, info: TestEnvironmentInfo,
                 provisioner: Provisioner, runner: SuiteRunner):
        self.request = request
        self.info = info
        self._provisioner = provisioner
        self._runner = runner
        self._released = False
        self.release_error: Optional[Exception] = None

    @classmethod
    def build(cls, request: TestEnvironmentRequest, config: Optional[HostConfig] = None,
              provisioner: Optional[Provisioner] = None,
              runner: Optional[SuiteRunner] = None) -> 'TestEnvironmentConfig':
        """Provision an environment for ``request``.

        Raises:
            ProvisioningError: the environment could not be built or is unreachable.
        """
        config = config or HostConfig()
        provisioner = provisioner or provisioner_registry.create(config)
        runner = runner or CommandSuiteRunner(config.suite)

        logger.info(f"Provisioning environment {request.display_name}")
        try:
            info = provisioner.provision(request)
        except ProvisioningError:
            raise
        except Exception as e:
            raise ProvisioningError(f"Failed to provision {request.display_name}: {e}") from e

        env = cls(request, info, provisioner, runner)
        if config.health_check.enabled:
            try:
                check_connectivity(info, config.health_check)
            except Exception:
                env.close()
                raise
        return env

    @property
    def released(self) -> bool:
        return self._released

    def _ensure_active(self):
        if self._released:
            raise IntegrationHostError(f"Environment {self.request.display_name} has already been released")

    def run_tests(self, driver_family: str, topology: str) -> None:
        self._ensure_active()
        self._runner.run(self.info, driver_family, topology)

    def debug_tests(self, topology: str) -> None:
        self._ensure_active()
        self._runner.run_debug(self.info, topology)

    def close(self) -> None:
        """Tear the environment down. Safe to call more than once."""
        if self._released:
            return
        self._released = True
        try:
            self._provisioner.deprovision(self.info)
            logger.info(f"Released environment {self.request.display_name}")
        except Exception as e:
            self.release_error = e
            logger.warning(f"Failed to release environment {self.request.display_name}: {e}", exc_info=True)

    def __enter__(self) -> 'TestEnvironmentConfig':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
