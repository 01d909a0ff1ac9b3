# src/integration/host/suite.py
"""Test suite runners.

A suite runner executes the tests for one driver family and topology against
a provisioned environment. The default runner launches a configured command
in a subprocess and treats its exit status as the verdict.
"""
import logging
import os
import subprocess
from abc import ABC, abstractmethod
from typing import Dict, List

from .config import SuiteConfig
from .errors import SuiteFailure
from .info import TEST_ENV_INFO_VARIABLE, TestEnvironmentInfo

logger = logging.getLogger(__name__)


class SuiteRunner(ABC):
    """Runs test suites against an environment."""

    @abstractmethod
    def run(self, info: TestEnvironmentInfo, driver_family: str, topology: str) -> None:
        """Run the suite for ``driver_family`` on ``topology``; raise SuiteFailure on failure."""
        pass

    @abstractmethod
    def run_debug(self, info: TestEnvironmentInfo, topology: str) -> None:
        """Run the diagnostic suite on ``topology``; raise SuiteFailure on failure."""
        pass


class CommandSuiteRunner(SuiteRunner):
    """Runs suites as external commands.

    Command arguments may use the ``{driver_family}``, ``{topology}`` and
    ``{filter}`` placeholders. The environment description is passed in the
    ``TEST_ENV_INFO_JSON`` variable.
    """

    def __init__(self, config: SuiteConfig):
        self.config = config

    def _format(self, command: List[str], driver_family: str, topology: str) -> List[str]:
        values = {'driver_family': driver_family, 'topology': topology}
        values['filter'] = self.config.filter.format(**values)
        return [arg.format(**values) for arg in command]

    def _environment(self, info: TestEnvironmentInfo, driver_family: str, topology: str) -> Dict[str, str]:
        env = dict(os.environ)
        env.update(self.config.env)
        env[TEST_ENV_INFO_VARIABLE] = info.to_json()
        env['TEST_DRIVER_FAMILY'] = driver_family
        env['TEST_TOPOLOGY'] = topology
        return env

    def _execute(self, command: List[str], info: TestEnvironmentInfo,
                 driver_family: str, topology: str) -> None:
        args = self._format(command, driver_family, topology)
        logger.info(f"Running suite {driver_family}/{topology}: {' '.join(args)}")
        try:
            completed = subprocess.run(
                args,
                cwd=self.config.working_dir,
                env=self._environment(info, driver_family, topology),
                timeout=self.config.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise SuiteFailure(
                f"Suite {driver_family}/{topology} timed out after {self.config.timeout}s",
                driver_family, topology) from e
        except OSError as e:
            raise SuiteFailure(f"Could not start suite {driver_family}/{topology}: {e}",
                               driver_family, topology) from e

        if completed.returncode != 0:
            raise SuiteFailure(
                f"Suite {driver_family}/{topology} failed with exit code {completed.returncode}",
                driver_family, topology, completed.returncode)
        logger.info(f"Suite {driver_family}/{topology} passed")

    def run(self, info: TestEnvironmentInfo, driver_family: str, topology: str) -> None:
        self._execute(self.config.command, info, driver_family, topology)

    def run_debug(self, info: TestEnvironmentInfo, topology: str) -> None:
        self._execute(self.config.debug_command, info, "debug", topology)

