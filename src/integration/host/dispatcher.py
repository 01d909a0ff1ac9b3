# src/integration/host/dispatcher.py
"""Scenario dispatcher.

For one (request, scenario) pair the dispatcher acquires a scoped test
environment, runs the scenario's suite against it and releases the
environment on every exit path. Scenarios share no state, so they can be
dispatched in any order or in parallel by the calling harness.
"""
import logging
import time
import warnings
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

from .config import HostConfig
from .environment import TestEnvironmentConfig
from .errors import InvalidScenarioCombinationError, ProvisioningError, ReleaseWarning
from .request import TestEnvironmentRequest
from .scenarios import Scenario

logger = logging.getLogger(__name__)

EnvironmentFactory = Callable[[TestEnvironmentRequest], TestEnvironmentConfig]

PHASE_PROVISIONING = "provisioning"
PHASE_SUITE = "suite"


@dataclass
class ScenarioResult:
    """Outcome of one scenario run."""
    scenario: Scenario
    request: TestEnvironmentRequest
    passed: bool
    phase: Optional[str] = None
    error: Optional[BaseException] = None
    release_error: Optional[BaseException] = None
    duration: float = 0.0

    @property
    def summary(self) -> str:
        status = "PASS" if self.passed else f"FAIL ({self.phase})"
        line = f"{status} {self.scenario.name} [{self.request.display_name}] {self.duration:.1f}s"
        if self.error is not None:
            line += f": {self.error}"
        if self.release_error is not None:
            line += f" (release failed: {self.release_error})"
        return line


class ScenarioDispatcher:
    """Runs scenarios against freshly acquired environments."""

    def __init__(self, config: Optional[HostConfig] = None,
                 environment_factory: Optional[EnvironmentFactory] = None):
        self.config = config or HostConfig()
        self._environment_factory = environment_factory or self._build_environment

    def _build_environment(self, request: TestEnvironmentRequest) -> TestEnvironmentConfig:
        return TestEnvironmentConfig.build(request, self.config)

    def acquire(self, request: TestEnvironmentRequest, scenario: Scenario) -> TestEnvironmentConfig:
        """Acquire an environment scoped to ``request`` and ``scenario``.

        A request without a deployment is built for the scenario's deployment.
        """
        if not scenario.accepts(request):
            raise InvalidScenarioCombinationError(scenario.name, request.display_name)
        try:
            return self._environment_factory(scenario.resolve(request))
        except ProvisioningError:
            raise
        except Exception as e:
            raise ProvisioningError(f"Failed to provision {request.display_name}: {e}") from e

    @staticmethod
    def _execute(env: TestEnvironmentConfig, scenario: Scenario) -> None:
        if scenario.is_diagnostic:
            env.debug_tests(scenario.topology)
        else:
            env.run_tests(scenario.driver_family, scenario.topology)

    def dispatch(self, request: TestEnvironmentRequest, scenario: Scenario) -> ScenarioResult:
        """Run one scenario and report its outcome instead of raising."""
        logger.info(f"Starting scenario {scenario.name} on {request.display_name}")
        started = time.monotonic()
        result = ScenarioResult(scenario=scenario, request=request, passed=False)

        try:
            env = self.acquire(request, scenario)
        except Exception as e:
            result.phase = PHASE_PROVISIONING
            result.error = e
        else:
            result.request = env.request
            with env:
                try:
                    self._execute(env, scenario)
                    result.passed = True
                except Exception as e:
                    result.phase = PHASE_SUITE
                    result.error = e
            result.release_error = env.release_error

        result.duration = time.monotonic() - started
        if result.passed:
            logger.info(result.summary)
        else:
            logger.error(result.summary)
        return result

    def run(self, request: TestEnvironmentRequest, scenario: Scenario) -> ScenarioResult:
        """Run one scenario, re-raising its failure.

        A release failure on a passing run does not fail it; it is reported
        as a ReleaseWarning.
        """
        result = self.dispatch(request, scenario)
        if result.error is not None:
            raise result.error
        if result.release_error is not None:
            warnings.warn(f"Scenario {scenario.name} passed but its environment was not released cleanly: "
                          f"{result.release_error}", ReleaseWarning, stacklevel=2)
        return result

    def run_all(self, pairs: Iterable[Tuple[TestEnvironmentRequest, Scenario]]) -> List[ScenarioResult]:
        """Dispatch every pair in turn; one failure never stops the rest."""
        return [self.dispatch(request, scenario) for request, scenario in pairs]
