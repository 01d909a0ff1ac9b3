# src/integration/host/errors.py
"""Exception hierarchy for the integration test host.

Failures are classified by the phase of a scenario run they belong to:

- ProvisioningError: the environment could not be acquired; the suite never runs
- SuiteFailure: the suite ran and reported failure
- ReleaseError: tearing the environment down failed; always secondary
"""
from typing import Optional


class IntegrationHostError(Exception):
    """Base class for all integration host errors."""
    pass


class ConfigurationError(IntegrationHostError):
    """Raised when host configuration is missing or invalid."""
    pass


class UnknownScenarioError(IntegrationHostError, LookupError):
    """Raised when a scenario name is not in the catalog."""

    def __init__(self, name: str):
        super().__init__(f"Unknown scenario: {name}")
        self.name = name


class UnknownTaskError(IntegrationHostError, LookupError):
    """Raised when a task name is not in the catalog."""

    def __init__(self, name: str):
        super().__init__(f"Unknown task: {name}")
        self.name = name


class ProvisioningError(IntegrationHostError):
    """Raised when a test environment cannot be built."""
    pass


class InvalidScenarioCombinationError(ProvisioningError):
    """Raised when a request cannot serve the requested scenario."""

    def __init__(self, scenario_name: str, request_name: str):
        super().__init__(f"Request {request_name} cannot run scenario {scenario_name}")
        self.scenario_name = scenario_name
        self.request_name = request_name


class SuiteFailure(IntegrationHostError):
    """Raised when a test suite reports failure."""

    def __init__(self, message: str, driver_family: Optional[str] = None,
                 topology: Optional[str] = None, returncode: Optional[int] = None):
        super().__init__(message)
        self.driver_family = driver_family
        self.topology = topology
        self.returncode = returncode


class ReleaseError(IntegrationHostError):
    """Raised by provisioners when tearing an environment down fails."""
    pass


class ReleaseWarning(UserWarning):
    """Emitted when a passing scenario could not release its environment cleanly."""
    pass
