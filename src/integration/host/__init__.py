# src/integration/host/__init__.py
"""
Integration test host for the database driver wrappers.

This package runs driver integration suites against provisioned database
environments:
- Scenario catalog pairing driver families (mysql, pg-nh, ...) with topologies
  (aurora, multi-az-cluster, ...)
- Environment request generation narrowed by exclusion flags
- Scoped environment handles that are always released
- A dispatcher that acquires, runs and releases per scenario
- A pytest plugin and a command line runner on top of the dispatcher

Architecture:
- Provisioner: builds and tears down environments (pluggable, registry based)
- SuiteRunner: executes a suite against an environment (subprocess by default)
- TestEnvironmentConfig: the handle binding both to one request
- ScenarioDispatcher: acquire -> run -> release for one scenario
"""

__version__ = "1.0.0"

from .config import HostConfig, load_config
from .dispatcher import ScenarioDispatcher, ScenarioResult
from .environment import TestEnvironmentConfig
from .errors import (
    ConfigurationError,
    IntegrationHostError,
    InvalidScenarioCombinationError,
    ProvisioningError,
    ReleaseError,
    ReleaseWarning,
    SuiteFailure,
    UnknownScenarioError,
    UnknownTaskError,
)
from .info import TestDatabaseInfo, TestEnvironmentInfo, TestInstanceInfo
from .provider import TestEnvironmentProvider
from .provisioner import Provisioner, ProvisionerRegistry, StaticProvisioner, provisioner_registry
from .request import TestEnvironmentRequest
from .scenarios import DEBUG_SCENARIO, Scenario, SuiteKind, get_enabled_scenarios, get_scenario
from .suite import CommandSuiteRunner, SuiteRunner
from .tasks import Task, get_task
from .types import DatabaseEngine, DatabaseEngineDeployment, EnvironmentFeature


__all__ = [
    # Configuration
    'HostConfig',
    'load_config',

    # Dispatcher
    'ScenarioDispatcher',
    'ScenarioResult',

    # Environment
    'TestEnvironmentConfig',
    'TestEnvironmentRequest',
    'TestEnvironmentProvider',
    'TestEnvironmentInfo',
    'TestDatabaseInfo',
    'TestInstanceInfo',

    # Collaborators
    'Provisioner',
    'ProvisionerRegistry',
    'StaticProvisioner',
    'provisioner_registry',
    'SuiteRunner',
    'CommandSuiteRunner',

    # Scenarios and tasks
    'Scenario',
    'SuiteKind',
    'DEBUG_SCENARIO',
    'get_scenario',
    'get_enabled_scenarios',
    'Task',
    'get_task',

    # Types
    'DatabaseEngine',
    'DatabaseEngineDeployment',
    'EnvironmentFeature',

    # Errors
    'IntegrationHostError',
    'ConfigurationError',
    'UnknownScenarioError',
    'UnknownTaskError',
    'ProvisioningError',
    'InvalidScenarioCombinationError',
    'SuiteFailure',
    'ReleaseError',
    'ReleaseWarning',
]
