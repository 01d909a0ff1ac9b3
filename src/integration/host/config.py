# src/integration/host/config.py
"""Configuration management for the integration host, implementing a multi-level priority mechanism

Priority, highest first:
1. File named by the INTEGRATION_HOST_CONFIG_PATH environment variable
2. Default file in the working directory (integration_host.toml, then .yaml/.yml)
3. Individual environment variables (TEST_REGION, TEST_PROVISIONER, TEST_SUITE_COMMAND)
4. Hard-coded defaults

Exclusion flags from the file are merged with TEST_NO_<FLAG>=true variables.
"""
import logging
import os
import shlex
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional

import yaml

# Try to import tomllib (Python 3.11+) or tomli for older versions
try:
    import tomllib
except ImportError:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_PATH_VARIABLE = "INTEGRATION_HOST_CONFIG_PATH"
DEFAULT_CONFIG_FILES = ("integration_host.toml", "integration_host.yaml", "integration_host.yml")

# Flags accepted by ``exclusions`` and TEST_NO_<FLAG> variables.
EXCLUSION_FLAGS: FrozenSet[str] = frozenset({
    "docker",
    "performance",
    "mysql-driver",
    "mysql-engine",
    "pg-driver",
    "pg-engine",
    "mariadb-driver",
    "mariadb-engine",
    "aurora",
    "aurora-limitless",
    "multi-az-cluster",
    "multi-az-instance",
    "failover",
    "iam",
    "secrets-manager",
    "bg",
    "traces-telemetry",
    "metrics-telemetry",
    "instances-1",
    "instances-2",
    "instances-3",
    "network-outages",
})

DEFAULT_SUITE_COMMAND = ["pytest", "-k", "{filter}", "-p", "no:logging", "--capture=tee-sys", "./tests/integration/container"]
DEFAULT_DEBUG_COMMAND = ["pytest", "-p", "no:logging", "--capture=tee-sys", "./tests/integration/container"]


def _truthy(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in ("1", "true", "yes", "on")


def exclusion_variable(flag: str) -> str:
    """``multi-az-cluster`` -> ``TEST_NO_MULTI_AZ_CLUSTER``"""
    return "TEST_NO_" + flag.upper().replace("-", "_")


def validate_exclusions(flags: Iterable[str]) -> FrozenSet[str]:
    flags = frozenset(flags)
    unknown = flags - EXCLUSION_FLAGS
    if unknown:
        raise ConfigurationError(f"Unknown exclusion flag(s): {', '.join(sorted(unknown))}")
    return flags


def exclusions_from_env(environ: Optional[Mapping[str, str]] = None) -> FrozenSet[str]:
    """Collect exclusion flags switched on through TEST_NO_<FLAG> variables."""
    environ = os.environ if environ is None else environ
    return frozenset(flag for flag in EXCLUSION_FLAGS if _truthy(environ.get(exclusion_variable(flag))))


@dataclass
class SuiteConfig:
    """How test suites are launched."""
    command: List[str] = field(default_factory=lambda: list(DEFAULT_SUITE_COMMAND))
    debug_command: List[str] = field(default_factory=lambda: list(DEFAULT_DEBUG_COMMAND))
    filter: str = "{driver_family} and {topology}"
    working_dir: Optional[str] = None
    timeout: Optional[float] = None
    env: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # Config files yield booleans and numbers; subprocess needs strings.
        env = {}
        for name, value in (self.env or {}).items():
            if isinstance(value, bool):
                env[str(name)] = "true" if value else "false"
            elif isinstance(value, (str, int, float)):
                env[str(name)] = str(value)
            else:
                raise ConfigurationError(
                    f"suite.env.{name} must be a string, number or boolean, got {type(value).__name__}")
        self.env = env


@dataclass
class HealthCheckConfig:
    enabled: bool = False
    attempts: int = 3
    interval: float = 5.0
    connect_timeout: int = 10

    def __post_init__(self):
        if self.attempts < 1:
            raise ConfigurationError(f"health_check.attempts must be at least 1, got {self.attempts}")
        if self.interval < 0:
            raise ConfigurationError(f"health_check.interval must not be negative, got {self.interval}")
        if self.connect_timeout < 1:
            raise ConfigurationError(f"health_check.connect_timeout must be at least 1, got {self.connect_timeout}")


@dataclass
class HostConfig:
    """Integration host configuration.

    ``databases`` holds pre-provisioned endpoints for the static provisioner,
    keyed by engine then deployment, e.g. ``databases['mysql']['aurora']``.
    """
    region: str = "us-east-1"
    engine_versions: Dict[str, str] = field(default_factory=lambda: {
        'mysql': 'latest',
        'pg': 'latest',
        'mariadb': 'latest',
    })
    exclusions: FrozenSet[str] = field(default_factory=frozenset)
    provisioner: str = "static"
    databases: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    suite: SuiteConfig = field(default_factory=SuiteConfig)
    health_check: HealthCheckConfig = field(default_factory=HealthCheckConfig)
    log_level: str = "INFO"

    def engine_version(self, engine: str) -> str:
        return self.engine_versions.get(engine, 'latest')

    def with_exclusions(self, flags: Iterable[str]) -> 'HostConfig':
        """Return a copy with additional exclusion flags."""
        merged = self.exclusions | validate_exclusions(flags)
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values['exclusions'] = merged
        return HostConfig(**values)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HostConfig':
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration key(s): {', '.join(sorted(unknown))}")

        values = dict(data)
        try:
            if 'suite' in values:
                values['suite'] = SuiteConfig(**(values['suite'] or {}))
            if 'health_check' in values:
                values['health_check'] = HealthCheckConfig(**(values['health_check'] or {}))
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration section: {e}") from e
        if 'engine_versions' in values:
            values['engine_versions'] = {**cls().engine_versions, **values['engine_versions']}
        values['exclusions'] = validate_exclusions(values.get('exclusions') or ())
        return cls(**values)


def load_yaml_config(file_path: Path) -> Dict[str, Any]:
    """
    Load YAML configuration file

    Args:
        file_path: YAML file path

    Returns:
        Configuration dictionary
    """
    with open(file_path, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f) or {}
    logger.info(f"Loaded configuration from {file_path}")
    return config


def load_toml_config(file_path: Path) -> Dict[str, Any]:
    """
    Load TOML configuration file

    Args:
        file_path: TOML file path

    Returns:
        Configuration dictionary
    """
    if tomllib is None:
        raise ImportError("tomllib or tomli is required to load TOML configuration files")

    with open(file_path, 'rb') as f:
        config = tomllib.load(f) or {}
    logger.info(f"Loaded configuration from {file_path}")
    return config


def load_config_from_file(config_path: Path) -> Dict[str, Any]:
    """Load configuration from file based on its extension"""
    suffix = config_path.suffix.lower().strip()
    if suffix in ['.yaml', '.yml']:
        data = load_yaml_config(config_path)
    elif suffix == '.toml':
        data = load_toml_config(config_path)
    else:
        raise ValueError(f"Unsupported configuration file format: {config_path.suffix}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {config_path} must contain a mapping")
    # Allow the settings to live under a top-level "integration_host" key.
    return data.get('integration_host', data)


def _find_config_file(search_dir: Path) -> Optional[Path]:
    config_file_path_env = os.getenv(CONFIG_PATH_VARIABLE)
    if config_file_path_env:
        config_path = Path(config_file_path_env)
        if not config_path.exists():
            raise FileNotFoundError(
                f"Configuration file {config_path} specified in {CONFIG_PATH_VARIABLE} does not exist")
        logger.info(f"Using configuration file from environment variable: {config_path}")
        return config_path

    for name in DEFAULT_CONFIG_FILES:
        default_config_path = search_dir / name
        if default_config_path.exists():
            logger.info(f"Using default configuration file: {default_config_path}")
            return default_config_path
    return None


def load_config(config_path: Optional[Path] = None, search_dir: Optional[Path] = None) -> HostConfig:
    """
    Load the host configuration using the multi-level priority mechanism.

    Args:
        config_path: Explicit configuration file; takes precedence over every other source
        search_dir: Directory searched for default configuration files (defaults to cwd)

    Returns:
        HostConfig instance
    """
    if config_path is None:
        config_path = _find_config_file(search_dir or Path.cwd())

    data: Dict[str, Any] = {}
    if config_path is not None:
        data = load_config_from_file(Path(config_path))
    else:
        logger.info("No configuration file found, using environment variables and defaults")
        region = os.getenv("TEST_REGION")
        if region:
            data['region'] = region
        provisioner = os.getenv("TEST_PROVISIONER")
        if provisioner:
            data['provisioner'] = provisioner
        suite_command = os.getenv("TEST_SUITE_COMMAND")
        if suite_command:
            data['suite'] = {'command': shlex.split(suite_command)}

    config = HostConfig.from_dict(data)
    env_exclusions = exclusions_from_env()
    if env_exclusions:
        logger.debug(f"Exclusions from environment: {sorted(env_exclusions)}")
        config = config.with_exclusions(env_exclusions)
    return config
