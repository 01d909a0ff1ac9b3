# src/integration/host/__main__.py
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .config import HostConfig, load_config
from .dispatcher import ScenarioDispatcher
from .errors import ConfigurationError, UnknownScenarioError, UnknownTaskError
from .provider import TestEnvironmentProvider
from .request import TestEnvironmentRequest
from .scenarios import Scenario, get_enabled_scenarios, get_scenario
from .tasks import TASK_MAP, get_task

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None):
    parser = argparse.ArgumentParser(
        prog="python -m integration.host",
        description="Run database driver integration scenarios against provisioned environments.",
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser.add_argument(
        '--task',
        action='append',
        default=[],
        help='Named task to run, e.g. test-all-mysql-aurora (repeatable)'
    )
    parser.add_argument(
        '--scenario',
        action='append',
        default=[],
        help='Scenario to run, e.g. mysql-aurora or debug (repeatable)'
    )
    parser.add_argument(
        '--exclude',
        action='append',
        default=[],
        help='Exclusion flag applied to request generation, e.g. docker (repeatable)'
    )
    parser.add_argument(
        '--config',
        type=Path,
        help='Configuration file (default: INTEGRATION_HOST_CONFIG_PATH or integration_host.toml/.yaml)'
    )
    parser.add_argument('--list', action='store_true', help='List scenarios and tasks, then exit')
    parser.add_argument('--dry-run', action='store_true', help='Show what would run without provisioning')
    parser.add_argument('--log-level', default=None, help='Set logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)')
    return parser.parse_args(argv)


def print_catalog():
    print("Scenarios:")
    for name, scenario in get_enabled_scenarios().items():
        print(f"  {name:<32} {scenario.driver_family or '-':<22} {scenario.topology}")
    print("Tasks:")
    for name, task in TASK_MAP.items():
        print(f"  {name:<48} {task.scenario.name}")


def select(args, config: HostConfig) -> List[Tuple[HostConfig, Scenario]]:
    """Resolve --task and --scenario options into (config, scenario) pairs."""
    selection: List[Tuple[HostConfig, Scenario]] = []
    for name in args.task:
        task = get_task(name)
        selection.append((config.with_exclusions(task.exclusions), task.scenario))
    for name in args.scenario:
        selection.append((config, get_scenario(name)))
    if not selection:
        selection = [(config, scenario) for scenario in get_enabled_scenarios().values()]
    return selection


def plan(selection: List[Tuple[HostConfig, Scenario]]) -> List[Tuple[HostConfig, TestEnvironmentRequest, Scenario]]:
    runs = []
    for config, scenario in selection:
        for request in TestEnvironmentProvider(config).requests_for(scenario):
            runs.append((config, request, scenario))
    return runs


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    try:
        config = load_config(args.config)
        if args.exclude:
            config = config.with_exclusions(args.exclude)
    except (ConfigurationError, FileNotFoundError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    # Set logging level
    log_level = args.log_level or config.log_level
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {log_level}')
    logging.basicConfig(level=numeric_level, format='%(asctime)s - %(levelname)s - %(message)s')

    if args.list:
        print_catalog()
        return 0

    try:
        runs = plan(select(args, config))
    except (UnknownScenarioError, UnknownTaskError, ConfigurationError) as e:
        logger.error(str(e))
        return 2

    if not runs:
        logger.warning("No environment requests match the selection; nothing to run.")
        return 0

    if args.dry_run:
        for _, request, scenario in runs:
            print(f"{scenario.name} [{request.display_name}]")
        return 0

    results = []
    for run_config, request, scenario in runs:
        results.append(ScenarioDispatcher(run_config).dispatch(request, scenario))

    for result in results:
        print(result.summary)
    failed = [r for r in results if not r.passed]
    logger.info(f"{len(results) - len(failed)} passed, {len(failed)} failed")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
