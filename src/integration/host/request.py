# src/integration/host/request.py
"""Test environment requests.

A request describes the ambient configuration of a test environment (engine,
deployment, instance count, enabled features, region) independently of the
scenario that will run against it. Requests are produced by
TestEnvironmentProvider and consumed by TestEnvironmentConfig.build().

The deployment may be left out; the scenario a request is dispatched to then
supplies it, see ``Scenario.resolve``.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional

from .types import DatabaseEngine, DatabaseEngineDeployment, EnvironmentFeature


@dataclass(frozen=True)
class TestEnvironmentRequest:
    """Immutable description of the environment a scenario needs."""

    __test__ = False

    engine: DatabaseEngine
    deployment: Optional[DatabaseEngineDeployment] = None
    num_instances: int = 1
    features: FrozenSet[EnvironmentFeature] = field(default_factory=frozenset)
    region: str = "us-east-1"
    engine_version: str = "latest"

    def __post_init__(self):
        # Accept plain strings so requests can be built straight from config dicts.
        object.__setattr__(self, 'engine', DatabaseEngine(self.engine))
        if self.deployment is not None:
            object.__setattr__(self, 'deployment', DatabaseEngineDeployment(self.deployment))
        object.__setattr__(self, 'features', frozenset(EnvironmentFeature(f) for f in self.features))
        if self.num_instances < 1:
            raise ValueError(f"num_instances must be positive, got {self.num_instances}")

    def has_feature(self, feature: EnvironmentFeature) -> bool:
        return feature in self.features

    @property
    def display_name(self) -> str:
        """Stable identifier, e.g. ``mysql-aurora-2-instances-iam-secrets-manager``."""
        suffix = "instance" if self.num_instances == 1 else "instances"
        parts = [self.engine.value]
        if self.deployment is not None:
            parts.append(self.deployment.value)
        parts.append(f"{self.num_instances}-{suffix}")
        parts.extend(sorted(f.value for f in self.features))
        return "-".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'engine': self.engine.value,
            'deployment': self.deployment.value if self.deployment is not None else None,
            'num_instances': self.num_instances,
            'features': sorted(f.value for f in self.features),
            'region': self.region,
            'engine_version': self.engine_version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TestEnvironmentRequest':
        if 'engine' not in data:
            raise ValueError("Environment request is missing the required 'engine' key")
        return cls(
            engine=data['engine'],
            deployment=data.get('deployment'),
            num_instances=int(data.get('num_instances', 1)),
            features=frozenset(data.get('features', ())),
            region=data.get('region', "us-east-1"),
            engine_version=data.get('engine_version', "latest"),
        )
