# src/integration/host/info.py
"""Provisioned environment description handed to test suites.

The suite process receives this structure as JSON in the ``TEST_ENV_INFO_JSON``
environment variable. Keys are camelCase and enum values use their member
names (``MYSQL``, ``AURORA``) so suites written against the container side
can deserialize it case-insensitively.
"""
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .request import TestEnvironmentRequest

TEST_ENV_INFO_VARIABLE = "TEST_ENV_INFO_JSON"


@dataclass
class TestInstanceInfo:
    __test__ = False

    instance_id: str
    host: str
    port: int

    def to_dict(self) -> Dict[str, Any]:
        return {'instanceId': self.instance_id, 'host': self.host, 'port': self.port}


@dataclass
class TestDatabaseInfo:
    """Endpoints and credentials of the database under test."""

    __test__ = False

    username: str
    password: str
    default_db_name: str
    cluster_endpoint: Optional[str] = None
    cluster_endpoint_port: int = 0
    cluster_read_only_endpoint: Optional[str] = None
    cluster_read_only_endpoint_port: int = 0
    instance_endpoint_suffix: Optional[str] = None
    instance_endpoint_port: int = 0
    instances: List[TestInstanceInfo] = field(default_factory=list)

    def get_instance(self, instance_id: str) -> TestInstanceInfo:
        for instance in self.instances:
            if instance.instance_id == instance_id:
                return instance
        raise KeyError(f"Instance {instance_id} not found.")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'username': self.username,
            'password': self.password,
            'defaultDbName': self.default_db_name,
            'clusterEndpoint': self.cluster_endpoint,
            'clusterEndpointPort': self.cluster_endpoint_port,
            'clusterReadOnlyEndpoint': self.cluster_read_only_endpoint,
            'clusterReadOnlyEndpointPort': self.cluster_read_only_endpoint_port,
            'instanceEndpointSuffix': self.instance_endpoint_suffix,
            'instanceEndpointPort': self.instance_endpoint_port,
            'instances': [instance.to_dict() for instance in self.instances],
        }

    @classmethod
    def from_config(cls, data: Dict[str, Any], default_port: Optional[int] = None) -> 'TestDatabaseInfo':
        """Build from a snake_case ``databases`` config entry.

        A port left out falls back to ``instance_endpoint_port``, then to
        ``default_port``. An instance whose port is still unknown is rejected.
        """
        instance_port = data.get('instance_endpoint_port', default_port)
        instances = []
        for item in data.get('instances', []):
            port = item.get('port', instance_port)
            if port is None:
                raise ValueError(f"Instance {item['instance_id']} has no port")
            instances.append(TestInstanceInfo(instance_id=item['instance_id'], host=item['host'], port=int(port)))

        return cls(
            username=data['username'],
            password=data.get('password', ''),
            default_db_name=data.get('database', 'test'),
            cluster_endpoint=data.get('cluster_endpoint'),
            cluster_endpoint_port=int(data.get('cluster_endpoint_port', default_port or 0)),
            cluster_read_only_endpoint=data.get('cluster_read_only_endpoint'),
            cluster_read_only_endpoint_port=int(data.get('cluster_read_only_endpoint_port', default_port or 0)),
            instance_endpoint_suffix=data.get('instance_endpoint_suffix'),
            instance_endpoint_port=int(instance_port or 0),
            instances=instances,
        )


@dataclass
class TestEnvironmentInfo:
    __test__ = False

    request: TestEnvironmentRequest
    database_info: TestDatabaseInfo
    region: Optional[str] = None
    engine_version: Optional[str] = None
    # Random alphanumeric combination used to name clusters and instances.
    random_base: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'request': {
                'engine': self.request.engine.name,
                'deployment': self.request.deployment.name if self.request.deployment is not None else None,
                'numOfInstances': self.request.num_instances,
                'features': sorted(f.name for f in self.request.features),
            },
            'region': self.region,
            'databaseEngine': self.request.engine.name,
            'databaseEngineVersion': self.engine_version,
            'databaseInfo': self.database_info.to_dict(),
            'randomBase': self.random_base,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())
