# models.py
"""
Data models used by the scanner.

- Keep simple, serializable dataclasses for snapshots, violations and findings.
- Snapshots, violations and evaluation results are frozen; checks never mutate their inputs.
- Finding is the flat report row; Violation is the structured evidence a check returns.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from eks_scanner.config import CLUSTER_RESOURCE_TYPE, NODEGROUP_RESOURCE_TYPE


class ResourceKind(str, Enum):
    """Resource kinds the scanner has orchestrators for."""

    CLUSTER = CLUSTER_RESOURCE_TYPE
    NODEGROUP = NODEGROUP_RESOURCE_TYPE

    @classmethod
    def parse(cls, resource_type: str) -> Optional["ResourceKind"]:
        try:
            return cls(resource_type)
        except ValueError:
            return None


class LifecycleStatus(str, Enum):
    """AWS Config configurationItemStatus values."""

    OK = "OK"
    DISCOVERED = "ResourceDiscovered"
    NOT_RECORDED = "ResourceNotRecorded"
    DELETED = "ResourceDeleted"
    DELETED_NOT_RECORDED = "ResourceDeletedNotRecorded"
    OTHER = "Other"

    @classmethod
    def parse(cls, status: Optional[str]) -> "LifecycleStatus":
        try:
            return cls(status)
        except ValueError:
            return cls.OTHER

    @property
    def in_scope(self) -> bool:
        """True for statuses whose configuration should be evaluated."""
        return self in (LifecycleStatus.OK, LifecycleStatus.DISCOVERED)


def _readonly(mapping: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


def freeze(value: Any) -> Any:
    """Recursively turn mappings into read-only proxies and lists into tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


@dataclass(frozen=True)
class ResourceSnapshot:
    """
    Point-in-time view of one resource, as delivered by a configuration item.

    Fields:
    - resource_type: raw AWS type (e.g., "AWS::EKS::Cluster"); unsupported types are kept as-is
    - resource_id: identifier used in reports
    - status: lifecycle status of the configuration item
    - configuration: kind-specific configuration fields (read-only at every depth; lists become tuples)
    - tags: tag key -> value (read-only)
    """
    resource_type: str
    resource_id: str
    status: LifecycleStatus
    configuration: Mapping[str, Any] = field(default_factory=dict)
    tags: Mapping[str, str] = field(default_factory=dict)
    resource_name: Optional[str] = None
    arn: Optional[str] = None
    region: Optional[str] = None
    capture_time: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "configuration", freeze(dict(self.configuration or {})))
        object.__setattr__(self, "tags", freeze(dict(self.tags or {})))

    @property
    def kind(self) -> Optional[ResourceKind]:
        return ResourceKind.parse(self.resource_type)

    @property
    def display_name(self) -> str:
        return self.arn or self.resource_name or self.resource_id


@dataclass(frozen=True)
class Violation:
    """
    One detected non-compliance.

    `details` holds the check-specific fields (required/current/missing/...).
    Consumers match on `check` plus these field names, so they must stay stable.
    """
    check: str
    reason: str
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "details", _readonly(self.details))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"check": self.check, "reason": self.reason}
        for key, value in self.details.items():
            out[key] = list(value) if isinstance(value, tuple) else value
        return out


@dataclass(frozen=True)
class EvaluationResult:
    """Aggregate outcome of all applicable checks against one snapshot."""
    evidence: Tuple[Violation, ...] = ()

    @property
    def vulnerable(self) -> bool:
        return len(self.evidence) > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vulnerable": self.vulnerable,
            "evidence": [v.to_dict() for v in self.evidence],
        }


@dataclass
class Finding:
    """
    Represents a single report row.

    Fields:
    - resource: canonical identifier (cluster/nodegroup ARN, or "aws:eks:list_clusters" for scan errors)
    - issue: short human-readable description (e.g., "Cluster Logging Incomplete")
    - severity: numeric severity (0-10)
    - details: free-text details useful for triage
    - metadata: optional structured metadata (rule id, check, resource type)
    """
    resource: str
    issue: str
    severity: int
    details: str = ""
    metadata: Dict[str, str] = field(default_factory=dict)
