# eks_scanner/policy.py
"""
Policy set loading and validation.

- A policy document maps a check group name (eksInfrastructure, eksNodeGroup)
  to its enablement flag, per-concern parameters and vulnerability metadata.
- Parameters of the EKS groups are validated once, at load time; bad types raise PolicyConfigError.
- Other groups (e.g. sg, namingConvention, requiredTags from a wider config) are kept
  as opaque entries; no orchestrator reads them.
- The resulting PolicySet is deeply read-only and is passed explicitly to every evaluation.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from eks_scanner.config import CLUSTER_CHECK_GROUP, DEFAULT_POLICIES, NODEGROUP_CHECK_GROUP
from eks_scanner.exceptions import PolicyConfigError
from eks_scanner.models import freeze
from eks_scanner.utils import load_json_file

EVALUATED_GROUPS = (CLUSTER_CHECK_GROUP, NODEGROUP_CHECK_GROUP)


def _require_str_list(value: Any, where: str) -> None:
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise PolicyConfigError(f"{where} must be a list of strings, got {value!r}")


def _require_mapping(value: Any, where: str) -> None:
    if not isinstance(value, Mapping):
        raise PolicyConfigError(f"{where} must be an object, got {type(value).__name__}")


def _require_bool(value: Any, where: str) -> None:
    if not isinstance(value, bool):
        raise PolicyConfigError(f"{where} must be true or false, got {value!r}")


def _validate_policies(group: str, policies: Mapping[str, Any]) -> None:
    """
    Type-check the parameters of every known concern.

    Unknown concerns are kept untouched; an absent or empty concern is allowed and means "skip".
    """
    where = f"checks.{group}.policies"
    for name, params in policies.items():
        if not params:
            continue
        if name == "requiredTags":
            _require_str_list(params, f"{where}.requiredTags")
            continue
        if name not in ("clusterLogging", "clusterVersion", "endpointAccess", "encryption",
                        "amiType", "updateConfig"):
            continue
        _require_mapping(params, f"{where}.{name}")

        if "requiredLogTypes" in params:
            _require_str_list(params["requiredLogTypes"], f"{where}.{name}.requiredLogTypes")
        if "allowedTypes" in params:
            _require_str_list(params["allowedTypes"], f"{where}.{name}.allowedTypes")
        if params.get("minimumVersion") is not None and not isinstance(params["minimumVersion"], str):
            raise PolicyConfigError(
                f"{where}.{name}.minimumVersion must be a string such as \"1.27\", "
                f"got {params['minimumVersion']!r}"
            )
        for flag in ("publicAccessRestricted", "secretsEncryptionRequired"):
            if flag in params:
                _require_bool(params[flag], f"{where}.{name}.{flag}")
        if "maxUnavailable" in params:
            ceiling = params["maxUnavailable"]
            if isinstance(ceiling, bool) or not isinstance(ceiling, int) or ceiling < 0:
                raise PolicyConfigError(
                    f"{where}.{name}.maxUnavailable must be a non-negative integer, got {ceiling!r}"
                )


@dataclass(frozen=True)
class CheckPolicy:
    """
    Policy for one check group.

    Fields:
    - name: check group name (e.g., "eksInfrastructure")
    - enabled: disabled groups never run
    - resource_types: declared applicability, informational only
    - policies: concern name -> parameters (read-only)
    - vulnerability: report metadata (id, name, risk, remediation, ...)
    - raw: the frozen source entry, kept for groups loaded with opaque()
    """
    name: str
    enabled: bool = True
    resource_types: Tuple[str, ...] = ()
    policies: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    vulnerability: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    raw: Any = None

    @classmethod
    def opaque(cls, name: str, data: Any) -> "CheckPolicy":
        """
        Keep a group no orchestrator evaluates, without validating its shape.
        """
        enabled = isinstance(data, Mapping) and data.get("enabled", True) is True
        return cls(name=name, enabled=enabled, raw=freeze(data))

    @classmethod
    def from_dict(cls, name: str, data: Mapping[str, Any]) -> "CheckPolicy":
        _require_mapping(data, f"checks.{name}")
        enabled = data.get("enabled", True)
        _require_bool(enabled, f"checks.{name}.enabled")

        configuration = data.get("configuration") or {}
        _require_mapping(configuration, f"checks.{name}.configuration")
        policies = configuration.get("policies", data.get("policies")) or {}
        _require_mapping(policies, f"checks.{name}.policies")
        _validate_policies(name, policies)

        resource_types = configuration.get("resourceTypes") or []
        _require_str_list(resource_types, f"checks.{name}.configuration.resourceTypes")

        vulnerability = data.get("vulnerability") or {}
        _require_mapping(vulnerability, f"checks.{name}.vulnerability")

        return cls(
            name=name,
            enabled=enabled,
            resource_types=tuple(resource_types),
            policies=freeze(policies),
            vulnerability=freeze(vulnerability),
        )

    def params(self, concern: str) -> Any:
        return self.policies.get(concern)


@dataclass(frozen=True)
class PolicySet:
    """Immutable collection of check group policies, keyed by group name."""
    checks: Mapping[str, CheckPolicy] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_dict(cls, doc: Mapping[str, Any]) -> "PolicySet":
        """
        Build a PolicySet from a policy document.

        Accepts {"checks": {...}} or the bare checks mapping. Only the EKS groups are validated.
        """
        _require_mapping(doc, "policy document")
        checks_doc = doc.get("checks", doc)
        _require_mapping(checks_doc, "checks")
        checks: Dict[str, CheckPolicy] = {}
        for name, data in checks_doc.items():
            if name in EVALUATED_GROUPS:
                checks[name] = CheckPolicy.from_dict(name, data)
            else:
                checks[name] = CheckPolicy.opaque(name, data)
        return cls(checks=MappingProxyType(checks))

    def get(self, name: str) -> Optional[CheckPolicy]:
        return self.checks.get(name)

    def enabled_groups(self) -> List[str]:
        return [name for name, check in self.checks.items() if check.enabled]


def default_policy_set() -> PolicySet:
    return PolicySet.from_dict(DEFAULT_POLICIES)


def load_policy_set(path: str) -> PolicySet:
    """
    Load a policy document from a JSON file.
    """
    return PolicySet.from_dict(load_json_file(path))
