# eks_scanner/eks_nodegroup.py
"""
EKS managed node group compliance checks.

- AMI type, rolling update settings and required tags are policy-gated.
- Scaling consistency always runs; it needs no policy.
- Size and count fields are read as integers; anything else raises SnapshotError
  instead of being compared loosely.
"""

from typing import Any, Iterable, List, Mapping, Optional

from eks_scanner.config import NOT_SET, UNKNOWN
from eks_scanner.fields import read_int
from eks_scanner.models import Violation


def check_ami_type(configuration: Mapping[str, Any], policy: Mapping[str, Any]) -> Optional[Violation]:
    allowed = list(policy.get("allowedTypes") or [])
    if not allowed:
        return None

    ami_type = configuration.get("amiType") or ""
    if not ami_type:
        return Violation(
            check="amiType",
            reason="AMI type is not set",
            details={"allowed": tuple(allowed), "current": UNKNOWN},
        )
    if ami_type not in allowed:
        return Violation(
            check="amiType",
            reason=f"AMI type '{ami_type}' is not in the allowed list",
            details={"allowed": tuple(allowed), "current": ami_type},
        )
    return None


def check_update_config(configuration: Mapping[str, Any], policy: Mapping[str, Any]) -> Optional[Violation]:
    """
    Enforce the maxUnavailable ceiling for rolling updates.

    Only maxUnavailable is governed; a node group using maxUnavailablePercentage
    reports maxUnavailable as not set.
    """
    ceiling = policy.get("maxUnavailable")
    if ceiling is None:
        return None

    update_config = configuration.get("updateConfig") or {}
    current = read_int(update_config, "maxUnavailable", "updateConfig")
    if current is None:
        return Violation(
            check="updateConfig",
            reason="maxUnavailable is not configured",
            details={"required": ceiling, "current": NOT_SET},
        )
    if current > ceiling:
        return Violation(
            check="updateConfig",
            reason=f"maxUnavailable ({current}) exceeds policy limit ({ceiling})",
            details={"required": ceiling, "current": current},
        )
    return None


def check_required_tags(tags: Mapping[str, str], required_tags: Iterable[str]) -> Optional[Violation]:
    required = list(required_tags or [])
    if not required:
        return None

    missing: List[str] = [key for key in required if key not in tags]
    if not missing:
        return None
    return Violation(
        check="requiredTags",
        reason="Missing required tags: " + ", ".join(missing),
        details={"required": tuple(required), "missing": tuple(missing)},
    )


def check_scaling_config(configuration: Mapping[str, Any]) -> Optional[Violation]:
    """
    Basic consistency of minSize/maxSize/desiredSize.

    Rules are tried in order (min > max, desired < min, desired > max) and the
    first one that fails is reported. A rule is skipped when either size is unset.
    """
    scaling = configuration.get("scalingConfig") or {}
    desired = read_int(scaling, "desiredSize", "scalingConfig")
    min_size = read_int(scaling, "minSize", "scalingConfig")
    max_size = read_int(scaling, "maxSize", "scalingConfig")

    if min_size is not None and max_size is not None and min_size > max_size:
        return Violation(
            check="scalingConfig",
            reason=f"Minimum size ({min_size}) is greater than maximum size ({max_size})",
            details={"minSize": min_size, "maxSize": max_size},
        )
    if desired is not None and min_size is not None and desired < min_size:
        return Violation(
            check="scalingConfig",
            reason=f"Desired size ({desired}) is less than minimum size ({min_size})",
            details={"desiredSize": desired, "minSize": min_size},
        )
    if desired is not None and max_size is not None and desired > max_size:
        return Violation(
            check="scalingConfig",
            reason=f"Desired size ({desired}) is greater than maximum size ({max_size})",
            details={"desiredSize": desired, "maxSize": max_size},
        )
    return None
