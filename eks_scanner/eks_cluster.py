# eks_scanner/eks_cluster.py
"""
EKS cluster compliance checks.

- Pure functions over a cluster configuration (AWS Config item / DescribeCluster shape)
  and the parameters of one policy concern.
- Each returns a Violation or None; a missing or empty policy means the check is skipped.
- Field names in each Violation are consumed downstream and must stay stable.
"""

from typing import Any, List, Mapping, Optional

from eks_scanner.config import SECRETS_RESOURCE, UNKNOWN, UNRESTRICTED_CIDR
from eks_scanner.fields import read_list
from eks_scanner.models import Violation
from eks_scanner.versions import compare_versions


def enabled_log_types(configuration: Mapping[str, Any]) -> List[str]:
    """
    Union of `types` across every clusterLogging entry that is enabled, in encounter order.
    """
    logging_cfg = configuration.get("logging") or {}
    enabled: List[str] = []
    for entry in read_list(logging_cfg, "clusterLogging", "logging"):
        if entry.get("enabled") is not True:
            continue
        for log_type in read_list(entry, "types", "logging.clusterLogging[]"):
            if log_type not in enabled:
                enabled.append(log_type)
    return enabled


def check_cluster_logging(configuration: Mapping[str, Any], policy: Mapping[str, Any]) -> Optional[Violation]:
    required = list(policy.get("requiredLogTypes") or [])
    if not required:
        return None

    enabled = enabled_log_types(configuration)
    missing = [t for t in required if t not in enabled]
    if not missing:
        return None
    return Violation(
        check="clusterLogging",
        reason="Missing required log types: " + ", ".join(missing),
        details={
            "required": tuple(required),
            "enabled": tuple(enabled),
            "missing": tuple(missing),
        },
    )


def check_cluster_version(configuration: Mapping[str, Any], policy: Mapping[str, Any]) -> Optional[Violation]:
    minimum = policy.get("minimumVersion")
    if not minimum:
        return None

    current = configuration.get("version") or ""
    if not current:
        return Violation(
            check="clusterVersion",
            reason="Cluster version is not set",
            details={"required": minimum, "current": UNKNOWN},
        )
    if compare_versions(current, minimum) < 0:
        return Violation(
            check="clusterVersion",
            reason=f"Cluster version {current} is below minimum required version {minimum}",
            details={"required": minimum, "current": current},
        )
    return None


def check_endpoint_access(configuration: Mapping[str, Any], policy: Mapping[str, Any]) -> Optional[Violation]:
    """
    Flag a public API endpoint that is open to the whole internet.

    An empty publicAccessCidrs list is treated as unrestricted.
    """
    if not policy.get("publicAccessRestricted"):
        return None

    vpc_config = configuration.get("resourcesVpcConfig") or {}
    public_access = vpc_config.get("endpointPublicAccess")
    cidrs = list(read_list(vpc_config, "publicAccessCidrs", "resourcesVpcConfig"))
    if public_access is True and (not cidrs or UNRESTRICTED_CIDR in cidrs):
        return Violation(
            check="endpointAccess",
            reason="EKS cluster endpoint has unrestricted public access",
            details={"publicAccessEnabled": public_access, "publicAccessCidrs": tuple(cidrs)},
        )
    return None


def check_secrets_encryption(configuration: Mapping[str, Any], policy: Mapping[str, Any]) -> Optional[Violation]:
    if not policy.get("secretsEncryptionRequired"):
        return None

    encryption_config = read_list(configuration, "encryptionConfig", "configuration")
    if not encryption_config:
        return Violation(
            check="encryption",
            reason="Secrets encryption is not enabled",
            details={"required": True, "enabled": False},
        )

    for entry in encryption_config:
        if SECRETS_RESOURCE in read_list(entry, "resources", "encryptionConfig[]"):
            return None
    return Violation(
        check="encryption",
        reason="Secrets encryption is not configured",
        details={"required": True, "enabled": False},
    )
