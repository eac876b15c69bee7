# eks_scanner/engine.py
"""
Evaluation orchestration.

- One Orchestrator per resource kind, each with a fixed, ordered list of checks.
- Every check runs regardless of what earlier checks returned; evidence keeps registration order.
- Snapshots of another kind, or whose status is not OK/ResourceDiscovered, get an empty result.
  The empty result for a deleted resource is what clears a previously reported violation.
- scan_snapshots converts results into Finding rows for the report writers.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from eks_scanner.config import (
    CLUSTER_CHECK_GROUP,
    DEFAULT_SEVERITY_WARNING,
    NODEGROUP_CHECK_GROUP,
    RISK_SEVERITY,
)
from eks_scanner.eks_cluster import (
    check_cluster_logging,
    check_cluster_version,
    check_endpoint_access,
    check_secrets_encryption,
)
from eks_scanner.eks_nodegroup import (
    check_ami_type,
    check_required_tags,
    check_scaling_config,
    check_update_config,
)
from eks_scanner.models import EvaluationResult, Finding, ResourceKind, ResourceSnapshot, Violation
from eks_scanner.policy import CheckPolicy, PolicySet

logger = logging.getLogger(__name__)

EMPTY_RESULT = EvaluationResult()

ISSUE_TITLES = {
    "clusterLogging": "Cluster Logging Incomplete",
    "clusterVersion": "Kubernetes Version Below Minimum",
    "endpointAccess": "Unrestricted Public Endpoint",
    "encryption": "Secrets Encryption Disabled",
    "amiType": "AMI Type Not Allowed",
    "updateConfig": "Update Configuration Out Of Policy",
    "requiredTags": "Missing Required Tags",
    "scalingConfig": "Inconsistent Scaling Configuration",
}


@dataclass(frozen=True)
class RegisteredCheck:
    name: str
    run: Callable[[ResourceSnapshot, CheckPolicy], Optional[Violation]]


def configuration_check(concern: str, func: Callable[[Mapping[str, Any], Any], Optional[Violation]]) -> RegisteredCheck:
    """Check over the snapshot configuration, skipped when its policy is absent or empty."""
    def run(snapshot: ResourceSnapshot, check_policy: CheckPolicy) -> Optional[Violation]:
        params = check_policy.params(concern)
        if not params:
            return None
        return func(snapshot.configuration, params)
    return RegisteredCheck(concern, run)


def tag_check(concern: str, func: Callable[[Mapping[str, str], Any], Optional[Violation]]) -> RegisteredCheck:
    """Check over the snapshot tags, skipped when its policy is absent or empty."""
    def run(snapshot: ResourceSnapshot, check_policy: CheckPolicy) -> Optional[Violation]:
        params = check_policy.params(concern)
        if not params:
            return None
        return func(snapshot.tags, params)
    return RegisteredCheck(concern, run)


def unconditional_check(name: str, func: Callable[[Mapping[str, Any]], Optional[Violation]]) -> RegisteredCheck:
    """Check over the snapshot configuration that needs no policy."""
    def run(snapshot: ResourceSnapshot, check_policy: CheckPolicy) -> Optional[Violation]:
        return func(snapshot.configuration)
    return RegisteredCheck(name, run)


@dataclass(frozen=True)
class Orchestrator:
    """
    Runs one resource kind's checks against a snapshot.

    Fields:
    - kind: the only resource kind this orchestrator evaluates
    - group: name of the check group in the PolicySet
    - label: human-readable resource label used in log lines
    - checks: registration order, which is also evidence order
    """
    kind: ResourceKind
    group: str
    label: str
    checks: Tuple[RegisteredCheck, ...]

    def evaluate(self, snapshot: ResourceSnapshot, policy_set: PolicySet) -> EvaluationResult:
        if snapshot.kind is not self.kind:
            return EMPTY_RESULT

        check_policy = policy_set.get(self.group)
        if check_policy is None or not check_policy.enabled:
            return EMPTY_RESULT

        if not snapshot.status.in_scope:
            logger.debug("%s: Clearing %s violation for '%s' (status=%s)",
                         self.group, self.label, snapshot.resource_id, snapshot.status.value)
            return EMPTY_RESULT

        evidence = tuple(
            violation
            for violation in (check.run(snapshot, check_policy) for check in self.checks)
            if violation is not None
        )
        result = EvaluationResult(evidence=evidence)
        if result.vulnerable:
            logger.info("%s: Creating %s violation for '%s': %s",
                        self.group, self.label, snapshot.resource_id, json.dumps(result.to_dict()))
        else:
            logger.debug("%s: Clearing %s violation for '%s'", self.group, self.label, snapshot.resource_id)
        return result


CLUSTER_ORCHESTRATOR = Orchestrator(
    kind=ResourceKind.CLUSTER,
    group=CLUSTER_CHECK_GROUP,
    label="EKS cluster",
    checks=(
        configuration_check("clusterLogging", check_cluster_logging),
        configuration_check("clusterVersion", check_cluster_version),
        configuration_check("endpointAccess", check_endpoint_access),
        configuration_check("encryption", check_secrets_encryption),
    ),
)

NODEGROUP_ORCHESTRATOR = Orchestrator(
    kind=ResourceKind.NODEGROUP,
    group=NODEGROUP_CHECK_GROUP,
    label="EKS node group",
    checks=(
        configuration_check("amiType", check_ami_type),
        configuration_check("updateConfig", check_update_config),
        tag_check("requiredTags", check_required_tags),
        unconditional_check("scalingConfig", check_scaling_config),
    ),
)

ORCHESTRATORS: Dict[ResourceKind, Orchestrator] = {
    ResourceKind.CLUSTER: CLUSTER_ORCHESTRATOR,
    ResourceKind.NODEGROUP: NODEGROUP_ORCHESTRATOR,
}


def evaluate(snapshot: ResourceSnapshot, policy_set: PolicySet) -> EvaluationResult:
    """
    Evaluate one snapshot with the orchestrator for its resource kind.

    Unsupported resource types produce an empty, non-vulnerable result.
    """
    kind = snapshot.kind
    if kind is None:
        return EMPTY_RESULT
    return ORCHESTRATORS[kind].evaluate(snapshot, policy_set)


def result_to_findings(snapshot: ResourceSnapshot, result: EvaluationResult,
                       check_policy: Optional[CheckPolicy]) -> List[Finding]:
    """
    One Finding per violation, carrying the check group's vulnerability metadata.
    """
    vulnerability = check_policy.vulnerability if check_policy else {}
    severity = RISK_SEVERITY.get(vulnerability.get("risk"), DEFAULT_SEVERITY_WARNING)
    findings: List[Finding] = []
    for violation in result.evidence:
        metadata = {
            "check": violation.check,
            "resource_type": snapshot.resource_type,
            "evidence": json.dumps(violation.to_dict()),
        }
        if vulnerability.get("id"):
            metadata["rule_id"] = vulnerability["id"]
        findings.append(Finding(
            resource=snapshot.display_name,
            issue=ISSUE_TITLES.get(violation.check, violation.check),
            severity=severity,
            details=violation.reason,
            metadata=metadata,
        ))
    return findings


def scan_snapshots(snapshots: Iterable[ResourceSnapshot],
                   policy_set: PolicySet) -> Tuple[List[Tuple[ResourceSnapshot, EvaluationResult]], List[Finding]]:
    """
    Evaluate every snapshot and aggregate report findings.

    Returns (results, findings); results keeps one (snapshot, result) pair per input, in input order.
    """
    results: List[Tuple[ResourceSnapshot, EvaluationResult]] = []
    findings: List[Finding] = []
    for snapshot in snapshots:
        result = evaluate(snapshot, policy_set)
        results.append((snapshot, result))
        if result.vulnerable:
            check_policy = policy_set.get(ORCHESTRATORS[snapshot.kind].group)
            findings.extend(result_to_findings(snapshot, result, check_policy))
    return results, findings
