# tests/test_engine.py
"""
Orchestration tests: kind dispatch, lifecycle filtering, evidence ordering and report rows.
"""

import json

import pytest

from eks_scanner.engine import (
    CLUSTER_ORCHESTRATOR,
    NODEGROUP_ORCHESTRATOR,
    ORCHESTRATORS,
    evaluate,
    result_to_findings,
    scan_snapshots,
)
from eks_scanner.models import EvaluationResult, LifecycleStatus, ResourceKind, ResourceSnapshot
from eks_scanner.policy import PolicySet

VIOLATING_CLUSTER = {
    "version": "1.24",
    "logging": {"clusterLogging": [{"types": ["api"], "enabled": True}]},
    "resourcesVpcConfig": {"endpointPublicAccess": True, "publicAccessCidrs": ["0.0.0.0/0"]},
    "encryptionConfig": [],
}

VIOLATING_NODEGROUP = {
    "amiType": "CUSTOM",
    "updateConfig": {"maxUnavailable": 4},
    "scalingConfig": {"minSize": 5, "maxSize": 3, "desiredSize": 4},
}


def cluster(configuration, status=LifecycleStatus.OK):
    return ResourceSnapshot(
        resource_type="AWS::EKS::Cluster",
        resource_id="prod",
        status=status,
        configuration=configuration,
        arn="arn:aws:eks:us-east-1:123456789012:cluster/prod",
    )


def nodegroup(configuration, tags=None, status=LifecycleStatus.DISCOVERED):
    return ResourceSnapshot(
        resource_type="AWS::EKS::Nodegroup",
        resource_id="workers",
        status=status,
        configuration=configuration,
        tags=tags or {},
    )


def test_every_resource_kind_has_an_orchestrator():
    assert set(ORCHESTRATORS) == set(ResourceKind)
    for kind, orchestrator in ORCHESTRATORS.items():
        assert orchestrator.kind is kind


def test_cluster_evidence_in_registration_order(policy_set):
    result = evaluate(cluster(VIOLATING_CLUSTER), policy_set)
    assert result.vulnerable is True
    assert [v.check for v in result.evidence] == ["clusterLogging", "clusterVersion", "endpointAccess", "encryption"]


def test_logging_before_version_regardless_of_detection(policy_set):
    configuration = {
        "version": "1.20",
        "logging": {"clusterLogging": []},
        "resourcesVpcConfig": {"endpointPublicAccess": False},
        "encryptionConfig": [{"resources": ["secrets"]}],
    }
    result = evaluate(cluster(configuration), policy_set)
    assert [v.check for v in result.evidence] == ["clusterLogging", "clusterVersion"]


def test_nodegroup_runs_every_check(policy_set):
    result = evaluate(nodegroup(VIOLATING_NODEGROUP, tags={"Environment": "prod"}), policy_set)
    assert [v.check for v in result.evidence] == ["amiType", "updateConfig", "requiredTags", "scalingConfig"]
    assert result.evidence[2].to_dict()["missing"] == ["Team", "CostCenter"]
    assert "Minimum size" in result.evidence[3].reason


def test_compliant_resources(policy_set, compliant_cluster_configuration,
                             compliant_nodegroup_configuration, compliant_tags):
    assert evaluate(cluster(compliant_cluster_configuration), policy_set) == EvaluationResult()
    assert evaluate(nodegroup(compliant_nodegroup_configuration, compliant_tags), policy_set).vulnerable is False


@pytest.mark.parametrize("status", [
    LifecycleStatus.DELETED,
    LifecycleStatus.DELETED_NOT_RECORDED,
    LifecycleStatus.NOT_RECORDED,
    LifecycleStatus.OTHER,
])
def test_out_of_scope_status_clears(policy_set, status):
    result = evaluate(cluster(VIOLATING_CLUSTER, status=status), policy_set)
    assert result.to_dict() == {"vulnerable": False, "evidence": []}


@pytest.mark.parametrize("status", [
    LifecycleStatus.DELETED,
    LifecycleStatus.DELETED_NOT_RECORDED,
    LifecycleStatus.NOT_RECORDED,
    LifecycleStatus.OTHER,
])
def test_out_of_scope_status_clears_nodegroup(policy_set, status):
    snapshot = nodegroup(VIOLATING_NODEGROUP, tags={}, status=status)
    result = NODEGROUP_ORCHESTRATOR.evaluate(snapshot, policy_set)
    assert result.to_dict() == {"vulnerable": False, "evidence": []}
    assert evaluate(snapshot, policy_set) == EvaluationResult()


def test_discovered_and_ok_are_evaluated(policy_set):
    assert evaluate(cluster(VIOLATING_CLUSTER, status=LifecycleStatus.DISCOVERED), policy_set).vulnerable
    assert evaluate(nodegroup(VIOLATING_NODEGROUP, status=LifecycleStatus.OK), policy_set).vulnerable


def test_orchestrator_ignores_other_kinds(policy_set):
    assert CLUSTER_ORCHESTRATOR.evaluate(nodegroup(VIOLATING_NODEGROUP), policy_set).vulnerable is False
    assert NODEGROUP_ORCHESTRATOR.evaluate(cluster(VIOLATING_CLUSTER), policy_set).vulnerable is False


def test_unsupported_resource_type(policy_set):
    snapshot = ResourceSnapshot(
        resource_type="AWS::EC2::SecurityGroup",
        resource_id="sg-123",
        status=LifecycleStatus.OK,
        configuration=VIOLATING_CLUSTER,
    )
    assert snapshot.kind is None
    assert evaluate(snapshot, policy_set) == EvaluationResult()


def test_disabled_or_absent_group_is_skipped():
    disabled = PolicySet.from_dict({"eksInfrastructure": {"enabled": False, "policies": {
        "clusterVersion": {"minimumVersion": "1.27"}}}})
    assert evaluate(cluster(VIOLATING_CLUSTER), disabled).vulnerable is False
    assert evaluate(nodegroup(VIOLATING_NODEGROUP), PolicySet.from_dict({})).vulnerable is False


def test_scaling_runs_without_policies():
    policy_set = PolicySet.from_dict({"eksNodeGroup": {"policies": {}}})
    result = evaluate(nodegroup(VIOLATING_NODEGROUP), policy_set)
    assert [v.check for v in result.evidence] == ["scalingConfig"]


def test_evaluation_is_idempotent(policy_set):
    snapshot = nodegroup(VIOLATING_NODEGROUP, tags={"Environment": "prod"})
    first = json.dumps(evaluate(snapshot, policy_set).to_dict())
    second = json.dumps(evaluate(snapshot, policy_set).to_dict())
    assert first == second


def test_vulnerable_follows_evidence():
    assert EvaluationResult().vulnerable is False
    assert EvaluationResult().to_dict() == {"vulnerable": False, "evidence": []}


def test_result_to_findings(policy_set):
    snapshot = cluster(VIOLATING_CLUSTER)
    result = evaluate(snapshot, policy_set)
    findings = result_to_findings(snapshot, result, policy_set.get("eksInfrastructure"))
    assert len(findings) == 4
    first = findings[0]
    assert first.resource == "arn:aws:eks:us-east-1:123456789012:cluster/prod"
    assert first.issue == "Cluster Logging Incomplete"
    assert first.severity == 8
    assert first.metadata["rule_id"] == "custom-eks-001"
    assert json.loads(first.metadata["evidence"])["check"] == "clusterLogging"


def test_scan_snapshots(policy_set, compliant_cluster_configuration):
    snapshots = [
        cluster(compliant_cluster_configuration),
        nodegroup(VIOLATING_NODEGROUP, tags={"Environment": "prod"}),
        cluster(VIOLATING_CLUSTER, status=LifecycleStatus.DELETED),
    ]
    results, findings = scan_snapshots(snapshots, policy_set)
    assert [r.vulnerable for _, r in results] == [False, True, False]
    assert len(findings) == 4
    assert all(f.severity == 5 for f in findings)
    assert all(f.metadata["rule_id"] == "custom-eks-002" for f in findings)
