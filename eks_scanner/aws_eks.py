# eks_scanner/aws_eks.py
"""
Live EKS snapshot source.

- Enumerates clusters and managed node groups with a boto3 Session and turns each
  DescribeCluster / DescribeNodegroup response into a ResourceSnapshot with status OK.
- The describe responses use the same camelCase fields as AWS Config items, so the
  same checks apply unchanged.
- API failures are recorded as warning Findings and the scan continues, like list/read
  errors in the S3 scanner this grew from.
"""

import logging
from typing import Any, Dict, List, Tuple

from botocore.exceptions import ClientError

from eks_scanner.config import DEFAULT_SEVERITY_WARNING
from eks_scanner.engine import scan_snapshots
from eks_scanner.models import EvaluationResult, Finding, LifecycleStatus, ResourceKind, ResourceSnapshot
from eks_scanner.policy import PolicySet

logger = logging.getLogger(__name__)

# --- Live AWS helpers -----------------------------------------------------

def list_clusters_live(session) -> List[str]:
    """
    List cluster names. Caller should handle ClientError if credentials/permissions are missing.
    """
    eks = session.client("eks")
    names: List[str] = []
    for page in eks.get_paginator("list_clusters").paginate():
        names.extend(page.get("clusters", []))
    return names

def describe_cluster_live(session, cluster_name: str) -> Dict[str, Any]:
    eks = session.client("eks")
    return eks.describe_cluster(name=cluster_name)["cluster"]

def list_nodegroups_live(session, cluster_name: str) -> List[str]:
    eks = session.client("eks")
    names: List[str] = []
    for page in eks.get_paginator("list_nodegroups").paginate(clusterName=cluster_name):
        names.extend(page.get("nodegroups", []))
    return names

def describe_nodegroup_live(session, cluster_name: str, nodegroup_name: str) -> Dict[str, Any]:
    eks = session.client("eks")
    return eks.describe_nodegroup(clusterName=cluster_name, nodegroupName=nodegroup_name)["nodegroup"]

# --- Snapshot builders ----------------------------------------------------

def snapshot_from_cluster(cluster: Dict[str, Any], region: str = None) -> ResourceSnapshot:
    return ResourceSnapshot(
        resource_type=ResourceKind.CLUSTER.value,
        resource_id=cluster.get("name", ""),
        status=LifecycleStatus.OK,
        configuration=cluster,
        tags=cluster.get("tags") or {},
        resource_name=cluster.get("name"),
        arn=cluster.get("arn"),
        region=region,
    )

def snapshot_from_nodegroup(nodegroup: Dict[str, Any], region: str = None) -> ResourceSnapshot:
    return ResourceSnapshot(
        resource_type=ResourceKind.NODEGROUP.value,
        resource_id=nodegroup.get("nodegroupName", ""),
        status=LifecycleStatus.OK,
        configuration=nodegroup,
        tags=nodegroup.get("tags") or {},
        resource_name=nodegroup.get("nodegroupName"),
        arn=nodegroup.get("nodegroupArn"),
        region=region,
    )

def _error_finding(resource: str, issue: str, error: ClientError) -> Finding:
    return Finding(resource=resource, issue=issue, severity=DEFAULT_SEVERITY_WARNING, details=str(error))

def collect_snapshots_live(session) -> Tuple[List[ResourceSnapshot], List[Finding]]:
    """
    Describe every cluster and node group in the session's region.

    Returns (snapshots, error findings).
    """
    region = session.region_name
    snapshots: List[ResourceSnapshot] = []
    errors: List[Finding] = []
    try:
        cluster_names = list_clusters_live(session)
    except ClientError as e:
        return [], [_error_finding("aws:eks:list_clusters", "ListClustersError", e)]

    for name in cluster_names:
        try:
            snapshots.append(snapshot_from_cluster(describe_cluster_live(session, name), region))
        except ClientError as e:
            errors.append(_error_finding(f"eks://{name}", "DescribeClusterError", e))
            # node groups may still be readable

        try:
            nodegroup_names = list_nodegroups_live(session, name)
        except ClientError as e:
            errors.append(_error_finding(f"eks://{name}", "ListNodegroupsError", e))
            continue
        for nodegroup_name in nodegroup_names:
            try:
                nodegroup = describe_nodegroup_live(session, name, nodegroup_name)
            except ClientError as e:
                errors.append(_error_finding(f"eks://{name}/{nodegroup_name}", "DescribeNodegroupError", e))
                continue
            snapshots.append(snapshot_from_nodegroup(nodegroup, region))

    logger.info("Collected %d EKS snapshots (%d errors)", len(snapshots), len(errors))
    return snapshots, errors

def scan_all_eks_live(session, policy_set: PolicySet) -> Tuple[List[Tuple[ResourceSnapshot, EvaluationResult]], List[Finding]]:
    """
    High-level live scan: describe clusters and node groups, evaluate, aggregate findings.
    """
    snapshots, errors = collect_snapshots_live(session)
    results, findings = scan_snapshots(snapshots, policy_set)
    return results, errors + findings
