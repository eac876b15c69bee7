"""
Central configuration and tunable constants.

- Default AWS profile and region can be overridden by CLI args or environment variables.
- Severity is derived from the vulnerability risk of each check group.
- DEFAULT_POLICIES is the raw policy document used when no --policy file is given.
"""

# Environment variable names consulted by the CLI
ENV_AWS_REGION = "AWS_REGION"
ENV_POLICY_FILE = "EKS_SCANNER_POLICY_FILE"
ENV_REPORT_DIR = "EKS_SCANNER_REPORT_DIR"

# AWS Vault model:
# - We do NOT use a default profile (AWS Vault injects credentials)
# - We DO need a default region for boto3.Session(region_name=...)
DEFAULT_AWS_PROFILE = None
DEFAULT_AWS_REGION = "eu-west-1"
DEFAULT_REPORT_DIR = "reports"

# Severity scale: 0 (info) to 10 (critical)
RISK_SEVERITY = {
    "High": 8,
    "Medium": 5,
    "Low": 3,
}
DEFAULT_SEVERITY_WARNING = 5

# AWS Config resource types
CLUSTER_RESOURCE_TYPE = "AWS::EKS::Cluster"
NODEGROUP_RESOURCE_TYPE = "AWS::EKS::Nodegroup"

# Check group names
CLUSTER_CHECK_GROUP = "eksInfrastructure"
NODEGROUP_CHECK_GROUP = "eksNodeGroup"

UNRESTRICTED_CIDR = "0.0.0.0/0"
SECRETS_RESOURCE = "secrets"

# Sentinels reported when a configuration field is missing
UNKNOWN = "unknown"
NOT_SET = "not set"

DEFAULT_POLICIES = {
    "checks": {
        CLUSTER_CHECK_GROUP: {
            "name": CLUSTER_CHECK_GROUP,
            "enabled": True,
            "configuration": {
                "resourceTypes": [CLUSTER_RESOURCE_TYPE],
                "policies": {
                    "clusterLogging": {
                        "requiredLogTypes": ["api", "audit", "authenticator", "controllerManager", "scheduler"]
                    },
                    "clusterVersion": {
                        "minimumVersion": "1.27"
                    },
                    "endpointAccess": {
                        "publicAccessRestricted": True
                    },
                    "encryption": {
                        "secretsEncryptionRequired": True
                    },
                },
            },
            "vulnerability": {
                "id": "custom-eks-001",
                "name": "EKS Cluster Security Configuration Policy Violation",
                "description": "EKS Cluster was found to have security configurations that do not meet "
                               "organizational policy requirements.",
                "remediation": "Update the EKS cluster configuration to meet security policy requirements.",
                "risk": "High",
                "scope": "eks-cluster",
                "reference": "https://docs.aws.amazon.com/eks/latest/userguide/security-best-practices.html",
            },
        },
        NODEGROUP_CHECK_GROUP: {
            "name": NODEGROUP_CHECK_GROUP,
            "enabled": True,
            "configuration": {
                "resourceTypes": [NODEGROUP_RESOURCE_TYPE],
                "policies": {
                    "amiType": {
                        "allowedTypes": [
                            "AL2_x86_64",
                            "AL2_x86_64_GPU",
                            "AL2_ARM_64",
                            "BOTTLEROCKET_ARM_64",
                            "BOTTLEROCKET_x86_64",
                        ]
                    },
                    "updateConfig": {
                        "maxUnavailable": 1
                    },
                    "requiredTags": ["Environment", "Team", "CostCenter"],
                },
            },
            "vulnerability": {
                "id": "custom-eks-002",
                "name": "EKS Node Group Configuration Policy Violation",
                "description": "EKS Node Group was found to have configurations that do not meet "
                               "organizational policy requirements.",
                "remediation": "Update the EKS node group configuration to meet policy requirements.",
                "risk": "Medium",
                "scope": "eks-nodegroup",
                "reference": "https://docs.aws.amazon.com/eks/latest/userguide/managed-node-groups.html",
            },
        },
    }
}
