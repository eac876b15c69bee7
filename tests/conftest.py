# tests/conftest.py
"""
Shared fixtures.

- Fake AWS credentials so moto-backed tests never reach a real account.
- Sample cluster/nodegroup configurations shaped like AWS Config items.
"""

import pytest

from eks_scanner.policy import default_policy_set


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.delenv("EKS_SCANNER_POLICY_FILE", raising=False)


@pytest.fixture
def policy_set():
    return default_policy_set()


@pytest.fixture
def compliant_cluster_configuration():
    return {
        "name": "prod",
        "version": "1.28",
        "logging": {
            "clusterLogging": [
                {"types": ["api", "audit", "authenticator", "controllerManager", "scheduler"], "enabled": True}
            ]
        },
        "resourcesVpcConfig": {
            "endpointPublicAccess": True,
            "endpointPrivateAccess": True,
            "publicAccessCidrs": ["10.0.0.0/8"],
        },
        "encryptionConfig": [
            {"resources": ["secrets"], "provider": {"keyArn": "arn:aws:kms:us-east-1:123456789012:key/abc"}}
        ],
    }


@pytest.fixture
def compliant_nodegroup_configuration():
    return {
        "nodegroupName": "workers",
        "clusterName": "prod",
        "amiType": "AL2_x86_64",
        "updateConfig": {"maxUnavailable": 1},
        "scalingConfig": {"minSize": 1, "maxSize": 5, "desiredSize": 3},
    }


@pytest.fixture
def compliant_tags():
    return {"Environment": "prod", "Team": "platform", "CostCenter": "1234"}
