"""EKS cluster and node group policy scanner."""

__version__ = "0.1.0"
