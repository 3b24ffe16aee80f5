"""gitops-promoter: promote container images into rendered GitOps branches."""

__version__ = "0.1.0"
