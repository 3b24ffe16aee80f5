"""Infrastructure constants and Kubernetes adapters."""
