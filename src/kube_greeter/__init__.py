"""Hello-from-Kubernetes greeting service."""

__version__ = "1.0.0"
