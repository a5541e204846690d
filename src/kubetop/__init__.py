"""kubetop - live terminal dashboard for Kubernetes clusters."""

__version__ = "0.1.0"
