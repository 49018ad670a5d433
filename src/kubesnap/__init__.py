"""Point-in-time snapshots of Kubernetes clusters for offline inspection."""

__version__ = "0.1.0"
