"""Persistent stores used across luaudoc runs."""

from .manifest import ManifestStore, ReconcileResult

__all__ = ["ManifestStore", "ReconcileResult"]
