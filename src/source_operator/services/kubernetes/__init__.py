"""Kubernetes API backed object store."""

from .client import KubernetesStore, get_kubernetes_store

__all__ = ["KubernetesStore", "get_kubernetes_store"]
