"""
Services package - Admission decision logic.

Contains the replica validator that compares a ConfigNode's desired
replicas with the schedulable worker nodes of the cluster.
"""

from .replica_validator import ReplicaValidator

__all__ = ["ReplicaValidator"]
