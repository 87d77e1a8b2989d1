"""
IoTDB Operator - Kubernetes admission control for Apache IoTDB resources.

This package provides the admission webhooks that guard IoTDB custom
resources before they are persisted:
- ConfigNode replica validation against schedulable cluster nodes
- Defaulting hook registration for the mutating webhook path
- Webhook and RBAC manifest rendering
"""

__version__ = "0.1.0"
