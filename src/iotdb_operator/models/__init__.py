"""
Models package - Pydantic models for type-safe resource handling.

Defines data models for:
- ConfigNode resource specifications
- Cluster node inventory snapshots (nodes and their taints)
"""
