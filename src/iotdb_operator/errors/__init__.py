"""
Error handling module for the IoTDB operator.

This module provides an error hierarchy that integrates with kopf's
admission rejections.
"""

from .operator_errors import (
    AdmissionRejected,
    InvalidSpecError,
    NodeInventoryError,
    OperatorError,
    ReplicaCountExceededError,
)

__all__ = [
    "OperatorError",
    "AdmissionRejected",
    "NodeInventoryError",
    "ReplicaCountExceededError",
    "InvalidSpecError",
]
