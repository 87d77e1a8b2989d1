"""
Operator error hierarchy with categorization and admission semantics.

This module defines the error types raised while evaluating admission
requests and how they map onto kopf's admission rejections.
"""

import kopf

from iotdb_operator.constants import (
    ADMISSION_CODE_INFRASTRUCTURE,
    ADMISSION_CODE_INVARIANT,
    ERROR_REPLICAS_EXCEED_WORKER_NODES,
)


class OperatorError(Exception):
    """
    Base error class for all operator-related exceptions.

    Provides categorization and user guidance for resolution.
    """

    def __init__(
        self,
        message: str,
        category: str,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        """
        Initialize operator error.

        Args:
            message: Human-readable error description
            category: Error category (admission, infrastructure, validation)
            user_action: What user should do to resolve the issue
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.category = category
        self.user_action = user_action
        self.cause = cause


class AdmissionRejected(OperatorError):
    """Error that rejects an admission request.

    The message is surfaced verbatim to the user or client that issued
    the request; ``user_action`` goes to the audit log only.
    """

    code: int = ADMISSION_CODE_INVARIANT

    def as_admission_error(self) -> kopf.AdmissionError:
        """Convert to the kopf exception that denies the admission request."""
        return kopf.AdmissionError(self.message, code=self.code)


class NodeInventoryError(AdmissionRejected):
    """Listing cluster nodes failed (transport, auth or API server error)."""

    code = ADMISSION_CODE_INFRASTRUCTURE

    def __init__(
        self,
        message: str,
        reason: str | None = None,
        status: int | None = None,
        cause: Exception | None = None,
    ):
        self.reason = reason
        self.status = status
        super().__init__(
            message=message,
            category="infrastructure",
            user_action="Check API server availability and RBAC permissions on nodes",
            cause=cause,
        )


class ReplicaCountExceededError(AdmissionRejected):
    """Requested replicas exceed the number of schedulable worker nodes."""

    code = ADMISSION_CODE_INVARIANT

    def __init__(self, replicas: int, eligible_nodes: int):
        self.replicas = replicas
        self.eligible_nodes = eligible_nodes
        super().__init__(
            message=ERROR_REPLICAS_EXCEED_WORKER_NODES,
            category="admission",
            user_action=(
                f"Lower spec.replicas to at most {eligible_nodes} or make more "
                "worker nodes schedulable"
            ),
        )


class InvalidSpecError(AdmissionRejected):
    """Resource specification could not be parsed."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(
            message=message,
            category="validation",
            user_action="Set spec.replicas to an integer",
            cause=cause,
        )
