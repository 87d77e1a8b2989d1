"""
Base interface for admission hooks of a resource kind.

Each custom resource kind guarded by the operator implements one defaulting
hook and three validation hooks. The kopf handlers in the per-kind modules
only translate admission requests into calls on these methods.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeAlias, TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)

AdmissionWarnings: TypeAlias = list[str]


class AdmissionHooks(ABC, Generic[T]):
    """
    Defaulting and validation hooks for one resource kind.

    Validation hooks return admission warnings on success and raise an
    ``AdmissionRejected`` subclass to deny the request.
    """

    @abstractmethod
    def default(self, obj: T) -> None:
        """Apply defaults to ``obj`` in place."""

    @abstractmethod
    async def validate_create(self, obj: T) -> AdmissionWarnings:
        """Validate a resource that is about to be created."""

    @abstractmethod
    async def validate_update(self, obj: T, old: T | None) -> AdmissionWarnings:
        """Validate a resource that is about to be updated."""

    @abstractmethod
    async def validate_delete(self, obj: T | None) -> AdmissionWarnings:
        """Validate a resource that is about to be deleted."""
