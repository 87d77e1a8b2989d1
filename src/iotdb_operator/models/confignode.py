"""
Pydantic models for ConfigNode resources.

A ConfigNode represents the replicated configuration-management role of an
Apache IoTDB deployment. Only the fields that take part in admission are
modelled explicitly; other fields under .spec are preserved untouched.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConfigNodeSpec(BaseModel):
    """Desired state of a ConfigNode."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    # Absent means zero; range is not checked beyond the node comparison
    replicas: int = Field(0, description="Desired number of ConfigNode replicas")

    @field_validator("replicas", mode="before")
    @classmethod
    def null_replicas_as_zero(cls, v: Any) -> Any:
        return 0 if v is None else v


class ConfigNode(BaseModel):
    """A ConfigNode resource as seen by the admission webhooks."""

    model_config = {"populate_by_name": True}

    name: str = Field(..., description="Resource name")
    namespace: str | None = Field(None, description="Resource namespace")
    spec: ConfigNodeSpec

    @property
    def replicas(self) -> int:
        return self.spec.replicas

    @classmethod
    def from_admission(
        cls, spec: dict[str, Any], name: str | None, namespace: str | None
    ) -> "ConfigNode":
        """Build from the ``spec``/``name``/``namespace`` kwargs kopf hands to handlers."""
        return cls.model_validate(
            {"name": name or "", "namespace": namespace, "spec": dict(spec or {})}
        )

    @classmethod
    def from_body(cls, body: dict[str, Any]) -> "ConfigNode":
        """Build from a full resource body (``metadata`` + ``spec``)."""
        metadata = body.get("metadata") or {}
        return cls.from_admission(
            spec=body.get("spec") or {},
            name=metadata.get("name"),
            namespace=metadata.get("namespace"),
        )
