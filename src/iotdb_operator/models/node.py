"""
Models for the cluster node inventory used during admission.

Nodes are converted from the kubernetes client models into small pydantic
models carrying only what scheduling eligibility depends on: the taints.
"""

from collections.abc import Iterable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from iotdb_operator.constants import (
    TAINT_EFFECT_NO_EXECUTE,
    TAINT_EFFECT_NO_SCHEDULE,
    TAINT_EFFECT_PREFER_NO_SCHEDULE,
)


class TaintEffect(StrEnum):
    """core/v1 taint effects."""

    NO_SCHEDULE = TAINT_EFFECT_NO_SCHEDULE
    PREFER_NO_SCHEDULE = TAINT_EFFECT_PREFER_NO_SCHEDULE
    NO_EXECUTE = TAINT_EFFECT_NO_EXECUTE


# Effects that keep new pods off a node
EXCLUDING_TAINT_EFFECTS = frozenset(
    {TaintEffect.NO_SCHEDULE.value, TaintEffect.NO_EXECUTE.value}
)


class Taint(BaseModel):
    """A taint attached to a node."""

    model_config = {"populate_by_name": True}

    key: str = Field("", description="Taint key")
    value: str | None = Field(None, description="Taint value")
    # Kept as a plain string so effects unknown to this operator are tolerated
    effect: str = Field("", description="Taint effect")

    @property
    def excludes_scheduling(self) -> bool:
        return self.effect in EXCLUDING_TAINT_EFFECTS


class ClusterNode(BaseModel):
    """A cluster node and its taints."""

    name: str = Field(..., description="Node name")
    taints: list[Taint] = Field(default_factory=list, description="Node taints")

    @property
    def is_schedulable(self) -> bool:
        """True unless the node carries a NoSchedule or NoExecute taint."""
        return not any(taint.excludes_scheduling for taint in self.taints)

    @classmethod
    def from_kubernetes(cls, node: Any) -> "ClusterNode":
        """
        Convert a ``kubernetes.client.V1Node`` into a ClusterNode.

        Args:
            node: V1Node returned by ``CoreV1Api.list_node``

        Returns:
            ClusterNode with the node's taints
        """
        name = node.metadata.name if node.metadata else ""
        raw_taints = (node.spec.taints if node.spec else None) or []
        return cls(
            name=name or "",
            taints=[
                Taint(key=t.key or "", value=t.value, effect=t.effect or "")
                for t in raw_taints
            ],
        )


def count_eligible_nodes(nodes: Iterable[ClusterNode]) -> int:
    """Number of nodes without a NoSchedule or NoExecute taint."""
    nodes = list(nodes)
    ineligible = sum(1 for node in nodes if not node.is_schedulable)
    return len(nodes) - ineligible
