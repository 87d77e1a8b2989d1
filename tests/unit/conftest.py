"""Shared pytest fixtures for the admission webhook unit tests."""

import pytest

from iotdb_operator.errors import NodeInventoryError
from iotdb_operator.models.node import ClusterNode, Taint


class FakeNodeReader:
    """NodeReader returning a fixed node list, or raising a fixed error."""

    def __init__(
        self,
        nodes: list[ClusterNode] | None = None,
        error: Exception | None = None,
    ):
        self.nodes = nodes or []
        self.error = error
        self.calls: list[float | None] = []

    async def list_nodes(self, timeout: float | None = None) -> list[ClusterNode]:
        self.calls.append(timeout)
        if self.error is not None:
            raise self.error
        return list(self.nodes)


@pytest.fixture
def make_node():
    """Factory for ClusterNode objects with the given taint effects."""

    def _make(name: str, *effects: str) -> ClusterNode:
        return ClusterNode(
            name=name,
            taints=[
                Taint(key=f"example.com/taint-{i}", effect=effect)
                for i, effect in enumerate(effects)
            ],
        )

    return _make


@pytest.fixture
def node_reader_factory():
    """Factory for FakeNodeReader instances."""

    def _make(nodes=None, error=None) -> FakeNodeReader:
        return FakeNodeReader(nodes=nodes, error=error)

    return _make


@pytest.fixture
def failing_node_reader():
    """NodeReader whose node list always fails."""
    return FakeNodeReader(
        error=NodeInventoryError("nodes is forbidden", reason="Forbidden", status=403)
    )
