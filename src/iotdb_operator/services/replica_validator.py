"""
Replica validation for ConfigNode resources.

A ConfigNode may not ask for more replicas than there are worker nodes able
to host a pod. Eligibility is decided by taints: a node carrying a
NoSchedule or NoExecute taint does not count.

The node inventory is read fresh on every call. Two concurrent admissions
can each pass against the same snapshot; no cluster-wide accounting is done.
"""

from iotdb_operator.constants import CONFIGNODE_RESOURCE_TYPE
from iotdb_operator.errors import NodeInventoryError, ReplicaCountExceededError
from iotdb_operator.models.confignode import ConfigNode
from iotdb_operator.models.node import count_eligible_nodes
from iotdb_operator.observability.logging import OperatorLogger
from iotdb_operator.observability.metrics import metrics_collector
from iotdb_operator.utils.kubernetes import NodeReader

logger = OperatorLogger(__name__)


class ReplicaValidator:
    """Validates ConfigNode replica counts against schedulable cluster nodes."""

    def __init__(self, node_reader: NodeReader, timeout_seconds: float | None = None):
        """
        Initialize replica validator.

        Args:
            node_reader: Source of the live node inventory
            timeout_seconds: Deadline for each node list call
        """
        self.node_reader = node_reader
        self.timeout_seconds = timeout_seconds

    async def validate_replicas(self, candidate: ConfigNode) -> list[str]:
        """
        Check that the candidate's replicas fit on the schedulable nodes.

        Args:
            candidate: ConfigNode being created or updated

        Returns:
            Admission warnings (empty when the request is accepted)

        Raises:
            NodeInventoryError: If the node inventory cannot be read
            ReplicaCountExceededError: If replicas exceed eligible nodes
        """
        try:
            nodes = await self.node_reader.list_nodes(timeout=self.timeout_seconds)
        except NodeInventoryError:
            raise
        except Exception as e:
            raise NodeInventoryError(str(e), cause=e) from e

        eligible_nodes = count_eligible_nodes(nodes)
        metrics_collector.update_eligible_nodes(eligible_nodes)

        logger.info(
            f"validate ConfigNode {candidate.name}: replicas={candidate.replicas}, "
            f"eligible worker nodes={eligible_nodes}/{len(nodes)}",
            resource_type=CONFIGNODE_RESOURCE_TYPE,
            resource_name=candidate.name,
            namespace=candidate.namespace,
            replicas=candidate.replicas,
            total_nodes=len(nodes),
            eligible_nodes=eligible_nodes,
        )

        if candidate.replicas > eligible_nodes:
            raise ReplicaCountExceededError(
                replicas=candidate.replicas, eligible_nodes=eligible_nodes
            )

        return []
