"""
Kubernetes utilities for the IoTDB operator.

This module provides helper functions for interacting with the Kubernetes API.

Key functionality:
- Kubernetes client management and configuration
- Reading the live node inventory for admission decisions
"""

import asyncio
import logging
import time
from typing import Protocol

from kubernetes import client, config
from kubernetes.client.rest import ApiException

from iotdb_operator.constants import ERROR_NODE_LIST_TIMEOUT
from iotdb_operator.errors import NodeInventoryError
from iotdb_operator.models.node import ClusterNode
from iotdb_operator.observability.metrics import metrics_collector

logger = logging.getLogger(__name__)


def load_kubernetes_config() -> None:
    """
    Load in-cluster configuration, falling back to the local kubeconfig.

    Raises:
        config.ConfigException: If neither configuration can be loaded
    """
    try:
        # Try in-cluster config first (when running in a pod)
        config.load_incluster_config()
        logger.debug("Loaded in-cluster Kubernetes configuration")
    except config.ConfigException:
        try:
            # Fall back to local kubeconfig (for development)
            config.load_kube_config()
            logger.debug("Loaded kubeconfig from local environment")
        except config.ConfigException as e:
            logger.error(f"Failed to load Kubernetes configuration: {e}")
            raise


def get_kubernetes_client() -> client.ApiClient:
    """
    Get configured Kubernetes API client.

    This function handles both in-cluster and local development configurations.

    Returns:
        Configured Kubernetes API client
    """
    load_kubernetes_config()
    return client.ApiClient()


class NodeReader(Protocol):
    """Read access to the cluster's node inventory."""

    async def list_nodes(self, timeout: float | None = None) -> list[ClusterNode]:
        """Return every node currently known to the cluster."""
        ...


class KubernetesNodeReader:
    """
    NodeReader backed by the Kubernetes API.

    Every call goes to the API server; nothing is cached, so each admission
    decision sees the node topology current at its own fetch time.
    """

    def __init__(self, api_client: client.ApiClient | None = None):
        """
        Initialize node reader.

        Args:
            api_client: Kubernetes API client (created lazily when omitted)
        """
        self.api_client = api_client

    def _core_api(self) -> client.CoreV1Api:
        if self.api_client is None:
            self.api_client = get_kubernetes_client()
        return client.CoreV1Api(self.api_client)

    def _sync_list_nodes(self, timeout: float | None) -> list[ClusterNode]:
        """Synchronous helper to list nodes (runs in thread pool)."""
        kwargs = {}
        if timeout is not None:
            kwargs["_request_timeout"] = timeout
        node_list = self._core_api().list_node(**kwargs)
        return [ClusterNode.from_kubernetes(node) for node in node_list.items or []]

    async def list_nodes(self, timeout: float | None = None) -> list[ClusterNode]:
        """
        List all cluster nodes.

        Args:
            timeout: Deadline in seconds for the whole call

        Returns:
            Nodes with their taints

        Raises:
            NodeInventoryError: If the nodes cannot be listed in time
        """
        start_time = time.time()
        try:
            nodes = await asyncio.wait_for(
                asyncio.to_thread(self._sync_list_nodes, timeout), timeout=timeout
            )
        except TimeoutError as e:
            metrics_collector.record_node_list(time.time() - start_time, "timeout")
            raise NodeInventoryError(
                ERROR_NODE_LIST_TIMEOUT.format(timeout), reason="Timeout", cause=e
            ) from e
        except ApiException as e:
            metrics_collector.record_node_list(time.time() - start_time, "error")
            logger.warning(f"Failed to list nodes: {e.status} {e.reason}")
            raise NodeInventoryError(
                str(e), reason=e.reason, status=e.status, cause=e
            ) from e
        except Exception as e:
            metrics_collector.record_node_list(time.time() - start_time, "error")
            logger.warning(f"Failed to list nodes: {e}")
            raise NodeInventoryError(str(e), cause=e) from e

        metrics_collector.record_node_list(time.time() - start_time, "success")
        logger.debug(f"Listed {len(nodes)} cluster nodes")
        return nodes
