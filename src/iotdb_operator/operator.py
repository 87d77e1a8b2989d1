#!/usr/bin/env python3
"""
IoTDB Operator - Main entry point for the Kopf-based IoTDB admission webhooks.

The operator serves the ConfigNode admission webhooks:
- Mutating (defaulting) webhook, a no-op kept for registration
- Validating webhook, rejecting replica counts above the number of
  schedulable worker nodes

Usage:
    python -m iotdb_operator.operator
    # Or with kopf directly:
    kopf run -m iotdb_operator.operator --all-namespaces

Environment Variables:
    IOTDB_OPERATOR_NAMESPACES: Comma-separated list of namespaces to watch
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
    WEBHOOK_PORT: Port of the admission webhook server
    NODE_LIST_TIMEOUT_SECONDS: Deadline for listing nodes during validation
"""

import logging
import sys

import kopf

from iotdb_operator.observability.logging import setup_structured_logging
from iotdb_operator.observability.metrics import MetricsServer
from iotdb_operator.services.replica_validator import ReplicaValidator
from iotdb_operator.settings import settings as operator_settings
from iotdb_operator.utils.kubernetes import (
    KubernetesNodeReader,
    get_kubernetes_client,
)
from iotdb_operator.webhooks.confignode_hooks import MEMO_KEY, ConfigNodeWebhook

# Import webhook modules to register admission webhooks ONLY if webhooks are enabled
# Note: Kopf throws an error if admission handlers are registered but no
# admission server is configured.
if operator_settings.enable_webhooks:
    from iotdb_operator.webhooks import confignode as confignode_webhook  # noqa: F401

METRICS_SERVER_MEMO_KEY = "metrics_server"


def configure_logging() -> None:
    """Configure structured logging for the operator based on operator_settings."""
    setup_structured_logging(
        log_level=operator_settings.log_level.upper(),
        enable_json_formatting=operator_settings.json_logs,
        correlation_id_enabled=operator_settings.correlation_ids,
        log_health_probes=operator_settings.log_health_probes,
        webhook_log_level=operator_settings.webhook_log_level,
    )


def build_confignode_webhook(node_reader=None) -> ConfigNodeWebhook:
    """
    Wire the ConfigNode admission hooks to a node inventory reader.

    Args:
        node_reader: NodeReader to use; a KubernetesNodeReader when omitted

    Returns:
        Hooks instance ready to be stored in kopf's memo
    """
    if node_reader is None:
        node_reader = KubernetesNodeReader(get_kubernetes_client())
    validator = ReplicaValidator(
        node_reader, timeout_seconds=operator_settings.node_list_timeout_seconds
    )
    return ConfigNodeWebhook(validator)


@kopf.on.startup()
async def startup_handler(memo: kopf.Memo, **_) -> None:
    """
    Operator startup configuration.

    Loads the Kubernetes configuration, builds the admission hooks and
    starts the metrics endpoint.
    """
    logging.info("Starting IoTDB Operator...")

    watched_namespaces = operator_settings.watched_namespaces
    if watched_namespaces:
        logging.info(f"Watching namespaces: {', '.join(watched_namespaces)}")
    else:
        logging.info("Watching all namespaces (cluster-wide mode)")

    # Raises if neither in-cluster nor kubeconfig configuration is available
    memo[MEMO_KEY] = build_confignode_webhook()
    logging.info(
        "ConfigNode admission webhook ready "
        f"(node list timeout {operator_settings.node_list_timeout_seconds}s)"
    )

    try:
        metrics_server = MetricsServer(
            port=operator_settings.metrics_port, host=operator_settings.metrics_host
        )
        await metrics_server.start()
        memo[METRICS_SERVER_MEMO_KEY] = metrics_server
    except Exception as e:
        logging.error(f"Failed to start metrics server: {e}")
        # Don't fail operator startup if metrics server fails
        logging.warning("Continuing without metrics server")


@kopf.on.cleanup()
async def cleanup_handler(memo: kopf.Memo, **_) -> None:
    """Stop the metrics server when the operator shuts down."""
    logging.info("Shutting down IoTDB Operator...")

    metrics_server = memo.get(METRICS_SERVER_MEMO_KEY)
    if metrics_server:
        await metrics_server.stop()


@kopf.on.probe(id="healthz")
async def health_check(memo: kopf.Memo, **_) -> dict[str, str]:
    """
    Health check probe for Kubernetes liveness/readiness checks.

    Returns:
        Dictionary indicating operator health status
    """
    webhook_ready = memo.get(MEMO_KEY) is not None
    return {
        "status": "healthy" if webhook_ready else "starting",
        "operator": operator_settings.operator_name,
    }


def build_operator_settings() -> kopf.OperatorSettings:
    """
    Build kopf settings with the admission webhook server.

    Webhook configurations are managed outside the operator (see
    ``iotdb_operator.manifests``), so kopf's auto-management stays off.
    """
    settings_obj = kopf.OperatorSettings()
    if operator_settings.enable_webhooks:
        cert_dir = operator_settings.webhook_cert_dir.rstrip("/")
        settings_obj.admission.server = kopf.WebhookServer(
            port=operator_settings.webhook_port,
            host=operator_settings.webhook_host,
            certfile=f"{cert_dir}/tls.crt",
            pkeyfile=f"{cert_dir}/tls.key",
        )
        settings_obj.admission.managed = None
        logging.info(
            f"Admission webhooks ENABLED on port {operator_settings.webhook_port} "
            f"using certificates from {cert_dir}"
        )
    else:
        settings_obj.admission.server = None
        settings_obj.admission.managed = None
        logging.info("Admission webhooks DISABLED")
    return settings_obj


def main() -> None:
    """
    Main entry point for the operator.

    This function:
    1. Configures logging
    2. Configures the admission webhook server (must be before kopf.run())
    3. Runs the kopf operator with the configured namespace scope
    """
    configure_logging()
    settings_obj = build_operator_settings()
    watched_namespaces = operator_settings.watched_namespaces

    try:
        if watched_namespaces:
            kopf.run(
                namespaces=watched_namespaces,
                liveness_endpoint="http://0.0.0.0:8080/healthz",
                settings=settings_obj,
            )
        else:
            kopf.run(
                clusterwide=True,
                liveness_endpoint="http://0.0.0.0:8080/healthz",
                settings=settings_obj,
            )
    except KeyboardInterrupt:
        logging.info("Received shutdown signal")
        sys.exit(0)
    except Exception as e:
        logging.error(f"Operator failed with error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
