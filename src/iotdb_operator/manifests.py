"""
Webhook registration manifests for the IoTDB operator.

Renders the MutatingWebhookConfiguration, ValidatingWebhookConfiguration and
the ClusterRole the webhooks need to read nodes. Both webhooks fail closed:
if the webhook endpoint is unreachable the API server rejects the request.

Usage:
    iotdb-operator-manifests --service-namespace iotdb-system --ca-bundle <b64>
    iotdb-operator-manifests --url https://webhook.example.com:9443
"""

import argparse
import sys
from typing import Any

import yaml

from iotdb_operator.constants import (
    CONFIGNODE_MUTATE_HANDLER_ID,
    CONFIGNODE_MUTATING_WEBHOOK_NAME,
    CONFIGNODE_PLURAL,
    CONFIGNODE_VALIDATE_HANDLER_ID,
    CONFIGNODE_VALIDATING_WEBHOOK_NAME,
    DEFAULT_OPERATOR_NAME,
    DEFAULT_WEBHOOK_SERVICE_NAME,
    DEFAULT_WEBHOOK_SERVICE_NAMESPACE,
    DEFAULT_WEBHOOK_SERVICE_PORT,
    IOTDB_API_GROUP,
    IOTDB_API_VERSION,
    WEBHOOK_ADMISSION_REVIEW_VERSIONS,
    WEBHOOK_FAILURE_POLICY,
    WEBHOOK_OPERATIONS,
    WEBHOOK_SIDE_EFFECTS,
    WEBHOOK_TIMEOUT_SECONDS,
)


def _client_config(
    path: str,
    service_name: str,
    service_namespace: str,
    service_port: int,
    url: str | None,
    ca_bundle: str | None,
) -> dict[str, Any]:
    """Build a webhook clientConfig pointing at either a URL or a Service."""
    if url:
        client_config: dict[str, Any] = {"url": f"{url.rstrip('/')}/{path}"}
    else:
        client_config = {
            "service": {
                "name": service_name,
                "namespace": service_namespace,
                "path": f"/{path}",
                "port": service_port,
            }
        }
    if ca_bundle:
        client_config["caBundle"] = ca_bundle
    return client_config


def _webhook_entry(name: str, client_config: dict[str, Any]) -> dict[str, Any]:
    return {
        "name": name,
        "admissionReviewVersions": list(WEBHOOK_ADMISSION_REVIEW_VERSIONS),
        "clientConfig": client_config,
        "failurePolicy": WEBHOOK_FAILURE_POLICY,
        "sideEffects": WEBHOOK_SIDE_EFFECTS,
        "timeoutSeconds": WEBHOOK_TIMEOUT_SECONDS,
        "rules": [
            {
                "apiGroups": [IOTDB_API_GROUP],
                "apiVersions": [IOTDB_API_VERSION],
                "operations": list(WEBHOOK_OPERATIONS),
                "resources": [CONFIGNODE_PLURAL],
            }
        ],
    }


def build_webhook_configurations(
    service_name: str = DEFAULT_WEBHOOK_SERVICE_NAME,
    service_namespace: str = DEFAULT_WEBHOOK_SERVICE_NAMESPACE,
    service_port: int = DEFAULT_WEBHOOK_SERVICE_PORT,
    url: str | None = None,
    ca_bundle: str | None = None,
    name_prefix: str = DEFAULT_OPERATOR_NAME,
) -> list[dict[str, Any]]:
    """
    Build the mutating and validating webhook configurations for ConfigNode.

    Args:
        service_name: Service fronting the webhook server
        service_namespace: Namespace of that service
        service_port: Port of that service
        url: Direct webhook URL; takes precedence over the service reference
        ca_bundle: Base64-encoded CA bundle used to verify the webhook server
        name_prefix: Prefix for the configuration object names

    Returns:
        MutatingWebhookConfiguration and ValidatingWebhookConfiguration bodies
    """
    common = {
        "service_name": service_name,
        "service_namespace": service_namespace,
        "service_port": service_port,
        "url": url,
        "ca_bundle": ca_bundle,
    }
    mutating = {
        "apiVersion": "admissionregistration.k8s.io/v1",
        "kind": "MutatingWebhookConfiguration",
        "metadata": {"name": f"{name_prefix}-mutating-webhook-configuration"},
        "webhooks": [
            _webhook_entry(
                CONFIGNODE_MUTATING_WEBHOOK_NAME,
                _client_config(CONFIGNODE_MUTATE_HANDLER_ID, **common),
            )
        ],
    }
    validating = {
        "apiVersion": "admissionregistration.k8s.io/v1",
        "kind": "ValidatingWebhookConfiguration",
        "metadata": {"name": f"{name_prefix}-validating-webhook-configuration"},
        "webhooks": [
            _webhook_entry(
                CONFIGNODE_VALIDATING_WEBHOOK_NAME,
                _client_config(CONFIGNODE_VALIDATE_HANDLER_ID, **common),
            )
        ],
    }
    return [mutating, validating]


def build_node_reader_cluster_role(
    name_prefix: str = DEFAULT_OPERATOR_NAME,
) -> dict[str, Any]:
    """ClusterRole allowing the webhook to read nodes."""
    return {
        "apiVersion": "rbac.authorization.k8s.io/v1",
        "kind": "ClusterRole",
        "metadata": {"name": f"{name_prefix}-node-reader"},
        "rules": [
            {
                "apiGroups": [""],
                "resources": ["nodes"],
                "verbs": ["get", "list", "watch"],
            }
        ],
    }


def render_manifests(documents: list[dict[str, Any]]) -> str:
    """Render documents as a multi-document YAML stream."""
    return yaml.safe_dump_all(documents, sort_keys=False, explicit_start=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="iotdb-operator-manifests",
        description="Render ConfigNode admission webhook registration manifests.",
    )
    parser.add_argument(
        "--service-name",
        default=DEFAULT_WEBHOOK_SERVICE_NAME,
        help="Service fronting the webhook server",
    )
    parser.add_argument(
        "--service-namespace",
        default=DEFAULT_WEBHOOK_SERVICE_NAMESPACE,
        help="Namespace of the webhook service",
    )
    parser.add_argument(
        "--service-port",
        type=int,
        default=DEFAULT_WEBHOOK_SERVICE_PORT,
        help="Port of the webhook service",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Direct webhook base URL (overrides the service reference)",
    )
    parser.add_argument(
        "--ca-bundle", default=None, help="Base64-encoded CA bundle"
    )
    parser.add_argument(
        "--name-prefix",
        default=DEFAULT_OPERATOR_NAME,
        help="Prefix for generated object names",
    )
    parser.add_argument(
        "--no-rbac",
        action="store_true",
        help="Do not include the node reader ClusterRole",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    documents = build_webhook_configurations(
        service_name=args.service_name,
        service_namespace=args.service_namespace,
        service_port=args.service_port,
        url=args.url,
        ca_bundle=args.ca_bundle,
        name_prefix=args.name_prefix,
    )
    if not args.no_rbac:
        documents.append(build_node_reader_cluster_role(args.name_prefix))

    sys.stdout.write(render_manifests(documents))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
