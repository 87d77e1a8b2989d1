"""
Admission hooks for ConfigNode resources.

The hooks hold no kopf registration, so the operator can build and inject
them whether or not the admission handlers are imported.
"""

import logging
from typing import Any

import kopf

from iotdb_operator.constants import CONFIGNODE_RESOURCE_TYPE
from iotdb_operator.models.confignode import ConfigNode
from iotdb_operator.observability.logging import OperatorLogger
from iotdb_operator.services.replica_validator import ReplicaValidator
from iotdb_operator.webhooks.base import AdmissionHooks, AdmissionWarnings

logger = logging.getLogger(__name__)
operator_logger = OperatorLogger(__name__)

# Key under which the operator stores the hooks in kopf's memo
MEMO_KEY = "confignode_webhook"


class ConfigNodeWebhook(AdmissionHooks[ConfigNode]):
    """Admission hooks for ConfigNode resources."""

    def __init__(self, validator: ReplicaValidator):
        self.validator = validator

    def default(self, obj: ConfigNode) -> None:
        logger.info(f"default ConfigNode {obj.name}")

    async def validate_create(self, obj: ConfigNode) -> AdmissionWarnings:
        logger.info(f"validate create ConfigNode {obj.name}")
        return await self.validator.validate_replicas(obj)

    async def validate_update(
        self, obj: ConfigNode, old: ConfigNode | None
    ) -> AdmissionWarnings:
        old_replicas = old.replicas if old else None
        operator_logger.info(
            f"validate update ConfigNode {obj.name} "
            f"(replicas {old_replicas} -> {obj.replicas})",
            resource_type=CONFIGNODE_RESOURCE_TYPE,
            resource_name=obj.name,
            namespace=obj.namespace,
            replicas=obj.replicas,
            old_replicas=old_replicas,
        )
        return await self.validator.validate_replicas(obj)

    async def validate_delete(self, obj: ConfigNode | None) -> AdmissionWarnings:
        logger.info(f"validate delete ConfigNode {obj.name if obj else ''}")
        return []


def get_confignode_webhook(memo: Any) -> ConfigNodeWebhook:
    """
    Fetch the hooks instance stored in kopf's memo at operator startup.

    Raises:
        kopf.AdmissionError: If the operator has not finished starting up
    """
    webhook = memo.get(MEMO_KEY) if memo is not None else None
    if webhook is None:
        raise kopf.AdmissionError(
            "ConfigNode admission webhook is not initialized", code=503
        )
    return webhook
