"""
Admission webhooks for ConfigNode resources.

This webhook validates ConfigNode resources before they are accepted by
Kubernetes, enforcing:
- spec.replicas never exceeds the number of schedulable worker nodes
- Pydantic model validation of .spec

The defaulting webhook is registered but leaves the object unchanged.
"""

import logging
from typing import Any

import kopf
from pydantic import ValidationError

from iotdb_operator.constants import (
    CONFIGNODE_MUTATE_HANDLER_ID,
    CONFIGNODE_PLURAL,
    CONFIGNODE_RESOURCE_TYPE,
    CONFIGNODE_VALIDATE_HANDLER_ID,
    ERROR_INVALID_CONFIGNODE_SPEC,
    IOTDB_API_GROUP,
    IOTDB_API_VERSION,
    OPERATION_CREATE,
    OPERATION_DELETE,
    OPERATION_UPDATE,
)
from iotdb_operator.errors import AdmissionRejected, InvalidSpecError
from iotdb_operator.models.confignode import ConfigNode
from iotdb_operator.observability.logging import OperatorLogger
from iotdb_operator.observability.metrics import metrics_collector
from iotdb_operator.webhooks.confignode_hooks import get_confignode_webhook

logger = logging.getLogger(__name__)
operator_logger = OperatorLogger(__name__)


def _parse_old_object(old: dict | None) -> ConfigNode | None:
    """Parse the previous object state; it is only used for logging."""
    if not old:
        return None
    try:
        return ConfigNode.from_body(old)
    except ValidationError as e:
        logger.debug(f"Previous ConfigNode state could not be parsed: {e}")
        return None


@kopf.on.mutate(
    IOTDB_API_GROUP,
    IOTDB_API_VERSION,
    CONFIGNODE_PLURAL,
    id=CONFIGNODE_MUTATE_HANDLER_ID,
)
async def mutate_confignode(
    spec: dict,
    name: str,
    namespace: str,
    memo: Any,
    **kwargs,
) -> None:
    """
    Defaulting webhook for ConfigNode resources.

    The object is admitted unchanged; nothing is written to the patch.
    """
    webhook = get_confignode_webhook(memo)
    try:
        obj = ConfigNode.from_admission(spec, name, namespace)
    except ValidationError as e:
        # Leave rejection of malformed specs to the validating webhook
        logger.debug(f"Skipping defaulting for ConfigNode {name}: {e}")
        return
    webhook.default(obj)


@kopf.on.validate(
    IOTDB_API_GROUP,
    IOTDB_API_VERSION,
    CONFIGNODE_PLURAL,
    id=CONFIGNODE_VALIDATE_HANDLER_ID,
)
async def validate_confignode(
    spec: dict,
    name: str,
    namespace: str,
    operation: str,
    memo: Any,
    old: dict | None = None,
    warnings: list[str] | None = None,
    dryrun: bool = False,
    **kwargs,
) -> dict:
    """
    Validate ConfigNode resource before admission.

    Validates:
    - Pydantic model validation of .spec
    - spec.replicas against schedulable worker nodes (CREATE and UPDATE)

    DELETE requests are always admitted.

    Args:
        spec: Resource specification
        name: Resource name
        namespace: Resource namespace
        operation: CREATE, UPDATE or DELETE
        memo: kopf memo holding the hooks instance
        old: Previous resource body on UPDATE
        warnings: kopf's admission warnings list, extended in place
        dryrun: Whether this is a dry-run request

    Returns:
        Empty dict when the request is allowed

    Raises:
        kopf.AdmissionError: If validation fails
    """
    operator_logger.log_admission_start(
        resource_type=CONFIGNODE_RESOURCE_TYPE,
        resource_name=name,
        namespace=namespace,
        operation=operation or "",
    )
    webhook = get_confignode_webhook(memo)

    try:
        if operation == OPERATION_DELETE:
            result = await webhook.validate_delete(None)
        elif operation in (OPERATION_CREATE, OPERATION_UPDATE):
            try:
                obj = ConfigNode.from_admission(spec, name, namespace)
            except ValidationError as e:
                raise InvalidSpecError(
                    ERROR_INVALID_CONFIGNODE_SPEC.format(e), cause=e
                ) from e

            if operation == OPERATION_CREATE:
                result = await webhook.validate_create(obj)
            else:
                result = await webhook.validate_update(obj, _parse_old_object(old))
        else:
            logger.debug(f"No validation for operation {operation} on {name}")
            result = []
    except AdmissionRejected as e:
        metrics_collector.record_admission(
            CONFIGNODE_RESOURCE_TYPE,
            operation or "",
            allowed=False,
            reason=e.category,
        )
        operator_logger.log_admission_audit(
            CONFIGNODE_RESOURCE_TYPE,
            name,
            namespace,
            allowed=False,
            details={
                "reason": e.category,
                "message": e.message,
                "user_action": e.user_action,
                "dryrun": dryrun,
            },
        )
        raise e.as_admission_error() from e

    metrics_collector.record_admission(
        CONFIGNODE_RESOURCE_TYPE, operation or "", allowed=True
    )
    operator_logger.log_admission_audit(
        CONFIGNODE_RESOURCE_TYPE,
        name,
        namespace,
        allowed=True,
        details={"dryrun": dryrun},
    )

    if result and warnings is not None:
        warnings.extend(result)

    return {}
