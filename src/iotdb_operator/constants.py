"""
Constants used throughout the IoTDB operator.

This module defines all constant values used by the operator including:
- API group, version and resource names of the IoTDB custom resources
- Admission webhook paths and registration names
- Node taint effects relevant for scheduling
- Error message templates
"""

# Custom resource coordinates
IOTDB_API_GROUP = "iotdb.apache.org"
IOTDB_API_VERSION = "v1"
CONFIGNODE_KIND = "ConfigNode"
CONFIGNODE_PLURAL = "confignodes"
CONFIGNODE_RESOURCE_TYPE = "confignode"

# Admission webhook paths (kopf serves each handler under /<handler id>)
CONFIGNODE_MUTATE_HANDLER_ID = "mutate-iotdb-apache-org-v1-confignode"
CONFIGNODE_VALIDATE_HANDLER_ID = "validate-iotdb-apache-org-v1-confignode"
CONFIGNODE_MUTATING_WEBHOOK_NAME = "mconfignode.kb.io"
CONFIGNODE_VALIDATING_WEBHOOK_NAME = "vconfignode.kb.io"

# Operations routed to the webhooks
OPERATION_CREATE = "CREATE"
OPERATION_UPDATE = "UPDATE"
OPERATION_DELETE = "DELETE"
WEBHOOK_OPERATIONS = [OPERATION_CREATE, OPERATION_UPDATE]

# Webhook registration defaults
WEBHOOK_TIMEOUT_SECONDS = 10
WEBHOOK_FAILURE_POLICY = "Fail"
WEBHOOK_SIDE_EFFECTS = "None"
WEBHOOK_ADMISSION_REVIEW_VERSIONS = ["v1"]
DEFAULT_WEBHOOK_SERVICE_NAME = "iotdb-operator-webhook-service"
DEFAULT_WEBHOOK_SERVICE_NAMESPACE = "iotdb-system"
DEFAULT_WEBHOOK_SERVICE_PORT = 443
DEFAULT_OPERATOR_NAME = "iotdb-operator"

# Node taint effects (core/v1 TaintEffect values)
TAINT_EFFECT_NO_SCHEDULE = "NoSchedule"
TAINT_EFFECT_PREFER_NO_SCHEDULE = "PreferNoSchedule"
TAINT_EFFECT_NO_EXECUTE = "NoExecute"

# Error message templates
ERROR_REPLICAS_EXCEED_WORKER_NODES = (
    "ConfigNode replicas cannot exceed the number of available worker nodes "
    "in the cluster"
)
ERROR_NODE_LIST_TIMEOUT = "Listing cluster nodes timed out after {} seconds"
ERROR_INVALID_CONFIGNODE_SPEC = "Invalid ConfigNode specification: {}"

# Admission response codes
ADMISSION_CODE_INFRASTRUCTURE = 500
ADMISSION_CODE_INVARIANT = 422
