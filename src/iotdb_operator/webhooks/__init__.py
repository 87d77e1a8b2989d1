"""
Admission webhooks for the IoTDB operator.

This module provides the mutating and validating admission webhooks for
ConfigNode custom resources. Webhooks validate resources before they are
accepted by Kubernetes, rejecting replica counts the cluster cannot host.

Webhooks are served by Kopf's built-in HTTPS server; each handler is served
under its handler id, which matches the registered webhook path.
"""
