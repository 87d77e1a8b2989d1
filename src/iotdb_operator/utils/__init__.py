"""
Utilities package - Helper functions for Kubernetes interactions.

Contains the kubernetes client bootstrap and the node inventory reader used
by the admission webhooks.
"""
