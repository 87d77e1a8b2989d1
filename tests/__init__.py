"""
Tests package for the IoTDB operator.

Contains:
- unit/: Unit tests for models, validation, webhooks and operator wiring
"""
