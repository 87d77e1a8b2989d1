"""
Unit tests for the ConfigNode admission webhooks.

Tests drive the kopf handlers directly with the kwargs kopf would pass.
The node inventory comes from an in-memory NodeReader injected via memo.
"""

import logging

import kopf
import pytest

from iotdb_operator.constants import ERROR_REPLICAS_EXCEED_WORKER_NODES
from iotdb_operator.models.confignode import ConfigNode
from iotdb_operator.services.replica_validator import ReplicaValidator
from iotdb_operator.webhooks.confignode import (
    mutate_confignode,
    validate_confignode,
)
from iotdb_operator.webhooks.confignode_hooks import (
    MEMO_KEY,
    ConfigNodeWebhook,
    get_confignode_webhook,
)


def make_memo(reader) -> kopf.Memo:
    memo = kopf.Memo()
    memo[MEMO_KEY] = ConfigNodeWebhook(ReplicaValidator(reader))
    return memo


class TestValidateConfigNode:
    """Unit tests for the validating webhook handler."""

    @pytest.mark.asyncio
    async def test_create_within_capacity_passes(self, make_node, node_reader_factory):
        memo = make_memo(node_reader_factory([make_node(f"w{i}") for i in range(3)]))

        result = await validate_confignode(
            spec={"replicas": 3},
            name="confignode",
            namespace="iotdb",
            operation="CREATE",
            memo=memo,
            warnings=[],
            dryrun=False,
        )

        assert result == {}  # Empty dict means allowed

    @pytest.mark.asyncio
    async def test_create_over_capacity_fails(self, make_node, node_reader_factory):
        memo = make_memo(
            node_reader_factory(
                [make_node("cp", "NoSchedule"), make_node("w1"), make_node("w2")]
            )
        )

        with pytest.raises(kopf.AdmissionError) as exc_info:
            await validate_confignode(
                spec={"replicas": 3},
                name="confignode",
                namespace="iotdb",
                operation="CREATE",
                memo=memo,
            )

        assert ERROR_REPLICAS_EXCEED_WORKER_NODES in str(exc_info.value)
        assert exc_info.value.code == 422

    @pytest.mark.asyncio
    async def test_update_over_capacity_fails(self, make_node, node_reader_factory):
        memo = make_memo(node_reader_factory([make_node("w1")]))

        with pytest.raises(kopf.AdmissionError) as exc_info:
            await validate_confignode(
                spec={"replicas": 2},
                name="confignode",
                namespace="iotdb",
                operation="UPDATE",
                memo=memo,
                old={
                    "metadata": {"name": "confignode", "namespace": "iotdb"},
                    "spec": {"replicas": 1},
                },
            )

        assert ERROR_REPLICAS_EXCEED_WORKER_NODES in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_update_within_capacity_passes(self, make_node, node_reader_factory):
        memo = make_memo(node_reader_factory([make_node("w1"), make_node("w2")]))

        result = await validate_confignode(
            spec={"replicas": 2},
            name="confignode",
            namespace="iotdb",
            operation="UPDATE",
            memo=memo,
            old={"metadata": {"name": "confignode"}, "spec": {"replicas": 1}},
        )

        assert result == {}

    @pytest.mark.asyncio
    async def test_update_with_unparseable_old_object_passes(
        self, make_node, node_reader_factory
    ):
        memo = make_memo(node_reader_factory([make_node("w1")]))

        result = await validate_confignode(
            spec={"replicas": 1},
            name="confignode",
            namespace="iotdb",
            operation="UPDATE",
            memo=memo,
            old={"metadata": {"name": "confignode"}, "spec": {"replicas": "many"}},
        )

        assert result == {}

    @pytest.mark.asyncio
    async def test_node_list_failure_rejects_request(self, failing_node_reader):
        memo = make_memo(failing_node_reader)

        with pytest.raises(kopf.AdmissionError) as exc_info:
            await validate_confignode(
                spec={"replicas": 0},
                name="confignode",
                namespace="iotdb",
                operation="CREATE",
                memo=memo,
            )

        assert "nodes is forbidden" in str(exc_info.value)
        assert exc_info.value.code == 500

    @pytest.mark.asyncio
    async def test_delete_always_passes(self, failing_node_reader):
        """DELETE is admitted even when the node inventory is unavailable."""
        memo = make_memo(failing_node_reader)
        warnings: list[str] = []

        result = await validate_confignode(
            spec={"replicas": 100},
            name="confignode",
            namespace="iotdb",
            operation="DELETE",
            memo=memo,
            warnings=warnings,
        )

        assert result == {}
        assert warnings == []
        assert failing_node_reader.calls == []

    @pytest.mark.asyncio
    async def test_missing_replicas_admitted(self, make_node, node_reader_factory):
        memo = make_memo(node_reader_factory([make_node("w1")]))

        result = await validate_confignode(
            spec={},
            name="confignode",
            namespace="iotdb",
            operation="CREATE",
            memo=memo,
        )

        assert result == {}

    @pytest.mark.asyncio
    async def test_negative_replicas_admitted(self, node_reader_factory):
        memo = make_memo(node_reader_factory([]))

        result = await validate_confignode(
            spec={"replicas": -1},
            name="confignode",
            namespace="iotdb",
            operation="UPDATE",
            memo=memo,
        )

        assert result == {}

    @pytest.mark.asyncio
    async def test_non_integer_replicas_fails(self, node_reader_factory):
        reader = node_reader_factory([])
        memo = make_memo(reader)

        with pytest.raises(kopf.AdmissionError) as exc_info:
            await validate_confignode(
                spec={"replicas": "many"},
                name="confignode",
                namespace="iotdb",
                operation="CREATE",
                memo=memo,
            )

        assert "Invalid ConfigNode specification" in str(exc_info.value)
        assert exc_info.value.code == 422
        assert reader.calls == []

    @pytest.mark.asyncio
    async def test_rejection_audit_carries_user_action(
        self, make_node, node_reader_factory, caplog
    ):
        memo = make_memo(node_reader_factory([make_node("w1")]))

        with caplog.at_level(logging.INFO, logger="iotdb_operator.webhooks"):
            with pytest.raises(kopf.AdmissionError):
                await validate_confignode(
                    spec={"replicas": 2},
                    name="confignode",
                    namespace="iotdb",
                    operation="CREATE",
                    memo=memo,
                )

        audit = next(r.audit for r in caplog.records if hasattr(r, "audit"))
        assert audit["allowed"] is False
        assert audit["reason"] == "admission"
        assert audit["user_action"].startswith("Lower spec.replicas to at most 1")

    @pytest.mark.asyncio
    async def test_uninitialized_webhook_fails_closed(self):
        with pytest.raises(kopf.AdmissionError) as exc_info:
            await validate_confignode(
                spec={"replicas": 0},
                name="confignode",
                namespace="iotdb",
                operation="CREATE",
                memo=kopf.Memo(),
            )

        assert "not initialized" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_unknown_operation_passes(self, failing_node_reader):
        memo = make_memo(failing_node_reader)

        result = await validate_confignode(
            spec={},
            name="confignode",
            namespace="iotdb",
            operation="CONNECT",
            memo=memo,
        )

        assert result == {}

    @pytest.mark.asyncio
    async def test_hook_warnings_are_forwarded(self, node_reader_factory):
        class WarningWebhook(ConfigNodeWebhook):
            async def validate_create(self, obj):
                return ["replicas equal schedulable nodes"]

        memo = kopf.Memo()
        memo[MEMO_KEY] = WarningWebhook(ReplicaValidator(node_reader_factory([])))
        warnings: list[str] = []

        await validate_confignode(
            spec={"replicas": 1},
            name="confignode",
            namespace="iotdb",
            operation="CREATE",
            memo=memo,
            warnings=warnings,
        )

        assert warnings == ["replicas equal schedulable nodes"]


class TestMutateConfigNode:
    """The defaulting webhook leaves objects unchanged."""

    @pytest.mark.asyncio
    async def test_mutate_is_noop(self, node_reader_factory):
        memo = make_memo(node_reader_factory([]))
        spec = {"replicas": 3}

        result = await mutate_confignode(
            spec=spec, name="confignode", namespace="iotdb", memo=memo
        )

        assert result is None
        assert spec == {"replicas": 3}

    @pytest.mark.asyncio
    async def test_mutate_ignores_invalid_spec(self, node_reader_factory):
        memo = make_memo(node_reader_factory([]))

        result = await mutate_confignode(
            spec={"replicas": "many"}, name="confignode", namespace="iotdb", memo=memo
        )

        assert result is None


class TestConfigNodeWebhookHooks:
    """Direct tests of the hook methods."""

    @pytest.mark.asyncio
    async def test_validate_delete_returns_no_warnings(self, failing_node_reader):
        webhook = ConfigNodeWebhook(ReplicaValidator(failing_node_reader))

        assert await webhook.validate_delete(None) == []

    @pytest.mark.asyncio
    async def test_validate_update_logs_old_and_new_replicas(
        self, make_node, node_reader_factory, caplog
    ):
        webhook = ConfigNodeWebhook(
            ReplicaValidator(node_reader_factory([make_node("w1"), make_node("w2")]))
        )
        old = ConfigNode.from_admission({"replicas": 1}, "confignode", "iotdb")
        new = ConfigNode.from_admission({"replicas": 2}, "confignode", "iotdb")

        with caplog.at_level(logging.INFO, logger="iotdb_operator.webhooks"):
            assert await webhook.validate_update(new, old) == []

        record = next(r for r in caplog.records if hasattr(r, "old_replicas"))
        assert record.old_replicas == 1
        assert record.replicas == 2
        assert record.resource_name == "confignode"

    def test_get_webhook_from_memo(self, node_reader_factory):
        memo = make_memo(node_reader_factory([]))

        assert isinstance(get_confignode_webhook(memo), ConfigNodeWebhook)

    def test_get_webhook_without_memo(self):
        with pytest.raises(kopf.AdmissionError):
            get_confignode_webhook(None)
