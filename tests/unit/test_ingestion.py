"""
Unit tests for error payload normalization.
"""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from error_monitor.models.error import ErrorSeverity, ErrorType
from error_monitor.services.ingestion import (
    PayloadFormat,
    classify_payload,
    coerce_timestamp,
    determine_error_type,
    map_error_level_to_severity,
    normalize_batch,
    normalize_canonical_error,
    transform_foreign_error,
)


NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def n8n_payload() -> dict:
    """Payload as sent by an n8n error workflow."""
    return {
        "timestamp": "2024-05-31T08:15:00.000Z",
        "workflow": {"id": "wf-42", "name": "Lead Sync", "active": True},
        "execution": {
            "id": "981",
            "url": "https://n8n.example.com/workflow/wf-42/executions/981",
            "mode": "trigger",
            "lastNodeExecuted": "Close CRM",
            "error": {
                "level": "error",
                "message": "ETIMEDOUT: request timed out",
                "stack": "Error: ETIMEDOUT\n    at ...",
                "node": {
                    "name": "Fetch Leads",
                    "type": "n8n-nodes-base.httpRequest",
                    "id": "node-7",
                    "parameters": {"url": "https://api.close.com/api/v1/lead/"},
                },
            },
        },
    }


@pytest.fixture
def canonical_payload() -> dict:
    return {
        "workflowId": "w1",
        "workflowName": "Sync",
        "nodeName": "HTTP Request",
        "errorMessage": "Connection timeout after 30s",
    }


class TestClassifyPayload:
    """Test payload shape detection."""

    def test_workflow_and_execution_objects_are_foreign(self):
        assert classify_payload({"workflow": {}, "execution": {}}) is PayloadFormat.FOREIGN

    def test_error_summary_alone_is_foreign(self):
        assert classify_payload({"error_summary": {"workflow_id": "w"}}) is PayloadFormat.FOREIGN

    def test_workflow_without_execution_is_not_foreign(self):
        assert classify_payload({"workflow": {"id": "w"}}) is PayloadFormat.UNKNOWN

    def test_canonical_fields(self, canonical_payload):
        assert classify_payload(canonical_payload) is PayloadFormat.CANONICAL

    def test_canonical_requires_string_fields(self, canonical_payload):
        canonical_payload["nodeName"] = 7
        assert classify_payload(canonical_payload) is PayloadFormat.UNKNOWN

    @pytest.mark.parametrize("item", [None, 42, "error", [], {"foo": "bar"}])
    def test_anything_else_is_unknown(self, item):
        assert classify_payload(item) is PayloadFormat.UNKNOWN


class TestSeverityMapping:
    """Test n8n level to severity mapping."""

    @pytest.mark.parametrize("level,expected", [
        ("error", ErrorSeverity.CRITICAL),
        ("CRITICAL", ErrorSeverity.CRITICAL),
        ("node-error", ErrorSeverity.CRITICAL),
        ("warning", ErrorSeverity.HIGH),
        ("High", ErrorSeverity.HIGH),
        ("info", ErrorSeverity.LOW),
        ("low", ErrorSeverity.LOW),
        ("debug", ErrorSeverity.MEDIUM),
        ("", ErrorSeverity.MEDIUM),
        (None, ErrorSeverity.MEDIUM),
    ])
    def test_every_level_maps_to_one_severity(self, level, expected):
        assert map_error_level_to_severity(level) is expected


class TestErrorTypeDetection:
    """Test message keyword classification."""

    @pytest.mark.parametrize("message,expected", [
        ("Request timed out", ErrorType.TIMEOUT),
        ("Gateway TIMEOUT", ErrorType.TIMEOUT),
        ("ECONNREFUSED: could not connect", ErrorType.CONNECTION),
        ("Network unreachable", ErrorType.CONNECTION),
        ("Invalid email address", ErrorType.VALIDATION),
        ("Permission denied", ErrorType.VALIDATION),
        ("Runtime exception in code node", ErrorType.RUNTIME),
        ("Execution halted", ErrorType.RUNTIME),
        ("Something odd happened", ErrorType.OTHER),
        ("", ErrorType.OTHER),
        (None, ErrorType.OTHER),
    ])
    def test_keywords(self, message, expected):
        assert determine_error_type(message) is expected

    def test_timeout_wins_over_connection(self):
        assert determine_error_type("Connection timeout after 30s") is ErrorType.TIMEOUT

    def test_connection_wins_over_validation(self):
        assert determine_error_type("Invalid response from network peer") is ErrorType.CONNECTION

    def test_validation_wins_over_runtime(self):
        assert determine_error_type("Execution failed: invalid input") is ErrorType.VALIDATION


class TestCoerceTimestamp:
    """Test timestamp parsing."""

    def test_iso_with_z_suffix(self):
        parsed = coerce_timestamp("2024-05-31T08:15:00.000Z", NOW)
        assert parsed == datetime(2024, 5, 31, 8, 15, tzinfo=timezone.utc)

    def test_naive_iso_is_utc(self):
        parsed = coerce_timestamp("2024-05-31T08:15:00", NOW)
        assert parsed.tzinfo is not None
        assert parsed.hour == 8

    def test_epoch_milliseconds(self):
        parsed = coerce_timestamp(1717200000000, NOW)
        assert parsed == datetime(2024, 6, 1, 0, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "not a date", True, {"at": 1}, float("nan")])
    def test_unparseable_defaults(self, value):
        assert coerce_timestamp(value, NOW) == NOW


class TestForeignTransform:
    """Test mapping of n8n payloads."""

    def test_full_payload(self, n8n_payload):
        record = transform_foreign_error(n8n_payload, NOW)

        assert record.workflow_id == "wf-42"
        assert record.workflow_name == "Lead Sync"
        assert record.node_name == "Fetch Leads"
        assert record.error_message == "ETIMEDOUT: request timed out"
        assert record.error_type is ErrorType.TIMEOUT
        assert record.severity is ErrorSeverity.CRITICAL
        assert record.timestamp == datetime(2024, 5, 31, 8, 15, tzinfo=timezone.utc)
        assert record.execution_id == "981"
        assert record.retry_count == 0
        assert record.resolved is False
        assert record.stack_trace.startswith("Error: ETIMEDOUT")
        assert record.input_data == {"url": "https://api.close.com/api/v1/lead/"}
        assert record.output_data["executionUrl"].endswith("/executions/981")
        assert record.output_data["nodeId"] == "node-7"
        assert record.error_level == "error"
        assert record.node_type == "n8n-nodes-base.httpRequest"
        assert record.id.startswith("error-981-")

    def test_falls_back_to_error_summary(self):
        payload = {
            "error_summary": {
                "workflow_id": "wf-9",
                "workflow_name": "Invoices",
                "execution_id": "77",
                "error_occurred_at": "2024-05-30T10:00:00Z",
            }
        }

        record = transform_foreign_error(payload, NOW)

        assert record.workflow_id == "wf-9"
        assert record.workflow_name == "Invoices"
        assert record.execution_id == "77"
        assert record.timestamp == datetime(2024, 5, 30, 10, 0, tzinfo=timezone.utc)

    def test_unparseable_timestamp_falls_back_to_summary_time(self):
        payload = {
            "timestamp": "garbage",
            "error_summary": {"error_occurred_at": "2024-05-30T10:00:00Z"},
        }

        record = transform_foreign_error(payload, NOW)

        assert record.timestamp == datetime(2024, 5, 30, 10, 0, tzinfo=timezone.utc)

    def test_literal_fallbacks(self):
        record = transform_foreign_error({"error_summary": {}}, NOW)

        assert record.workflow_id == "unknown"
        assert record.workflow_name == "Unknown Workflow"
        assert record.node_name == "Unknown Node"
        assert record.error_message == "Unknown error occurred"
        assert record.severity is ErrorSeverity.MEDIUM
        assert record.error_type is ErrorType.OTHER
        assert record.timestamp == NOW
        assert record.execution_id.startswith("exec-")
        assert record.error_level == "warning"

    def test_node_name_falls_back_to_last_node(self, n8n_payload):
        del n8n_payload["execution"]["error"]["node"]
        record = transform_foreign_error(n8n_payload, NOW)
        assert record.node_name == "Close CRM"

    def test_message_falls_back_to_description(self, n8n_payload):
        error = n8n_payload["execution"]["error"]
        del error["message"]
        error["description"] = "Invalid credentials"

        record = transform_foreign_error(n8n_payload, NOW)

        assert record.error_message == "Invalid credentials"
        assert record.error_type is ErrorType.VALIDATION

    def test_numeric_ids_are_kept(self, n8n_payload):
        n8n_payload["workflow"]["id"] = 42
        n8n_payload["execution"]["id"] = 981
        record = transform_foreign_error(n8n_payload, NOW)
        assert record.workflow_id == "42"
        assert record.execution_id == "981"

    def test_unparseable_timestamp_uses_ingestion_time(self, n8n_payload):
        n8n_payload["timestamp"] = "yesterday-ish"
        assert transform_foreign_error(n8n_payload, NOW).timestamp == NOW


class TestCanonicalNormalization:
    """Test canonical payload pass-through."""

    def test_defaults(self, canonical_payload):
        record = normalize_canonical_error(canonical_payload, NOW)

        assert record.workflow_id == "w1"
        assert record.error_type is ErrorType.TIMEOUT
        assert record.severity is ErrorSeverity.MEDIUM
        assert record.resolved is False
        assert record.retry_count == 0
        assert record.timestamp == NOW
        assert record.id.startswith("error-")
        assert record.execution_id.startswith("exec-")

    def test_fields_are_copied(self, canonical_payload):
        canonical_payload.update({
            "id": "abc",
            "errorType": "connection",
            "severity": "high",
            "timestamp": "2024-05-01T00:00:00Z",
            "executionId": "run-1",
            "retryCount": 2,
            "stackTrace": "trace",
            "inputData": {"a": 1},
            "outputData": [1, 2],
            "resolved": True,
        })

        record = normalize_canonical_error(canonical_payload, NOW)

        assert record.id == "abc"
        assert record.error_type is ErrorType.CONNECTION
        assert record.severity is ErrorSeverity.HIGH
        assert record.timestamp == datetime(2024, 5, 1, tzinfo=timezone.utc)
        assert record.execution_id == "run-1"
        assert record.retry_count == 2
        assert record.stack_trace == "trace"
        assert record.input_data == {"a": 1}
        assert record.output_data == [1, 2]
        assert record.resolved is True

    def test_unknown_enum_values_are_defaulted(self, canonical_payload):
        canonical_payload.update({"errorType": "cosmic-ray", "severity": "apocalyptic"})

        record = normalize_canonical_error(canonical_payload, NOW)

        assert record.error_type is ErrorType.OTHER
        assert record.severity is ErrorSeverity.MEDIUM

    def test_negative_retry_count_is_zero(self, canonical_payload):
        canonical_payload["retryCount"] = -3
        assert normalize_canonical_error(canonical_payload, NOW).retry_count == 0


class TestNormalizeBatch:
    """Test batch partitioning."""

    def test_single_object(self, canonical_payload):
        batch = normalize_batch(canonical_payload, now=NOW)

        assert batch.received == 1
        assert len(batch.accepted) == 1
        assert batch.rejected == []

    def test_mixed_batch(self, canonical_payload, n8n_payload):
        bad_items = [{"foo": "bar"}, "nope", {"workflowId": "w1"}]
        body = [canonical_payload, bad_items[0], n8n_payload, bad_items[1], bad_items[2]]

        batch = normalize_batch(body, now=NOW)

        assert batch.received == 5
        assert len(batch.accepted) == 2
        assert batch.rejected == bad_items

    def test_empty_list(self):
        batch = normalize_batch([], now=NOW)
        assert batch.received == 0
        assert batch.accepted == []

    def test_connection_timeout_message_is_timeout(self, canonical_payload):
        record = normalize_batch(canonical_payload, now=NOW).accepted[0]

        assert record.error_type is ErrorType.TIMEOUT
        assert record.severity is ErrorSeverity.MEDIUM
        assert record.resolved is False

    def test_explicit_error_type_is_not_overridden(self, canonical_payload):
        canonical_payload["errorType"] = "runtime"
        record = normalize_batch(canonical_payload, now=NOW).accepted[0]
        assert record.error_type is ErrorType.RUNTIME

    def test_non_string_workflow_name_falls_back(self, n8n_payload):
        n8n_payload["workflow"]["name"] = {"unexpected": True}

        batch = normalize_batch(n8n_payload, now=NOW)

        assert batch.accepted[0].workflow_name == "Unknown Workflow"

    def test_transform_failure_rejects_only_that_item(self, canonical_payload, n8n_payload):
        with patch(
            "error_monitor.services.ingestion.transform_foreign_error",
            side_effect=ValueError("boom"),
        ):
            batch = normalize_batch([n8n_payload, canonical_payload], now=NOW)

        assert batch.rejected == [n8n_payload]
        assert [r.workflow_id for r in batch.accepted] == ["w1"]
