"""Tests for the function spec builder (merge state machine)."""
from __future__ import annotations

from typing import Any

import pytest

from scs_template.binding.function_specs import (
    build_function_specs,
    channel_function_name,
    derive_function_name,
)
from scs_template.binding.schema_names import SchemaNameCache
from scs_template.document.parser import parse_document
from scs_template.shared.errors import (
    DirectionConflictError,
    MissingPayloadError,
    UnknownParameterTypeError,
)
from scs_template.shared.models.asyncapi import AsyncAPIDocument, Channel, Operation, QueueBinding
from scs_template.shared.models.functions import FunctionRole
from scs_template.shared.models.params import GenerationParams


# ======================================================================
# Helpers
# ======================================================================


def _document(channels: dict[str, Any], **info: Any) -> AsyncAPIDocument:
    return parse_document(
        {
            "asyncapi": "2.6.0",
            "info": {"title": "Test App", "version": "1.0.0", **info},
            "channels": channels,
            "components": {
                "schemas": {
                    "Order": {"type": "object", "properties": {"id": {"type": "string"}}},
                    "Invoice": {"type": "object", "properties": {"id": {"type": "string"}}},
                }
            },
        }
    )


def _op(schema: str = "Order", **extra: Any) -> dict[str, Any]:
    return {"message": {"payload": {"$ref": f"#/components/schemas/{schema}"}}, **extra}


def _queue_op(queue: str, subscriptions: list[str], schema: str = "Order") -> dict[str, Any]:
    bindings = {"solace": {"queueName": queue, "topicSubscriptions": subscriptions}}
    return _op(schema, bindings=bindings)


# ======================================================================
# Function name derivation
# ======================================================================


class TestDeriveFunctionName:
    def test_explicit_name(self):
        op = Operation(action="publish", extensions={"x-scs-function-name": "myFn"})
        assert derive_function_name("a/b", op, is_subscriber=False) == "myFn"

    def test_queue_binding(self):
        op = Operation(action="subscribe", queue_binding=QueueBinding("Orders Queue", ["a/1"]))
        assert derive_function_name("a/b", op, is_subscriber=True) == "ordersQueue"

    def test_queue_without_subscriptions_ignored(self):
        op = Operation(action="subscribe", queue_binding=QueueBinding("ordersQueue"))
        assert derive_function_name("a/b", op, is_subscriber=True) == "aBConsumer"

    def test_channel_name_with_role_suffix(self):
        op = Operation(action="publish", operation_id="sendOrder")
        assert derive_function_name("orders/{id}", op, is_subscriber=False) == "ordersIdSupplier"
        assert derive_function_name("orders/{id}", op, is_subscriber=True) == "ordersIdConsumer"

    def test_channel_function_name(self):
        assert channel_function_name("orders/new", Channel(name="orders/new")) == "ordersNew"
        channel = Channel(name="orders/new", extensions={"x-scs-function-name": "custom"})
        assert channel_function_name("orders/new", channel) == "custom"


# ======================================================================
# Roles
# ======================================================================


class TestRoles:
    def test_publish_only_is_supplier(self, client_params: GenerationParams):
        specs = build_function_specs(_document({"orders": {"publish": _op()}}), client_params)
        spec = specs["ordersSupplier"]
        assert spec.role is FunctionRole.SUPPLIER
        assert spec.publish_payload == "Order"
        assert spec.publish_channel == "orders"
        assert spec.subscribe_channel is None

    def test_subscribe_only_is_consumer(self, client_params: GenerationParams):
        specs = build_function_specs(_document({"orders": {"subscribe": _op()}}), client_params)
        spec = specs["ordersConsumer"]
        assert spec.role is FunctionRole.CONSUMER
        assert spec.subscribe_payload == "Order"
        assert spec.subscribe_channel == "orders"
        assert spec.publish_channel is None

    def test_both_sides_on_one_channel_stay_separate(self, client_params: GenerationParams):
        doc = _document({"orders": {"publish": _op(), "subscribe": _op()}})
        specs = build_function_specs(doc, client_params)
        assert list(specs) == ["ordersSupplier", "ordersConsumer"]

    def test_provider_view_inverts_roles(self):
        doc = _document({"orders": {"publish": _op()}})
        specs = build_function_specs(doc, GenerationParams(view="provider"))
        assert specs["ordersConsumer"].role is FunctionRole.CONSUMER

    def test_document_view_fallback(self, client_params: GenerationParams):
        doc = _document({"orders": {"publish": _op()}}, **{"x-view": "provider"})
        assert list(build_function_specs(doc, client_params)) == ["ordersConsumer"]

    def test_reactive_flag_copied(self):
        doc = _document({"orders": {"publish": _op()}})
        specs = build_function_specs(doc, GenerationParams(reactive="true"))
        assert specs["ordersSupplier"].reactive is True


# ======================================================================
# Merging
# ======================================================================


class TestMerge:
    def test_publish_then_subscribe_becomes_function(self, client_params: GenerationParams):
        doc = _document(
            {
                "invoices/out": {"publish": _op("Invoice", **{"x-scs-function-name": "billing"})},
                "orders/{id}": {
                    "parameters": {"id": {"schema": {"type": "string"}}},
                    "subscribe": _op("Order", **{"x-scs-function-name": "billing"}),
                },
            }
        )
        spec = build_function_specs(doc, client_params)["billing"]
        assert spec.role is FunctionRole.FUNCTION
        assert spec.publish_channel == "invoices/out"
        assert spec.subscribe_channel == "orders/*"
        assert spec.publish_payload == "Invoice"
        assert spec.subscribe_payload == "Order"
        # The publishing channel owns the channel info.
        assert spec.channel_info is not None
        assert spec.channel_info.channel_name == "invoices/out"
        assert not spec.dynamic

    def test_subscribe_then_publish_becomes_function(self, client_params: GenerationParams):
        doc = _document(
            {
                "orders/{id}": {
                    "parameters": {"id": {"schema": {"type": "integer"}}},
                    "subscribe": _op("Order", **{"x-scs-function-name": "billing"}),
                },
                "invoices/{id}": {
                    "parameters": {"id": {"schema": {"type": "integer"}}},
                    "publish": _op("Invoice", **{"x-scs-function-name": "billing"}),
                },
            }
        )
        specs = build_function_specs(doc, client_params)
        spec = specs["billing"]
        assert list(specs) == ["billing"]
        assert spec.role is FunctionRole.FUNCTION
        assert spec.publish_channel == "invoices/{id}"
        assert spec.subscribe_channel == "orders/*"
        assert spec.channel_info is not None
        assert spec.channel_info.publish_channel == "invoices/%d"
        assert spec.dynamic

    def test_fixture_merge(self, order_document: AsyncAPIDocument, client_params: GenerationParams):
        specs = build_function_specs(order_document, client_params)
        assert list(specs) == ["processOrder", "auditLogConsumer"]

        process = specs["processOrder"]
        assert process.role is FunctionRole.FUNCTION
        assert process.publish_channel == "orders/{orderId}/{region}/status"
        assert process.publish_payload == "OrderStatus"
        assert process.subscribe_channel == "orders/new"
        assert process.subscribe_payload == "NewOrder"
        assert process.group == "order-workers"
        assert process.dynamic
        assert process.channel_info is not None
        assert process.channel_info.function_param_list == "Long orderId, Region region"

        audit = specs["auditLogConsumer"]
        assert audit.role is FunctionRole.CONSUMER
        assert audit.subscribe_payload == "String"
        assert not audit.dynamic


# ======================================================================
# Conflicts and failures
# ======================================================================


class TestConflicts:
    def test_double_publish(self, client_params: GenerationParams):
        doc = _document(
            {
                "a": {"publish": _op(**{"x-scs-function-name": "f"})},
                "b": {"publish": _op(**{"x-scs-function-name": "f"})},
            }
        )
        with pytest.raises(DirectionConflictError) as exc_info:
            build_function_specs(doc, client_params)
        err = exc_info.value
        assert err.function_name == "f"
        assert err.direction == "publish"
        assert err.existing_channel == "a"
        assert err.channel == "b"

    def test_double_subscribe(self, client_params: GenerationParams):
        doc = _document(
            {
                "a": {"subscribe": _op(**{"x-scs-function-name": "f"})},
                "b": {"subscribe": _op(**{"x-scs-function-name": "f"})},
            }
        )
        with pytest.raises(DirectionConflictError, match="can't subscribe to both channels a and b"):
            build_function_specs(doc, client_params)

    def test_publish_after_function_conflicts(self, client_params: GenerationParams):
        named = {"x-scs-function-name": "f"}
        doc = _document(
            {
                "a": {"publish": _op(**named)},
                "b": {"subscribe": _op(**named)},
                "c": {"publish": _op(**named)},
            }
        )
        with pytest.raises(DirectionConflictError):
            build_function_specs(doc, client_params)

    def test_queue_subscribe_without_existing_queue_conflicts(self, client_params: GenerationParams):
        doc = _document(
            {
                "a": {"subscribe": _op(**{"x-scs-function-name": "testQueue"})},
                "b": {"subscribe": _queue_op("testQueue", ["b"])},
            }
        )
        with pytest.raises(DirectionConflictError):
            build_function_specs(doc, client_params)

    def test_missing_payload(self, client_params: GenerationParams):
        doc = _document({"a": {"publish": {"message": {"name": "empty"}}}})
        with pytest.raises(MissingPayloadError, match="Channel a"):
            build_function_specs(doc, client_params)

    def test_unknown_parameter_type(self, client_params: GenerationParams):
        doc = _document(
            {"a/{p}": {"parameters": {"p": {"schema": {"type": "object"}}}, "publish": _op()}}
        )
        with pytest.raises(UnknownParameterTypeError):
            build_function_specs(doc, client_params)


# ======================================================================
# Queue-with-subscription merge
# ======================================================================


class TestQueueMerge:
    def test_fixture_queue_merge(self, solace_document: AsyncAPIDocument, solace_params: GenerationParams):
        specs = build_function_specs(solace_document, solace_params)
        spec = specs["testQueue"]
        assert spec.role is FunctionRole.CONSUMER
        assert spec.is_queue_with_subscription
        assert spec.queue_name == "testQueue"
        assert spec.additional_subscriptions == ["a/1", "a/2"]
        assert spec.multiple_messages
        assert spec.subscribe_payload == "Message<?>"
        assert spec.subscribe_channel == "a/1"
        assert spec.subscribe_source == "a/1"

    def test_single_subscription_keeps_concrete_payload(self, client_params: GenerationParams):
        doc = _document({"a/1": {"subscribe": _queue_op("q", ["a/1"])}})
        spec = build_function_specs(doc, client_params)["q"]
        assert spec.is_queue_with_subscription
        assert not spec.multiple_messages
        assert spec.subscribe_payload == "Order"

    def test_seeded_multiple_subscriptions(self, client_params: GenerationParams):
        doc = _document({"a/1": {"subscribe": _queue_op("q", ["a/1", "a/2", "a/1"])}})
        spec = build_function_specs(doc, client_params)["q"]
        assert spec.additional_subscriptions == ["a/1", "a/2"]
        assert spec.multiple_messages
        assert spec.subscribe_payload == "Message<?>"

    def test_merge_with_no_new_topics_forces_envelope(self, client_params: GenerationParams):
        doc = _document(
            {
                "a/1": {"subscribe": _queue_op("q", ["a/1"])},
                "a/1b": {"subscribe": _queue_op("q", ["a/1"], schema="Invoice")},
            }
        )
        spec = build_function_specs(doc, client_params)["q"]
        assert spec.additional_subscriptions == ["a/1"]
        assert not spec.multiple_messages
        assert spec.subscribe_payload == "Message<?>"

    def test_explicit_destination_and_group(self, client_params: GenerationParams):
        doc = _document(
            {"a/{id}": {"subscribe": _op(**{"x-scs-destination": "myQueue", "x-scs-group": "g1"})}}
        )
        spec = build_function_specs(doc, client_params)["aIdConsumer"]
        assert spec.subscribe_channel == "myQueue"
        assert spec.explicit_destination
        assert spec.group == "g1"
        assert spec.dynamic


# ======================================================================
# Determinism and cache lifecycle
# ======================================================================


class TestDeterminism:
    def test_repeat_runs_identical(self, solace_document: AsyncAPIDocument, solace_params: GenerationParams):
        cache = SchemaNameCache()
        first = build_function_specs(solace_document, solace_params, cache)
        cache.reset()
        second = build_function_specs(solace_document, solace_params, cache)
        cache.reset()
        assert list(first) == list(second)
        assert first == second

    def test_builder_does_not_reset_cache(
        self, order_document: AsyncAPIDocument, client_params: GenerationParams
    ):
        cache = SchemaNameCache()
        build_function_specs(order_document, client_params, cache)
        assert not cache.is_empty
