"""Payload type resolution for publish and subscribe operations."""
from __future__ import annotations

import logging

from scs_template.binding.naming import class_name, pascal_case
from scs_template.binding.schema_names import SchemaNameCache
from scs_template.binding.type_mapper import resolve_type
from scs_template.shared.constants import FALLBACK_OBJECT_TYPE, GENERIC_ENVELOPE_TYPE
from scs_template.shared.errors import MissingItemsTypeError, MissingPayloadError
from scs_template.shared.models.asyncapi import Channel, Message, Operation, Schema

logger = logging.getLogger(__name__)


def _named_type(schema: Schema, cache: SchemaNameCache | None) -> str | None:
    if cache is not None:
        return cache.class_name(schema)
    if schema.is_anonymous:
        return None
    return class_name(str(schema.name))


def _message_payload_type(
    message: Message,
    cache: SchemaNameCache | None,
    channel_name: str,
) -> str:
    payload = message.payload
    if payload is None:
        raise MissingPayloadError(channel_name)

    if payload.type == "object" or (payload.type is None and not payload.is_anonymous):
        named = _named_type(payload, cache)
        if named:
            return named
        if message.name:
            return pascal_case(message.name)
        return FALLBACK_OBJECT_TYPE

    if payload.type == "array":
        items = payload.items
        if items is None:
            raise MissingItemsTypeError(payload.name or message.name or channel_name)
        if items.type == "object" or items.type is None:
            return f"List<{_named_type(items, cache) or FALLBACK_OBJECT_TYPE}>"
        return f"List<{resolve_type(items.type, items.format).type_name}>"

    if payload.type is None:
        # Anonymous schema with neither type nor reference.
        raise MissingPayloadError(channel_name)

    return resolve_type(payload.type, payload.format).type_name


def resolve_payload_type(
    operation: Operation,
    cache: SchemaNameCache | None = None,
    channel_name: str = "",
) -> str:
    """Return the Java payload type name carried by *operation*.

    An operation with more than one candidate message resolves to the
    generic envelope type.

    Raises:
        MissingPayloadError: If there is no message or no payload schema.
        MissingItemsTypeError: If an array payload has no ``items``.
    """
    if operation.has_multiple_messages:
        return GENERIC_ENVELOPE_TYPE
    message = operation.message
    if message is None:
        raise MissingPayloadError(channel_name)
    type_name = _message_payload_type(message, cache, channel_name)
    logger.debug("Channel %s %s payload: %s", channel_name, operation.action, type_name)
    return type_name


def payload_class(
    channel_name: str,
    channel: Channel,
    cache: SchemaNameCache | None = None,
) -> str:
    """Payload type of the channel's publish side, else its subscribe side.

    Raises:
        MissingPayloadError: If neither side has a resolvable payload.
    """
    for operation in (channel.publish, channel.subscribe):
        if operation is None:
            continue
        try:
            return resolve_payload_type(operation, cache, channel_name)
        except MissingPayloadError:
            continue
    raise MissingPayloadError(channel_name)


def multiple_message_comment(
    operation: Operation,
    cache: SchemaNameCache | None = None,
    channel_name: str = "",
) -> str:
    """Listing comment for a polymorphic operation, ``""`` otherwise.

    The trailing newline is left out so templates can place it.
    """
    if not operation.has_multiple_messages:
        return ""
    lines = ["// The message can be of type:"]
    for message in operation.messages:
        lines.append(f"\t// {_message_payload_type(message, cache, channel_name)}")
    return "\n".join(lines)
