"""AsyncAPI 2.x document parser.

Parses an AsyncAPI 2.x specification dict (or YAML string / file) into the
dataclasses of :mod:`scs_template.shared.models.asyncapi` consumed by the
function-binding engine.

Handles local ``$ref`` resolution for:
    1. ``#/components/messages/MessageName``
    2. ``#/components/schemas/SchemaName``
    3. ``#/components/parameters/ParameterName``
    4. ``#/channels/ChannelName``

Component schemas are materialised once per name, so a schema that refers
back to itself produces a cyclic object graph instead of infinite recursion.

Example usage::

    >>> from scs_template.document.parser import parse_document_yaml
    >>> doc = parse_document_yaml(open("asyncapi.yaml").read())  # doctest: +SKIP
    >>> list(doc.channels)  # doctest: +SKIP
    ['orders/{id}/status']
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from scs_template.shared.constants import X_PARSER_SCHEMA_ID
from scs_template.shared.errors import DocumentError
from scs_template.shared.models.asyncapi import (
    AsyncAPIDocument,
    Channel,
    Message,
    Operation,
    Parameter,
    QueueBinding,
    Schema,
)

logger = logging.getLogger(__name__)

_SUPPORTED_ASYNCAPI_MAJORS = {"2"}
_SCHEMA_REF_PREFIX = "#/components/schemas/"


# ---------------------------------------------------------------------------
# $ref resolution helpers
# ---------------------------------------------------------------------------


def _resolve_ref(
    spec: dict[str, Any],
    ref_string: str,
    visited: set[str] | None = None,
) -> dict[str, Any]:
    """Resolve a local JSON ``$ref`` pointer against *spec*.

    Chains of refs (a ref whose target is itself a ref) are followed until a
    concrete object is reached.  A ref seen twice within one chain is a cycle
    and raises :class:`DocumentError`.

    Args:
        spec:       The full AsyncAPI specification dict (root document).
        ref_string: The ``$ref`` value, e.g. ``"#/components/messages/Foo"``.
        visited:    Refs already followed in this chain.

    Returns:
        A shallow copy of the resolved dict fragment.

    Raises:
        DocumentError: If the pointer is not local, cannot be resolved, does
            not point at an object, or forms a cycle.
    """

    if visited is None:
        visited = set()

    if ref_string in visited:
        raise DocumentError(f"Circular $ref detected: {ref_string}")
    visited.add(ref_string)

    if not isinstance(ref_string, str) or not ref_string.startswith("#/"):
        raise DocumentError(
            f"Unsupported $ref format (not a local pointer): {ref_string}"
        )

    current: Any = spec
    for part in ref_string[2:].split("/"):
        # JSON Pointer escaping: ~1 -> /, ~0 -> ~
        decoded_part = part.replace("~1", "/").replace("~0", "~")
        if not isinstance(current, dict) or decoded_part not in current:
            raise DocumentError(f"Unresolvable $ref (key not found): {ref_string}")
        current = current[decoded_part]

    if not isinstance(current, dict):
        raise DocumentError(f"$ref {ref_string} does not point at an object")

    resolved = dict(current)
    if "$ref" in resolved:
        logger.debug("Following nested $ref: %s -> %s", ref_string, resolved["$ref"])
        return _resolve_ref(spec, resolved["$ref"], visited)
    return resolved


def _resolve_if_ref(spec: dict[str, Any], value: Any) -> Any:
    """Return the resolved object if *value* is a ``$ref`` dict, else *value*."""
    if isinstance(value, dict) and "$ref" in value:
        return _resolve_ref(spec, value["$ref"])
    return value


def _extract_ref_name(value: Any) -> str | None:
    """Extract the trailing name component from a ``$ref`` value.

    For example ``{"$ref": "#/components/messages/UserSignedUp"}`` yields
    ``"UserSignedUp"``.
    """
    if isinstance(value, dict) and "$ref" in value:
        ref_str = value["$ref"]
        if isinstance(ref_str, str) and "/" in ref_str:
            return ref_str.rsplit("/", 1)[-1].replace("~1", "/").replace("~0", "~")
    return None


def _extensions(obj: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in obj.items() if isinstance(k, str) and k.startswith("x-")}


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


def _schema_id_name(raw: dict[str, Any]) -> str | None:
    """Derive a component name from ``x-parser-schema-id`` or ``$id``.

    URLs and parser-generated anonymous ids are ignored.
    """
    for key in (X_PARSER_SCHEMA_ID, "$id"):
        value = raw.get(key)
        if not isinstance(value, str) or not value:
            continue
        if "://" in value or value.startswith("<anonymous"):
            continue
        name = value.rsplit("/", 1)[-1].replace(".schema.json", "")
        if name:
            return name
    return None


def _schema_type(raw: dict[str, Any]) -> str | None:
    value = raw.get("type")
    if isinstance(value, list):
        # ["string", "null"] -> "string"
        non_null = [v for v in value if v != "null"]
        return str(non_null[0]) if non_null else "null"
    return str(value) if value is not None else None


class _SchemaBuilder:
    """Materialise raw schema dicts into :class:`Schema` objects.

    Component schemas are memoised by name; the memo entry is registered
    before the schema's children are built, which is what turns a
    self-reference into a cycle in the object graph.
    """

    def __init__(self, spec: dict[str, Any]) -> None:
        self._spec = spec
        self._components: dict[str, Schema] = {}

    @property
    def components(self) -> dict[str, Schema]:
        return self._components

    def component(self, name: str) -> Schema:
        if name in self._components:
            return self._components[name]
        raw = _resolve_ref(self._spec, f"{_SCHEMA_REF_PREFIX}{name}")
        schema = Schema(name=name)
        self._components[name] = schema
        self._fill(schema, raw)
        return schema

    def build(self, raw: Any, context: str) -> Schema:
        if not isinstance(raw, dict):
            raise DocumentError(f"Schema at {context} is not an object")
        ref = raw.get("$ref")
        if isinstance(ref, str):
            if ref.startswith(_SCHEMA_REF_PREFIX):
                return self.component(_extract_ref_name(raw) or "")
            resolved = _resolve_ref(self._spec, ref)
            schema = Schema(name=_extract_ref_name(raw))
            self._fill(schema, resolved)
            return schema
        schema = Schema(name=_schema_id_name(raw))
        self._fill(schema, raw)
        return schema

    def _fill(self, schema: Schema, raw: dict[str, Any]) -> None:
        schema.type = _schema_type(raw)
        fmt = raw.get("format")
        schema.format = str(fmt) if fmt is not None else None
        enum = raw.get("enum")
        schema.enum = list(enum) if isinstance(enum, list) else None
        title = raw.get("title")
        schema.title = str(title) if title is not None else None
        schema.extensions = _extensions(raw)
        if schema.name is None:
            schema.name = _schema_id_name(raw)

        properties = raw.get("properties")
        if isinstance(properties, dict):
            schema.properties = {
                str(prop_name): self.build(prop, f"{schema.name}.{prop_name}")
                for prop_name, prop in properties.items()
            }

        items = raw.get("items")
        if isinstance(items, dict):
            schema.items = self.build(items, f"{schema.name}[]")
        elif isinstance(items, list) and items:
            # Tuple validation; the first item type stands for the array.
            schema.items = self.build(items[0], f"{schema.name}[0]")

        all_of = raw.get("allOf")
        if isinstance(all_of, list):
            schema.all_of = [
                self.build(part, f"{schema.name}.allOf[{idx}]")
                for idx, part in enumerate(all_of)
            ]


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def _extract_info(spec: dict[str, Any]) -> tuple[str, str, dict[str, Any]]:
    """Extract ``info.title``, ``info.version`` and the info extensions.

    Raises:
        DocumentError: If ``info``, ``info.title``, or ``info.version`` is
            missing.
    """
    info = spec.get("info")
    if not isinstance(info, dict):
        raise DocumentError("AsyncAPI document is missing the required 'info' object.")

    title = info.get("title")
    if not title:
        raise DocumentError("AsyncAPI document is missing the required 'info.title' field.")

    version = info.get("version")
    if not version:
        raise DocumentError("AsyncAPI document is missing the required 'info.version' field.")

    return str(title), str(version), _extensions(info)


def _extract_asyncapi_version(spec: dict[str, Any]) -> str:
    """Extract and validate the ``asyncapi`` version string."""
    asyncapi_version = spec.get("asyncapi")
    if not asyncapi_version:
        raise DocumentError(
            "AsyncAPI document is missing the required 'asyncapi' version field."
        )

    version_str = str(asyncapi_version)
    major = version_str.split(".")[0]
    if major not in _SUPPORTED_ASYNCAPI_MAJORS:
        supported = ", ".join(sorted(_SUPPORTED_ASYNCAPI_MAJORS))
        raise DocumentError(
            f"Unsupported AsyncAPI version '{version_str}'. "
            f"This generator supports major versions: {supported}."
        )
    return version_str


def _parse_message(
    spec: dict[str, Any],
    builder: _SchemaBuilder,
    raw: Any,
    context: str,
) -> Message:
    ref_name = _extract_ref_name(raw)
    resolved = _resolve_if_ref(spec, raw)
    if not isinstance(resolved, dict):
        raise DocumentError(f"Message at {context} is not an object")

    payload_raw = resolved.get("payload")
    payload = builder.build(payload_raw, f"{context}.payload") if payload_raw is not None else None

    name = resolved.get("name") or resolved.get("x-parser-message-name") or ref_name
    title = resolved.get("title")
    return Message(
        name=str(name) if name else None,
        payload=payload,
        title=str(title) if title is not None else None,
        content_type=str(resolved.get("contentType", "application/json")),
    )


def _parse_queue_binding(bindings: dict[str, Any], context: str) -> QueueBinding | None:
    """Extract the Solace queue binding, if any.

    Accepts both the flat form (``queueName`` + ``topicSubscriptions``) and
    the ``destinations`` list form; in the latter only the first queue
    destination is used.
    """
    solace = bindings.get("solace")
    if not isinstance(solace, dict):
        return None

    if solace.get("queueName"):
        return QueueBinding(
            queue_name=str(solace["queueName"]),
            topic_subscriptions=[str(t) for t in solace.get("topicSubscriptions") or []],
        )

    destinations = solace.get("destinations")
    if not isinstance(destinations, list):
        return None

    queues = [
        d.get("queue")
        for d in destinations
        if isinstance(d, dict) and d.get("destinationType") == "queue"
        and isinstance(d.get("queue"), dict) and d["queue"].get("name")
    ]
    if not queues:
        return None
    if len(queues) > 1:
        logger.warning(
            "%s: %d queue destinations declared; only '%s' is used.",
            context,
            len(queues),
            queues[0]["name"],
        )
    first = queues[0]
    return QueueBinding(
        queue_name=str(first["name"]),
        topic_subscriptions=[str(t) for t in first.get("topicSubscriptions") or []],
    )


def _parse_operation(
    spec: dict[str, Any],
    builder: _SchemaBuilder,
    action: str,
    raw: Any,
    channel_name: str,
) -> Operation:
    context = f"channels.{channel_name}.{action}"
    resolved = _resolve_if_ref(spec, raw)
    if not isinstance(resolved, dict):
        raise DocumentError(f"Operation {context} is not an object")

    messages: list[Message] = []
    msg_def = resolved.get("message")
    if msg_def is not None:
        resolved_msg = _resolve_if_ref(spec, msg_def)
        one_of = resolved_msg.get("oneOf") if isinstance(resolved_msg, dict) else None
        if isinstance(one_of, list):
            messages = [
                _parse_message(spec, builder, sub, f"{context}.message.oneOf[{idx}]")
                for idx, sub in enumerate(one_of)
            ]
        else:
            messages = [_parse_message(spec, builder, msg_def, f"{context}.message")]

    bindings = resolved.get("bindings") or {}
    if not isinstance(bindings, dict):
        logger.warning("%s: 'bindings' is not a dict; ignoring.", context)
        bindings = {}

    op_id = resolved.get("operationId")
    return Operation(
        action=action,
        operation_id=str(op_id) if op_id else None,
        messages=messages,
        extensions=_extensions(resolved),
        bindings=bindings,
        queue_binding=_parse_queue_binding(bindings, context),
        summary=str(resolved.get("summary", "")),
    )


def _parse_parameters(
    spec: dict[str, Any],
    builder: _SchemaBuilder,
    raw: Any,
    channel_name: str,
) -> dict[str, Parameter]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise DocumentError(f"Channel {channel_name}: 'parameters' is not an object")

    parameters: dict[str, Parameter] = {}
    for name, param_def in raw.items():
        resolved = _resolve_if_ref(spec, param_def)
        if not isinstance(resolved, dict):
            raise DocumentError(
                f"Channel {channel_name}: parameter '{name}' is not an object"
            )
        schema_raw = resolved.get("schema")
        schema = (
            builder.build(schema_raw, f"{channel_name}.parameters.{name}")
            if schema_raw is not None
            else None
        )
        parameters[str(name)] = Parameter(
            name=str(name),
            schema=schema,
            description=str(resolved.get("description", "")),
        )
    return parameters


def _parse_channels(spec: dict[str, Any], builder: _SchemaBuilder) -> dict[str, Channel]:
    """Parse ``channels`` in declaration order."""
    raw_channels = spec.get("channels") or {}
    if not isinstance(raw_channels, dict):
        raise DocumentError("'channels' is not an object")

    channels: dict[str, Channel] = {}
    for name, ch_def in raw_channels.items():
        name_str = str(name)
        resolved = _resolve_if_ref(spec, ch_def)
        if not isinstance(resolved, dict):
            raise DocumentError(f"Channel '{name_str}' is not an object")

        channel = Channel(
            name=name_str,
            parameters=_parse_parameters(spec, builder, resolved.get("parameters"), name_str),
            extensions=_extensions(resolved),
            description=str(resolved.get("description", "")),
        )
        if resolved.get("publish") is not None:
            channel.publish = _parse_operation(
                spec, builder, "publish", resolved["publish"], name_str
            )
        if resolved.get("subscribe") is not None:
            channel.subscribe = _parse_operation(
                spec, builder, "subscribe", resolved["subscribe"], name_str
            )
        channels[name_str] = channel

    logger.debug("Parsed %d channels.", len(channels))
    return channels


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_document(spec: dict[str, Any]) -> AsyncAPIDocument:
    """Parse an AsyncAPI 2.x specification dict into an :class:`AsyncAPIDocument`.

    Args:
        spec: A dict representing a complete AsyncAPI 2.x document, usually
              obtained via ``yaml.safe_load()`` or ``json.load()``.

    Returns:
        The parsed document with all local ``$ref`` pointers resolved.

    Raises:
        DocumentError: If *spec* is not a dict, required fields are missing,
            the version is unsupported, or a ``$ref`` cannot be resolved.
    """
    if not isinstance(spec, dict):
        raise DocumentError(
            f"Expected a dict for the AsyncAPI document, got {type(spec).__name__}."
        )

    asyncapi_version = _extract_asyncapi_version(spec)
    title, version, info_extensions = _extract_info(spec)

    logger.info("Parsing AsyncAPI %s document: '%s' v%s", asyncapi_version, title, version)

    builder = _SchemaBuilder(spec)
    components = spec.get("components") or {}
    raw_schemas = components.get("schemas") if isinstance(components, dict) else None
    if isinstance(raw_schemas, dict):
        for name in raw_schemas:
            builder.component(str(name))

    channels = _parse_channels(spec, builder)

    servers = spec.get("servers")
    document = AsyncAPIDocument(
        asyncapi_version=asyncapi_version,
        title=title,
        version=version,
        channels=channels,
        schemas=dict(builder.components),
        info_extensions=info_extensions,
        extensions=_extensions(spec),
        servers=servers if isinstance(servers, dict) else {},
    )

    logger.info(
        "Parsed document '%s' v%s: %d channels, %d schemas.",
        title,
        version,
        len(channels),
        len(document.schemas),
    )
    return document


def parse_document_yaml(yaml_string: str) -> AsyncAPIDocument:
    """Parse an AsyncAPI 2.x YAML string.

    Raises:
        DocumentError: If the YAML root is not a mapping.
        yaml.YAMLError: On malformed YAML.
    """
    parsed = yaml.safe_load(yaml_string)
    if not isinstance(parsed, dict):
        raise DocumentError(
            f"Expected a YAML mapping at the root, got {type(parsed).__name__}."
        )
    return parse_document(parsed)


def load_document(path: Path | str) -> AsyncAPIDocument:
    """Read and parse an AsyncAPI 2.x YAML or JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return parse_document_yaml(f.read())
