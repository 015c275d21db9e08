"""AsyncAPI 2.x document model consumed by the function-binding engine.

The parser in :mod:`scs_template.document.parser` builds these objects from a
raw specification dict.  They are treated as immutable input by the engine.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(eq=False)
class Schema:
    """A JSON-Schema-like payload, property or parameter schema.

    Attributes:
        type:       Type tag (``object``, ``array``, ``string`` ...) or ``None``
                    when the schema only references a named component or
                    declares an enum.
        format:     Optional format qualifier (``int64``, ``date-time`` ...).
        enum:       Enum values, if declared.
        properties: Nested property schemas, in declaration order.
        items:      Item schema for arrays.
        name:       Identifier of the named/shared component this schema
                    stands for, ``None`` for anonymous schemas.
        title:      Optional ``title``.
        all_of:     ``allOf`` parts.
        extensions: ``x-*`` keys declared on the schema.
    """

    type: str | None = None
    format: str | None = None
    enum: list[Any] | None = None
    properties: dict[str, Schema] = field(default_factory=dict)
    items: Schema | None = None
    name: str | None = None
    title: str | None = None
    all_of: list[Schema] = field(default_factory=list)
    extensions: dict[str, Any] = field(default_factory=dict)

    @property
    def is_anonymous(self) -> bool:
        return not self.name

    def __repr__(self) -> str:
        # Schemas may be cyclic; keep the repr flat.
        return f"Schema(name={self.name!r}, type={self.type!r}, format={self.format!r})"


@dataclass
class Message:
    """A message carried by an operation."""

    name: str | None = None
    payload: Schema | None = None
    title: str | None = None
    content_type: str = "application/json"


@dataclass
class Parameter:
    """A named ``{placeholder}`` on a channel."""

    name: str
    schema: Schema | None = None
    description: str = ""


@dataclass
class QueueBinding:
    """Solace queue binding: a queue name plus the topics it subscribes to."""

    queue_name: str
    topic_subscriptions: list[str] = field(default_factory=list)

    @property
    def has_subscriptions(self) -> bool:
        return bool(self.queue_name) and bool(self.topic_subscriptions)


@dataclass
class Operation:
    """A ``publish`` or ``subscribe`` operation on a channel."""

    action: str
    operation_id: str | None = None
    messages: list[Message] = field(default_factory=list)
    extensions: dict[str, Any] = field(default_factory=dict)
    bindings: dict[str, Any] = field(default_factory=dict)
    queue_binding: QueueBinding | None = None
    summary: str = ""

    def extension(self, name: str) -> Any:
        return self.extensions.get(name)

    @property
    def has_multiple_messages(self) -> bool:
        return len(self.messages) > 1

    @property
    def message(self) -> Message | None:
        return self.messages[0] if self.messages else None


@dataclass
class Channel:
    """A named channel with at most one publish and one subscribe operation."""

    name: str
    publish: Operation | None = None
    subscribe: Operation | None = None
    parameters: dict[str, Parameter] = field(default_factory=dict)
    extensions: dict[str, Any] = field(default_factory=dict)
    description: str = ""

    def extension(self, name: str) -> Any:
        return self.extensions.get(name)


@dataclass
class AsyncAPIDocument:
    """Top-level container for a parsed AsyncAPI 2.x document.

    Attributes:
        asyncapi_version: The ``asyncapi`` version string.
        title:            ``info.title``.
        version:          ``info.version``.
        channels:         Channels keyed by name, in declaration order.
        schemas:          Component schemas keyed by component name.
        info_extensions:  ``x-*`` keys declared under ``info``.
        extensions:       ``x-*`` keys declared at the document root.
        servers:          Raw ``servers`` mapping.
    """

    asyncapi_version: str
    title: str
    version: str
    channels: dict[str, Channel] = field(default_factory=dict)
    schemas: dict[str, Schema] = field(default_factory=dict)
    info_extensions: dict[str, Any] = field(default_factory=dict)
    extensions: dict[str, Any] = field(default_factory=dict)
    servers: dict[str, Any] = field(default_factory=dict)

    def info_extension(self, name: str) -> Any:
        return self.info_extensions.get(name)
