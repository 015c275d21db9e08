"""Function spec builder: merges channels into Spring Cloud Stream functions.

Channels are processed in declaration order.  Each channel's real publisher
and real subscriber (see :mod:`scs_template.binding.directionality`) derive a
function name; operations that derive the same name merge into one
:class:`FunctionSpec`:

- publish-only names become suppliers,
- subscribe-only names become consumers,
- a name that collects one publish and one subscribe side becomes a function,
- a second publish (or subscribe) side on the same name is a conflict.

Solace queue bindings with topic subscriptions are the exception: further
subscribe operations bound to the same queue fold their subscriptions into
the existing consumer instead of conflicting.
"""
from __future__ import annotations

import logging

from scs_template.binding.directionality import real_publisher, real_subscriber
from scs_template.binding.naming import camel_case
from scs_template.binding.parameterizer import resolve_channel_info
from scs_template.binding.payload import resolve_payload_type
from scs_template.binding.schema_names import SchemaNameCache
from scs_template.shared.constants import (
    GENERIC_ENVELOPE_TYPE,
    X_SCS_DESTINATION,
    X_SCS_FUNCTION_NAME,
    X_SCS_GROUP,
)
from scs_template.shared.errors import DirectionConflictError
from scs_template.shared.models.asyncapi import (
    AsyncAPIDocument,
    Channel,
    Operation,
    QueueBinding,
)
from scs_template.shared.models.functions import (
    ChannelInfo,
    FunctionRole,
    FunctionSpec,
)
from scs_template.shared.models.params import GenerationParams

logger = logging.getLogger(__name__)


def derive_function_name(channel_name: str, operation: Operation, is_subscriber: bool) -> str:
    """Return the function name an operation binds to.

    In order of precedence: the operation's ``x-scs-function-name``, the
    camel-cased queue name of a Solace queue binding with topic
    subscriptions, or the camel-cased channel name suffixed with
    ``Consumer`` / ``Supplier``.
    """
    explicit = operation.extension(X_SCS_FUNCTION_NAME)
    if explicit:
        return str(explicit)
    queue = operation.queue_binding
    if queue is not None and queue.has_subscriptions:
        return camel_case(queue.queue_name)
    suffix = "Consumer" if is_subscriber else "Supplier"
    return f"{camel_case(channel_name)}{suffix}"


def channel_function_name(channel_name: str, channel: Channel) -> str:
    """Base function name for a channel, as used by the messaging class."""
    explicit = channel.extension(X_SCS_FUNCTION_NAME)
    if explicit:
        return str(explicit)
    return camel_case(channel_name)


def _has_publish_side(spec: FunctionSpec) -> bool:
    return spec.publish_channel is not None


def _has_subscribe_side(spec: FunctionSpec) -> bool:
    return spec.subscribe_channel is not None


def _attach_channel_info(spec: FunctionSpec, info: ChannelInfo, owner: bool) -> None:
    if owner or spec.channel_info is None:
        spec.channel_info = info
        spec.dynamic = info.has_params


def _merge_queue_subscriptions(spec: FunctionSpec, queue: QueueBinding, channel_name: str) -> None:
    for subscription in queue.topic_subscriptions:
        if subscription not in spec.additional_subscriptions:
            spec.additional_subscriptions.append(subscription)
    spec.multiple_messages = spec.multiple_messages or len(spec.additional_subscriptions) > 1
    spec.subscribe_payload = GENERIC_ENVELOPE_TYPE
    logger.debug(
        "Channel %s: merged queue subscriptions into %s -> %s",
        channel_name,
        spec.name,
        spec.additional_subscriptions,
    )


class FunctionSpecBuilder:
    """Builds the ordered function-spec map for one document.

    The :class:`SchemaNameCache` is injected so the caller controls its
    lifecycle; the builder never resets it.
    """

    def __init__(
        self,
        document: AsyncAPIDocument,
        params: GenerationParams,
        cache: SchemaNameCache | None = None,
    ) -> None:
        self.document = document
        self.params = params
        self.cache = cache if cache is not None else SchemaNameCache()
        self.specs: dict[str, FunctionSpec] = {}

    def build(self) -> dict[str, FunctionSpec]:
        self.specs = {}
        self.cache.load(self.document)
        for channel_name, channel in self.document.channels.items():
            self._process_channel(channel_name, channel)
        logger.info(
            "Resolved %d functions from %d channels.",
            len(self.specs),
            len(self.document.channels),
        )
        return self.specs

    def _payload(self, operation: Operation, channel_name: str) -> str:
        return resolve_payload_type(operation, self.cache, channel_name)

    def _process_channel(self, channel_name: str, channel: Channel) -> None:
        info = resolve_channel_info(channel_name, channel)

        publisher = real_publisher(channel, self.params, self.document)
        if publisher is not None:
            self._add_publish_side(channel_name, publisher, info)

        subscriber = real_subscriber(channel, self.params, self.document)
        if subscriber is not None:
            self._add_subscribe_side(channel_name, subscriber, info)

    def _add_publish_side(self, channel_name: str, operation: Operation, info: ChannelInfo) -> None:
        name = derive_function_name(channel_name, operation, is_subscriber=False)
        spec = self.specs.get(name)
        if spec is not None:
            if _has_publish_side(spec):
                raise DirectionConflictError(name, "publish", spec.publish_source, channel_name)
            spec.role = FunctionRole.FUNCTION
        else:
            spec = FunctionSpec(name=name, role=FunctionRole.SUPPLIER, reactive=self.params.reactive)
            self.specs[name] = spec

        spec.publish_payload = self._payload(operation, channel_name)
        spec.publish_channel = channel_name
        spec.publish_source = channel_name
        _attach_channel_info(spec, info, owner=True)
        logger.debug("Channel %s: %s publishes %s", channel_name, name, spec.publish_payload)

    def _add_subscribe_side(self, channel_name: str, operation: Operation, info: ChannelInfo) -> None:
        name = derive_function_name(channel_name, operation, is_subscriber=True)
        queue = operation.queue_binding
        spec = self.specs.get(name)

        if spec is not None:
            if spec.is_queue_with_subscription and queue is not None and queue.has_subscriptions:
                _merge_queue_subscriptions(spec, queue, channel_name)
                return
            if _has_subscribe_side(spec):
                raise DirectionConflictError(name, "subscribe", spec.subscribe_source, channel_name)
            spec.role = FunctionRole.FUNCTION
        else:
            spec = FunctionSpec(name=name, role=FunctionRole.CONSUMER, reactive=self.params.reactive)
            if queue is not None and queue.has_subscriptions:
                spec.queue_name = queue.queue_name
                spec.additional_subscriptions = list(dict.fromkeys(queue.topic_subscriptions))
                spec.is_queue_with_subscription = True
                spec.multiple_messages = len(spec.additional_subscriptions) > 1
            self.specs[name] = spec

        if spec.multiple_messages:
            spec.subscribe_payload = GENERIC_ENVELOPE_TYPE
        else:
            spec.subscribe_payload = self._payload(operation, channel_name)

        group = operation.extension(X_SCS_GROUP)
        if group:
            spec.group = str(group)

        destination = operation.extension(X_SCS_DESTINATION)
        if destination:
            spec.subscribe_channel = str(destination)
            spec.explicit_destination = True
        elif spec.is_queue_with_subscription:
            spec.subscribe_channel = spec.additional_subscriptions[0]
        else:
            spec.subscribe_channel = info.subscribe_channel
        spec.subscribe_source = channel_name
        _attach_channel_info(spec, info, owner=False)
        logger.debug(
            "Channel %s: %s subscribes to %s (%s)",
            channel_name,
            name,
            spec.subscribe_channel,
            spec.subscribe_payload,
        )


def build_function_specs(
    document: AsyncAPIDocument,
    params: GenerationParams,
    cache: SchemaNameCache | None = None,
) -> dict[str, FunctionSpec]:
    """Resolve the ordered ``{function name: FunctionSpec}`` map for *document*.

    Raises:
        DirectionConflictError: Two channels claim the same side of one
            function.
        MissingPayloadError: An operation has no resolvable payload.
        MissingItemsTypeError: An array payload has no ``items``.
        UnknownParameterTypeError: A channel parameter is neither a
            primitive nor an enum.
    """
    return FunctionSpecBuilder(document, params, cache).build()
