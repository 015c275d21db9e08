"""Topic interpolation and parameter extraction for dynamic channels.

A channel such as ``orders/{id}/status`` is published with a printf-style
pattern (``orders/%d/status``) and subscribed with a wildcard pattern
(``orders/*/status``).
"""
from __future__ import annotations

import logging
import re

from scs_template.binding.naming import lower_first, upper_first
from scs_template.binding.type_mapper import is_primitive, resolve_type
from scs_template.shared.constants import MESSAGING_CLASS_NAME
from scs_template.shared.errors import DocumentError, UnknownParameterTypeError
from scs_template.shared.models.asyncapi import Channel, Parameter
from scs_template.shared.models.functions import ChannelInfo, ChannelParameter

logger = logging.getLogger(__name__)

_PLACEHOLDER_PATTERN = re.compile(r"\{([^}]+)\}")
_WILDCARD = "*"
_PARAM_SEPARATOR = ", "


def placeholder_names(channel_name: str) -> list[str]:
    """Return the ``{placeholder}`` names of *channel_name* in order of appearance."""
    return _PLACEHOLDER_PATTERN.findall(channel_name)


def placeholder_position(channel_name: str, name: str) -> int:
    """Index of the ``/``-separated segment that is exactly ``{name}``, else -1."""
    token = f"{{{name}}}"
    for index, segment in enumerate(channel_name.split("/")):
        if segment == token:
            return index
    return -1


def _describe_parameter(
    channel_name: str,
    name: str,
    parameter: Parameter | None,
) -> tuple[ChannelParameter, str]:
    """Build the :class:`ChannelParameter` and the publish-side print format."""
    param_name = lower_first(name)
    position = placeholder_position(channel_name, name)

    if parameter is None:
        # Placeholder present in the channel name but not declared.
        descriptor = resolve_type("string")
        return (
            ChannelParameter(
                name=param_name,
                type_name=descriptor.type_name,
                sample_arg=descriptor.sample,
                position=position,
            ),
            descriptor.print_format,
        )

    schema = parameter.schema
    if schema is not None and is_primitive(schema.type):
        descriptor = resolve_type(schema.type, schema.format)
        return (
            ChannelParameter(
                name=param_name,
                type_name=descriptor.type_name,
                sample_arg=descriptor.sample,
                position=position,
            ),
            descriptor.print_format,
        )

    if schema is not None and schema.type is None and schema.enum:
        enum_type = upper_first(name)
        enum_values = [str(v) for v in schema.enum]
        return (
            ChannelParameter(
                name=param_name,
                type_name=enum_type,
                sample_arg=f"{MESSAGING_CLASS_NAME}.{enum_type}.{enum_values[0]}",
                position=position,
                enum_values=enum_values,
            ),
            "%s",
        )

    raise UnknownParameterTypeError(channel_name, name)


def resolve_channel_info(channel_name: str, channel: Channel) -> ChannelInfo:
    """Derive the :class:`ChannelInfo` of a channel.

    Declared parameters are processed in declaration order; placeholders
    that appear in the name without a declaration follow as ``String``
    parameters, in order of appearance.

    Raises:
        UnknownParameterTypeError: If a declared parameter is neither a
            primitive nor an enum.
        DocumentError: If a placeholder appears more than once in the
            channel name.
    """
    placeholders = placeholder_names(channel_name)
    repeated = sorted({n for n in placeholders if placeholders.count(n) > 1})
    if repeated:
        raise DocumentError(
            f"Channel {channel_name}: placeholder(s) {', '.join(repeated)} appear more than once."
        )

    publish_topic = channel_name
    subscribe_topic = channel_name
    parameters: list[ChannelParameter] = []
    param_decls: list[str] = []
    arg_refs: list[str] = []
    sample_args: list[str] = []

    names: list[str] = list(channel.parameters)
    names.extend(
        n for n in placeholders
        if n not in channel.parameters
    )

    for name in names:
        param, print_format = _describe_parameter(
            channel_name, name, channel.parameters.get(name)
        )
        token = f"{{{name}}}"
        publish_topic = publish_topic.replace(token, print_format)
        subscribe_topic = subscribe_topic.replace(token, _WILDCARD)

        parameters.append(param)
        param_decls.append(f"{param.type_name} {param.name}")
        arg_refs.append(param.name)
        sample_args.append(param.sample_arg)

    info = ChannelInfo(
        channel_name=channel_name,
        publish_channel=publish_topic,
        subscribe_channel=subscribe_topic,
        parameters=parameters,
        function_param_list=_PARAM_SEPARATOR.join(param_decls),
        function_arg_list=_PARAM_SEPARATOR.join(arg_refs),
        sample_arg_list=_PARAM_SEPARATOR.join(sample_args),
    )
    logger.debug(
        "Channel %s: publish=%s subscribe=%s params=%d",
        channel_name,
        publish_topic,
        subscribe_topic,
        len(parameters),
    )
    return info
