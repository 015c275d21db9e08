"""Spring Cloud Stream ``application.yml`` generation.

Turns the resolved function-spec map into the configuration keys that bind
each function to its destination:

- ``spring.cloud.function.definition``: ``;``-joined function names,
- ``spring.cloud.stream.bindings``: destination and group per binding,
- ``spring.cloud.stream.solace``: queue names and extra topic subscriptions,
- ``spring.cloud.function.configuration``: parameter-to-header mappings.
"""

from __future__ import annotations

import logging
from typing import Any

import yaml

from scs_template.binding.function_specs import build_function_specs
from scs_template.binding.schema_names import SchemaNameCache
from scs_template.shared.constants import DESTINATION_HEADERS
from scs_template.shared.models.asyncapi import AsyncAPIDocument
from scs_template.shared.models.functions import (
    FunctionRole,
    FunctionSpec,
    is_publisher,
    is_subscriber,
    publish_binding_name,
    subscribe_binding_name,
)
from scs_template.shared.models.params import GenerationParams

logger = logging.getLogger(__name__)

_SOLACE_BINDER_NAME = "solace-binder"
_ACTUATOR_PORT = 8080


def function_definitions(specs: dict[str, FunctionSpec]) -> str:
    """Return the ``spring.cloud.function.definition`` value."""
    return ";".join(specs)


def binding_destinations(specs: dict[str, FunctionSpec]) -> dict[str, dict[str, str]]:
    """Map each binding name to its destination (and consumer group)."""
    bindings: dict[str, dict[str, str]] = {}
    for spec in specs.values():
        if is_publisher(spec):
            bindings[publish_binding_name(spec)] = {
                "destination": str(spec.publish_channel),
            }
        if is_subscriber(spec):
            binding: dict[str, str] = {"destination": str(spec.subscribe_channel)}
            if spec.group:
                binding["group"] = spec.group
            bindings[subscribe_binding_name(spec)] = binding
    return bindings


def additional_subscriptions(
    specs: dict[str, FunctionSpec],
    binder: str,
) -> dict[str, Any] | None:
    """Return the ``spring.cloud.stream.solace`` block, or ``None`` if empty.

    Queue-bound consumers get their queue name and every topic subscription
    after the first (the first is the binding's destination).  Consumers
    with an explicit destination subscribe their queue to the wildcard form
    of the channel.
    """
    if binder != "solace":
        return None

    bindings: dict[str, Any] = {}
    for spec in specs.values():
        if not is_subscriber(spec):
            continue
        consumer: dict[str, Any] = {}
        if spec.is_queue_with_subscription:
            consumer["queueNameExpression"] = f"'{spec.queue_name}'"
            extra = spec.additional_subscriptions[1:]
            if extra:
                consumer["queueAdditionalSubscriptions"] = extra
        elif spec.explicit_destination and spec.channel_info is not None:
            consumer["queueAdditionalSubscriptions"] = spec.channel_info.subscribe_channel
        if consumer:
            bindings[subscribe_binding_name(spec)] = {"consumer": consumer}

    if not bindings:
        return None
    return {"bindings": bindings}


def header_mappings(
    specs: dict[str, FunctionSpec],
    params: GenerationParams,
) -> dict[str, Any] | None:
    """Return per-consumer ``input-header-mapping-expression`` blocks.

    Only produced with ``parametersToHeaders`` on a binder that reports the
    concrete topic of a received message in a header.
    """
    header = DESTINATION_HEADERS.get(params.binder)
    if not params.parameters_to_headers or header is None:
        return None

    config: dict[str, Any] = {}
    for spec in specs.values():
        info = spec.channel_info
        if spec.role is not FunctionRole.CONSUMER or not spec.dynamic or info is None:
            continue
        config[spec.name] = {
            "input-header-mapping-expression": {
                param.name: f'headers.{header}.getName.split("/")[{param.position}]'
                for param in info.parameters
            }
        }
    return config or None


def _solace_environment(params: GenerationParams) -> dict[str, Any]:
    return {
        "java": {
            "host": params.host,
            "msgVpn": params.msg_vpn,
            "clientUsername": params.username,
            "clientPassword": params.password,
        }
    }


def app_properties(
    document: AsyncAPIDocument,
    params: GenerationParams,
    specs: dict[str, FunctionSpec] | None = None,
    cache: SchemaNameCache | None = None,
) -> dict[str, Any]:
    """Build the ``application.yml`` document as a dict.

    Args:
        document: The parsed AsyncAPI document.
        params: Generation parameters.
        specs: Already resolved function specs; resolved from *document*
            when omitted.
        cache: Schema name cache used when *specs* must be resolved.
    """
    if specs is None:
        specs = build_function_specs(document, params, cache)

    function_config: dict[str, Any] = {"definition": function_definitions(specs)}
    mappings = header_mappings(specs, params)
    if mappings:
        function_config["configuration"] = mappings

    stream: dict[str, Any] = {"bindings": binding_destinations(specs)}
    solace = additional_subscriptions(specs, params.binder)
    if solace:
        stream["solace"] = solace

    doc: dict[str, Any] = {"spring": {"cloud": {"function": function_config, "stream": stream}}}

    if params.is_application:
        if params.binder == "solace":
            stream["binders"] = {
                _SOLACE_BINDER_NAME: {
                    "type": "solace",
                    "environment": {"solace": _solace_environment(params)},
                }
            }
        doc["logging"] = {"level": {"root": "info", "org": {"springframework": "info"}}}
        if params.actuator:
            doc["server"] = {"port": _ACTUATOR_PORT}
            doc["management"] = {"endpoints": {"web": {"exposure": {"include": "*"}}}}

    logger.debug("Built application properties for %d functions.", len(specs))
    return doc


def render_application_yaml(
    document: AsyncAPIDocument,
    params: GenerationParams,
    specs: dict[str, FunctionSpec] | None = None,
    cache: SchemaNameCache | None = None,
) -> str:
    """Render :func:`app_properties` as YAML text."""
    return yaml.safe_dump(
        app_properties(document, params, specs, cache),
        default_flow_style=False,
        sort_keys=False,
        width=200,
    )
