"""Resolved integration-function model produced by the binding engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from scs_template.shared.constants import (
    PUBLISH_BINDING_SUFFIX,
    SUBSCRIBE_BINDING_SUFFIX,
)
from scs_template.shared.errors import GenerationError


class FunctionRole(str, Enum):
    """Spring Cloud Stream functional bean kinds."""
    SUPPLIER = "supplier"
    CONSUMER = "consumer"
    FUNCTION = "function"


@dataclass(frozen=True)
class TypeDescriptor:
    """Target type for a (primitive type, format) pair."""
    type_name: str
    print_format: str
    sample: str


@dataclass
class ChannelParameter:
    """One ``{placeholder}`` of a dynamic channel."""
    name: str
    type_name: str
    sample_arg: str
    position: int = -1
    enum_values: list[str] | None = None

    @property
    def is_enum(self) -> bool:
        return self.enum_values is not None


@dataclass
class ChannelInfo:
    """Topic strings and argument lists derived once per channel."""
    channel_name: str
    publish_channel: str
    subscribe_channel: str
    parameters: list[ChannelParameter] = field(default_factory=list)
    function_param_list: str = ""
    function_arg_list: str = ""
    sample_arg_list: str = ""

    @property
    def has_params(self) -> bool:
        return bool(self.parameters)


@dataclass
class FunctionSpec:
    """A resolved, possibly merged, integration function.

    ``role`` is stored, not derived: it is set when the spec is created and
    promoted to :attr:`FunctionRole.FUNCTION` when the opposite side merges in.
    """
    name: str
    role: FunctionRole | None = None
    reactive: bool = False
    publish_payload: str | None = None
    publish_channel: str | None = None
    subscribe_payload: str | None = None
    subscribe_channel: str | None = None
    group: str | None = None
    queue_name: str | None = None
    explicit_destination: bool = False
    multiple_messages: bool = False
    is_queue_with_subscription: bool = False
    additional_subscriptions: list[str] = field(default_factory=list)
    dynamic: bool = False
    channel_info: ChannelInfo | None = None
    publish_source: str | None = None
    subscribe_source: str | None = None


def is_publisher(spec: FunctionSpec) -> bool:
    return spec.role in (FunctionRole.FUNCTION, FunctionRole.SUPPLIER)


def is_subscriber(spec: FunctionSpec) -> bool:
    return spec.role in (FunctionRole.FUNCTION, FunctionRole.CONSUMER)


def publish_binding_name(spec: FunctionSpec) -> str:
    return f"{spec.name}{PUBLISH_BINDING_SUFFIX}"


def subscribe_binding_name(spec: FunctionSpec) -> str:
    return f"{spec.name}{SUBSCRIBE_BINDING_SUFFIX}"


def function_signature(spec: FunctionSpec) -> str:
    """Return the Java bean method signature for *spec*."""
    if spec.role is FunctionRole.FUNCTION:
        if spec.reactive:
            return (
                f"public Function<Flux<{spec.subscribe_payload}>, "
                f"Flux<{spec.publish_payload}>> {spec.name}()"
            )
        return (
            f"public Function<{spec.subscribe_payload}, {spec.publish_payload}> "
            f"{spec.name}()"
        )
    if spec.role is FunctionRole.SUPPLIER:
        if spec.reactive:
            return f"public Supplier<Flux<{spec.publish_payload}>> {spec.name}()"
        return f"public Supplier<{spec.publish_payload}> {spec.name}()"
    if spec.role is FunctionRole.CONSUMER:
        if spec.reactive:
            return f"public Consumer<Flux<{spec.subscribe_payload}>> {spec.name}()"
        return f"public Consumer<{spec.subscribe_payload}> {spec.name}()"
    raise GenerationError(
        f"Can't determine the function signature for {spec.name} "
        f"because the role is {spec.role}"
    )
