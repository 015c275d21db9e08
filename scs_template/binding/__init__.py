"""Function-binding resolution engine."""

from scs_template.binding.directionality import is_provider_view, real_publisher, real_subscriber
from scs_template.binding.function_specs import (
    FunctionSpecBuilder,
    build_function_specs,
    channel_function_name,
    derive_function_name,
)
from scs_template.binding.parameterizer import resolve_channel_info
from scs_template.binding.payload import multiple_message_comment, payload_class, resolve_payload_type
from scs_template.binding.schema_names import SchemaNameCache, describe_models
from scs_template.binding.type_mapper import resolve_type

__all__ = [
    "FunctionSpecBuilder",
    "SchemaNameCache",
    "build_function_specs",
    "channel_function_name",
    "derive_function_name",
    "describe_models",
    "is_provider_view",
    "multiple_message_comment",
    "payload_class",
    "real_publisher",
    "real_subscriber",
    "resolve_channel_info",
    "resolve_payload_type",
    "resolve_type",
]
