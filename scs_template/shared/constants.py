"""Shared constants used across the generator."""
from __future__ import annotations

# Application version
VERSION: str = "0.13.0"

SERVICE_NAME: str = "scs-template"

# Parent logger of every engine module
PACKAGE_LOGGER: str = "scs_template"

# Binders
SUPPORTED_BINDERS: tuple[str, ...] = ("kafka", "rabbit", "solace")
DEFAULT_BINDER: str = "kafka"

# Dynamic topic strategies
DYNAMIC_TYPES: tuple[str, ...] = ("streamBridge", "header")
DEFAULT_DYNAMIC_TYPE: str = "streamBridge"

# Views
VIEWS: tuple[str, ...] = ("client", "provider")
DEFAULT_VIEW: str = "client"
PROVIDER_VIEW: str = "provider"

# Artifact types
ARTIFACT_TYPES: tuple[str, ...] = ("application", "library")

# Payload type used when a channel can carry more than one message shape
GENERIC_ENVELOPE_TYPE: str = "Message<?>"
FALLBACK_OBJECT_TYPE: str = "Object"

# Specification extensions
X_SCS_FUNCTION_NAME: str = "x-scs-function-name"
X_SCS_DESTINATION: str = "x-scs-destination"
X_SCS_GROUP: str = "x-scs-group"
X_VIEW: str = "x-view"
X_PARSER_SCHEMA_ID: str = "x-parser-schema-id"

# Generated class that holds the enum types for channel parameters
MESSAGING_CLASS_NAME: str = "Messaging"

# Binding name suffixes
PUBLISH_BINDING_SUFFIX: str = "-out-0"
SUBSCRIBE_BINDING_SUFFIX: str = "-in-0"

# Solace connection defaults
SOLACE_HOST: str = "tcp://localhost:55555"
SOLACE_DEFAULT: str = "default"

# Headers carrying the concrete topic of a received message, per binder
DESTINATION_HEADERS: dict[str, str] = {
    "solace": "solace_destination",
    "rabbit": "amqp_receivedRoutingKey",
}
