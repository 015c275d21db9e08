"""Generation error hierarchy.

Every error is fatal: the engine never recovers from one locally, and a run
that raises produces no output.
"""
from __future__ import annotations


class GenerationError(Exception):
    """Base generation error."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class DocumentError(GenerationError):
    """The input document is structurally invalid."""

    def __init__(self, detail: str = "Invalid AsyncAPI document") -> None:
        super().__init__(detail)


class UnsupportedBinderError(GenerationError):
    """The configured binder is outside the supported set."""

    def __init__(self, binder: object) -> None:
        self.binder = binder
        super().__init__(
            f"Unsupported binder '{binder}'. Please provide a parameter named "
            "'binder' with the value kafka, rabbit or solace."
        )


class DirectionConflictError(GenerationError):
    """Two channels claim the same side of one function."""

    def __init__(
        self,
        function_name: str,
        direction: str,
        existing_channel: str | None,
        channel: str,
    ) -> None:
        self.function_name = function_name
        self.direction = direction
        self.existing_channel = existing_channel
        self.channel = channel
        super().__init__(
            f"Function {function_name} can't {direction} to both channels "
            f"{existing_channel} and {channel}."
        )


class MissingPayloadError(GenerationError):
    """An operation has no resolvable payload type."""

    def __init__(self, channel: str, function_name: str | None = None) -> None:
        self.channel = channel
        self.function_name = function_name
        detail = f"Channel {channel}: no payload class has been defined."
        if function_name:
            detail = f"{detail} (function {function_name})"
        super().__init__(detail)


class MissingItemsTypeError(GenerationError):
    """An array schema does not declare the type of its items."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Array named {name} must have an 'items' property to indicate "
            "what type the array elements are."
        )


class UnknownParameterTypeError(GenerationError):
    """A channel parameter is neither a primitive nor an enum."""

    def __init__(self, channel: str, parameter: str) -> None:
        self.channel = channel
        self.parameter = parameter
        super().__init__(
            f"Channel {channel}: unknown type for parameter '{parameter}'. "
            "Parameters must have a primitive type or an enum."
        )


ParameterTypeError = UnknownParameterTypeError


class TypeResolutionError(GenerationError):
    """Lookup miss on the primitive type table."""

    def __init__(self, primitive_type: object, format: str | None = None) -> None:
        self.primitive_type = primitive_type
        self.format = format
        super().__init__(
            f"Type not found in type map: type={primitive_type!r} format={format!r}"
        )


class UnresolvedPropertyTypeError(GenerationError):
    """A schema property has no type, enum or schema reference."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Can't determine the type of property {name}")
