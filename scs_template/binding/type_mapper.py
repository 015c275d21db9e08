"""Primitive schema type to Java type lookup.

Two-level table: primitive type, then format within that type.  The ``None``
key of each inner table is the type's default entry, used when the format is
absent or not recognised.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from scs_template.shared.errors import TypeResolutionError
from scs_template.shared.models.functions import TypeDescriptor

_STRING_TYPES: Mapping[str | None, TypeDescriptor] = MappingProxyType({
    "date": TypeDescriptor("java.time.LocalDate", "%s", "2000-12-31"),
    "date-time": TypeDescriptor(
        "java.time.OffsetDateTime", "%s", "2000-12-31T23:59:59+01:00"
    ),
    "byte": TypeDescriptor("byte[]", "%s", "U3dhZ2dlciByb2Nrcw=="),
    "binary": TypeDescriptor("byte[]", "%s", "base64-encoded file contents"),
    None: TypeDescriptor("String", "%s", '"string"'),
})

_INTEGER_TYPES: Mapping[str | None, TypeDescriptor] = MappingProxyType({
    "int32": TypeDescriptor("Integer", "%d", "1"),
    "int64": TypeDescriptor("Long", "%d", "1L"),
    None: TypeDescriptor("Integer", "%d", "1"),
})

_NUMBER_TYPES: Mapping[str | None, TypeDescriptor] = MappingProxyType({
    "float": TypeDescriptor("Float", "%f", "1.1F"),
    "double": TypeDescriptor("Double", "%f", "1.1"),
    None: TypeDescriptor("java.math.BigDecimal", "%s", "100.1"),
})

_BOOLEAN_TYPES: Mapping[str | None, TypeDescriptor] = MappingProxyType({
    None: TypeDescriptor("Boolean", "%s", "true"),
})

_NULL_TYPES: Mapping[str | None, TypeDescriptor] = MappingProxyType({
    None: TypeDescriptor("String", "%s", "null"),
})

TYPE_MAP: Mapping[str, Mapping[str | None, TypeDescriptor]] = MappingProxyType({
    "boolean": _BOOLEAN_TYPES,
    "integer": _INTEGER_TYPES,
    "null": _NULL_TYPES,
    "number": _NUMBER_TYPES,
    "string": _STRING_TYPES,
})


def is_primitive(type_name: str | None) -> bool:
    return type_name in TYPE_MAP


def resolve_type(primitive_type: str | None, format: str | None = None) -> TypeDescriptor:
    """Return the :class:`TypeDescriptor` for a primitive type and format.

    Args:
        primitive_type: One of ``string``, ``integer``, ``number``,
            ``boolean`` or ``null``.
        format: Optional format qualifier; unknown formats fall back to the
            type's default entry.

    Raises:
        TypeResolutionError: If *primitive_type* is not a recognised
            primitive.
    """
    formats = TYPE_MAP.get(primitive_type) if primitive_type is not None else None
    if formats is None:
        raise TypeResolutionError(primitive_type, format)
    descriptor = formats.get(format)
    if descriptor is None:
        descriptor = formats[None]
    return descriptor
