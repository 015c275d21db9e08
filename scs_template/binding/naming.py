"""Identifier and class-name normalisation for generated Java code."""
from __future__ import annotations

import re

_WORD_PATTERN = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")

JAVA_KEYWORDS: frozenset[str] = frozenset({
    "abstract", "assert", "boolean", "break", "byte", "case", "catch",
    "char", "class", "const", "continue", "default", "do", "double", "else",
    "enum", "extends", "final", "finally", "float", "for", "goto", "if",
    "implements", "import", "instanceof", "int", "interface", "long",
    "native", "new", "package", "private", "protected", "public", "return",
    "short", "static", "strictfp", "super", "switch", "synchronized", "this",
    "throw", "throws", "transient", "try", "void", "volatile", "while",
})


def split_words(name: str) -> list[str]:
    """Split *name* into words on case changes and non-alphanumerics.

    Examples::

        "orders/{id}/status" -> ["orders", "id", "status"]
        "XMLHttpRequest"     -> ["XML", "Http", "Request"]
        "order_item-v2"      -> ["order", "item", "v", "2"]
    """
    return _WORD_PATTERN.findall(name or "")


def camel_case(name: str) -> str:
    """Convert *name* to camelCase.

    Examples::

        "orders/{id}/status" -> "ordersIdStatus"
        "Test Queue"         -> "testQueue"
        "testQueue"          -> "testQueue"
    """
    words = [w.lower() for w in split_words(name)]
    if not words:
        return ""
    return words[0] + "".join(w[0].upper() + w[1:] for w in words[1:])


def upper_first(name: str) -> str:
    return name[:1].upper() + name[1:]


def lower_first(name: str) -> str:
    return name[:1].lower() + name[1:]


def pascal_case(name: str) -> str:
    """Convert *name* to PascalCase (camel case with a capital first letter)."""
    return upper_first(camel_case(name))


def strip_package_name(name: str) -> str:
    """Drop an Avro-style namespace: ``com.acme.Order`` -> ``Order``."""
    return name.rsplit(".", 1)[-1]


def class_name(name: str) -> str:
    """Return a valid Java class name for a schema or message name."""
    return pascal_case(strip_package_name(name))


def identifier_name(name: str) -> str:
    """Return a valid Java identifier, escaping reserved words with ``_``."""
    ident = camel_case(name)
    if ident in JAVA_KEYWORDS:
        ident = f"_{ident}"
    return ident
