"""Schema naming: Java class names, superclasses and property-name checks.

The derived maps are memoised in a :class:`SchemaNameCache`.  The cache is
owned by the caller and must be cleared with :meth:`SchemaNameCache.reset`
between generation runs, otherwise associations from one document leak
into the next.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from scs_template.binding.naming import class_name, identifier_name, upper_first
from scs_template.binding.type_mapper import is_primitive, resolve_type
from scs_template.shared.errors import MissingItemsTypeError, UnresolvedPropertyTypeError
from scs_template.shared.models.asyncapi import AsyncAPIDocument, Schema

logger = logging.getLogger(__name__)

X_MODEL_CLASS_NAME = "x-model-class-name"


@dataclass
class ModelInfo:
    """What the model-class renderer needs to know about one component schema."""

    schema_name: str
    class_name: str
    super_class_name: str | None = None
    needs_json_property: bool = False

    @property
    def is_sub_class(self) -> bool:
        return self.super_class_name is not None


def _schema_class_name(schema: Schema) -> str | None:
    override = schema.extensions.get(X_MODEL_CLASS_NAME)
    if override:
        return str(override)
    if schema.is_anonymous:
        return None
    # Names taken from $id may still carry a path.
    return class_name(str(schema.name).rsplit("/", 1)[-1])


def property_names_diverge(
    name: str,
    schema: Schema,
    visited: set[int] | None = None,
) -> bool:
    """Return True if any nested property's Java name differs from its JSON name.

    Recurses into object properties and object array items.  *visited*
    holds the identities of schemas already on the path; a revisit means no
    further divergence.

    Raises:
        MissingItemsTypeError: If an array schema has no ``items``.
    """
    if visited is None:
        visited = set()
    if id(schema) in visited:
        return False
    visited.add(id(schema))

    properties = schema.properties
    if schema.type == "array":
        if schema.items is None:
            raise MissingItemsTypeError(name)
        properties = schema.items.properties

    for prop_name, prop in properties.items():
        if identifier_name(prop_name) != prop_name:
            return True
        if prop.type == "object":
            if property_names_diverge(prop_name, prop, visited):
                return True
        elif prop.type == "array":
            if prop.items is None:
                raise MissingItemsTypeError(prop_name)
            if prop.items.type == "object" and property_names_diverge(
                prop_name, prop.items, visited
            ):
                return True
    return False


class SchemaNameCache:
    """Memoised schema-naming state for a single generation run.

    Holds the superclass map derived from ``allOf`` component schemas, the
    anonymous-part to subclass map, and per-schema class names and
    property-name divergence results.  :meth:`reset` clears everything and
    may be called any number of times.
    """

    def __init__(self) -> None:
        self._document: AsyncAPIDocument | None = None
        self._super_classes: dict[str, str] = {}
        self._anonymous_to_subclass: dict[Schema, str] = {}
        self._class_names: dict[Schema, str | None] = {}
        self._divergence: dict[Schema, bool] = {}

    def reset(self) -> None:
        """Drop every memoised association."""
        self._document = None
        self._super_classes.clear()
        self._anonymous_to_subclass.clear()
        self._class_names.clear()
        self._divergence.clear()

    @property
    def is_empty(self) -> bool:
        return (
            self._document is None
            and not self._class_names
            and not self._divergence
        )

    # ------------------------------------------------------------------
    # superclass map
    # ------------------------------------------------------------------

    def load(self, document: AsyncAPIDocument) -> None:
        """Build the superclass maps for *document* unless already built."""
        if self._document is document:
            return
        if self._document is not None:
            logger.debug("Schema name cache switched documents; rebuilding maps.")
            self.reset()
        self._document = document

        for schema_name, schema in document.schemas.items():
            if not schema.all_of:
                continue
            named = [part for part in schema.all_of if not part.is_anonymous]
            anonymous = [part for part in schema.all_of if part.is_anonymous]
            if not named or not anonymous:
                logger.warning(
                    "Schema %s: allOf needs one named and one anonymous schema; "
                    "no superclass recorded.",
                    schema_name,
                )
                continue
            self._super_classes[schema_name] = str(named[-1].name)
            self._anonymous_to_subclass[anonymous[-1]] = schema_name

        logger.debug("Superclass map: %s", self._super_classes)

    def super_class_name(self, document: AsyncAPIDocument, schema_name: str) -> str | None:
        """Java class name of *schema_name*'s superclass, if it has one."""
        self.load(document)
        parent = self._super_classes.get(schema_name)
        if parent is None:
            return None
        return class_name(parent)

    def subclass_of(self, document: AsyncAPIDocument, schema: Schema) -> str | None:
        """Component name of the schema whose anonymous ``allOf`` part is *schema*."""
        self.load(document)
        return self._anonymous_to_subclass.get(schema)

    # ------------------------------------------------------------------
    # memoised lookups
    # ------------------------------------------------------------------

    def class_name(
        self,
        schema: Schema,
        document: AsyncAPIDocument | None = None,
    ) -> str | None:
        """Java class name for *schema*, ``None`` for an unmapped anonymous schema."""
        if document is not None:
            self.load(document)
        if schema in self._class_names:
            return self._class_names[schema]
        name = _schema_class_name(schema)
        if name is None and schema in self._anonymous_to_subclass:
            name = class_name(self._anonymous_to_subclass[schema])
        self._class_names[schema] = name
        return name

    def property_names_diverge(self, name: str, schema: Schema) -> bool:
        if schema not in self._divergence:
            self._divergence[schema] = property_names_diverge(name, schema)
        return self._divergence[schema]


def resolve_property_type(name: str, java_name: str, schema: Schema) -> tuple[str, bool]:
    """Return ``(java_type, is_array_of_objects)`` for a schema property.

    Args:
        name: The property's JSON name (used in error messages).
        java_name: The property's Java identifier; inline objects and enums
            are rendered as inner classes named after it.
        schema: The property schema.

    Raises:
        MissingItemsTypeError: For an array without ``items``.
        UnresolvedPropertyTypeError: When no type, enum or schema reference
            identifies the property's type.
    """
    if schema.type is None:
        if schema.enum:
            return upper_first(java_name), False
        named = _schema_class_name(schema)
        if named is None:
            raise UnresolvedPropertyTypeError(name)
        return named, False

    if schema.type == "array":
        items = schema.items
        if items is None:
            raise MissingItemsTypeError(name)
        is_array_of_objects = False
        if items.type == "object" and items.is_anonymous:
            is_array_of_objects = True
            items_type = upper_first(java_name)
        elif is_primitive(items.type):
            items_type = resolve_type(items.type, items.format).type_name
        else:
            items_type = _schema_class_name(items)
            if items_type is None:
                raise UnresolvedPropertyTypeError(name)
        return f"{upper_first(items_type)}[]", is_array_of_objects

    if schema.type == "object":
        return _schema_class_name(schema) or upper_first(java_name), False

    if schema.enum:
        return upper_first(java_name), False

    if is_primitive(schema.type):
        return resolve_type(schema.type, schema.format).type_name, False
    return schema.type, False


def describe_models(document: AsyncAPIDocument, cache: SchemaNameCache) -> list[ModelInfo]:
    """Describe every component schema of *document* for model-class rendering."""
    models: list[ModelInfo] = []
    for schema_name, schema in document.schemas.items():
        models.append(
            ModelInfo(
                schema_name=schema_name,
                class_name=cache.class_name(schema, document) or class_name(schema_name),
                super_class_name=cache.super_class_name(document, schema_name),
                needs_json_property=cache.property_names_diverge(schema_name, schema),
            )
        )
    logger.debug("Described %d model classes.", len(models))
    return models
