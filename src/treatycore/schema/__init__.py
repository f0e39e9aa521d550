"""
Schema node trees and model reflection.

Public API::

    from treatycore.schema import (
        # Models
        SchemaNode,
        PropertySchema,
        Composition,
        Discriminator,
        # Factories
        object_schema,
        array_schema,
        string_schema,
        integer_schema,
        number_schema,
        boolean_schema,
        null_schema,
        any_schema,
        one_of,
        any_of,
        all_of,
        titled,
        # Reflection
        schema_from_model,
        SchemaCache,
        SchemaReflectionError,
    )
"""

from treatycore.schema.nodes import (
    Composition,
    Discriminator,
    PropertySchema,
    SchemaNode,
    all_of,
    any_of,
    any_schema,
    array_schema,
    boolean_schema,
    integer_schema,
    null_schema,
    number_schema,
    object_schema,
    one_of,
    string_schema,
    titled,
)
from treatycore.schema.reflection import (
    SchemaCache,
    SchemaReflectionError,
    schema_from_model,
)

__all__ = [
    # Models
    "SchemaNode",
    "PropertySchema",
    "Composition",
    "Discriminator",
    # Factories
    "object_schema",
    "array_schema",
    "string_schema",
    "integer_schema",
    "number_schema",
    "boolean_schema",
    "null_schema",
    "any_schema",
    "one_of",
    "any_of",
    "all_of",
    "titled",
    # Reflection
    "schema_from_model",
    "SchemaCache",
    "SchemaReflectionError",
]
