"""
Schema node models: immutable trees describing an expected JSON shape.

A ``SchemaNode`` is exactly one of:

- a **leaf** (string/number/integer/boolean/null/any, optionally carrying
  format, pattern, range, length, enum or const constraints),
- a **container** (object with properties, or array with an item schema),
- a **composition** (oneOf/anyOf/allOf over branch nodes).

Nodes are direction-agnostic.  Per-property ``Visibility`` records whether a
field is write-only (request side) or read-only (response side); only the
caller knows which direction is being validated.

Usage::

    from treatycore.schema.nodes import (
        integer_schema,
        object_schema,
        string_schema,
    )

    user = object_schema(
        {
            "id": integer_schema(minimum=1),
            "email": string_schema(format="email"),
            "password": string_schema(min_length=8),
        },
        required=["id", "email"],
        write_only=["password"],
    )
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from treatycore.types import (
    CompositionMode,
    SchemaKind,
    ValidationDirection,
    Visibility,
)

_LEAF_KINDS = frozenset({
    SchemaKind.STRING,
    SchemaKind.INTEGER,
    SchemaKind.NUMBER,
    SchemaKind.BOOLEAN,
    SchemaKind.NULL,
    SchemaKind.ANY,
})

_NUMERIC_KINDS = frozenset({SchemaKind.INTEGER, SchemaKind.NUMBER})


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class Discriminator(BaseModel):
    """Selects a single composition branch from a property value."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    property_name: str = Field(..., min_length=1)
    mapping: dict[str, str] = Field(
        default_factory=dict,
        description=(
            "Discriminator value -> branch title or "
            "'#/components/schemas/<Name>' reference"
        ),
    )

    def target_for(self, value: str) -> str:
        """Return the branch name a discriminator value points at."""
        target = self.mapping.get(value)
        if target is None:
            return value
        return target.rsplit("/", 1)[-1]


class Composition(BaseModel):
    """oneOf / anyOf / allOf over a list of branch schemas."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    mode: CompositionMode
    branches: list[SchemaNode] = Field(..., min_length=1)
    discriminator: Optional[Discriminator] = None

    @model_validator(mode="after")
    def _check_discriminator(self) -> Composition:
        if self.discriminator is not None and self.mode == CompositionMode.ALL_OF:
            raise ValueError("discriminator is only meaningful for oneOf/anyOf")
        return self

    def branch_for(self, discriminator_value: str) -> Optional[SchemaNode]:
        """Resolve the branch selected by a discriminator value, if any.

        Branch names are matched case-insensitively against branch titles.
        """
        if self.discriminator is None:
            return None
        target = self.discriminator.target_for(discriminator_value).lower()
        for branch in self.branches:
            if branch.title is not None and branch.title.lower() == target:
                return branch
        return None

    def discriminator_values(self) -> list[str]:
        """Values accepted by the discriminator, for error reporting."""
        if self.discriminator is not None and self.discriminator.mapping:
            return list(self.discriminator.mapping)
        return [b.title for b in self.branches if b.title is not None]


class PropertySchema(BaseModel):
    """A named object property with its schema and directional visibility."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    node: SchemaNode
    visibility: Visibility = Visibility.ALWAYS

    def visible_in(self, direction: ValidationDirection) -> bool:
        """Whether the property may appear in a payload of *direction*."""
        if self.visibility == Visibility.REQUEST_ONLY:
            return direction == ValidationDirection.REQUEST
        if self.visibility == Visibility.RESPONSE_ONLY:
            return direction == ValidationDirection.RESPONSE
        return True


class SchemaNode(BaseModel):
    """One expected JSON shape.  Immutable once built."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: SchemaKind = SchemaKind.ANY
    nullable: bool = False
    title: Optional[str] = None
    description: Optional[str] = None

    # Object
    properties: dict[str, PropertySchema] = Field(default_factory=dict)
    required: frozenset[str] = Field(default_factory=frozenset)
    additional_properties_allowed: bool = True

    # Array
    item_schema: Optional[SchemaNode] = None
    min_items: Optional[int] = Field(default=None, ge=0)
    max_items: Optional[int] = Field(default=None, ge=0)

    # String
    format: Optional[str] = None
    pattern: Optional[str] = None
    min_length: Optional[int] = Field(default=None, ge=0)
    max_length: Optional[int] = Field(default=None, ge=0)

    # Numeric
    minimum: Optional[Union[int, float]] = None
    maximum: Optional[Union[int, float]] = None
    exclusive_minimum: bool = False
    exclusive_maximum: bool = False

    # Literal constraints
    enum_values: Optional[list[Any]] = None
    const_value: Any = None

    example: Any = None
    composition: Optional[Composition] = None

    @model_validator(mode="before")
    @classmethod
    def _name_properties(cls, data: Any) -> Any:
        """Fill in ``PropertySchema.name`` from the mapping key when omitted."""
        if not isinstance(data, dict):
            return data
        props = data.get("properties")
        if isinstance(props, Mapping):
            named = {}
            for key, value in props.items():
                if isinstance(value, dict) and "name" not in value:
                    value = {**value, "name": key}
                named[key] = value
            data = {**data, "properties": named}
        return data

    @model_validator(mode="after")
    def _check_shape(self) -> SchemaNode:
        if self.composition is not None:
            if self.kind != SchemaKind.ANY:
                raise ValueError("composition nodes must have kind 'any'")
            if self._has_container_shape() or self._has_leaf_constraints():
                raise ValueError(
                    "a composition node cannot also declare properties, "
                    "items or leaf constraints"
                )
            return self

        for key, prop in self.properties.items():
            if prop.name != key:
                raise ValueError(
                    f"property key '{key}' does not match property name '{prop.name}'"
                )
        unknown = self.required - set(self.properties)
        if unknown:
            raise ValueError(f"required names not declared as properties: {sorted(unknown)}")

        if self.kind != SchemaKind.OBJECT and (
            self.properties or self.required or not self.additional_properties_allowed
        ):
            raise ValueError("properties/required are only valid on object nodes")
        if self.kind != SchemaKind.ARRAY and (
            self.item_schema is not None
            or self.min_items is not None
            or self.max_items is not None
        ):
            raise ValueError("item_schema/min_items/max_items are only valid on array nodes")
        if self.kind != SchemaKind.STRING and (
            self.format is not None
            or self.pattern is not None
            or self.min_length is not None
            or self.max_length is not None
        ):
            raise ValueError("format/pattern/length constraints are only valid on string nodes")
        if self.kind not in _NUMERIC_KINDS and (
            self.minimum is not None or self.maximum is not None
        ):
            raise ValueError("minimum/maximum are only valid on integer/number nodes")
        if self.kind not in _LEAF_KINDS and (
            self.enum_values is not None or self.const_value is not None
        ):
            raise ValueError("enum/const constraints are only valid on leaf nodes")

        if self.format is not None and self.pattern is not None:
            raise ValueError("a string node declares either a format or a pattern, not both")
        if self.enum_values is not None and not self.enum_values:
            raise ValueError("enum_values must not be empty")
        _check_bounds("items", self.min_items, self.max_items)
        _check_bounds("length", self.min_length, self.max_length)
        _check_bounds("range", self.minimum, self.maximum)
        return self

    def _has_container_shape(self) -> bool:
        return bool(self.properties or self.required or self.item_schema is not None)

    def _has_leaf_constraints(self) -> bool:
        return any(
            v is not None
            for v in (
                self.format,
                self.pattern,
                self.min_length,
                self.max_length,
                self.minimum,
                self.maximum,
                self.enum_values,
                self.const_value,
                self.min_items,
                self.max_items,
            )
        )

    # -- convenience -------------------------------------------------------

    @property
    def is_composition(self) -> bool:
        return self.composition is not None

    @property
    def is_container(self) -> bool:
        return self.composition is None and self.kind in (SchemaKind.OBJECT, SchemaKind.ARRAY)

    @property
    def is_leaf(self) -> bool:
        return self.composition is None and self.kind in _LEAF_KINDS

    def visible_properties(self, direction: ValidationDirection) -> dict[str, PropertySchema]:
        """Properties that may appear in a payload of *direction*, in order."""
        return {
            name: prop
            for name, prop in self.properties.items()
            if prop.visible_in(direction)
        }

    def is_required(self, name: str) -> bool:
        return name in self.required


def _check_bounds(label: str, low: Any, high: Any) -> None:
    if low is not None and high is not None and low > high:
        raise ValueError(f"invalid {label} bounds: {low} > {high}")


Composition.model_rebuild()
PropertySchema.model_rebuild()
SchemaNode.model_rebuild()


# ---------------------------------------------------------------------------
# Factory helpers
# ---------------------------------------------------------------------------


def object_schema(
    properties: Mapping[str, SchemaNode],
    required: Iterable[str] = (),
    *,
    read_only: Iterable[str] = (),
    write_only: Iterable[str] = (),
    additional_properties_allowed: bool = True,
    nullable: bool = False,
    title: Optional[str] = None,
) -> SchemaNode:
    """Build an object node from a name -> node mapping.

    ``read_only`` names only appear in responses, ``write_only`` names only
    in requests.
    """
    read_only = set(read_only)
    write_only = set(write_only)
    overlap = read_only & write_only
    if overlap:
        raise ValueError(f"properties cannot be both read-only and write-only: {sorted(overlap)}")

    props: dict[str, PropertySchema] = {}
    for name, node in properties.items():
        visibility = Visibility.ALWAYS
        if name in read_only:
            visibility = Visibility.RESPONSE_ONLY
        elif name in write_only:
            visibility = Visibility.REQUEST_ONLY
        props[name] = PropertySchema(name=name, node=node, visibility=visibility)

    return SchemaNode(
        kind=SchemaKind.OBJECT,
        properties=props,
        required=frozenset(required),
        additional_properties_allowed=additional_properties_allowed,
        nullable=nullable,
        title=title,
    )


def array_schema(
    items: Optional[SchemaNode] = None,
    *,
    min_items: Optional[int] = None,
    max_items: Optional[int] = None,
    nullable: bool = False,
) -> SchemaNode:
    return SchemaNode(
        kind=SchemaKind.ARRAY,
        item_schema=items,
        min_items=min_items,
        max_items=max_items,
        nullable=nullable,
    )


def string_schema(
    *,
    format: Optional[str] = None,
    pattern: Optional[str] = None,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
    enum: Optional[Iterable[str]] = None,
    const: Optional[str] = None,
    nullable: bool = False,
    example: Optional[str] = None,
) -> SchemaNode:
    return SchemaNode(
        kind=SchemaKind.STRING,
        format=format,
        pattern=pattern,
        min_length=min_length,
        max_length=max_length,
        enum_values=list(enum) if enum is not None else None,
        const_value=const,
        nullable=nullable,
        example=example,
    )


def integer_schema(
    *,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
    exclusive_minimum: bool = False,
    exclusive_maximum: bool = False,
    enum: Optional[Iterable[int]] = None,
    nullable: bool = False,
) -> SchemaNode:
    return SchemaNode(
        kind=SchemaKind.INTEGER,
        minimum=minimum,
        maximum=maximum,
        exclusive_minimum=exclusive_minimum,
        exclusive_maximum=exclusive_maximum,
        enum_values=list(enum) if enum is not None else None,
        nullable=nullable,
    )


def number_schema(
    *,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
    exclusive_minimum: bool = False,
    exclusive_maximum: bool = False,
    enum: Optional[Iterable[float]] = None,
    nullable: bool = False,
) -> SchemaNode:
    return SchemaNode(
        kind=SchemaKind.NUMBER,
        minimum=minimum,
        maximum=maximum,
        exclusive_minimum=exclusive_minimum,
        exclusive_maximum=exclusive_maximum,
        enum_values=list(enum) if enum is not None else None,
        nullable=nullable,
    )


def boolean_schema(*, nullable: bool = False) -> SchemaNode:
    return SchemaNode(kind=SchemaKind.BOOLEAN, nullable=nullable)


def null_schema() -> SchemaNode:
    return SchemaNode(kind=SchemaKind.NULL)


def any_schema() -> SchemaNode:
    return SchemaNode(kind=SchemaKind.ANY)


def one_of(
    *branches: SchemaNode,
    discriminator: Optional[str] = None,
    mapping: Optional[Mapping[str, str]] = None,
) -> SchemaNode:
    """Exactly one branch must match.

    With *discriminator*, the branch is picked from that property's value
    (via *mapping*, or by branch title).
    """
    disc = None
    if discriminator is not None:
        disc = Discriminator(property_name=discriminator, mapping=dict(mapping or {}))
    return SchemaNode(
        composition=Composition(
            mode=CompositionMode.ONE_OF, branches=list(branches), discriminator=disc
        )
    )


def any_of(*branches: SchemaNode) -> SchemaNode:
    return SchemaNode(
        composition=Composition(mode=CompositionMode.ANY_OF, branches=list(branches))
    )


def all_of(*branches: SchemaNode) -> SchemaNode:
    return SchemaNode(
        composition=Composition(mode=CompositionMode.ALL_OF, branches=list(branches))
    )


def titled(node: SchemaNode, title: str) -> SchemaNode:
    """Copy of *node* with a title, for implicit discriminator mapping."""
    return node.model_copy(update={"title": title})
