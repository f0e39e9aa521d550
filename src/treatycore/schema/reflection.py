"""
Derive ``SchemaNode`` trees from pydantic model classes.

Field annotations map onto schema kinds; ``Optional[...]`` becomes a
nullable node, ``Literal``/``Enum`` become enum leaves and nested models
become object nodes.  Constraints declared with ``Field(ge=..., max_length=...)``
are carried across.  A model that refers back to itself produces an
``any`` node at the point of recursion.

Visibility is declared per field::

    class User(BaseModel):
        id: UUID = Field(json_schema_extra={"visibility": "response_only"})
        password: str = Field(json_schema_extra={"visibility": "request_only"})

Usage::

    from treatycore.schema.reflection import SchemaCache, schema_from_model

    cache = SchemaCache()
    node = cache.get_or_create(User)
"""

from __future__ import annotations

import datetime as dt
import enum
import logging
import threading
import types
import typing
import uuid
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any, Literal, Optional, Union

from pydantic import AnyUrl, BaseModel

from treatycore.schema.nodes import PropertySchema, SchemaNode, any_of
from treatycore.types import SchemaKind, Visibility

logger = logging.getLogger(__name__)

_DEFAULT_MAX_DEPTH = 32

_STRING_FORMATS: dict[type, str] = {
    uuid.UUID: "uuid",
    dt.datetime: "date-time",
    dt.date: "date",
    dt.time: "time",
    AnyUrl: "uri",
}


class SchemaReflectionError(TypeError):
    """Raised when an annotation has no JSON schema equivalent."""


def _is_union(origin: Any) -> bool:
    return origin is Union or origin is types.UnionType


class _Reflector:
    def __init__(self, max_depth: int) -> None:
        self._max_depth = max_depth
        self._stack: list[type] = []

    def model(self, model_cls: type[BaseModel], nullable: bool = False) -> SchemaNode:
        if model_cls in self._stack or len(self._stack) >= self._max_depth:
            logger.debug("Recursion into %s replaced with an 'any' node", model_cls.__name__)
            return SchemaNode(kind=SchemaKind.ANY, nullable=nullable)

        self._stack.append(model_cls)
        try:
            props: dict[str, PropertySchema] = {}
            required: set[str] = set()
            for attr, info in model_cls.model_fields.items():
                name = info.serialization_alias or info.alias or attr
                node = self.annotation(info.annotation)
                node = _apply_constraints(node, info.metadata)
                if info.description and node.description is None:
                    node = node.model_copy(update={"description": info.description})
                props[name] = PropertySchema(
                    name=name, node=node, visibility=_visibility_of(info.json_schema_extra)
                )
                if info.is_required():
                    required.add(name)
        finally:
            self._stack.pop()

        extra = model_cls.model_config.get("extra")
        return SchemaNode(
            kind=SchemaKind.OBJECT,
            title=model_cls.__name__,
            description=_first_line(model_cls.__doc__),
            properties=props,
            required=frozenset(required),
            additional_properties_allowed=extra != "forbid",
            nullable=nullable,
        )

    def annotation(self, annotation: Any, nullable: bool = False) -> SchemaNode:
        origin = typing.get_origin(annotation)
        args = typing.get_args(annotation)

        if origin is typing.Annotated:
            return self.annotation(args[0], nullable)

        if _is_union(origin):
            members = [a for a in args if a is not type(None)]
            nullable = nullable or len(members) < len(args)
            if len(members) == 1:
                return self.annotation(members[0], nullable)
            node = any_of(*(self.annotation(m) for m in members))
            return node.model_copy(update={"nullable": nullable})

        if origin is Literal:
            values = [a for a in args if a is not None]
            nullable = nullable or len(values) < len(args)
            return SchemaNode(
                kind=_literal_kind(values), enum_values=values, nullable=nullable
            )

        if annotation is None or annotation is type(None):
            return SchemaNode(kind=SchemaKind.NULL)
        if annotation is Any or annotation is object:
            return SchemaNode(kind=SchemaKind.ANY, nullable=nullable)

        if origin is not None:
            if isinstance(origin, type) and issubclass(origin, Mapping):
                return SchemaNode(kind=SchemaKind.OBJECT, nullable=nullable)
            if isinstance(origin, type) and issubclass(origin, (Sequence, set, frozenset)) \
                    and not issubclass(origin, (str, bytes)):
                item = args[0] if args and args[0] is not Ellipsis else Any
                return SchemaNode(
                    kind=SchemaKind.ARRAY, item_schema=self.annotation(item), nullable=nullable
                )
            raise SchemaReflectionError(f"unsupported annotation: {annotation!r}")

        if not isinstance(annotation, type):
            raise SchemaReflectionError(f"unsupported annotation: {annotation!r}")

        if issubclass(annotation, BaseModel):
            return self.model(annotation, nullable)
        if issubclass(annotation, enum.Enum):
            values = [member.value for member in annotation]
            return SchemaNode(
                kind=_literal_kind(values),
                enum_values=values,
                nullable=nullable,
                title=annotation.__name__,
            )
        return _scalar(annotation, nullable)


def _scalar(cls: type, nullable: bool) -> SchemaNode:
    if issubclass(cls, bool):
        return SchemaNode(kind=SchemaKind.BOOLEAN, nullable=nullable)
    if issubclass(cls, int):
        return SchemaNode(kind=SchemaKind.INTEGER, nullable=nullable)
    if issubclass(cls, (float, Decimal)):
        return SchemaNode(kind=SchemaKind.NUMBER, nullable=nullable)
    # datetime is a date subclass, so check it before date
    for base in (dt.datetime, dt.date, dt.time, uuid.UUID, AnyUrl):
        if issubclass(cls, base):
            return SchemaNode(kind=SchemaKind.STRING, format=_STRING_FORMATS[base], nullable=nullable)
    if issubclass(cls, (str, bytes)):
        return SchemaNode(kind=SchemaKind.STRING, nullable=nullable)
    if issubclass(cls, (list, tuple, set, frozenset)):
        return SchemaNode(kind=SchemaKind.ARRAY, nullable=nullable)
    if issubclass(cls, dict):
        return SchemaNode(kind=SchemaKind.OBJECT, nullable=nullable)
    raise SchemaReflectionError(f"unsupported field type: {cls.__name__}")


def _literal_kind(values: list[Any]) -> SchemaKind:
    if all(isinstance(v, bool) for v in values):
        return SchemaKind.BOOLEAN
    if all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        return SchemaKind.INTEGER
    if all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in values):
        return SchemaKind.NUMBER
    if all(isinstance(v, str) for v in values):
        return SchemaKind.STRING
    return SchemaKind.ANY


_CONSTRAINT_FIELDS = {
    SchemaKind.STRING: (("min_length", "min_length"), ("max_length", "max_length"), ("pattern", "pattern")),
    SchemaKind.ARRAY: (("min_length", "min_items"), ("max_length", "max_items")),
}


def _apply_constraints(node: SchemaNode, metadata: list[Any]) -> SchemaNode:
    """Copy ``annotated_types`` style constraints onto *node*."""
    if not metadata or node.composition is not None:
        return node
    update: dict[str, Any] = {}
    if node.kind in (SchemaKind.INTEGER, SchemaKind.NUMBER):
        for meta in metadata:
            if getattr(meta, "ge", None) is not None:
                update["minimum"] = meta.ge
            if getattr(meta, "gt", None) is not None:
                update.update(minimum=meta.gt, exclusive_minimum=True)
            if getattr(meta, "le", None) is not None:
                update["maximum"] = meta.le
            if getattr(meta, "lt", None) is not None:
                update.update(maximum=meta.lt, exclusive_maximum=True)
    for source, target in _CONSTRAINT_FIELDS.get(node.kind, ()):
        for meta in metadata:
            value = getattr(meta, source, None)
            if value is not None:
                update[target] = value
    if "pattern" in update and node.format is not None:
        del update["pattern"]
    if not update:
        return node
    return SchemaNode.model_validate({**node.model_dump(exclude_defaults=True), **update})


def _visibility_of(extra: Any) -> Visibility:
    if isinstance(extra, Mapping) and "visibility" in extra:
        return Visibility(extra["visibility"])
    return Visibility.ALWAYS


def _first_line(doc: Optional[str]) -> Optional[str]:
    if not doc:
        return None
    return doc.strip().splitlines()[0].strip() or None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def schema_from_model(
    model_cls: type[BaseModel],
    cache: Optional[SchemaCache] = None,
    max_depth: Optional[int] = None,
) -> SchemaNode:
    """Derive a schema node from a pydantic model class.

    Args:
        model_cls: The pydantic model to reflect.
        cache: Optional cache to consult and populate.
        max_depth: Nesting limit; defaults to ``TreatyConfig.max_reflection_depth``.

    Raises:
        SchemaReflectionError: If a field annotation has no JSON equivalent.
    """
    if cache is not None:
        return cache.get_or_create(model_cls)
    if max_depth is None:
        from treatycore.config import get_config

        max_depth = get_config().max_reflection_depth
    return _Reflector(max_depth).model(model_cls)


class SchemaCache:
    """Thread-safe memo of reflected schemas, keyed by model class.

    The cache is owned by its creator; clearing one cache never affects
    another.
    """

    def __init__(self, max_depth: int = _DEFAULT_MAX_DEPTH) -> None:
        self._max_depth = max_depth
        self._entries: dict[type, SchemaNode] = {}
        self._lock = threading.Lock()

    def get_or_create(self, model_cls: type[BaseModel]) -> SchemaNode:
        with self._lock:
            node = self._entries.get(model_cls)
            if node is None:
                node = _Reflector(self._max_depth).model(model_cls)
                self._entries[model_cls] = node
                logger.debug("Cached schema for %s", model_cls.__name__)
            return node

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, model_cls: object) -> bool:
        return model_cls in self._entries
