"""
Matcher variants: leaf rules that assert "a value of this kind" rather than
an exact literal, plus two structural wrappers (``ObjectOfMatcher`` and
``EachLikeMatcher``).

The set is closed.  ``Matcher`` is a pydantic discriminated union over the
``type`` tag, so matcher trees load from YAML/JSON contract files and every
consumer (validator, sample generator, schema conversion) dispatches over
``MATCHER_TYPES`` exhaustively.

Usage::

    from treatycore.matching.matchers import IntegerRangeMatcher

    age = IntegerRangeMatcher(min=0, max=150)
    age.description  # 'an integer between 0 and 150'
"""

from __future__ import annotations

import re
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from treatycore._json import kind_of, render, render_literal
from treatycore.types import SchemaKind


class MatcherBase(BaseModel):
    """Fields shared by every matcher variant."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    nullable: bool = Field(default=False, description="Accept JSON null as well")

    @property
    def description(self) -> str:
        return "a value"


# ---------------------------------------------------------------------------
# String-valued leaves
# ---------------------------------------------------------------------------


class GuidMatcher(MatcherBase):
    type: Literal["guid"] = "guid"

    @property
    def description(self) -> str:
        return "a valid GUID/UUID"


class AnyStringMatcher(MatcherBase):
    type: Literal["string"] = "string"

    @property
    def description(self) -> str:
        return "any string"


class NonEmptyStringMatcher(MatcherBase):
    type: Literal["non_empty_string"] = "non_empty_string"

    @property
    def description(self) -> str:
        return "a non-empty string"


class EmailMatcher(MatcherBase):
    type: Literal["email"] = "email"

    @property
    def description(self) -> str:
        return "a valid email address"


class UriMatcher(MatcherBase):
    type: Literal["uri"] = "uri"

    @property
    def description(self) -> str:
        return "a valid URI"


class RegexMatcher(MatcherBase):
    """String matching *pattern*.  *example* must match and is the sample."""

    type: Literal["regex"] = "regex"
    pattern: str
    example: str

    @model_validator(mode="after")
    def _check_example(self) -> RegexMatcher:
        try:
            compiled = re.compile(self.pattern)
        except re.error as exc:
            raise ValueError(f"invalid pattern '{self.pattern}': {exc}") from exc
        if compiled.search(self.example) is None:
            raise ValueError(
                f"example '{self.example}' does not match pattern '{self.pattern}'"
            )
        return self

    @property
    def description(self) -> str:
        return f"a string matching pattern '{self.pattern}'"


class DateTimeMatcher(MatcherBase):
    type: Literal["date_time"] = "date_time"

    @property
    def description(self) -> str:
        return "a valid ISO 8601 date-time"


class DateOnlyMatcher(MatcherBase):
    type: Literal["date"] = "date"

    @property
    def description(self) -> str:
        return "a valid ISO 8601 date (YYYY-MM-DD)"


class TimeOnlyMatcher(MatcherBase):
    type: Literal["time"] = "time"

    @property
    def description(self) -> str:
        return "a valid ISO 8601 time (HH:mm:ss)"


# ---------------------------------------------------------------------------
# Numeric and boolean leaves
# ---------------------------------------------------------------------------


def _range_description(noun: str, low: Any, high: Any) -> str:
    if low is not None and high is not None:
        return f"{noun} between {render(low)} and {render(high)}"
    if low is not None:
        return f"{noun} >= {render(low)}"
    if high is not None:
        return f"{noun} <= {render(high)}"
    return noun


class IntegerRangeMatcher(MatcherBase):
    type: Literal["integer"] = "integer"
    min: Optional[int] = None
    max: Optional[int] = None

    @model_validator(mode="after")
    def _check_bounds(self) -> IntegerRangeMatcher:
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"min ({self.min}) must not exceed max ({self.max})")
        return self

    @property
    def description(self) -> str:
        return _range_description("an integer", self.min, self.max)


class DecimalRangeMatcher(MatcherBase):
    type: Literal["decimal"] = "decimal"
    min: Optional[float] = None
    max: Optional[float] = None

    @model_validator(mode="after")
    def _check_bounds(self) -> DecimalRangeMatcher:
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"min ({self.min}) must not exceed max ({self.max})")
        return self

    @property
    def description(self) -> str:
        return _range_description("a number", self.min, self.max)


class BooleanMatcher(MatcherBase):
    type: Literal["boolean"] = "boolean"

    @property
    def description(self) -> str:
        return "a boolean (true or false)"


# ---------------------------------------------------------------------------
# Value-set and wildcard leaves
# ---------------------------------------------------------------------------


class OneOfMatcher(MatcherBase):
    type: Literal["one_of"] = "one_of"
    values: list[Any] = Field(..., min_length=1)

    @property
    def description(self) -> str:
        return "one of: " + ", ".join(render_literal(v) for v in self.values)


class NullOnlyMatcher(MatcherBase):
    type: Literal["null"] = "null"

    @property
    def description(self) -> str:
        return "null"


class AnyValueMatcher(MatcherBase):
    type: Literal["any"] = "any"

    @property
    def description(self) -> str:
        return "any value"


class TypeMatcher(MatcherBase):
    """Matches by JSON kind only; the example is the generated sample."""

    type: Literal["type"] = "type"
    json_kind: SchemaKind
    example: Any

    @model_validator(mode="after")
    def _check_example(self) -> TypeMatcher:
        if self.json_kind in (SchemaKind.NULL, SchemaKind.ANY):
            raise ValueError("type matchers need a concrete JSON kind")
        if self.example is None:
            raise ValueError("type matchers need a non-null example")
        return self

    @property
    def description(self) -> str:
        return f"a value of type {self.json_kind.value}"


class EqualsMatcher(MatcherBase):
    """Literal equality, produced for plain scalars in example literals."""

    type: Literal["equals"] = "equals"
    value: Any

    @model_validator(mode="after")
    def _check_value(self) -> EqualsMatcher:
        if self.value is None or isinstance(self.value, (dict, list)):
            raise ValueError("equals matchers hold a non-null scalar; use object/each_like/null")
        return self

    @property
    def description(self) -> str:
        return f"the value {render_literal(self.value)}"

    @property
    def json_kind(self) -> str:
        return kind_of(self.value)


# ---------------------------------------------------------------------------
# Structural wrappers
# ---------------------------------------------------------------------------


class ObjectOfMatcher(MatcherBase):
    """Object whose declared properties are all required."""

    type: Literal["object"] = "object"
    properties: dict[str, Matcher] = Field(default_factory=dict)

    @property
    def description(self) -> str:
        return "an object matching the schema"


class EachLikeMatcher(MatcherBase):
    """Array whose every element matches *item*, with at least *min_count* elements."""

    type: Literal["each_like"] = "each_like"
    item: Matcher
    min_count: int = Field(default=1, ge=0)

    @property
    def description(self) -> str:
        return f"an array with at least {self.min_count} item(s) like the example"


Matcher = Annotated[
    Union[
        GuidMatcher,
        AnyStringMatcher,
        NonEmptyStringMatcher,
        EmailMatcher,
        UriMatcher,
        RegexMatcher,
        IntegerRangeMatcher,
        DecimalRangeMatcher,
        BooleanMatcher,
        DateTimeMatcher,
        DateOnlyMatcher,
        TimeOnlyMatcher,
        OneOfMatcher,
        NullOnlyMatcher,
        AnyValueMatcher,
        TypeMatcher,
        EqualsMatcher,
        ObjectOfMatcher,
        EachLikeMatcher,
    ],
    Field(discriminator="type"),
]

# Every variant, for exhaustive dispatch tables.
MATCHER_TYPES: tuple[type[MatcherBase], ...] = (
    GuidMatcher,
    AnyStringMatcher,
    NonEmptyStringMatcher,
    EmailMatcher,
    UriMatcher,
    RegexMatcher,
    IntegerRangeMatcher,
    DecimalRangeMatcher,
    BooleanMatcher,
    DateTimeMatcher,
    DateOnlyMatcher,
    TimeOnlyMatcher,
    OneOfMatcher,
    NullOnlyMatcher,
    AnyValueMatcher,
    TypeMatcher,
    EqualsMatcher,
    ObjectOfMatcher,
    EachLikeMatcher,
)

ObjectOfMatcher.model_rebuild()
EachLikeMatcher.model_rebuild()


def is_matcher(value: Any) -> bool:
    return isinstance(value, MatcherBase)
