"""
Matchers: "a value of this kind" rules for example-based contracts.

Public API::

    from treatycore.matching import (
        Match,
        Matcher,
        MatcherBase,
        MATCHER_TYPES,
        build_matcher_tree,
        matcher_to_schema,
        is_matcher,
    )
"""

from treatycore.matching.match import Match, build_matcher_tree, matcher_to_schema
from treatycore.matching.matchers import (
    MATCHER_TYPES,
    AnyStringMatcher,
    AnyValueMatcher,
    BooleanMatcher,
    DateOnlyMatcher,
    DateTimeMatcher,
    DecimalRangeMatcher,
    EachLikeMatcher,
    EmailMatcher,
    EqualsMatcher,
    GuidMatcher,
    IntegerRangeMatcher,
    Matcher,
    MatcherBase,
    NonEmptyStringMatcher,
    NullOnlyMatcher,
    ObjectOfMatcher,
    OneOfMatcher,
    RegexMatcher,
    TimeOnlyMatcher,
    TypeMatcher,
    UriMatcher,
    is_matcher,
)

__all__ = [
    "Match",
    "Matcher",
    "MatcherBase",
    "MATCHER_TYPES",
    "build_matcher_tree",
    "matcher_to_schema",
    "is_matcher",
    # Variants
    "GuidMatcher",
    "AnyStringMatcher",
    "NonEmptyStringMatcher",
    "EmailMatcher",
    "UriMatcher",
    "RegexMatcher",
    "IntegerRangeMatcher",
    "DecimalRangeMatcher",
    "BooleanMatcher",
    "DateTimeMatcher",
    "DateOnlyMatcher",
    "TimeOnlyMatcher",
    "OneOfMatcher",
    "NullOnlyMatcher",
    "AnyValueMatcher",
    "TypeMatcher",
    "EqualsMatcher",
    "ObjectOfMatcher",
    "EachLikeMatcher",
]
