"""
Version spec matching for nodepin.
"""

from .version import (
    AliasSpec,
    ComparisonSpec,
    ExactSpec,
    MatchResult,
    ParsedVersion,
    PartialSpec,
    RangeKind,
    RangeSpec,
    VersionMatcher,
    VersionSpec,
    compare_versions,
    evaluate_match,
    parse_spec,
    parse_version,
)

__all__ = [
    "AliasSpec",
    "ComparisonSpec",
    "ExactSpec",
    "MatchResult",
    "ParsedVersion",
    "PartialSpec",
    "RangeKind",
    "RangeSpec",
    "VersionMatcher",
    "VersionSpec",
    "compare_versions",
    "evaluate_match",
    "parse_spec",
    "parse_version",
]
