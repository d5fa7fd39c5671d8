"""
Version spec parsing and matching.

A required version spec is interpreted by the first rule that applies:

1. alias tokens (``lts``, ``stable``, ``latest``, ``node``, ``lts/<name>``)
2. comparison: ``>=18.0.0``, ``<=``, ``>``, ``<``, ``=``
3. compatible range: ``^18.17.0`` (same major, not older)
4. patch range: ``~18.17.0`` (same major and minor, not older patch)
5. partial pin: ``18`` or ``18.17`` (missing components are wildcards)
6. anything else is an exact version

Aliases never match: resolving them needs release data this module does not
have. A partial pin reports the pin itself as the target version, not the
installed version it matched, so a manager can pick its own newest install
for that line.

Usage:
    from nodepin.matching.version import evaluate_match

    result = evaluate_match("18.18.0", "^18.17.0")
    assert result.matches and result.target_version == "18.18.0"
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple, Union

from ..core.cache import Cache, CacheNamespace
from ..core.exceptions import InvalidVersionSpecError
from ..core.settings import Settings

logger = logging.getLogger(__name__)

ALIASES = ("lts", "stable", "latest", "node")

# Two-character operators must be tried before their one-character prefixes.
COMPARISON_OPERATORS = (">=", "<=", ">", "<", "=")

_LEADING_DIGITS = re.compile(r"\d+")


# =============================================================================
# Parsed versions
# =============================================================================


@dataclass(frozen=True, order=True)
class ParsedVersion:
    """
    Numeric (major, minor, patch) triple.

    Instances order lexicographically by major, then minor, then patch.
    """

    major: int = 0
    minor: int = 0
    patch: int = 0

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def _strip_v(text: str) -> str:
    return text[1:] if text.startswith("v") else text


def _component(text: str) -> int:
    match = _LEADING_DIGITS.match(text.strip())
    return int(match.group()) if match else 0


def parse_version(text: str) -> ParsedVersion:
    """
    Parse a version string into a numeric triple.

    Missing components default to 0 and non-numeric components parse to 0,
    so parsing never fails: 'v18' -> 18.0.0, '18.x.1' -> 18.0.1.

    Args:
        text: Version such as '18.17.0' or 'v18.17'

    Returns:
        ParsedVersion
    """
    parts = _strip_v(text.strip()).split(".")[:3]
    parts += ["0"] * (3 - len(parts))
    return ParsedVersion(*(_component(p) for p in parts))


def compare_versions(a: ParsedVersion, b: ParsedVersion) -> int:
    """Return a negative number, zero or a positive number as a <, ==, > b."""
    if a == b:
        return 0
    return -1 if a < b else 1


# =============================================================================
# Spec variants
# =============================================================================


class RangeKind(str, Enum):
    """Semver-like range operators."""

    COMPATIBLE = "^"
    PATCH = "~"


@dataclass(frozen=True)
class ExactSpec:
    version: str


@dataclass(frozen=True)
class ComparisonSpec:
    operator: str
    version: str


@dataclass(frozen=True)
class RangeSpec:
    kind: RangeKind
    version: str


@dataclass(frozen=True)
class PartialSpec:
    """One or two leading version components, e.g. ('18',) or ('18', '17')."""

    components: Tuple[str, ...]

    @property
    def text(self) -> str:
        return ".".join(self.components)


@dataclass(frozen=True)
class AliasSpec:
    name: str


VersionSpec = Union[ExactSpec, ComparisonSpec, RangeSpec, PartialSpec, AliasSpec]


def _is_alias(spec: str) -> bool:
    lowered = spec.lower()
    return lowered in ALIASES or lowered.startswith("lts/")


def _parse_comparison(spec: str) -> ComparisonSpec:
    for operator in COMPARISON_OPERATORS:
        if spec.startswith(operator):
            return ComparisonSpec(operator, spec[len(operator):].strip())
    raise InvalidVersionSpecError(spec, "no comparison operator")


_RULES: List[Tuple[Callable[[str], bool], Callable[[str], VersionSpec]]] = [
    (_is_alias, lambda s: AliasSpec(s.lower())),
    (lambda s: s.startswith(COMPARISON_OPERATORS), _parse_comparison),
    (lambda s: s.startswith("^"), lambda s: RangeSpec(RangeKind.COMPATIBLE, s[1:].strip())),
    (lambda s: s.startswith("~"), lambda s: RangeSpec(RangeKind.PATCH, s[1:].strip())),
    (lambda s: len(s.split(".")) < 3, lambda s: PartialSpec(tuple(s.split(".")))),
]


def parse_spec(text: str) -> VersionSpec:
    """
    Classify a required version spec.

    Args:
        text: Spec string; a leading 'v' is ignored

    Returns:
        The variant of the first rule that applies

    Raises:
        InvalidVersionSpecError: If ``text`` is blank
    """
    spec = _strip_v(text.strip())
    if not spec:
        raise InvalidVersionSpecError(text, "empty")

    for applies, build in _RULES:
        if applies(spec):
            return build(spec)
    return ExactSpec(spec)


# =============================================================================
# Matching
# =============================================================================


@dataclass(frozen=True)
class MatchResult:
    """
    Outcome of comparing the current version with a requirement.

    Attributes:
        matches: Whether the current version satisfies the requirement
        target_version: Version to report or switch to, when there is one
    """

    matches: bool
    target_version: Optional[str] = None


def _satisfies_comparison(current: ParsedVersion, spec: ComparisonSpec) -> bool:
    if not spec.version:
        return False

    result = compare_versions(current, parse_version(spec.version))
    if spec.operator == ">=":
        return result >= 0
    if spec.operator == "<=":
        return result <= 0
    if spec.operator == ">":
        return result > 0
    if spec.operator == "<":
        return result < 0
    return result == 0


def _satisfies_range(current: ParsedVersion, spec: RangeSpec) -> bool:
    required = parse_version(spec.version)
    if spec.kind == RangeKind.COMPATIBLE:
        return current.major == required.major and current >= required
    return (
        current.major == required.major
        and current.minor == required.minor
        and current.patch >= required.patch
    )


def _satisfies_partial(current: ParsedVersion, spec: PartialSpec) -> bool:
    given = [_component(c) for c in spec.components]
    actual = (current.major, current.minor, current.patch)
    return all(g == a for g, a in zip(given, actual))


def evaluate_match(current: str, required: str) -> MatchResult:
    """
    Compare a concrete current version with a required spec.

    Args:
        current: Installed version, e.g. 'v18.17.0'
        required: Required spec, e.g. '>=18.0.0', '^18.17.0', '18'

    Returns:
        MatchResult; exact, comparison and range matches target the current
        version, partial pins target the pin
    """
    current = _strip_v(current.strip())
    required = _strip_v(required.strip())

    if not current or not required:
        return MatchResult(matches=False)

    if current == required:
        return MatchResult(matches=True, target_version=current)

    spec = parse_spec(required)
    parsed = parse_version(current)

    if isinstance(spec, ComparisonSpec):
        matches = _satisfies_comparison(parsed, spec)
        return MatchResult(matches, current if matches else None)

    if isinstance(spec, RangeSpec):
        matches = _satisfies_range(parsed, spec)
        return MatchResult(matches, current if matches else None)

    if isinstance(spec, PartialSpec):
        return MatchResult(_satisfies_partial(parsed, spec), spec.text)

    if isinstance(spec, AliasSpec):
        logger.debug(f"Alias {spec.name!r} cannot be resolved locally")

    return MatchResult(matches=False)


class VersionMatcher:
    """
    Cached front end to ``evaluate_match``.

    Args:
        cache: Shared cache
        settings: Settings (match result TTL)
    """

    def __init__(self, cache: Cache, settings: Optional[Settings] = None):
        self.cache = cache
        self.settings = settings or Settings()

    def match_version(self, current: str, required: str) -> MatchResult:
        """
        Compare ``current`` with ``required``, caching per pair.

        Returns:
            MatchResult
        """

        def produce() -> MatchResult:
            result = evaluate_match(current, required)
            logger.info(
                f"Version matching: current={current}, required={required} -> "
                f"matches={result.matches}, target={result.target_version}"
            )
            return result

        return self.cache.cached_sync(
            CacheNamespace.VERSION_MATCH,
            f"{current}|{required}",
            produce,
            ttl=self.settings.ttl.version_match,
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
