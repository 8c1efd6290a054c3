"""Semantic versions and range expressions.

Versions follow semver precedence: the numeric core compares first, a
pre-release sorts below its release, pre-release identifiers compare
numerically or lexically one by one, and build metadata is ignored. Ranges
use the grammar publishers use in manifests and consumers use on the command
line (`^1.2`, `~1.2.3`, `>=1.0 <2.0`, `1.x`, `1.2 - 1.4`, `^1 || ^2`).

A string that is not a version or range expression (for example `latest` or
`main`) parses to None; callers decide what that means.
"""

import functools
import re
from dataclasses import dataclass

from packaging.version import Version

_WILDCARDS = frozenset({"x", "X", "*"})

_IDENTIFIERS = r"[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*"
_SEMVER_RE = re.compile(
    rf"^v?(?P<core>[0-9]+(?:\.[0-9]+){{0,2}})"
    rf"(?:-(?P<prerelease>{_IDENTIFIERS}))?(?:\+(?P<build>{_IDENTIFIERS}))?$"
)
_PRERELEASE_RE = re.compile(rf"^{_IDENTIFIERS}$")

_PARTIAL = (
    r"v?(?:[0-9]+|[xX*])(?:\.(?:[0-9]+|[xX*])){0,2}"
    r"(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?"
)
_OPERATOR = r"=>|=<|>=|<=|!=|~>|\^|~|=|>|<"

_TOKEN_RE = re.compile(rf"(?P<op>{_OPERATOR})?\s*(?P<version>{_PARTIAL})")
_COMPARATOR = rf"(?:(?:{_OPERATOR})?\s*{_PARTIAL})"
_CONJUNCTION_RE = re.compile(rf"^\s*{_COMPARATOR}(?:[\s,]+{_COMPARATOR})*\s*$")
_HYPHEN_RE = re.compile(rf"^\s*(?P<low>{_PARTIAL})\s+-\s+(?P<high>{_PARTIAL})\s*$")


def _identifier_key(identifier: str) -> tuple[int, int, str]:
    # Numeric identifiers sort below alphanumeric ones
    if identifier.isdigit():
        return (0, int(identifier), "")
    return (1, 0, identifier)


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class SemVer:
    """A semantic version. Equality and ordering ignore build metadata."""

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: str = ""

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    @property
    def _precedence(self) -> tuple:
        if not self.prerelease:
            # A release sorts above every pre-release of the same core
            pre: tuple = (1,)
        else:
            pre = (0, tuple(_identifier_key(i) for i in self.prerelease))
        return (self.major, self.minor, self.patch, pre)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._precedence == other._precedence

    def __lt__(self, other: "SemVer") -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._precedence < other._precedence

    def __hash__(self) -> int:
        return hash(self._precedence)

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text = f"{text}-{'.'.join(self.prerelease)}"
        if self.build:
            text = f"{text}+{self.build}"
        return text


def _core(text: str) -> tuple[int, int, int]:
    release = Version(text).release
    padded = (*release, 0, 0)
    return padded[0], padded[1], padded[2]


def parse_version(text: str) -> SemVer | None:
    """Parse a version key such as `1.2.3`, `v1.2`, `1.0.0-rc.1` or `1.0.0+build.5`.

    Missing minor and patch numbers default to zero. Returns None if the text
    is not a version.
    """
    match = _SEMVER_RE.fullmatch(text)
    if match is None:
        return None
    major, minor, patch = _core(match.group("core"))
    prerelease = match.group("prerelease")
    return SemVer(
        major=major,
        minor=minor,
        patch=patch,
        prerelease=tuple(prerelease.split(".")) if prerelease else (),
        build=match.group("build") or "",
    )


@dataclass(frozen=True)
class _Partial:
    """A possibly incomplete version such as `1`, `1.2`, `1.x` or `1.2.3-rc.1`."""

    major: int | None
    minor: int | None
    patch: int | None
    prerelease: str | None

    @property
    def is_complete(self) -> bool:
        return self.major is not None and self.minor is not None and self.patch is not None

    def floor(self) -> SemVer:
        prerelease: tuple[str, ...] = ()
        if self.prerelease is not None and self.is_complete:
            prerelease = tuple(self.prerelease.split("."))
        return SemVer(self.major or 0, self.minor or 0, self.patch or 0, prerelease)

    def ceiling(self) -> SemVer | None:
        """Smallest version above the range this partial spells, None if unbounded."""
        if self.major is None:
            return None
        if self.minor is None:
            return SemVer(self.major + 1, 0, 0)
        if self.patch is None:
            return SemVer(self.major, self.minor + 1, 0)
        return None


def _parse_partial(text: str) -> _Partial | None:
    body = text[1:] if text.startswith("v") else text
    body = body.split("+", 1)[0]
    prerelease = None
    if "-" in body:
        body, prerelease = body.split("-", 1)
    parts = body.split(".")
    numbers: list[int | None] = []
    for part in parts:
        if part in _WILDCARDS:
            numbers.append(None)
        else:
            numbers.append(int(part))
    while len(numbers) < 3:
        numbers.append(None)
    major, minor, patch = numbers
    # Anything after a wildcard is a wildcard too ("1.x.3" means "1.x")
    if major is None:
        minor = patch = None
    if minor is None:
        patch = None
    if prerelease is not None and _PRERELEASE_RE.match(prerelease) is None:
        return None
    return _Partial(major=major, minor=minor, patch=patch, prerelease=prerelease)


@dataclass(frozen=True)
class _Comparison:
    op: str  # one of ==, !=, >, >=, <, <=
    version: SemVer
    allows_prerelease: bool

    def check(self, candidate: SemVer) -> bool:
        if candidate.is_prerelease and not self.allows_prerelease:
            return False
        if self.op == "==":
            return candidate == self.version
        if self.op == "!=":
            return candidate != self.version
        if self.op == ">":
            return candidate > self.version
        if self.op == ">=":
            return candidate >= self.version
        if self.op == "<":
            return candidate < self.version
        return candidate <= self.version


@dataclass(frozen=True)
class _Excluded:
    """Candidate must fall outside [low, high)."""

    low: SemVer
    high: SemVer
    allows_prerelease: bool

    def check(self, candidate: SemVer) -> bool:
        if candidate.is_prerelease and not self.allows_prerelease:
            return False
        return candidate < self.low or candidate >= self.high


@dataclass(frozen=True)
class _Any:
    allows_prerelease: bool

    def check(self, candidate: SemVer) -> bool:
        return self.allows_prerelease or not candidate.is_prerelease


_Predicate = _Comparison | _Excluded | _Any


def _predicates_for(op: str, partial: _Partial) -> list[_Predicate]:
    pre = partial.prerelease is not None
    floor = partial.floor()
    ceiling = partial.ceiling()

    if op in ("", "="):
        if partial.major is None:
            return [_Any(allows_prerelease=pre)]
        if ceiling is None:
            return [_Comparison("==", floor, pre)]
        return [_Comparison(">=", floor, pre), _Comparison("<", ceiling, pre)]
    if op == "!=":
        if partial.major is None:
            return [_Comparison("<", SemVer(0, 0, 0), pre)]
        if ceiling is None:
            return [_Comparison("!=", floor, pre)]
        return [_Excluded(floor, ceiling, pre)]
    if op == ">":
        if partial.major is None:
            return [_Comparison("<", SemVer(0, 0, 0), pre)]
        if ceiling is None:
            return [_Comparison(">", floor, pre)]
        return [_Comparison(">=", ceiling, pre)]
    if op in (">=", "=>"):
        return [_Comparison(">=", floor, pre)]
    if op == "<":
        return [_Comparison("<", floor, pre)]
    if op in ("<=", "=<"):
        if partial.major is None:
            return [_Any(allows_prerelease=pre)]
        if ceiling is None:
            return [_Comparison("<=", floor, pre)]
        return [_Comparison("<", ceiling, pre)]
    if op in ("~", "~>"):
        if partial.major is None:
            return [_Any(allows_prerelease=pre)]
        if partial.minor is None:
            upper = SemVer(partial.major + 1, 0, 0)
        else:
            upper = SemVer(partial.major, partial.minor + 1, 0)
        return [_Comparison(">=", floor, pre), _Comparison("<", upper, pre)]
    # caret
    if partial.major is None:
        return [_Any(allows_prerelease=pre)]
    if partial.major > 0:
        upper = SemVer(partial.major + 1, 0, 0)
    elif partial.minor is None:
        upper = SemVer(1, 0, 0)
    elif partial.minor > 0:
        upper = SemVer(0, partial.minor + 1, 0)
    elif partial.patch is None:
        upper = SemVer(0, 1, 0)
    else:
        upper = SemVer(0, 0, partial.patch + 1)
    return [_Comparison(">=", floor, pre), _Comparison("<", upper, pre)]


def _parse_conjunction(text: str) -> tuple[_Predicate, ...] | None:
    stripped = text.strip()
    if stripped in ("", "*"):
        return (_Any(allows_prerelease=False),)

    hyphen = _HYPHEN_RE.match(stripped)
    if hyphen is not None:
        low = _parse_partial(hyphen.group("low"))
        high = _parse_partial(hyphen.group("high"))
        if low is None or high is None:
            return None
        return tuple(_predicates_for(">=", low) + _predicates_for("<=", high))

    if _CONJUNCTION_RE.match(stripped) is None:
        return None
    predicates: list[_Predicate] = []
    for match in _TOKEN_RE.finditer(stripped):
        partial = _parse_partial(match.group("version"))
        if partial is None:
            return None
        predicates.extend(_predicates_for(match.group("op") or "", partial))
    return tuple(predicates)


@dataclass(frozen=True)
class VersionRange:
    """A parsed range expression: OR of AND-ed comparisons."""

    expression: str
    alternatives: tuple[tuple[_Predicate, ...], ...]

    def contains(self, candidate: SemVer) -> bool:
        return any(
            all(predicate.check(candidate) for predicate in conjunction)
            for conjunction in self.alternatives
        )


def parse_range(expression: str) -> VersionRange | None:
    """Parse a range expression.

    Returns:
        The parsed range, or None if the expression is not a range (for
        example `latest` or an arbitrary tag name)
    """
    alternatives: list[tuple[_Predicate, ...]] = []
    for part in expression.split("||"):
        conjunction = _parse_conjunction(part)
        if conjunction is None:
            return None
        alternatives.append(conjunction)
    return VersionRange(expression=expression, alternatives=tuple(alternatives))
