"""Semantic versions with SemVer 2.0.0 precedence (https://semver.org/#spec-item-11)."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field

from tagscribe.core.errors import FormatError

_INTEGER = r"0|[1-9][0-9]*"
_ALPHANUMERIC = r"[0-9A-Za-z-]"
_LABEL = rf"[0-9]*[A-Za-z-]{_ALPHANUMERIC}*"
_IDENTIFIER = rf"(?:{_INTEGER}|{_LABEL})"

_VERSION_RE = re.compile(
    rf"(?P<major>{_INTEGER})\.(?P<minor>{_INTEGER})\.(?P<patch>{_INTEGER})"
    rf"(?:-(?P<pre_release>{_IDENTIFIER}(?:\.{_IDENTIFIER})*))?"
    rf"(?:\+(?P<build_metadata>{_ALPHANUMERIC}+(?:\.{_ALPHANUMERIC}+)*))?"
)

_NUMERIC_RE = re.compile(r"[0-9]+")


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def _compare_identifiers(ours: str, theirs: str) -> int:
    our_numeric = _NUMERIC_RE.fullmatch(ours) is not None
    their_numeric = _NUMERIC_RE.fullmatch(theirs) is not None

    if our_numeric and their_numeric:
        return _sign(int(ours) - int(theirs))
    # Numeric identifiers always have lower precedence than alphanumeric ones.
    if our_numeric:
        return -1
    if their_numeric:
        return 1
    # ASCII sort order
    return (ours > theirs) - (ours < theirs)


def _compare_pre_releases(ours: str | None, theirs: str | None) -> int:
    if ours is None and theirs is None:
        return 0
    if ours is None:
        return 1
    if theirs is None:
        return -1

    our_parts = ours.split(".")
    their_parts = theirs.split(".")
    for our_part, their_part in zip(our_parts, their_parts):
        if our_part != their_part:
            return _compare_identifiers(our_part, their_part)

    # A larger set of identifiers wins when every shared one is equal.
    return _sign(len(our_parts) - len(their_parts))


class SemanticVersion(BaseModel):
    """An immutable ``MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]`` version.

    Equality is structural (build metadata included) so the model can key
    dicts; ordering follows SemVer precedence and ignores build metadata.
    Use :meth:`compare` when precedence equality is what matters.
    """

    model_config = ConfigDict(frozen=True)

    major: int = Field(ge=0)
    minor: int = Field(ge=0)
    patch: int = Field(ge=0)
    pre_release: str | None = None
    build_metadata: str | None = None

    @classmethod
    def parse(cls, text: str) -> SemanticVersion:
        """Parse *text*, raising FormatError when it is not a semantic version."""
        match = _VERSION_RE.fullmatch(text)
        if match is None:
            raise FormatError("Invalid semantic version", text)

        return cls(
            major=int(match["major"]),
            minor=int(match["minor"]),
            patch=int(match["patch"]),
            pre_release=match["pre_release"] or None,
            build_metadata=match["build_metadata"] or None,
        )

    @property
    def core(self) -> SemanticVersion:
        """This version with pre-release and build metadata stripped."""
        return SemanticVersion(major=self.major, minor=self.minor, patch=self.patch)

    @property
    def pre_release_identifiers(self) -> tuple[str, ...]:
        return tuple(self.pre_release.split(".")) if self.pre_release else ()

    def to_version_string(self, prefix: str = "") -> str:
        pre_release = f"-{self.pre_release}" if self.pre_release else ""
        build_metadata = f"+{self.build_metadata}" if self.build_metadata else ""
        return f"{prefix}{self.major}.{self.minor}.{self.patch}{pre_release}{build_metadata}"

    def compare(self, other: SemanticVersion) -> int:
        """Return -1, 0 or 1 as this version has lower, equal or higher precedence."""
        for ours, theirs in (
            (self.major, other.major),
            (self.minor, other.minor),
            (self.patch, other.patch),
        ):
            if ours != theirs:
                return _sign(ours - theirs)
        return _compare_pre_releases(self.pre_release, other.pre_release)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.compare(other) < 0

    def __le__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.compare(other) <= 0

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.compare(other) > 0

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.compare(other) >= 0

    def __str__(self) -> str:
        return self.to_version_string()
