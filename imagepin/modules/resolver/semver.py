"""Semantic version parsing and ordering for image tags."""

import re
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

__all__ = ["SemVer"]

Identifier = Union[int, str]

_NUMERIC = r"0|[1-9][0-9]*"
_PRE_IDENT = r"(?:0|[1-9][0-9]*|[0-9]*[a-zA-Z-][0-9a-zA-Z-]*)"
_BUILD_IDENT = r"[0-9a-zA-Z-]+"

# semver 2.0.0, tags commonly carry a leading "v"
_SEMVER_RE = re.compile(
    rf"^v?(?P<major>{_NUMERIC})\.(?P<minor>{_NUMERIC})\.(?P<patch>{_NUMERIC})"
    rf"(?:-(?P<prerelease>{_PRE_IDENT}(?:\.{_PRE_IDENT})*))?"
    rf"(?:\+(?P<build>{_BUILD_IDENT}(?:\.{_BUILD_IDENT})*))?$"
)
_MAX_LENGTH = 256


def _identifier(raw: str) -> Identifier:
    return int(raw) if raw.isdigit() else raw


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def _cmp_identifier(a: Identifier, b: Identifier) -> int:
    a_num = isinstance(a, int)
    b_num = isinstance(b, int)
    if a_num and not b_num:
        return -1
    if b_num and not a_num:
        return 1
    return _cmp(a, b)


@dataclass(frozen=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: Tuple[Identifier, ...] = ()
    build: Tuple[str, ...] = field(default=(), compare=False)

    @classmethod
    def parse(cls, text: str) -> Optional["SemVer"]:
        """Parse a tag like "1.2.3", "v1.2.3-bookworm" or "1.2.3+build5"; None if invalid."""
        if not text or len(text) > _MAX_LENGTH:
            return None
        match = _SEMVER_RE.fullmatch(text)
        if not match:
            return None
        prerelease = match.group("prerelease")
        build = match.group("build")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=tuple(_identifier(p) for p in prerelease.split(".")) if prerelease else (),
            build=tuple(build.split(".")) if build else (),
        )

    def same_family(self, other: "SemVer") -> bool:
        """True when only the patch number (or build metadata) differs."""
        return (
            self.major == other.major
            and self.minor == other.minor
            and self.prerelease == other.prerelease
        )

    def compare(self, other: "SemVer") -> int:
        """Precedence comparison per semver 2.0.0; build metadata is ignored."""
        main = _cmp(
            (self.major, self.minor, self.patch),
            (other.major, other.minor, other.patch),
        )
        if main:
            return main
        # a version without prerelease outranks any prerelease of it
        if not self.prerelease or not other.prerelease:
            return _cmp(not self.prerelease, not other.prerelease)
        for a, b in zip(self.prerelease, other.prerelease):
            result = _cmp_identifier(a, b)
            if result:
                return result
        return _cmp(len(self.prerelease), len(other.prerelease))

    def __gt__(self, other: "SemVer") -> bool:
        return self.compare(other) > 0

    def __lt__(self, other: "SemVer") -> bool:
        return self.compare(other) < 0
