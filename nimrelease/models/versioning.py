"""Release version model - ``major.minor.patch`` with release-candidate rule.

Odd patch numbers mark release candidates. A release candidate is never
considered newer than anything, so it is never promoted to stable.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field

_VERSION_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


class VersionFormatError(ValueError):
    """Raised when a version string is not a ``major.minor.patch`` triple."""


class ReleaseVersion(BaseModel):
    """A semantic version triple."""

    model_config = ConfigDict(frozen=True)

    major: int = Field(ge=0)
    minor: int = Field(ge=0)
    patch: int = Field(ge=0)

    @classmethod
    def parse(cls, text: str) -> ReleaseVersion:
        """Parse ``"1.4.8"`` into a ReleaseVersion.

        Raises ``VersionFormatError`` for anything that is not exactly three
        dot-separated non-negative integers.
        """
        match = _VERSION_RE.match(text.strip())
        if match is None:
            raise VersionFormatError(f"Malformed version string: {text!r}")
        major, minor, patch = (int(part) for part in match.groups())
        return cls(major=major, minor=minor, patch=patch)

    @property
    def triple(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    @property
    def branch(self) -> str:
        """Maintenance branch name, e.g. ``version-1-4``."""
        return f"version-{self.major}-{self.minor}"

    @property
    def is_release_candidate(self) -> bool:
        return self.patch % 2 == 1

    def is_newer_than(self, other: ReleaseVersion) -> bool:
        """Whether this version should replace *other* as stable."""
        if self.is_release_candidate:
            return False
        return self.triple > other.triple

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


ZERO_VERSION = ReleaseVersion(major=0, minor=0, patch=0)
