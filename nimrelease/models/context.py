"""Per-run release context - immutable for the duration of one run."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from nimrelease.models.versioning import ReleaseVersion


class ReleaseContext(BaseModel):
    """Identifies the release being cut: public version plus nightly build."""

    model_config = ConfigDict(frozen=True)

    version: ReleaseVersion
    build_hash: str = Field(min_length=1)

    @classmethod
    def from_args(cls, version: str, build_hash: str) -> ReleaseContext:
        """Build a context from raw CLI strings.

        Raises ``VersionFormatError`` if *version* is malformed.
        """
        return cls(version=ReleaseVersion.parse(version), build_hash=build_hash)
