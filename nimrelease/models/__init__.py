"""nimrelease data models - all Pydantic v2, all frozen (immutable)."""

from nimrelease.models.artifacts import (
    DEFAULT_ARTIFACTS,
    ArtifactKind,
    ArtifactSpec,
    checksum_name,
    gzip_tarball_name,
    source_tarball_name,
)
from nimrelease.models.context import ReleaseContext
from nimrelease.models.reports import PhaseReport, PhaseState
from nimrelease.models.versioning import (
    ZERO_VERSION,
    ReleaseVersion,
    VersionFormatError,
)

__all__ = [
    # versioning
    "ReleaseVersion",
    "VersionFormatError",
    "ZERO_VERSION",
    # context
    "ReleaseContext",
    # artifacts
    "ArtifactKind",
    "ArtifactSpec",
    "DEFAULT_ARTIFACTS",
    "source_tarball_name",
    "gzip_tarball_name",
    "checksum_name",
    # reports
    "PhaseState",
    "PhaseReport",
]
