"""Artifact naming - the deterministic filename templates for a release.

Destination (public) name: ``<project>-<version><dest_suffix>``
Source (nightly) name:     ``<project>-<version><hotfix><source_suffix>``

The hotfix suffix only affects the remote name, so a patched nightly can be
published under the clean public version.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from nimrelease.models.versioning import ReleaseVersion


class ArtifactKind(str, Enum):
    SOURCE = "source"
    BINARY = "binary"


class ArtifactSpec(BaseModel):
    """One downloadable release file."""

    model_config = ConfigDict(frozen=True)

    dest_suffix: str
    source_suffix: str = ""  # empty means same as dest_suffix
    kind: ArtifactKind = ArtifactKind.BINARY

    def dest_name(self, project: str, version: ReleaseVersion) -> str:
        return f"{project}-{version}{self.dest_suffix}"

    def source_name(
        self, project: str, version: ReleaseVersion, hotfix_suffix: str = ""
    ) -> str:
        suffix = self.source_suffix or self.dest_suffix
        return f"{project}-{version}{hotfix_suffix}{suffix}"


# Source tarball first; the repackager and smoke tester depend on it.
DEFAULT_ARTIFACTS: list[ArtifactSpec] = [
    ArtifactSpec(dest_suffix=".tar.xz", kind=ArtifactKind.SOURCE),
    ArtifactSpec(dest_suffix="_x32.zip", source_suffix="-windows_x32.zip"),
    ArtifactSpec(dest_suffix="_x64.zip", source_suffix="-windows_x64.zip"),
    ArtifactSpec(dest_suffix="-linux_x32.tar.xz"),
    ArtifactSpec(dest_suffix="-linux_x64.tar.xz"),
]


def source_tarball_name(project: str, version: ReleaseVersion) -> str:
    """Name of the primary ``.tar.xz`` source tarball."""
    return f"{project}-{version}.tar.xz"


def gzip_tarball_name(project: str, version: ReleaseVersion) -> str:
    return f"{project}-{version}.tar.gz"


def checksum_name(filename: str) -> str:
    """Sibling checksum file for an artifact."""
    return f"{filename}.sha256"
