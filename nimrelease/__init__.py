"""nimrelease: release pipeline for the Nim compiler distribution.

Five sequential phases, coordinated only through the filesystem:
  - download:  fetch nightly artifacts and write .sha256 checksums
  - docs:      build or extract documentation into the web root
  - repackage: derive .tar.gz from the .tar.xz source tarball
  - test:      self-build and smoke-test the source tarball
  - update:    promote to the stable channel when newer
"""

__version__ = "0.1.0"
__description__ = "Fetch, repackage, smoke-test and promote compiler releases"

from nimrelease.core.orchestrator import ReleasePipeline
from nimrelease.cli.app import app as cli

__all__ = ["ReleasePipeline", "cli", "__version__"]
