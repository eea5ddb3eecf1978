"""SHA-256 helpers for release artifacts.

Checksum files use the ``sha256sum`` text format (``<hex>  <name>``) so they
can be verified with ``sha256sum -c`` on the download server.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

from nimrelease.models.artifacts import checksum_name

_CHUNK_SIZE = 1 << 20


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def sha256_file(path: Path) -> str:
    """Return the SHA-256 hex digest of a file, read in chunks."""
    digest = hashlib.sha256()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def write_checksum(path: Path) -> Path:
    """Hash *path* as it is on disk and write its ``.sha256`` sibling.

    Returns the checksum file path.
    """
    path = Path(path)
    target = path.with_name(checksum_name(path.name))
    target.write_text(f"{sha256_file(path)}  {path.name}\n", encoding="utf-8")
    return target


def read_checksum(path: Path) -> str:
    """Return the hex digest recorded in the ``.sha256`` sibling of *path*."""
    path = Path(path)
    text = path.with_name(checksum_name(path.name)).read_text(encoding="utf-8")
    return text.split()[0]


def verify_checksum(path: Path) -> bool:
    """Re-hash *path* and compare against its recorded checksum."""
    return sha256_file(path) == read_checksum(path)
