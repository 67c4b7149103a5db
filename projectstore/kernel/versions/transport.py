"""
Artifact transport seam.

Moving archive bytes to durable storage is not the store's job; an
orchestrator plugs in whatever blob backend it uses through this protocol.
"""

import asyncio
import hashlib
from pathlib import Path
from typing import Optional, Protocol, Tuple, runtime_checkable

CHUNK_SIZE = 1024 * 1024


@runtime_checkable
class ArtifactTransport(Protocol):
    """Accepts a local archive plus checksum and returns its resource id."""

    async def upload(self, local_file: Path, md5: bytes, resource_id: Optional[str] = None) -> str:
        ...


def _digest_file(path: Path) -> Tuple[bytes, int]:
    md5 = hashlib.md5()
    size = 0
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(CHUNK_SIZE), b""):
            md5.update(chunk)
            size += len(chunk)
    return md5.digest(), size


async def digest_file(path: Path) -> Tuple[bytes, int]:
    """MD5 digest and size of a file, read off the event loop."""
    return await asyncio.to_thread(_digest_file, path)
