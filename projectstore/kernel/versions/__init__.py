"""
Project version lifecycle.
"""

from projectstore.kernel.versions.transport import ArtifactTransport, digest_file
from projectstore.kernel.versions.version_store import VersionStore

__all__ = ["ArtifactTransport", "VersionStore", "digest_file"]
