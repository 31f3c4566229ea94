"""
Storage Context

Responsibilities:
- Persists rendered artifacts under a per-caller namespace
- Derives collision-resistant stored names from the declared resume name
- Lists a caller's artifacts newest first
- Serves artifacts back by stored name, rejecting keys that could escape the namespace

Owns: Artifact naming, namespace layout, atomic writes
Never: Inspects caller identity beyond sanitizing it for the filesystem
"""

from cvforge.contexts.storage.artifact_store import (
    ArtifactInfo,
    ArtifactStore,
    FileSystemArtifactStore,
    namespace_key,
)

__all__ = ["ArtifactInfo", "ArtifactStore", "FileSystemArtifactStore", "namespace_key"]
