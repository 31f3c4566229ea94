"""
Artifact Store

Persists rendered PDFs under a per-caller namespace and serves them back.

Stored names have the form `<stamp>_<slug>.pdf`:
- stamp: nanosecond UNIX timestamp, strictly increasing within the process
- slug: the declared resume name reduced to [A-Za-z0-9_-]

Retrieval keys are validated against that alphabet before any path is built,
so a key can never address a file outside the caller's namespace.

Namespace directories are `<caller slug>-<sha256 prefix>`: readable, filesystem
safe, and distinct for distinct callers even when their slugs collide.
"""

import hashlib
import os
import re
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from cvforge.contexts.storage.logger import _log_debug, _log_info, log_artifact_written
from cvforge.exceptions import StorageError, StorageInvalidName, StorageNotFound
from cvforge.utils.text_processing import slugify
from cvforge.utils.timestamp import monotonic_stamp_ns, stamp_to_datetime

ARTIFACT_SUFFIX = ".pdf"
STORED_NAME_PATTERN = re.compile(r"(?P<stamp>\d+)_(?P<slug>[A-Za-z0-9_-]+)\.pdf")
RETRIEVAL_KEY_PATTERN = re.compile(r"[A-Za-z0-9_-]+\.pdf")

NAMESPACE_SLUG_LENGTH = 40
NAMESPACE_DIGEST_LENGTH = 16

# Bounded retries when a stored name is already taken (e.g., another process)
MAX_NAME_ATTEMPTS = 5


@dataclass(frozen=True)
class ArtifactInfo:
    """
    Listing entry for one stored artifact.

    Attributes:
        stored_name: Retrieval key within the caller's namespace
        display_name: Declared resume name as recovered from the stored name
        created_at: Creation time (UTC)
    """

    stored_name: str
    display_name: str
    created_at: datetime


# ============================================================================
# Naming
# ============================================================================


def namespace_key(caller_id: str) -> str:
    """
    Filesystem-safe directory name for a caller.

    Example:
        >>> namespace_key("jane@example.com")[:17]
        'jane_example_com-'
    """
    digest = hashlib.sha256(caller_id.encode("utf-8")).hexdigest()[:NAMESPACE_DIGEST_LENGTH]
    return f"{slugify(caller_id, fallback='caller', max_length=NAMESPACE_SLUG_LENGTH)}-{digest}"


def make_stored_name(display_name: str, stamp_ns: Optional[int] = None) -> str:
    """
    Stored name for an artifact.

    Example:
        >>> make_stored_name("Jane Doe", stamp_ns=1731590000000000000)
        '1731590000000000000_Jane_Doe.pdf'
    """
    stamp = monotonic_stamp_ns() if stamp_ns is None else stamp_ns
    return f"{stamp}_{slugify(display_name)}{ARTIFACT_SUFFIX}"


def parse_stored_name(stored_name: str) -> Optional[ArtifactInfo]:
    """Recover listing info from a stored name; None for names this store did not write."""
    match = STORED_NAME_PATTERN.fullmatch(stored_name)
    if not match:
        return None
    return ArtifactInfo(
        stored_name=stored_name,
        display_name=display_name_from_slug(match.group("slug")),
        created_at=stamp_to_datetime(int(match.group("stamp"))),
    )


def display_name_from_slug(slug: str) -> str:
    """Show underscores as spaces (slugify turned whitespace into underscores)."""
    return slug.replace("_", " ")


def validate_retrieval_key(stored_name: str) -> None:
    """
    Reject keys outside the stored-name alphabet.

    Raises:
        StorageInvalidName: e.g. for '../../etc/passwd'
    """
    if not isinstance(stored_name, str) or not RETRIEVAL_KEY_PATTERN.fullmatch(stored_name):
        raise StorageInvalidName(f"Invalid artifact name: {stored_name!r}")


# ============================================================================
# Store Interface
# ============================================================================


class ArtifactStore(ABC):
    """
    Key-value store of PDF artifacts partitioned by caller.

    Implementations must:
    - Never let one caller's key reach another caller's artifacts
    - Make a written artifact visible completely or not at all
    - Tolerate concurrent first writes to the same namespace
    """

    @abstractmethod
    def put(self, caller_id: str, display_name: str, data: bytes) -> str:
        """Store an artifact and return its stored name."""
        pass

    @abstractmethod
    def list(self, caller_id: str) -> List[ArtifactInfo]:
        """List a caller's artifacts, newest first."""
        pass

    @abstractmethod
    def get(self, caller_id: str, stored_name: str) -> bytes:
        """Read an artifact back by stored name."""
        pass


class FileSystemArtifactStore(ArtifactStore):
    """Artifacts as files under <root>/<namespace>/<stored name>."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def namespace_dir(self, caller_id: str) -> Path:
        """Directory holding a caller's artifacts (may not exist yet)."""
        return self.root / namespace_key(caller_id)

    def put(self, caller_id: str, display_name: str, data: bytes) -> str:
        """
        Write an artifact atomically.

        The namespace directory is created on first use. Data goes to a hidden
        temp file in the same directory, which is then hard-linked under its
        stored name. Linking fails if the name exists, so a name is never
        overwritten even by another process sharing the root.

        Args:
            caller_id: Opaque caller identity
            display_name: Declared resume name (sanitized into the stored name)
            data: PDF bytes

        Returns:
            Stored name (the retrieval key)

        Raises:
            StorageError: Directory or file could not be written
        """
        namespace = self.namespace_dir(caller_id)
        try:
            namespace.mkdir(parents=True, exist_ok=True)
            tmp_path = self._write_temp(namespace, data)
            try:
                stored_name = self._publish(tmp_path, display_name)
            finally:
                tmp_path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Could not store artifact for '{display_name}'", original_error=e) from e

        log_artifact_written(namespace.name, stored_name, len(data))
        return stored_name

    def list(self, caller_id: str) -> List[ArtifactInfo]:
        """
        List a caller's artifacts.

        Returns:
            ArtifactInfo entries sorted newest first (empty if the namespace is absent)
        """
        namespace = self.namespace_dir(caller_id)
        if not namespace.is_dir():
            return []

        entries = []
        for path in namespace.iterdir():
            info = parse_stored_name(path.name)
            if info is not None and path.is_file():
                entries.append(info)

        entries.sort(key=lambda info: (info.created_at, info.stored_name), reverse=True)
        _log_debug(f"Listed {len(entries)} artifacts in {namespace.name}")
        return entries

    def get(self, caller_id: str, stored_name: str) -> bytes:
        """
        Read an artifact.

        Raises:
            StorageInvalidName: Key outside the stored-name alphabet
            StorageNotFound: Namespace or artifact absent
            StorageError: Artifact exists but could not be read
        """
        validate_retrieval_key(stored_name)

        namespace = self.namespace_dir(caller_id)
        path = namespace / stored_name
        try:
            data = path.read_bytes()
        except (FileNotFoundError, IsADirectoryError) as e:
            raise StorageNotFound(f"Artifact not found: {stored_name}", original_error=e) from e
        except OSError as e:
            raise StorageError(f"Could not read artifact {stored_name}", original_error=e) from e

        _log_info(f"Serving {stored_name} from {namespace.name}")
        return data


    @staticmethod
    def _write_temp(namespace: Path, data: bytes) -> Path:
        fd, tmp_name = tempfile.mkstemp(dir=namespace, prefix=".", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return Path(tmp_name)

    @staticmethod
    def _publish(tmp_path: Path, display_name: str) -> str:
        # os.link refuses an existing target, so claiming a name is exclusive
        for _ in range(MAX_NAME_ATTEMPTS):
            stored_name = make_stored_name(display_name)
            try:
                os.link(tmp_path, tmp_path.parent / stored_name)
            except FileExistsError:
                _log_debug(f"Stored name {stored_name} already taken; retrying")
                continue
            return stored_name
        raise StorageError(f"Could not allocate a unique name for '{display_name}'")
