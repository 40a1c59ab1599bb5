"""Filesystem-backed resource cache.

Each registry has its own cache rooted at ``<data_root>/<registry>``.
The cache owns placement only: callers own the bytes they store.
Writes are whole-file overwrites and nothing is ever deleted.
"""

from __future__ import annotations

import io
import tarfile
from pathlib import Path

from core.errors import CacheMissError, PartonsCacheError, PartonsConfigError, PartonsParseError
from core.logging_config import get_logger
from core.types import DataFormat
from ingest.format_converter import convert_name
from store.resource import Resource, SetData, original_name, resource_path

_LOGGER = get_logger(__name__)


class FileCache:
    """Key to bytes store addressed by :class:`Resource`."""

    def __init__(self, root: Path) -> None:
        """Create a cache rooted at ``root``.

        Args:
            root: Registry cache directory; created lazily on first write.
        """
        self._root = root

    @classmethod
    def for_registry(cls, data_root: Path, registry_name: str) -> "FileCache":
        """Build the cache of one registry under the shared data root."""
        return cls(data_root / registry_name)

    @property
    def root(self) -> Path:
        """Registry cache directory."""
        return self._root

    def absolute(self, resource: Resource) -> Path:
        """Return the absolute location of ``resource``."""
        return self._root / resource_path(resource)

    def exists(self, resource: Resource) -> bool:
        """Return whether ``resource`` is cached."""
        return self.absolute(resource).is_file()

    def write(self, resource: Resource, content: bytes) -> None:
        """Store ``content`` for ``resource``, replacing any previous entry.

        Args:
            resource: Cache key.
            content: Bytes to persist.

        Raises:
            PartonsCacheError: If the file or its parents cannot be written.
        """
        location = self.absolute(resource)
        try:
            location.parent.mkdir(parents=True, exist_ok=True)
            location.write_bytes(content)
        except OSError as error:
            raise PartonsCacheError(
                f"Failed to cache '{resource}' at {location}: {error}. "
                "Check write permissions and available disk space."
            ) from error
        _LOGGER.info("resource_cached", resource=str(resource), path=str(location))

    def read(self, resource: Resource) -> bytes:
        """Load the cached bytes of ``resource``.

        Args:
            resource: Cache key.

        Returns:
            Stored content.

        Raises:
            CacheMissError: If the resource is not cached.
            PartonsCacheError: If the file cannot be read.
        """
        location = self.absolute(resource)
        if not location.is_file():
            raise CacheMissError(f"Resource '{resource}' not found in cache at {location}.")
        try:
            content = location.read_bytes()
        except OSError as error:
            raise PartonsCacheError(
                f"Failed to read cached '{resource}' at {location}: {error}."
            ) from error
        _LOGGER.debug("resource_loaded", resource=str(resource), path=str(location))
        return content

    def unpack(self, resource: Resource, data_format: DataFormat, content: bytes) -> bytes:
        """Expand an archive resource into original-state entries.

        Every non-empty file of a gzip-compressed tarball is renamed with the
        format's archive naming rule and written, ``original.``-prefixed, in
        the set directory. Non-archive resources pass through unchanged.

        Args:
            resource: Resource the content was downloaded for.
            data_format: Format providing the entry naming rule.
            content: Downloaded bytes.

        Returns:
            Empty bytes for archives, ``content`` otherwise.

        Raises:
            PartonsParseError: If the archive is corrupt.
            ArchiveMemberError: If an entry has no canonical name.
            PartonsCacheError: If an entry cannot be written.
        """
        if not isinstance(resource.data, SetData):
            return content
        set_dir = self._root / resource.data.set_name
        try:
            with tarfile.open(fileobj=io.BytesIO(content), mode="r:gz") as archive:
                entry_count = self._extract_entries(archive, set_dir, data_format)
        except tarfile.TarError as error:
            raise PartonsParseError(
                f"Failed to unpack archive for '{resource}': {error}. "
                "The remote file is not a valid gzip-compressed tarball."
            ) from error
        _LOGGER.info(
            "archive_unpacked",
            resource=str(resource),
            path=str(set_dir),
            entry_count=entry_count,
        )
        return b""

    def sets(self) -> list[str]:
        """List names of sets with at least one cached file.

        Raises:
            PartonsConfigError: If the registry cache root does not exist.
        """
        if not self._root.is_dir():
            raise PartonsConfigError(
                f"Cache root {self._root} does not exist. Fetch the registry index first."
            )
        return sorted(entry.name for entry in self._root.iterdir() if entry.is_dir())

    def _extract_entries(
        self,
        archive: tarfile.TarFile,
        set_dir: Path,
        data_format: DataFormat,
    ) -> int:
        entry_count = 0
        for entry in archive.getmembers():
            if not entry.isfile():
                continue
            stream = archive.extractfile(entry)
            if stream is None:
                continue
            payload = stream.read()
            if not payload:
                continue
            target = set_dir / original_name(convert_name(data_format, entry.name))
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(payload)
            except OSError as error:
                raise PartonsCacheError(
                    f"Failed to write archive entry '{entry.name}' to {target}: {error}."
                ) from error
            entry_count += 1
        return entry_count
