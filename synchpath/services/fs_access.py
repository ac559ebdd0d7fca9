"""
Filesystem access service for the synchronizer.

Pure I/O, no policy:
- Listing one directory level with metadata
- Copying single files with timestamp preservation
- Recursive directory copies
- Recursive deletion
- Reading and writing file timestamps

Every failure is raised as a SyncError subclass carrying the path.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
from pathlib import Path

from synchpath.core.errors import CopyError, DeleteError, ListingError
from synchpath.core.models import DirectoryEntry, DirectoryListing


class FileSystemService:
    """Service for the filesystem primitives used by the engine."""

    def __init__(self, buffer_size: int = 65536, preserve_permissions: bool = True):
        self.buffer_size = buffer_size
        self.preserve_permissions = preserve_permissions

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @staticmethod
    def path_exists(path: Path | str) -> bool:
        """Return True if path exists and is readable."""
        return os.path.exists(path) and os.access(path, os.R_OK)

    def list_directory(self, path: Path | str) -> DirectoryListing:
        """
        List the immediate children of a directory.

        Entries are sorted by name. Symbolic links are reported with
        the type and timestamps of what they point to; a dangling link
        is reported as a file with the link's own timestamps.

        Raises:
            ListingError: If the directory or one of its entries cannot be read.
        """
        path = Path(path)

        try:
            with os.scandir(path) as it:
                names = sorted(entry.name for entry in it)
        except OSError as e:
            logging.error(f"FileSystemService - Cannot list directory {path}: {e}")
            raise ListingError(path, e) from e

        listing: DirectoryListing = []
        for name in names:
            listing.append(self._get_entry(path / name))
        return listing

    def _get_entry(self, path: Path) -> DirectoryEntry:
        """Build the entry for one child path."""
        try:
            # Use lstat to detect the link itself
            link_stat = path.lstat()
        except OSError as e:
            logging.error(f"FileSystemService - Cannot stat {path}: {e}")
            raise ListingError(path, e) from e

        is_symlink = stat.S_ISLNK(link_stat.st_mode)
        stat_result = link_stat

        if is_symlink:
            try:
                stat_result = path.stat()
            except OSError as e:
                logging.debug(f"FileSystemService - Dangling symbolic link {path}: {e}")

        return DirectoryEntry(
            name=path.name,
            full_path=path,
            access_time=stat_result.st_atime,
            modify_time=stat_result.st_mtime,
            is_directory=stat.S_ISDIR(stat_result.st_mode),
            is_symlink=is_symlink,
        )

    # -------------------------------------------------------------------------
    # Timestamps
    # -------------------------------------------------------------------------

    @staticmethod
    def get_file_times(path: Path | str) -> tuple[float, float]:
        """Return (access_time, modify_time) of a path."""
        stat_result = os.stat(path)
        return stat_result.st_atime, stat_result.st_mtime

    @staticmethod
    def change_file_times(path: Path | str, access_time: float, modify_time: float) -> None:
        """
        Set the access and modification times of a path.

        Raises:
            CopyError: If the timestamps cannot be written.
        """
        try:
            os.utime(path, (access_time, modify_time))
        except OSError as e:
            logging.error(f"FileSystemService - Cannot set times of {path}: {e}")
            raise CopyError(path, e) from e

    # -------------------------------------------------------------------------
    # Copy
    # -------------------------------------------------------------------------

    def copy_file(self, source: Path | str, target: Path | str) -> int:
        """
        Copy a single file over ``target``, preserving source timestamps.

        Both arguments are file names, never directories. Returns bytes copied.

        With ``preserve_permissions`` the source mode is copied too, so a
        read-only source yields a read-only target that a later update by
        a non-root user cannot open for writing.

        Raises:
            CopyError: On any read or write failure.
        """
        source, target = Path(source), Path(target)
        bytes_copied = 0

        try:
            source_stat = source.stat()
            with open(source, 'rb') as src:
                with open(target, 'wb') as dst:
                    while chunk := src.read(self.buffer_size):
                        dst.write(chunk)
                        bytes_copied += len(chunk)

            if self.preserve_permissions:
                shutil.copymode(source, target)
        except OSError as e:
            logging.error(f"FileSystemService - Cannot copy {source} to {target}: {e}")
            raise CopyError(source, e) from e

        try:
            self.change_file_times(target, source_stat.st_atime, source_stat.st_mtime)
        except CopyError as e:
            raise CopyError(source, e.cause) from e.cause
        return bytes_copied

    def copy_directory(self, source: Path | str, target: Path | str) -> int:
        """
        Recursively copy a directory to ``target``.

        ``target`` is created if missing. Nested symbolic links are
        recreated as links instead of being followed. Directory
        timestamps are preserved after their contents are written.
        A read-only source directory yields a read-only target directory,
        so later new entries inside it fail with CopyError.

        Returns:
            Number of leaves (files and links) copied.

        Raises:
            CopyError: If anything cannot be created or copied.
            ListingError: If a source directory cannot be listed.
        """
        source, target = Path(source), Path(target)

        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logging.error(f"FileSystemService - Cannot create directory {target}: {e}")
            raise CopyError(target, e) from e

        copied = 0
        for entry in self.list_directory(source):
            destination = target / entry.name

            if entry.is_symlink:
                self._copy_symlink(entry.full_path, destination)
                copied += 1
            elif entry.is_directory:
                copied += self.copy_directory(entry.full_path, destination)
            else:
                self.copy_file(entry.full_path, destination)
                copied += 1

        try:
            shutil.copystat(source, target)
        except OSError as e:
            raise CopyError(target, e) from e

        return copied

    @staticmethod
    def _copy_symlink(source: Path, target: Path) -> None:
        try:
            os.symlink(os.readlink(source), target)
        except OSError as e:
            logging.error(f"FileSystemService - Cannot copy symbolic link {source}: {e}")
            raise CopyError(source, e) from e

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    def delete_path(self, path: Path | str) -> int:
        """
        Delete a file, a symbolic link or a whole directory tree.

        Symbolic links are removed, never followed.

        Returns:
            Number of filesystem objects removed, directories included.

        Raises:
            DeleteError: If anything cannot be removed.
        """
        path = Path(path)

        try:
            if path.is_dir() and not path.is_symlink():
                deleted = 0
                for child in sorted(path.iterdir()):
                    deleted += self.delete_path(child)
                path.rmdir()
                return deleted + 1

            path.unlink()
            return 1
        except OSError as e:
            logging.error(f"FileSystemService - Cannot delete {path}: {e}")
            raise DeleteError(path, e) from e

