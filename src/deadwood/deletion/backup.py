"""Byte-exact backups of source files touched by a deletion run.

Layout of one backup directory:

    safe-deletion-<UTC timestamp>/
        manifest.json       {version, created_at, restored_at, files: [...]}
        files/0.bin         exact original bytes of files[0]
        files/1.bin         ...

Blobs are written first and the manifest last, atomically, so a backup
directory either has a complete manifest or is not a backup at all.
"""

from __future__ import annotations

import hashlib
import json
import os
import shutil
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, Union

from ..exceptions import BackupError, FileSystemError
from ..logging_config import get_logger

logger = get_logger(__name__)

MANIFEST_NAME = "manifest.json"
BLOB_DIR = "files"
FORMAT_VERSION = 1


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def read_bytes(path: Union[str, Path]) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise FileSystemError(path, str(e))


def atomic_write_bytes(path: Union[str, Path], data: bytes) -> None:
    """Replace ``path`` with ``data`` so readers see old or new bytes, never a mix."""
    target = Path(path)
    try:
        fd, tmp_name = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            if target.exists():
                shutil.copymode(target, tmp_name)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise FileSystemError(target, str(e))


@dataclass(frozen=True)
class BackupEntry:
    path: str
    blob: str
    sha256: str
    size: int


class Backup:
    """A restorable copy of every file a run may touch.

    Created before the first mutation, retained after the run for manual
    recovery, and consumed by ``restore``.
    """

    def __init__(
        self,
        path: Path,
        entries: list[BackupEntry],
        created_at: str,
        restored_at: Optional[str] = None,
    ):
        self.path = path
        self.entries = {e.path: e for e in entries}
        self.created_at = created_at
        self.restored_at = restored_at

    @classmethod
    def create(
        cls, files: Iterable[Union[str, Path]], backup_root: Union[str, Path]
    ) -> "Backup":
        """Copy ``files`` into a new timestamped directory under ``backup_root``.

        Raises:
            FileSystemError: If a file cannot be read or the backup cannot be written
        """
        paths = sorted({str(Path(f).resolve()) for f in files})
        created_at = datetime.now(timezone.utc)
        directory = cls._new_directory(Path(backup_root), created_at)
        blob_dir = directory / BLOB_DIR

        try:
            blob_dir.mkdir(parents=True)
        except OSError as e:
            raise FileSystemError(blob_dir, str(e))

        entries: list[BackupEntry] = []
        for i, file_path in enumerate(paths):
            data = read_bytes(file_path)
            blob = f"{BLOB_DIR}/{i}.bin"
            atomic_write_bytes(directory / blob, data)
            entries.append(BackupEntry(file_path, blob, sha256_bytes(data), len(data)))

        backup = cls(directory, entries, created_at.isoformat())
        backup._write_manifest()
        logger.info(f"Backed up {len(entries)} file(s) to {directory}")
        return backup

    @classmethod
    def open(cls, path: Union[str, Path]) -> "Backup":
        """Load an existing backup and check that every blob is intact.

        Raises:
            BackupError: If the manifest or any blob is missing or corrupt
        """
        directory = Path(path)
        manifest_path = directory / MANIFEST_NAME
        try:
            manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise BackupError(directory, f"unreadable manifest: {e}")

        if manifest.get("version") != FORMAT_VERSION:
            raise BackupError(directory, f"unsupported format version {manifest.get('version')!r}")

        try:
            entries = [BackupEntry(**item) for item in manifest["files"]]
        except (KeyError, TypeError) as e:
            raise BackupError(directory, f"malformed manifest: {e}")

        backup = cls(
            directory, entries, manifest.get("created_at", ""), manifest.get("restored_at")
        )
        for entry in entries:
            backup.original_bytes(entry.path)
        return backup

    def original_bytes(self, file_path: Union[str, Path]) -> bytes:
        """Exact pre-run content of ``file_path``, verified against its checksum."""
        entry = self.entries.get(str(Path(file_path).resolve()))
        if entry is None:
            raise BackupError(self.path, f"{file_path} is not part of this backup")
        try:
            data = (self.path / entry.blob).read_bytes()
        except OSError as e:
            raise BackupError(self.path, f"missing blob for {entry.path}: {e}")
        if sha256_bytes(data) != entry.sha256:
            raise BackupError(self.path, f"checksum mismatch for {entry.path}")
        return data

    @property
    def files(self) -> list[str]:
        return sorted(self.entries)

    def restore(
        self, files: Optional[Iterable[Union[str, Path]]] = None, force: bool = False
    ) -> list[str]:
        """Write original bytes back to every captured file (or just ``files``).

        A full restore marks the backup as consumed; restoring it again
        requires ``force=True``.

        Returns:
            Paths that were restored
        """
        full = files is None
        if full and self.restored_at and not force:
            raise BackupError(self.path, f"already restored at {self.restored_at}")

        targets = self.files if full else sorted({str(Path(f).resolve()) for f in files})
        for file_path in targets:
            atomic_write_bytes(file_path, self.original_bytes(file_path))

        if full:
            self.restored_at = datetime.now(timezone.utc).isoformat()
            self._write_manifest()
            logger.info(f"Restored {len(targets)} file(s) from {self.path}")
        return targets

    def discard(self) -> None:
        """Delete the backup directory."""
        try:
            shutil.rmtree(self.path)
        except OSError as e:
            raise FileSystemError(self.path, str(e))

    def _write_manifest(self) -> None:
        manifest = {
            "version": FORMAT_VERSION,
            "created_at": self.created_at,
            "restored_at": self.restored_at,
            "files": [
                {"path": e.path, "blob": e.blob, "sha256": e.sha256, "size": e.size}
                for e in (self.entries[p] for p in self.files)
            ],
        }
        data = json.dumps(manifest, indent=2).encode("utf-8")
        atomic_write_bytes(self.path / MANIFEST_NAME, data)

    @staticmethod
    def _new_directory(root: Path, created_at: datetime) -> Path:
        stamp = created_at.strftime("%Y%m%dT%H%M%S%fZ")
        candidate = root / f"safe-deletion-{stamp}"
        suffix = 1
        while candidate.exists():
            candidate = root / f"safe-deletion-{stamp}-{suffix}"
            suffix += 1
        return candidate
