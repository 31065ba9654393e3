"""Tests for byte-exact backups."""

import json

import pytest

from deadwood.deletion import Backup
from deadwood.exceptions import BackupError, FileSystemError


@pytest.fixture
def source_files(tmp_path):
    src = tmp_path / "src"
    src.mkdir()
    first = src / "one.py"
    second = src / "two.py"
    first.write_bytes(b"def a():\r\n    return 1\r\n")
    second.write_bytes(b"def b():\n    pass")
    return [first, second]


class TestBackupCreate:
    def test_manifest_and_blobs(self, tmp_path, source_files):
        backup = Backup.create(source_files, tmp_path / "backups")
        manifest = json.loads((backup.path / "manifest.json").read_text())
        assert manifest["version"] == 1
        assert manifest["restored_at"] is None
        assert len(manifest["files"]) == 2
        assert backup.path.name.startswith("safe-deletion-")
        assert backup.files == sorted(str(p.resolve()) for p in source_files)

    def test_original_bytes_are_exact(self, tmp_path, source_files):
        backup = Backup.create(source_files, tmp_path / "backups")
        assert backup.original_bytes(source_files[0]) == b"def a():\r\n    return 1\r\n"

    def test_two_backups_get_distinct_directories(self, tmp_path, source_files):
        first = Backup.create(source_files, tmp_path / "backups")
        second = Backup.create(source_files, tmp_path / "backups")
        assert first.path != second.path

    def test_missing_source_raises(self, tmp_path):
        with pytest.raises(FileSystemError):
            Backup.create([tmp_path / "nope.py"], tmp_path / "backups")

    def test_unknown_file_raises(self, tmp_path, source_files):
        backup = Backup.create(source_files[:1], tmp_path / "backups")
        with pytest.raises(BackupError, match="not part of this backup"):
            backup.original_bytes(source_files[1])


class TestBackupRestore:
    def test_restore_is_byte_exact(self, tmp_path, source_files):
        originals = [p.read_bytes() for p in source_files]
        backup = Backup.create(source_files, tmp_path / "backups")
        for p in source_files:
            p.write_bytes(b"mangled")

        restored = Backup.open(backup.path).restore()

        assert len(restored) == 2
        assert [p.read_bytes() for p in source_files] == originals

    def test_restore_twice_requires_force(self, tmp_path, source_files):
        backup = Backup.create(source_files, tmp_path / "backups")
        Backup.open(backup.path).restore()

        reopened = Backup.open(backup.path)
        assert reopened.restored_at is not None
        with pytest.raises(BackupError, match="already restored"):
            reopened.restore()
        assert len(reopened.restore(force=True)) == 2

    def test_partial_restore_does_not_consume(self, tmp_path, source_files):
        backup = Backup.create(source_files, tmp_path / "backups")
        source_files[0].write_bytes(b"changed")
        backup.restore([source_files[0]])
        assert source_files[0].read_bytes() == b"def a():\r\n    return 1\r\n"
        assert Backup.open(backup.path).restored_at is None

    def test_corrupt_blob_is_rejected(self, tmp_path, source_files):
        backup = Backup.create(source_files, tmp_path / "backups")
        (backup.path / "files" / "0.bin").write_bytes(b"tampered")
        with pytest.raises(BackupError, match="checksum mismatch"):
            Backup.open(backup.path)

    def test_missing_manifest_is_rejected(self, tmp_path):
        (tmp_path / "empty").mkdir()
        with pytest.raises(BackupError, match="unreadable manifest"):
            Backup.open(tmp_path / "empty")

    def test_discard_removes_directory(self, tmp_path, source_files):
        backup = Backup.create(source_files, tmp_path / "backups")
        backup.discard()
        assert not backup.path.exists()
