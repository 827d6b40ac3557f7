"""Tests for directory enumeration."""

import os
import sys

import pytest

from s3content.exceptions import ContentIOError
from s3content.sync.scanner import DirectoryScanner, LocalFile, enumerate_files


class TestLocalFile:
    """Tests for LocalFile."""

    def test_from_path(self, tmp_path):
        (tmp_path / "sub").mkdir()
        file_path = tmp_path / "sub" / "page.html"
        file_path.write_text("hello")

        local_file = LocalFile.from_path(file_path, tmp_path)

        assert local_file.path == file_path
        assert local_file.relative_path == "sub/page.html"
        assert local_file.size == 5


class TestEnumerateFiles:
    """Tests for enumerate_files and DirectoryScanner.scan_local."""

    def test_site_mapping(self, site):
        """Each regular file maps from its absolute path to its key."""
        files = enumerate_files(site)

        assert files == {
            str(site / "a.html"): "a.html",
            str(site / "img" / "b.png"): "img/b.png",
        }

    def test_directories_are_not_entries(self, tmp_path):
        (tmp_path / "empty" / "nested").mkdir(parents=True)
        (tmp_path / "x.txt").write_text("x")

        files = enumerate_files(tmp_path)

        assert list(files.values()) == ["x.txt"]

    def test_empty_tree(self, tmp_path):
        assert enumerate_files(tmp_path) == {}

    def test_one_entry_per_file(self, tmp_path):
        for i in range(3):
            sub = tmp_path / f"d{i}"
            sub.mkdir()
            for j in range(4):
                (sub / f"f{j}.css").write_text("body {}")

        files = enumerate_files(tmp_path)

        assert len(files) == 12
        assert len(set(files.values())) == 12

    def test_stable_across_runs(self, site):
        assert enumerate_files(site) == enumerate_files(site)

    def test_relative_root_gives_absolute_identifiers(self, site, monkeypatch):
        monkeypatch.chdir(site.parent)

        files = enumerate_files(site.name)

        assert all(os.path.isabs(path) for path in files)
        assert sorted(files.values()) == ["a.html", "img/b.png"]

    def test_scan_local_is_sorted(self, site):
        files = DirectoryScanner().scan_local(site)
        assert [f.relative_path for f in files] == ["a.html", "img/b.png"]

    def test_missing_root_raises(self, tmp_path):
        """A root that does not exist fails with an I/O error."""
        with pytest.raises(ContentIOError, match="does not exist"):
            enumerate_files(tmp_path / "nonexistent")

    def test_root_is_file_raises(self, tmp_path):
        file_path = tmp_path / "file.txt"
        file_path.write_text("x")

        with pytest.raises(ContentIOError, match="not a directory"):
            enumerate_files(file_path)

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX symlinks")
    def test_broken_symlink_raises(self, tmp_path):
        (tmp_path / "ok.txt").write_text("x")
        (tmp_path / "dangling").symlink_to(tmp_path / "missing")

        with pytest.raises(ContentIOError, match="Broken symbolic link"):
            enumerate_files(tmp_path)

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX symlinks")
    def test_symlinked_file_is_included(self, tmp_path):
        target = tmp_path / "target.txt"
        target.write_text("x")
        root = tmp_path / "root"
        root.mkdir()
        (root / "link.txt").symlink_to(target)

        files = enumerate_files(root)

        assert files == {str(root / "link.txt"): "link.txt"}

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX symlinks")
    def test_symlink_loop_is_not_followed(self, tmp_path):
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "a.txt").write_text("x")
        (tmp_path / "sub" / "loop").symlink_to(tmp_path)

        files = enumerate_files(tmp_path)

        assert sorted(files.values()) == ["sub/a.txt"]

    @pytest.mark.skipif(
        sys.platform == "win32" or os.geteuid() == 0,
        reason="permissions are not enforced",
    )
    def test_unreadable_directory_raises(self, tmp_path):
        """Permission errors abort the scan instead of being skipped."""
        locked = tmp_path / "locked"
        locked.mkdir()
        (locked / "secret.txt").write_text("x")
        locked.chmod(0o000)
        try:
            with pytest.raises(ContentIOError, match="Unable to read directory"):
                enumerate_files(tmp_path)
        finally:
            locked.chmod(0o755)
