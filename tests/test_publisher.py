"""Tests for atomic config publishing."""

import os
import stat
from unittest.mock import patch

import pytest

from nginx_upstream_sync.exceptions import PublishError
from nginx_upstream_sync.nginx.publisher import DEFAULT_FILE_MODE, ConfigPublisher


class TestConfigPublisher:
    def test_writes_new_file(self, tmp_path):
        dest = tmp_path / "reverse-proxy.conf"
        ConfigPublisher(dest).publish("upstream x {}\n")
        assert dest.read_text() == "upstream x {}\n"
        assert stat.S_IMODE(dest.stat().st_mode) == DEFAULT_FILE_MODE

    def test_replaces_existing_file(self, tmp_path):
        dest = tmp_path / "reverse-proxy.conf"
        dest.write_text("old contents that are much longer than the new ones\n")
        ConfigPublisher(dest).publish("new\n")
        assert dest.read_text() == "new\n"

    def test_preserves_existing_mode(self, tmp_path):
        dest = tmp_path / "reverse-proxy.conf"
        dest.write_text("old")
        os.chmod(dest, 0o640)
        ConfigPublisher(dest).publish("new")
        assert stat.S_IMODE(dest.stat().st_mode) == 0o640

    def test_leaves_no_temporary_files(self, tmp_path):
        dest = tmp_path / "reverse-proxy.conf"
        ConfigPublisher(dest).publish("a")
        ConfigPublisher(dest).publish("b")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["reverse-proxy.conf"]

    def test_uses_rename_not_in_place_write(self, tmp_path):
        dest = tmp_path / "reverse-proxy.conf"
        dest.write_text("old")
        inode_before = dest.stat().st_ino
        ConfigPublisher(dest).publish("new")
        assert dest.stat().st_ino != inode_before

    def test_missing_directory_raises(self, tmp_path):
        dest = tmp_path / "no-such-dir" / "reverse-proxy.conf"
        with pytest.raises(PublishError) as exc_info:
            ConfigPublisher(dest).publish("x")
        assert exc_info.value.destination == str(dest)

    def test_failed_rename_keeps_old_file_and_cleans_up(self, tmp_path):
        dest = tmp_path / "reverse-proxy.conf"
        dest.write_text("old")
        with patch("nginx_upstream_sync.nginx.publisher.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(PublishError, match="disk full"):
                ConfigPublisher(dest).publish("new")
        assert dest.read_text() == "old"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["reverse-proxy.conf"]
