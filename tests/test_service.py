"""Tests for the bot service."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest

from playbot.config import Config
from playbot.library import Library, PlaylistFile
from playbot.service import BotService


@pytest.fixture()
def music_dir(tmp_path):
    root = tmp_path / "music"
    album = root / "Album A"
    bonus = album / "Bonus"
    bonus.mkdir(parents=True)
    (album / "01 - First.mp3").touch()
    (album / "02 - Second.mp3").touch()
    (album / "cover.jpg").touch()
    (bonus / "demo.mp3").touch()
    (root / "best.m3u").write_text("#PLAYLIST:Best\nAlbum A/02 - Second.mp3\n")
    return root


@pytest.fixture()
def config(music_dir, tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()
    return Config(
        libraries={"music": str(music_dir), "broken": str(empty)},
        media_extensions=["mp3"],
        playlist_extensions=["m3u"],
        admins_enabled=True,
        admins=["alice"],
    )


@pytest.fixture()
def service(config):
    svc = BotService(config)
    svc.start()
    return svc


class TestStart:
    def test_opens_configured_libraries(self, service, music_dir):
        assert list(service.libraries) == ["music"]
        assert service.libraries["music"].root == music_dir

    def test_records_failures(self, service, tmp_path):
        assert list(service.failures) == ["broken"]
        assert service.failures["broken"] == (
            f"open library {tmp_path / 'empty'}: library is empty"
        )

    def test_logs_failures(self, config, caplog):
        with caplog.at_level(logging.WARNING, logger="playbot.service"):
            BotService(config).start()
        assert "broken" in caplog.text

    def test_start_again_reloads(self, service):
        service.start()
        assert list(service.libraries) == ["music"]
        assert list(service.failures) == ["broken"]

    def test_stub_playlists_by_default(self, service, music_dir):
        playlist = service.resolve("music/best")
        assert playlist.files() == [music_dir / "best.m3u"]

    def test_parse_playlists(self, config, music_dir):
        config.parse_playlists = True
        svc = BotService(config)
        svc.start()
        playlist = svc.resolve("music/Best")
        assert isinstance(playlist, PlaylistFile)
        assert playlist.files() == [music_dir / "Album A" / "02 - Second.mp3"]

    def test_symlink_loop_does_not_stop_other_libraries(self, config, music_dir, tmp_path):
        bad = tmp_path / "bad"
        bad.mkdir()
        (bad / "song.mp3").touch()
        (bad / "loop").symlink_to(bad / "loop")
        config.libraries = {"bad": str(bad), "good": str(music_dir)}

        svc = BotService(config)
        svc.start()
        assert list(svc.libraries) == ["good"]
        assert list(svc.failures) == ["bad"]
        assert svc.failures["bad"].startswith(f"open library {bad}: open library {bad / 'loop'}: ")

    def test_stop_stops_audio(self, config):
        audio = MagicMock()
        svc = BotService(config, audio=audio)
        svc.stop()
        audio.stop.assert_called_once()


class TestResolve:
    def test_library_name(self, service):
        assert isinstance(service.resolve("music"), Library)

    def test_nested_path(self, service, music_dir):
        lib = service.resolve("music/Album A/Bonus")
        assert lib.root == music_dir / "Album A" / "Bonus"

    def test_trailing_slash(self, service):
        assert service.resolve("music/Album A/").title == "Album A"

    def test_playlist_by_file_name(self, service, music_dir):
        assert service.resolve("music/best.m3u").path == music_dir / "best.m3u"

    def test_unknown_library(self, service):
        with pytest.raises(LookupError, match="No library named"):
            service.resolve("films")

    def test_failed_library(self, service):
        with pytest.raises(LookupError, match="unavailable: open library"):
            service.resolve("broken")

    def test_unknown_child(self, service):
        with pytest.raises(LookupError, match="Nothing named 'Live'"):
            service.resolve("music/Live")

    def test_playlist_only_at_end(self, service):
        with pytest.raises(LookupError):
            service.resolve("music/best/Album A")

    def test_empty_reference(self, service):
        with pytest.raises(LookupError):
            service.resolve("/")


class TestEnqueue:
    def test_enqueue_album(self, service, music_dir):
        assert service.enqueue("music/Album A") == 2
        assert service.player.queue == [
            music_dir / "Album A" / "01 - First.mp3",
            music_dir / "Album A" / "02 - Second.mp3",
        ]

    def test_enqueue_does_not_flatten_nested(self, service):
        assert service.enqueue("music") == 0

    def test_enqueue_playlist(self, service, music_dir):
        assert service.enqueue("music/best") == 1
        assert service.player.queue == [music_dir / "best.m3u"]


class TestPermissions:
    def test_regular_commands_always_allowed(self, service):
        assert service.has_permission("mallory", admin_command=False)

    def test_admin_command_requires_admin(self, service):
        assert service.has_permission("alice", admin_command=True)
        assert not service.has_permission("mallory", admin_command=True)

    def test_admins_disabled(self, config):
        config.admins_enabled = False
        assert BotService(config).has_permission("mallory", admin_command=True)
