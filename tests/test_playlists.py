"""Tests for playlist parsers."""

from __future__ import annotations

import pytest

from playbot.playlists import (
    M3U_PARSERS,
    PlaylistTrack,
    parse_m3u,
    parse_self_reference,
)


class TestSelfReference:
    def test_refers_to_itself(self, tmp_path):
        path = tmp_path / "mix.m3u"
        parsed = parse_self_reference(path)
        assert parsed.title == "mix"
        assert parsed.tracks == (PlaylistTrack(path),)

    def test_does_not_read_file(self, tmp_path):
        parsed = parse_self_reference(tmp_path / "missing.pls")
        assert parsed.title == "missing"


class TestParseM3u:
    def test_plain_entries(self, tmp_path):
        p = tmp_path / "mix.m3u"
        p.write_text("a.mp3\n\nsub/b.mp3\n")
        parsed = parse_m3u(p)
        assert parsed.title == "mix"
        assert [t.path for t in parsed.tracks] == [tmp_path / "a.mp3", tmp_path / "sub" / "b.mp3"]
        assert [t.title for t in parsed.tracks] == [None, None]

    def test_absolute_entries_kept(self, tmp_path):
        p = tmp_path / "mix.m3u"
        p.write_text("/srv/music/a.mp3\n")
        assert parse_m3u(p).tracks[0].path.as_posix() == "/srv/music/a.mp3"

    def test_extended_directives(self, tmp_path):
        p = tmp_path / "mix.m3u8"
        p.write_text(
            "#EXTM3U\n"
            "#PLAYLIST:Road Trip\n"
            "#EXTINF:123,Artist - Song\n"
            "song.mp3\n"
            "# just a comment\n"
            "other.mp3\n"
        )
        parsed = parse_m3u(p)
        assert parsed.title == "Road Trip"
        assert parsed.tracks == (
            PlaylistTrack(tmp_path / "song.mp3", "Artist - Song"),
            PlaylistTrack(tmp_path / "other.mp3", None),
        )

    def test_file_uri(self, tmp_path):
        p = tmp_path / "mix.m3u"
        p.write_text("file:///srv/music/My%20Song.mp3\n")
        assert parse_m3u(p).tracks[0].path.as_posix() == "/srv/music/My Song.mp3"

    def test_utf8_bom(self, tmp_path):
        p = tmp_path / "mix.m3u"
        p.write_bytes("\ufeff#PLAYLIST:Bom\na.mp3\n".encode("utf-8"))
        assert parse_m3u(p).title == "Bom"

    def test_empty_file(self, tmp_path):
        p = tmp_path / "mix.m3u"
        p.touch()
        parsed = parse_m3u(p)
        assert parsed.title == "mix"
        assert parsed.tracks == ()

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parse_m3u(tmp_path / "missing.m3u")

    def test_registry(self):
        assert M3U_PARSERS["m3u"] is parse_m3u
        assert M3U_PARSERS["m3u8"] is parse_m3u
