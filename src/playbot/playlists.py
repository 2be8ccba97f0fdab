"""Playlist parsers.

A parser turns a playlist file into a :class:`ParsedPlaylist`.  Parsers are
registered per extension; extensions with no registered parser fall back to
:func:`parse_self_reference`, which treats the playlist file as its own sole
member.
"""

from __future__ import annotations

import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping

from playbot.extensions import strip_extension


@dataclass(frozen=True)
class PlaylistTrack:
    path: Path
    title: str | None = None


@dataclass(frozen=True)
class ParsedPlaylist:
    title: str | None = None
    tracks: tuple[PlaylistTrack, ...] = field(default_factory=tuple)


PlaylistParser = Callable[[Path], ParsedPlaylist]


def parse_self_reference(path: Path) -> ParsedPlaylist:
    """Treat *path* as a playlist containing only itself."""
    return ParsedPlaylist(
        title=strip_extension(path.name),
        tracks=(PlaylistTrack(path),),
    )


def _entry_path(line: str, parent: Path) -> Path:
    if line.lower().startswith("file://"):
        return Path(urllib.request.url2pathname(urllib.parse.urlparse(line).path))
    p = Path(line)
    if not p.is_absolute():
        p = parent / p
    return p


def parse_m3u(path: Path) -> ParsedPlaylist:
    """Parse an (extended) M3U playlist.

    Blank lines and ``#`` comments are skipped, except for two directives:
    ``#PLAYLIST:<title>`` sets the playlist title and
    ``#EXTINF:<seconds>,<title>`` titles the entry that follows it.
    Relative entries are resolved against the playlist's directory.  Entries
    are not checked for existence.
    """
    text = path.read_text(encoding="utf-8-sig")
    parent = path.parent
    title: str | None = None
    pending_title: str | None = None
    tracks: list[PlaylistTrack] = []

    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        if line.startswith("#"):
            directive, _, value = line.partition(":")
            if directive == "#PLAYLIST" and value.strip():
                title = value.strip()
            elif directive == "#EXTINF":
                _, _, entry_title = value.partition(",")
                pending_title = entry_title.strip() or None
            continue
        tracks.append(PlaylistTrack(_entry_path(line, parent), pending_title))
        pending_title = None

    return ParsedPlaylist(
        title=title or strip_extension(path.name),
        tracks=tuple(tracks),
    )


M3U_PARSERS: Mapping[str, PlaylistParser] = {
    "m3u": parse_m3u,
    "m3u8": parse_m3u,
}
