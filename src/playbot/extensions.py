"""Classify directory entries by file extension.

Extensions are given without the leading dot (``"mp3"``, not ``".mp3"``)
and are compared case-sensitively.  The empty string matches files whose
name contains no dot at all, e.g. ``radio``.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum, auto

from playbot.errors import EmptyExtensionSetError, ExtensionsOverlapError


class EntryKind(Enum):
    MEDIA = auto()
    PLAYLIST = auto()
    LIBRARY = auto()


def extension_of(name: str) -> str:
    """Return everything after the first dot in *name*.

    ``"song.tar.mp3"`` gives ``"tar.mp3"``; ``"radio"`` gives ``""``.
    """
    return name.partition(".")[2]


def strip_extension(name: str) -> str:
    """Return *name* up to its first dot, or *name* itself if that is empty."""
    return name.partition(".")[0] or name


class ExtensionClassifier:
    """Two disjoint lookup sets: playable media and playlists."""

    def __init__(
        self,
        media_extensions: Iterable[str],
        playlist_extensions: Iterable[str] = (),
    ) -> None:
        media = list(media_extensions)
        if not media:
            raise EmptyExtensionSetError()

        self._media: frozenset[str] = frozenset(media)
        playlists = list(playlist_extensions)
        for ext in playlists:
            if ext in self._media:
                raise ExtensionsOverlapError(ext)
        self._playlists: frozenset[str] = frozenset(playlists)

    @property
    def media_extensions(self) -> frozenset[str]:
        return self._media

    @property
    def playlist_extensions(self) -> frozenset[str]:
        return self._playlists

    def is_media(self, extension: str) -> bool:
        return extension in self._media

    def is_playlist(self, extension: str) -> bool:
        return extension in self._playlists

    def classify(self, name: str) -> EntryKind | None:
        """Return the kind of file *name* is, or ``None`` if unrecognised."""
        ext = extension_of(name)
        if ext in self._media:
            return EntryKind.MEDIA
        if ext in self._playlists:
            return EntryKind.PLAYLIST
        return None
