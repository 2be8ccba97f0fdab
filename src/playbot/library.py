"""Media library: an in-memory tree of a directory of playable media.

Expected directory layout::

    <root>/
        Album A/
            01 - First Track.mp3
            cover.jpg            (unrecognised, skipped)
            Bonus/
                demo.mp3
        favourites.m3u
        radio                    (matches the "" extension)

One :class:`Library` is built per directory.  Files directly inside it are
classified by extension into :class:`MediaFile` and :class:`PlaylistFile`
entries; sub-directories become nested libraries.  The whole tree is built
once by :func:`open_library` and never touches the disk afterwards, so a
built library may be shared freely between readers.
"""

from __future__ import annotations

import errno
import logging
import os
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar, Protocol, Union

from playbot.errors import (
    EmptyLibraryError,
    LibraryError,
    OpenError,
    PlaylistParseError,
    TraversalLimitExceeded,
)
from playbot.extensions import (
    EntryKind,
    ExtensionClassifier,
    extension_of,
    strip_extension,
)
from playbot.playlists import PlaylistParser, PlaylistTrack, parse_self_reference

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32


class Playable(Protocol):
    """Something that can be put on the queue."""

    kind: ClassVar[EntryKind]

    @property
    def title(self) -> str: ...

    def files(self) -> list[Path]:
        """Paths of the media files this item refers to."""
        ...

    def nested(self) -> list[Library]:
        """Sub-trees that can be played on their own."""
        ...


@dataclass(frozen=True)
class MediaFile:
    """A single media file.  Its title is the file name."""

    path: Path
    title: str

    kind: ClassVar[EntryKind] = EntryKind.MEDIA

    def files(self) -> list[Path]:
        return [self.path]

    def nested(self) -> list[Library]:
        return []


@dataclass(frozen=True)
class PlaylistFile:
    """A playlist file and the tracks it refers to.

    Without a parser for its format, the only track is the playlist file
    itself, so callers must cope with :meth:`files` returning a path that is
    not directly playable.
    """

    path: Path
    title: str
    tracks: tuple[PlaylistTrack, ...] = field(default_factory=tuple)

    kind: ClassVar[EntryKind] = EntryKind.PLAYLIST

    def files(self) -> list[Path]:
        return [track.path for track in self.tracks]

    @property
    def entry_titles(self) -> list[str | None]:
        return [track.title for track in self.tracks]

    def nested(self) -> list[Library]:
        return []


Entry = Union[MediaFile, PlaylistFile]


class Library:
    """One directory of the tree: its entries plus its sub-directories."""

    kind: ClassVar[EntryKind] = EntryKind.LIBRARY

    def __init__(
        self,
        root: str | Path,
        entries: Iterable[Entry] = (),
        nested: Iterable[Library] = (),
    ) -> None:
        self._root = Path(root)
        self._entries: tuple[Entry, ...] = tuple(entries)
        self._nested: tuple[Library, ...] = tuple(nested)

    @property
    def root(self) -> Path:
        """Directory this node was built from."""
        return self._root

    @property
    def title(self) -> str:
        return self._root.name or str(self._root)

    @property
    def entries(self) -> tuple[Entry, ...]:
        return self._entries

    def files(self) -> list[Path]:
        """Media files directly in this directory, in listing order.

        Playlists are left out; they are not meant to be queued in bulk.
        """
        return [e.path for e in self._entries if e.kind is EntryKind.MEDIA]

    def nested(self) -> list[Library]:
        return list(self._nested)

    def playlists(self) -> list[PlaylistFile]:
        return [e for e in self._entries if e.kind is EntryKind.PLAYLIST]

    def __repr__(self) -> str:
        return (
            f"<Library {str(self._root)!r} "
            f"({len(self._entries)} entries, {len(self._nested)} nested)>"
        )

    def __str__(self) -> str:
        lines: list[str] = []
        for child in self._nested:
            lines.append(f"[dir] -----{child.title}-----\n")
            lines.append(f"{child}\n")
        for entry in self._entries:
            if entry.kind is EntryKind.PLAYLIST:
                lines.append(f"[playlist] {entry.title}\n")
            else:
                lines.append(f"{entry.title}\n")
        return "".join(lines)


class _TreeBuilder:
    def __init__(
        self,
        classifier: ExtensionClassifier,
        parsers: Mapping[str, PlaylistParser],
        max_depth: int,
        follow_symlinks: bool,
    ) -> None:
        self._classifier = classifier
        self._parsers = parsers
        self._max_depth = max_depth
        self._follow_symlinks = follow_symlinks

    def build(
        self,
        root: Path,
        depth: int = 0,
        ancestors: frozenset[tuple[int, int]] = frozenset(),
    ) -> Library:
        if depth > self._max_depth:
            raise TraversalLimitExceeded(
                f"maximum depth of {self._max_depth} exceeded", root
            )

        try:
            with os.scandir(root) as it:
                dirents = sorted(it, key=lambda d: d.name)
            st = os.stat(root)
        except OSError as exc:
            raise OpenError(root, exc) from exc

        identity = (st.st_dev, st.st_ino)
        if identity in ancestors:
            raise TraversalLimitExceeded(
                "directory loops back on one of its ancestors", root
            )
        ancestors = ancestors | {identity}

        if not dirents:
            raise EmptyLibraryError(root)

        entries: list[Entry] = []
        nested: list[Library] = []
        for dirent in dirents:
            path = root / dirent.name
            if self._is_dir(root, dirent):
                try:
                    nested.append(self.build(path, depth + 1, ancestors))
                except LibraryError as exc:
                    exc.add_breadcrumb(root)
                    raise
                continue

            kind = self._classifier.classify(dirent.name)
            if kind is EntryKind.MEDIA:
                # TODO: take the title from the file's tags once a metadata
                # reader is wired in.
                entries.append(MediaFile(path=path, title=dirent.name))
            elif kind is EntryKind.PLAYLIST:
                entries.append(self._load_playlist(root, path))
            else:
                logger.debug("Skipping %s: unrecognised extension", path)

        logger.debug(
            "Loaded %s: %d entries, %d nested", root, len(entries), len(nested)
        )
        return Library(root, entries, nested)

    def _is_dir(self, root: Path, dirent: os.DirEntry) -> bool:
        try:
            return dirent.is_dir(follow_symlinks=self._follow_symlinks)
        except OSError as exc:
            path = root / dirent.name
            if exc.errno == errno.ELOOP:
                err: LibraryError = TraversalLimitExceeded(
                    "symbolic link loops back on itself", path
                )
            else:
                err = OpenError(path, exc)
            err.add_breadcrumb(root)
            raise err from exc

    def _load_playlist(self, root: Path, path: Path) -> PlaylistFile:
        parser = self._parsers.get(extension_of(path.name), parse_self_reference)
        try:
            parsed = parser(path)
        except (OSError, ValueError) as exc:
            raise PlaylistParseError(path, exc, root) from exc
        return PlaylistFile(
            path=path,
            title=parsed.title or strip_extension(path.name),
            tracks=parsed.tracks,
        )


def open_library(
    root: str | Path,
    media_extensions: Sequence[str],
    playlist_extensions: Sequence[str] = (),
    *,
    parsers: Mapping[str, PlaylistParser] | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
    follow_symlinks: bool = True,
) -> Library:
    """Load the library rooted at *root*.

    Parameters
    ----------
    root:
        Directory to load.  Stored as given; relative roots give relative
        file paths.
    media_extensions:
        Extensions (without the dot) of directly playable files.  Must not be
        empty.  ``""`` matches files with no extension.
    playlist_extensions:
        Extensions of playlist files.  May be empty; may not share any
        element with *media_extensions*.
    parsers:
        Playlist parsers keyed by extension.  Playlist extensions without a
        parser are loaded as playlists that refer only to themselves.
    max_depth:
        Deepest level of nesting below *root* that is loaded.
    follow_symlinks:
        Descend into symlinked directories.  When false they are classified
        by name like any other file.

    Raises :class:`~playbot.errors.LibraryError` (one of its subclasses) on
    the first failure anywhere in the tree; no partial library is returned.
    """
    root = Path(root)
    try:
        classifier = ExtensionClassifier(media_extensions, playlist_extensions)
    except LibraryError as exc:
        exc.add_breadcrumb(root)
        raise

    builder = _TreeBuilder(classifier, parsers or {}, max_depth, follow_symlinks)
    return builder.build(root)
