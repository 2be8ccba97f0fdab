"""Errors raised while opening a library.

Every error carries a breadcrumb trail: the directories being processed
when the failure surfaced, outermost first.  ``str(err)`` renders the trail
the way the bot shows it to users::

    open library /srv/music: open library /srv/music/Live: library is empty
"""

from __future__ import annotations

from pathlib import Path


class LibraryError(Exception):
    """Base class for every failure while opening a library."""

    def __init__(self, reason: str, path: str | Path | None = None) -> None:
        self.reason = reason
        self.trail: list[Path] = []
        if path is not None:
            self.trail.append(Path(path))
        super().__init__(reason)

    def add_breadcrumb(self, path: str | Path) -> None:
        """Record that the error propagated out of *path*."""
        self.trail.insert(0, Path(path))

    @property
    def path(self) -> Path | None:
        """Directory closest to the failure, if known."""
        return self.trail[-1] if self.trail else None

    def __str__(self) -> str:
        prefix = "".join(f"open library {p}: " for p in self.trail)
        return prefix + self.reason


class EmptyExtensionSetError(LibraryError):
    """No media extensions were configured."""

    def __init__(self, path: str | Path | None = None) -> None:
        super().__init__(
            "empty extension set: at least one media extension must be specified",
            path,
        )


class ExtensionsOverlapError(LibraryError):
    """A playlist extension is also configured as a media extension."""

    def __init__(self, extension: str, path: str | Path | None = None) -> None:
        self.extension = extension
        super().__init__(
            f"playlist extension {extension!r}: "
            "playlist extension set may not overlap media file extension set",
            path,
        )


class OpenError(LibraryError):
    """A directory could not be listed."""

    def __init__(self, path: str | Path, cause: OSError) -> None:
        self.cause = cause
        super().__init__(cause.strerror or str(cause), path)


class EmptyLibraryError(LibraryError):
    """A directory in the tree has no entries at all."""

    def __init__(self, path: str | Path) -> None:
        super().__init__("library is empty", path)


class TraversalLimitExceeded(LibraryError):
    """The tree is too deep or loops back on one of its ancestors."""


class PlaylistParseError(LibraryError):
    """A playlist file could not be read by its parser."""

    def __init__(self, playlist: str | Path, cause: Exception, path: str | Path) -> None:
        self.playlist = Path(playlist)
        self.cause = cause
        super().__init__(f"playlist {self.playlist.name}: {cause}", path)
