"""The bot service: configuration, opened libraries and the playback queue.

Command handlers receive a :class:`BotService` explicitly; nothing here is
module-level state.  Libraries are opened once in :meth:`BotService.start`
and kept for the lifetime of the service.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Union

from playbot.errors import LibraryError
from playbot.library import Library, PlaylistFile, open_library
from playbot.playlists import M3U_PARSERS
from playbot.statemachine import QueuePlayer

if TYPE_CHECKING:
    from playbot.audio import AudioOutput
    from playbot.config import Config

logger = logging.getLogger(__name__)

Resolved = Union[Library, PlaylistFile]


class BotService:
    """Everything a command handler may touch."""

    def __init__(self, config: Config, audio: AudioOutput | None = None) -> None:
        self._config = config
        self._audio = audio
        self._libraries: dict[str, Library] = {}
        self._failures: dict[str, str] = {}
        self.player = QueuePlayer(audio)

    @property
    def config(self) -> Config:
        return self._config

    @property
    def audio(self) -> AudioOutput | None:
        return self._audio

    @property
    def libraries(self) -> dict[str, Library]:
        """Successfully opened libraries by configured name."""
        return dict(self._libraries)

    @property
    def failures(self) -> dict[str, str]:
        """Error message for every configured library that failed to open."""
        return dict(self._failures)

    def start(self) -> None:
        """Open every configured library.

        A library that fails to open is logged and left out; the others are
        still usable.
        """
        cfg = self._config
        parsers = M3U_PARSERS if cfg.parse_playlists else None
        self._libraries.clear()
        self._failures.clear()
        for name in cfg.libraries:
            root = cfg.library_root(name)
            try:
                library = open_library(
                    root,
                    cfg.media_extensions,
                    cfg.playlist_extensions,
                    parsers=parsers,
                    max_depth=cfg.max_depth,
                    follow_symlinks=cfg.follow_symlinks,
                )
            except LibraryError as exc:
                logger.warning("Library %r unavailable: %s", name, exc)
                self._failures[name] = str(exc)
                continue
            logger.info("Opened library %r at %s", name, root)
            self._libraries[name] = library

    def stop(self) -> None:
        if self._audio is not None:
            self._audio.stop()

    def resolve(self, ref: str) -> Resolved:
        """Find the library or playlist named by *ref*.

        *ref* is a library name followed by ``/``-separated titles of nested
        libraries, e.g. ``music/Album A/Bonus``.  The last component may
        instead name a playlist, by title or by file name.

        Raises ``LookupError`` when nothing matches.
        """
        parts = [p for p in ref.split("/") if p]
        if not parts:
            raise LookupError("No library given.")
        name, rest = parts[0], parts[1:]
        if name in self._failures:
            raise LookupError(f"Library '{name}' is unavailable: {self._failures[name]}")
        try:
            node = self._libraries[name]
        except KeyError:
            raise LookupError(f"No library named '{name}'.") from None

        for i, part in enumerate(rest):
            child = next((c for c in node.nested() if c.title == part), None)
            if child is not None:
                node = child
                continue
            if i == len(rest) - 1:
                for playlist in node.playlists():
                    if part in (playlist.title, playlist.path.name):
                        return playlist
            raise LookupError(f"Nothing named '{part}' in '{node.title}'.")
        return node

    def enqueue(self, ref: str) -> int:
        """Queue the files of whatever *ref* names; return how many."""
        return self.player.enqueue(self.resolve(ref).files())

    def has_permission(self, user: str, admin_command: bool) -> bool:
        """Whether *user* may run a command.

        Only admin commands are restricted, and only when admins are enabled.
        """
        if self._config.admins_enabled and admin_command:
            return user in self._config.admins
        return True
