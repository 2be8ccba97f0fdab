"""Load playbot configuration from a TOML file.

Example::

    media-extensions = ["mp3", "flac", "ogg"]
    playlist-extensions = ["m3u", "m3u8"]
    parse-playlists = true
    max-depth = 16
    admins-enabled = true
    admins = ["alice"]

    [libraries]
    music = "/srv/music"
    radio = "~/Radio"
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from playbot.library import DEFAULT_MAX_DEPTH

DEFAULT_CONFIG_PATH = Path("/etc/playbot.toml")

DEFAULT_MEDIA_EXTENSIONS: tuple[str, ...] = (
    "mp3", "flac", "ogg", "wav", "m4a", "aac", "opus",
)
DEFAULT_PLAYLIST_EXTENSIONS: tuple[str, ...] = ("m3u", "m3u8")


@dataclass
class Config:
    """Playbot configuration."""

    libraries: dict[str, str] = field(default_factory=dict)
    media_extensions: list[str] = field(
        default_factory=lambda: list(DEFAULT_MEDIA_EXTENSIONS)
    )
    playlist_extensions: list[str] = field(
        default_factory=lambda: list(DEFAULT_PLAYLIST_EXTENSIONS)
    )
    parse_playlists: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH
    follow_symlinks: bool = True
    admins_enabled: bool = False
    admins: list[str] = field(default_factory=list)

    def library_root(self, name: str) -> Path:
        """Return the expanded, absolute root directory of library *name*."""
        return Path(self.libraries[name]).expanduser().absolute()


def load_config(path: Path | str) -> Config:
    """Load configuration from a TOML file.

    Returns a :class:`Config` with defaults for any missing keys.
    If the file does not exist, returns a default :class:`Config`.
    Raises ``ValueError`` if a key holds a value of the wrong type.
    """
    path = Path(path)
    if not path.is_file():
        return Config()

    with open(path, "rb") as f:
        data = tomllib.load(f)

    defaults = Config()
    libraries = _get(data, "libraries", {}, dict, path)
    return Config(
        libraries={str(k): str(v) for k, v in libraries.items()},
        media_extensions=_get_strings(
            data, "media-extensions", defaults.media_extensions, path
        ),
        playlist_extensions=_get_strings(
            data, "playlist-extensions", defaults.playlist_extensions, path
        ),
        parse_playlists=_get(
            data, "parse-playlists", defaults.parse_playlists, bool, path
        ),
        max_depth=_get(data, "max-depth", defaults.max_depth, int, path),
        follow_symlinks=_get(
            data, "follow-symlinks", defaults.follow_symlinks, bool, path
        ),
        admins_enabled=_get(
            data, "admins-enabled", defaults.admins_enabled, bool, path
        ),
        admins=_get_strings(data, "admins", defaults.admins, path),
    )


def _get(data: dict, key: str, default, kind: type, path: Path):
    """Return *data[key]* or *default*, rejecting values of the wrong type."""
    value = data.get(key, default)
    # bool is a subclass of int.
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ValueError(
            f"{path}: {key} must be of type {kind.__name__}, "
            f"got {type(value).__name__}"
        )
    return value


def _get_strings(data: dict, key: str, default: list[str], path: Path) -> list[str]:
    values = _get(data, key, default, list, path)
    if not all(isinstance(v, str) for v in values):
        raise ValueError(f"{path}: {key} must be a list of strings")
    return list(values)
