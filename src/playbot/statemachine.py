"""Playback queue state machine.

States
------
- playing : a track from the queue is being played.
- paused  : nothing is playing (initial state).

State properties
----------------
- queue   : list[Path]   – every queued path, in order.
- current : Path | None  – the track at the queue position, if any.

Allowed transitions
-------------------
From *paused*:
    play()               → playing   (resumes, or starts at the queue position;
                                      requires a non-empty queue)
    next_track()         → playing   (requires a non-empty queue)
    previous_track()     → playing   (requires a non-empty queue)

From *playing*:
    pause()              → paused
    next_track()         → playing   (wraps around at the end of the queue)
    previous_track()     → playing   (wraps around at the start)

From any state:
    enqueue(paths)       → unchanged (appends to the queue)
    clear()              → paused    (empties the queue)
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum, auto
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from playbot.audio import AudioOutput


class State(Enum):
    PLAYING = auto()
    PAUSED = auto()


class InvalidTransitionError(Exception):
    """Raised when a transition is not allowed from the current state."""


class QueuePlayer:
    """Plays library files one after another."""

    def __init__(self, audio: AudioOutput | None = None) -> None:
        self._audio = audio
        self._state: State = State.PAUSED
        self._queue: list[Path] = []
        self._index: int = 0
        self._started = False

        if self._audio is not None:
            self._audio.set_end_callback(self.on_track_end)

    # -- public properties ---------------------------------------------------

    @property
    def state(self) -> State:
        return self._state

    @property
    def queue(self) -> list[Path]:
        return list(self._queue)

    @property
    def position(self) -> int:
        return self._index

    @property
    def current(self) -> Path | None:
        if not self._queue:
            return None
        return self._queue[self._index]

    # -- transitions ---------------------------------------------------------

    def enqueue(self, paths: Iterable[Path]) -> int:
        """Append *paths* to the queue and return how many were added."""
        before = len(self._queue)
        self._queue.extend(paths)
        return len(self._queue) - before

    def clear(self) -> None:
        """Stop playback and empty the queue."""
        if self._audio is not None:
            self._audio.stop()
        self._queue.clear()
        self._index = 0
        self._started = False
        self._state = State.PAUSED

    def play(self) -> None:
        """Resume a paused track, or start the track at the queue position."""
        if not self._queue:
            raise InvalidTransitionError("Cannot play an empty queue.")
        if self._state is State.PLAYING:
            return
        self._state = State.PLAYING
        if self._started:
            if self._audio is not None:
                self._audio.unpause()
        else:
            self._play_current()

    def pause(self) -> None:
        """Pause playback.  Only allowed from *playing*."""
        if self._state is not State.PLAYING:
            raise InvalidTransitionError(
                f"pause() is only allowed in PLAYING state, "
                f"current state is {self._state.name}."
            )
        if self._audio is not None:
            self._audio.pause()
        self._state = State.PAUSED

    def next_track(self) -> None:
        """Skip to the next queued track, wrapping around at the end."""
        self._require_queue("next_track")
        self._index = (self._index + 1) % len(self._queue)
        self._state = State.PLAYING
        self._play_current()

    def previous_track(self) -> None:
        """Go back to the previous queued track, wrapping around at the start."""
        self._require_queue("previous_track")
        self._index = (self._index - 1) % len(self._queue)
        self._state = State.PLAYING
        self._play_current()

    def on_track_end(self) -> None:
        """Handle end-of-track from the audio backend.

        Advances to the next track; after the last one, transitions to
        PAUSED at the start of the queue.
        """
        if not self._queue:
            return
        if self._index >= len(self._queue) - 1:
            self._index = 0
            self._started = False
            self._state = State.PAUSED
        else:
            self._index += 1
            self._play_current()

    # -- internal helpers ----------------------------------------------------

    def _require_queue(self, name: str) -> None:
        if not self._queue:
            raise InvalidTransitionError(f"{name}() requires a non-empty queue.")

    def _play_current(self) -> None:
        self._started = True
        if self._audio is not None:
            self._audio.play(self._queue[self._index])
