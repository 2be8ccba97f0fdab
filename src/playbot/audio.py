"""Audio output for queued library files, via sounddevice and soundfile.

Each track is streamed on its own worker thread.  The library only hands us
paths; anything soundfile cannot open (a stub playlist path, for instance)
is logged and treated as a finished track so the queue keeps moving.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable

import sounddevice as sd
import soundfile as sf

logger = logging.getLogger(__name__)

# Frames read per chunk while streaming.
DEFAULT_BLOCK_SIZE = 2048


class AudioOutput:
    """Streams one file at a time to the default output device."""

    def __init__(self, block_size: int = DEFAULT_BLOCK_SIZE) -> None:
        self._block_size = block_size
        self._end_callback: Callable[[], None] | None = None
        self._running = threading.Event()
        self._running.set()
        self._stop_event = threading.Event()
        self._track_ended = threading.Event()
        self._worker: threading.Thread | None = None
        self._current: Path | None = None

    @property
    def current(self) -> Path | None:
        """Path of the file last passed to :meth:`play`."""
        return self._current

    def play(self, path: Path) -> None:
        """Stop whatever is playing and start *path* from the beginning."""
        self.stop()
        self._stop_event.clear()
        self._track_ended.clear()
        self._running.set()
        self._current = path
        self._worker = threading.Thread(
            target=self._stream, args=(path,), name="playbot-audio", daemon=True
        )
        self._worker.start()
        logger.debug("Playing %s", path)

    def pause(self) -> None:
        self._running.clear()

    def unpause(self) -> None:
        self._running.set()

    def stop(self) -> None:
        """Stop playback and wait for the worker to exit."""
        self._stop_event.set()
        self._running.set()
        if self._worker is not None:
            self._worker.join(timeout=2.0)
            self._worker = None

    def set_end_callback(self, callback: Callable[[], None]) -> None:
        """Register *callback* to run when a track finishes on its own."""
        self._end_callback = callback

    def check_events(self) -> None:
        """Run the end-of-track callback if a track has finished.

        Call this periodically from the main loop; the callback never runs
        on the worker thread.
        """
        if self._track_ended.is_set():
            self._track_ended.clear()
            if self._end_callback is not None:
                self._end_callback()

    def _stream(self, path: Path) -> None:
        try:
            finished = self._write_blocks(path)
        except Exception:
            logger.exception("Cannot play %s", path)
            finished = True

        if finished and not self._stop_event.is_set():
            self._track_ended.set()

    def _write_blocks(self, path: Path) -> bool:
        """Write *path* to the output device; return False if stopped early."""
        with sf.SoundFile(str(path)) as f, sd.OutputStream(
            samplerate=f.samplerate, channels=f.channels, dtype="float32"
        ) as stream:
            for block in f.blocks(blocksize=self._block_size, dtype="float32"):
                self._running.wait()
                if self._stop_event.is_set():
                    return False
                stream.write(block)
        return True
