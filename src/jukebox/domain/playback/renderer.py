"""
Server-side audio rendering through mpv.

One mpv process per selected track. Pause/resume stop and continue the process;
a process that exits on its own reports the track as finished, tagged with its
track id so a late exit cannot end a newer track.
"""

import asyncio
import shutil
import signal
from typing import Awaitable, Callable, Optional

from loguru import logger

from jukebox.core.errors import JukeboxError
from jukebox.domain.library.models import Track

from .events import BecameIdle, Paused, PlaybackEvent, Resumed, TrackSelected

# Seconds to wait for mpv to exit after SIGTERM before killing it
STOP_TIMEOUT = 2.0


def check_mpv_available(executable: str = "mpv") -> bool:
    """Check if MPV is available on the system."""
    return shutil.which(executable) is not None


class MpvRenderer:
    """PlaybackObserver that plays the selected track locally."""

    def __init__(
        self,
        report_finished: Callable[[int], Awaitable[object]],
        volume: int = 50,
        executable: str = "mpv",
    ) -> None:
        self._report_finished = report_finished
        self.volume = volume
        self.executable = executable
        self._process: Optional[asyncio.subprocess.Process] = None
        self._watcher: Optional[asyncio.Task] = None

    async def handle_playback_event(self, event: PlaybackEvent) -> None:
        if isinstance(event, TrackSelected):
            await self._stop()
            await self._play(event.track)
        elif isinstance(event, BecameIdle):
            await self._stop()
        elif isinstance(event, Paused):
            self._signal(signal.SIGSTOP)
        elif isinstance(event, Resumed):
            self._signal(signal.SIGCONT)

    async def _play(self, track: Track) -> None:
        if not track.local_path:
            logger.warning(f"Track #{track.id} has no local file, nothing to render")
            return

        cmd = [
            self.executable,
            "--no-video",
            "--no-terminal",
            f"--volume={self.volume}",
            track.local_path,
        ]
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            logger.error(f"Failed to start mpv for track #{track.id}: {e}")
            return

        logger.info(f"mpv started for track #{track.id} (pid {process.pid})")
        self._process = process
        self._watcher = asyncio.create_task(self._watch(process, track.id))

    async def _watch(self, process: asyncio.subprocess.Process, track_id: int) -> None:
        returncode = await process.wait()
        if process is not self._process:
            # Stopped by us or replaced by a newer track
            return
        self._process = None
        logger.info(f"mpv exited with code {returncode} for track #{track_id}")
        try:
            await self._report_finished(track_id)
        except JukeboxError:
            logger.exception(f"Failed to report track #{track_id} as finished")

    def _signal(self, sig: int) -> None:
        process = self._process
        if process is None or process.returncode is not None:
            return
        try:
            process.send_signal(sig)
        except ProcessLookupError:
            logger.debug(f"mpv process {process.pid} already gone")

    async def _stop(self) -> None:
        process, self._process = self._process, None
        if process is None or process.returncode is not None:
            return

        try:
            process.terminate()
            # A stopped (paused) process only acts on SIGTERM once continued
            process.send_signal(signal.SIGCONT)
        except ProcessLookupError:
            return

        try:
            await asyncio.wait_for(process.wait(), timeout=STOP_TIMEOUT)
        except asyncio.TimeoutError:
            logger.warning(f"mpv process {process.pid} did not exit, killing")
            process.kill()
            await process.wait()

    async def close(self) -> None:
        await self._stop()
