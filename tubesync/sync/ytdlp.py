"""
yt-dlp subprocess driver.

Runs yt-dlp for a single video URL inside the channel folder, streaming its
output into the log as it arrives. The wait for the child process watches a
cancellation event so a cancelled run never leaves yt-dlp running behind it.
"""

import logging
import subprocess
import threading
from pathlib import Path
from typing import IO, Optional

from tubesync.sync.errors import AcquisitionError, SyncCancelled

logger = logging.getLogger(__name__)


class YtDlp:
    """
    Thin wrapper around the yt-dlp executable.

    The URL is passed as the only argument; output naming, formats and the
    like come from the user's yt-dlp configuration file.
    """

    def __init__(
        self,
        executable: str = "yt-dlp",
        poll_interval: float = 0.5,
        terminate_timeout: float = 10.0,
    ):
        """
        Initialize the driver.

        Args:
            executable: yt-dlp executable name or path (resolved via PATH)
            poll_interval: Seconds between cancellation checks while waiting
            terminate_timeout: Seconds to wait after SIGTERM before killing
        """
        self.executable = executable
        self.poll_interval = poll_interval
        self.terminate_timeout = terminate_timeout

    def version(self) -> Optional[str]:
        """Return the installed yt-dlp version, or None if it cannot be run."""
        try:
            result = subprocess.run(
                [self.executable, "--version"],
                capture_output=True,
                text=True,
                timeout=30,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning(f"yt-dlp not available: {e}")
            return None

        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def acquire(
        self,
        url: str,
        target_directory: Path,
        cancel_event: Optional[threading.Event] = None,
    ) -> int:
        """
        Download one video into `target_directory`.

        Args:
            url: Video URL
            target_directory: Working directory for yt-dlp
            cancel_event: Set by the caller to abort the download

        Returns:
            yt-dlp exit code (0 on success)

        Raises:
            AcquisitionError: yt-dlp could not be started
            SyncCancelled: cancel_event was set; the child has been stopped
        """
        if cancel_event is not None and cancel_event.is_set():
            raise SyncCancelled("cancelled before download started")

        cmd = [self.executable, url]
        logger.debug(f"Running {cmd} in {target_directory}")

        try:
            process = subprocess.Popen(
                cmd,
                cwd=str(target_directory),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            raise AcquisitionError(f"could not start {self.executable}: {e}") from e

        readers = [
            threading.Thread(
                target=_pump, args=(process.stdout, logging.INFO, "[yt-dlp]"), daemon=True
            ),
            threading.Thread(
                target=_pump, args=(process.stderr, logging.WARNING, "[yt-dlp:stderr]"), daemon=True
            ),
        ]
        for reader in readers:
            reader.start()

        try:
            while True:
                try:
                    return process.wait(timeout=self.poll_interval)
                except subprocess.TimeoutExpired:
                    if cancel_event is not None and cancel_event.is_set():
                        logger.warning(f"Cancellation requested, stopping yt-dlp for {url}")
                        self._stop(process)
                        raise SyncCancelled(f"download cancelled: {url}")
        finally:
            for reader in readers:
                reader.join(timeout=self.terminate_timeout)

    def _stop(self, process: subprocess.Popen) -> None:
        """Terminate the child, escalating to kill, and reap it."""
        process.terminate()
        try:
            process.wait(timeout=self.terminate_timeout)
        except subprocess.TimeoutExpired:
            logger.warning(f"yt-dlp (pid {process.pid}) ignored SIGTERM, killing")
            process.kill()
            process.wait()


def _pump(stream: IO[str], level: int, prefix: str) -> None:
    """Forward lines from a child stream to the log until EOF."""
    try:
        for line in iter(stream.readline, ""):
            line = line.rstrip()
            if line:
                logger.log(level, f"{prefix} {line}")
    finally:
        stream.close()
