"""Module that watches the local directory for changes with fswatch."""

import contextlib
import signal
import subprocess
from typing import List, Optional

import syncspace.constants as constants
from syncspace.config import Config
from syncspace.errors import SyncSpaceError, WatcherError
from syncspace.logger import log, summarize
from .events import EventChannel
from .process import resolve_executable


class Watcher:
    """
    File system watcher that prints one line per batch of changes.

    fswatch waits until the directory has been quiet for the latency window before it
    reports a batch, so bursts of changes only trigger a single sync.
    """

    def __init__(self, local_dir: str, config: Config):
        """Compose the fswatch command for the local directory."""
        self._fswatch = config.tools.fswatch
        self._proc: Optional[subprocess.Popen] = None

        self.argv = [
            "--one-per-batch",
            "--recursive",
            f"--latency={config.sync.latency}",
        ]
        self.argv.extend(f"--exclude={pattern}" for pattern in constants.EXCLUDES)
        self.argv.append(local_dir)

    def start(self) -> None:
        """Spawn fswatch with its output piped back to us."""
        try:
            command: List[str] = [resolve_executable(self._fswatch)] + self.argv
            log.debug(f"watcher: {summarize(command, max_length=1024)}")

            self._proc = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                universal_newlines=True,
                errors="replace",
                bufsize=1,
            )
        except (SyncSpaceError, OSError) as e:
            raise WatcherError(f"failed to start watcher: {e}")

    def publish(self, events: EventChannel) -> None:
        """Forward every batch to the channel and close it when fswatch stops."""
        assert self._proc is not None and self._proc.stdout is not None

        try:
            for line in self._proc.stdout:
                events.send(line.rstrip("\n"))
        except (OSError, ValueError) as e:
            log.error(f"watcher read error: {e}")
        finally:
            events.close()

    def stop(self) -> None:
        """Interrupt fswatch and wait for it to exit."""
        if self._proc is None:
            return

        with contextlib.suppress(ProcessLookupError):
            self._proc.send_signal(signal.SIGINT)

        exit_code = self._proc.wait()

        if exit_code != 0:
            log.debug(f"watcher exited with {exit_code}")
