"""Module that mirrors the local directory to the remote host with rsync."""

import os
import re
import shlex
import subprocess
from typing import List

import semver

import syncspace.constants as constants
from syncspace.config import Config
from syncspace.errors import MirrorError, SyncerError, SyncSpaceError
from syncspace.logger import log
from .endpoint import SessionTarget
from .process import resolve_executable, start_terminal_process
from .tunnel import ControlChannel


def check_rsync_version(rsync: str) -> None:
    """Ensure that rsync is available and recent enough to support --delete-during."""
    try:
        result = subprocess.run(
            [resolve_executable(rsync), "--version"],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            check=False,
        )
    except (SyncSpaceError, OSError) as e:
        raise MirrorError(f"failed to run rsync: {e}")

    banner = result.stdout.decode(errors="replace")
    match = re.search(r"version\s+v?(\d+\.\d+\.\d+)", banner)

    if result.returncode != 0 or match is None:
        log.warning("could not determine rsync version, continuing anyway")
        return

    version = semver.VersionInfo.parse(match.group(1))
    log.debug(f"rsync version {version}")

    if version < semver.VersionInfo.parse(constants.MIN_RSYNC_VERSION):
        raise MirrorError(
            f"rsync {version} is too old, need at least {constants.MIN_RSYNC_VERSION}"
        )


class Mirror:
    """
    One-way rsync of the local directory to the remote path.

    Remote files that no longer exist locally are deleted and excluded paths are never
    transferred. Every run rescans the whole directory.
    """

    def __init__(
        self,
        local_dir: str,
        target: SessionTarget,
        channel: ControlChannel,
        config: Config,
    ):
        """Compose the rsync command for mirroring over the control channel."""
        self._rsync = config.tools.rsync
        self.argv = self._compose_argv(local_dir, target, channel)

    @staticmethod
    def _compose_argv(
        local_dir: str, target: SessionTarget, channel: ControlChannel
    ) -> List[str]:
        argv = ["-rlptz", "--delete-during"]
        argv.extend(f"--exclude={pattern}" for pattern in constants.EXCLUDES)

        rsh = " ".join(shlex.quote(arg) for arg in channel.rsh_command())
        argv.append(f"--rsh={rsh}")

        # The trailing slash makes rsync copy the contents of the directory rather than
        # the directory itself.
        argv.append(os.path.join(local_dir, ""))
        argv.append(target.destination)

        return argv

    def run(self) -> None:
        """Mirror with output going straight to the terminal and wait for it."""
        try:
            proc = start_terminal_process(self._rsync, self.argv)
            exit_code = proc.wait()
        except (SyncSpaceError, OSError) as e:
            raise MirrorError(f"initial sync failed: {e}")

        if exit_code != 0:
            raise MirrorError(f"initial sync failed: rsync exited with {exit_code}")

    def run_captured(self) -> str:
        """Mirror with stdout and stderr captured, returning the combined output."""
        command = [self._rsync] + self.argv

        try:
            result = subprocess.run(
                command, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, check=False
            )
        except OSError as e:
            raise SyncerError(f"failed to run rsync: {e}")

        output = result.stdout.decode(errors="replace")

        if result.returncode != 0:
            raise SyncerError(f"rsync exited with {result.returncode}", output)

        return output
