"""Module that manages the SSH control master shared by all commands of a session."""

from enum import auto, Enum
import os
from typing import List

import fasteners

import syncspace.constants as constants
from syncspace.config import Config
from syncspace.errors import SyncSpaceError, TransportError
from syncspace.logger import log
from .endpoint import SessionTarget
from .process import start_terminal_process


class ChannelState(Enum):
    """Lifecycle of a control channel."""

    PENDING = auto()
    OPEN = auto()
    CLOSED = auto()


class ControlChannel:
    """
    Authenticated SSH connection that other SSH invocations piggy-back on.

    The control master is started through the provider's SSH wrapper, which takes care
    of keys, and then backgrounds itself. Rsync and the interactive shell reuse it with
    ControlPath so that the user only authenticates once.
    """

    def __init__(self, target: SessionTarget, config: Config):
        """Prepare a control channel to the target without connecting yet."""
        self._target = target
        self._config = config

        self.control_dir = config.sync.control_dir
        self.socket_path = os.path.join(
            self.control_dir, constants.CONTROL_SOCKET_TEMPLATE
        )

        self.state = ChannelState.PENDING

    def lock(self) -> fasteners.InterProcessLock:
        """
        Claim the target for this session.

        Two sessions to the same target would share a control socket, and the first to
        exit would close the channel of the other.
        """
        self._ensure_control_dir()

        lock_path = os.path.join(self.control_dir, f".{self._target.user_host}.lock")
        lock = fasteners.InterProcessLock(lock_path)

        if not lock.acquire(blocking=False):
            raise TransportError(
                f"another session to {self._target.user_host} is already running"
            )

        return lock

    def open(self) -> None:
        """Start the control master and wait for it to be backgrounded."""
        self._ensure_control_dir()

        command = self._wrapper_command(
            [
                "--ssh-flag=-nNf",
                "--ssh-flag=-o ControlMaster=yes",
                f"--ssh-flag=-o ControlPath={self.socket_path}",
                "--ssh-flag=-o StrictHostKeyChecking=no",
                "--ssh-flag=-o UserKnownHostsFile=/dev/null",
            ]
        )

        try:
            proc = start_terminal_process(self._config.provider.command, command)
            exit_code = proc.wait()
        except (SyncSpaceError, OSError) as e:
            raise TransportError(f"failed to start tunnel: {e}")

        if exit_code != 0:
            raise TransportError(f"failed to start tunnel: ssh exited with {exit_code}")

        self.state = ChannelState.OPEN

    def close(self) -> None:
        """Ask the control master to exit. Failures are only logged."""
        log.info("Stopping tunnel")

        command = self._wrapper_command(
            ["--ssh-flag=-O exit", f"--ssh-flag=-o ControlPath={self.socket_path}"]
        )

        try:
            proc = start_terminal_process(self._config.provider.command, command)
            exit_code = proc.wait()

            if exit_code != 0:
                log.error(f"stopping tunnel exited with {exit_code}")
        except (SyncSpaceError, OSError) as e:
            log.error(f"failed to stop tunnel: {e}")
        finally:
            self.state = ChannelState.CLOSED

    def shell_command(self) -> List[str]:
        """Compose the provider arguments for an interactive shell over the channel."""
        self._require_open()

        return self._wrapper_command([f"--ssh-flag=-o ControlPath={self.socket_path}"])

    def rsh_command(self) -> List[str]:
        """
        Compose the plain ssh command that rsync uses as its remote shell.

        The provider's wrapper does not accept the argument style of a remote shell, so
        this is deliberately a different invocation than the other ones.
        """
        self._require_open()

        return [
            self._config.tools.ssh,
            "-o",
            "StrictHostKeyChecking=no",
            "-o",
            "UserKnownHostsFile=/dev/null",
            "-o",
            f"ControlPath={self.socket_path}",
        ]

    def _wrapper_command(self, ssh_flags: List[str]) -> List[str]:
        return (
            ["compute", "ssh"]
            + ssh_flags
            + self._config.provider.flags
            + [self._target.user_host]
        )

    def _ensure_control_dir(self) -> None:
        try:
            os.makedirs(self.control_dir, mode=0o700, exist_ok=True)
        except OSError as e:
            raise TransportError(f"failed to create {self.control_dir}: {e}")

    def _require_open(self) -> None:
        if self.state != ChannelState.OPEN:
            raise TransportError(f"control channel is {self.state.name.lower()}")
