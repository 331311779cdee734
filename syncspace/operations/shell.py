"""Module that runs the interactive remote shell of a session."""

from syncspace.config import Config
from syncspace.errors import SyncSpaceError, TransportError
from syncspace.logger import log
from .process import start_terminal_process
from .tunnel import ControlChannel


def run_shell(channel: ControlChannel, config: Config) -> int:
    """
    Run a remote shell over the control channel in the foreground.

    Blocks until the user exits the shell and returns its exit status.
    """
    command = channel.shell_command()

    try:
        proc = start_terminal_process(config.provider.command, command)
    except (SyncSpaceError, OSError) as e:
        raise TransportError(f"failed to start shell: {e}")

    exit_code = proc.wait()

    log.debug(f"shell exit status {exit_code}")

    return exit_code
