"""Module for starting child processes that share the terminal of syncspace."""

import os
import shutil
import subprocess
from typing import List

from syncspace.errors import ResolutionError
from syncspace.logger import log, summarize


def resolve_executable(path: str) -> str:
    """Look up a bare executable name on the search path, leave other paths as-is."""
    if os.path.basename(path) != path:
        return path

    resolved = shutil.which(path)

    if resolved is None:
        raise ResolutionError(f"executable file not found in $PATH: {path}")

    return resolved


def start_terminal_process(path: str, argv: List[str]) -> subprocess.Popen:
    """
    Start a process that is wired up to the stdin, stdout and stderr of syncspace.

    The child inherits the file descriptors directly instead of going through pipes,
    which interactive SSH sessions need for password prompts and terminal modes.
    """
    path = resolve_executable(path)
    command = [path] + list(argv)

    log.debug(f"process: {summarize(command, max_length=1024)}")

    return subprocess.Popen(command, stdin=None, stdout=None, stderr=None)
