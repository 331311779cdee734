"""
Module implementing the command-line interface and invoking the main logic of syncspace.

syncspace mirrors a local directory to a cloud VM and keeps it up to date while the
user works in a shell on that VM. It opens one SSH control master through the cloud
provider's CLI, mirrors the directory once with rsync, and then runs rsync again after
every batch of changes reported by fswatch. Everything is shut down in reverse order
once the shell exits.
"""

import signal
import sys
from typing import List, NoReturn, Optional

import syncspace.constants as constants
from syncspace.config import Config
import syncspace.logger as logger
from syncspace.logger import log
import syncspace.operations as operations
from .args import Arguments


def main(arguments: Optional[List[str]] = None) -> NoReturn:
    """
    Run a syncspace session with the given arguments.

    Defaults to parsing command-line arguments from sys.argv if none are specified.
    """
    # Parse command-line arguments.
    args = Arguments.parse(arguments)

    # Configure logging before anything is logged.
    try:
        logger.configure(verbose=args.verbose, log_file=args.log_file)
    except OSError as e:
        log.error(f"failed to open log file {args.log_file}: {e}")
        sys.exit(constants.SYNCSPACE_ERROR_CODE)

    config = Config.load(args.config)

    ops = operations.SessionOperations(args, config)

    try:
        exit_code = ops.run()
    except KeyboardInterrupt:
        exit_code = 128 + signal.SIGINT
    except Exception as e:
        log.error(f"failed to run session: {e}")
        exit_code = constants.SYNCSPACE_ERROR_CODE

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
