"""Errors raised while setting up and running a syncspace session."""


class SyncSpaceError(RuntimeError):
    """Base class for all session failures."""


class ResolutionError(SyncSpaceError):
    """An executable could not be found on the search path."""


class ParseError(SyncSpaceError):
    """The remote target is not of the form [user@]host:path."""


class EndpointError(SyncSpaceError):
    """The provider could not tell the IP address of the remote host."""


class TransportError(SyncSpaceError):
    """The SSH control channel could not be opened or used."""


class MirrorError(SyncSpaceError):
    """The initial mirror of the local directory failed."""


class WatcherError(SyncSpaceError):
    """The file system watcher could not be started."""


class SyncerError(SyncSpaceError):
    """An incremental mirror failed. The output of rsync is kept for logging."""

    def __init__(self, message: str, output: str = "") -> None:
        """Instantiate the exception with the captured rsync output."""
        super().__init__(message)

        self.output = output
