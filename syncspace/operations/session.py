"""Module that implements the lifecycle of a syncspace session."""

import contextlib
import getpass

from syncspace.args import Arguments
from syncspace.config import Config
from syncspace.logger import log
from .common import Operations
from .endpoint import parse_target, resolve_host_ip
from .events import EventChannel
from .mirror import check_rsync_version, Mirror
from .shell import run_shell
from .syncer import Syncer, SyncTicket
from .tunnel import ControlChannel
from .watcher import Watcher


class SessionOperations(Operations):
    """
    Class that brings up a session, keeps it in sync and tears it down.

    Resources are acquired in this order: session lock, control channel, watcher,
    syncer. Teardown happens in the opposite order, so the syncer is quiesced before
    the watcher stops and the control channel only closes once nothing uses it.
    """

    def __init__(self, args: Arguments, config: Config):
        """Initialize session operations from command-line arguments and config."""
        self._args = args
        self._config = config

    def _run(self, stack: contextlib.ExitStack) -> int:
        """Run the session until the remote shell exits."""
        log.info(f"Syncing '{self._args.local_dir}' to '{self._args.target}'")

        target = parse_target(self._args.target, getpass.getuser())
        log.debug(f"hostname {target.user_host}")

        check_rsync_version(self._config.tools.rsync)

        channel = ControlChannel(target, self._config)

        lock = channel.lock()
        stack.callback(self._log_errors("release session lock", lock.release))

        # Bring up the control master that all other SSH connections share
        log.info("Starting tunnel")
        channel.open()
        stack.callback(channel.close)

        target = target.with_ip(resolve_host_ip(target.host, self._config))

        # Mirror everything once before watching for changes
        mirror = Mirror(self._args.local_dir, target, channel, self._config)
        log.debug(f"rsync: {mirror.argv}")

        log.info("Starting initial sync")
        mirror.run()
        log.info("Initial sync complete")

        # Publish batches of changes from the watcher
        events = EventChannel()
        watcher = Watcher(self._args.local_dir, self._config)

        log.info(f"Starting listener on {self._args.local_dir}")
        watcher.start()
        reader_thread = self._start_thread(watcher.publish, events)
        stack.callback(reader_thread.join, timeout=5.0)
        stack.callback(self._log_errors("stop watcher", watcher.stop))

        # Run a mirror for every batch, one at a time
        log.info("Starting syncer")
        ticket = SyncTicket()
        syncer = Syncer(mirror, ticket)
        self._start_disposable_thread(syncer.run, events)
        stack.callback(ticket.quiesce)

        log.info("Starting shell")
        exit_code = run_shell(channel, self._config)
        log.info("Shell exited")

        return 0
