"""
Module that turns change notifications into serialized mirror runs.

A SyncTicket is the permit to run a mirror. The syncer holds it while rsync runs and
hands it back afterwards, so whoever else acquires it knows that no mirror is in
flight. When a mirror fails the syncer withdraws the ticket instead of returning it:
nothing will ever run again, which is exactly the state that teardown waits for.
"""

import threading

from syncspace.errors import SyncerError
from syncspace.logger import log
from .events import EventChannel
from .mirror import Mirror


class SyncTicket:
    """Single-permit exclusion token that can be permanently withdrawn."""

    def __init__(self) -> None:
        """Instantiate a ticket that is available."""
        self._condition = threading.Condition()
        self._available = True
        self._withdrawn = False

    @property
    def withdrawn(self) -> bool:
        """Check if the ticket has been permanently withdrawn."""
        with self._condition:
            return self._withdrawn

    def acquire(self) -> bool:
        """
        Wait for the ticket and take it.

        Returns False without taking anything once the ticket has been withdrawn.
        """
        with self._condition:
            self._condition.wait_for(lambda: self._available or self._withdrawn)

            if self._withdrawn:
                return False

            self._available = False
            return True

    def release(self) -> None:
        """Hand the ticket back after a run."""
        with self._condition:
            if self._withdrawn:
                return

            if self._available:
                raise RuntimeError("ticket released without being acquired")

            self._available = True
            self._condition.notify()

    def withdraw(self) -> None:
        """Take the ticket out of circulation for good and wake up all waiters."""
        with self._condition:
            self._available = False
            self._withdrawn = True
            self._condition.notify_all()

    def quiesce(self) -> None:
        """Wait until no mirror is in flight and prevent any further ones."""
        self.acquire()
        self.withdraw()


class Syncer:
    """Consumer of change batches that runs one mirror at a time."""

    def __init__(self, mirror: Mirror, ticket: SyncTicket):
        """Instantiate a syncer that runs the mirror under the given ticket."""
        self._mirror = mirror
        self._ticket = ticket

    def run(self, events: EventChannel) -> None:
        """Mirror once for every batch until the channel closes or a mirror fails."""
        for batch in events:
            log.debug(f"syncing: '{batch}'")

            if not self._ticket.acquire():
                log.info("syncer stopped")
                return

            try:
                self._mirror.run_captured()
            except SyncerError as e:
                log.error("rsync output:")
                log.error(e.output)
                log.error(e)
                log.error("syncer terminating")

                # The ticket is not handed back so that no other sync can start.
                self._ticket.withdraw()
                return

            self._ticket.release()
            log.debug("...sync ok")

        log.info("events closed")
