"""
Module with a closable channel that carries change notifications between threads.

The file system watcher reports a batch of changes as one line of output. A reader
thread publishes these lines to an EventChannel and closes it once the watcher exits,
while the syncer thread consumes them one by one:

def reader(channel):
    for line in watcher_output:
        channel.send(line)

    channel.close()

def syncer(channel):
    for batch in channel:
        mirror()

    # Only reached once the reader closed the channel and all batches were consumed.

The contents of a batch are informational. A mirror always rescans the full local
directory, so a batch only signals that something changed recently.
"""

from __future__ import annotations

import queue
import threading
from typing import Iterator, Optional


class EventChannel:
    """Thread-safe FIFO of batch descriptors that the producer can close."""

    def __init__(self) -> None:
        """Instantiate a new open EventChannel."""
        # None is the end of stream marker.
        self._queue: queue.Queue[Optional[str]] = queue.Queue()

        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        """Check if the channel has been closed by the producer."""
        return self._closed

    def send(self, batch: str) -> bool:
        """
        Post a batch descriptor to the channel.

        Returns False and drops the batch if the channel has already been closed.
        """
        with self._lock:
            if self._closed:
                return False

            self._queue.put(batch)

        return True

    def close(self) -> None:
        """Close the channel after all batches that were sent so far."""
        with self._lock:
            if self._closed:
                return

            self._closed = True
            self._queue.put(None)

    def receive(self) -> Optional[str]:
        """Wait for the next batch descriptor or None if the channel is closed."""
        batch = self._queue.get()

        if batch is None:
            # Keep the marker around for any later receive.
            self._queue.put(None)

        return batch

    def __iter__(self) -> Iterator[str]:
        """Iterate over batches in the order they were sent until closed."""
        while True:
            batch = self.receive()

            if batch is None:
                return

            yield batch
