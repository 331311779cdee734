"""Module defining various global constants."""

# syncspace version
VERSION = "1.0.0"

# Special exit code for when syncspace itself fails.
SYNCSPACE_ERROR_CODE = 254

# Paths that are never transferred and never wake the syncer.
EXCLUDES = (".git/", "bin/", "pkg/")

# Directory holding the SSH control sockets.
CONTROL_DIR = "~/.ssh/ctl"

# Control socket name, materialized by ssh as local user, remote user, host, port.
CONTROL_SOCKET_TEMPLATE = "%L-%r@%h:%p"

# Debounce window of the file system watcher in seconds.
WATCH_LATENCY = 3

# First rsync release that supports --delete-during.
MIN_RSYNC_VERSION = "2.6.4"
