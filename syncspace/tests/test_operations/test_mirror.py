import subprocess
from unittest import mock

import pytest

from syncspace.errors import MirrorError, ResolutionError, SyncerError, TransportError
from syncspace.operations.endpoint import parse_target
from syncspace.operations.mirror import check_rsync_version, Mirror
from syncspace.operations.tunnel import ChannelState, ControlChannel


@pytest.fixture
def channel(session_config):
    target = parse_target("alice@vm1:/home/alice/src", "bob")
    channel = ControlChannel(target, session_config)
    channel.state = ChannelState.OPEN
    return channel


@pytest.fixture
def mirror(channel, session_config):
    target = parse_target("alice@vm1:/home/alice/src", "bob").with_ip("34.1.2.3")
    return Mirror("./src", target, channel, session_config)


def rsync_result(exit_code: int, output: bytes) -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess([], exit_code, stdout=output)


def test_argv(mirror, channel):
    assert mirror.argv == [
        "-rlptz",
        "--delete-during",
        "--exclude=.git/",
        "--exclude=bin/",
        "--exclude=pkg/",
        "--rsh=ssh -o StrictHostKeyChecking=no -o UserKnownHostsFile=/dev/null "
        f"-o ControlPath={channel.socket_path}",
        "./src/",
        "alice@34.1.2.3:/home/alice/src",
    ]


def test_argv_trailing_slash(channel, session_config):
    target = parse_target("vm1:", "bob").with_ip("34.1.2.3")
    mirror = Mirror("src/", target, channel, session_config)

    assert mirror.argv[-2:] == ["src/", "bob@34.1.2.3:."]


def test_requires_open_channel(session_config):
    target = parse_target("vm1:", "bob").with_ip("34.1.2.3")
    channel = ControlChannel(target, session_config)

    with pytest.raises(TransportError):
        Mirror("src", target, channel, session_config)


def test_run(mirror):
    proc = mock.Mock()
    proc.wait.return_value = 0

    with mock.patch(
        "syncspace.operations.mirror.start_terminal_process", return_value=proc
    ) as mock_start:
        mirror.run()

    assert mock_start.call_args[0] == ("rsync", mirror.argv)
    assert proc.wait.call_count == 1


def test_run_failure(mirror):
    proc = mock.Mock()
    proc.wait.return_value = 23

    with mock.patch(
        "syncspace.operations.mirror.start_terminal_process", return_value=proc
    ):
        with pytest.raises(MirrorError) as e:
            mirror.run()

    assert "initial sync failed" in str(e.value)


def test_run_missing_rsync(mirror):
    with mock.patch(
        "syncspace.operations.mirror.start_terminal_process",
        side_effect=ResolutionError("rsync"),
    ):
        with pytest.raises(MirrorError):
            mirror.run()


def test_run_captured(mirror):
    with mock.patch(
        "subprocess.run", return_value=rsync_result(0, b"sent 10 bytes")
    ) as mock_run:
        assert mirror.run_captured() == "sent 10 bytes"

    assert mock_run.call_args[0][0] == ["rsync"] + mirror.argv
    assert mock_run.call_args[1]["stderr"] == subprocess.STDOUT


def test_run_captured_failure(mirror):
    output = b"rsync: write failed: No space left on device (28)"

    with mock.patch("subprocess.run", return_value=rsync_result(11, output)):
        with pytest.raises(SyncerError) as e:
            mirror.run_captured()

    assert "exited with 11" in str(e.value)
    assert "No space left on device" in e.value.output


def test_run_captured_missing_rsync(mirror):
    with mock.patch("subprocess.run", side_effect=FileNotFoundError("rsync")):
        with pytest.raises(SyncerError):
            mirror.run_captured()


@pytest.mark.parametrize(
    "banner",
    [
        b"rsync  version 3.2.7  protocol version 31\n",
        b"rsync  version v3.2.3  protocol version 31\n",
        b"openrsync: protocol version 29\nrsync version 2.6.9 compatible\n",
    ],
)
def test_rsync_version_supported(banner):
    with mock.patch(
        "syncspace.operations.mirror.resolve_executable", return_value="/usr/bin/rsync"
    ):
        with mock.patch("subprocess.run", return_value=rsync_result(0, banner)):
            check_rsync_version("rsync")


def test_rsync_version_too_old():
    banner = b"rsync  version 2.6.3  protocol version 28\n"

    with mock.patch(
        "syncspace.operations.mirror.resolve_executable", return_value="/usr/bin/rsync"
    ):
        with mock.patch("subprocess.run", return_value=rsync_result(0, banner)):
            with pytest.raises(MirrorError) as e:
                check_rsync_version("rsync")

    assert "too old" in str(e.value)


def test_rsync_version_unknown(caplog):
    with mock.patch(
        "syncspace.operations.mirror.resolve_executable", return_value="/usr/bin/rsync"
    ):
        with mock.patch("subprocess.run", return_value=rsync_result(0, b"rsync ?")):
            check_rsync_version("rsync")

    assert "could not determine rsync version" in caplog.text


def test_rsync_missing():
    with mock.patch(
        "syncspace.operations.mirror.resolve_executable",
        side_effect=ResolutionError("rsync"),
    ):
        with pytest.raises(MirrorError):
            check_rsync_version("rsync")
