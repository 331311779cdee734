import pytest

from syncspace.args import Arguments


def test_no_args():
    with pytest.raises(SystemExit):
        Arguments.parse([])


def test_basic_usage(tmp_path):
    args = Arguments.parse([str(tmp_path), "alice@vm1:/home/alice/src"])

    assert args.local_dir == str(tmp_path)
    assert args.target == "alice@vm1:/home/alice/src"

    assert not args.verbose
    assert args.log_file is None
    assert args.config == "~/.syncspace/config"


def test_missing_target(tmp_path):
    with pytest.raises(SystemExit):
        Arguments.parse([str(tmp_path)])


def test_local_dir_must_exist(tmp_path):
    with pytest.raises(SystemExit):
        Arguments.parse([str(tmp_path / "nonexistent"), "vm1:"])


def test_local_dir_must_be_directory(tmp_path):
    (tmp_path / "file").write_text("")

    with pytest.raises(SystemExit):
        Arguments.parse([str(tmp_path / "file"), "vm1:"])


def test_flags(tmp_path):
    args = Arguments.parse(
        ["-v", "-l", str(tmp_path / "log"), "--config=cfg", str(tmp_path), "vm1:"]
    )

    assert args.verbose
    assert args.log_file == str(tmp_path / "log")
    assert args.config == "cfg"


def test_long_flags(tmp_path):
    args = Arguments.parse(
        ["--verbose", f"--log-file={tmp_path / 'log'}", str(tmp_path), "vm1:"]
    )

    assert args.verbose
    assert args.log_file == str(tmp_path / "log")
