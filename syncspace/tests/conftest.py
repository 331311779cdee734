"""Module with shared fixtures and a flag to enable tests against a real VM."""

import logging

import pytest

from syncspace.config import Config
from syncspace.logger import log


def pytest_addoption(parser):
    parser.addoption(
        "--gcloud-target",
        action="store",
        default=None,
        help="Run end-to-end tests against this [user@]host:path",
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "gcloud: mark test as requiring a real VM")


def pytest_collection_modifyitems(config, items):
    if not config.getoption("--gcloud-target"):
        skip_gcloud = pytest.mark.skip(reason="only runs with --gcloud-target option")

        for item in items:
            if "gcloud" in item.keywords:
                item.add_marker(skip_gcloud)


@pytest.fixture
def session_config(tmp_path):
    config = Config()
    config.sync.control_dir = str(tmp_path / "ctl")
    return config


@pytest.fixture(autouse=True)
def restore_logger():
    handlers = list(log.handlers)
    level = log.level

    yield

    for handler in list(log.handlers):
        if handler not in handlers:
            log.removeHandler(handler)
            handler.close()

    for handler in handlers:
        if handler not in log.handlers:
            log.addHandler(handler)

    log.setLevel(level or logging.INFO)
