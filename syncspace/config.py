"""Module for configuration variables with defaults that are overridable by a file."""

from __future__ import annotations

from configparser import ConfigParser, SectionProxy
from dataclasses import dataclass, field
import os
import shlex
from typing import List

import syncspace.constants as constants
from syncspace.logger import log


@dataclass
class ProviderConfig:
    """Configuration of the cloud provider CLI."""

    command: str = "gcloud"

    # Extra flags for every provider call, e.g. --zone or --project.
    flags: List[str] = field(default_factory=list)

    @staticmethod
    def load(section: SectionProxy) -> ProviderConfig:
        """Load overridden variables from a section within a config file."""
        config = ProviderConfig()

        config.command = section.get("command", fallback=config.command)
        config.flags = shlex.split(section.get("flags", fallback=""))

        return config


@dataclass
class ToolsConfig:
    """Names or paths of the external tools that are invoked."""

    ssh: str = "ssh"
    rsync: str = "rsync"
    fswatch: str = "fswatch"

    @staticmethod
    def load(section: SectionProxy) -> ToolsConfig:
        """Load overridden variables from a section within a config file."""
        config = ToolsConfig()

        config.ssh = section.get("ssh", fallback=config.ssh)
        config.rsync = section.get("rsync", fallback=config.rsync)
        config.fswatch = section.get("fswatch", fallback=config.fswatch)

        return config


@dataclass
class SyncConfig:
    """Configuration variables related to change propagation."""

    latency: int = constants.WATCH_LATENCY
    control_dir: str = os.path.expanduser(constants.CONTROL_DIR)

    @staticmethod
    def load(section: SectionProxy) -> SyncConfig:
        """Load overridden variables from a section within a config file."""
        config = SyncConfig()

        config.latency = section.getint("latency", fallback=config.latency)
        config.control_dir = os.path.expanduser(
            section.get("control_dir", fallback=config.control_dir)
        )

        if config.latency <= 0:
            raise ValueError(f"latency must be > 0, got {config.latency}")

        return config


@dataclass
class Config:
    """Configuration variables."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)

    @staticmethod
    def load(filename: str) -> Config:
        """Load overridden configuration variables from a config file."""
        parser = ConfigParser()

        config = Config()

        try:
            with open(os.path.expanduser(filename), "r") as f:
                parser.read_string(f.read(), filename)

            if "provider" in parser:
                config.provider = ProviderConfig.load(parser["provider"])
            if "tools" in parser:
                config.tools = ToolsConfig.load(parser["tools"])
            if "sync" in parser:
                config.sync = SyncConfig.load(parser["sync"])
        except FileNotFoundError:
            log.info(f"no config file at {filename}")
        except Exception as e:
            # An unreadable config file is not considered a fatal error since we can
            # fall back to defaults.
            log.error(f"failed to read config file {filename}: {e}")
            config = Config()
        else:
            log.debug(f"loaded config: {config}")

        return config
