"""Module defining the command-line arguments and providing a parser for them."""

from __future__ import annotations

import argparse
import os
from typing import List, Optional

from syncspace.constants import VERSION


class Arguments(argparse.Namespace):
    """Parsed command-line arguments."""

    local_dir: str
    target: str

    config: str
    log_file: Optional[str]

    verbose: bool

    @classmethod
    def parse(cls, args: Optional[List[str]] = None) -> Arguments:
        """
        Parse command-line arguments from the given list of strings.

        Defaults to sys.argv if none are specified.
        """
        return cls._get_parser().parse_args(args, namespace=cls())

    @classmethod
    def _get_parser(cls) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description="Mirror a local directory to a cloud VM while using a shell on it.",
            usage="syncspace [option...] local_dir [user@]host:path",
        )

        parser.add_argument(
            "--version",
            action="version",
            version=f"%(prog)s {VERSION}",
            help="show the program version",
        )

        # Primary arguments
        parser.add_argument(
            "local_dir", type=cls._parse_directory, help="local directory to mirror"
        )
        parser.add_argument(
            "target",
            type=str,
            help="remote destination as [user@]host:path (the colon is required)",
        )

        # Diagnostics
        parser.add_argument(
            "-v",
            "--verbose",
            action="store_true",
            help="log spawned commands, the resolved IP and every sync",
        )
        parser.add_argument(
            "-l",
            "--log-file",
            type=str,
            help="write the log to this file instead of stdout (truncated)",
            default=None,
        )

        # Path to (optional) config file
        parser.add_argument(
            "--config",
            type=str,
            help="path to config file (default is ~/.syncspace/config)",
            default="~/.syncspace/config",
        )

        return parser

    @staticmethod
    def _parse_directory(arg: str) -> str:
        if not os.path.isdir(arg):
            raise argparse.ArgumentTypeError(f"not a directory: {arg}")

        return arg
