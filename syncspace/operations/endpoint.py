"""Module that parses the remote target and asks the provider where the host lives."""

from __future__ import annotations

from dataclasses import dataclass, replace
import subprocess

from syncspace.config import Config
from syncspace.errors import EndpointError, ParseError
from syncspace.logger import log

# Provider query that prints the external IPv4 address of an instance.
_IP_FORMAT = "--format=value(networkInterfaces.accessConfigs[0].natIP)"


@dataclass(frozen=True)
class SessionTarget:
    """
    Remote end of a session.

    user_host is always the combination of user and host, even if the user was not
    part of the original target. host_ip is unknown until the provider was queried.
    """

    user: str
    host: str
    remote_path: str = "."
    host_ip: str = ""

    @property
    def user_host(self) -> str:
        """Return the user@host string used with the provider's SSH wrapper."""
        return f"{self.user}@{self.host}"

    @property
    def destination(self) -> str:
        """Return the rsync destination, which addresses the host by IP."""
        if not self.host_ip:
            raise EndpointError(f"IP address of {self.host} has not been resolved")

        return f"{self.user}@{self.host_ip}:{self.remote_path}"

    def with_ip(self, host_ip: str) -> SessionTarget:
        """Return a copy of the target with the resolved IP address filled in."""
        return replace(self, host_ip=host_ip)


def parse_target(text: str, local_user: str) -> SessionTarget:
    """
    Parse a target of the form [user@]host:path.

    The local user is substituted if no user is given and the path defaults to the
    remote home directory.
    """
    if text.count(":") != 1:
        raise ParseError(
            f"bad target '{text}': format is [user@]host:path "
            "(the colon must always be present)"
        )

    user_host, remote_path = text.split(":")

    if not user_host:
        raise ParseError(f"bad target '{text}': missing host")

    at_count = user_host.count("@")

    if at_count == 0:
        user, host = local_user, user_host
    elif at_count == 1:
        user, host = user_host.split("@")
    else:
        raise ParseError(f"bad user@host string '{user_host}'")

    if not user or not host:
        raise ParseError(f"bad user@host string '{user_host}'")

    return SessionTarget(user=user, host=host, remote_path=remote_path or ".")


def resolve_host_ip(host: str, config: Config) -> str:
    """
    Query the provider for the external IP address of the host.

    The provider's SSH wrapper cannot be used as the remote shell of rsync, so rsync
    has to connect to the host with plain ssh, which needs its address.
    """
    command = [
        config.provider.command,
        "compute",
        "instances",
        "describe",
        host,
        _IP_FORMAT,
    ] + config.provider.flags

    try:
        result = subprocess.run(
            command, stdout=subprocess.PIPE, stderr=subprocess.PIPE, check=False
        )
    except OSError as e:
        raise EndpointError(f"failed to query IP address of {host}: {e}")

    if result.returncode != 0:
        raise EndpointError(
            f"failed to query IP address of {host}: "
            f"{result.stderr.decode(errors='replace').strip()}"
        )

    host_ip = result.stdout.decode(errors="replace").strip()

    if not host_ip:
        raise EndpointError(f"provider returned no IP address for {host}")

    log.debug(f"host IP {host_ip}")

    return host_ip
