from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import os

from .constants import DEFAULT_EXCLUDED_PREFIXES, DEFAULT_KNOWN_HOSTS_PATH
from .errors import ConfigError
from .typed_path import AbsFile, Remote


@dataclass(frozen=True, kw_only=True, slots=True)
class SSHConfig:
    known_hosts: str = field(default="", repr=False)
    known_hosts_path: str = ""
    private_key: str = field(default="", repr=False)

    @property
    def resolved_known_hosts_path(self) -> AbsFile:
        return AbsFile.expand(self.known_hosts_path or DEFAULT_KNOWN_HOSTS_PATH)


@dataclass(frozen=True, kw_only=True, slots=True)
class MirrorConfig:
    source: Remote
    destination: Remote
    ssh: SSHConfig = field(default_factory=SSHConfig)
    excluded_prefixes: tuple[str, ...] = DEFAULT_EXCLUDED_PREFIXES
    debug: bool = False
    strict_prune: bool = False

    def validate(self) -> None:
        if not self.source:
            raise ConfigError("no source repository was provided")
        if not self.destination:
            raise ConfigError("no destination repository was provided")
        if self.source.canonical == self.destination.canonical:
            raise ConfigError(
                f"the source and destination are the same repository ({self.source})"
            )
        if any(not prefix for prefix in self.excluded_prefixes):
            raise ConfigError("excluded ref prefixes must not be empty")


def default_source(environ: Mapping[str, str] | None = None) -> Remote | None:
    """Build the source URL of the repository running a GitHub Actions workflow."""
    if environ is None:
        environ = os.environ
    server = environ.get("GITHUB_SERVER_URL", "").rstrip("/")
    repository = environ.get("GITHUB_REPOSITORY", "").strip("/")
    if not server or not repository:
        return None
    return Remote(f"{server}/{repository}")
