from dataclasses import dataclass
from typing import ClassVar


@dataclass
class MirrorError(Exception):
    reason: str
    phase: ClassVar[str] = "mirror"

    def __str__(self) -> str:
        return f"{self.phase} failed: {self.reason}"


@dataclass
class ConfigError(MirrorError):
    phase: ClassVar[str] = "config"


@dataclass
class AllocationError(MirrorError):
    phase: ClassVar[str] = "staging"


@dataclass
class RemoteConfigError(MirrorError):
    remote: str = ""

    def __str__(self) -> str:
        return f"configure {self.remote} remote failed: {self.reason}"


@dataclass
class TransportError(MirrorError):
    operation: str = "transport"

    def __str__(self) -> str:
        return f"{self.operation} failed: {self.reason}"


@dataclass
class FilterError(MirrorError):
    phase: ClassVar[str] = "filter"


@dataclass
class AuthSetupError(MirrorError):
    phase: ClassVar[str] = "auth"


@dataclass
class PruneError(MirrorError):
    phase: ClassVar[str] = "prune"
