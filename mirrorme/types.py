from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

type ExitCode = int


@dataclass(frozen=True, slots=True)
class Reference:
    name: str
    target: str
    TARGET_DISPLAY_LENGTH: ClassVar[int] = 7

    def __str__(self) -> str:
        return f"{self.name} -> {self.target[: self.TARGET_DISPLAY_LENGTH]}"


@dataclass(frozen=True, slots=True)
class RefSpec:
    source: str
    destination: str
    force: bool = False

    @classmethod
    def delete(cls, name: str) -> RefSpec:
        return cls("", name)

    @property
    def is_delete(self) -> bool:
        return self.source == ""

    def forced(self) -> RefSpec:
        return RefSpec(self.source, self.destination, force=True)

    def __str__(self) -> str:
        return f"{'+' if self.force else ''}{self.source}:{self.destination}"
