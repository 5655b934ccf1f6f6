from __future__ import annotations

from dataclasses import dataclass
import os.path
from pathlib import Path
import shutil
from typing import Self


@dataclass(frozen=True, slots=True)
class TypedPath:
    path: Path

    def __init__(self, path: Path | str | os.PathLike[str]) -> None:
        object.__setattr__(self, "path", Path(path))

    @classmethod
    def expand(cls, path: Path | str) -> Self:
        return cls(Path(path).expanduser().absolute())

    def exists(self) -> bool:
        return self.path.exists()

    def __fspath__(self) -> str:
        return os.fspath(self.path)

    def __str__(self) -> str:
        return repr(os.fspath(self.path))


@dataclass(frozen=True, slots=True, init=False)
class AbsFile(TypedPath):
    def read_bytes(self) -> bytes:
        return self.path.read_bytes()

    def remove(self) -> None:
        self.path.unlink(missing_ok=True)


@dataclass(frozen=True, slots=True, init=False)
class AbsDir(TypedPath):
    def is_folder(self) -> bool:
        return self.path.is_dir()

    def remove(self) -> None:
        """Delete the directory and everything inside it, if it still exists."""
        shutil.rmtree(self.path, ignore_errors=True)


@dataclass(frozen=True)
class Remote:
    """A repository URL or local path, exactly as the user gave it."""

    repo: str

    def __fspath__(self) -> str:
        return self.repo

    def __str__(self) -> str:
        return repr(self.repo)

    def __bool__(self) -> bool:
        return bool(self.repo)

    @property
    def canonical(self) -> str:
        if os.path.exists(self.repo):
            # Resolves relative spellings of the same directory (eg "." and "./").
            return os.path.realpath(self.repo)
        return self.repo.rstrip("/")

    @property
    def is_valid(self) -> bool:
        # Leading dashes would be parsed by git as options.
        if not self.repo or self.repo != self.repo.strip() or self.repo.startswith("-"):
            return False
        return self.repo.isprintable()
