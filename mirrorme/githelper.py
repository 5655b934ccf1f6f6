from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
import os
from subprocess import PIPE
from typing import TYPE_CHECKING, Any, cast

import git
from git import GitCommandError, GitError
from git import Remote as GitRemote
from git import Repo as GitRepo
from git.cmd import _AutoInterrupt as GitCmd
from loguru import logger

from .types import RefSpec, Reference
from .utils import strict_not_none

if TYPE_CHECKING:
    from .auth import AuthMethod
    from .typed_path import AbsDir, Remote

UP_TO_DATE_MESSAGE = "Everything up-to-date"


@dataclass(frozen=True, slots=True, kw_only=True)
class ProcessResult:
    stdout: str
    stderr: str
    returncode: int
    args: Sequence[str]

    def log(self, level: str) -> None:
        logger.log(level, f"Running: {self.args}")
        logger.log(level, f"stdout:\n{self.stdout}")
        logger.log(level, f"stderr:\n{self.stderr}")
        logger.log(level, f"returncode = {self.returncode}")


@dataclass(frozen=True, slots=True, kw_only=True)
class PushResult:
    up_to_date: bool
    process: ProcessResult


class GitHelper:
    @classmethod
    def init_bare(cls, local: AbsDir) -> GitRepo:
        # Convert to string explicitly to gitpython-developers/GitPython#2085
        return GitRepo.init(os.fspath(local), bare=True)

    @classmethod
    def environment(cls, auth: AuthMethod | None) -> dict[str, str]:
        env = {"GIT_TERMINAL_PROMPT": "0"}
        if auth is not None:
            env.update(auth.environment)
        return env

    @classmethod
    def run_command(
        cls,
        repo: GitRepo,
        command: str,
        *args: str,
        stdin: str | bytes | None = None,
        auth: AuthMethod | None = None,
    ) -> ProcessResult:
        kwargs: dict[str, Any] = {}
        if stdin is not None:
            kwargs["istream"] = PIPE
        cmd: GitCmd = getattr(repo.git, command)(
            *args, **kwargs, env=cls.environment(auth), as_process=True
        )
        return cls.wait(cmd, cls.encode(stdin))

    @classmethod
    def encode(cls, stdin: str | bytes | None) -> bytes | None:
        if isinstance(stdin, str):
            return stdin.encode("utf-8")
        return stdin

    @classmethod
    def wait(cls, cmd: GitCmd, stdin: bytes | None = None) -> ProcessResult:
        process = strict_not_none(cmd.proc)
        # communicate drains both pipes, so large ref listings cannot block.
        stdout, stderr = process.communicate(stdin)
        result = ProcessResult(
            stdout=strict_not_none(git.safe_decode(stdout or b"")),
            stderr=strict_not_none(git.safe_decode(stderr or b"")),
            returncode=process.returncode,
            args=tuple(cast(Sequence[str], process.args)),
        )
        if result.returncode == 0:
            result.log(level="TRACE")
        else:
            result.log(level="DEBUG")
            raise GitCommandError(
                tuple(result.args),
                status=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )
        return result

    @classmethod
    def create_remote(cls, repo: GitRepo, name: str, url: Remote) -> GitRemote:
        return repo.create_remote(name, url.repo)

    @classmethod
    def fetch(
        cls, remote: GitRemote, refspecs: Iterable[RefSpec], auth: AuthMethod | None
    ) -> ProcessResult:
        return cls.run_command(
            remote.repo,
            "fetch",
            "--no-tags",
            remote.name,
            *(str(refspec) for refspec in refspecs),
            auth=auth,
        )

    @classmethod
    def push(
        cls,
        remote: GitRemote,
        refspecs: Iterable[RefSpec],
        auth: AuthMethod | None,
    ) -> PushResult:
        result = cls.run_command(
            remote.repo,
            "push",
            remote.name,
            *(str(refspec) for refspec in refspecs),
            auth=auth,
        )
        up_to_date = UP_TO_DATE_MESSAGE in result.stderr or UP_TO_DATE_MESSAGE in result.stdout
        return PushResult(up_to_date=up_to_date, process=result)

    @classmethod
    def list_remote(cls, remote: GitRemote, auth: AuthMethod | None) -> list[Reference]:
        # --refs drops HEAD and peeled tags, matching what for-each-ref reports locally.
        result = cls.run_command(remote.repo, "ls_remote", "--refs", remote.name, auth=auth)
        return cls.parse_references(result.stdout, separator="\t")

    @classmethod
    def references(cls, repo: GitRepo) -> list[Reference]:
        result = cls.run_command(repo, "for_each_ref", "--format=%(objectname) %(refname)")
        return cls.parse_references(result.stdout, separator=" ")

    @classmethod
    def parse_references(cls, output: str, *, separator: str) -> list[Reference]:
        refs = []
        for line in output.splitlines():
            if not line.strip():
                continue
            target, name = line.split(separator, maxsplit=1)
            refs.append(Reference(name=name.strip(), target=target.strip()))
        return refs

    @classmethod
    def delete_references(cls, repo: GitRepo, names: Iterable[str]) -> None:
        commands = "".join(f"delete {name}\n" for name in names)
        if commands:
            cls.run_command(repo, "update_ref", "--stdin", stdin=commands)

    @classmethod
    def remotes(cls, repo: GitRepo) -> Mapping[str, GitRemote]:
        return {remote.name: remote for remote in repo.remotes}

    @classmethod
    def error_message(cls, error: GitError) -> str:
        if isinstance(error, GitCommandError):
            stderr = error.stderr.strip().removeprefix("stderr:").strip().strip("'").strip()
            if stderr:
                return " ".join(line.strip() for line in stderr.splitlines() if line.strip())
        return str(error)
