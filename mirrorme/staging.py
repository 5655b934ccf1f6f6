from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
import tempfile
from types import TracebackType
from typing import TYPE_CHECKING, Self

from git import GitError
from git import Remote as GitRemote
from git import Repo as GitRepo
from loguru import logger

from .constants import MIRROR_REFSPEC, SRC_REMOTE_NAME, STAGING_DIR_PREFIX
from .errors import AllocationError, FilterError, RemoteConfigError, TransportError
from .githelper import GitHelper
from .logger import describe
from .refs import is_excluded
from .typed_path import AbsDir, Remote
from .types import Reference

if TYPE_CHECKING:
    from .auth import AuthMethod


@dataclass
class StagingRepo:
    """A throwaway bare repository that holds the refs being mirrored.

    The repository lives in a private temporary directory that is removed when
    the context manager exits, whatever the outcome of the run.
    """

    local: AbsDir
    repo: GitRepo
    _closed: bool = field(default=False, init=False, repr=False)

    @classmethod
    def create(cls) -> Self:
        try:
            local = AbsDir(tempfile.mkdtemp(prefix=STAGING_DIR_PREFIX))
        except OSError as e:
            raise AllocationError(f"unable to create a staging directory ({e})") from e
        try:
            repo = GitHelper.init_bare(local)
        except (GitError, OSError) as e:
            local.remove()
            raise AllocationError(f"unable to initialise a staging repository ({e})") from e
        logger.debug(f"Staging repository created in {local}.")
        return cls(local, repo)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        type_: type[BaseException] | None,
        value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.repo.close()
        self.local.remove()

    def add_remote(self, name: str, url: Remote, *, role: str) -> GitRemote:
        if not url.is_valid:
            raise RemoteConfigError(f"invalid repository URL {url}", remote=role)
        if name in GitHelper.remotes(self.repo):
            raise RemoteConfigError(f"a remote named {name!r} already exists", remote=role)
        try:
            return GitHelper.create_remote(self.repo, name, url)
        except GitError as e:
            raise RemoteConfigError(f"{url} ({e})", remote=role) from e

    def attach_source(self, url: Remote) -> GitRemote:
        return self.add_remote(SRC_REMOTE_NAME, url, role="source")

    def fetch_all(self, remote: GitRemote, auth: AuthMethod | None = None) -> None:
        with describe(f"Fetching all refs from {remote.url}", level="INFO"):
            try:
                GitHelper.fetch(remote, [MIRROR_REFSPEC], auth)
            except GitError as e:
                message = GitHelper.error_message(e)
                raise TransportError(
                    f"unable to fetch from {remote.url!r}: {message}", operation="fetch"
                ) from e
        logger.debug(f"Staged {len(self.references())} refs.")

    def apply_exclusion_filter(self, prefixes: Sequence[str]) -> list[Reference]:
        if not prefixes:
            return []
        try:
            excluded = [ref for ref in self.references() if is_excluded(ref.name, prefixes)]
            GitHelper.delete_references(self.repo, (ref.name for ref in excluded))
        except GitError as e:
            message = GitHelper.error_message(e)
            raise FilterError(f"unable to remove excluded refs: {message}") from e
        if excluded:
            logger.debug(f"Excluded {len(excluded)} refs matching {list(prefixes)}.")
        return excluded

    def references(self) -> list[Reference]:
        return GitHelper.references(self.repo)

