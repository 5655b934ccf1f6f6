from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Self

from git import GitError
from git import Remote as GitRemote
from loguru import logger

from .constants import DST_REMOTE_NAME, MIRROR_REFSPEC
from .errors import PruneError, TransportError
from .githelper import GitHelper
from .logger import describe
from .refs import difference, to_delete_refspecs
from .types import RefSpec

if TYPE_CHECKING:
    from .auth import AuthMethod
    from .staging import StagingRepo
    from .typed_path import Remote


@dataclass(frozen=True)
class Destination:
    remote: GitRemote

    @classmethod
    def attach(cls, staging: StagingRepo, url: Remote) -> Self:
        return cls(staging.add_remote(DST_REMOTE_NAME, url, role="destination"))

    @property
    def url(self) -> str:
        return self.remote.url

    def push_mirror(self, auth: AuthMethod | None) -> None:
        # --prune is never passed: deletions are pushed separately by prune.
        with describe("Pushing to destination", level="INFO"):
            try:
                result = GitHelper.push(self.remote, [MIRROR_REFSPEC.forced()], auth)
            except GitError as e:
                raise TransportError(
                    f"unable to push to {self.url!r}: {GitHelper.error_message(e)}",
                    operation="push",
                ) from e
        if result.up_to_date:
            logger.info("Destination already up to date.")
        else:
            logger.info("Successfully pushed the mirror to the destination repository.")

    def prune_specs(self, auth: AuthMethod | None, staging: StagingRepo) -> list[RefSpec]:
        # The destination is listed again here as it may have changed since the push.
        destination_refs = GitHelper.list_remote(self.remote, auth)
        extra_refs = difference(destination_refs, staging.references())
        for ref in extra_refs:
            logger.debug(f"Pruning {ref}.")
        return to_delete_refspecs(extra_refs)

    def prune(self, auth: AuthMethod | None, staging: StagingRepo) -> list[RefSpec]:
        with describe("Pruning the destination", level="INFO"):
            try:
                delete_specs = self.prune_specs(auth, staging)
                if delete_specs:
                    GitHelper.push(self.remote, delete_specs, auth)
            except GitError as e:
                raise PruneError(
                    f"unable to prune {self.url!r}: {GitHelper.error_message(e)}"
                ) from e
        if delete_specs:
            logger.info(f"Pruned {len(delete_specs)} refs from the destination.")
        else:
            logger.info("Nothing to prune.")
        return delete_specs
