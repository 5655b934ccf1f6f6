from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from .auth import AuthMethod, resolve_auth
from .config import MirrorConfig
from .destination import Destination
from .errors import PruneError
from .logger import describe
from .staging import StagingRepo


@dataclass(frozen=True)
class Mirror:
    """Mirror every ref of the source repository to the destination.

    Refs matching the excluded prefixes never reach the destination, and refs
    only present at the destination are pruned once the mirror is pushed.
    """

    config: MirrorConfig

    def run(self) -> None:
        self.config.validate()
        logger.info(f"Mirroring {self.config.source} to {self.config.destination}.")
        with self.stage() as staging:
            with describe("Filtering refs"):
                excluded = staging.apply_exclusion_filter(self.config.excluded_prefixes)
            if self.config.debug:
                for ref in excluded:
                    logger.debug(f"Excluded {ref}.")
            self.push(staging)

    def stage(self) -> StagingRepo:
        with describe("Setting up a staging git repository", level="DEBUG"):
            staging = StagingRepo.create()
        try:
            source = staging.attach_source(self.config.source)
            staging.fetch_all(source)
        except BaseException:
            staging.close()
            raise
        return staging

    def push(self, staging: StagingRepo) -> None:
        with resolve_auth(self.config.ssh) as auth:
            destination = Destination.attach(staging, self.config.destination)
            destination.push_mirror(auth)
            self.prune(destination, auth, staging)

    def prune(
        self, destination: Destination, auth: AuthMethod | None, staging: StagingRepo
    ) -> None:
        try:
            destination.prune(auth, staging)
        except PruneError as e:
            if self.config.strict_prune:
                raise
            logger.error(f"{type(e).__name__}: {e}")
            logger.warning("The mirror was pushed but stale destination refs were not pruned.")
