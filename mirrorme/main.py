from __future__ import annotations

from collections.abc import Callable
import functools
import sys
import traceback

import click
from loguru import logger

from .config import MirrorConfig, SSHConfig, default_source
from .constants import DEFAULT_EXCLUDED_PREFIXES, MIRROR_NAME
from .logger import setup_logger
from .mirror import Mirror
from .typed_path import Remote
from .types import ExitCode


def check_for_errors[**P](fn: Callable[P, ExitCode | None]) -> Callable[P, None]:
    @functools.wraps(fn)
    def main(*args: P.args, **kwargs: P.kwargs) -> None:
        try:
            exitcode = fn(*args, **kwargs)
        except BaseException as e:
            logger.debug(f"Threw {type(e)}!")
            logger.trace(traceback.format_exc())
            logger.error(f"{type(e).__name__}: {e}")
            sys.exit(1)
        if exitcode is not None:
            sys.exit(exitcode)

    return main


@click.command(name=MIRROR_NAME, context_settings=dict(show_default=True))
@click.option(
    "--source-repository",
    envvar="INPUT_SOURCE-REPOSITORY",
    default=None,
    help="Repository to mirror from. Defaults to the repository running the GitHub workflow.",
)
@click.option(
    "--destination-repository",
    envvar="INPUT_DESTINATION-REPOSITORY",
    default="",
    help="Repository to mirror to.",
)
@click.option(
    "--ssh-known-hosts",
    envvar="INPUT_SSH-KNOWN-HOSTS",
    default="",
    show_default=False,
    help="Known hosts content used to verify the SSH host keys.",
)
@click.option(
    "--ssh-known-hosts-path",
    envvar="INPUT_SSH-KNOWN-HOSTS-PATH",
    default="",
    help="Known hosts file used when no known hosts content is given.",
)
@click.option(
    "--ssh-private-key",
    envvar="INPUT_SSH-PRIVATE-KEY",
    default="",
    show_default=False,
    help="SSH private key used to authenticate with the destination.",
)
@click.option(
    "--ssh-private-key-path",
    envvar="INPUT_SSH-PRIVATE-KEY-PATH",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="File holding the SSH private key, if not passed as content.",
)
@click.option(
    "--exclude-prefix",
    "excluded_prefixes",
    envvar="INPUT_EXCLUDE-PREFIX",
    multiple=True,
    help="Ref prefix that is never mirrored (repeatable). [default: refs/pull]",
)
@click.option(
    "--no-default-exclusions",
    envvar="INPUT_NO-DEFAULT-EXCLUSIONS",
    is_flag=True,
    help="Mirror refs/pull too when no --exclude-prefix is given.",
)
@click.option(
    "--strict-prune",
    envvar="INPUT_STRICT-PRUNE",
    is_flag=True,
    help="Fail the run when stale destination refs cannot be pruned.",
)
@click.option("--debug", envvar="INPUT_DEBUG", is_flag=True, help="Enable debug output.")
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Display more output (repeat up to 2 times).",
    show_default=False,
)
@click.option(
    "-q",
    "--quiet",
    count=True,
    help="Display less output (repeat up to 3 times).",
    show_default=False,
)
@check_for_errors
def main(
    source_repository: str | None,
    destination_repository: str,
    ssh_known_hosts: str,
    ssh_known_hosts_path: str,
    ssh_private_key: str,
    ssh_private_key_path: str | None,
    excluded_prefixes: tuple[str, ...],
    no_default_exclusions: bool,
    strict_prune: bool,
    debug: bool,
    verbose: int,
    quiet: int,
) -> None:
    """Mirror every ref of a source git repository to a destination repository.

    \b
    Examples:
    # Mirror a public repository over SSH.
    git-mirror-me --source-repository https://github.com/octocat/hello-world \\
        --destination-repository git@gitlab.com:octocat/hello-world.git \\
        --ssh-private-key "$(cat ~/.ssh/id_ed25519)"

    \b
    # Mirror between local repositories, keeping pull request refs.
    git-mirror-me --source-repository ./src.git --destination-repository ./dst.git \\
        --exclude-prefix refs/keep-around
    """
    setup_logger(quiet, verbose, debug=debug)
    if ssh_private_key_path is not None and not ssh_private_key:
        with open(ssh_private_key_path) as f:
            ssh_private_key = f.read()
    source = Remote(source_repository) if source_repository else default_source()
    default_exclusions = () if no_default_exclusions else DEFAULT_EXCLUDED_PREFIXES
    config = MirrorConfig(
        source=source or Remote(""),
        destination=Remote(destination_repository),
        ssh=SSHConfig(
            known_hosts=ssh_known_hosts,
            known_hosts_path=ssh_known_hosts_path,
            private_key=ssh_private_key,
        ),
        excluded_prefixes=excluded_prefixes or default_exclusions,
        debug=debug,
        strict_prune=strict_prune,
    )
    Mirror(config).run()


if __name__ == "__main__":
    main()
