from pathlib import Path

from .types import RefSpec

MIRROR_NAME: str = "git-mirror-me"

LOADING_SUFFIX: str = "..."
DONE_SUFFIX: str = "[done]"
FAILURE_SUFFIX: str = "[failed]"

SRC_REMOTE_NAME: str = "src"
DST_REMOTE_NAME: str = "dst"
MIRROR_REFSPEC: RefSpec = RefSpec("refs/*", "refs/*")
DEFAULT_EXCLUDED_PREFIXES: tuple[str, ...] = ("refs/pull",)

STAGING_DIR_PREFIX: str = f"{MIRROR_NAME}-staging-"
TMP_KNOWN_HOSTS_PREFIX: str = f"{MIRROR_NAME}-known_hosts-"
TMP_PRIVATE_KEY_PREFIX: str = f"{MIRROR_NAME}-id-"
TMP_FILE_PERMISSIONS: int = 0o600
DEFAULT_KNOWN_HOSTS_PATH: Path = Path("~/.ssh/known_hosts")
