from collections.abc import Generator
import os
from pathlib import Path
from unittest import mock

import git
import pytest

from .errors import AllocationError, FilterError, RemoteConfigError, TransportError
from .githelper import GitHelper
from .staging import StagingRepo
from .test_utils import setup_repo
from .typed_path import Remote

PULL_REQUEST_REFS = {
    "refs/heads/main": "c1",
    "refs/pull/1/head": "c2",
    "refs/pull/2/merge": "c3",
}


@pytest.fixture
def staging() -> Generator[StagingRepo]:
    with StagingRepo.create() as staging:
        yield staging


def test_create_is_empty_and_bare(staging: StagingRepo) -> None:
    assert staging.local.is_folder()
    assert staging.repo.bare
    assert staging.references() == []
    assert staging.repo.remotes == []


def test_close_removes_directory() -> None:
    staging = StagingRepo.create()
    local = staging.local
    staging.close()
    assert not local.exists()
    # Closing twice is harmless.
    staging.close()


def test_context_removes_directory_on_error() -> None:
    with pytest.raises(RuntimeError), StagingRepo.create() as staging:
        local = staging.local
        raise RuntimeError()
    assert not local.exists()


def test_independent_staging_repos() -> None:
    with StagingRepo.create() as first, StagingRepo.create() as second:
        assert first.local != second.local


def test_create_fails_without_temporary_directory() -> None:
    with (
        mock.patch("tempfile.mkdtemp", side_effect=OSError("no space left on device")),
        pytest.raises(AllocationError) as e,
    ):
        StagingRepo.create()
    assert str(e.value).startswith("staging failed:")


def test_create_cleans_up_when_init_fails() -> None:
    with (
        mock.patch.object(GitHelper, "init_bare", side_effect=git.GitError("broken")),
        mock.patch("shutil.rmtree") as rmtree,
        pytest.raises(AllocationError),
    ):
        StagingRepo.create()
    rmtree.assert_called_once()


def test_attach_source(staging: StagingRepo) -> None:
    remote = staging.attach_source(Remote("https://example.com/repo.git"))
    assert remote.name == "src"
    assert remote.url == "https://example.com/repo.git"


def test_attach_source_twice(staging: StagingRepo) -> None:
    staging.attach_source(Remote("https://example.com/repo.git"))
    with pytest.raises(RemoteConfigError) as e:
        staging.attach_source(Remote("https://example.com/other.git"))
    assert str(e.value) == (
        "configure source remote failed: a remote named 'src' already exists"
    )


@pytest.mark.parametrize(
    "url",
    [
        "",
        "  https://example.com/repo.git",
        "https://example.com/repo.git\n",
        "https://example.com/\x00repo.git",
        "--upload-pack=touch /tmp/pwned",
    ],
)
def test_attach_source_invalid_url(staging: StagingRepo, url: str) -> None:
    with pytest.raises(RemoteConfigError):
        staging.attach_source(Remote(url))
    assert staging.repo.remotes == []


def test_attach_source_path_with_spaces(staging: StagingRepo, tmp_path: Path) -> None:
    path, commits = setup_repo({"refs/heads/main": "c1"}, tmp_path / "my repos" / "src.git")
    staging.fetch_all(staging.attach_source(Remote(os.fspath(path))))
    assert [ref.target for ref in staging.references()] == [commits["c1"]]


def test_attach_source_unsafe_protocol(staging: StagingRepo) -> None:
    with pytest.raises(RemoteConfigError):
        staging.attach_source(Remote("ext::sh -c touch% /tmp/pwned"))


def test_fetch_all_copies_every_ref(staging: StagingRepo) -> None:
    source, commits = setup_repo(
        {"refs/heads/main": "c1", "refs/heads/dev": "c2", "refs/tags/v1": "c1", **PULL_REQUEST_REFS}
    )
    staging.fetch_all(staging.attach_source(Remote(os.fspath(source))))
    refs = {ref.name: ref.target for ref in staging.references()}
    assert refs == {
        "refs/heads/main": commits["c1"],
        "refs/heads/dev": commits["c2"],
        "refs/tags/v1": commits["c1"],
        "refs/pull/1/head": commits["c2"],
        "refs/pull/2/merge": commits["c3"],
    }


def test_fetch_all_twice_is_up_to_date(staging: StagingRepo) -> None:
    source, _ = setup_repo({"refs/heads/main": "c1"})
    remote = staging.attach_source(Remote(os.fspath(source)))
    staging.fetch_all(remote)
    before = staging.references()
    staging.fetch_all(remote)
    assert staging.references() == before


def test_fetch_all_from_empty_repository(staging: StagingRepo, tmp_path: Path) -> None:
    git.Repo.init(tmp_path, bare=True)
    staging.fetch_all(staging.attach_source(Remote(os.fspath(tmp_path))))
    assert staging.references() == []


def test_fetch_all_missing_source(staging: StagingRepo, tmp_path: Path) -> None:
    remote = staging.attach_source(Remote(os.fspath(tmp_path / "missing")))
    with pytest.raises(TransportError) as e:
        staging.fetch_all(remote)
    assert str(e.value).startswith("fetch failed: unable to fetch from")
    assert isinstance(e.value.__cause__, git.GitCommandError)


@pytest.fixture
def fetched(staging: StagingRepo) -> StagingRepo:
    source, _ = setup_repo(PULL_REQUEST_REFS)
    staging.fetch_all(staging.attach_source(Remote(os.fspath(source))))
    return staging


def test_exclusion_filter(fetched: StagingRepo) -> None:
    excluded = fetched.apply_exclusion_filter(["refs/pull"])
    assert [ref.name for ref in fetched.references()] == ["refs/heads/main"]
    assert sorted(ref.name for ref in excluded) == ["refs/pull/1/head", "refs/pull/2/merge"]


def test_exclusion_filter_is_idempotent(fetched: StagingRepo) -> None:
    fetched.apply_exclusion_filter(["refs/pull"])
    once = fetched.references()
    assert fetched.apply_exclusion_filter(["refs/pull"]) == []
    assert fetched.references() == once


def test_exclusion_filter_without_prefixes(fetched: StagingRepo) -> None:
    before = fetched.references()
    assert fetched.apply_exclusion_filter([]) == []
    assert fetched.references() == before


def test_exclusion_filter_multiple_prefixes(fetched: StagingRepo) -> None:
    fetched.apply_exclusion_filter(["refs/pull/1", "refs/heads"])
    assert [ref.name for ref in fetched.references()] == ["refs/pull/2/merge"]


def test_exclusion_filter_failure(fetched: StagingRepo) -> None:
    with (
        mock.patch.object(
            GitHelper, "delete_references", side_effect=git.GitCommandError("update-ref", 128)
        ),
        pytest.raises(FilterError) as e,
    ):
        fetched.apply_exclusion_filter(["refs/pull"])
    assert str(e.value).startswith("filter failed:")
