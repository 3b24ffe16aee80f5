"""End-to-end promotions against real git repositories.

A bare repository on local disk stands in for the remote, reached through a
``file://`` URL. A small shell script stands in for kustomize: ``edit set
image`` appends the image to the overlay's kustomization.yaml and ``build``
prints it, failing when the overlay is marked BROKEN.
"""

import shutil
import stat
import subprocess
from pathlib import Path

import pytest

from gitops_promoter.credentials import RepositoryCredentials, StaticCredentialProvider
from gitops_promoter.errors import CredentialError, PatchError, RenderError
from gitops_promoter.promotion import ImageChange, Promoter, PromotionRequest
from gitops_promoter.shell_commands.types import BranchStatus
from gitops_promoter.workspace import WorkspaceManager

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(shutil.which("git") is None, reason="git not available"),
]

FAKE_KUSTOMIZE = """\
#!/bin/sh
case "$1" in
  edit)
    echo "# image $4" >> kustomization.yaml
    ;;
  build)
    if grep -q BROKEN kustomization.yaml; then
      echo "Error: accumulating resources" >&2
      exit 1
    fi
    cat kustomization.yaml
    ;;
  *)
    echo "unsupported: $*" >&2
    exit 1
    ;;
esac
"""


def git(*args: str, cwd: Path | None = None, check: bool = True) -> subprocess.CompletedProcess:
    return subprocess.run(
        [
            "git",
            "-c",
            "user.name=seed",
            "-c",
            "user.email=seed@example.com",
            *args,
        ],
        cwd=cwd,
        check=check,
        capture_output=True,
        text=True,
    )


@pytest.fixture
def remote(tmp_path: Path) -> Path:
    """Bare repository with a main branch holding staging and prod overlays."""
    seed = tmp_path / "seed"
    seed.mkdir()
    git("init", "-q", cwd=seed)
    git("symbolic-ref", "HEAD", "refs/heads/main", cwd=seed)
    (seed / "README.md").write_text("deploy repo\n")
    (seed / "base").mkdir()
    (seed / "base" / "deployment.yaml").write_text("kind: Deployment\n")
    (seed / "staging").mkdir()
    (seed / "staging" / "kustomization.yaml").write_text("resources:\n- ../base\n")
    (seed / "prod").mkdir()
    (seed / "prod" / "kustomization.yaml").write_text("# BROKEN\n")
    git("add", ".", cwd=seed)
    git("commit", "-q", "-m", "seed", cwd=seed)

    bare = tmp_path / "remote.git"
    git("clone", "-q", "--bare", str(seed), str(bare))
    return bare


@pytest.fixture
def fake_kustomize(tmp_path: Path) -> Path:
    path = tmp_path / "bin" / "kustomize"
    path.parent.mkdir()
    path.write_text(FAKE_KUSTOMIZE)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def workspaces(tmp_path: Path) -> Path:
    return tmp_path / "workspaces"


@pytest.fixture
def promoter(fake_kustomize: Path, workspaces: Path) -> Promoter:
    provider = StaticCredentialProvider(
        credential_sets={"file://": RepositoryCredentials(password="unused")}
    )
    return Promoter(
        provider,
        workspaces=WorkspaceManager(workspaces),
        kustomize_binary=str(fake_kustomize),
        command_timeout=60,
    )


def _request(remote: Path, tag: str = "v2", target: str = "staging") -> PromotionRequest:
    return PromotionRequest(
        repo_url=remote.as_uri(),
        source_branch="main",
        target_branch=target,
        images=[ImageChange(repository="app", tag=tag)],
    )


def _rev(remote: Path, ref: str) -> str:
    return git("--git-dir", str(remote), "rev-parse", ref).stdout.strip()


def _show(remote: Path, spec: str) -> str:
    return git("--git-dir", str(remote), "show", spec).stdout


def _tree(remote: Path, ref: str) -> list[str]:
    output = git("--git-dir", str(remote), "ls-tree", "--name-only", ref).stdout
    return output.split()


def _has_branch(remote: Path, branch: str) -> bool:
    result = git(
        "--git-dir", str(remote), "rev-parse", "--verify", "-q", f"refs/heads/{branch}", check=False
    )
    return result.returncode == 0


class TestNewTargetBranch:
    """A promotion to a branch that does not exist yet."""

    def test_creates_orphan_branch_with_artifact(
        self, promoter: Promoter, remote: Path
    ) -> None:
        main_before = _rev(remote, "main")

        result = promoter.promote(_request(remote))

        assert result.target_branch_created is True
        assert result.commit_sha == _rev(remote, "staging")
        assert _tree(remote, "staging") == ["all.yaml"]
        artifact = _show(remote, "staging:all.yaml")
        assert "resources:" in artifact
        assert "# image app=app:v2" in artifact

        main_after = _rev(remote, "main")
        assert main_after != main_before
        assert _rev(remote, "main^") == main_before
        assert "# image app=app:v2" in _show(remote, "main:staging/kustomization.yaml")
        message = git("--git-dir", str(remote), "log", "-1", "--format=%s", "main").stdout
        assert message.strip() == "gitops-promoter: updating staging to use image app:v2"

    def test_target_history_is_disjoint_from_source(
        self, promoter: Promoter, remote: Path
    ) -> None:
        promoter.promote(_request(remote))

        count = git("--git-dir", str(remote), "rev-list", "--count", "staging").stdout
        assert int(count) == 2
        roots = git(
            "--git-dir", str(remote), "rev-list", "--max-parents=0", "staging"
        ).stdout.split()
        assert len(roots) == 1
        merge_base = git(
            "--git-dir", str(remote), "merge-base", "main", "staging", check=False
        )
        assert merge_base.returncode == 1

    def test_workspace_is_removed(
        self, promoter: Promoter, remote: Path, workspaces: Path
    ) -> None:
        promoter.promote(_request(remote))

        assert list(workspaces.iterdir()) == []


class TestExistingTargetBranch:
    """A second promotion to the same target branch."""

    def test_adds_one_commit_on_top(self, promoter: Promoter, remote: Path) -> None:
        first = promoter.promote(_request(remote, tag="v2"))

        second = promoter.promote(_request(remote, tag="v3"))

        assert second.target_branch_created is False
        assert second.commit_sha == _rev(remote, "staging")
        assert _rev(remote, "staging^") == first.commit_sha
        count = git("--git-dir", str(remote), "rev-list", "--count", "staging").stdout
        assert int(count) == 3
        assert _tree(remote, "staging") == ["all.yaml"]
        assert "# image app=app:v3" in _show(remote, "staging:all.yaml")

    def test_check_branch_sees_published_branch(
        self, promoter: Promoter, remote: Path
    ) -> None:
        assert promoter.check_branch(remote.as_uri(), "staging").status is BranchStatus.NOT_FOUND

        promoter.promote(_request(remote))

        assert promoter.check_branch(remote.as_uri(), "staging").status is BranchStatus.EXISTS


class TestFailures:
    """Failures leave the remote in a well-defined state."""

    def test_no_credentials_changes_nothing(
        self, fake_kustomize: Path, workspaces: Path, remote: Path
    ) -> None:
        promoter = Promoter(
            StaticCredentialProvider(),
            workspaces=WorkspaceManager(workspaces),
            kustomize_binary=str(fake_kustomize),
        )
        main_before = _rev(remote, "main")

        with pytest.raises(CredentialError, match="no credentials for repository"):
            promoter.promote(_request(remote))

        assert _rev(remote, "main") == main_before
        assert not _has_branch(remote, "staging")
        assert list(workspaces.iterdir()) == []

    def test_render_failure_after_source_push(
        self, promoter: Promoter, remote: Path
    ) -> None:
        """The overlay change is already pushed; the target is never created."""
        main_before = _rev(remote, "main")

        with pytest.raises(RenderError) as excinfo:
            promoter.promote(_request(remote, target="prod"))

        assert excinfo.value.operation == "render manifests"
        assert _rev(remote, "main^") == main_before
        assert not _has_branch(remote, "prod")

    def test_missing_overlay(self, promoter: Promoter, remote: Path) -> None:
        main_before = _rev(remote, "main")

        with pytest.raises(PatchError):
            promoter.promote(_request(remote, target="qa"))

        assert _rev(remote, "main") == main_before
        assert not _has_branch(remote, "qa")
