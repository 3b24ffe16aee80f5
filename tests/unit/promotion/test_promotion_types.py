"""Tests for promotion request models and commit messages."""

import pytest
from pydantic import ValidationError

from gitops_promoter.promotion.messages import (
    orphan_root_message,
    source_commit_message,
    target_commit_message,
)
from gitops_promoter.promotion.types import ImageChange, PromotionRequest

REPO_URL = "https://git.example.com/org/deploy.git"


class TestImageChange:
    """Tests for ImageChange parsing and formatting."""

    def test_kustomize_argument(self) -> None:
        image = ImageChange(repository="ghcr.io/org/app", tag="v2")

        assert image.reference == "ghcr.io/org/app:v2"
        assert image.kustomize_argument == "ghcr.io/org/app=ghcr.io/org/app:v2"

    @pytest.mark.parametrize(
        ("text", "repository", "tag"),
        [
            ("app=v2", "app", "v2"),
            ("app:v2", "app", "v2"),
            ("registry.local:5000/team/app:1.4.0", "registry.local:5000/team/app", "1.4.0"),
            ("registry.local:5000/app=sha-abc", "registry.local:5000/app", "sha-abc"),
        ],
    )
    def test_parse(self, text: str, repository: str, tag: str) -> None:
        image = ImageChange.parse(text)

        assert image.repository == repository
        assert image.tag == tag

    def test_parse_without_tag_fails(self) -> None:
        with pytest.raises(ValueError):
            ImageChange.parse("registry.local:5000/app")

    def test_whitespace_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ImageChange(repository="app", tag="v 2")


class TestPromotionRequest:
    """Tests for PromotionRequest validation."""

    def _request(self, **overrides: object) -> PromotionRequest:
        fields: dict[str, object] = {
            "repo_url": REPO_URL,
            "source_branch": "main",
            "target_branch": "staging",
            "images": [ImageChange(repository="app", tag="v2")],
        }
        fields.update(overrides)
        return PromotionRequest(**fields)  # type: ignore[arg-type]

    def test_overlay_defaults_to_target_branch(self) -> None:
        assert self._request().overlay == "staging"

    def test_explicit_overlay_path(self) -> None:
        assert self._request(overlay_path="envs/staging").overlay == "envs/staging"

    def test_images_are_required(self) -> None:
        with pytest.raises(ValidationError):
            self._request(images=[])

    def test_same_branch_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must differ"):
            self._request(target_branch="main")

    @pytest.mark.parametrize("branch", ["", "has space", "-flag", "a..b", "ends.", "x~1"])
    def test_invalid_branch_names(self, branch: str) -> None:
        with pytest.raises(ValidationError):
            self._request(target_branch=branch)

    @pytest.mark.parametrize("path", ["/etc", "../outside", "envs/../../x"])
    def test_overlay_must_stay_inside_repository(self, path: str) -> None:
        with pytest.raises(ValidationError):
            self._request(overlay_path=path)

    def test_request_is_immutable(self) -> None:
        request = self._request()

        with pytest.raises(ValidationError):
            request.target_branch = "prod"  # type: ignore[misc]


class TestCommitMessages:
    """Tests for commit message wording."""

    def test_single_image_source_message(self) -> None:
        images = [ImageChange(repository="app", tag="v2")]

        assert (
            source_commit_message("staging", images, "gitops-promoter")
            == "gitops-promoter: updating staging to use image app:v2"
        )

    def test_multiple_images_are_listed(self) -> None:
        images = [
            ImageChange(repository="api", tag="v2"),
            ImageChange(repository="worker", tag="v3"),
        ]

        message = source_commit_message("staging", images, "p")

        assert message.splitlines() == [
            "p: updating staging to use new images",
            " * api:v2",
            " * worker:v3",
        ]

    def test_target_message(self) -> None:
        images = [ImageChange(repository="app", tag="v2")]

        assert target_commit_message(images, "p") == "p: updating to use new image app:v2"

    def test_orphan_root_message(self) -> None:
        assert orphan_root_message("staging", "p") == "p: initialize rendered branch staging"
