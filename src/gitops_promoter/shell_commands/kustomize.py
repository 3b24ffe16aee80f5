"""Kustomize command abstractions.

Both commands must run with the overlay directory as their working
directory; kustomize resolves ``kustomization.yaml`` from the cwd.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class KustomizeCommands:
    """Kustomize-related shell commands.

    Provides operations for:
    - Pinning an image reference in an overlay (``edit set image``)
    - Rendering an overlay to a single manifest bundle (``build``)
    """

    def __init__(self, runner: CommandRunner, *, binary: str = "kustomize") -> None:
        """Initialize kustomize commands.

        Args:
            runner: Command runner for executing shell commands
            binary: kustomize executable name or path
        """
        self._runner = runner
        self._binary = binary

    def edit_set_image(self, overlay_dir: Path, image_argument: str) -> CommandResult:
        """Set an image reference in the overlay's kustomization.

        Args:
            overlay_dir: Overlay directory containing kustomization.yaml
            image_argument: ``name=repo:tag`` argument

        Returns:
            CommandResult; callers decide how to treat failure
        """
        cmd = [self._binary, "edit", "set", "image", image_argument]
        return self._runner.run(cmd, cwd=overlay_dir)

    def build(self, overlay_dir: Path) -> CommandResult:
        """Render the overlay.

        Standard output is kept separate from standard error so that
        ``raw_stdout`` is exactly the rendered YAML.
        """
        return self._runner.run(
            [self._binary, "build"], cwd=overlay_dir, combine_output=False
        )
