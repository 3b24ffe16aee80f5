"""Promotion commands.

This module provides the promote, check-branch, and show-config commands.
"""

from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich.syntax import Syntax
from rich.table import Table

from gitops_promoter.config import build_promoter, build_sync_trigger
from gitops_promoter.promotion import ImageChange, PromotionRequest
from gitops_promoter.shell_commands.types import BranchStatus

from .console import with_error_handling
from .context import CLIContext, get_cli_context

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Configuration file (overrides the global --config)",
    ),
]

# ---------------------------------------------------------------------------
# Helper Functions
# ---------------------------------------------------------------------------


def _build_request(
    cli: CLIContext,
    repo_url: str,
    source_branch: str,
    target_branch: str,
    images: list[str],
    overlay_path: str | None,
) -> PromotionRequest:
    """Validate command-line input into a PromotionRequest.

    Exits with status 2 on invalid input, like click's usage errors.
    """
    try:
        return PromotionRequest(
            repo_url=repo_url,
            source_branch=source_branch,
            target_branch=target_branch,
            images=tuple(ImageChange.parse(image) for image in images),
            overlay_path=overlay_path,
        )
    except ValueError as e:
        cli.err_console.handle_error(
            "Invalid promotion request", str(e), exit_code=2
        )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@with_error_handling
def promote(
    ctx: typer.Context,
    repo_url: Annotated[
        str,
        typer.Option("--repo-url", help="Repository holding the overlays"),
    ],
    source_branch: Annotated[
        str,
        typer.Option("--source-branch", help="Branch holding the overlays"),
    ],
    target_branch: Annotated[
        str,
        typer.Option("--target-branch", help="Rendered-output branch to publish"),
    ],
    image: Annotated[
        list[str],
        typer.Option(
            "--image",
            "-i",
            help="New image as repo=tag or repo:tag (repeatable)",
        ),
    ],
    overlay_path: Annotated[
        str | None,
        typer.Option(
            "--overlay-path",
            help="Overlay directory (defaults to the target branch name)",
        ),
    ] = None,
    retain_workspace: Annotated[
        bool,
        typer.Option(
            "--retain-workspace",
            help="Keep the workspace for debugging",
        ),
    ] = False,
    app: Annotated[
        str | None,
        typer.Option("--app", help="Argo CD Application to refresh and sync"),
    ] = None,
    app_namespace: Annotated[
        str | None,
        typer.Option("--app-namespace", help="Namespace of the Argo CD Application"),
    ] = None,
    no_sync: Annotated[
        bool,
        typer.Option("--no-sync", help="Do not notify Argo CD"),
    ] = False,
    config_file: ConfigOption = None,
) -> None:
    """Pin new image tags and publish the rendered manifests.

    This command:
    - Clones the source branch into an isolated workspace
    - Sets each image in the overlay with kustomize and pushes the change
    - Renders the overlay and publishes it to the target branch
    - Optionally asks Argo CD to refresh and sync

    The new target branch commit SHA is printed on stdout.

    Examples:
        gitops-promoter promote --repo-url https://git.example.com/org/deploy.git \\
            --source-branch main --target-branch staging --image app=v2
    """
    cli = get_cli_context(ctx)
    request = _build_request(
        cli, repo_url, source_branch, target_branch, image, overlay_path
    )
    config = cli.load_config(config_file)

    promoter = build_promoter(
        config,
        sync_trigger=build_sync_trigger(
            config, application=app, namespace=app_namespace, enabled=not no_sync
        ),
        retain_workspace=retain_workspace or None,
    )
    with cli.err_console.status(
        f"Promoting {request.source_branch} to {request.target_branch}..."
    ):
        result = promoter.promote(request)

    cli.err_console.ok(
        f"{'Created' if result.target_branch_created else 'Updated'} "
        f"{result.target_branch}"
        + (" and triggered sync" if result.synced else "")
    )
    cli.console.print(result.commit_sha)


@with_error_handling
def check_branch(
    ctx: typer.Context,
    repo_url: Annotated[
        str,
        typer.Option("--repo-url", help="Repository to query"),
    ],
    branch: Annotated[
        str,
        typer.Option("--branch", "-b", help="Branch name"),
    ],
    config_file: ConfigOption = None,
) -> None:
    """Report whether a branch exists on the remote.

    Exit status is 0 when it exists, 1 when it does not, and 2 when the
    remote cannot be queried.
    """
    cli = get_cli_context(ctx)
    promoter = build_promoter(cli.load_config(config_file))
    with cli.err_console.status(f"Querying {repo_url}..."):
        lookup = promoter.check_branch(repo_url, branch)

    if lookup.status is BranchStatus.ERROR:
        cli.err_console.handle_error(
            f"Cannot check for existence of branch {branch}",
            lookup.result.output.strip() or None,
            exit_code=2,
        )
    elif lookup.exists:
        cli.console.ok(f"Branch {branch} exists")
    else:
        cli.console.warn(f"Branch {branch} not found")
        raise typer.Exit(1)


@with_error_handling
def show_config(
    ctx: typer.Context,
    output_yaml: Annotated[
        bool,
        typer.Option("--yaml", help="Print as YAML instead of a table"),
    ] = False,
    config_file: ConfigOption = None,
) -> None:
    """Show the effective configuration with secrets masked."""
    cli = get_cli_context(ctx)
    data = cli.load_config(config_file).masked()

    if output_yaml:
        cli.console.print(
            Syntax(yaml.safe_dump({"config": data}, sort_keys=False), "yaml")
        )
        return

    table = Table(title="Effective configuration")
    table.add_column("Section", style="cyan")
    table.add_column("Setting")
    table.add_column("Value")
    for section, values in data.items():
        for key, value in values.items():
            table.add_row(section, key, str(value))
    cli.console.print(table)
