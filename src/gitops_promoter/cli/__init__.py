"""Main CLI application module.

This module provides the main entry point for the gitops-promoter CLI.

Commands:
- promote: Pin image tags and publish rendered manifests
- check-branch: Check whether a branch exists on the remote
- show-config: Show the effective configuration
"""

from pathlib import Path
from typing import Annotated

import typer

from .commands import check_branch, promote, show_config
from .context import build_cli_context, configure_logging

# Create the main CLI application
app = typer.Typer(
    help="GitOps image promotion with kustomize and Argo CD",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def _callback(
    ctx: typer.Context,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Configuration file (default: $GITOPS_PROMOTER_CONFIG or ./promoter.yaml)",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    configure_logging(verbose)
    ctx.obj = build_cli_context(config, verbose)


app.command("promote")(promote)
app.command("check-branch")(check_branch)
app.command("show-config")(show_config)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
