"""CLI context and dependency container."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

import typer
from loguru import logger

from gitops_promoter.cli.console import CLIConsole, console, err_console
from gitops_promoter.config import PromoterConfig, load_config


@dataclass(frozen=True)
class CLIContext:
    """Runtime dependencies for CLI commands."""

    console: CLIConsole
    err_console: CLIConsole
    config_path: Path | None
    verbose: bool = False

    def load_config(self, config_path: Path | None = None) -> PromoterConfig:
        return load_config(config_path or self.config_path)


def configure_logging(verbose: bool) -> None:
    """Send loguru output to stderr at INFO, or DEBUG when verbose."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def build_cli_context(config_path: Path | None = None, verbose: bool = False) -> CLIContext:
    """Build a fresh CLIContext."""
    return CLIContext(
        console=console,
        err_console=err_console,
        config_path=config_path,
        verbose=verbose,
    )


def get_cli_context(ctx: typer.Context) -> CLIContext:
    """Return the CLIContext set by the app callback, or a fresh one."""
    if isinstance(ctx.obj, CLIContext):
        return ctx.obj
    return build_cli_context()
