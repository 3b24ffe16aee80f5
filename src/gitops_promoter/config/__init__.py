"""Promoter configuration."""

from .factory import build_credential_provider, build_promoter, build_sync_trigger
from .loader import CONFIG_PATH, load_config, resolve_config_path, substitute_env_vars
from .models import (
    ArgoCDConfig,
    ArtifactConfig,
    CredentialsConfig,
    GitConfig,
    KustomizeConfig,
    PromoterConfig,
    WorkspaceConfig,
)

__all__ = [
    "CONFIG_PATH",
    "ArgoCDConfig",
    "ArtifactConfig",
    "CredentialsConfig",
    "GitConfig",
    "KustomizeConfig",
    "PromoterConfig",
    "WorkspaceConfig",
    "build_credential_provider",
    "build_promoter",
    "build_sync_trigger",
    "load_config",
    "resolve_config_path",
    "substitute_env_vars",
]
