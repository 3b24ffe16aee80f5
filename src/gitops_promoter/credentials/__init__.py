"""Credential resolution and provisioning."""

from .models import (
    Credentials,
    RepositoryCredentials,
    SSHKey,
    UsernamePassword,
    to_credentials,
)
from .providers import (
    ArgoCDSecretCredentialProvider,
    CredentialProvider,
    StaticCredentialProvider,
)
from .provisioner import CredentialProvisioner, build_credential_url

__all__ = [
    "ArgoCDSecretCredentialProvider",
    "CredentialProvider",
    "CredentialProvisioner",
    "Credentials",
    "RepositoryCredentials",
    "SSHKey",
    "StaticCredentialProvider",
    "UsernamePassword",
    "build_credential_url",
    "to_credentials",
]
