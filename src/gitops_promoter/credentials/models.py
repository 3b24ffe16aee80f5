"""Credential data types."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field

from gitops_promoter.infra.constants import DEFAULT_CONSTANTS


class RepositoryCredentials(BaseModel):
    """Raw credential record returned by a credential provider.

    An all-empty record means "not found". Providers return one rather than
    raising so lookups can fall through to the next source.
    """

    model_config = ConfigDict(frozen=True)

    type: str = Field(default="", description="Repository type; only git is usable")
    ssh_private_key: str = Field(default="", repr=False)
    username: str = ""
    password: str = Field(default="", repr=False)

    @property
    def is_git(self) -> bool:
        return self.type in DEFAULT_CONSTANTS.GIT_REPOSITORY_TYPES

    @property
    def is_empty(self) -> bool:
        """No SSH key and no password, so nothing to authenticate with."""
        return not self.ssh_private_key and not self.password


@dataclass(frozen=True)
class SSHKey:
    """SSH private key credentials."""

    private_key: str = field(repr=False)


@dataclass(frozen=True)
class UsernamePassword:
    """Username/password (or token) credentials."""

    username: str
    password: str = field(repr=False)


Credentials = SSHKey | UsernamePassword


def to_credentials(record: RepositoryCredentials) -> Credentials | None:
    """Turn a provider record into usable credentials.

    SSH keys take precedence over passwords when a record carries both.
    Records for non-git repositories, and empty records, yield None.
    """
    if not record.is_git or record.is_empty:
        return None
    if record.ssh_private_key:
        return SSHKey(private_key=record.ssh_private_key)
    return UsernamePassword(username=record.username, password=record.password)
