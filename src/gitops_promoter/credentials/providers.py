"""Credential providers.

A provider answers two questions for a repository URL: are there
credentials for this exact repository, and are there credential-set
(URL-prefix) credentials that cover it. Both return an empty
:class:`RepositoryCredentials` when nothing matches.
"""

from __future__ import annotations

import base64
from collections.abc import Iterable, Mapping
from typing import Any, Protocol

from loguru import logger

from gitops_promoter.infra.constants import DEFAULT_CONSTANTS, PromotionConstants
from gitops_promoter.infra.k8s.secrets import SecretReader

from .models import RepositoryCredentials


class CredentialProvider(Protocol):
    def lookup_repository(self, repo_url: str) -> RepositoryCredentials: ...

    def lookup_credential_set(self, repo_url: str) -> RepositoryCredentials: ...


def normalize_url(url: str) -> str:
    return url.strip().rstrip("/")


def match_credential_set(
    repo_url: str, candidates: Iterable[tuple[str, RepositoryCredentials]]
) -> RepositoryCredentials:
    """Pick the credential set with the longest URL prefix matching repo_url."""
    target = normalize_url(repo_url)
    best: tuple[int, RepositoryCredentials] | None = None
    for prefix, record in candidates:
        normalized = normalize_url(prefix)
        if not normalized or not target.startswith(normalized):
            continue
        if best is None or len(normalized) > best[0]:
            best = (len(normalized), record)
    return best[1] if best else RepositoryCredentials()


class StaticCredentialProvider:
    """Provider backed by mappings from configuration.

    Args:
        repositories: Exact repository URL -> credentials
        credential_sets: URL prefix -> credentials
    """

    def __init__(
        self,
        repositories: Mapping[str, RepositoryCredentials] | None = None,
        credential_sets: Mapping[str, RepositoryCredentials] | None = None,
    ) -> None:
        self._repositories = {
            normalize_url(url): record for url, record in (repositories or {}).items()
        }
        self._credential_sets = dict(credential_sets or {})

    def lookup_repository(self, repo_url: str) -> RepositoryCredentials:
        return self._repositories.get(normalize_url(repo_url), RepositoryCredentials())

    def lookup_credential_set(self, repo_url: str) -> RepositoryCredentials:
        return match_credential_set(repo_url, self._credential_sets.items())


class ArgoCDSecretCredentialProvider:
    """Provider reading Argo CD repository and repo-creds secrets.

    Argo CD stores repository credentials as Secrets labelled
    ``argocd.argoproj.io/secret-type=repository`` (exact URL) and
    ``argocd.argoproj.io/secret-type=repo-creds`` (URL prefix).
    """

    def __init__(
        self,
        reader: SecretReader,
        namespace: str | None = None,
        constants: PromotionConstants | None = None,
    ) -> None:
        self._reader = reader
        self._constants = constants or DEFAULT_CONSTANTS
        self._namespace = namespace or self._constants.ARGOCD_NAMESPACE

    def _records(self, secret_type: str) -> list[tuple[str, RepositoryCredentials]]:
        selector = f"{self._constants.ARGOCD_SECRET_TYPE_LABEL}={secret_type}"
        records = []
        for data in self._reader.list_secret_data(self._namespace, selector):
            fields = _decode_secret_data(data)
            url = fields.get("url", "")
            if not url:
                continue
            records.append(
                (
                    url,
                    RepositoryCredentials(
                        type=fields.get("type", ""),
                        ssh_private_key=fields.get("sshPrivateKey", ""),
                        username=fields.get("username", ""),
                        password=fields.get("password", ""),
                    ),
                )
            )
        logger.debug(
            f"Found {len(records)} Argo CD {secret_type} secrets in {self._namespace}"
        )
        return records

    def lookup_repository(self, repo_url: str) -> RepositoryCredentials:
        target = normalize_url(repo_url)
        for url, record in self._records(self._constants.ARGOCD_REPOSITORY_SECRET_TYPE):
            if normalize_url(url) == target:
                return record
        return RepositoryCredentials()

    def lookup_credential_set(self, repo_url: str) -> RepositoryCredentials:
        return match_credential_set(
            repo_url,
            self._records(self._constants.ARGOCD_CREDENTIAL_SET_SECRET_TYPE),
        )


def _decode_secret_data(data: Mapping[str, Any]) -> dict[str, str]:
    decoded = {}
    for key, value in data.items():
        if not isinstance(value, str):
            continue
        try:
            decoded[key] = base64.b64decode(value).decode("utf-8")
        except ValueError:
            logger.warning(f"Skipping undecodable secret field {key}")
    return decoded
