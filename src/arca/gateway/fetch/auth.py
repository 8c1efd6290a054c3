"""Credential providers for git sources.

Credentials are looked up once per fetch call. Absence of credentials is not
an error: public repositories are fetched unauthenticated.
"""

import base64
import os
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field

# Checked in order; the first non-empty value wins
TOKEN_ENV_VARS = ("ARCA_GIT_TOKEN", "GITHUB_TOKEN", "AZURE_DEVOPS_EXTTOKEN")

# Most hosts accept any non-empty username alongside a personal access token
TOKEN_USERNAME = "token"


@dataclass(frozen=True)
class GitCredentials:
    username: str
    secret: str = field(repr=False)

    def basic_auth_header(self) -> str:
        raw = f"{self.username}:{self.secret}".encode()
        return f"Authorization: Basic {base64.b64encode(raw).decode('ascii')}"


def credentials_from_env(env: Mapping[str, str]) -> GitCredentials | None:
    """Build credentials from the first token variable that is set."""
    for name in TOKEN_ENV_VARS:
        token = env.get(name, "")
        if token:
            return GitCredentials(username=TOKEN_USERNAME, secret=token)
    return None


def git_auth_env(credentials: GitCredentials | None, base_env: dict[str, str]) -> dict[str, str]:
    """Return an environment that makes git send the credentials over HTTP.

    The header travels through GIT_CONFIG_* variables so the secret never
    appears on a command line or in process listings.
    """
    if credentials is None:
        return base_env
    env = dict(base_env)
    index = int(env.get("GIT_CONFIG_COUNT", "0"))
    env[f"GIT_CONFIG_KEY_{index}"] = "http.extraHeader"
    env[f"GIT_CONFIG_VALUE_{index}"] = credentials.basic_auth_header()
    env["GIT_CONFIG_COUNT"] = str(index + 1)
    return env


class CredentialProvider(ABC):
    """Supplies credentials for git sources."""

    @abstractmethod
    def get_credentials(self) -> GitCredentials | None: ...


class EnvironmentCredentialProvider(CredentialProvider):
    """Reads tokens from the process environment at call time."""

    def get_credentials(self) -> GitCredentials | None:
        return credentials_from_env(os.environ)


class FakeCredentialProvider(CredentialProvider):
    """Returns fixed credentials and counts lookups for test assertions."""

    def __init__(self, credentials: GitCredentials | None = None) -> None:
        self._credentials = credentials
        self._lookup_count = 0

    def get_credentials(self) -> GitCredentials | None:
        self._lookup_count += 1
        return self._credentials

    @property
    def lookup_count(self) -> int:
        return self._lookup_count
