"""Repository host contracts, error taxonomy, and factory helpers."""

from __future__ import annotations

import os

from lingo_bolt.bot.models import RepositoryHost, RepositoryHostProvider
from lingo_bolt.server.github_auth import load_github_credentials_from_env


LABEL_COLOR = "c5def5"


class RepositoryHostError(RuntimeError):
    def __init__(self, message: str, reason_code: str = "host_error") -> None:
        super().__init__(message)
        self.reason_code = reason_code


class LabelAlreadyExistsError(RepositoryHostError):
    def __init__(self, label: str) -> None:
        super().__init__(f"Label already exists: {label}", reason_code="label_already_exists")
        self.label = label


class RetryableGitHubError(RepositoryHostError):
    def __init__(self, message: str, reason_code: str, retry_after_s: float | None = None) -> None:
        super().__init__(message, reason_code=reason_code)
        self.retry_after_s = retry_after_s


def build_host_provider_from_env(env: dict[str, str] | None = None) -> RepositoryHostProvider:
    env_map = os.environ if env is None else env
    host_type = (env_map.get("LINGO_BOLT_GITHUB_HOST") or "in_memory").strip().lower()

    if host_type == "api":
        from lingo_bolt.server.github_connector_api import GitHubAPIHostProvider

        credentials = load_github_credentials_from_env(env_map)
        base_url = (env_map.get("LINGO_BOLT_GITHUB_API_URL") or "").strip()
        return GitHubAPIHostProvider(
            credentials=credentials, base_url=base_url or "https://api.github.com"
        )

    from lingo_bolt.server.github_connector_inmemory import InMemoryHostProvider

    return InMemoryHostProvider()


__all__ = [
    "LABEL_COLOR",
    "LabelAlreadyExistsError",
    "RepositoryHost",
    "RepositoryHostError",
    "RepositoryHostProvider",
    "RetryableGitHubError",
    "build_host_provider_from_env",
]
