"""GitHub REST API repository host."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import requests

from lingo_bolt.server.github_auth import GitHubCredentials, InstallationTokenCache
from lingo_bolt.server.github_connector import (
    LABEL_COLOR,
    LabelAlreadyExistsError,
    RepositoryHostError,
    RetryableGitHubError,
)


TokenSource = Callable[[], str | None]


class GitHubAPIHost:
    """Posts comments and labels through the GitHub REST API.

    Blocking ``requests`` calls run in a worker thread so handlers can await them.
    """

    def __init__(
        self,
        token_source: TokenSource,
        base_url: str = "https://api.github.com",
        session: requests.Session | None = None,
    ) -> None:
        self.token_source = token_source
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    async def post_comment(self, owner: str, repo: str, issue_number: int, body: str) -> None:
        await asyncio.to_thread(
            self._request,
            "POST",
            f"/repos/{owner}/{repo}/issues/{issue_number}/comments",
            json={"body": body},
        )

    async def ensure_label(self, owner: str, repo: str, name: str) -> None:
        await asyncio.to_thread(self._create_label, owner, repo, name)

    async def attach_label(self, owner: str, repo: str, issue_number: int, name: str) -> None:
        await asyncio.to_thread(
            self._request,
            "POST",
            f"/repos/{owner}/{repo}/issues/{issue_number}/labels",
            json={"labels": [name]},
        )

    def _create_label(self, owner: str, repo: str, name: str) -> None:
        response = self._send(
            "POST", f"/repos/{owner}/{repo}/labels", json={"name": name, "color": LABEL_COLOR}
        )
        if response.status_code == 422 and _is_already_exists(response):
            raise LabelAlreadyExistsError(name)
        _raise_for_status(response)

    def _request(self, method: str, path: str, json: dict[str, Any] | None = None) -> Any:
        response = self._send(method, path, json=json)
        _raise_for_status(response)
        if not response.content:
            return {}
        return response.json()

    def _send(
        self, method: str, path: str, json: dict[str, Any] | None = None
    ) -> requests.Response:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        token = self.token_source()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        response = self.session.request(
            method=method,
            url=f"{self.base_url}{path}",
            headers=headers,
            json=json,
            timeout=15,
        )
        if response.status_code in {429, 403} and _looks_like_rate_limit(response):
            raise RetryableGitHubError(
                "GitHub API rate limited",
                reason_code="github_rate_limited",
                retry_after_s=_parse_retry_after((response.headers or {}).get("Retry-After")),
            )
        if response.status_code in {500, 502, 503, 504}:
            raise RetryableGitHubError(
                "GitHub API 5xx response", reason_code=f"github_{response.status_code}"
            )
        return response


class GitHubAPIHostProvider:
    """Builds API hosts authenticated for a given installation."""

    def __init__(
        self,
        credentials: GitHubCredentials,
        base_url: str = "https://api.github.com",
        session: requests.Session | None = None,
    ) -> None:
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self._token_cache = (
            InstallationTokenCache(credentials, base_url=self.base_url, session=self.session)
            if credentials.uses_app
            else None
        )

    def for_installation(self, installation_id: int) -> GitHubAPIHost:
        token_cache = self._token_cache
        if token_cache is not None:

            def token_source() -> str | None:
                return token_cache.token_for(installation_id)

        else:
            static_token = self.credentials.token

            def token_source() -> str | None:
                return static_token

        return GitHubAPIHost(token_source=token_source, base_url=self.base_url, session=self.session)


def _raise_for_status(response: requests.Response) -> None:
    if response.status_code >= 400:
        raise RepositoryHostError(
            f"GitHub API request failed with HTTP {response.status_code}",
            reason_code=f"github_{response.status_code}",
        )


def _is_already_exists(response: requests.Response) -> bool:
    try:
        payload = response.json()
    except ValueError:
        return False
    errors = payload.get("errors", []) if isinstance(payload, dict) else []
    return any(isinstance(row, dict) and row.get("code") == "already_exists" for row in errors)


def _looks_like_rate_limit(response: requests.Response) -> bool:
    if response.status_code == 429:
        return True
    try:
        payload = response.json()
    except ValueError:
        return False
    message = str(payload.get("message", "")).lower() if isinstance(payload, dict) else ""
    return "rate limit" in message


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        parsed = float(value)
    except ValueError:
        return None
    return parsed if parsed >= 0 else None
