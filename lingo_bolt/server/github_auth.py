"""GitHub credentials: static tokens or GitHub App installation tokens."""

from __future__ import annotations

import os
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import requests
from jose import jwt


# Refresh installation tokens this long before GitHub expires them.
TOKEN_REFRESH_MARGIN_S = 60


class GitHubConfigurationError(RuntimeError):
    """Raised when GitHub credentials are missing or unusable."""


@dataclass(frozen=True)
class GitHubCredentials:
    token: str | None
    app_id: str | None
    private_key: str | None

    @property
    def uses_app(self) -> bool:
        return bool(self.app_id and self.private_key)

    def redacted(self) -> dict[str, str]:
        return {
            "token": _redact_token(self.token),
            "app_id": self.app_id or "unset",
            "private_key": "set" if self.private_key else "unset",
        }


def load_github_credentials_from_env(env: dict[str, str] | None = None) -> GitHubCredentials:
    env_map = env or os.environ

    token = _clean(env_map.get("LINGO_BOLT_GITHUB_TOKEN") or env_map.get("GITHUB_TOKEN"))
    app_id = _clean(env_map.get("LINGO_BOLT_GITHUB_APP_ID") or env_map.get("GITHUB_APP_ID"))
    private_key = _clean(env_map.get("LINGO_BOLT_GITHUB_PRIVATE_KEY"))
    return GitHubCredentials(token=token, app_id=app_id, private_key=private_key)


def load_private_key(raw: str) -> str:
    """Accept a PEM string (optionally with escaped newlines) or a path to one."""

    if "BEGIN" in raw and "PRIVATE KEY" in raw:
        return raw.replace("\\n", "\n")
    path = Path(raw.strip().strip('"'))
    if path.exists():
        return path.read_text()
    raise GitHubConfigurationError(
        "LINGO_BOLT_GITHUB_PRIVATE_KEY must be a PEM string or a path to a PEM file"
    )


def generate_app_jwt(app_id: str, private_key: str, now: float | None = None) -> str:
    issued = int(now if now is not None else time.time())
    payload = {"iat": issued - 60, "exp": issued + 600, "iss": app_id}
    return jwt.encode(payload, load_private_key(private_key), algorithm="RS256")


class InstallationTokenCache:
    """Exchanges app JWTs for installation tokens and caches them until expiry."""

    def __init__(
        self,
        credentials: GitHubCredentials,
        base_url: str = "https://api.github.com",
        session: requests.Session | None = None,
    ) -> None:
        if not credentials.uses_app:
            raise GitHubConfigurationError("GitHub App id and private key are required")
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self._tokens: dict[int, tuple[str, float]] = {}
        self._lock = threading.Lock()

    def token_for(self, installation_id: int) -> str:
        with self._lock:
            cached = self._tokens.get(installation_id)
            if cached and cached[1] - TOKEN_REFRESH_MARGIN_S > time.time():
                return cached[0]

        app_jwt = generate_app_jwt(
            self.credentials.app_id or "", self.credentials.private_key or ""
        )
        response = self.session.request(
            method="POST",
            url=f"{self.base_url}/app/installations/{installation_id}/access_tokens",
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {app_jwt}",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=15,
        )
        response.raise_for_status()
        payload = response.json()
        token = payload.get("token")
        expires_at = _parse_expiry(payload.get("expires_at"))
        if not token or expires_at is None:
            raise GitHubConfigurationError(
                "GitHub installation token response missing token or expires_at"
            )
        with self._lock:
            self._tokens[installation_id] = (token, expires_at)
        return token


def _parse_expiry(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()
    except ValueError:
        return None


def _clean(token: str | None) -> str | None:
    if token is None:
        return None
    value = token.strip()
    return value or None


def _redact_token(token: str | None) -> str:
    if token is None:
        return "unset"
    if len(token) <= 8:
        return "***"
    return f"{token[:4]}...{token[-4:]}"
