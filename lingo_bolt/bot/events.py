"""Pydantic contracts for inbound host events and raw webhook classification."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from lingo_bolt.bot.models import AccountKind


class InstallationEvent(BaseModel):
    model_config = ConfigDict(extra="forbid")

    action: Literal["created", "deleted"]
    installation_id: int | None = None
    account_login: str = "unknown"
    account_kind: AccountKind = "organization"


class IssueOrPrOpenedEvent(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["issue", "pull_request"] = "issue"
    owner: str = Field(min_length=1)
    repo: str = Field(min_length=1)
    number: int = Field(ge=1)
    title: str = ""
    body: str = ""
    installation_id: int | None = None

    @property
    def repo_full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


class CommentCreatedEvent(BaseModel):
    model_config = ConfigDict(extra="forbid")

    owner: str = Field(min_length=1)
    repo: str = Field(min_length=1)
    issue_number: int = Field(ge=1)
    comment_body: str = ""
    comment_author_id: str | None = None
    comment_author_login: str = ""
    comment_author_is_bot: bool = False
    comment_app_id: str | None = None
    parent_body: str = ""
    parent_title: str = ""
    installation_id: int | None = None

    @property
    def repo_full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


BotEvent = InstallationEvent | IssueOrPrOpenedEvent | CommentCreatedEvent


def parse_webhook_event(event_name: str, payload: dict[str, Any]) -> BotEvent | None:
    """Classify a raw GitHub webhook delivery into a typed event.

    Returns ``None`` for event/action combinations the bot does not handle.
    """

    action = str(payload.get("action", "")).strip()

    if event_name == "installation" and action in {"created", "deleted"}:
        installation = payload.get("installation") or {}
        account = installation.get("account") or {}
        return InstallationEvent(
            action=action,
            installation_id=_installation_id(payload),
            account_login=_account_login(account),
            account_kind=_account_kind(account),
        )

    if event_name in {"issues", "pull_request"} and action == "opened":
        item_key = "issue" if event_name == "issues" else "pull_request"
        item = payload.get(item_key) or {}
        owner, repo = _repository_coordinates(payload)
        return IssueOrPrOpenedEvent(
            kind="issue" if event_name == "issues" else "pull_request",
            owner=owner,
            repo=repo,
            number=int(item.get("number", 0)),
            title=str(item.get("title") or ""),
            body=str(item.get("body") or ""),
            installation_id=_installation_id(payload),
        )

    if event_name == "issue_comment" and action == "created":
        comment = payload.get("comment") or {}
        issue = payload.get("issue") or {}
        user = comment.get("user") or {}
        app = comment.get("performed_via_github_app") or {}
        owner, repo = _repository_coordinates(payload)
        return CommentCreatedEvent(
            owner=owner,
            repo=repo,
            issue_number=int(issue.get("number", 0)),
            comment_body=str(comment.get("body") or ""),
            comment_author_id=_optional_str(user.get("id")),
            comment_author_login=str(user.get("login") or ""),
            comment_author_is_bot=str(user.get("type", "")) == "Bot",
            comment_app_id=_optional_str(app.get("id")),
            parent_body=str(issue.get("body") or ""),
            parent_title=str(issue.get("title") or ""),
            installation_id=_installation_id(payload),
        )

    return None


def _repository_coordinates(payload: dict[str, Any]) -> tuple[str, str]:
    repository = payload.get("repository") or {}
    owner = str((repository.get("owner") or {}).get("login", "")).strip()
    name = str(repository.get("name", "")).strip()
    if (not owner or not name) and "/" in str(repository.get("full_name", "")):
        owner, name = str(repository["full_name"]).split("/", 1)
    return owner, name


def _installation_id(payload: dict[str, Any]) -> int | None:
    installation = payload.get("installation") or {}
    raw = installation.get("id")
    if raw in (None, ""):
        return None
    return int(raw)


def _account_login(account: dict[str, Any]) -> str:
    for key in ("login", "slug", "name"):
        value = account.get(key)
        if value:
            return str(value)
    return "unknown"


def _account_kind(account: dict[str, Any]) -> AccountKind:
    return "user" if str(account.get("type", "")).lower() == "user" else "organization"


def _optional_str(value: Any) -> str | None:
    if value in (None, ""):
        return None
    return str(value)
