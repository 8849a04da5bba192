from __future__ import annotations

import pytest
from pydantic import ValidationError

from lingo_bolt.bot.events import (
    CommentCreatedEvent,
    InstallationEvent,
    IssueOrPrOpenedEvent,
    parse_webhook_event,
)


def _repository() -> dict:
    return {"name": "app", "full_name": "octo-org/app", "owner": {"login": "octo-org"}}


def test_installation_created_uses_account_fallbacks() -> None:
    event = parse_webhook_event(
        "installation",
        {"action": "created", "installation": {"id": 7, "account": {"slug": "team-a"}}},
    )

    assert isinstance(event, InstallationEvent)
    assert event.installation_id == 7
    assert event.account_login == "team-a"
    assert event.account_kind == "organization"


def test_installation_user_account_kind() -> None:
    event = parse_webhook_event(
        "installation",
        {
            "action": "deleted",
            "installation": {"id": 8, "account": {"login": "octocat", "type": "User"}},
        },
    )

    assert isinstance(event, InstallationEvent)
    assert event.action == "deleted"
    assert event.account_kind == "user"


def test_issue_opened_event() -> None:
    event = parse_webhook_event(
        "issues",
        {
            "action": "opened",
            "issue": {"number": 4, "title": "Bug", "body": None},
            "repository": _repository(),
            "installation": {"id": 11},
        },
    )

    assert isinstance(event, IssueOrPrOpenedEvent)
    assert event.kind == "issue"
    assert event.repo_full_name == "octo-org/app"
    assert event.body == ""
    assert event.installation_id == 11


def test_pull_request_opened_without_installation() -> None:
    event = parse_webhook_event(
        "pull_request",
        {
            "action": "opened",
            "pull_request": {"number": 9, "title": "Add docs", "body": "Body"},
            "repository": {"full_name": "octo-org/docs"},
        },
    )

    assert isinstance(event, IssueOrPrOpenedEvent)
    assert event.kind == "pull_request"
    assert (event.owner, event.repo) == ("octo-org", "docs")
    assert event.installation_id is None


def test_comment_created_captures_origin_and_parent() -> None:
    event = parse_webhook_event(
        "issue_comment",
        {
            "action": "created",
            "comment": {
                "body": "@lingo-bolt summarize",
                "user": {"id": 501, "login": "lingo-bolt[bot]", "type": "Bot"},
                "performed_via_github_app": {"id": 1001},
            },
            "issue": {"number": 3, "title": "Title", "body": "Parent"},
            "repository": _repository(),
            "installation": {"id": 11},
        },
    )

    assert isinstance(event, CommentCreatedEvent)
    assert event.comment_author_id == "501"
    assert event.comment_author_is_bot is True
    assert event.comment_app_id == "1001"
    assert event.parent_body == "Parent"
    assert event.parent_title == "Title"


@pytest.mark.parametrize(
    ("event_name", "action"),
    [("issues", "closed"), ("issue_comment", "edited"), ("push", ""), ("installation", "suspend")],
)
def test_unhandled_events_return_none(event_name: str, action: str) -> None:
    assert parse_webhook_event(event_name, {"action": action}) is None


def test_opened_event_rejects_missing_number() -> None:
    with pytest.raises(ValidationError):
        parse_webhook_event(
            "issues",
            {"action": "opened", "issue": {"title": "x"}, "repository": _repository()},
        )


@pytest.mark.parametrize(
    "payload",
    [
        {"action": "created", "installation": {"account": {"login": "octo-org"}}},
        {"action": "deleted"},
    ],
)
def test_installation_without_id_has_no_installation_id(payload: dict) -> None:
    event = parse_webhook_event("installation", payload)

    assert isinstance(event, InstallationEvent)
    assert event.installation_id is None
