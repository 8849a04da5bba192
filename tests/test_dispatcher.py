from __future__ import annotations

import asyncio
import threading

import pytest

from lingo_bolt.bot.commands import CommandParser
from lingo_bolt.bot.dispatcher import EventDispatcher
from lingo_bolt.bot.events import CommentCreatedEvent, InstallationEvent, IssueOrPrOpenedEvent
from lingo_bolt.bot.handlers import ActionHandlers
from lingo_bolt.server.db import SettingsDB
from lingo_bolt.server.github_connector import RepositoryHostError
from lingo_bolt.server.github_connector_inmemory import InMemoryHostProvider, InMemoryRepositoryHost


class FakeDetector:
    def __init__(self, locale: str) -> None:
        self.locale = locale
        self.calls: list[str] = []

    async def detect(self, text: str) -> str:
        self.calls.append(text)
        return self.locale


class FakeTranslator:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, str]] = []

    async def translate(self, text: str, source_locale: str, target_locale: str) -> str:
        self.calls.append((text, source_locale, target_locale))
        return f"translated[{target_locale}]"


class FakeSummarizer:
    def __init__(self) -> None:
        self.calls: list[str] = []

    async def summarize(self, text: str) -> str:
        self.calls.append(text)
        return "summary"


class SpyParser(CommandParser):
    def __init__(self) -> None:
        super().__init__()
        self.calls: list[str] = []

    def parse(self, body: str):
        self.calls.append(body)
        return super().parse(body)


def _dispatcher(
    detected: str = "en",
    host: InMemoryRepositoryHost | None = None,
    app_id: str = "1001",
    bot_user_id: str = "",
) -> tuple[EventDispatcher, SettingsDB, InMemoryRepositoryHost, FakeTranslator, SpyParser]:
    db = SettingsDB()
    provider = InMemoryHostProvider(host)
    translator = FakeTranslator()
    parser = SpyParser()
    handlers = ActionHandlers(
        detector=FakeDetector(detected), translator=translator, summarizer=FakeSummarizer()
    )
    dispatcher = EventDispatcher(
        store=db,
        hosts=provider,
        handlers=handlers,
        parser=parser,
        app_id=app_id,
        bot_user_id=bot_user_id,
    )
    return dispatcher, db, provider.host, translator, parser


def _configure(db: SettingsDB, **settings) -> None:
    db.upsert_installation(42, "octo-org", "organization")
    db.update_installation_settings(42, **settings)


def _comment(**overrides) -> CommentCreatedEvent:
    fields = {
        "owner": "octo-org",
        "repo": "app",
        "issue_number": 5,
        "comment_body": "@lingo-bolt translate to spanish",
        "comment_author_id": "77",
        "parent_body": "The parent issue body",
        "parent_title": "Crash on start",
        "installation_id": 42,
    }
    fields.update(overrides)
    return CommentCreatedEvent(**fields)


def test_installation_created_and_deleted() -> None:
    dispatcher, db, _, _, _ = _dispatcher()

    created = asyncio.run(
        dispatcher.dispatch(
            InstallationEvent(
                action="created", installation_id=9, account_login="octocat", account_kind="user"
            )
        )
    )
    assert created.reason == "installation_upserted"
    assert db.get_installation(9) is not None

    asyncio.run(dispatcher.dispatch(InstallationEvent(action="deleted", installation_id=9)))
    assert db.get_installation(9) is None


@pytest.mark.parametrize(
    "payload",
    [
        {"action": "created", "installation": {"account": {"login": "octo-org"}}},
        {"action": "deleted"},
    ],
)
def test_installation_event_without_id_is_noop(payload: dict) -> None:
    dispatcher, db, _, _, _ = _dispatcher()

    result = asyncio.run(dispatcher.dispatch_webhook("installation", payload))

    assert result.status == "noop"
    assert result.reason == "missing_installation_id"
    assert db.list_installations() == []


def test_issue_opened_end_to_end_label_and_translation() -> None:
    dispatcher, db, host, translator, _ = _dispatcher(detected="ja")
    _configure(db, locale="en", auto_label=True, auto_translate=True)

    result = asyncio.run(
        dispatcher.dispatch(
            IssueOrPrOpenedEvent(
                owner="octo-org",
                repo="app",
                number=12,
                title="起動時にクラッシュ",
                body="アプリが起動しません",
                installation_id=42,
            )
        )
    )

    assert result.status == "dispatched"
    assert {row.action: row.status for row in result.actions} == {
        "auto_label": "ok",
        "auto_translate": "ok",
    }
    assert host.attached == {("octo-org/app", 12): ["lang:japanese"]}
    [comment] = host.comments_for("octo-org/app", 12)
    assert comment.startswith("**Auto-translated to English:**")
    assert "translated[en]" in comment
    assert len(translator.calls) == 1
    assert dispatcher.hosts.requested_installations == [42]


def test_issue_opened_without_installation_is_noop() -> None:
    dispatcher, _, host, _, _ = _dispatcher()

    missing_id = asyncio.run(
        dispatcher.dispatch(IssueOrPrOpenedEvent(owner="o", repo="r", number=1, title="t"))
    )
    unknown = asyncio.run(
        dispatcher.dispatch(
            IssueOrPrOpenedEvent(owner="o", repo="r", number=1, title="t", installation_id=404)
        )
    )

    assert missing_id.reason == "missing_installation_id"
    assert unknown.reason == "installation_not_configured"
    assert host.comments == []


def test_repo_override_disables_policy() -> None:
    dispatcher, db, host, _, _ = _dispatcher(detected="ja")
    _configure(db, auto_label=True, auto_translate=True)
    db.upsert_repo_config(42, "octo-org/app", auto_label=False, auto_translate=False)

    result = asyncio.run(
        dispatcher.dispatch(
            IssueOrPrOpenedEvent(
                owner="octo-org", repo="app", number=3, title="タイトル", installation_id=42
            )
        )
    )

    assert result.reason == "no_policy_enabled"
    assert host.attached == {}


class _AttachFailingHost(InMemoryRepositoryHost):
    async def attach_label(self, owner: str, repo: str, issue_number: int, name: str) -> None:
        raise RepositoryHostError("label attach failed")


def test_handler_failures_are_isolated() -> None:
    dispatcher, db, host, _, _ = _dispatcher(detected="ja", host=_AttachFailingHost())
    _configure(db, locale="en", auto_label=True, auto_translate=True)

    result = asyncio.run(
        dispatcher.dispatch(
            IssueOrPrOpenedEvent(
                owner="octo-org", repo="app", number=8, title="タイトル", installation_id=42
            )
        )
    )

    outcomes = {row.action: row for row in result.actions}
    assert outcomes["auto_label"].status == "failed"
    assert outcomes["auto_label"].detail == "label attach failed"
    assert outcomes["auto_translate"].status == "ok"
    assert result.failed is True
    assert len(host.comments) == 1


def test_bot_authored_comment_never_reaches_parser() -> None:
    dispatcher, db, host, _, parser = _dispatcher()
    _configure(db, auto_translate=True)

    by_bot = asyncio.run(dispatcher.dispatch(_comment(comment_author_is_bot=True)))
    by_self = asyncio.run(dispatcher.dispatch(_comment(comment_app_id="1001")))

    assert by_bot.reason == "bot_author"
    assert by_self.reason == "own_app_comment"
    assert parser.calls == []
    assert host.comments == []


def test_comment_by_bot_user_id_never_reaches_parser() -> None:
    dispatcher, db, host, _, parser = _dispatcher(app_id="", bot_user_id="77")
    _configure(db, auto_translate=True)

    result = asyncio.run(dispatcher.dispatch(_comment(comment_author_id="77")))

    assert result.status == "noop"
    assert result.reason == "own_app_comment"
    assert parser.calls == []
    assert host.comments == []


def test_auto_translation_marker_is_filtered() -> None:
    dispatcher, db, host, _, parser = _dispatcher(detected="fr")
    _configure(db, auto_translate=True)

    result = asyncio.run(
        dispatcher.dispatch(_comment(comment_body="**Auto-translated to English:**\n\nhello"))
    )

    assert result.reason == "auto_translation_marker"
    assert parser.calls == []


def test_translate_command_uses_parent_body() -> None:
    dispatcher, _, host, translator, _ = _dispatcher(detected="en")

    result = asyncio.run(dispatcher.dispatch(_comment()))

    assert result.reason == "command"
    assert translator.calls == [("The parent issue body", "en", "es")]
    assert host.comments_for("octo-org/app", 5) == [
        "**Translation (Spanish):**\n\ntranslated[es]"
    ]


def test_translate_command_falls_back_to_comment_body() -> None:
    dispatcher, _, _, translator, _ = _dispatcher(detected="en")

    asyncio.run(dispatcher.dispatch(_comment(parent_body="")))

    assert translator.calls[0][0] == "@lingo-bolt translate to spanish"


def test_summarize_command_uses_effective_locale_by_default() -> None:
    dispatcher, db, host, translator, _ = _dispatcher()
    _configure(db, locale="de")

    asyncio.run(dispatcher.dispatch(_comment(comment_body="@lingo-bolt summarize")))

    summarizer = dispatcher.handlers.summarizer
    assert summarizer.calls == ["# Crash on start\n\nThe parent issue body"]
    assert translator.calls == [("summary", "en", "de")]
    assert host.comments_for("octo-org/app", 5) == ["**Summary (German):**\n\ntranslated[de]"]


def test_explicit_command_takes_precedence_over_auto_translate() -> None:
    dispatcher, db, host, translator, _ = _dispatcher(detected="fr")
    _configure(db, locale="en", auto_translate=True)

    result = asyncio.run(dispatcher.dispatch(_comment()))

    assert result.reason == "command"
    assert [row.action for row in result.actions] == ["translate"]
    assert len(host.comments) == 1
    assert len(translator.calls) == 1


def test_plain_comment_falls_through_to_auto_translate() -> None:
    dispatcher, db, host, translator, _ = _dispatcher(detected="fr")
    _configure(db, locale="en", auto_translate=True)

    result = asyncio.run(dispatcher.dispatch(_comment(comment_body="Bonjour tout le monde")))

    assert result.reason == "comment_policy"
    assert translator.calls == [("Bonjour tout le monde", "fr", "en")]
    assert host.comments_for("octo-org/app", 5)[0].startswith("**Auto-translated to English:**")


def test_plain_comment_without_policy_is_noop() -> None:
    dispatcher, db, host, _, parser = _dispatcher(detected="fr")
    _configure(db, auto_translate=False)

    result = asyncio.run(dispatcher.dispatch(_comment(comment_body="Bonjour")))

    assert result.reason == "no_command"
    assert parser.calls == ["Bonjour"]
    assert host.comments == []


def test_dispatch_webhook_ignores_unsupported_events() -> None:
    dispatcher, _, _, _, _ = _dispatcher()

    result = asyncio.run(dispatcher.dispatch_webhook("issues", {"action": "closed"}))

    assert result.status == "noop"
    assert result.reason == "unsupported_event:issues.closed"


class _ThreadRecordingDB(SettingsDB):
    def __init__(self) -> None:
        super().__init__()
        self.lookup_threads: list[int] = []

    def get_installation(self, installation_id: int):
        self.lookup_threads.append(threading.get_ident())
        return super().get_installation(installation_id)


def test_settings_lookups_run_off_the_event_loop_thread() -> None:
    db = _ThreadRecordingDB()
    _configure(db, auto_translate=True)
    dispatcher = EventDispatcher(
        store=db,
        hosts=InMemoryHostProvider(),
        handlers=ActionHandlers(
            detector=FakeDetector("en"), translator=FakeTranslator(), summarizer=FakeSummarizer()
        ),
    )
    db.lookup_threads.clear()

    asyncio.run(dispatcher.dispatch(_comment(comment_body="hello")))

    assert db.lookup_threads
    assert threading.get_ident() not in db.lookup_threads
