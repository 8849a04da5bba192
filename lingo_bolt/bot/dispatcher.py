"""Per-event routing from inbound host events to action handlers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Any

from lingo_bolt.bot.commands import CommandParser, SummarizeCommand, TranslateCommand
from lingo_bolt.bot.effective_settings import SettingsResolver
from lingo_bolt.bot.events import (
    BotEvent,
    CommentCreatedEvent,
    InstallationEvent,
    IssueOrPrOpenedEvent,
    parse_webhook_event,
)
from lingo_bolt.bot.handlers import ActionHandlers, is_auto_translation
from lingo_bolt.bot.models import EffectiveSettings, RepositoryHostProvider, SettingsStore


logger = logging.getLogger(__name__)

DEFAULT_COMMAND_LANGUAGE = "english"

STATUS_NOOP = "noop"
STATUS_DISPATCHED = "dispatched"

ACTION_OK = "ok"
ACTION_SKIPPED = "skipped"
ACTION_FAILED = "failed"


@dataclass(frozen=True)
class ActionOutcome:
    action: str
    status: str
    detail: str = ""


@dataclass(frozen=True)
class DispatchResult:
    status: str
    reason: str
    actions: list[ActionOutcome] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return any(outcome.status == ACTION_FAILED for outcome in self.actions)

    def as_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "reason": self.reason,
            "actions": [
                {"action": outcome.action, "status": outcome.status, "detail": outcome.detail}
                for outcome in self.actions
            ],
        }


def _noop(reason: str) -> DispatchResult:
    return DispatchResult(status=STATUS_NOOP, reason=reason)


class EventDispatcher:
    """Classifies one event, filters self-authored content and invokes handlers.

    Collaborators are injected once per process. Nothing is persisted between
    events; concurrent events for the same repository are not serialized.
    """

    def __init__(
        self,
        *,
        store: SettingsStore,
        hosts: RepositoryHostProvider,
        handlers: ActionHandlers,
        parser: CommandParser | None = None,
        app_id: str = "",
        bot_user_id: str = "",
    ) -> None:
        self.store = store
        self.hosts = hosts
        self.handlers = handlers
        self.parser = parser or CommandParser()
        self.resolver = SettingsResolver(store)
        self.app_id = app_id.strip()
        self.bot_user_id = bot_user_id.strip()

    async def dispatch_webhook(self, event_name: str, payload: dict[str, Any]) -> DispatchResult:
        event = parse_webhook_event(event_name, payload)
        if event is None:
            action = str(payload.get("action", ""))
            logger.info("ignoring unsupported event %s.%s", event_name, action)
            return _noop(f"unsupported_event:{event_name}.{action}")
        return await self.dispatch(event)

    async def dispatch(self, event: BotEvent) -> DispatchResult:
        if isinstance(event, InstallationEvent):
            return await self._on_installation(event)
        if isinstance(event, IssueOrPrOpenedEvent):
            return await self._on_opened(event)
        if isinstance(event, CommentCreatedEvent):
            return await self._on_comment(event)
        raise TypeError(f"unsupported event type: {type(event).__name__}")

    async def _on_installation(self, event: InstallationEvent) -> DispatchResult:
        if event.installation_id is None:
            logger.info("ignoring installation.%s without an installation id", event.action)
            return _noop("missing_installation_id")
        if event.action == "created":
            await asyncio.to_thread(
                self.store.upsert_installation,
                event.installation_id,
                event.account_login,
                event.account_kind,
            )
            logger.info(
                "installation %s upserted for %s (%s)",
                event.installation_id,
                event.account_login,
                event.account_kind,
            )
            return DispatchResult(status=STATUS_DISPATCHED, reason="installation_upserted")

        removed = await asyncio.to_thread(
            self.store.delete_installation_cascade, event.installation_id
        )
        logger.info("installation %s deleted (existed=%s)", event.installation_id, removed)
        return DispatchResult(status=STATUS_DISPATCHED, reason="installation_deleted")

    async def _on_opened(self, event: IssueOrPrOpenedEvent) -> DispatchResult:
        if event.installation_id is None:
            return _noop("missing_installation_id")
        settings = await self._resolve(event.installation_id, event.repo_full_name)
        if settings is None:
            logger.info("no settings for installation %s", event.installation_id)
            return _noop("installation_not_configured")

        host = self.hosts.for_installation(event.installation_id)
        pending: list[tuple[str, Awaitable[bool]]] = []
        if settings.auto_label:
            pending.append(
                (
                    "auto_label",
                    self.handlers.auto_label(
                        host, event.owner, event.repo, event.number, event.body, event.title
                    ),
                )
            )
        if settings.auto_translate:
            text = f"{event.title}\n\n{event.body}"
            pending.append(
                (
                    "auto_translate",
                    self.handlers.auto_translate(
                        host, event.owner, event.repo, event.number, text, settings.locale
                    ),
                )
            )
        if not pending:
            return _noop("no_policy_enabled")

        outcomes = await asyncio.gather(
            *(_run_action(name, awaitable) for name, awaitable in pending)
        )
        return DispatchResult(
            status=STATUS_DISPATCHED, reason=f"{event.kind}_opened", actions=list(outcomes)
        )

    async def _on_comment(self, event: CommentCreatedEvent) -> DispatchResult:
        loop_reason = self._self_origin_reason(event)
        if loop_reason:
            logger.info(
                "filtered comment on %s#%s: %s",
                event.repo_full_name,
                event.issue_number,
                loop_reason,
            )
            return _noop(loop_reason)
        if event.installation_id is None:
            return _noop("missing_installation_id")

        command = self.parser.parse(event.comment_body)
        if command is not None:
            return await self._run_command(event, command, event.installation_id)

        settings = await self._resolve(event.installation_id, event.repo_full_name)
        if settings is None:
            return _noop("installation_not_configured")
        if not settings.auto_translate:
            return _noop("no_command")

        host = self.hosts.for_installation(event.installation_id)
        outcome = await _run_action(
            "auto_translate",
            self.handlers.auto_translate(
                host,
                event.owner,
                event.repo,
                event.issue_number,
                event.comment_body,
                settings.locale,
            ),
        )
        return DispatchResult(status=STATUS_DISPATCHED, reason="comment_policy", actions=[outcome])

    async def _run_command(
        self,
        event: CommentCreatedEvent,
        command: TranslateCommand | SummarizeCommand,
        installation_id: int,
    ) -> DispatchResult:
        host = self.hosts.for_installation(installation_id)
        subject = event.parent_body or event.comment_body

        if isinstance(command, TranslateCommand):
            awaitable = self.handlers.translate(
                host, event.owner, event.repo, event.issue_number, subject, command.language
            )
        else:
            settings = await self._resolve(installation_id, event.repo_full_name)
            default_language = settings.locale if settings else DEFAULT_COMMAND_LANGUAGE
            if event.parent_title:
                subject = f"# {event.parent_title}\n\n{subject}"
            awaitable = self.handlers.summarize(
                host,
                event.owner,
                event.repo,
                event.issue_number,
                subject,
                command.language,
                default_language,
            )

        logger.info(
            "running %s command on %s#%s", command.action, event.repo_full_name, event.issue_number
        )
        outcome = await _run_action(command.action, awaitable)
        return DispatchResult(status=STATUS_DISPATCHED, reason="command", actions=[outcome])

    async def _resolve(
        self, installation_id: int, repo_full_name: str
    ) -> EffectiveSettings | None:
        return await asyncio.to_thread(self.resolver.resolve, installation_id, repo_full_name)

    def _self_origin_reason(self, event: CommentCreatedEvent) -> str:
        if self.app_id and event.comment_app_id == self.app_id:
            return "own_app_comment"
        if self.bot_user_id and event.comment_author_id == self.bot_user_id:
            return "own_app_comment"
        if event.comment_author_is_bot:
            return "bot_author"
        if is_auto_translation(event.comment_body):
            return "auto_translation_marker"
        return ""


async def _run_action(name: str, awaitable: Awaitable[bool]) -> ActionOutcome:
    try:
        performed = await awaitable
    except Exception as exc:
        logger.exception("action %s failed", name)
        return ActionOutcome(action=name, status=ACTION_FAILED, detail=str(exc) or type(exc).__name__)
    return ActionOutcome(action=name, status=ACTION_OK if performed else ACTION_SKIPPED)
