"""Bot application surface with a minimal ASGI HTTP layer."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

from lingo_bolt.bot.commands import CommandParser
from lingo_bolt.bot.dispatcher import EventDispatcher
from lingo_bolt.bot.effective_settings import SettingsResolver
from lingo_bolt.bot.handlers import ActionHandlers
from lingo_bolt.bot.locales import LocaleResolver
from lingo_bolt.bot.models import RepositoryHostProvider
from lingo_bolt.server.db import InstallationNotFoundError, SettingsDB
from lingo_bolt.server.github_connector import build_host_provider_from_env
from lingo_bolt.server.language import CapabilityLanguageServices, build_language_services_from_env
from lingo_bolt.server.settings_contracts import InstallationSettingsUpdate, RepoConfigUpdate
from lingo_bolt.shared.settings import BotSettings, configure_logging, get_bot_settings


logger = logging.getLogger(__name__)


class ServerApp:
    """Wires the settings store, host adapters and language services into the dispatcher."""

    def __init__(
        self,
        db_path: str | Path = ":memory:",
        *,
        settings: BotSettings | None = None,
        hosts: RepositoryHostProvider | None = None,
        language: CapabilityLanguageServices | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        self.settings = settings or BotSettings.from_env(env)
        self.db = SettingsDB(db_path)
        self.hosts = hosts or build_host_provider_from_env(env)
        self.language = language or build_language_services_from_env(env)
        self.locales = LocaleResolver()
        self.handlers = ActionHandlers(
            detector=self.language,
            translator=self.language,
            summarizer=self.language,
            locales=self.locales,
        )
        self.dispatcher = EventDispatcher(
            store=self.db,
            hosts=self.hosts,
            handlers=self.handlers,
            parser=CommandParser(mention=self.settings.mention),
            app_id=self.settings.app_id,
            bot_user_id=self.settings.bot_user_id,
        )
        self.resolver = SettingsResolver(self.db)

    async def handle_webhook(
        self, event_name: str, payload: dict[str, Any], delivery_id: str = ""
    ) -> dict[str, Any]:
        self.db.append_audit_event(
            "webhook_received",
            {
                "event": event_name,
                "action": str(payload.get("action", "")),
                "delivery_id": delivery_id,
            },
        )
        result = await self.dispatcher.dispatch_webhook(event_name, payload)
        summary = result.as_dict()
        self.db.append_audit_event(
            "dispatch_completed", {"delivery_id": delivery_id, "event": event_name, **summary}
        )
        return summary

    def list_installations(self) -> list[dict[str, Any]]:
        return [installation.as_dict() for installation in self.db.list_installations()]

    def get_installation(self, installation_id: int) -> dict[str, Any]:
        installation = self.db.get_installation(installation_id)
        if installation is None:
            raise InstallationNotFoundError(installation_id)
        return {
            **installation.as_dict(),
            "repo_configs": [
                config.as_dict() for config in self.db.list_repo_configs(installation_id)
            ],
        }

    def update_installation_settings(
        self, installation_id: int, payload: dict[str, Any]
    ) -> dict[str, Any]:
        update = InstallationSettingsUpdate.model_validate(payload)
        installation = self.db.update_installation_settings(
            installation_id,
            locale=update.locale,
            auto_translate=update.auto_translate,
            auto_label=update.auto_label,
        )
        return installation.as_dict()

    def put_repo_config(
        self, installation_id: int, repo_full_name: str, payload: dict[str, Any]
    ) -> dict[str, Any]:
        update = RepoConfigUpdate.model_validate(payload)
        config = self.db.upsert_repo_config(
            installation_id,
            repo_full_name,
            locale=update.locale,
            auto_translate=update.auto_translate,
            auto_label=update.auto_label,
        )
        if config is None:
            return {"repo_full_name": repo_full_name, "status": "pruned"}
        return {**config.as_dict(), "status": "stored"}

    def delete_repo_config(self, installation_id: int, repo_full_name: str) -> dict[str, Any]:
        if self.db.get_installation(installation_id) is None:
            raise InstallationNotFoundError(installation_id)
        removed = self.db.delete_repo_config(installation_id, repo_full_name)
        return {"repo_full_name": repo_full_name, "deleted": removed}

    def effective_settings(self, installation_id: int, repo_full_name: str) -> dict[str, Any]:
        settings = self.resolver.resolve(installation_id, repo_full_name)
        if settings is None:
            raise InstallationNotFoundError(installation_id)
        return {"repo_full_name": repo_full_name, **settings.as_dict()}


class HTTPError(Exception):
    def __init__(self, status: int, error: str) -> None:
        super().__init__(error)
        self.status = status
        self.error = error


class ASGIServer:
    """Minimal ASGI adapter exposing the webhook endpoint and settings routes."""

    def __init__(self, service: ServerApp | None = None) -> None:
        self.service = service or create_app()

    async def __call__(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        if scope.get("type") != "http":
            await self._send_json(send, 500, {"error": "unsupported_scope"})
            return

        method = scope.get("method", "GET")
        path = scope.get("path", "")
        headers = {
            key.decode("latin-1").lower(): value.decode("latin-1")
            for key, value in scope.get("headers", [])
        }
        body = await self._read_body(receive)

        try:
            status, payload = await self._route(method, path, headers, body)
        except HTTPError as exc:
            status, payload = exc.status, {"error": exc.error}
        except LookupError as exc:
            status, payload = 404, {"error": str(exc)}
        except ValueError as exc:
            status, payload = 400, {"error": str(exc)}
        except Exception as exc:
            logger.exception("unhandled error for %s %s", method, path)
            status, payload = 500, {"error": str(exc)}
        await self._send_json(send, status, payload)

    async def _route(
        self, method: str, path: str, headers: dict[str, str], body: bytes
    ) -> tuple[int, dict[str, Any]]:
        parts = [part for part in path.split("/") if part]

        if method == "GET" and parts == ["health"]:
            return 200, {"status": "ok"}
        if method == "POST" and parts == ["webhook"]:
            return await self._webhook(headers, body)
        if method == "GET" and parts == ["installations"]:
            return 200, {"items": self.service.list_installations()}
        if len(parts) < 2 or parts[0] != "installations" or not parts[1].isdigit():
            raise HTTPError(404, "not_found")

        installation_id = int(parts[1])
        tail = parts[2:]
        if method == "GET" and not tail:
            return 200, self.service.get_installation(installation_id)
        if method == "PATCH" and tail == ["settings"]:
            return 200, self.service.update_installation_settings(
                installation_id, _json_object(body)
            )
        if len(tail) >= 3 and tail[0] == "repos":
            repo_full_name = f"{tail[1]}/{tail[2]}"
            rest = tail[3:]
            if method == "GET" and rest == ["effective"]:
                return 200, self.service.effective_settings(installation_id, repo_full_name)
            if method == "PUT" and not rest:
                return 200, self.service.put_repo_config(
                    installation_id, repo_full_name, _json_object(body)
                )
            if method == "DELETE" and not rest:
                return 200, self.service.delete_repo_config(installation_id, repo_full_name)
        raise HTTPError(404, "not_found")

    async def _webhook(self, headers: dict[str, str], body: bytes) -> tuple[int, dict[str, Any]]:
        event_name = headers.get("x-github-event", "")
        if not event_name:
            raise HTTPError(400, "missing_event_header")
        result = await self.service.handle_webhook(
            event_name, _json_object(body), delivery_id=headers.get("x-github-delivery", "")
        )
        failed = any(row["status"] == "failed" for row in result["actions"])
        return (502 if failed else 200), result

    async def _read_body(self, receive: Any) -> bytes:
        chunks: list[bytes] = []
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] == "http.disconnect":
                break
            chunks.append(message.get("body", b""))
            more_body = message.get("more_body", False)
        return b"".join(chunks)

    async def _send_json(self, send: Any, status: int, payload: dict[str, Any]) -> None:
        await send(
            {
                "type": "http.response.start",
                "status": status,
                "headers": [(b"content-type", b"application/json")],
            }
        )
        await send({"type": "http.response.body", "body": json.dumps(payload).encode("utf-8")})


def _json_object(body: bytes) -> dict[str, Any]:
    """Decode a request body; an empty body is an empty object."""
    if not body:
        return {}
    try:
        parsed = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise HTTPError(400, "invalid_json") from None
    if not isinstance(parsed, dict):
        raise HTTPError(400, "invalid_json")
    return parsed


def create_app(db_path: str | Path = ":memory:", env: dict[str, str] | None = None) -> ServerApp:
    return ServerApp(db_path=db_path, env=env)


def create_asgi_app() -> ASGIServer:
    """Factory for ``uvicorn --factory``: persistent store, logging configured."""

    settings = get_bot_settings()
    configure_logging(settings.log_level)
    return ASGIServer(service=ServerApp(db_path=settings.sqlite_path, settings=settings))


def main() -> int:
    parser = argparse.ArgumentParser(description="lingo-bolt ASGI server entrypoint")
    parser.add_argument(
        "--print-startup",
        action="store_true",
        help="print the supported uvicorn startup command and exit",
    )
    args = parser.parse_args()

    if args.print_startup:
        print(
            "uvicorn lingo_bolt.server.app:create_asgi_app --factory --host 127.0.0.1 --port 8000"
        )
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
