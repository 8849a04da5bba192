"""Shared runtime settings for the bot process."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from lingo_bolt.bot.commands import DEFAULT_MENTION


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


@dataclass(frozen=True)
class BotSettings:
    """Identity, storage and logging knobs read from the environment."""

    data_dir: Path
    sqlite_path: Path
    mention: str
    app_id: str
    bot_user_id: str
    log_level: str

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> "BotSettings":
        source = env or os.environ
        data_dir = Path(source.get("LINGO_BOLT_DATA_DIR", "./data"))
        sqlite_path = Path(
            source.get("LINGO_BOLT_SQLITE_PATH", str(data_dir / "lingo_bolt.sqlite"))
        )
        app_id = source.get("LINGO_BOLT_GITHUB_APP_ID") or source.get("GITHUB_APP_ID") or ""
        return cls(
            data_dir=data_dir,
            sqlite_path=sqlite_path,
            mention=(source.get("LINGO_BOLT_MENTION") or DEFAULT_MENTION).strip(),
            app_id=app_id.strip(),
            bot_user_id=(source.get("LINGO_BOLT_BOT_USER_ID") or "").strip(),
            log_level=(source.get("LINGO_BOLT_LOG_LEVEL") or "INFO").strip().upper(),
        )

    def ensure_directories(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.sqlite_path.parent.mkdir(parents=True, exist_ok=True)


def get_bot_settings(env: dict[str, str] | None = None) -> BotSettings:
    """Build and hydrate bot settings from environment variables."""

    settings = BotSettings.from_env(env)
    settings.ensure_directories()
    return settings


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
