"""SQLite persistence for installations, repository overrides, and audit events."""

from __future__ import annotations

import json
import sqlite3
import threading
from pathlib import Path
from typing import Any

from lingo_bolt.bot.models import (
    DEFAULT_AUTO_LABEL,
    DEFAULT_AUTO_TRANSLATE,
    DEFAULT_LOCALE,
    AccountKind,
    Installation,
    RepoConfig,
)


class InstallationNotFoundError(LookupError):
    def __init__(self, installation_id: int) -> None:
        super().__init__(f"installation_not_found:{installation_id}")
        self.installation_id = installation_id


class SettingsDB:
    """Small SQLite wrapper implementing the bot's settings store."""

    def __init__(self, db_path: Path | str = ":memory:") -> None:
        self.db_path = str(db_path)
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")
        self._lock = threading.Lock()
        self._init_schema()

    def _init_schema(self) -> None:
        self.conn.executescript(
            f"""
            CREATE TABLE IF NOT EXISTS installations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                installation_id INTEGER NOT NULL UNIQUE,
                account_login TEXT NOT NULL,
                account_kind TEXT NOT NULL,
                locale TEXT NOT NULL DEFAULT '{DEFAULT_LOCALE}',
                auto_translate INTEGER NOT NULL DEFAULT {int(DEFAULT_AUTO_TRANSLATE)},
                auto_label INTEGER NOT NULL DEFAULT {int(DEFAULT_AUTO_LABEL)},
                created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
                updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS repo_configs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                installation_ref INTEGER NOT NULL,
                repo_full_name TEXT NOT NULL,
                locale TEXT,
                auto_translate INTEGER,
                auto_label INTEGER,
                updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
                UNIQUE(installation_ref, repo_full_name),
                FOREIGN KEY(installation_ref) REFERENCES installations(id) ON DELETE CASCADE
            );

            CREATE TABLE IF NOT EXISTS audit_events (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                event_type TEXT NOT NULL,
                event_json TEXT NOT NULL,
                created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            );
            """
        )
        self.conn.commit()

    def get_installation(self, installation_id: int) -> Installation | None:
        row = self.conn.execute(
            "SELECT * FROM installations WHERE installation_id = ?", (installation_id,)
        ).fetchone()
        return _installation_from_row(row) if row is not None else None

    def list_installations(self) -> list[Installation]:
        rows = self.conn.execute("SELECT * FROM installations ORDER BY id ASC").fetchall()
        return [_installation_from_row(row) for row in rows]

    def upsert_installation(
        self, installation_id: int, account_login: str, account_kind: AccountKind
    ) -> Installation:
        with self._lock:
            self.conn.execute(
                """
                INSERT INTO installations (installation_id, account_login, account_kind)
                VALUES (?, ?, ?)
                ON CONFLICT(installation_id) DO UPDATE SET
                  account_login=excluded.account_login,
                  account_kind=excluded.account_kind,
                  updated_at=CURRENT_TIMESTAMP
                """,
                (installation_id, account_login, account_kind),
            )
            self.conn.commit()
        installation = self.get_installation(installation_id)
        if installation is None:
            raise InstallationNotFoundError(installation_id)
        return installation

    def update_installation_settings(
        self,
        installation_id: int,
        *,
        locale: str | None = None,
        auto_translate: bool | None = None,
        auto_label: bool | None = None,
    ) -> Installation:
        """Apply a partial update; ``None`` leaves a field unchanged."""

        updates: dict[str, Any] = {}
        if locale is not None:
            updates["locale"] = locale
        if auto_translate is not None:
            updates["auto_translate"] = int(auto_translate)
        if auto_label is not None:
            updates["auto_label"] = int(auto_label)

        if self.get_installation(installation_id) is None:
            raise InstallationNotFoundError(installation_id)
        if updates:
            assignments = ", ".join(f"{column} = ?" for column in updates)
            with self._lock:
                self.conn.execute(
                    f"UPDATE installations SET {assignments}, updated_at = CURRENT_TIMESTAMP "
                    "WHERE installation_id = ?",
                    (*updates.values(), installation_id),
                )
                self.conn.commit()
        installation = self.get_installation(installation_id)
        if installation is None:
            raise InstallationNotFoundError(installation_id)
        return installation

    def delete_installation_cascade(self, installation_id: int) -> bool:
        with self._lock:
            cursor = self.conn.execute(
                "DELETE FROM installations WHERE installation_id = ?", (installation_id,)
            )
            self.conn.commit()
        return cursor.rowcount > 0

    def get_repo_config(self, installation_id: int, repo_full_name: str) -> RepoConfig | None:
        row = self.conn.execute(
            """
            SELECT rc.* FROM repo_configs rc
            INNER JOIN installations i ON i.id = rc.installation_ref
            WHERE i.installation_id = ? AND rc.repo_full_name = ?
            """,
            (installation_id, repo_full_name),
        ).fetchone()
        return _repo_config_from_row(row) if row is not None else None

    def list_repo_configs(self, installation_id: int) -> list[RepoConfig]:
        rows = self.conn.execute(
            """
            SELECT rc.* FROM repo_configs rc
            INNER JOIN installations i ON i.id = rc.installation_ref
            WHERE i.installation_id = ?
            ORDER BY rc.repo_full_name ASC
            """,
            (installation_id,),
        ).fetchall()
        return [_repo_config_from_row(row) for row in rows]

    def upsert_repo_config(
        self,
        installation_id: int,
        repo_full_name: str,
        *,
        locale: str | None = None,
        auto_translate: bool | None = None,
        auto_label: bool | None = None,
    ) -> RepoConfig | None:
        """Replace the override for one repository.

        An override with every field ``None`` carries no information, so it is
        deleted instead of stored and ``None`` is returned.
        """

        installation = self.get_installation(installation_id)
        if installation is None:
            raise InstallationNotFoundError(installation_id)

        config = RepoConfig(
            installation_ref=installation.id,
            repo_full_name=repo_full_name,
            locale=locale,
            auto_translate=auto_translate,
            auto_label=auto_label,
        )
        if config.is_empty():
            self.delete_repo_config(installation_id, repo_full_name)
            return None

        with self._lock:
            self.conn.execute(
                """
                INSERT INTO repo_configs
                  (installation_ref, repo_full_name, locale, auto_translate, auto_label)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(installation_ref, repo_full_name) DO UPDATE SET
                  locale=excluded.locale,
                  auto_translate=excluded.auto_translate,
                  auto_label=excluded.auto_label,
                  updated_at=CURRENT_TIMESTAMP
                """,
                (
                    installation.id,
                    repo_full_name,
                    locale,
                    _optional_int(auto_translate),
                    _optional_int(auto_label),
                ),
            )
            self.conn.commit()
        return config

    def delete_repo_config(self, installation_id: int, repo_full_name: str) -> bool:
        with self._lock:
            cursor = self.conn.execute(
                """
                DELETE FROM repo_configs
                WHERE repo_full_name = ?
                  AND installation_ref = (
                    SELECT id FROM installations WHERE installation_id = ?
                  )
                """,
                (repo_full_name, installation_id),
            )
            self.conn.commit()
        return cursor.rowcount > 0

    def append_audit_event(self, event_type: str, payload: dict[str, Any]) -> None:
        with self._lock:
            self.conn.execute(
                "INSERT INTO audit_events (event_type, event_json) VALUES (?, ?)",
                (event_type, json.dumps(payload)),
            )
            self.conn.commit()

    def list_audit_events(self, event_type: str | None = None) -> list[dict[str, Any]]:
        if event_type:
            rows = self.conn.execute(
                "SELECT id, event_type, event_json, created_at FROM audit_events WHERE event_type = ? ORDER BY id ASC",
                (event_type,),
            )
        else:
            rows = self.conn.execute(
                "SELECT id, event_type, event_json, created_at FROM audit_events ORDER BY id ASC"
            )
        return [
            {
                "id": int(row["id"]),
                "event_type": row["event_type"],
                "payload": json.loads(row["event_json"]),
                "created_at": row["created_at"],
            }
            for row in rows
        ]


def _installation_from_row(row: sqlite3.Row) -> Installation:
    return Installation(
        id=int(row["id"]),
        installation_id=int(row["installation_id"]),
        account_login=row["account_login"],
        account_kind=row["account_kind"],
        locale=row["locale"],
        auto_translate=bool(row["auto_translate"]),
        auto_label=bool(row["auto_label"]),
    )


def _repo_config_from_row(row: sqlite3.Row) -> RepoConfig:
    return RepoConfig(
        installation_ref=int(row["installation_ref"]),
        repo_full_name=row["repo_full_name"],
        locale=row["locale"],
        auto_translate=_optional_bool(row["auto_translate"]),
        auto_label=_optional_bool(row["auto_label"]),
    )


def _optional_int(value: bool | None) -> int | None:
    return None if value is None else int(value)


def _optional_bool(value: int | None) -> bool | None:
    return None if value is None else bool(value)
