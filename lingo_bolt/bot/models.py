"""Settings entities and the collaborator contracts the bot core consumes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Protocol


AccountKind = Literal["user", "organization"]

DEFAULT_LOCALE = "en"
DEFAULT_AUTO_TRANSLATE = False
DEFAULT_AUTO_LABEL = False


@dataclass(frozen=True)
class Installation:
    id: int
    installation_id: int
    account_login: str
    account_kind: AccountKind
    locale: str = DEFAULT_LOCALE
    auto_translate: bool = DEFAULT_AUTO_TRANSLATE
    auto_label: bool = DEFAULT_AUTO_LABEL

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "installation_id": self.installation_id,
            "account_login": self.account_login,
            "account_kind": self.account_kind,
            "locale": self.locale,
            "auto_translate": self.auto_translate,
            "auto_label": self.auto_label,
        }


@dataclass(frozen=True)
class RepoConfig:
    """Per-repository override; ``None`` fields inherit from the installation."""

    installation_ref: int
    repo_full_name: str
    locale: str | None = None
    auto_translate: bool | None = None
    auto_label: bool | None = None

    def is_empty(self) -> bool:
        return self.locale is None and self.auto_translate is None and self.auto_label is None

    def as_dict(self) -> dict[str, Any]:
        return {
            "repo_full_name": self.repo_full_name,
            "locale": self.locale,
            "auto_translate": self.auto_translate,
            "auto_label": self.auto_label,
        }


@dataclass(frozen=True)
class EffectiveSettings:
    locale: str
    auto_translate: bool
    auto_label: bool

    def as_dict(self) -> dict[str, Any]:
        return {
            "locale": self.locale,
            "auto_translate": self.auto_translate,
            "auto_label": self.auto_label,
        }


class SettingsStore(Protocol):
    """Key-value view over installations and their repository overrides."""

    def get_installation(self, installation_id: int) -> Installation | None: ...

    def get_repo_config(self, installation_id: int, repo_full_name: str) -> RepoConfig | None: ...

    def upsert_installation(
        self, installation_id: int, account_login: str, account_kind: AccountKind
    ) -> Installation: ...

    def upsert_repo_config(
        self,
        installation_id: int,
        repo_full_name: str,
        *,
        locale: str | None = None,
        auto_translate: bool | None = None,
        auto_label: bool | None = None,
    ) -> RepoConfig | None: ...

    def delete_repo_config(self, installation_id: int, repo_full_name: str) -> bool: ...

    def delete_installation_cascade(self, installation_id: int) -> bool: ...


class LanguageDetector(Protocol):
    async def detect(self, text: str) -> str: ...


class Translator(Protocol):
    async def translate(self, text: str, source_locale: str, target_locale: str) -> str: ...


class Summarizer(Protocol):
    async def summarize(self, text: str) -> str: ...


class RepositoryHost(Protocol):
    """Write surface of the source-code host used by action handlers."""

    async def post_comment(self, owner: str, repo: str, issue_number: int, body: str) -> None: ...

    async def ensure_label(self, owner: str, repo: str, name: str) -> None: ...

    async def attach_label(self, owner: str, repo: str, issue_number: int, name: str) -> None: ...


class RepositoryHostProvider(Protocol):
    """Hands out a host bound to one installation's credentials."""

    def for_installation(self, installation_id: int) -> RepositoryHost: ...
