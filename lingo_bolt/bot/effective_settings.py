"""Installation default + repository override merge."""

from __future__ import annotations

from lingo_bolt.bot.models import EffectiveSettings, Installation, RepoConfig, SettingsStore


def merge_settings(installation: Installation, repo_config: RepoConfig | None) -> EffectiveSettings:
    if repo_config is None:
        return EffectiveSettings(
            locale=installation.locale,
            auto_translate=installation.auto_translate,
            auto_label=installation.auto_label,
        )
    return EffectiveSettings(
        locale=repo_config.locale if repo_config.locale is not None else installation.locale,
        auto_translate=(
            repo_config.auto_translate
            if repo_config.auto_translate is not None
            else installation.auto_translate
        ),
        auto_label=(
            repo_config.auto_label if repo_config.auto_label is not None else installation.auto_label
        ),
    )


class SettingsResolver:
    """Read-only resolution of the policy that applies to one repository."""

    def __init__(self, store: SettingsStore) -> None:
        self.store = store

    def resolve(self, installation_id: int, repo_full_name: str) -> EffectiveSettings | None:
        installation = self.store.get_installation(installation_id)
        if installation is None:
            return None
        repo_config = self.store.get_repo_config(installation_id, repo_full_name)
        return merge_settings(installation, repo_config)
