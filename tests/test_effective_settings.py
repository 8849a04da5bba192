from lingo_bolt.bot.effective_settings import SettingsResolver, merge_settings
from lingo_bolt.bot.models import EffectiveSettings, Installation, RepoConfig
from lingo_bolt.server.db import SettingsDB


def _installation(**overrides) -> Installation:
    fields = {
        "id": 1,
        "installation_id": 42,
        "account_login": "octo-org",
        "account_kind": "organization",
        "locale": "es",
        "auto_translate": True,
        "auto_label": False,
    }
    fields.update(overrides)
    return Installation(**fields)


def test_merge_without_override_uses_installation_defaults() -> None:
    assert merge_settings(_installation(), None) == EffectiveSettings(
        locale="es", auto_translate=True, auto_label=False
    )


def test_merge_non_null_override_fields_win() -> None:
    config = RepoConfig(
        installation_ref=1,
        repo_full_name="octo-org/app",
        locale=None,
        auto_translate=False,
        auto_label=None,
    )
    assert merge_settings(_installation(), config) == EffectiveSettings(
        locale="es", auto_translate=False, auto_label=False
    )


def test_merge_false_override_is_not_treated_as_missing() -> None:
    config = RepoConfig(installation_ref=1, repo_full_name="octo-org/app", auto_label=False)
    merged = merge_settings(_installation(auto_label=True), config)
    assert merged.auto_label is False


def test_resolver_returns_none_for_unknown_installation() -> None:
    resolver = SettingsResolver(SettingsDB())
    assert resolver.resolve(999, "octo-org/app") is None


def test_resolver_is_pure_and_repeatable() -> None:
    db = SettingsDB()
    db.upsert_installation(42, "octo-org", "organization")
    db.update_installation_settings(42, locale="es", auto_translate=True, auto_label=False)
    db.upsert_repo_config(42, "octo-org/app", auto_translate=False)
    resolver = SettingsResolver(db)

    first = resolver.resolve(42, "octo-org/app")
    second = resolver.resolve(42, "octo-org/app")

    assert first == second == EffectiveSettings(locale="es", auto_translate=False, auto_label=False)
    assert resolver.resolve(42, "octo-org/other") == EffectiveSettings(
        locale="es", auto_translate=True, auto_label=False
    )
    assert db.list_audit_events() == []
