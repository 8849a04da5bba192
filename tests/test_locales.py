from lingo_bolt.bot.locales import LocaleResolver, same_language


def test_resolve_language_names() -> None:
    resolver = LocaleResolver()
    assert resolver.resolve("spanish") == "es"
    assert resolver.resolve("Portuguese") == "pt-BR"
    assert resolver.resolve("  CHINESE ") == "zh-CN"


def test_resolve_accepts_locale_codes_in_any_case() -> None:
    resolver = LocaleResolver()
    assert resolver.resolve("pt-br") == "pt-BR"
    assert resolver.resolve("ZH-cn") == "zh-CN"
    assert resolver.resolve("ja") == "ja"


def test_resolve_unknown_name_is_lowercased_passthrough() -> None:
    resolver = LocaleResolver()
    assert resolver.resolve("Klingon") == "klingon"
    assert resolver.resolve("sv") == "sv"


def test_label_defaults_to_code() -> None:
    resolver = LocaleResolver()
    assert resolver.label("es") == "Spanish"
    assert resolver.label("pt-BR") == "Portuguese (BR)"
    assert resolver.label("sv") == "sv"


def test_label_name_maps_detected_codes() -> None:
    resolver = LocaleResolver()
    assert resolver.label_name("ja") == "japanese"
    assert resolver.label_name("pt-br") == "portuguese"
    assert resolver.label_name("sv") == "sv"


def test_same_language_matches_primary_subtag() -> None:
    assert same_language("pt", "pt-BR")
    assert same_language("zh-cn", "zh-CN")
    assert same_language("en", "en")
    assert not same_language("en", "es")
    assert not same_language("pt", "es")


def test_same_language_compares_primary_subtags_both_ways() -> None:
    assert same_language("en-us", "en")
    assert same_language("EN", "en-GB")
    assert same_language("zh-tw", "zh-CN")
    assert not same_language("en-us", "es")
