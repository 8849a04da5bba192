from lingo_bolt.bot.commands import (
    CommandParser,
    SummarizeCommand,
    TranslateCommand,
    parse_command,
)


def test_parse_returns_none_without_mention() -> None:
    assert parse_command("please translate to spanish") is None
    assert parse_command("") is None
    assert parse_command("@someone-else translate to french") is None


def test_parse_translate_to_language() -> None:
    assert parse_command("hey @lingo-bolt translate to spanish") == TranslateCommand(
        language="spanish"
    )


def test_parse_summarize_in_language() -> None:
    assert parse_command("... @lingo-bolt summarize in french") == SummarizeCommand(
        language="french"
    )


def test_parse_bare_summarize_uses_default_language() -> None:
    assert parse_command("@lingo-bolt summarize") == SummarizeCommand(language=None)
    assert parse_command("@lingo-bolt summarize this thread please") == SummarizeCommand(
        language=None
    )


def test_parse_bare_translate_falls_back_to_english() -> None:
    assert parse_command("@lingo-bolt translate") == TranslateCommand(language="english")


def test_translate_without_to_is_not_a_language_clause() -> None:
    assert parse_command("@lingo-bolt translate spanish") == TranslateCommand(language="english")


def test_mention_and_command_are_case_insensitive() -> None:
    assert parse_command("@Lingo-Bolt Translate To German") == TranslateCommand(language="german")


def test_multi_word_language_stops_at_sentence_boundary() -> None:
    command = parse_command("@lingo-bolt translate to brazilian portuguese. thanks!\nmore text")
    assert command == TranslateCommand(language="brazilian portuguese")


def test_language_does_not_cross_line_breaks() -> None:
    command = parse_command("@lingo-bolt summarize in japanese\nsecond line")
    assert command == SummarizeCommand(language="japanese")


def test_unknown_verb_after_mention_is_ignored() -> None:
    assert parse_command("thanks @lingo-bolt, great work") is None
    assert parse_command("@lingo-bolt") is None


def test_custom_mention_token() -> None:
    parser = CommandParser(mention="@polyglot")
    assert parser.parse("@polyglot translate to korean") == TranslateCommand(language="korean")
    assert parser.parse("@lingo-bolt translate to korean") is None
