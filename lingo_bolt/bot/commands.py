"""Mention command parsing.

Supported grammar, checked in order against the text that follows the bot
mention (trimmed, lower-cased):

1. ``translate to <language>``  -> Translate(language)
2. ``summarize in <language>``  -> Summarize(language)
3. ``summarize ...``            -> Summarize(None)
4. ``translate ...``            -> Translate("english")

Anything else after the mention is ignored. ``translate <language>`` without
``to`` is deliberately not a language clause and falls into rule 4.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


DEFAULT_MENTION = "@lingo-bolt"
DEFAULT_TRANSLATE_LANGUAGE = "english"

# A language name is one or more words on a single line; punctuation ends it.
_LANGUAGE = r"(\w[\w \t-]*\w|\w)"
TRANSLATE_TO_RE = re.compile(rf"^translate[ \t]+to[ \t]+{_LANGUAGE}")
SUMMARIZE_IN_RE = re.compile(rf"^summarize[ \t]+in[ \t]+{_LANGUAGE}")


@dataclass(frozen=True)
class TranslateCommand:
    language: str
    action: str = "translate"


@dataclass(frozen=True)
class SummarizeCommand:
    language: str | None = None
    action: str = "summarize"


Command = TranslateCommand | SummarizeCommand


class CommandParser:
    def __init__(self, mention: str = DEFAULT_MENTION) -> None:
        self.mention = mention.strip().lower()

    def parse(self, body: str) -> Command | None:
        if not self.mention or not body:
            return None
        idx = body.lower().find(self.mention)
        if idx == -1:
            return None

        tail = body[idx + len(self.mention) :].strip().lower()

        match = TRANSLATE_TO_RE.match(tail)
        if match:
            return TranslateCommand(language=match.group(1).strip())

        match = SUMMARIZE_IN_RE.match(tail)
        if match:
            return SummarizeCommand(language=match.group(1).strip())

        if tail.startswith("summarize"):
            return SummarizeCommand(language=None)

        if tail.startswith("translate"):
            return TranslateCommand(language=DEFAULT_TRANSLATE_LANGUAGE)

        return None


def parse_command(body: str, mention: str = DEFAULT_MENTION) -> Command | None:
    return CommandParser(mention=mention).parse(body)
