"""Deterministic local provider adapter used as safe default."""

from __future__ import annotations

import json
import re
from typing import Any

from lingo_bolt.server.llm.capabilities import LANGUAGE_DETECT, TEXT_SUMMARIZE, TEXT_TRANSLATE
from lingo_bolt.server.llm.providers.base import LLMProvider, LLMRequest, LLMResponse


_SCRIPT_RANGES: dict[str, tuple[tuple[int, int], ...]] = {
    "kana": ((0x3040, 0x30FF),),
    "ko": ((0xAC00, 0xD7AF), (0x1100, 0x11FF)),
    "zh": ((0x4E00, 0x9FFF),),
    "ru": ((0x0400, 0x04FF),),
    "ar": ((0x0600, 0x06FF),),
    "hi": ((0x0900, 0x097F),),
}

_STOPWORDS: dict[str, frozenset[str]] = {
    "en": frozenset(
        "the and is are this that with for not when it to of was be on".split()
    ),
    "es": frozenset("el la los las es y que de en un una por con no cuando para".split()),
    "fr": frozenset("le la les est et que des une un pour avec pas quand ce dans".split()),
    "de": frozenset("der die das und ist nicht ein eine mit wenn ich zu auf".split()),
    "pt": frozenset("o a os as é e que de não um uma com quando para em".split()),
    "it": frozenset("il lo la gli è e che di non un una con quando per".split()),
    "nl": frozenset("de het een en is niet van met wanneer dat ik op".split()),
    "tr": frozenset("ve bir bu değil ile için çok ne olarak da".split()),
    "pl": frozenset("i w nie jest się na z że do to gdy".split()),
}

_WORD_RE = re.compile(r"[^\W\d_]+", re.UNICODE)
_SENTENCE_RE = re.compile(r"(?<=[.!?。！？])\s+")

SUMMARY_MAX_SENTENCES = 3
SUMMARY_MAX_CHARS = 400


def detect_locale(text: str) -> str:
    """Guess a bare ISO 639-1 code from script ranges, then Latin stop words."""

    counts = {name: 0 for name in _SCRIPT_RANGES}
    latin = 0
    for char in text:
        point = ord(char)
        if char.isascii():
            latin += char.isalpha()
            continue
        for name, ranges in _SCRIPT_RANGES.items():
            if any(low <= point <= high for low, high in ranges):
                counts[name] += 1
                break
        else:
            latin += char.isalpha()

    if counts["kana"] and counts["kana"] + counts["zh"] >= latin:
        return "ja"
    script, script_count = max(
        ((name, count) for name, count in counts.items() if name != "kana"),
        key=lambda row: row[1],
    )
    if script_count and script_count >= latin:
        return script

    words = [word.lower() for word in _WORD_RE.findall(text)]
    scores = {
        code: sum(1 for word in words if word in stopwords)
        for code, stopwords in _STOPWORDS.items()
    }
    best = max(scores.items(), key=lambda row: row[1])
    return best[0] if best[1] else "en"


def summarize_lead(text: str) -> str:
    lines = [line.strip().lstrip("#").strip() for line in text.splitlines()]
    flattened = " ".join(line for line in lines if line)
    sentences = [part.strip() for part in _SENTENCE_RE.split(flattened) if part.strip()]
    summary = " ".join(sentences[:SUMMARY_MAX_SENTENCES])
    if len(summary) > SUMMARY_MAX_CHARS:
        summary = summary[: SUMMARY_MAX_CHARS - 3].rstrip() + "..."
    return summary


class LocalLLMProvider(LLMProvider):
    """Routes known capabilities to deterministic local implementations."""

    name = "local"

    def run(self, request: LLMRequest) -> LLMResponse:
        if request.capability_id == LANGUAGE_DETECT:
            output = self._run_detect(request)
        elif request.capability_id == TEXT_TRANSLATE:
            output = self._run_translate(request)
        elif request.capability_id == TEXT_SUMMARIZE:
            output = self._run_summarize(request)
        else:
            raise ValueError(f"unsupported_local_capability:{request.capability_id}")
        return LLMResponse(
            raw_text=json.dumps(output, sort_keys=True, ensure_ascii=False),
            model="deterministic-rule-engine",
            provider=self.name,
        )

    def _run_detect(self, request: LLMRequest) -> dict[str, Any]:
        return {"locale": detect_locale(str(request.input_payload.get("text", "")))}

    def _run_translate(self, request: LLMRequest) -> dict[str, Any]:
        # No local translation model: tag the text so callers can see the routing.
        text = str(request.input_payload.get("text", ""))
        source = str(request.input_payload.get("source_locale", "")).strip() or "auto"
        target = str(request.input_payload.get("target_locale", "")).strip()
        return {"text": f"[{source}->{target}] {text}"}

    def _run_summarize(self, request: LLMRequest) -> dict[str, Any]:
        return {"summary": summarize_lead(str(request.input_payload.get("text", "")))}
