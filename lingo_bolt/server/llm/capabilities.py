"""Capability identifiers for LLM-backed language features."""

from __future__ import annotations

LANGUAGE_DETECT = "language_detect"
TEXT_TRANSLATE = "text_translate"
TEXT_SUMMARIZE = "text_summarize"

# Detection only needs a prefix of the text.
DETECTION_SAMPLE_CHARS = 1000
