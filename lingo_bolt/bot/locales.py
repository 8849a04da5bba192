"""Language name and locale code resolution for bot commands and settings."""

from __future__ import annotations


SUPPORTED_LOCALES: dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "pt-BR": "Portuguese (BR)",
    "zh-CN": "Chinese (Simplified)",
    "ja": "Japanese",
    "ko": "Korean",
    "hi": "Hindi",
    "ar": "Arabic",
    "ru": "Russian",
    "it": "Italian",
    "nl": "Dutch",
    "tr": "Turkish",
    "pl": "Polish",
}

LANGUAGE_TO_LOCALE: dict[str, str] = {
    "english": "en",
    "spanish": "es",
    "french": "fr",
    "german": "de",
    "portuguese": "pt-BR",
    "chinese": "zh-CN",
    "japanese": "ja",
    "korean": "ko",
    "hindi": "hi",
    "arabic": "ar",
    "russian": "ru",
    "italian": "it",
    "dutch": "nl",
    "turkish": "tr",
    "polish": "pl",
}

# Detected codes are bare ISO 639-1 subtags; labels use lower-case names.
CODE_TO_LABEL_NAME: dict[str, str] = {
    "en": "english",
    "es": "spanish",
    "fr": "french",
    "de": "german",
    "pt": "portuguese",
    "zh": "chinese",
    "ja": "japanese",
    "ko": "korean",
    "hi": "hindi",
    "ar": "arabic",
    "ru": "russian",
    "it": "italian",
    "nl": "dutch",
    "tr": "turkish",
    "pl": "polish",
}

PIVOT_LOCALE = "en"

_CANONICAL_BY_LOWER = {code.lower(): code for code in SUPPORTED_LOCALES}


class LocaleResolver:
    """Maps free-text language names and locale codes to canonical locale codes."""

    def resolve(self, name: str) -> str:
        """Return the canonical locale for ``name``.

        Known English language names and supported locale codes (any case)
        resolve to the canonical code. Anything else comes back lower-cased
        and otherwise untouched; the translation backend decides whether it
        accepts it.
        """

        key = name.strip().lower()
        if key in LANGUAGE_TO_LOCALE:
            return LANGUAGE_TO_LOCALE[key]
        if key in _CANONICAL_BY_LOWER:
            return _CANONICAL_BY_LOWER[key]
        return key

    def label(self, code: str) -> str:
        return SUPPORTED_LOCALES.get(code, code)

    def is_supported(self, code: str) -> bool:
        return code in SUPPORTED_LOCALES

    def label_name(self, detected_code: str) -> str:
        """Lower-case language name used in ``lang:<name>`` labels."""

        code = detected_code.strip().lower()
        if code in CODE_TO_LABEL_NAME:
            return CODE_TO_LABEL_NAME[code]
        primary = primary_subtag(code)
        return CODE_TO_LABEL_NAME.get(primary, code)


def primary_subtag(code: str) -> str:
    return code.split("-", 1)[0].strip().lower()


def same_language(detected: str, target: str) -> bool:
    """True when ``detected`` and ``target`` share a primary subtag (``en-us`` vs ``en``)."""

    return primary_subtag(detected) == primary_subtag(target)
