"""Action handlers: one capability call and one host write each."""

from __future__ import annotations

import logging

from lingo_bolt.bot.locales import PIVOT_LOCALE, LocaleResolver, same_language
from lingo_bolt.bot.models import LanguageDetector, RepositoryHost, Summarizer, Translator
from lingo_bolt.server.github_connector import LabelAlreadyExistsError


logger = logging.getLogger(__name__)

LABEL_PREFIX = "lang:"
AUTO_TRANSLATE_MARKER = "Auto-translated to"


def translation_comment(language_label: str, text: str) -> str:
    return f"**Translation ({language_label}):**\n\n{text}"


def summary_comment(language_label: str, text: str) -> str:
    return f"**Summary ({language_label}):**\n\n{text}"


def auto_translation_comment(language_label: str, text: str) -> str:
    return f"**{AUTO_TRANSLATE_MARKER} {language_label}:**\n\n{text}"


def is_auto_translation(body: str) -> bool:
    return body.lstrip().startswith(f"**{AUTO_TRANSLATE_MARKER} ")


class ActionHandlers:
    """Translate, summarize, auto-label and auto-translate against a repository host.

    Handlers never retry. Capability and host failures propagate to the caller,
    which owns isolation between handlers.
    """

    def __init__(
        self,
        detector: LanguageDetector,
        translator: Translator,
        summarizer: Summarizer,
        locales: LocaleResolver | None = None,
    ) -> None:
        self.detector = detector
        self.translator = translator
        self.summarizer = summarizer
        self.locales = locales or LocaleResolver()

    async def translate(
        self,
        host: RepositoryHost,
        owner: str,
        repo: str,
        issue_number: int,
        subject: str,
        language_name: str,
    ) -> bool:
        target = self.locales.resolve(language_name)
        source = await self.detector.detect(subject)
        translated = await self.translator.translate(subject, source, target)
        await host.post_comment(
            owner, repo, issue_number, translation_comment(self.locales.label(target), translated)
        )
        logger.info("translated %s/%s#%s %s->%s", owner, repo, issue_number, source, target)
        return True

    async def summarize(
        self,
        host: RepositoryHost,
        owner: str,
        repo: str,
        issue_number: int,
        subject: str,
        language_name: str | None,
        default_language: str,
    ) -> bool:
        target = self.locales.resolve(language_name or default_language)
        summary = await self.summarizer.summarize(subject)
        if target != PIVOT_LOCALE:
            summary = await self.translator.translate(summary, PIVOT_LOCALE, target)
        await host.post_comment(
            owner, repo, issue_number, summary_comment(self.locales.label(target), summary)
        )
        logger.info("summarized %s/%s#%s in %s", owner, repo, issue_number, target)
        return True

    async def auto_label(
        self,
        host: RepositoryHost,
        owner: str,
        repo: str,
        issue_number: int,
        body: str,
        title: str,
    ) -> bool:
        text = f"{title}\n\n{body}".strip()
        if not text:
            return False

        detected = await self.detector.detect(text)
        label = f"{LABEL_PREFIX}{self.locales.label_name(detected)}"
        try:
            await host.ensure_label(owner, repo, label)
        except LabelAlreadyExistsError:
            logger.debug("label %s already exists on %s/%s", label, owner, repo)
        await host.attach_label(owner, repo, issue_number, label)
        logger.info("labeled %s/%s#%s with %s", owner, repo, issue_number, label)
        return True

    async def auto_translate(
        self,
        host: RepositoryHost,
        owner: str,
        repo: str,
        issue_number: int,
        text: str,
        default_language: str,
    ) -> bool:
        """Translate ``text`` into the default language unless it is already in it.

        Returns ``False`` without calling the translator when the detected
        language shares a primary subtag with the target.
        """

        if not text.strip():
            return False
        target = self.locales.resolve(default_language)
        detected = await self.detector.detect(text)
        if same_language(detected, target):
            logger.info(
                "skipping auto-translate for %s/%s#%s: already %s",
                owner,
                repo,
                issue_number,
                detected,
            )
            return False

        translated = await self.translator.translate(text, detected, target)
        await host.post_comment(
            owner,
            repo,
            issue_number,
            auto_translation_comment(self.locales.label(target), translated),
        )
        logger.info("auto-translated %s/%s#%s %s->%s", owner, repo, issue_number, detected, target)
        return True
