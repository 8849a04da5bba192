"""Language detection, translation and summarization backed by LLM capabilities."""

from __future__ import annotations

import asyncio
import os
from typing import Any

from lingo_bolt.server.llm.capabilities import (
    DETECTION_SAMPLE_CHARS,
    LANGUAGE_DETECT,
    TEXT_SUMMARIZE,
    TEXT_TRANSLATE,
)
from lingo_bolt.server.llm.providers import LLMProvider, LocalLLMProvider, OpenAIProvider
from lingo_bolt.server.llm.providers.openai import DEFAULT_OPENAI_MODEL
from lingo_bolt.server.llm.service import run_capability


def normalize_detected_locale(raw: str) -> str:
    return raw.strip().lower()[:5]


class CapabilityLanguageServices:
    """Implements the detector, translator and summarizer contracts.

    One instance is built per process and shared by all handlers. Provider
    calls are blocking, so each one runs in a worker thread.
    """

    def __init__(
        self,
        providers: dict[str, LLMProvider] | None = None,
        provider_name: str = "local",
    ) -> None:
        self.providers = providers or {"local": LocalLLMProvider()}
        self.provider_name = provider_name
        if provider_name not in self.providers:
            raise ValueError(f"unknown_provider:{provider_name}")

    async def detect(self, text: str) -> str:
        output = await self._run(LANGUAGE_DETECT, {"text": text[:DETECTION_SAMPLE_CHARS]})
        return normalize_detected_locale(str(output["locale"]))

    async def translate(self, text: str, source_locale: str, target_locale: str) -> str:
        output = await self._run(
            TEXT_TRANSLATE,
            {"text": text, "source_locale": source_locale, "target_locale": target_locale},
        )
        return str(output["text"])

    async def summarize(self, text: str) -> str:
        output = await self._run(TEXT_SUMMARIZE, {"text": text})
        return str(output["summary"])

    async def _run(self, capability_id: str, input_payload: dict[str, Any]) -> dict[str, Any]:
        result = await asyncio.to_thread(
            run_capability, capability_id, input_payload, self.provider_name, self.providers
        )
        return result.output


def build_language_services_from_env(
    env: dict[str, str] | None = None,
) -> CapabilityLanguageServices:
    env_map = os.environ if env is None else env
    provider_name = (env_map.get("LINGO_BOLT_LLM_PROVIDER") or "local").strip().lower()
    providers: dict[str, LLMProvider] = {"local": LocalLLMProvider()}
    if provider_name == "openai":
        providers["openai"] = OpenAIProvider(
            api_key=(env_map.get("OPENAI_API_KEY") or "").strip() or None,
            model=(env_map.get("LINGO_BOLT_OPENAI_MODEL") or "").strip() or DEFAULT_OPENAI_MODEL,
        )
    return CapabilityLanguageServices(providers=providers, provider_name=provider_name)
