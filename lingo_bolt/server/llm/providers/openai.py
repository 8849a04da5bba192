"""OpenAI chat-completions provider adapter using normalized contracts."""

from __future__ import annotations

import requests

from lingo_bolt.server.llm.providers.base import LLMProvider, LLMRequest, LLMResponse, LLMUsage


DEFAULT_OPENAI_MODEL = "gpt-4o-mini"


class OpenAIProvider(LLMProvider):
    """Sends the capability prompt plus JSON input and expects a JSON object back."""

    name = "openai"

    def __init__(
        self,
        api_key: str | None,
        model: str = DEFAULT_OPENAI_MODEL,
        base_url: str = "https://api.openai.com/v1",
        session: requests.Session | None = None,
        timeout_s: float = 60,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout_s = timeout_s

    def run(self, request: LLMRequest) -> LLMResponse:
        if not self.api_key:
            raise RuntimeError("openai_provider_not_configured")

        response = self.session.request(
            method="POST",
            url=f"{self.base_url}/chat/completions",
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": self.model,
                "response_format": {"type": "json_object"},
                "messages": [
                    {"role": "system", "content": request.system_prompt},
                    {"role": "user", "content": request.user_message()},
                ],
            },
            timeout=self.timeout_s,
        )
        response.raise_for_status()
        payload = response.json()
        choices = payload.get("choices") or [{}]
        raw_text = str(((choices[0] or {}).get("message") or {}).get("content") or "")
        usage = payload.get("usage") or {}
        return LLMResponse(
            raw_text=raw_text,
            model=str(payload.get("model", self.model)),
            provider=self.name,
            usage=LLMUsage(
                input_tokens=int(usage.get("prompt_tokens", 0) or 0),
                output_tokens=int(usage.get("completion_tokens", 0) or 0),
            ),
        )
