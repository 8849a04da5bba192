"""What a language backend receives and returns for one capability call."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class LLMRequest:
    capability_id: str
    system_prompt: str
    input_payload: dict[str, Any]

    def user_message(self) -> str:
        """Input payload as the JSON document sent alongside the system prompt."""
        return json.dumps(self.input_payload, ensure_ascii=False, sort_keys=True)


@dataclass(frozen=True)
class LLMUsage:
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def as_dict(self) -> dict[str, int]:
        return {
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass(frozen=True)
class LLMResponse:
    """Unparsed backend answer; the capability runner owns JSON parsing."""

    raw_text: str
    model: str
    provider: str
    usage: LLMUsage = field(default_factory=LLMUsage)


class LLMProvider(Protocol):
    name: str

    def run(self, request: LLMRequest) -> LLMResponse:
        """Answer ``request`` with a JSON object serialized as text."""
