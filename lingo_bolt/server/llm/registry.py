"""Language capabilities: prompt, expected output shape and required inputs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from lingo_bolt.server.llm.capabilities import LANGUAGE_DETECT, TEXT_SUMMARIZE, TEXT_TRANSLATE


@dataclass(frozen=True)
class CapabilityDefinition:
    capability_id: str
    prompt_template: str
    output_schema: dict[str, Any]
    required_inputs: tuple[str, ...] = ("text",)

    def render_prompt(self, input_payload: dict[str, Any]) -> str:
        """Fill ``{field}`` placeholders from the input; absent fields read ``auto``."""
        fields = _PromptFields(
            (key, str(value)) for key, value in input_payload.items() if key != "text"
        )
        return self.prompt_template.format_map(fields)


class _PromptFields(dict):
    def __missing__(self, key: str) -> str:
        return "auto"


def _string_field(name: str, min_length: int = 1) -> dict[str, Any]:
    return {
        "type": "object",
        "required": [name],
        "properties": {name: {"type": "string", "minLength": min_length}},
    }


CAPABILITY_REGISTRY: dict[str, CapabilityDefinition] = {
    LANGUAGE_DETECT: CapabilityDefinition(
        capability_id=LANGUAGE_DETECT,
        prompt_template=(
            "Identify the language the user text is written in. Answer with the lowercase "
            'ISO 639-1 code only, for example "en", "zh", "es" or "ja", as '
            '{{"locale": "<code>"}}.'
        ),
        output_schema=_string_field("locale", min_length=2),
    ),
    TEXT_TRANSLATE: CapabilityDefinition(
        capability_id=TEXT_TRANSLATE,
        prompt_template=(
            "Translate the user text from {source_locale} into {target_locale}. Keep markdown, "
            "code blocks, links and @mentions exactly as written. Answer as "
            '{{"text": "<translation>"}}.'
        ),
        output_schema=_string_field("text"),
        required_inputs=("text", "target_locale"),
    ),
    TEXT_SUMMARIZE: CapabilityDefinition(
        capability_id=TEXT_SUMMARIZE,
        prompt_template=(
            "Summarize this GitHub issue or pull request in English in a few clear, "
            'actionable sentences. Answer as {{"summary": "<summary>"}}.'
        ),
        output_schema=_string_field("summary"),
    ),
}


def get_capability_definition(capability_id: str) -> CapabilityDefinition:
    try:
        return CAPABILITY_REGISTRY[capability_id]
    except KeyError:
        raise ValueError(f"unknown_capability:{capability_id}") from None
