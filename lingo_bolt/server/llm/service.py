"""Runs a language capability against a provider and checks what comes back.

Providers answer with text. The runner requires that text to be a single JSON
object matching the capability's output schema; anything else is rejected with
:class:`CapabilityOutputValidationError` rather than passed on to a comment.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from lingo_bolt.server.llm.providers import LLMProvider, LLMRequest, LLMUsage, LocalLLMProvider
from lingo_bolt.server.llm.registry import CapabilityDefinition, get_capability_definition


logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "local"


class CapabilityOutputValidationError(ValueError):
    def __init__(self, capability_id: str, *, errors: list[dict[str, str]]) -> None:
        self.capability_id = capability_id
        self.errors = errors
        super().__init__(f"capability_output_validation_failed:{capability_id}")

    def as_dict(self) -> dict[str, Any]:
        return {
            "error": str(self),
            "capability_id": self.capability_id,
            "validation": {"errors": self.errors},
        }


@dataclass(frozen=True)
class CapabilityResult:
    capability_id: str
    provider: str
    model: str
    usage: LLMUsage
    output: dict[str, Any]


def run_capability(
    capability_id: str,
    input_payload: dict[str, Any],
    provider_name: str = DEFAULT_PROVIDER,
    providers: dict[str, LLMProvider] | None = None,
) -> CapabilityResult:
    definition = get_capability_definition(capability_id)
    _check_required_inputs(definition, input_payload)

    provider_map = providers or {DEFAULT_PROVIDER: LocalLLMProvider()}
    provider = provider_map.get(provider_name.strip() or DEFAULT_PROVIDER)
    if provider is None:
        raise ValueError(f"unknown_provider:{provider_name}")

    response = provider.run(
        LLMRequest(
            capability_id=capability_id,
            system_prompt=definition.render_prompt(input_payload),
            input_payload=input_payload,
        )
    )
    output, errors = _parse_json_object(response.raw_text)
    if not errors:
        errors = _validate_json_schema(output, definition.output_schema)
    if errors:
        errors.sort(key=lambda row: (row["code"], row["path"]))
        logger.warning(
            "capability %s output rejected (provider=%s): %s",
            capability_id,
            response.provider,
            [row["code"] for row in errors],
        )
        raise CapabilityOutputValidationError(capability_id, errors=errors)

    return CapabilityResult(
        capability_id=capability_id,
        provider=response.provider,
        model=response.model,
        usage=response.usage,
        output=output,
    )


def _check_required_inputs(definition: CapabilityDefinition, input_payload: dict[str, Any]) -> None:
    for name in definition.required_inputs:
        if not str(input_payload.get(name, "")).strip():
            raise ValueError(f"capability_guardrail_failed:{definition.capability_id}:missing_{name}")


def _parse_json_object(raw_text: str) -> tuple[dict[str, Any], list[dict[str, str]]]:
    text = raw_text.strip()
    if not text:
        return {}, [_error("$", "JSON_EMPTY", "model output is empty")]
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        return {}, [_error("$", "JSON_PARSE", f"model output is not valid JSON: {exc.msg}")]
    if not isinstance(parsed, dict):
        return {}, [_error("$", "JSON_TYPE", "model output must be a JSON object")]
    return parsed, []


def _validate_json_schema(
    payload: Any, schema: dict[str, Any], *, path: str = "$"
) -> list[dict[str, str]]:
    """Check the subset of JSON Schema used by the registry: objects and strings."""

    schema_type = schema.get("type")
    if schema_type == "object":
        if not isinstance(payload, dict):
            return [_error(path, "SCHEMA_TYPE", "value must be an object")]
        errors = [
            _error(f"{path}.{name}", "SCHEMA_REQUIRED", f"'{name}' is a required property")
            for name in sorted(schema.get("required", []))
            if name not in payload
        ]
        properties = schema.get("properties", {})
        for key in sorted(payload):
            if key in properties:
                errors.extend(_validate_json_schema(payload[key], properties[key], path=f"{path}.{key}"))
        return errors

    if schema_type == "string":
        if not isinstance(payload, str):
            return [_error(path, "SCHEMA_TYPE", "value must be a string")]
        min_length = int(schema.get("minLength", 0))
        if len(payload.strip()) < min_length:
            return [_error(path, "SCHEMA_MIN_LENGTH", f"value must have at least {min_length} characters")]
    return []


def _error(path: str, code: str, message: str) -> dict[str, str]:
    return {"path": path, "code": code, "message": message}
