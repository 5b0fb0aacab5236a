"""LLM response parsing utilities."""

import json
import re
from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import MalformedJudgmentError

T = TypeVar("T", bound=BaseModel)

_FENCE = re.compile(r"^```[a-zA-Z]*\s*\n?|\n?```\s*$")


def strip_code_fences(content: str) -> str:
    """Remove a surrounding markdown code fence, if present."""
    content = content.strip()
    if content.startswith("```"):
        content = _FENCE.sub("", content).strip()
    return content


def extract_response_content(response: Any) -> str:
    """Extract text content from various LLM response formats."""
    if isinstance(response.content, str):
        return response.content.strip()
    if isinstance(response.content, list):
        parts = []
        for block in response.content:
            if isinstance(block, dict):
                if block.get("type", "text") == "text":
                    parts.append(block.get("text", ""))
            elif hasattr(block, "text"):
                parts.append(block.text)
            else:
                parts.append(str(block))
        return "".join(parts).strip()
    return str(response.content).strip()


def parse_structured(content: str, schema: Type[T], stage: str | None = None) -> T:
    """Validate judgment output against a schema.

    No repair is attempted: output is either valid JSON matching the schema
    or the call is classified as malformed.

    Raises:
        MalformedJudgmentError: Output is not JSON or does not match schema
    """
    text = strip_code_fences(content)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedJudgmentError(
            f"Judgment output is not valid JSON: {e.msg}", raw=content, stage=stage
        ) from e

    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise MalformedJudgmentError(
            f"Judgment output does not match {schema.__name__}: "
            f"{e.error_count()} errors",
            raw=content,
            stage=stage,
        ) from e
