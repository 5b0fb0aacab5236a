"""Judgment client: one system prompt, one user message, one text answer.

Planner, evaluator and segmenter all talk to the language model through the
JudgmentClient protocol so tests can substitute a scripted fake.

Example:
    judge = AnthropicJudgmentClient()
    text = await judge.judge(SYSTEM, user_message, JudgeOptions(json_output=True))
    plan = parse_structured(text, PlannerResponse)
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional, Protocol, Type, TypeVar

from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import BaseModel

from .errors import JudgmentError
from .models import ModelTier, get_llm
from .response_parsing import extract_response_content, parse_structured

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

JSON_ONLY_INSTRUCTION = (
    "\n\nRespond with ONLY a valid JSON object. No markdown, no commentary."
)


@dataclass
class JudgeOptions:
    """Per-call options for a judgment."""

    tier: ModelTier = ModelTier.SONNET
    max_tokens: int = 2048
    temperature: Optional[float] = 0.0
    json_output: bool = False
    stage: str | None = None


class JudgmentClient(Protocol):
    """Uniform call contract to a language-model backend."""

    async def judge(
        self,
        system_prompt: str,
        user_message: str,
        options: Optional[JudgeOptions] = None,
    ) -> str: ...


class AnthropicJudgmentClient:
    """JudgmentClient backed by Claude through langchain_anthropic."""

    async def judge(
        self,
        system_prompt: str,
        user_message: str,
        options: Optional[JudgeOptions] = None,
    ) -> str:
        """
        Run one judgment call.

        Args:
            system_prompt: Instructions and rubric
            user_message: The material to judge
            options: Tier, token limit, temperature and JSON constraint

        Returns:
            Response text

        Raises:
            JudgmentError: Model unreachable, misconfigured or returned nothing
        """
        options = options or JudgeOptions()
        if options.json_output:
            system_prompt += JSON_ONLY_INSTRUCTION

        try:
            llm = get_llm(
                tier=options.tier,
                max_tokens=options.max_tokens,
                temperature=options.temperature,
            )
            response = await llm.ainvoke(
                [
                    SystemMessage(content=system_prompt),
                    HumanMessage(content=user_message),
                ]
            )
        except Exception as e:
            logger.error(f"Judgment call failed ({options.stage or 'unknown'}): {e}")
            raise JudgmentError(
                f"Judgment call failed: {e}", stage=options.stage
            ) from e

        content = extract_response_content(response)
        if not content:
            raise JudgmentError("Empty judgment response", stage=options.stage)
        return content


async def judge_structured(
    judge: JudgmentClient,
    system_prompt: str,
    user_message: str,
    schema: Type[T],
    options: Optional[JudgeOptions] = None,
) -> T:
    """Run a JSON-constrained judgment and validate it against schema.

    Raises:
        JudgmentError: Transport failure
        MalformedJudgmentError: Output failed validation
    """
    options = replace(options or JudgeOptions(), json_output=True)
    content = await judge.judge(system_prompt, user_message, options)
    return parse_structured(content, schema, stage=options.stage)
