"""Quality gate: is a text unit worth a generation call?"""

import logging
import re

from workflows.shared.llm_utils import (
    JudgeOptions,
    JudgmentClient,
    JudgmentError,
    ModelTier,
    judge_structured,
)
from workflows.shared.text_utils import count_words
from workflows.visualize.config import VisualizeConfig
from workflows.visualize.prompts import EVALUATOR_SYSTEM
from workflows.visualize.schemas import EvaluationResponse
from workflows.visualize.state import Evaluation

logger = logging.getLogger(__name__)

_STRUCTURE_WORDS = re.compile(
    r"\b(step|first|second|third|process|method|approach|compare|versus|vs\.?"
    r"|benefit|advantage|disadvantage|feature|component|part|phase|stage"
    r"|because|therefore|result|example|include|consist|comprise)\b",
    re.IGNORECASE,
)
_CONCEPTS = re.compile(r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+)+|[A-Z]{2,})\b")
_LIST_MARKERS = re.compile(r"\n[-*•]\s+|\d+\.\s+")


def has_structural_signal(text: str) -> bool:
    """Structure keywords, multi-word capitalized terms, acronyms or list markers."""
    return bool(
        _STRUCTURE_WORDS.search(text)
        or _CONCEPTS.search(text)
        or _LIST_MARKERS.search(text)
    )


async def evaluate_content(
    text: str,
    context: str,
    judge: JudgmentClient,
    config: VisualizeConfig | None = None,
) -> Evaluation:
    """Decide whether text is worth visualizing.

    Short text is rejected and long structured text approved without a
    judgment call. Judgment failures approve with medium confidence, since a
    wasted generation call is bounded by the run quota while a false
    rejection cannot be recovered.
    """
    config = config or VisualizeConfig()

    if not text or not text.strip():
        return Evaluation(
            worthy=False,
            reason="Text content is empty",
            confidence=1.0,
            potential="none",
        )

    word_count = count_words(text)
    if word_count < config.evaluator_min_words:
        return Evaluation(
            worthy=False,
            reason="Content too short for a meaningful diagram",
            confidence=0.9,
            potential="none",
        )

    if word_count >= config.evaluator_fast_path_words and has_structural_signal(text):
        logger.debug(f"Fast-path approval: {word_count} words with structure")
        return Evaluation(
            worthy=True,
            reason="Content has enough structure for a diagram",
            confidence=0.8,
            potential="medium",
        )

    excerpt = text[: config.evaluator_max_chars]
    truncated = len(text) > config.evaluator_max_chars
    message = (
        (f"Context: {context}\n\n" if context else "")
        + f"Text Content ({word_count} words):\n\n{excerpt}"
        + ("\n\n[Content truncated for evaluation]" if truncated else "")
        + "\n\nEvaluate whether this content is worth visualizing."
    )

    try:
        response = await judge_structured(
            judge,
            EVALUATOR_SYSTEM,
            message,
            EvaluationResponse,
            JudgeOptions(
                tier=ModelTier.HAIKU, max_tokens=512, temperature=0.15, stage="evaluator"
            ),
        )
    except JudgmentError as e:
        logger.warning(f"Evaluation failed, approving by default: {e.message}")
        return Evaluation(
            worthy=True,
            reason="Could not evaluate precisely; attempting visualization",
            confidence=0.5,
            potential="medium",
        )

    if (
        not response.worthy
        and word_count >= config.evaluator_substantial_words
        and response.confidence < config.evaluator_trust_threshold
    ):
        logger.info(
            f"Overriding low-confidence rejection ({response.confidence:.2f}) "
            f"of {word_count}-word content"
        )
        return Evaluation(
            worthy=True,
            reason="Content is substantial enough to attempt visualization",
            confidence=0.6,
            potential="medium",
        )

    logger.debug(
        f"Evaluation: worthy={response.worthy}, confidence={response.confidence:.2f}, "
        f"words={word_count}"
    )
    return Evaluation(
        worthy=response.worthy,
        reason=response.reason or ("Content appears visualizable" if response.worthy else "Content not suitable"),
        confidence=response.confidence,
        potential=response.visualization_potential,
    )
