"""Per-section preparation before gating and segmentation.

The section text itself is passed through untouched so that segments remain
exact substrings of it. Content-type hints for the generation service travel
in the surrounding context fields instead.
"""

import logging
import re
from dataclasses import dataclass

from workflows.visualize.state import Section

logger = logging.getLogger(__name__)

_MATH_PATTERNS = (
    re.compile(r"\$[^$]+\$"),
    re.compile(r"\\[(\[][^)\]]+\\[)\]]"),
    re.compile(r"\\begin\{equation\}"),
    re.compile(r"\d+\s*[+\-*/=]\s*\d+"),
)
_MATH_MIN_MATCHES = 4


@dataclass
class PreparedSection:
    text: str
    content_type: str = "text"
    context_before: str = ""
    context_after: str = ""


def is_mathematical(text: str) -> bool:
    """More than three inline formulas, equations or LaTeX environments."""
    count = sum(len(pattern.findall(text)) for pattern in _MATH_PATTERNS)
    return count >= _MATH_MIN_MATCHES


def prepare_section(section: Section) -> PreparedSection:
    """Collect the generation hints for a section.

    Empty text is returned as is, never replaced by the heading.
    """
    text = section.text
    if not text.strip():
        logger.warning(f"Section {section.id} has empty text")

    hints = []
    if section.has_code:
        hints.append("Algorithm/code logic")
    if section.has_table:
        hints.append("Table data")
    if is_mathematical(text):
        hints.append("Mathematical concept")

    context_after = ""
    if section.has_figure and section.figure_caption:
        context_after = f"Figure caption: {section.figure_caption.strip()}"

    if section.has_code:
        content_type = "code"
    elif section.has_table:
        content_type = "table"
    else:
        content_type = "text"

    return PreparedSection(
        text=text,
        content_type=content_type,
        context_before="; ".join(hints),
        context_after=context_after,
    )
