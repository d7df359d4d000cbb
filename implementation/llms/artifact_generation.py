"""
Artifact assemblers: the single entry points for script and review generation.

Each runs the pipeline sequentially:
    resolve style -> build prompt -> LLM completion -> JSON extraction -> schema validation

The first failure propagates unchanged. There are no retries and no partial
artifacts.
"""

import logging
import time
from typing import Any, Mapping, Optional

from openai import AsyncOpenAI

from implementation.classes.enums import ArtifactKind
from implementation.classes.schemas import GenerationSubject, ReviewArtifact, ScriptArtifact
from implementation.llms.generic_methods import DEFAULT_OPENAI_MODEL, complete
from implementation.misc.json_extraction import extract_json
from implementation.prompts.review_prompts import DEFAULT_NARRATION_WORDS, build_review_prompt
from implementation.prompts.script_prompts import build_script_prompt
from implementation.style import resolve_style, style_to_text
from implementation.validation import validate_review, validate_script

logger = logging.getLogger(__name__)


def narration_word_target(style: Optional[Mapping[str, Any]]) -> int:
    """
    Read the optional `narrationWords` knob from a request style object.

    Falls back to the default when absent, non-numeric or not positive.
    """
    if not style:
        return DEFAULT_NARRATION_WORDS
    raw = style.get("narrationWords")
    if isinstance(raw, bool):
        return DEFAULT_NARRATION_WORDS
    try:
        words = int(float(raw))
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_NARRATION_WORDS
    return words if words > 0 else DEFAULT_NARRATION_WORDS


async def generate_script(
    subject: GenerationSubject,
    style: Optional[Mapping[str, Any]] = None,
    *,
    client: AsyncOpenAI,
    model: str = DEFAULT_OPENAI_MODEL,
    style_override: Optional[str] = None,
) -> ScriptArtifact:
    """
    Generate a validated YouTube Shorts script for a movie.

    Args:
        subject: Movie title/year/overview.
        style: Partial style profile from the request.
        client: Shared AsyncOpenAI client.
        model: Chat model name.
        style_override: Raw SCRIPT_STYLE_JSON value from the environment.

    Raises:
        UpstreamError, MalformedModelOutput, ArtifactValidationError
    """
    kind = ArtifactKind.SCRIPT
    start = time.perf_counter()

    style_text = style_to_text(resolve_style(style, style_override))
    prompt = build_script_prompt(subject, style_text)
    raw_text = await complete(prompt, kind.decoding_params, client=client, model=model)
    data = extract_json(raw_text)
    script = validate_script(data, subject.title)

    logger.info(
        "Generated %s for %r in %.0fms (%d beats, %d hashtags)",
        kind, subject.title, (time.perf_counter() - start) * 1000, len(script.beats), len(script.hashtags),
    )
    return script


async def generate_review(
    subject: GenerationSubject,
    style: Optional[Mapping[str, Any]] = None,
    *,
    client: AsyncOpenAI,
    model: str = DEFAULT_OPENAI_MODEL,
    style_override: Optional[str] = None,
) -> ReviewArtifact:
    """
    Generate a validated Hinglish review for a movie.

    `style` may carry a `narrationWords` target for the narration length
    (default 260).

    Raises:
        UpstreamError, MalformedModelOutput, ArtifactValidationError
    """
    kind = ArtifactKind.REVIEW
    start = time.perf_counter()

    style_text = style_to_text(resolve_style(style, style_override))
    prompt = build_review_prompt(subject, style_text, narration_word_target(style))
    raw_text = await complete(prompt, kind.decoding_params, client=client, model=model)
    data = extract_json(raw_text)
    review = validate_review(data, subject.title)

    logger.info(
        "Generated %s for %r in %.0fms (overall %.1f)",
        kind, subject.title, (time.perf_counter() - start) * 1000, review.ratings.overall,
    )
    return review
