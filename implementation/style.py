"""
Style profile resolution.

A style profile is layered: built-in defaults, then an optional JSON document
from the environment (SCRIPT_STYLE_JSON), then the per-request `style` object.
Each layer overwrites matching keys only. The resolved profile is rendered to
a fixed-order text block that is embedded verbatim in prompts.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from implementation.classes.enums import StyleDimension
from implementation.classes.schemas import StyleProfile

logger = logging.getLogger(__name__)


DEFAULT_STYLE: dict[StyleDimension, str] = {
    StyleDimension.PERSONA: "Energetic, street-smart Hinglish; witty, confident, desi-Mumbai vibe",
    StyleDimension.TONE: "mast & attractive; crisp lines; no cringe; no over-explaining",
    StyleDimension.SLANG: "light Hindi/Mumbai slang only (bhai, yaar, scene, mast); keep it natural",
    StyleDimension.PACE: "fast, punchy; 150-170 wpm; micro-pauses implied",
    StyleDimension.DEVICES: "rhetorical questions, contrast, quick twists, wordplay",
    StyleDimension.EMOJI: "0-2 total, max; avoid spam",
    StyleDimension.ADDRESS: "second-person (tum/you) direct camera address",
    StyleDimension.CTA_STYLE: "Short, hype, imperative. Ask to follow/subscribe for more movie shorts in Hinglish",
    StyleDimension.HASHTAGS_STYLE: "5-7; mix of English/Hinglish; all lowercase; no spaces; no movie-title duplicates",
}


@dataclass(frozen=True, slots=True)
class StyleOverrideResult:
    """
    Outcome of parsing an environment style override.

    Exactly one of `override` (possibly empty) or `error` is meaningful:
    when `error` is set the override must be ignored.
    """
    override: dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _known_dimensions(raw: Mapping[str, Any]) -> dict[str, str]:
    """Keep only keys naming a style dimension, stringifying scalar values."""
    result: dict[str, str] = {}
    for key, value in raw.items():
        if StyleDimension.from_key(key) is None or value is None:
            continue
        if isinstance(value, (dict, list)):
            continue
        result[key] = str(value)
    return result


def parse_style_override(raw: Optional[str]) -> StyleOverrideResult:
    """
    Parse a JSON style override document.

    Never raises. An absent or blank document is a successful empty override;
    invalid JSON or a non-object document is reported through `error`.
    """
    if raw is None or not raw.strip():
        return StyleOverrideResult()
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        return StyleOverrideResult(error=f"invalid JSON: {e}")
    if not isinstance(parsed, dict):
        return StyleOverrideResult(error=f"expected a JSON object, got {type(parsed).__name__}")
    return StyleOverrideResult(override=_known_dimensions(parsed))


def resolve_style(
    request_style: Optional[Mapping[str, Any]] = None,
    env_override: Optional[str] = None,
) -> StyleProfile:
    """
    Merge defaults < environment override < request override into a StyleProfile.

    Args:
        request_style: Partial style object from the request body. Unknown keys
            (e.g. `narrationWords`) are ignored.
        env_override: Raw SCRIPT_STYLE_JSON value. If it cannot be parsed it is
            logged and skipped; defaults and the request override still apply.

    Returns:
        The frozen, fully populated profile.
    """
    merged: dict[str, str] = {dimension.value: text for dimension, text in DEFAULT_STYLE.items()}

    env_result = parse_style_override(env_override)
    if env_result.ok:
        merged.update(env_result.override)
    else:
        logger.warning("Ignoring SCRIPT_STYLE_JSON override: %s", env_result.error)

    if request_style:
        merged.update(_known_dimensions(request_style))

    return StyleProfile.model_validate(merged)


def style_to_text(profile: StyleProfile) -> str:
    """Render one 'Label: value' line per dimension, in declaration order."""
    values = profile.model_dump(by_alias=True)
    return "\n".join(f"{dimension.label}: {values[dimension.value]}" for dimension in StyleDimension)
