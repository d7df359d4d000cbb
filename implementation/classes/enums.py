"""
Enum classes for generation requests and style profiles.

This module contains the Enum classes shared by the prompt builders, the
generation client and the validators.
"""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, slots=True)
class DecodingParams:
    """Fixed sampling settings for one artifact kind."""
    temperature: float
    max_tokens: int


class ArtifactKind(Enum):
    """Kinds of artifact the generation pipeline can produce."""
    SCRIPT = "script"
    REVIEW = "review"

    @property
    def decoding_params(self) -> DecodingParams:
        """Temperature and output-length ceiling used for this kind."""
        _params = {
            ArtifactKind.SCRIPT: DecodingParams(temperature=0.8, max_tokens=900),
            ArtifactKind.REVIEW: DecodingParams(temperature=0.7, max_tokens=1100),
        }
        return _params[self]

    def __str__(self) -> str:
        return self.value


class StyleDimension(Enum):
    """
    Named dimensions of a style profile.

    Values are the JSON keys accepted in style overrides. Declaration order is
    the order lines appear in the rendered style block.
    """
    PERSONA = "persona"
    TONE = "tone"
    SLANG = "slang"
    PACE = "pace"
    DEVICES = "devices"
    EMOJI = "emoji"
    ADDRESS = "address"
    CTA_STYLE = "ctaStyle"
    HASHTAGS_STYLE = "hashtagsStyle"

    @property
    def label(self) -> str:
        """Human-readable label used in the rendered style block."""
        _labels = {
            StyleDimension.PERSONA: "Persona",
            StyleDimension.TONE: "Tone",
            StyleDimension.SLANG: "Slang",
            StyleDimension.PACE: "Pace",
            StyleDimension.DEVICES: "Devices",
            StyleDimension.EMOJI: "Emoji",
            StyleDimension.ADDRESS: "Address",
            StyleDimension.CTA_STYLE: "CTA Style",
            StyleDimension.HASHTAGS_STYLE: "Hashtags Style",
        }
        return _labels[self]

    @classmethod
    def from_key(cls, key: str) -> "StyleDimension | None":
        """Return the dimension for a JSON key, or None if the key is unknown."""
        try:
            return cls(key)
        except ValueError:
            return None
