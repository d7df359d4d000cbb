"""
Pydantic schemas for generated artifacts, style profiles and catalog payloads.

Artifact models double as the schema validators for LLM output: loosely-typed
array fields are coerced through the text normalizers before validation, and
everything serializes with camelCase keys for the HTTP API.
"""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, constr, field_validator
from pydantic.alias_generators import to_camel

from implementation.misc.helpers import to_hashtag_sequence, to_sequence


_CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)

MAX_HOOK_CHARS = 80


# -----------------------------
#         STYLE PROFILE
# -----------------------------

class StyleProfile(BaseModel):
    """
    Resolved persona/tone settings for one generation call.

    Built by layering overrides on the defaults; frozen once resolved.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    persona: str
    tone: str
    slang: str
    pace: str
    devices: str
    emoji: str
    address: str
    cta_style: str
    hashtags_style: str


# -----------------------------
#      GENERATION SUBJECT
# -----------------------------

class GenerationSubject(BaseModel):
    """The movie a script or review is written about."""
    title: constr(strip_whitespace=True, min_length=1)
    year: Optional[int] = None
    overview: Optional[str] = None

    @property
    def display_title(self) -> str:
        """Title with the year in parentheses when known, e.g. 'Dune (2021)'."""
        if self.year:
            return f"{self.title} ({self.year})"
        return self.title


# -----------------------------
#            SCRIPT
# -----------------------------

class ScriptArtifact(BaseModel):
    model_config = _CAMEL_CONFIG

    title: str = ""
    hook: str = Field(
        default="",
        max_length=MAX_HOOK_CHARS,
        description="Opening line, direct address, at most 80 characters.",
    )
    fact: str = Field(default="", description="One behind-the-scenes tidbit.")
    cta: str = Field(default="", description="Closing follow/subscribe call to action.")
    beats: list[str] = Field(
        default_factory=list,
        description="Timestamped narrative beats ('00:00 - ...'), six expected.",
    )
    scenes: list[str] = Field(default_factory=list, description="9:16 shot descriptions.")
    captions: list[str] = Field(default_factory=list, description="On-screen caption lines.")
    hashtags: list[str] = Field(
        default_factory=list,
        description="Lowercase, deduplicated tags without '#', at most seven.",
    )

    @field_validator("title", "hook", "fact", "cta", mode="before")
    @classmethod
    def null_text_to_empty(cls, v):
        """Treat an explicit null the same as an absent text field."""
        return "" if v is None else v

    @field_validator("beats", "scenes", "captions", mode="before")
    @classmethod
    def coerce_sequence(cls, v) -> list[str]:
        return to_sequence(v)

    @field_validator("hashtags", mode="before")
    @classmethod
    def coerce_hashtags(cls, v) -> list[str]:
        return to_hashtag_sequence(v)


# -----------------------------
#            REVIEW
# -----------------------------

MIN_RATING, MAX_RATING = 0, 10

Rating = Union[int, float]


class ReviewRatings(BaseModel):
    """
    Seven 0-10 scores. Numeric strings are coerced ("8" -> 8, "7.5" -> 7.5);
    non-numeric or out-of-range values fail and are never clamped.
    """
    overall: Rating
    story: Rating
    acting: Rating
    direction: Rating
    action: Rating
    music: Rating
    vfx: Rating

    @field_validator("*", mode="before")
    @classmethod
    def coerce_number(cls, v):
        if isinstance(v, bool) or not isinstance(v, (int, float, str)):
            raise ValueError("rating must be a number")
        if isinstance(v, str):
            text = v.strip()
            try:
                return int(text)
            except ValueError:
                pass
            try:
                return float(text)
            except ValueError:
                raise ValueError("rating must be a number") from None
        return v

    @field_validator("*")
    @classmethod
    def check_range(cls, v):
        if not MIN_RATING <= v <= MAX_RATING:
            raise ValueError(f"rating must be between {MIN_RATING} and {MAX_RATING}")
        return v


class ReviewArtifact(BaseModel):
    model_config = _CAMEL_CONFIG

    title: str
    one_liner: str
    summary: str
    plot_theme: str = ""
    what_works: list[str]
    what_doesnt: list[str]
    best_scenes: list[str]
    performances: str
    writing_direction: str
    action_technical: str
    music_vfx: str
    pace_tone: str
    family_guide: str
    who_should_watch: list[str]
    who_should_skip: list[str]
    ratings: ReviewRatings
    verdict: str
    narration: str = Field(..., description="Voice-over friendly paragraphs.")

    @field_validator(
        "what_works",
        "what_doesnt",
        "best_scenes",
        "who_should_watch",
        "who_should_skip",
        mode="before",
    )
    @classmethod
    def coerce_sequence(cls, v) -> list[str]:
        return to_sequence(v)


# -----------------------------
#        CATALOG PAYLOADS
# -----------------------------

class MovieSummary(BaseModel):
    """A TMDB movie listing reshaped for API callers."""
    id: int
    title: Optional[str] = None
    overview: str = ""
    year: str = ""
    poster: Optional[str] = None


class MoviePage(BaseModel):
    page: int
    total_pages: int
    total_results: int
    items: list[MovieSummary]


class GenreEntry(BaseModel):
    id: int
    name: str


# -----------------------------
#        USER REVIEWS
# -----------------------------

class StoredReview(BaseModel):
    """A user-submitted review held in the in-memory store."""
    model_config = _CAMEL_CONFIG

    id: int
    movie_id: Union[int, str]
    text: str
    rating: float = 0
