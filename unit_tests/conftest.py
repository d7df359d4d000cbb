"""Shared pytest fixtures for unit tests."""

from typing import Any, Callable, Optional
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
import sys

import pytest

# Ensure project root is importable when tests run from repository root.
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from implementation.classes.schemas import GenerationSubject


def completion_response(content: Optional[str]) -> SimpleNamespace:
    """Build an object shaped like an OpenAI ChatCompletion with one choice."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def llm_client_factory() -> Callable[..., MagicMock]:
    """Return a factory for AsyncOpenAI stand-ins whose completion returns `content`."""

    def _factory(content: Optional[str] = "{}", side_effect: Optional[BaseException] = None) -> MagicMock:
        client = MagicMock()
        client.chat.completions.create = AsyncMock(
            return_value=completion_response(content),
            side_effect=side_effect,
        )
        return client

    return _factory


@pytest.fixture
def subject() -> GenerationSubject:
    return GenerationSubject(title="Test Movie", year=2024, overview="A heist goes sideways in Mumbai.")


@pytest.fixture
def script_payload_factory() -> Callable[..., dict[str, Any]]:
    """Return a factory that builds a complete script payload with optional overrides."""

    def _factory(**overrides: Any) -> dict[str, Any]:
        base_data: dict[str, Any] = {
            "title": "Test Movie",
            "hook": "Tum ready ho is heist ke liye?",
            "beats": [
                "00:00 - Vault ka plan",
                "00:10 - Stakes high",
                "00:20 - Dosti mein daraar",
                "00:32 - Rooftop chase",
                "00:45 - Twist",
                "00:58 - Payoff",
            ],
            "fact": "The vault set was built in 12 days.",
            "cta": "Follow karo for more!",
            "hashtags": ["#heist", "#bollywood", "#moviereview", "#hinglish", "#shorts", "#thriller", "#mumbai"],
            "scenes": ["Wide shot of the vault", "Close-up on the map"],
            "captions": ["Plan simple tha", "Par scene palat gaya"],
        }
        base_data.update(overrides)
        return base_data

    return _factory


@pytest.fixture
def review_payload_factory() -> Callable[..., dict[str, Any]]:
    """Return a factory that builds a complete review payload with optional overrides."""

    def _factory(**overrides: Any) -> dict[str, Any]:
        base_data: dict[str, Any] = {
            "title": "Test Movie",
            "oneLiner": "Full paisa vasool heist.",
            "summary": "A crew plans one last job.",
            "plotTheme": "Loyalty vs greed",
            "whatWorks": ["Tight pacing", "Sharp dialogues", "Great score", "Solid cast"],
            "whatDoesnt": ["Predictable middle", "Thin villain"],
            "bestScenes": ["Rooftop chase", "Vault reveal", "Interval twist"],
            "performances": "Lead pair is on fire.",
            "writingDirection": "Slick and confident.",
            "actionTechnical": "Clean choreography.",
            "musicVfx": "BGM goes hard.",
            "paceTone": "Fast and fun.",
            "familyGuide": "Mild violence.",
            "whoShouldWatch": ["Heist fans", "Friends night"],
            "whoShouldSkip": ["Slow-burn lovers"],
            "ratings": {
                "overall": 8,
                "story": 7,
                "acting": 8,
                "direction": 7.5,
                "action": 8,
                "music": 9,
                "vfx": 6,
            },
            "verdict": "Dekh lo, maza aayega.",
            "narration": "Para one.\n\nPara two.\n\nPara three.",
        }
        base_data.update(overrides)
        return base_data

    return _factory
