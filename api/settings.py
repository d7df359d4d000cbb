"""
Environment configuration for the API service.

Values are read once at startup (after loading a local .env file, if any)
into a frozen Settings object that is stored on app.state and passed to the
code that needs it.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from implementation.llms.generic_methods import DEFAULT_OPENAI_MODEL


@dataclass(frozen=True, slots=True)
class Settings:
    openai_api_key: Optional[str] = None
    openai_model: str = DEFAULT_OPENAI_MODEL
    tmdb_access_token: Optional[str] = None
    tmdb_api_key: Optional[str] = None
    style_override_json: Optional[str] = None
    allowed_origin: str = "*"
    port: int = 8080
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, loading .env first."""
        load_dotenv()
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_model=os.getenv("OPENAI_MODEL", DEFAULT_OPENAI_MODEL),
            tmdb_access_token=os.getenv("TMDB_ACCESS_TOKEN") or None,
            tmdb_api_key=os.getenv("TMDB_KEY") or None,
            style_override_json=os.getenv("SCRIPT_STYLE_JSON") or None,
            allowed_origin=os.getenv("ALLOWED_ORIGIN", "*"),
            port=int(os.getenv("PORT", "8080")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
