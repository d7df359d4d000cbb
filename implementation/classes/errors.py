"""
Exception taxonomy for the gateway.

Every error raised by the generation pipeline or the catalog proxy derives
from GatewayError and carries the HTTP status the API boundary should
respond with. Library exceptions (httpx, openai, pydantic) are wrapped at the
module that talks to the library and chained with `from exc`.
"""

from typing import Any


class GatewayError(Exception):
    """Base class for all errors surfaced to API callers."""
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InputError(GatewayError):
    """A required request field is missing or has the wrong type."""
    status_code = 400


class ConfigurationError(GatewayError):
    """A required credential or setting is absent."""
    status_code = 500


class UpstreamError(GatewayError):
    """The LLM provider or TMDB call failed."""
    status_code = 500


class MalformedModelOutput(GatewayError):
    """No JSON object could be recovered from the model's response."""
    status_code = 500


class ArtifactValidationError(GatewayError):
    """
    Model output parsed as JSON but did not satisfy the artifact schema.

    `issues` holds one entry per failing field:
    {"path": [...], "message": str, "code": str}.
    """
    status_code = 400

    def __init__(self, kind: str, issues: list[dict[str, Any]]) -> None:
        super().__init__(f"{kind} failed schema validation ({len(issues)} issue(s))")
        self.kind = kind
        self.issues = issues
