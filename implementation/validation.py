"""
Schema validation of extracted model output.

Wraps the artifact models in implementation.classes.schemas so that pydantic
failures surface as ArtifactValidationError with field-level issues, and so
the caller's title always wins over whatever title the model echoed back.
"""

from typing import Any, Iterable, Mapping, TypeVar

from pydantic import BaseModel, ValidationError

from implementation.classes.enums import ArtifactKind
from implementation.classes.errors import ArtifactValidationError
from implementation.classes.schemas import ReviewArtifact, ScriptArtifact

ArtifactT = TypeVar("ArtifactT", bound=BaseModel)


def format_issues(errors: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Flatten pydantic error dicts (ValidationError.errors()) into [{path, message, code}]."""
    return [
        {
            "path": list(detail["loc"]),
            "message": detail["msg"],
            "code": detail["type"],
        }
        for detail in errors
    ]


def _validate(
    model: type[ArtifactT],
    kind: ArtifactKind,
    data: Mapping[str, Any],
    title: str,
) -> ArtifactT:
    payload = {**data, "title": title}
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise ArtifactValidationError(str(kind), format_issues(e.errors())) from e


def validate_script(data: Mapping[str, Any], title: str) -> ScriptArtifact:
    """
    Normalize and validate a script payload.

    Missing text fields default to "", array fields accept arrays or delimited
    strings, hashtags are capped at seven. A hook over 80 characters or a
    text field holding a non-string fails.
    """
    return _validate(ScriptArtifact, ArtifactKind.SCRIPT, data, title)


def validate_review(data: Mapping[str, Any], title: str) -> ReviewArtifact:
    """
    Normalize and validate a review payload.

    Every field except plotTheme is required. Ratings are coerced to numbers
    and must lie in [0, 10]; they are never clamped.
    """
    return _validate(ReviewArtifact, ArtifactKind.REVIEW, data, title)
