from typing import Any, Dict, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator


class RequestModel(BaseModel):
    """Base for JSON request bodies: unknown keys are ignored, brand is case-insensitive."""
    model_config = ConfigDict(extra="ignore")

    @field_validator("brand", mode="before", check_fields=False)
    @classmethod
    def _normalize_brand(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value


class DriveItemRef(BaseModel):
    driveId: str
    itemId: str


class SavedFile(BaseModel):
    savedToSharePoint: bool = True
    driveId: str
    itemId: Optional[str] = None
    webUrl: Optional[str] = None


class ErrorBody(BaseModel):
    code: Literal["bad_request", "server_error"]
    message: str


class ErrorResponse(BaseModel):
    error: ErrorBody


BRAND_MESSAGE = "brand must be SSC, MT, or DWELL"
FORMAT_MESSAGE = "Invalid format. Use square_1080, portrait_1080x1350, or story_1080x1920."


def validation_message(exc: ValidationError, messages: Optional[Mapping[str, str]] = None) -> str:
    """Human-readable message for the first failing field of a request body."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first: Dict[str, Any] = errors[0]
    loc = [str(part) for part in first.get("loc", ())]
    if messages:
        for depth in range(len(loc), 0, -1):
            key = ".".join(loc[:depth])
            if key in messages:
                return messages[key]
    field = ".".join(loc) or "body"
    return f"{field}: {first.get('msg', 'invalid value')}"
