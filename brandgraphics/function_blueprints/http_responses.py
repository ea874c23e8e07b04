"""
JSON request parsing and the two error shapes every HTTP function returns
"""
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

import azure.functions as func
from pydantic import BaseModel, ValidationError

from brandgraphics.shared.logging_utils import error as log_error, exception as log_exception
from brandgraphics.specs.common.errors import BrandGraphicsError, RequestValidationError, UpstreamError
from brandgraphics.specs.http.common import ErrorBody, ErrorResponse, validation_message

M = TypeVar("M", bound=BaseModel)


def json_response(model: BaseModel, status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        body=model.model_dump_json(),
        mimetype="application/json",
        status_code=status_code,
    )


def bad_request(message: str) -> func.HttpResponse:
    return json_response(ErrorResponse(error=ErrorBody(code="bad_request", message=message)), 400)


def server_error(message: str) -> func.HttpResponse:
    return json_response(ErrorResponse(error=ErrorBody(code="server_error", message=message)), 500)


def parse_json_body(req: func.HttpRequest) -> Dict[str, Any]:
    try:
        data = req.get_json()
    except ValueError as exc:
        raise RequestValidationError("Invalid JSON body") from exc
    if not isinstance(data, dict):
        raise RequestValidationError("Request body must be a JSON object")
    return data


def parse_request(model: Type[M], data: Dict[str, Any], messages: Optional[Mapping[str, str]] = None) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise RequestValidationError(validation_message(exc, messages)) from exc


def error_response(exc: Exception, request_id: Optional[str], operation: str, prefix: str = "") -> func.HttpResponse:
    """Map any failure to 400 bad_request or 500 server_error."""
    if isinstance(exc, RequestValidationError):
        log_error(request_id, f"{operation}:invalid_request", error=str(exc))
        return bad_request(str(exc))
    if isinstance(exc, BrandGraphicsError):
        status = getattr(exc, "status_code", None) if isinstance(exc, UpstreamError) else None
        log_error(request_id, f"{operation}:failed", code=exc.code, status=status, error=str(exc))
        return server_error(f"{prefix}{exc}")
    log_exception(request_id, f"{operation}:unexpected_error", error=str(exc))
    return server_error(f"{prefix}{str(exc) or 'Unknown server error'}")
