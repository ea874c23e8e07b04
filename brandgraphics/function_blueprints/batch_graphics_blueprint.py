import uuid
from time import perf_counter
from typing import Callable, Optional

import azure.functions as func

from brandgraphics.function_blueprints.http_responses import (
    error_response,
    json_response,
    parse_json_body,
    parse_request,
)
from brandgraphics.functions.batch_graphics import run_batch_graphics
from brandgraphics.shared.config import Settings, load_settings
from brandgraphics.shared.graph_client import GraphClient
from brandgraphics.shared.logging_utils import elapsed_ms, info as log_info
from brandgraphics.specs.common.errors import RequestValidationError
from brandgraphics.specs.http.batch_graphics import VALIDATION_MESSAGES, BatchGraphicsRequest

bp = func.Blueprint()


def handle_batch_graphics(
    req: func.HttpRequest,
    *,
    settings: Optional[Settings] = None,
    client_factory: Callable[[Settings], GraphClient] = GraphClient,
    sleep: Optional[Callable[[float], None]] = None,
) -> func.HttpResponse:
    request_id = uuid.uuid4().hex
    start = perf_counter()
    try:
        parsed = parse_request(BatchGraphicsRequest, parse_json_body(req), VALIDATION_MESSAGES)
    except RequestValidationError as exc:
        return error_response(exc, request_id, "batch")

    try:
        settings = settings or load_settings()
        kwargs = {"sleep": sleep} if sleep else {}
        result = run_batch_graphics(parsed, settings, client_factory(settings), request_id=request_id, **kwargs)
    except Exception as exc:
        return error_response(exc, request_id, "batch", prefix="Batch failed: ")

    log_info(
        request_id,
        "batch:completed",
        generated=result.generated,
        attempted=result.countAttempted,
        durationMs=elapsed_ms(start),
    )
    return json_response(result)


@bp.function_name(name="graphics_batch")
@bp.route(route="graphics/batch", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
def graphics_batch(req: func.HttpRequest) -> func.HttpResponse:
    return handle_batch_graphics(req)
