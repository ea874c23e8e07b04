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
from brandgraphics.functions.generate_graphic import run_generate_graphic
from brandgraphics.shared.config import Settings, load_settings
from brandgraphics.shared.graph_client import GraphClient
from brandgraphics.shared.logging_utils import elapsed_ms, info as log_info
from brandgraphics.specs.http.generate_graphic import VALIDATION_MESSAGES, GenerateGraphicRequest

bp = func.Blueprint()


def handle_generate_graphic(
    req: func.HttpRequest,
    *,
    settings: Optional[Settings] = None,
    client_factory: Callable[[Settings], GraphClient] = GraphClient,
) -> func.HttpResponse:
    request_id = uuid.uuid4().hex
    start = perf_counter()
    try:
        parsed = parse_request(GenerateGraphicRequest, parse_json_body(req), VALIDATION_MESSAGES)
        log_info(request_id, "generate:accepted", brand=parsed.brand.value, format=parsed.format.value)
        settings = settings or load_settings()
        result = run_generate_graphic(parsed, settings, client_factory(settings), request_id=request_id)
    except Exception as exc:
        return error_response(exc, request_id, "generate")

    log_info(
        request_id,
        "generate:completed",
        saved=result.saved is not None,
        durationMs=elapsed_ms(start),
    )
    return json_response(result)


@bp.function_name(name="graphics_generate")
@bp.route(route="graphics/generate", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
def graphics_generate(req: func.HttpRequest) -> func.HttpResponse:
    return handle_generate_graphic(req)
