import uuid
from typing import Callable, Optional

import azure.functions as func

from brandgraphics.function_blueprints.http_responses import (
    error_response,
    json_response,
    parse_json_body,
    parse_request,
)
from brandgraphics.functions.list_brand_images import run_list_brand_images
from brandgraphics.shared.config import Settings, load_settings
from brandgraphics.shared.graph_client import GraphClient
from brandgraphics.shared.logging_utils import info as log_info
from brandgraphics.specs.http.list_brand_images import VALIDATION_MESSAGES, ListBrandImagesRequest

bp = func.Blueprint()


def handle_list_brand_images(
    req: func.HttpRequest,
    *,
    settings: Optional[Settings] = None,
    client_factory: Callable[[Settings], GraphClient] = GraphClient,
) -> func.HttpResponse:
    request_id = uuid.uuid4().hex
    try:
        parsed = parse_request(ListBrandImagesRequest, parse_json_body(req), VALIDATION_MESSAGES)
        settings = settings or load_settings()
        result = run_list_brand_images(parsed, client_factory(settings), request_id=request_id)
    except Exception as exc:
        return error_response(exc, request_id, "list")

    log_info(request_id, "list:completed", count=len(result.images), note=result.note)
    return json_response(result)


@bp.function_name(name="list_brand_images")
@bp.route(route="listBrandImages", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
def list_brand_images(req: func.HttpRequest) -> func.HttpResponse:
    return handle_list_brand_images(req)
