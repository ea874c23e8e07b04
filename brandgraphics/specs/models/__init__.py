from __future__ import annotations

from typing import Dict, Type

from pydantic import BaseModel

from brandgraphics.specs.http.batch_graphics import BatchGraphicsRequest, BatchGraphicsResponse
from brandgraphics.specs.http.common import ErrorResponse
from brandgraphics.specs.http.generate_graphic import GenerateGraphicRequest, GenerateGraphicResponse
from brandgraphics.specs.http.list_brand_images import ListBrandImagesRequest, ListBrandImagesResponse


# Registry mapping output schema filenames to models for generation
SCHEMA_MODELS: Dict[str, Type[BaseModel]] = {
    "generate.request.schema.json": GenerateGraphicRequest,
    "generate.response.schema.json": GenerateGraphicResponse,
    "batch.request.schema.json": BatchGraphicsRequest,
    "batch.response.schema.json": BatchGraphicsResponse,
    "list_brand_images.request.schema.json": ListBrandImagesRequest,
    "list_brand_images.response.schema.json": ListBrandImagesResponse,
    "error.response.schema.json": ErrorResponse,
}

__all__ = [
    "GenerateGraphicRequest",
    "GenerateGraphicResponse",
    "BatchGraphicsRequest",
    "BatchGraphicsResponse",
    "ListBrandImagesRequest",
    "ListBrandImagesResponse",
    "ErrorResponse",
    "SCHEMA_MODELS",
]
