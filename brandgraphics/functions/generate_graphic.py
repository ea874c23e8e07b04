"""
Compose one branded graphic and optionally publish it to the brand's
Generated Posts folder.
"""
import base64
import time
from typing import Optional

from brandgraphics.media.composer import compose_graphic
from brandgraphics.shared.config import Settings
from brandgraphics.shared.graph_client import GraphClient
from brandgraphics.shared.logging_utils import info as log_info
from brandgraphics.specs.brands import GENERATED_POSTS_FOLDER, LOGOS_FOLDER
from brandgraphics.specs.common.enums import FolderLevel
from brandgraphics.specs.common.errors import ResourceNotFoundError
from brandgraphics.specs.functions.compose_graphic_spec import CANVAS_PRESETS, TextBlock
from brandgraphics.specs.http.common import SavedFile
from brandgraphics.specs.http.generate_graphic import GenerateGraphicRequest, GenerateGraphicResponse
from brandgraphics.tools.drive_folders import (
    pick_logo_item,
    require_folder,
    resolve_brand_root,
    resolve_folder_path,
)
from brandgraphics.tools.file_naming import sanitize_file_name


def default_file_name(brand: str, format: str) -> str:
    return f"{brand}_{format}_{int(time.time() * 1000)}.png"


def run_generate_graphic(
    request: GenerateGraphicRequest,
    settings: Settings,
    client: GraphClient,
    *,
    request_id: Optional[str] = None,
) -> GenerateGraphicResponse:
    """
    Resolve folders, download product + logo, compose and optionally upload.

    Raises:
        ResourceNotFoundError: If a conventional folder or the logo file is missing
        UpstreamAuthError: If Graph rejects the credentials
        UpstreamError: For other Graph failures
        DecodeError: If a downloaded image cannot be decoded
    """
    brand = request.brand.value
    format_key = request.format.value
    canvas = CANVAS_PRESETS[request.format]

    brand_root_id = require_folder(
        resolve_brand_root(client, request.brand),
        f"Could not find brand root folder for {brand}",
    )

    generated_posts_id = None
    if request.output.saveToSharePoint:
        generated_posts_id = require_folder(
            resolve_folder_path(client, brand_root_id, [(FolderLevel.GENERATED_POSTS, GENERATED_POSTS_FOLDER)]),
            f"Could not find Generated Posts folder under brand {brand}",
        )

    logo_drive_id = request.logoImage.driveId or settings.drive_id
    logo_item_id = request.logoImage.itemId
    if not logo_item_id:
        logos_folder_id = require_folder(
            resolve_folder_path(client, brand_root_id, [(FolderLevel.LOGOS, LOGOS_FOLDER)]),
            f"Could not find Logos folder under brand {brand}",
        )
        picked = pick_logo_item(client, logos_folder_id, request.brand)
        if not picked or not picked.get("id"):
            raise ResourceNotFoundError(f"No logo files found in Logos folder for {brand}", level=FolderLevel.FILE.value)
        logo_drive_id = settings.drive_id
        logo_item_id = picked["id"]
        log_info(request_id, "generate:logo_picked", brand=brand, logoName=picked.get("name"))

    product_bytes = client.download_content(request.productImage.itemId, drive_id=request.productImage.driveId)
    logo_bytes = client.download_content(logo_item_id, drive_id=logo_drive_id)

    composed = compose_graphic(
        canvas,
        product_bytes,
        logo_bytes,
        TextBlock(headline=request.headline, subhead=request.subhead, cta=request.cta),
        request.style,
        font_path=settings.font_path,
        font_bold_path=settings.font_bold_path,
    )
    log_info(request_id, "generate:composed", brand=brand, format=format_key, bytes=len(composed.png))

    saved = None
    if generated_posts_id:
        file_name = sanitize_file_name(request.output.fileName or default_file_name(brand, format_key))
        item = client.upload_to_folder(generated_posts_id, file_name, composed.png)
        saved = SavedFile(driveId=settings.drive_id, itemId=item.get("id"), webUrl=item.get("webUrl"))

    return GenerateGraphicResponse(
        brand=request.brand,
        format=request.format,
        width=composed.width,
        height=composed.height,
        mimeType=composed.mimeType,
        base64=base64.b64encode(composed.png).decode("ascii") if request.output.returnBase64 else None,
        saved=saved,
    )
