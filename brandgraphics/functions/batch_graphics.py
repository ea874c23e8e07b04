"""
Compose graphics for every product folder under a brand's Exterior or
Interior Products area, one product at a time.
"""
import time
from typing import Any, Callable, Dict, Optional

from brandgraphics.media.composer import compose_graphic
from brandgraphics.shared.config import Settings
from brandgraphics.shared.graph_client import GraphClient
from brandgraphics.shared.logging_utils import info as log_info, warning as log_warning
from brandgraphics.specs.brands import GENERATED_POSTS_FOLDER, LOGOS_FOLDER
from brandgraphics.specs.common.enums import FolderLevel, ImageFolderType, PickStrategy
from brandgraphics.specs.common.errors import BrandGraphicsError, ResourceNotFoundError, UpstreamAuthError
from brandgraphics.specs.functions.compose_graphic_spec import CANVAS_PRESETS, TextBlock
from brandgraphics.specs.http.batch_graphics import (
    BatchGraphicsRequest,
    BatchGraphicsResponse,
    BatchItemResult,
    PickedImage,
)
from brandgraphics.specs.http.common import SavedFile
from brandgraphics.tools.drive_folders import (
    list_child_folders,
    list_files,
    pick_first_image,
    pick_logo_item,
    probe_image_folder,
    require_folder,
    resolve_brand_root,
    resolve_folder_path,
    resolve_image_folder,
)
from brandgraphics.tools.file_naming import render_file_name

NO_IMAGE_FOLDER_REASON = "No image folder found (Lifestyle Images / Catalog Images empty or missing)"
NO_IMAGE_REASON = "No images found in chosen folder"


def run_batch_graphics(
    request: BatchGraphicsRequest,
    settings: Settings,
    client: GraphClient,
    *,
    request_id: Optional[str] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> BatchGraphicsResponse:
    """
    Brand-level folder problems and rejected credentials fail the whole
    batch; anything else that goes wrong with a product is recorded on that
    product's result and the loop moves on.
    """
    brand = request.brand.value
    area = request.area.value
    will_upload = request.output.saveToSharePoint and not request.dryRun

    brand_root_id = require_folder(
        resolve_brand_root(client, request.brand),
        f"Could not find brand root folder for {brand}",
    )
    logos_folder_id = require_folder(
        resolve_folder_path(client, brand_root_id, [(FolderLevel.LOGOS, LOGOS_FOLDER)]),
        f"Could not find Logos folder under brand {brand}",
    )
    area_folder_id = require_folder(
        resolve_folder_path(client, brand_root_id, [(FolderLevel.CATEGORY, area)]),
        f"Could not find '{area}' folder under brand {brand}",
    )
    generated_posts_id = None
    if will_upload:
        generated_posts_id = require_folder(
            resolve_folder_path(client, brand_root_id, [(FolderLevel.GENERATED_POSTS, GENERATED_POSTS_FOLDER)]),
            f"Could not find Generated Posts folder under brand {brand}",
        )

    picked_logo = pick_logo_item(client, logos_folder_id, request.brand)
    if not picked_logo or not picked_logo.get("id"):
        raise ResourceNotFoundError(f"No logo file found in Logos folder for {brand}", level=FolderLevel.FILE.value)
    logo_bytes = client.download_content(picked_logo["id"])

    product_folders = list_child_folders(client, area_folder_id)
    selected = product_folders[: request.limit]
    log_info(request_id, "batch:start", brand=brand, area=area, found=len(product_folders), attempting=len(selected))

    results = []
    for index, folder in enumerate(selected):
        if index:
            sleep(settings.batch_delay_ms / 1000)
        results.append(
            _process_product(
                folder,
                request,
                settings,
                client,
                logo_bytes=logo_bytes,
                generated_posts_id=generated_posts_id,
                request_id=request_id,
            )
        )

    generated = sum(1 for r in results if r.ok)
    log_info(request_id, "batch:done", brand=brand, generated=generated, failed=len(results) - generated)
    return BatchGraphicsResponse(
        brand=request.brand,
        area=request.area,
        format=request.format,
        limit=request.limit,
        dryRun=request.dryRun,
        countAttempted=len(selected),
        totalProductFoldersFound=len(product_folders),
        generated=generated,
        results=results,
    )


def _process_product(
    folder: Dict[str, Any],
    request: BatchGraphicsRequest,
    settings: Settings,
    client: GraphClient,
    *,
    logo_bytes: bytes,
    generated_posts_id: Optional[str],
    request_id: Optional[str],
) -> BatchItemResult:
    product = folder.get("name") or folder["id"]
    strategy = PickStrategy(request.pickStrategy)
    try:
        children = client.list_children(folder["id"], select="id,name,folder")
        lifestyle = None
        catalog = None
        if strategy != PickStrategy.CATALOG_ONLY:
            lifestyle = probe_image_folder(client, children, ImageFolderType.LIFESTYLE.value)
        if strategy != PickStrategy.LIFESTYLE_ONLY:
            catalog = probe_image_folder(client, children, ImageFolderType.CATALOG.value)

        chosen = resolve_image_folder(strategy, lifestyle, catalog)
        if chosen is None:
            return BatchItemResult(product=product, ok=False, reason=NO_IMAGE_FOLDER_REASON)

        image = pick_first_image(list_files(client, chosen.item_id))
        if image is None or not image.get("id"):
            return BatchItemResult(product=product, ok=False, reason=NO_IMAGE_REASON)

        product_bytes = client.download_content(image["id"])
        composed = compose_graphic(
            CANVAS_PRESETS[request.format],
            product_bytes,
            logo_bytes,
            TextBlock(
                headline=request.headlineTemplate.replace("{product}", product),
                subhead=request.subhead,
                cta=request.cta,
            ),
            request.style,
            font_path=settings.font_path,
            font_bold_path=settings.font_bold_path,
        )

        saved = None
        if generated_posts_id:
            file_name = render_file_name(
                request.output.fileNameTemplate,
                brand=request.brand.value,
                format=request.format.value,
                product=product,
            )
            item = client.upload_to_folder(generated_posts_id, file_name, composed.png)
            saved = SavedFile(driveId=settings.drive_id, itemId=item.get("id"), webUrl=item.get("webUrl"))

        log_info(request_id, "batch:item_ok", product=product, imageName=image.get("name"))
        return BatchItemResult(
            product=product,
            ok=True,
            pickedImage=PickedImage(name=image.get("name"), itemId=image["id"]),
            saved=saved,
        )
    except UpstreamAuthError:
        raise
    except BrandGraphicsError as exc:
        log_warning(request_id, "batch:item_failed", product=product, code=exc.code, error=str(exc))
        return BatchItemResult(product=product, ok=False, reason=str(exc))
