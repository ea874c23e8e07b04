"""
Read-only listing of the images under
brand -> category -> product line -> image-type folder.
"""
from typing import Optional

from brandgraphics.shared.graph_client import GraphClient
from brandgraphics.shared.logging_utils import info as log_info
from brandgraphics.specs.common.enums import Category, FolderLevel, ProductArea
from brandgraphics.specs.http.list_brand_images import (
    MAX_RESULTS_CAP,
    BrandImage,
    ListBrandImagesRequest,
    ListBrandImagesResponse,
)
from brandgraphics.tools.drive_folders import NotFound, resolve_brand_root, resolve_folder_path

CATEGORY_FOLDERS = {
    Category.EXTERIOR: ProductArea.EXTERIOR.value,
    Category.INTERIOR: ProductArea.INTERIOR.value,
}


def run_list_brand_images(
    request: ListBrandImagesRequest,
    client: GraphClient,
    *,
    request_id: Optional[str] = None,
) -> ListBrandImagesResponse:
    brand_root = resolve_brand_root(client, request.brand)
    if isinstance(brand_root, NotFound):
        return ListBrandImagesResponse(images=[], note=brand_root.message)

    lookup = resolve_folder_path(
        client,
        brand_root.item_id,
        [
            (FolderLevel.CATEGORY, CATEGORY_FOLDERS[request.category]),
            (FolderLevel.PRODUCT, request.productLine),
            (FolderLevel.IMAGE_TYPE, request.folderType.value),
        ],
    )
    if isinstance(lookup, NotFound):
        log_info(request_id, "list:folder_missing", level=lookup.level.value, name=lookup.name)
        return ListBrandImagesResponse(images=[], note=lookup.message)

    top = min(request.maxResults, MAX_RESULTS_CAP)
    items = client.list_children(lookup.item_id, select="id,name,webUrl,file,size", top=top)
    images = []
    for item in items:
        mime_type = (item.get("file") or {}).get("mimeType")
        if not mime_type or not str(mime_type).startswith("image/"):
            continue
        images.append(
            BrandImage(
                driveId=client.drive_id,
                itemId=item["id"],
                name=item.get("name") or "",
                webUrl=item.get("webUrl"),
                mimeType=mime_type,
                sizeBytes=item.get("size"),
            )
        )
    return ListBrandImagesResponse(images=images[:top])
