"""
Folder conventions of the Product-Images drive.

Brand root -> Logos | Generated Posts | Exterior Products | Interior Products,
and each product folder -> Lifestyle Images and/or Catalog Images.
"""
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from brandgraphics.shared.graph_client import GraphClient
from brandgraphics.specs.brands import get_brand_profile
from brandgraphics.specs.common.enums import Brand, FolderLevel, PickStrategy
from brandgraphics.specs.common.errors import ResourceNotFoundError

IMAGE_NAME_RE = re.compile(r"\.(png|jpg|jpeg|webp)$", re.IGNORECASE)


@dataclass(frozen=True)
class Found:
    item_id: str
    name: str


@dataclass(frozen=True)
class NotFound:
    level: FolderLevel
    name: str

    @property
    def message(self) -> str:
        return f"No {self.level.value} folder found: {self.name}"


FolderLookup = Union[Found, NotFound]


@dataclass(frozen=True)
class FolderRef:
    item_id: str
    name: str
    has_images: bool


def is_image_name(name: Any) -> bool:
    return bool(IMAGE_NAME_RE.search(str(name or "")))


def find_child_folder(children: Sequence[Dict[str, Any]], folder_name: str) -> Optional[Dict[str, Any]]:
    """Case-insensitive folder match among a parent's children."""
    wanted = folder_name.lower()
    for child in children:
        if child.get("folder") is not None and str(child.get("name") or "").lower() == wanted:
            return child
    return None


def resolve_folder_path(
    client: GraphClient,
    start_id: str,
    path: Sequence[Tuple[FolderLevel, str]],
) -> FolderLookup:
    """Walk a chain of folder names down from start_id.

    Returns Found for the last folder, or NotFound naming the first level
    that is missing.
    """
    current = Found(item_id=start_id, name="")
    for level, name in path:
        hit = find_child_folder(client.list_children(current.item_id, select="id,name,folder"), name)
        if hit is None:
            return NotFound(level=level, name=name)
        current = Found(item_id=hit["id"], name=hit.get("name") or name)
    return current


def resolve_brand_root(client: GraphClient, brand: Brand) -> FolderLookup:
    """Configured root item id, or the brand's display-name folder under the drive root."""
    root_id = client.settings.brand_root_id(Brand(brand).value)
    profile = get_brand_profile(brand)
    if root_id:
        return Found(item_id=root_id, name=profile.displayName)
    return resolve_folder_path(client, "root", [(FolderLevel.BRAND, profile.displayName)])


def require_folder(lookup: FolderLookup, message: Optional[str] = None) -> str:
    """Item id of a Found lookup; NotFound raises ResourceNotFoundError."""
    if isinstance(lookup, Found):
        return lookup.item_id
    raise ResourceNotFoundError(message or lookup.message, level=lookup.level.value, details={"name": lookup.name})


def list_child_folders(client: GraphClient, parent_id: str) -> List[Dict[str, Any]]:
    return [x for x in client.list_children(parent_id, select="id,name,folder") if x.get("folder") is not None]


def list_files(client: GraphClient, folder_id: str) -> List[Dict[str, Any]]:
    return [x for x in client.list_children(folder_id, select="id,name,file") if x.get("file") is not None]


def pick_preferred_file(files: Sequence[Dict[str, Any]], preferred_name: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """Exact preferred name, else the first raster image, else the first file."""
    if not files:
        return None
    if preferred_name:
        wanted = preferred_name.lower()
        for f in files:
            if str(f.get("name") or "").lower() == wanted:
                return f
    for f in files:
        if is_image_name(f.get("name")):
            return f
    return files[0]


def pick_first_image(files: Sequence[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    for f in files:
        if is_image_name(f.get("name")):
            return f
    return None


def pick_logo_item(client: GraphClient, logos_folder_id: str, brand: Brand) -> Optional[Dict[str, Any]]:
    profile = get_brand_profile(brand)
    return pick_preferred_file(list_files(client, logos_folder_id), profile.preferredLogoFileName)


def resolve_image_folder(
    strategy: PickStrategy,
    lifestyle: Optional[FolderRef],
    catalog: Optional[FolderRef],
) -> Optional[FolderRef]:
    """Choose the folder to pull a product photo from; only folders holding images qualify."""
    def usable(ref: Optional[FolderRef]) -> Optional[FolderRef]:
        return ref if ref is not None and ref.has_images else None

    strategy = PickStrategy(strategy)
    if strategy == PickStrategy.LIFESTYLE_ONLY:
        return usable(lifestyle)
    if strategy == PickStrategy.CATALOG_ONLY:
        return usable(catalog)
    return usable(lifestyle) or usable(catalog)


def probe_image_folder(client: GraphClient, children: Sequence[Dict[str, Any]], folder_name: str) -> Optional[FolderRef]:
    """Look up a product subfolder and record whether it holds any images."""
    hit = find_child_folder(children, folder_name)
    if hit is None:
        return None
    has_images = any(is_image_name(f.get("name")) for f in list_files(client, hit["id"]))
    return FolderRef(item_id=hit["id"], name=hit.get("name") or folder_name, has_images=has_images)
