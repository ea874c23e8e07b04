from enum import Enum


class Brand(str, Enum):
    SSC = "SSC"
    MT = "MT"
    DWELL = "DWELL"


class CanvasFormat(str, Enum):
    SQUARE_1080 = "square_1080"
    PORTRAIT_1080X1350 = "portrait_1080x1350"
    STORY_1080X1920 = "story_1080x1920"


class LogoPlacement(str, Enum):
    BOTTOM_RIGHT = "bottom_right"
    BOTTOM_LEFT = "bottom_left"
    TOP_RIGHT = "top_right"
    TOP_LEFT = "top_left"


class TextAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"


class PickStrategy(str, Enum):
    PREFER_LIFESTYLE = "preferLifestyle"
    CATALOG_ONLY = "catalogOnly"
    LIFESTYLE_ONLY = "lifestyleOnly"


class ProductArea(str, Enum):
    EXTERIOR = "Exterior Products"
    INTERIOR = "Interior Products"


class Category(str, Enum):
    EXTERIOR = "exterior"
    INTERIOR = "interior"


class ImageFolderType(str, Enum):
    CATALOG = "Catalog Images"
    LIFESTYLE = "Lifestyle Images"


class FolderLevel(str, Enum):
    BRAND = "brand"
    LOGOS = "logos"
    GENERATED_POSTS = "generated_posts"
    CATEGORY = "category"
    PRODUCT = "product"
    IMAGE_TYPE = "image_type"
    FILE = "file"
