import re
from typing import Optional

# Characters SharePoint / Windows refuse in file names
_HOSTILE_CHARS_RE = re.compile(r'[\\/:*?"<>|]+')
_WHITESPACE_RE = re.compile(r"\s+")


def sanitize_file_name(name: str) -> str:
    return _HOSTILE_CHARS_RE.sub("_", str(name))


def render_file_name(template: str, *, brand: str, format: str, product: Optional[str] = None) -> str:
    """Fill {brand}, {product} and {format} in a file-name template, then sanitize it."""
    name = template.replace("{brand}", brand).replace("{format}", format)
    if product is not None:
        name = name.replace("{product}", _WHITESPACE_RE.sub("_", product))
    return sanitize_file_name(name)
