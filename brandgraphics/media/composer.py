"""
Graphic composer: product photo + readability gradient + text + brand logo.

Everything here is a pure transformation over the provided buffers; callers
handle downloading and uploading.
"""
import io
import math
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont, ImageOps

from brandgraphics.specs.common.enums import LogoPlacement, TextAlign
from brandgraphics.specs.common.errors import DecodeError
from brandgraphics.specs.functions.compose_graphic_spec import (
    CanvasSize,
    ComposedGraphic,
    GraphicStyle,
    LogoBox,
    TextBlock,
)

# (offset, alpha) stops of the top/bottom darkening overlay
GRADIENT_STOPS: Tuple[Tuple[float, float], ...] = (
    (0.0, 0.55),
    (0.35, 0.08),
    (0.70, 0.08),
    (1.0, 0.55),
)

HEADLINE_BASELINE_OFFSET = 80
SUBHEAD_BASELINE_OFFSET = 140
CTA_BASELINE_OFFSET = 30


@dataclass(frozen=True)
class TextStyle:
    size: int
    bold: bool
    fill: Tuple[int, int, int, int]


TEXT_STYLES = {
    "headline": TextStyle(size=72, bold=True, fill=(255, 255, 255, 250)),
    "subhead": TextStyle(size=40, bold=False, fill=(255, 255, 255, 235)),
    "cta": TextStyle(size=36, bold=True, fill=(255, 255, 255, 250)),
}


@dataclass(frozen=True)
class TextLine:
    role: str
    text: str
    x: int
    y: int  # baseline
    anchor: str  # Pillow anchor, "ls" (start) or "ms" (middle)


# Serif faces first; Cochin is the house font when the host has it
_REGULAR_FONTS = [
    "/System/Library/Fonts/Supplemental/Cochin.ttc",
    "/usr/share/fonts/truetype/dejavu/DejaVuSerif.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSerif-Regular.ttf",
    "C:/Windows/Fonts/times.ttf",
]
_BOLD_FONTS = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSerif-Bold.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSerif-Bold.ttf",
    "C:/Windows/Fonts/timesbd.ttf",
] + _REGULAR_FONTS


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@lru_cache(maxsize=16)
def _pick_font(size: int, bold: bool, override: Optional[str] = None) -> ImageFont.FreeTypeFont:
    candidates = ([override] if override else []) + (_BOLD_FONTS if bold else _REGULAR_FONTS)
    for name in candidates:
        try:
            return ImageFont.truetype(name, size=size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def decode_image(data: bytes, label: str) -> Image.Image:
    if not data:
        raise DecodeError(f"{label} image is empty")
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"Could not decode {label} image: {exc}") from exc
    return ImageOps.exif_transpose(img)


def fit_cover(img: Image.Image, canvas: CanvasSize) -> Image.Image:
    """Scale uniformly until both axes are covered, then center-crop the overflow."""
    return ImageOps.fit(
        img.convert("RGB"),
        (canvas.width, canvas.height),
        method=Image.Resampling.LANCZOS,
        centering=(0.5, 0.5),
    )


def gradient_alpha(position: float) -> float:
    """Overlay opacity (0..1) at a vertical position in 0..1."""
    for (o0, a0), (o1, a1) in zip(GRADIENT_STOPS, GRADIENT_STOPS[1:]):
        if position <= o1:
            t = 0.0 if o1 == o0 else max(0.0, (position - o0) / (o1 - o0))
            return a0 + (a1 - a0) * t
    return GRADIENT_STOPS[-1][1]


def make_gradient_overlay(canvas: CanvasSize) -> Image.Image:
    h = canvas.height
    column = Image.new("L", (1, h))
    column.putdata([round_half_up(gradient_alpha((y + 0.5) / h) * 255) for y in range(h)])
    overlay = Image.new("RGBA", (canvas.width, h), (0, 0, 0, 0))
    overlay.putalpha(column.resize((canvas.width, h), Image.Resampling.NEAREST))
    return overlay


def logo_target_size(native: Tuple[int, int], canvas_width: int, max_width_pct: float) -> Tuple[int, int]:
    """Logo size after fitting to the width cap; (0, 0) means skip the logo."""
    max_w = round_half_up(max_width_pct / 100 * canvas_width)
    native_w, native_h = native
    if max_w <= 0 or native_w <= 0 or native_h <= 0:
        return 0, 0
    if native_w <= max_w:
        return native_w, native_h
    return max_w, max(1, round_half_up(native_h * max_w / native_w))


def logo_position(canvas: CanvasSize, size: Tuple[int, int], style: GraphicStyle) -> Tuple[int, int]:
    pad = style.safePaddingPx
    w, h = size
    placement = LogoPlacement(style.logoPlacement)
    if placement in (LogoPlacement.BOTTOM_LEFT, LogoPlacement.TOP_LEFT):
        left = pad
    else:
        left = canvas.width - pad - w
    if placement in (LogoPlacement.TOP_LEFT, LogoPlacement.TOP_RIGHT):
        top = pad
    else:
        top = canvas.height - pad - h
    return left, top


def layout_text(canvas: CanvasSize, text: TextBlock, style: GraphicStyle) -> List[TextLine]:
    pad = style.safePaddingPx
    if TextAlign(style.textAlign) == TextAlign.CENTER:
        x, anchor = round_half_up(canvas.width / 2), "ms"
    else:
        x, anchor = pad, "ls"
    rows = (
        ("headline", text.headline, pad + HEADLINE_BASELINE_OFFSET),
        ("subhead", text.subhead, pad + SUBHEAD_BASELINE_OFFSET),
        ("cta", text.cta, canvas.height - pad - CTA_BASELINE_OFFSET),
    )
    return [TextLine(role=role, text=value, x=x, y=y, anchor=anchor) for role, value, y in rows if value]


def render_text_layer(
    canvas: CanvasSize,
    lines: List[TextLine],
    *,
    font_path: Optional[str] = None,
    font_bold_path: Optional[str] = None,
) -> Image.Image:
    # White transparent base keeps antialiased glyph edges from darkening
    layer = Image.new("RGBA", (canvas.width, canvas.height), (255, 255, 255, 0))
    draw = ImageDraw.Draw(layer)
    for line in lines:
        ts = TEXT_STYLES[line.role]
        font = _pick_font(ts.size, ts.bold, font_bold_path if ts.bold else font_path)
        draw.text((line.x, line.y), line.text, font=font, fill=ts.fill, anchor=line.anchor)
    return layer


def compose_graphic(
    canvas: CanvasSize,
    background_image: bytes,
    logo_image: bytes,
    text: Optional[TextBlock] = None,
    style: Optional[GraphicStyle] = None,
    *,
    font_path: Optional[str] = None,
    font_bold_path: Optional[str] = None,
) -> ComposedGraphic:
    """
    Render the branded graphic and return it PNG-encoded.

    Layers, bottom to top: cover-cropped background, gradient overlay,
    text, logo. Output is always exactly canvas.width x canvas.height.

    Raises:
        DecodeError: If either image buffer cannot be decoded
    """
    text = text or TextBlock()
    style = style or GraphicStyle()

    background = decode_image(background_image, "background")
    logo = decode_image(logo_image, "logo")

    frame = fit_cover(background, canvas).convert("RGBA")
    frame = Image.alpha_composite(frame, make_gradient_overlay(canvas))

    lines = layout_text(canvas, text, style)
    if lines:
        text_layer = render_text_layer(canvas, lines, font_path=font_path, font_bold_path=font_bold_path)
        frame = Image.alpha_composite(frame, text_layer)

    logo_box = None
    logo_w, logo_h = logo_target_size(logo.size, canvas.width, style.logoMaxWidthPct)
    if logo_w and logo_h:
        scaled = logo.convert("RGBA")
        if scaled.size != (logo_w, logo_h):
            scaled = scaled.resize((logo_w, logo_h), Image.Resampling.LANCZOS)
        left, top = logo_position(canvas, (logo_w, logo_h), style)
        # paste clips anything outside the canvas
        logo_layer = Image.new("RGBA", frame.size, (0, 0, 0, 0))
        logo_layer.paste(scaled, (left, top))
        frame = Image.alpha_composite(frame, logo_layer)
        logo_box = LogoBox(left=left, top=top, width=logo_w, height=logo_h)

    buf = io.BytesIO()
    frame.convert("RGB").save(buf, format="PNG")
    return ComposedGraphic(png=buf.getvalue(), width=canvas.width, height=canvas.height, logo=logo_box)
