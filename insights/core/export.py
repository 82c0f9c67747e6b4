# ==============================================================================
# Heatmap Export
# ==============================================================================
"""
Composes exportable heatmap images.

An export is the rendered heatmap layer (or the scroll-depth bands) upscaled
onto a dark background, framed by a 60px top banner carrying the mode,
capture date and page path, and a 40px bottom banner carrying the page
statistics. Snapshots store a smaller 400x260 thumbnail built the same way
without banners.
"""

import io
import logging
from datetime import datetime
from typing import Literal
from urllib.parse import urlsplit

import numpy as np
from PIL import Image, ImageDraw, ImageFont
from pydantic import BaseModel

logger = logging.getLogger(__name__)

BACKGROUND = (26, 26, 46, 255)  # #1a1a2e
BANNER_FILL = (0, 0, 0, 179)
TOP_BANNER_HEIGHT = 60
BOTTOM_BANNER_HEIGHT = 40
DEFAULT_EXPORT_SCALE = 2
THUMBNAIL_SIZE = (400, 260)

SCROLL_BAND_COLOR = (255, 69, 0)
SCROLL_BAND_MAX_OPACITY = 0.35
SCROLL_LAST_BAND_HEIGHT = 20

# Characters the fallback bitmap font cannot draw
_TEXT_REPLACEMENTS = str.maketrans({"–": "-", "—": "-", "•": "|"})


class ExportMetadata(BaseModel):
    """Everything printed on an exported heatmap besides the pixels."""

    mode: Literal["click", "scroll"] = "click"
    captured_at: datetime
    url: str
    total_clicks: int = 0
    visitor_count: int = 0
    avg_scroll: int = 0
    hot_zone: str = "-"

    @property
    def title(self) -> str:
        label = "Clicks" if self.mode == "click" else "Scroll"
        return f"Heatmap - {label} - {self.captured_at:%Y-%m-%d}"

    @property
    def footer(self) -> str:
        return (
            f"{self.total_clicks} clicks  |  {self.visitor_count} visitors  |  "
            f"{self.avg_scroll}% avg scroll  |  Hot zone: {self.hot_zone}"
        )


def url_path(url: str) -> str:
    """Path component of an absolute URL; the raw string when it has no scheme."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    if not parts.scheme or not parts.netloc:
        return url
    return parts.path or "/"


def _font(size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    return ImageFont.load_default(size=size)


def _text(draw: ImageDraw.ImageDraw, x: float, baseline: float, text: str, size: int, fill) -> None:
    # Position by baseline the way canvas text is placed
    draw.text((x, baseline - size), text.translate(_TEXT_REPLACEMENTS), font=_font(size), fill=fill)


def draw_scroll_bands(image: Image.Image, rows: list[dict]) -> None:
    """
    Paint scroll-depth bands onto ``image`` in place.

    Each row (see ``scroll_depth_distribution``) becomes a band starting at
    ``pct`` percent of the image height. Bands fade as more visitors reach
    them, so the drop-off reads as rising color.
    """
    width, height = image.size
    draw = ImageDraw.Draw(image, "RGBA")
    for idx, row in enumerate(rows):
        ratio = row["ratio"]
        top = row["pct"] / 100 * height
        band = height / len(rows) if idx < len(rows) - 1 else SCROLL_LAST_BAND_HEIGHT
        opacity = (1 - ratio) * SCROLL_BAND_MAX_OPACITY
        draw.rectangle(
            [0, top, width, top + band],
            fill=(*SCROLL_BAND_COLOR, int(round(opacity * 255))),
        )
        _text(draw, 10, top + 14, f"{row['pct']}% - {round(ratio * 100)}% of users", 11, (255, 255, 255, 230))


def _base_layer(
    buffer: np.ndarray,
    mode: str,
    size: tuple[int, int],
    scroll_rows: list[dict] | None,
) -> Image.Image:
    image = Image.new("RGBA", size, BACKGROUND)
    if mode == "click":
        layer = Image.fromarray(buffer).resize(size, Image.Resampling.BILINEAR)
        image = Image.alpha_composite(image, layer)
    elif scroll_rows:
        draw_scroll_bands(image, scroll_rows)
    return image


def compose_export(
    buffer: np.ndarray,
    metadata: ExportMetadata,
    scale: int = DEFAULT_EXPORT_SCALE,
    scroll_rows: list[dict] | None = None,
) -> Image.Image:
    """
    Compose a full-size export image.

    Args:
        buffer: Rendered (H, W, 4) heatmap layer; sets the canvas size
        metadata: Mode, capture time, URL and statistics for the banners
        scale: Upscale factor applied to the canvas size
        scroll_rows: Scroll-depth distribution, drawn in scroll mode

    Returns:
        RGBA image of size (W * scale, H * scale)
    """
    height, width = buffer.shape[:2]
    size = (width * scale, height * scale)
    image = _base_layer(buffer, metadata.mode, size, scroll_rows)

    draw = ImageDraw.Draw(image, "RGBA")
    draw.rectangle([0, 0, size[0] - 1, TOP_BANNER_HEIGHT - 1], fill=BANNER_FILL)
    _text(draw, 16, 24, metadata.title, 18, (255, 255, 255, 255))
    _text(draw, 16, 46, url_path(metadata.url), 13, (255, 255, 255, 179))

    draw.rectangle(
        [0, size[1] - BOTTOM_BANNER_HEIGHT, size[0] - 1, size[1] - 1], fill=BANNER_FILL
    )
    _text(draw, 16, size[1] - 14, metadata.footer, 12, (255, 255, 255, 204))

    logger.debug("Composed %s export at %dx%d", metadata.mode, *size)
    return image


def render_thumbnail(
    buffer: np.ndarray,
    mode: str = "click",
    scroll_rows: list[dict] | None = None,
    size: tuple[int, int] = THUMBNAIL_SIZE,
) -> Image.Image:
    """Banner-less thumbnail stored with a snapshot."""
    return _base_layer(buffer, mode, size, scroll_rows)


def to_png_bytes(image: Image.Image) -> bytes:
    """Encode an image as PNG."""
    out = io.BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()
