# ==============================================================================
# Heatmap Rendering
# ==============================================================================
"""
Pixel-level rendering of spatial click density and movement trails.

Buffers are numpy arrays of shape (height, width, 4), dtype uint8, RGBA with
straight (non-premultiplied) alpha. Every function allocates and returns its
own buffer; inputs are never mutated, so a buffer is only ever owned by the
call that produced it.

Density pipeline:
1. Map each click to canvas space: (x * scale, (y - scroll_offset) * scale),
   scale = canvas width / reference viewport width
2. Skip points whose mapped y lies outside [-radius, height + radius]
3. Composite a radial gradient per point (red -> orange -> yellow -> clear)
4. Remap the accumulated buffer through a fixed 4-band color ramp keyed on
   alpha. Exported snapshots depend on the exact thresholds, the 1.5 alpha
   multiplier and the cap of 200.
"""

import logging
from collections.abc import Iterable, Sequence

import numpy as np
from PIL import Image, ImageDraw

from insights.core.models import HeatmapPoint, MovePoint

logger = logging.getLogger(__name__)

DEFAULT_RADIUS = 28
DEFAULT_INTENSITY = 0.6

ALPHA_MULTIPLIER = 1.5
ALPHA_CAP = 200  # ~0.78 opacity

# Gradient stops: (offset, (r, g, b), alpha factor relative to intensity)
DENSITY_STOPS = (
    (0.0, (255, 0, 0), 1.0),
    (0.4, (255, 165, 0), 0.6),
    (0.7, (255, 255, 0), 0.3),
    (1.0, (0, 0, 255), 0.0),
)

GLOW_RADIUS = 12
GLOW_ALPHA = 0.08
TRAIL_COLOR = (255, 80, 0)
TRAIL_WIDTH = 2
TRAIL_OPACITY_START = 0.3
TRAIL_OPACITY_END = 0.8
SETTLED_MIN_POINTS = 10


def _round_half_up(values: np.ndarray) -> np.ndarray:
    return np.floor(values + 0.5)


def empty_buffer(width: int, height: int) -> np.ndarray:
    """A fully transparent RGBA buffer."""
    return np.zeros((height, width, 4), dtype=np.uint8)


class _Canvas:
    """Float RGBA accumulator used while compositing gradients."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.color = np.zeros((height, width, 3), dtype=np.float64)
        self.alpha = np.zeros((height, width), dtype=np.float64)

    def composite_radial(
        self,
        cx: float,
        cy: float,
        radius: float,
        stops: Sequence[tuple[float, tuple[int, int, int], float]],
        intensity: float,
    ) -> None:
        """Source-over a filled circle painted with a radial gradient."""
        if radius <= 0:
            return
        x0 = max(int(np.floor(cx - radius)), 0)
        x1 = min(int(np.ceil(cx + radius)) + 1, self.width)
        y0 = max(int(np.floor(cy - radius)), 0)
        y1 = min(int(np.ceil(cy + radius)) + 1, self.height)
        if x0 >= x1 or y0 >= y1:
            return

        # Sample at pixel centers
        xs = np.arange(x0, x1, dtype=np.float64) + 0.5
        ys = np.arange(y0, y1, dtype=np.float64) + 0.5
        dist = np.hypot(xs[None, :] - cx, ys[:, None] - cy) / radius
        inside = dist <= 1.0
        if not inside.any():
            return

        offsets = [s[0] for s in stops]
        src_alpha = np.interp(dist, offsets, [s[2] * intensity for s in stops])
        src_alpha = np.where(inside, np.clip(src_alpha, 0.0, 1.0), 0.0)
        src_color = np.stack(
            [np.interp(dist, offsets, [s[1][c] for s in stops]) for c in range(3)], axis=-1
        )

        dst_alpha = self.alpha[y0:y1, x0:x1]
        dst_color = self.color[y0:y1, x0:x1]

        out_alpha = src_alpha + dst_alpha * (1.0 - src_alpha)
        weighted = (
            src_color * src_alpha[..., None]
            + dst_color * (dst_alpha * (1.0 - src_alpha))[..., None]
        )
        safe = np.where(out_alpha > 0, out_alpha, 1.0)
        self.color[y0:y1, x0:x1] = np.where(
            (out_alpha > 0)[..., None], weighted / safe[..., None], 0.0
        )
        self.alpha[y0:y1, x0:x1] = out_alpha

    def to_buffer(self) -> np.ndarray:
        buffer = np.empty((self.height, self.width, 4), dtype=np.uint8)
        buffer[..., :3] = np.clip(_round_half_up(self.color), 0, 255).astype(np.uint8)
        buffer[..., 3] = np.clip(_round_half_up(self.alpha * 255.0), 0, 255).astype(np.uint8)
        return buffer


def remap_colors(buffer: np.ndarray) -> np.ndarray:
    """
    Remap a rasterized density buffer through the 4-band color ramp.

    For each pixel with non-zero alpha, ratio = alpha / 255:
        ratio > 0.7  -> (255, round(255 * (1 - ratio) * 3), 0)
        ratio > 0.4  -> (255, 255, 0)
        ratio > 0.2  -> (0, 255, round(255 * (1 - ratio * 2)))
        otherwise    -> (0, round(100 + 155 * ratio * 5), 255)
    and the new alpha is min(alpha * 1.5, 200). Fully transparent pixels are
    left unchanged.

    Args:
        buffer: (height, width, 4) uint8 RGBA buffer. Not modified.

    Returns:
        A new buffer of the same shape

    Raises:
        ValueError: If the buffer is not an (H, W, 4) uint8 array
    """
    if buffer.ndim != 3 or buffer.shape[2] != 4 or buffer.dtype != np.uint8:
        raise ValueError(f"Expected (H, W, 4) uint8 buffer, got {buffer.shape} {buffer.dtype}")

    out = buffer.copy()
    alpha = buffer[..., 3].astype(np.float64)
    ratio = alpha / 255.0
    visible = alpha > 0

    red = visible & (ratio > 0.7)
    yellow = visible & (ratio > 0.4) & ~red
    cyan = visible & (ratio > 0.2) & (ratio <= 0.4)
    blue = visible & (ratio <= 0.2)

    r = out[..., 0]
    g = out[..., 1]
    b = out[..., 2]

    r[red] = 255
    g[red] = _round_half_up(255 * (1 - ratio[red]) * 3)
    b[red] = 0

    r[yellow] = 255
    g[yellow] = 255
    b[yellow] = 0

    r[cyan] = 0
    g[cyan] = 255
    b[cyan] = _round_half_up(255 * (1 - ratio[cyan] * 2))

    r[blue] = 0
    g[blue] = _round_half_up(100 + 155 * ratio[blue] * 5)
    b[blue] = 255

    # Byte stores round half to even
    out[..., 3] = np.where(visible, np.minimum(np.rint(alpha * ALPHA_MULTIPLIER), ALPHA_CAP), alpha)
    return out


def render_density(
    points: Iterable[HeatmapPoint],
    width: int,
    height: int,
    reference_width: int,
    scroll_offset: float = 0,
    radius: int = DEFAULT_RADIUS,
    intensity: float = DEFAULT_INTENSITY,
) -> np.ndarray:
    """
    Render a click-density heatmap.

    Args:
        points: Click points in page coordinates
        width: Canvas width in pixels
        height: Canvas height in pixels
        reference_width: Viewport width the points are normalized against
        scroll_offset: Page y coordinate shown at the top of the canvas
        radius: Gradient radius before scaling
        intensity: Alpha at the gradient center

    Returns:
        (height, width, 4) uint8 RGBA buffer, already color-remapped
    """
    canvas = _Canvas(width, height)
    scale = width / max(reference_width, 1)
    drawn = 0

    for point in points:
        x = point.x * scale
        y = (point.y - scroll_offset) * scale
        if y < -radius or y > height + radius:
            continue
        canvas.composite_radial(x, y, radius * scale, DENSITY_STOPS, intensity)
        drawn += 1

    logger.debug("Composited %d points on %dx%d canvas", drawn, width, height)
    return remap_colors(canvas.to_buffer())


# ==============================================================================
# Movement Trails
# ==============================================================================


def trail_opacities(count: int) -> list[float]:
    """
    Opacity per segment of a polyline with ``count`` points.

    Rises linearly from 0.3 on the oldest segment to 0.8 on the most recent.
    """
    segments = count - 1
    if segments <= 0:
        return []
    if segments == 1:
        return [TRAIL_OPACITY_END]
    span = TRAIL_OPACITY_END - TRAIL_OPACITY_START
    return [TRAIL_OPACITY_START + span * i / (segments - 1) for i in range(segments)]


def render_trails(
    trails: dict[str, list[MovePoint]],
    width: int,
    height: int,
    reference_width: int,
    scroll_offset: float = 0,
) -> np.ndarray:
    """
    Render mouse-movement trails, one polyline per session.

    Sessions with more than 10 points also get a faint radial glow at every
    point where the cursor settled.

    Returns:
        (height, width, 4) uint8 RGBA buffer
    """
    scale = width / max(reference_width, 1)
    mapped = {
        key: [(p.x * scale, (p.y - scroll_offset) * scale) for p in samples]
        for key, samples in trails.items()
    }

    canvas = _Canvas(width, height)
    glow_stops = ((0.0, TRAIL_COLOR, 1.0), (1.0, TRAIL_COLOR, 0.0))
    for coords in mapped.values():
        if len(coords) > SETTLED_MIN_POINTS:
            for x, y in coords:
                canvas.composite_radial(x, y, GLOW_RADIUS * scale, glow_stops, GLOW_ALPHA)

    image = Image.fromarray(canvas.to_buffer())
    for coords in mapped.values():
        if len(coords) < 2:
            continue
        # Blended drawing leaves the destination alpha alone, so each trail
        # is drawn on its own layer and composited
        layer = Image.new("RGBA", image.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        for (start, end), opacity in zip(zip(coords, coords[1:]), trail_opacities(len(coords))):
            fill = (*TRAIL_COLOR, int(round(opacity * 255)))
            draw.line([start, end], fill=fill, width=TRAIL_WIDTH)
        image = Image.alpha_composite(image, layer)

    return np.asarray(image, dtype=np.uint8).copy()
