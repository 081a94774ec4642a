"""PNG rendering of a Scene with Pillow.

Links are drawn as bands of short quadrilaterals following the curve, each
colored by interpolating between the link's start and end colors, so the
source-target gradient survives rasterization. Every band is composited
separately at the scene's link opacity.
"""

import logging
from pathlib import Path

from PIL import Image, ImageColor, ImageDraw, ImageFont

from jmu_sankey.output.scene import LinkShape, Scene

logger = logging.getLogger(__name__)

# --- Fonts ---

_FONT_REGULAR = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"

BG = (255, 255, 255)
TEXT = (0, 0, 0)

# Curve samples per link band
_SEGMENTS = 48


def _font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    try:
        return ImageFont.truetype(_FONT_REGULAR, size)
    except OSError:
        logger.debug("%s not available, using Pillow's default font", _FONT_REGULAR)
        return ImageFont.load_default()


def _rgb(color: str) -> tuple[int, int, int]:
    r, g, b = ImageColor.getrgb(color)[:3]
    return (r, g, b)


def _mix(a: tuple[int, int, int], b: tuple[int, int, int], t: float) -> tuple[int, int, int]:
    return (
        round(a[0] + (b[0] - a[0]) * t),
        round(a[1] + (b[1] - a[1]) * t),
        round(a[2] + (b[2] - a[2]) * t),
    )


def _draw_band(img: Image.Image, link: LinkShape, opacity: float, scale: float) -> Image.Image:
    layer = Image.new("RGBA", img.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    alpha = round(255 * opacity)
    start = _rgb(link.start_color)
    end = _rgb(link.end_color)
    half = link.stroke_width / 2

    span = link.tx - link.sx
    points = [link.point_at(i / _SEGMENTS) for i in range(_SEGMENTS + 1)]
    for (xa, ya), (xb, yb) in zip(points, points[1:]):
        # Gradient runs along x from the source edge to the target edge
        t = ((xa + xb) / 2 - link.sx) / span if span else 0.0
        color = _mix(start, end, min(max(t, 0.0), 1.0))
        draw.polygon(
            [
                (xa * scale, (ya - half) * scale),
                (xb * scale, (yb - half) * scale),
                (xb * scale, (yb + half) * scale),
                (xa * scale, (ya + half) * scale),
            ],
            fill=color + (alpha,),
        )
    return Image.alpha_composite(img, layer)


def render_png(scene: Scene, output_path: Path, scale: float = 1.0) -> Path:
    """Render the scene as a PNG image."""
    width = round(scene.width * scale)
    height = round(scene.height * scale)
    img = Image.new("RGBA", (width, height), BG + (255,))

    for link in scene.links:
        img = _draw_band(img, link, scene.link_opacity, scale)

    draw = ImageDraw.Draw(img)
    for r in scene.rects:
        draw.rectangle(
            [r.x * scale, r.y * scale, (r.x + r.width) * scale, (r.y + r.height) * scale],
            fill=_rgb(r.fill),
            outline=_rgb(r.stroke),
            width=1,
        )

    font = _font(round(scene.font_size * scale))
    for label in scene.node_labels + scene.link_labels:
        text_w = draw.textlength(label.text, font=font)
        bbox = font.getbbox(label.text)
        text_h = bbox[3] - bbox[1]
        x = label.x * scale
        if label.anchor == "end":
            x -= text_w
        draw.text((x, label.y * scale - text_h / 2), label.text, font=font, fill=TEXT)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    img.convert("RGB").save(str(output_path), "PNG")
    logger.info("PNG saved to %s (%dx%d)", output_path, width, height)
    return output_path
