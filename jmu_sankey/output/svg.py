"""SVG markup for a Scene."""

import logging
from pathlib import Path

from jmu_sankey.output.scene import LinkShape, RectShape, Scene, TextShape

logger = logging.getLogger(__name__)


def _esc(s: str) -> str:
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;").replace("'", "&#39;")


def _num(v: float) -> str:
    return f"{v:g}"


def _rect(r: RectShape) -> str:
    return (
        f'<rect x="{_num(r.x)}" y="{_num(r.y)}" height="{_num(r.height)}" '
        f'width="{_num(r.width)}" fill="{_esc(r.fill)}">'
        f"<title>{_esc(r.title)}</title></rect>"
    )


def _link(lk: LinkShape) -> str:
    parts = ['<g style="mix-blend-mode: multiply;">']
    if lk.gradient is not None:
        g = lk.gradient
        parts.append(
            f'<linearGradient id="{_esc(g.id)}" gradientUnits="userSpaceOnUse" '
            f'x1="{_num(g.x1)}" x2="{_num(g.x2)}">'
            f'<stop offset="0%" stop-color="{_esc(g.start_color)}"></stop>'
            f'<stop offset="100%" stop-color="{_esc(g.end_color)}"></stop>'
            "</linearGradient>"
        )
    parts.append(
        f'<path d="{lk.path}" stroke="{_esc(lk.stroke)}" stroke-width="{_num(lk.stroke_width)}"></path>'
    )
    parts.append(f"<title>{_esc(lk.title)}</title>")
    parts.append("</g>")
    return "".join(parts)


def _text(t: TextShape) -> str:
    return (
        f'<text x="{_num(t.x)}" y="{_num(t.y)}" dy="0.35em" '
        f'text-anchor="{t.anchor}">{_esc(t.text)}</text>'
    )


def render_svg(scene: Scene) -> str:
    """Serialize a scene as a standalone <svg> element."""
    w, h = scene.width, scene.height
    lines = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{w}" height="{h}" '
        f'viewBox="0 0 {w} {h}" '
        f'style="max-width: 100%; height: auto; font: {scene.font_size}px sans-serif;">',
        f'<g stroke="{_esc(scene.node_stroke)}">',
        *(_rect(r) for r in scene.rects),
        "</g>",
        f'<g fill="none" stroke-opacity="{_num(scene.link_opacity)}">',
        *(_link(lk) for lk in scene.links),
        "</g>",
        "<g>",
        *(_text(t) for t in scene.node_labels),
        "</g>",
        "<g>",
        *(_text(t) for t in scene.link_labels),
        "</g>",
        "</svg>",
    ]
    return "\n".join(lines)


def write_svg(scene: Scene, output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_svg(scene), encoding="utf-8")
    logger.info("SVG saved to %s (%dx%d)", output_path, scene.width, scene.height)
    return output_path
