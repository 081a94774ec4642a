"""Scene building: positioned diagram to a declarative list of shapes.

A Scene holds plain records (rects, link paths, gradients, labels) with all
geometry and colors resolved. The SVG, HTML and PNG writers only paint
what is here, so nothing about the layout leaks into the drawing code.
"""

import logging
from dataclasses import dataclass, field

from jmu_sankey.config import CATEGORY10, CanvasConfig, RenderConfig
from jmu_sankey.layout import PositionedDiagram, PositionedLink, PositionedNode
from jmu_sankey.models import LinkColorMode

logger = logging.getLogger(__name__)

ARROW = "→"


class CategoryColors:
    """Ordinal color scale: categories get palette colors in first-seen order.

    Once the palette is exhausted colors repeat from the start.
    """

    def __init__(self, palette: list[str] | None = None) -> None:
        self.palette = list(palette or CATEGORY10)
        self._assigned: dict[str, str] = {}

    def __call__(self, category: str) -> str:
        if category not in self._assigned:
            self._assigned[category] = self.palette[len(self._assigned) % len(self.palette)]
        return self._assigned[category]

    def mapping(self) -> dict[str, str]:
        return dict(self._assigned)


def format_value(value: float) -> str:
    """Zero decimals with thousands separators: 12345.6 → "12,346"."""
    return f"{value:,.0f}"


def plain_number(value: float) -> str:
    """Render a value the way it appears in the data: 5000.0 → "5000"."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


# --- Shape records ---


@dataclass
class RectShape:
    x: float
    y: float
    width: float
    height: float
    fill: str
    stroke: str
    title: str


@dataclass
class GradientDef:
    id: str
    x1: float
    x2: float
    start_color: str
    end_color: str


@dataclass
class LinkShape:
    # Horizontal cubic: start (sx, sy), end (tx, ty), controls at the x midpoint
    sx: float
    sy: float
    tx: float
    ty: float
    stroke: str  # color or url(#gradient-id)
    stroke_width: float
    start_color: str
    end_color: str
    title: str
    gradient: GradientDef | None = None

    @property
    def path(self) -> str:
        mx = (self.sx + self.tx) / 2
        return f"M{self.sx:g},{self.sy:g}C{mx:g},{self.sy:g},{mx:g},{self.ty:g},{self.tx:g},{self.ty:g}"

    def point_at(self, t: float) -> tuple[float, float]:
        """Point on the curve at parameter t in [0, 1]."""
        mx = (self.sx + self.tx) / 2
        u = 1 - t
        x = u ** 3 * self.sx + 3 * u * u * t * mx + 3 * u * t * t * mx + t ** 3 * self.tx
        y = u ** 3 * self.sy + 3 * u * u * t * self.sy + 3 * u * t * t * self.ty + t ** 3 * self.ty
        return x, y


@dataclass
class TextShape:
    x: float
    y: float
    text: str
    anchor: str  # "start" or "end"


@dataclass
class Scene:
    width: int
    height: int
    font_size: int
    link_opacity: float
    node_stroke: str = "#000"
    rects: list[RectShape] = field(default_factory=list)
    links: list[LinkShape] = field(default_factory=list)
    node_labels: list[TextShape] = field(default_factory=list)
    link_labels: list[TextShape] = field(default_factory=list)
    colors: dict[str, str] = field(default_factory=dict)

    @property
    def gradients(self) -> list[GradientDef]:
        return [lk.gradient for lk in self.links if lk.gradient is not None]


# --- Building ---


def _link_mode(link_color: str) -> LinkColorMode | None:
    try:
        return LinkColorMode(link_color)
    except ValueError:
        return None  # literal color


def stroke_width(link: PositionedLink) -> float:
    return max(1.0, link.width)


def node_label(node: PositionedNode, width: float, offset: float = 6) -> TextShape:
    """Label beside the node, on the side facing the canvas centre."""
    y = (node.y0 + node.y1) / 2
    if node.x0 < width / 2:
        return TextShape(x=node.x1 + offset, y=y, text=node.title, anchor="start")
    return TextShape(x=node.x0 - offset, y=y, text=node.title, anchor="end")


def link_label(link: PositionedLink, width: float, offset: float = 6) -> TextShape:
    """Label at the link's horizontal midpoint, flipped like node labels."""
    mid_x = (link.source.x1 + link.target.x0) / 2
    y = (link.y0 + link.y1) / 2
    text = f"{link.source.title} {ARROW} {plain_number(link.value)} {ARROW} {link.target.title}"
    if mid_x < width / 2:
        return TextShape(x=mid_x + offset, y=y, text=text, anchor="start")
    return TextShape(x=mid_x - offset, y=y, text=text, anchor="end")


def _link_shape(
    link: PositionedLink,
    mode: LinkColorMode | None,
    literal: str,
    color: CategoryColors,
) -> LinkShape:
    source_color = color(link.source.category)
    target_color = color(link.target.category)
    gradient = None

    if mode is LinkColorMode.SOURCE_TARGET:
        gradient = GradientDef(
            id=link.uid,
            x1=link.source.x1,
            x2=link.target.x0,
            start_color=source_color,
            end_color=target_color,
        )
        stroke = f"url(#{link.uid})"
        start, end = source_color, target_color
    elif mode is LinkColorMode.SOURCE:
        stroke = start = end = source_color
    elif mode is LinkColorMode.TARGET:
        stroke = start = end = target_color
    else:
        stroke = start = end = literal

    return LinkShape(
        sx=link.source.x1,
        sy=link.y0,
        tx=link.target.x0,
        ty=link.y1,
        stroke=stroke,
        stroke_width=stroke_width(link),
        start_color=start,
        end_color=end,
        title=f"{link.source.title} {ARROW} {link.target.title}\n{format_value(link.value)}",
        gradient=gradient,
    )


def build_scene(
    positioned: PositionedDiagram,
    canvas: CanvasConfig | None = None,
    render: RenderConfig | None = None,
    colors: CategoryColors | None = None,
) -> Scene:
    """Describe every shape needed to paint a positioned diagram."""
    canvas = canvas or CanvasConfig()
    render = render or RenderConfig()
    color = colors or CategoryColors(render.palette)
    mode = _link_mode(render.link_color)

    scene = Scene(
        width=canvas.width,
        height=canvas.height,
        font_size=render.font_size,
        link_opacity=render.link_opacity,
        node_stroke=render.node_stroke,
    )

    for node in positioned.nodes:
        scene.rects.append(RectShape(
            x=node.x0,
            y=node.y0,
            width=node.x1 - node.x0,
            height=node.y1 - node.y0,
            fill=color(node.category),
            stroke=render.node_stroke,
            title=f"{node.name}\n{format_value(node.value)}",
        ))

    for link in positioned.links:
        scene.links.append(_link_shape(link, mode, render.link_color, color))

    scene.node_labels = [node_label(n, canvas.width, render.label_offset) for n in positioned.nodes]
    scene.link_labels = [link_label(lk, canvas.width, render.label_offset) for lk in positioned.links]
    scene.colors = color.mapping()

    logger.debug(
        "Scene: %d rects, %d links, %d gradients",
        len(scene.rects), len(scene.links), len(scene.gradients),
    )
    return scene
