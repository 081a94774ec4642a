"""Render orchestrator: load, adapt, lay out, paint once, write output."""

import logging
from pathlib import Path
from typing import Any

from jmu_sankey.adapters import (
    build_generic_diagram,
    build_revenue_diagram,
    build_student_cost_diagram,
    check_diagram,
)
from jmu_sankey.config import DATASETS, Config
from jmu_sankey.errors import ConfigError
from jmu_sankey.layout import LayoutPolicy, SankeyLayout
from jmu_sankey.loader import load_json
from jmu_sankey.models import Diagram
from jmu_sankey.output.html_page import write_html
from jmu_sankey.output.png import render_png
from jmu_sankey.output.scene import Scene, build_scene
from jmu_sankey.output.svg import write_svg

logger = logging.getLogger(__name__)

FORMATS = ("html", "svg", "png")


class RenderResult:
    """Summary of a render run."""

    def __init__(self, dataset: str, output_path: Path) -> None:
        self.dataset = dataset
        self.output_path = output_path
        self.nodes = 0
        self.links = 0
        self.columns = 0
        self.categories = 0
        self.total_flow = 0.0

    def __repr__(self) -> str:
        return (
            f"RenderResult({self.dataset}: {self.nodes} nodes, {self.links} links, "
            f"{self.columns} columns, {self.categories} categories, "
            f"flow={self.total_flow:,.0f} -> {self.output_path})"
        )


def load_sources(config: Config) -> tuple[dict[str, Any], dict[str, Any]]:
    """Load the generic document and the JMU document."""
    generic = load_json(config.resolve(config.data.generic_path))
    jmu = load_json(config.resolve(config.data.jmu_path))
    return generic, jmu


def build_diagram(dataset: str, generic: dict[str, Any], jmu: dict[str, Any]) -> Diagram:
    """Adapt the selected dataset and check it before layout."""
    if dataset == "generic":
        diagram = build_generic_diagram(generic)
    elif dataset == "student-costs":
        diagram = build_student_cost_diagram(jmu)
    elif dataset == "revenues":
        diagram = build_revenue_diagram(jmu)
    else:
        raise ConfigError(f"Unknown dataset {dataset!r}; expected one of {', '.join(DATASETS)}")
    return check_diagram(diagram)


def build_scene_for(diagram: Diagram, config: Config) -> tuple[Scene, int]:
    """Lay out and describe the diagram. Returns the scene and column count."""
    layout = SankeyLayout(LayoutPolicy.from_config(config))
    positioned = layout(diagram)
    scene = build_scene(positioned, canvas=config.canvas, render=config.render)
    return scene, positioned.columns


def render_diagram(
    config: Config,
    dataset: str | None = None,
    fmt: str = "html",
    output_path: Path | None = None,
) -> RenderResult:
    """Run the whole pipeline once and write a single output file.

    Raises:
        ConfigError, DataLoadError, DiagramConstructionError, LayoutError: all fatal;
            nothing is written when any of them is raised.
    """
    dataset = dataset or config.data.dataset
    if fmt not in FORMATS:
        raise ConfigError(f"Unknown format {fmt!r}; expected one of {', '.join(FORMATS)}")

    generic, jmu = load_sources(config)
    diagram = build_diagram(dataset, generic, jmu)
    scene, columns = build_scene_for(diagram, config)

    if output_path is None:
        output_path = config.resolved_output_dir / f"{dataset}_sankey.{fmt}"

    if fmt == "html":
        write_html(scene, output_path, container_id=config.canvas.container_id,
                   title=f"{dataset} Sankey")
    elif fmt == "svg":
        write_svg(scene, output_path)
    else:
        render_png(scene, output_path)

    result = RenderResult(dataset, output_path)
    result.nodes = len(diagram.nodes)
    result.links = len(diagram.links)
    result.columns = columns
    result.categories = len(scene.colors)
    result.total_flow = sum(lk.value for lk in diagram.links)
    logger.info("Render complete: %s", result)
    return result
