"""Configuration loading for the Sankey renderer."""

from pathlib import Path
from typing import Any, Literal, get_args

import yaml
from pydantic import BaseModel, Field, ValidationError

from jmu_sankey.errors import ConfigError
from jmu_sankey.models import NodeAlign

# d3.schemeCategory10
CATEGORY10 = [
    "#1f77b4", "#ff7f0e", "#2ca02c", "#d62728", "#9467bd",
    "#8c564b", "#e377c2", "#7f7f7f", "#bcbd22", "#17becf",
]

Dataset = Literal["generic", "student-costs", "revenues"]
DATASETS: tuple[str, ...] = get_args(Dataset)


class DataConfig(BaseModel):
    generic_path: str = "data/data_sankey.json"
    jmu_path: str = "data/jmu.json"
    dataset: Dataset = "generic"


class CanvasConfig(BaseModel):
    width: int = 928
    height: int = 600
    margin_x: float = 1
    margin_y: float = 5
    container_id: str = "my_dataviz"

    @property
    def extent(self) -> tuple[tuple[float, float], tuple[float, float]]:
        """Drawable extent [[x_min, y_min], [x_max, y_max]]."""
        return (
            (self.margin_x, self.margin_y),
            (self.width - self.margin_x, self.height - self.margin_y),
        )


class LayoutConfig(BaseModel):
    align: NodeAlign = NodeAlign.JUSTIFY
    node_width: float = 15
    node_padding: float = 10
    iterations: int = 6


class RenderConfig(BaseModel):
    link_color: str = "source-target"  # source, target, source-target, or a color string
    palette: list[str] = Field(default_factory=lambda: list(CATEGORY10))
    link_opacity: float = 0.5
    node_stroke: str = "#000"
    font_size: int = 10
    label_offset: float = 6


class Config(BaseModel):
    data: DataConfig = Field(default_factory=DataConfig)
    canvas: CanvasConfig = Field(default_factory=CanvasConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    output_dir: str = "data/output"

    def resolve(self, path: str) -> Path:
        """Resolve a configured path relative to project root."""
        p = Path(path).expanduser()
        if p.is_absolute():
            return p
        return _project_root() / p

    @property
    def resolved_output_dir(self) -> Path:
        return self.resolve(self.output_dir)


def _project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


def load_config(config_path: Path | None = None) -> Config:
    """Load config from YAML file. Falls back to defaults if file missing.

    Raises:
        ConfigError: the file is not valid YAML or holds invalid settings.
    """
    if config_path is None:
        config_path = _project_root() / "config.yaml"

    if config_path.exists():
        try:
            raw: dict[str, Any] = yaml.safe_load(config_path.read_text()) or {}
            return Config(**raw)
        except (yaml.YAMLError, ValidationError) as e:
            raise ConfigError(f"Invalid config {config_path}: {e}") from e

    return Config()
