"""Error types raised while building, laying out, or rendering a diagram."""


class SankeyError(Exception):
    """Base class for all jmu_sankey failures."""


class DataLoadError(SankeyError):
    """A data resource is missing or cannot be parsed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load {path}: {reason}")


class DiagramConstructionError(SankeyError):
    """Duplicate node identity or a link pointing at an unknown node."""


class LayoutError(SankeyError):
    """The layout step cannot position the diagram (cycle, degenerate extent)."""


class ConfigError(SankeyError, ValueError):
    """Invalid configuration: bad config file, unknown dataset or format."""
