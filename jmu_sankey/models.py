"""Pydantic models for diagram input."""

from enum import Enum

from pydantic import BaseModel, Field


class NodeAlign(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"
    JUSTIFY = "justify"


class LinkColorMode(str, Enum):
    SOURCE = "source"
    TARGET = "target"
    SOURCE_TARGET = "source-target"


class Node(BaseModel):
    name: str
    title: str = ""
    category: str = ""

    def model_post_init(self, __context: object) -> None:
        if not self.title:
            self.title = self.name


class Link(BaseModel):
    source: str
    target: str
    value: float = Field(ge=0)


class Diagram(BaseModel):
    """Node/link pair handed to the layout step."""
    nodes: list[Node] = Field(default_factory=list)
    links: list[Link] = Field(default_factory=list)

    def node_names(self) -> list[str]:
        return [n.name for n in self.nodes]

    def link_tuples(self) -> list[tuple[str, str, float]]:
        return [(lk.source, lk.target, lk.value) for lk in self.links]
