"""Adapter for documents already shaped as {nodes, links}."""

import logging
from typing import Any

from jmu_sankey.models import Diagram, Link, Node

logger = logging.getLogger(__name__)


def build_generic_diagram(raw: dict[str, Any]) -> Diagram:
    """Copy every node and link record into a fresh Diagram.

    Records are copied field by field so the loaded document is never
    touched by later layout passes. Missing titles fall back to the node
    name, missing categories to "".
    """
    nodes = [
        Node(
            name=str(rec["name"]),
            title=str(rec.get("title") or rec["name"]),
            category=str(rec.get("category") or ""),
        )
        for rec in raw.get("nodes", [])
    ]
    links = [
        Link(source=str(rec["source"]), target=str(rec["target"]), value=rec["value"])
        for rec in raw.get("links", [])
    ]
    logger.debug("Generic diagram: %d nodes, %d links", len(nodes), len(links))
    return Diagram(nodes=nodes, links=links)
