"""Structural checks on a constructed diagram."""

from jmu_sankey.errors import DiagramConstructionError
from jmu_sankey.models import Diagram


def check_diagram(diagram: Diagram) -> Diagram:
    """Verify node names are unique and every link endpoint resolves.

    Returns the diagram unchanged so the call can be chained.

    Raises:
        DiagramConstructionError: naming the first offending node or link.
    """
    seen: dict[str, int] = {}
    for i, name in enumerate(diagram.node_names()):
        if name in seen:
            raise DiagramConstructionError(
                f"Duplicate node name {name!r} at positions {seen[name]} and {i}"
            )
        seen[name] = i

    for i, (source, target, _) in enumerate(diagram.link_tuples()):
        for end in (source, target):
            if end not in seen:
                raise DiagramConstructionError(
                    f"Link {i} ({source} -> {target}) references unknown node {end!r}"
                )

    return diagram
