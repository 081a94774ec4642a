"""Student cost adapter: student → semester → itemized cost.

The diagram has three columns:

    JMU Student ──1──▶ Fall   ──in-state──▶ Tuition (Fall), Housing (Fall), ...
                ──1──▶ Spring ──in-state──▶ Tuition (Spring), ...

The student → semester links carry a placeholder weight of 1; only the
semester → cost links carry measured amounts.
"""

import logging
from typing import Any

from jmu_sankey.models import Diagram, Link, Node

logger = logging.getLogger(__name__)

ROOT_NODE = "JMU Student"
SEMESTERS = ("Fall", "Spring")
COSTS_KEY = "student-costs"
DEFAULT_COST_FIELD = "in-state"


def _semester_of(record: dict[str, Any]) -> str:
    # Anything that is not a Fall record is filed under Spring.
    return SEMESTERS[0] if record.get("semester") == SEMESTERS[0] else SEMESTERS[1]


def _cost_node_name(record: dict[str, Any], key_by_period: bool) -> str:
    if key_by_period:
        return f"{record['name']} ({record['semester']})"
    return str(record["name"])


def build_student_cost_nodes(
    raw: dict[str, Any],
    key_by_period: bool = False,
) -> list[Node]:
    """Root node, the two semester nodes, then one node per cost record."""
    nodes = [Node(name=ROOT_NODE, title=ROOT_NODE, category="student")]
    nodes.extend(Node(name=s, title=s, category="semester") for s in SEMESTERS)

    for cost in raw[COSTS_KEY]:
        nodes.append(Node(
            name=_cost_node_name(cost, key_by_period),
            title=f"{cost['name']} ({cost['semester']})",
            category="cost",
        ))
    return nodes


def build_student_cost_links(
    raw: dict[str, Any],
    key_by_period: bool = False,
    cost_field: str = DEFAULT_COST_FIELD,
) -> list[Link]:
    """Root → each semester (value 1), then semester → cost item."""
    links = [Link(source=ROOT_NODE, target=s, value=1) for s in SEMESTERS]

    for cost in raw[COSTS_KEY]:
        links.append(Link(
            source=_semester_of(cost),
            target=_cost_node_name(cost, key_by_period),
            value=cost[cost_field],
        ))
    return links


def build_student_cost_diagram(
    raw: dict[str, Any],
    key_by_period: bool = False,
    cost_field: str = DEFAULT_COST_FIELD,
) -> Diagram:
    """Build the student cost diagram from a document with a "student-costs" array.

    Args:
        raw: Parsed JSON document. Not modified.
        key_by_period: Name cost nodes "<item> (<semester>)" instead of
            "<item>", so an item billed in both semesters gets two nodes.
            Without it, such an item yields a duplicate node name.
        cost_field: Record key holding the amount to use as link value.
    """
    nodes = build_student_cost_nodes(raw, key_by_period=key_by_period)
    links = build_student_cost_links(raw, key_by_period=key_by_period, cost_field=cost_field)
    logger.debug("Student cost diagram: %d nodes, %d links", len(nodes), len(links))
    return Diagram(nodes=nodes, links=links)
