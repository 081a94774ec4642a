"""Revenue → expense adapters.

Two document shapes are handled:

* ``"jmu-revenues"``: a flat list of revenue records, turned into revenue
  nodes alongside the fixed expense categories (``build_revenue_nodes``).
* ``"revenues"`` / ``"expenses"``: category lists, each category holding
  ``items`` with a ``value``. Every revenue item is linked to every expense
  item with value ``revenue.value * expense.value``. This cross-product is
  kept exactly as the existing output produces it; it is not an allocation
  of revenue to specific expenses.
"""

import logging
from typing import Any

from jmu_sankey.models import Diagram, Link, Node

logger = logging.getLogger(__name__)

REVENUES_KEY = "jmu-revenues"
EXPENSE_CATEGORIES = ("Operating Expenses", "Non-operating Expenses")


def _items(categories: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [item for category in categories for item in category.get("items", [])]


def build_revenue_nodes(raw: dict[str, Any]) -> list[Node]:
    """One node per "jmu-revenues" record plus the fixed expense categories."""
    nodes = [
        Node(name=rev["name"], title=rev["name"], category="revenue-item")
        for rev in raw[REVENUES_KEY]
    ]
    nodes.extend(
        Node(name=cat, title=cat, category="expense-category")
        for cat in EXPENSE_CATEGORIES
    )
    return nodes


def build_expense_nodes(raw: dict[str, Any]) -> list[Node]:
    """Expense category nodes followed by their item nodes."""
    nodes: list[Node] = []
    for category in raw["expenses"]:
        nodes.append(Node(
            name=category["name"],
            title=category.get("title") or category["name"],
            category="expense-category",
        ))
        for item in category.get("items", []):
            nodes.append(Node(
                name=item["name"],
                title=item.get("title") or item["name"],
                category="expense-item",
            ))
    return nodes


def build_revenue_expense_links(raw: dict[str, Any]) -> list[Link]:
    """Link every revenue item to every expense item (product of values)."""
    expense_items = _items(raw["expenses"])
    return [
        Link(
            source=rev["name"],
            target=exp["name"],
            value=rev["value"] * exp["value"],
        )
        for rev in _items(raw["revenues"])
        for exp in expense_items
    ]


def build_revenue_diagram(raw: dict[str, Any]) -> Diagram:
    """Revenue items on the left, expense categories and items on the right."""
    nodes = [
        Node(name=item["name"], title=item.get("title") or item["name"], category="revenue-item")
        for item in _items(raw["revenues"])
    ]
    nodes.extend(build_expense_nodes(raw))
    links = build_revenue_expense_links(raw)
    logger.debug("Revenue diagram: %d nodes, %d links", len(nodes), len(links))
    return Diagram(nodes=nodes, links=links)
