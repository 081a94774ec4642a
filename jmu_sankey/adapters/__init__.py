"""Dataset adapters: raw JSON records to node/link diagrams."""

from jmu_sankey.adapters.check import check_diagram
from jmu_sankey.adapters.generic import build_generic_diagram
from jmu_sankey.adapters.revenues import (
    EXPENSE_CATEGORIES,
    build_expense_nodes,
    build_revenue_diagram,
    build_revenue_expense_links,
    build_revenue_nodes,
)
from jmu_sankey.adapters.student_costs import (
    ROOT_NODE,
    SEMESTERS,
    build_student_cost_diagram,
    build_student_cost_links,
    build_student_cost_nodes,
)

__all__ = [
    "EXPENSE_CATEGORIES",
    "ROOT_NODE",
    "SEMESTERS",
    "build_expense_nodes",
    "build_generic_diagram",
    "build_revenue_diagram",
    "build_revenue_expense_links",
    "build_revenue_nodes",
    "build_student_cost_diagram",
    "build_student_cost_links",
    "build_student_cost_nodes",
    "check_diagram",
]
