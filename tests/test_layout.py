"""Tests for the Sankey layout step."""

import pytest

from jmu_sankey.adapters import build_generic_diagram, build_student_cost_diagram
from jmu_sankey.config import Config
from jmu_sankey.errors import DiagramConstructionError, LayoutError
from jmu_sankey.layout import LayoutPolicy, SankeyLayout, compute_layout
from jmu_sankey.models import Diagram, Link, Node, NodeAlign

TOL = 1e-5


def _chain(*edges: tuple[str, str, float]) -> Diagram:
    names: list[str] = []
    for s, t, _ in edges:
        for n in (s, t):
            if n not in names:
                names.append(n)
    return Diagram(
        nodes=[Node(name=n) for n in names],
        links=[Link(source=s, target=t, value=v) for s, t, v in edges],
    )


def _named(positioned, name: str):
    return next(n for n in positioned.nodes if n.name == name)


class TestNodeValues:
    def test_value_is_max_of_in_and_out(self, cost_raw):
        positioned = compute_layout(build_student_cost_diagram(cost_raw))
        assert _named(positioned, "JMU Student").value == 2
        assert _named(positioned, "Fall").value == 5000
        assert _named(positioned, "Spring").value == 6000
        assert _named(positioned, "Housing").value == 6000

    def test_depth_and_height(self, simple_diagram):
        positioned = compute_layout(simple_diagram)
        assert [n.depth for n in positioned.nodes] == [0, 1, 1, 2]
        assert [n.height for n in positioned.nodes] == [2, 1, 1, 0]


class TestColumns:
    def test_columns_left_to_right(self, cost_raw):
        positioned = compute_layout(build_student_cost_diagram(cost_raw))
        assert positioned.columns == 3
        assert [n.layer for n in positioned.nodes] == [0, 1, 1, 2, 2]
        assert _named(positioned, "JMU Student").x0 == pytest.approx(1)
        assert _named(positioned, "Tuition").x1 == pytest.approx(927)
        for link in positioned.links:
            assert link.source.x1 <= link.target.x0

    def test_node_width(self, simple_diagram):
        positioned = compute_layout(simple_diagram, LayoutPolicy(node_width=24))
        for node in positioned.nodes:
            assert node.x1 - node.x0 == pytest.approx(24)

    @pytest.mark.parametrize("align, expected_layer", [
        (NodeAlign.JUSTIFY, 0),
        (NodeAlign.LEFT, 0),
        (NodeAlign.RIGHT, 1),
        (NodeAlign.CENTER, 1),
    ])
    def test_alignment_of_short_source(self, align, expected_layer):
        # D joins the chain late: A → B → C, D → C
        diagram = _chain(("A", "B", 5), ("B", "C", 5), ("D", "C", 3))
        positioned = compute_layout(diagram, LayoutPolicy(align=align))
        assert _named(positioned, "D").layer == expected_layer

    @pytest.mark.parametrize("align, expected_layer", [
        (NodeAlign.JUSTIFY, 2),
        (NodeAlign.LEFT, 1),
        (NodeAlign.RIGHT, 2),
        (NodeAlign.CENTER, 1),
    ])
    def test_alignment_of_short_sink(self, align, expected_layer):
        # E ends early: A → B → C, A → E
        diagram = _chain(("A", "B", 5), ("B", "C", 5), ("A", "E", 3))
        positioned = compute_layout(diagram, LayoutPolicy(align=align))
        assert _named(positioned, "E").layer == expected_layer


class TestBreadths:
    def _columns(self, positioned):
        columns: dict[int, list] = {}
        for node in positioned.nodes:
            columns.setdefault(node.layer, []).append(node)
        return columns

    @pytest.mark.parametrize("fixture", ["simple_diagram", "generic"])
    def test_no_overlap_within_column(self, fixture, request, generic_raw):
        diagram = (
            build_generic_diagram(generic_raw) if fixture == "generic"
            else request.getfixturevalue(fixture)
        )
        policy = LayoutPolicy()
        positioned = compute_layout(diagram, policy)
        for column in self._columns(positioned).values():
            ordered = sorted(column, key=lambda n: n.y0)
            for above, below in zip(ordered, ordered[1:]):
                assert below.y0 >= above.y1 + policy.node_padding - TOL

    def test_nodes_inside_extent(self, generic_raw):
        positioned = compute_layout(build_generic_diagram(generic_raw))
        (_, y0), (_, y1) = positioned.extent
        for node in positioned.nodes:
            assert node.y0 >= y0 - TOL
            assert node.y1 <= y1 + TOL

    def test_link_width_proportional_to_value(self, generic_raw):
        positioned = compute_layout(build_generic_diagram(generic_raw))
        ratios = {round(lk.width / lk.value, 9) for lk in positioned.links}
        assert len(ratios) == 1

    def test_link_widths_fit_node_height(self, simple_diagram, generic_raw):
        for diagram in (simple_diagram, build_generic_diagram(generic_raw)):
            positioned = compute_layout(diagram)
            for node in positioned.nodes:
                height = node.y1 - node.y0
                assert sum(lk.width for lk in node.target_links) <= height + TOL
                assert sum(lk.width for lk in node.source_links) <= height + TOL

    def test_link_breadths_inside_nodes(self, simple_diagram):
        positioned = compute_layout(simple_diagram)
        for link in positioned.links:
            assert link.source.y0 - TOL <= link.y0 <= link.source.y1 + TOL
            assert link.target.y0 - TOL <= link.y1 <= link.target.y1 + TOL

    def test_deterministic(self, generic_raw):
        a = compute_layout(build_generic_diagram(generic_raw))
        b = compute_layout(build_generic_diagram(generic_raw))
        assert [(n.x0, n.y0, n.y1) for n in a.nodes] == [(n.x0, n.y0, n.y1) for n in b.nodes]

    def test_link_index_and_uid(self, cost_raw):
        positioned = compute_layout(build_student_cost_diagram(cost_raw))
        assert [lk.index for lk in positioned.links] == [0, 1, 2, 3]
        assert positioned.links[3].uid == "link-3"

    def test_isolated_zero_value_node(self):
        diagram = _chain(("A", "B", 4))
        diagram.nodes.append(Node(name="Lonely"))
        positioned = compute_layout(diagram)
        lonely = _named(positioned, "Lonely")
        assert lonely.value == 0
        assert lonely.y1 == pytest.approx(lonely.y0)


class TestRelaxation:
    # Values below follow d3-sankey on a 928x600 canvas (ky = 14.5, padding 10).

    def _spans(self, positioned) -> dict[str, tuple[float, float]]:
        return {n.name: (n.y0, n.y1) for n in positioned.nodes}

    def test_initial_stacking(self):
        diagram = _chain(("S", "T1", 10), ("S", "T2", 30))
        spans = self._spans(compute_layout(diagram, LayoutPolicy(iterations=0)))
        assert spans["S"] == pytest.approx((10, 590))
        assert spans["T1"] == pytest.approx((5, 150))
        assert spans["T2"] == pytest.approx((160, 595))

    def test_source_pulled_to_weighted_targets(self):
        # S is centred on where its bands meet T1 and T2: (10*5 + 30*15) / 40
        diagram = _chain(("S", "T1", 10), ("S", "T2", 30))
        spans = self._spans(compute_layout(diagram, LayoutPolicy(iterations=1)))
        assert spans["S"] == pytest.approx((12.5, 592.5))

    def test_collisions_push_back_inside_extent(self):
        # T1 and T2 follow S down by 2.5, then T2 overruns y=595 and both are pushed back
        diagram = _chain(("S", "T1", 10), ("S", "T2", 30))
        positioned = compute_layout(diagram, LayoutPolicy(iterations=1))
        spans = self._spans(positioned)
        assert spans["T1"] == pytest.approx((5, 150))
        assert spans["T2"] == pytest.approx((160, 595))
        assert [lk.y0 for lk in positioned.links] == pytest.approx([85, 375])
        assert [lk.y1 for lk in positioned.links] == pytest.approx([77.5, 377.5])

    def test_target_pulled_to_weighted_sources(self):
        diagram = _chain(("S1", "T", 10), ("S2", "T", 30))
        stacked = self._spans(compute_layout(diagram, LayoutPolicy(iterations=0)))
        relaxed = self._spans(compute_layout(diagram, LayoutPolicy(iterations=1)))
        assert stacked["T"] == pytest.approx((10, 590))
        assert relaxed["T"] == pytest.approx((12.5, 592.5))
        assert relaxed["S1"] == pytest.approx((5, 150))
        assert relaxed["S2"] == pytest.approx((160, 595))

    def test_default_iterations_move_nodes(self):
        diagram = _chain(("S1", "T", 10), ("S2", "T", 30))
        stacked = _named(compute_layout(diagram, LayoutPolicy(iterations=0)), "T")
        relaxed = _named(compute_layout(diagram), "T")
        assert relaxed.y0 > stacked.y0 + 1
        assert relaxed.y1 <= 595 + TOL


class TestFailures:
    def test_missing_node(self):
        diagram = Diagram(nodes=[Node(name="A")], links=[Link(source="A", target="Z", value=1)])
        with pytest.raises(DiagramConstructionError, match="missing: Z"):
            compute_layout(diagram)

    def test_duplicate_node_id(self):
        diagram = Diagram(nodes=[Node(name="A"), Node(name="A")], links=[])
        with pytest.raises(DiagramConstructionError, match="duplicate node id: A"):
            compute_layout(diagram)

    def test_cycle(self):
        diagram = _chain(("A", "B", 1), ("B", "C", 1), ("C", "A", 1))
        with pytest.raises(LayoutError, match="circular link"):
            compute_layout(diagram)

    def test_self_link(self):
        diagram = _chain(("A", "A", 1))
        with pytest.raises(LayoutError, match="circular link"):
            compute_layout(diagram)

    def test_degenerate_extent(self, simple_diagram):
        with pytest.raises(LayoutError, match="degenerate extent"):
            compute_layout(simple_diagram, LayoutPolicy(extent=((0, 0), (100, 0))))

    def test_no_positive_flow(self):
        with pytest.raises(LayoutError, match="no positive flow"):
            compute_layout(_chain(("A", "B", 0)))

    def test_empty_diagram(self):
        positioned = compute_layout(Diagram())
        assert positioned.nodes == []
        assert positioned.links == []


class TestPolicy:
    def test_from_config(self):
        config = Config()
        policy = LayoutPolicy.from_config(config)
        assert policy.extent == ((1, 5), (927, 595))
        assert policy.align is NodeAlign.JUSTIFY
        assert policy.node_width == 15
        assert policy.node_padding == 10

    def test_custom_node_id(self):
        diagram = Diagram(
            nodes=[Node(name="a", title="Alpha"), Node(name="b", title="Beta")],
            links=[Link(source="Alpha", target="Beta", value=1)],
        )
        layout = SankeyLayout(LayoutPolicy(node_id=lambda n: n.title))
        positioned = layout(diagram)
        assert positioned.links[0].source.name == "a"
        assert positioned.links[0].target.name == "b"
