"""Shared test fixtures for jmu_sankey tests."""

import json

import pytest

from jmu_sankey.config import CanvasConfig, Config, DataConfig, LayoutConfig, RenderConfig
from jmu_sankey.models import Diagram, Link, Node


@pytest.fixture()
def cost_raw():
    """The two-record student cost document."""
    return {
        "student-costs": [
            {"name": "Tuition", "semester": "Fall", "in-state": 5000},
            {"name": "Housing", "semester": "Spring", "in-state": 6000},
        ],
    }


@pytest.fixture()
def generic_raw():
    return {
        "nodes": [
            {"name": "Tuition & Fees", "category": "revenue"},
            {"name": "State Appropriations", "category": "revenue"},
            {"name": "Operating Budget", "category": "budget"},
            {"name": "Instruction", "category": "expense"},
            {"name": "Facilities", "title": "Facilities & Grounds", "category": "expense"},
        ],
        "links": [
            {"source": "Tuition & Fees", "target": "Operating Budget", "value": 300},
            {"source": "State Appropriations", "target": "Operating Budget", "value": 100},
            {"source": "Operating Budget", "target": "Instruction", "value": 250},
            {"source": "Operating Budget", "target": "Facilities", "value": 150},
        ],
    }


@pytest.fixture()
def revenue_raw():
    return {
        "jmu-revenues": [
            {"name": "Student Tuition and Fees", "value": 312.4},
            {"name": "State Appropriations", "value": 118.6},
        ],
        "revenues": [
            {"name": "Operating Revenues", "items": [
                {"name": "Tuition", "value": 3},
                {"name": "Auxiliary", "value": 2},
            ]},
        ],
        "expenses": [
            {"name": "Operating Expenses", "items": [
                {"name": "Instruction", "value": 5},
                {"name": "Academic Support", "title": "Academic Support Services", "value": 1},
            ]},
        ],
    }


@pytest.fixture()
def simple_diagram():
    """A → B → D, A → C → D with uneven flow."""
    return Diagram(
        nodes=[
            Node(name="A", category="src"),
            Node(name="B", category="mid"),
            Node(name="C", category="mid"),
            Node(name="D", category="sink"),
        ],
        links=[
            Link(source="A", target="B", value=30),
            Link(source="A", target="C", value=10),
            Link(source="B", target="D", value=30),
            Link(source="C", target="D", value=10),
        ],
    )


@pytest.fixture()
def data_config(tmp_path, generic_raw, revenue_raw):
    """Config pointing at JSON files written into tmp_path."""
    generic_path = tmp_path / "data_sankey.json"
    jmu_path = tmp_path / "jmu.json"
    generic_path.write_text(json.dumps(generic_raw))
    jmu = dict(revenue_raw)
    jmu["student-costs"] = [
        {"name": "Tuition", "semester": "Fall", "in-state": 4331},
        {"name": "Housing", "semester": "Fall", "in-state": 3436},
        {"name": "Spring Tuition", "semester": "Spring", "in-state": 4331},
    ]
    jmu_path.write_text(json.dumps(jmu))

    return Config(
        data=DataConfig(generic_path=str(generic_path), jmu_path=str(jmu_path)),
        canvas=CanvasConfig(),
        layout=LayoutConfig(),
        render=RenderConfig(),
        output_dir=str(tmp_path / "out"),
    )
