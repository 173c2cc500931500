"""
Pytest configuration and shared fixtures for canvasflow tests.
"""

from unittest.mock import MagicMock

import pytest

from canvasflow.engine import EventContext, EventEngine
from canvasflow.model import ProjectData
from canvasflow.session import build_context


def make_node(node_id, node_type="button", label=None, events=None, props=None):
    data = {"label": label if label is not None else node_id}
    if props is not None:
        data["props"] = props
    if events is not None:
        data["events"] = events
    return {
        "id": node_id,
        "type": node_type,
        "position": {"x": 0, "y": 0},
        "data": data,
    }


def on(event_type, action_type, value, target=None):
    action = {"type": action_type, "value": value}
    if target is not None:
        action["target"] = target
    return {"type": event_type, "action": action}


@pytest.fixture
def alert_project():
    """One button that shows an alert when clicked."""
    return ProjectData.model_validate(
        {
            "nodes": [
                make_node("b1", label="Go", events=[on("onClick", "showAlert", "Hi")])
            ],
            "edges": [],
            "settings": {},
        }
    )


@pytest.fixture
def wired_project():
    """An input, a text, and buttons wired to each other."""
    return ProjectData.model_validate(
        {
            "nodes": [
                make_node(
                    "n1",
                    "input",
                    events=[on("onChange", "setVariable", "ignored", target="v")],
                ),
                make_node("t1", "text", label="Waiting"),
                make_node(
                    "b1",
                    events=[
                        on("onClick", "setVariable", "1", target="x"),
                        on("onClick", "setVariable", "2", target="x"),
                    ],
                ),
                make_node(
                    "b2",
                    events=[
                        on("onClick", "setText", "Done", target="t1"),
                        on("onClick", "setText", "Clicked"),
                    ],
                ),
            ],
            "edges": [{"id": "e1", "source": "n1", "target": "t1"}],
            "settings": {"variables": {"x": 0, "greeting": "hello"}},
        }
    )


@pytest.fixture
def host():
    """Mock host callbacks."""
    return MagicMock()


@pytest.fixture
def make_engine(host):
    def _make(data: ProjectData, **kwargs) -> EventEngine:
        context = build_context(
            data,
            on_variable_change=host.on_variable_change,
            on_node_update=host.on_node_update,
            on_show_alert=host.on_show_alert,
            on_diagnostic=host.on_diagnostic,
        )
        return EventEngine(context, **kwargs)

    return _make


@pytest.fixture
def bare_engine():
    """Engine with no callbacks and a single plain node."""
    return EventEngine(
        EventContext(variables={}, nodes={"a": {"label": "A"}})
    )
