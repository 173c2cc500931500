"""
Unit tests for canvasflow.model module.
"""
import datetime
import uuid

import pytest
from pydantic import ValidationError

from canvasflow.model import (
    CreateProject,
    NodeEvent,
    ProjectData,
    ProjectValidationError,
    SetTextAction,
    SetVariableAction,
    ShowAlertAction,
    UpdateProject,
    event_action_adapter,
    new_project_data,
    validate_project,
    validate_project_data,
)
from canvasflow.tests.conftest import make_node, on


class TestActions:
    """Tests for the action tagged union."""

    @pytest.mark.parametrize(
        "payload,cls",
        [
            ({"type": "setText", "value": "a"}, SetTextAction),
            ({"type": "setVariable", "target": "v", "value": "a"}, SetVariableAction),
            ({"type": "showAlert", "value": "a"}, ShowAlertAction),
        ],
    )
    def test_discriminated_by_type(self, payload, cls):
        assert isinstance(event_action_adapter.validate_python(payload), cls)

    def test_unknown_action_type_rejected(self):
        with pytest.raises(ValidationError):
            event_action_adapter.validate_python({"type": "explode", "value": "x"})

    def test_value_required(self):
        with pytest.raises(ValidationError):
            SetTextAction()

    def test_target_optional(self):
        assert ShowAlertAction(value="hi").target is None

    def test_node_event(self):
        event = NodeEvent.model_validate(on("onSubmit", "showAlert", "sent"))
        assert event.type == "onSubmit"
        assert isinstance(event.action, ShowAlertAction)


class TestValidateProjectData:
    """Tests for validate_project_data."""

    def test_defaults(self):
        data = validate_project_data({})
        assert data.nodes == []
        assert data.edges == []
        assert data.settings.theme == "light"
        assert data.settings.preview_mode is False
        assert data.settings.variables == {}

    def test_partial_settings_get_defaults(self):
        data = validate_project_data({"settings": {"theme": "dark"}})
        assert data.settings.theme == "dark"
        assert data.settings.preview_mode is False

    def test_valid_payload(self, wired_project):
        payload = wired_project.to_json_dict()
        data = validate_project_data(payload)
        assert data.node_ids() == ["n1", "t1", "b1", "b2"]
        assert data.node("b1").data.events[1].action.value == "2"
        assert data.node("zzz") is None

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ProjectValidationError, match="duplicate node ids: a"):
            validate_project_data({"nodes": [make_node("a"), make_node("a")]})

    def test_unknown_node_type_rejected(self):
        with pytest.raises(ProjectValidationError) as exc_info:
            validate_project_data({"nodes": [make_node("a", "slider")]})
        assert any(issue.startswith("nodes.0.type") for issue in exc_info.value.issues)

    def test_missing_label_rejected(self):
        node = make_node("a")
        del node["data"]["label"]
        with pytest.raises(ProjectValidationError, match="label"):
            validate_project_data({"nodes": [node]})

    def test_malformed_edge_rejected(self):
        with pytest.raises(ProjectValidationError, match="edges.0.target"):
            validate_project_data({"edges": [{"id": "e", "source": "a"}]})

    def test_non_object_rejected(self):
        with pytest.raises(ProjectValidationError, match="expected an object"):
            validate_project_data([1, 2])

    def test_dangling_edges_are_allowed_but_reported(self):
        data = validate_project_data(
            {
                "nodes": [make_node("a")],
                "edges": [
                    {"id": "ok", "source": "a", "target": "a"},
                    {"id": "bad", "source": "a", "target": "zz"},
                ],
            }
        )
        assert [e.id for e in data.dangling_edges()] == ["bad"]

    def test_json_dump_uses_stored_names(self):
        data = new_project_data(theme="dark", variables={"n": 1})
        assert data.to_json_dict() == {
            "nodes": [],
            "edges": [],
            "settings": {"theme": "dark", "previewMode": False, "variables": {"n": 1}},
        }

    def test_passthrough_of_model(self, alert_project):
        assert validate_project_data(alert_project) is alert_project


class TestProjectEnvelope:
    """Tests for the project row schemas."""

    def test_project(self):
        now = datetime.datetime.now(datetime.timezone.utc).isoformat()
        project = validate_project(
            {
                "id": str(uuid.uuid4()),
                "user_id": str(uuid.uuid4()),
                "name": "Demo",
                "data": {"settings": {}},
                "created_at": now,
                "updated_at": now,
            }
        )
        assert project.is_deleted is False
        assert isinstance(project.data, ProjectData)

    def test_project_requires_name(self):
        with pytest.raises(ProjectValidationError):
            validate_project(
                {
                    "id": str(uuid.uuid4()),
                    "user_id": str(uuid.uuid4()),
                    "name": "",
                    "data": {},
                    "created_at": "2024-01-01T00:00:00Z",
                    "updated_at": "2024-01-01T00:00:00Z",
                }
            )

    def test_create_and_update(self):
        assert CreateProject(name="x").data is None
        assert UpdateProject().name is None
        with pytest.raises(ValidationError):
            UpdateProject(name="")
