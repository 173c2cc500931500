"""
Unit tests for canvasflow.session module.
"""
import pytest

from canvasflow.config import EngineSettings
from canvasflow.engine import EventContext
from canvasflow.model import ProjectData
from canvasflow.session import EngineSlot, build_context, runtime_nodes
from canvasflow.testing import PreviewHarness


class TestBuildContext:
    def test_runtime_nodes_index_by_id(self, wired_project):
        records = runtime_nodes(wired_project)

        assert list(records) == ["n1", "t1", "b1", "b2"]
        assert records["t1"] == {"label": "Waiting", "props": {}, "events": []}
        assert "value" not in records["n1"]

    def test_context_binds_callbacks(self, wired_project, host):
        context = build_context(wired_project, on_show_alert=host.on_show_alert)
        assert context.on_show_alert is host.on_show_alert
        assert context.on_variable_change is None
        assert context.variables == {"x": 0, "greeting": "hello"}
        assert context.variables is not wired_project.settings.variables


class TestEngineSlot:
    """Tests for the initialize/get/reset lifecycle."""

    def test_empty_slot(self):
        assert EngineSlot().get() is None

    def test_initialize_and_get(self, wired_project):
        slot = EngineSlot("editor")
        engine = slot.initialize(build_context(wired_project))

        assert slot.get() is engine
        assert engine.name == "editor"

    def test_reset(self, wired_project):
        slot = EngineSlot()
        engine = slot.initialize(build_context(wired_project))

        slot.reset()

        assert slot.get() is None
        assert not engine.is_active
        assert engine.get_debug_info().variables == {}

    def test_reset_when_empty_is_noop(self):
        EngineSlot().reset()

    def test_second_initialize_takes_over(self, wired_project, host):
        slot = EngineSlot()
        first = slot.initialize(
            build_context(wired_project, on_show_alert=host.first_alert)
        )
        first.set_variable("x", "from first")

        second = slot.initialize(
            build_context(wired_project, on_show_alert=host.second_alert)
        )

        assert slot.get() is second
        assert not first.is_active
        # no state carries over
        assert second.get_variable("x") == 0
        first.execute_action({"type": "showAlert", "value": "stale"})
        second.execute_action({"type": "showAlert", "value": "fresh"})
        host.first_alert.assert_not_called()
        host.second_alert.assert_called_once_with("fresh")

    def test_settings_are_passed_to_engines(self, wired_project):
        settings = EngineSettings(interpolate_actions=True)
        engine = EngineSlot(settings=settings).initialize(build_context(wired_project))
        assert engine.settings is settings

    def test_mount_requires_nodes(self, wired_project):
        slot = EngineSlot()
        slot.initialize(build_context(wired_project))

        assert slot.mount(EventContext()) is None
        assert slot.get() is None

        engine = slot.mount(build_context(wired_project))
        assert slot.get() is engine

    def test_session_context_manager(self, alert_project, host):
        slot = EngineSlot()
        with slot.session(build_context(alert_project, on_show_alert=host.alert)) as engine:
            engine.execute_node_events("b1", "onClick")
            assert slot.get() is engine

        assert slot.get() is None
        assert not engine.is_active
        host.alert.assert_called_once_with("Hi")

    def test_session_resets_on_error(self, alert_project):
        slot = EngineSlot()
        with pytest.raises(ValueError):
            with slot.session(build_context(alert_project)):
                raise ValueError("canvas crashed")
        assert slot.get() is None

    def test_session_taken_over_inside_block(self, alert_project):
        slot = EngineSlot()
        with slot.session(build_context(alert_project)) as first:
            second = slot.initialize(build_context(alert_project))
        assert not first.is_active
        assert slot.get() is second


class TestTornDownHost:
    """A host that unmounts must never be called back again."""

    def test_disposed_engine_yields_no_effects(self, alert_project):
        harness = PreviewHarness(alert_project)
        stale_engine = harness.engine

        harness.close()

        assert harness.slot.get() is None
        assert harness.click("b1") == 0
        assert stale_engine.execute_node_events("b1", "onClick") == 0
        stale_engine.execute_action({"type": "showAlert", "value": "late"}, "b1")
        assert harness.calls.total() == 0

    def test_empty_project_never_mounts(self):
        harness = PreviewHarness(ProjectData())
        assert harness.engine is None
        assert harness.click("anything") == 0
