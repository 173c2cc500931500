"""Headless host for exercising a project's events.

``PreviewHarness`` plays the part of the canvas host: it opens a session on
its own ``EngineSlot``, records every callback the engine makes, and keeps
a ``PreviewRecorder`` history alongside. It needs no UI and is used by the
test-suite and by ``canvasflow preview``.

Example::

    harness = PreviewHarness(get_template_data("form-example"))

    harness.type_into("input-1", "Ada")
    assert harness.engine.get_node_value("input-1") == "Ada"

    harness.click("button-1")
    assert harness.calls.alerts == ["Signed up!"]

    harness.close()
    harness.click("button-1")   # no effect: the session is gone
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from canvasflow.config import EngineSettings
from canvasflow.engine import Diagnostic, EventEngine
from canvasflow.history import PreviewRecorder
from canvasflow.model import ProjectData
from canvasflow.session import EngineSlot, build_context


@dataclass
class HostCalls:
    """Every callback the engine made, in order of arrival."""

    variable_changes: list[tuple[str, Any]] = field(default_factory=list)
    node_updates: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    alerts: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def total(self) -> int:
        return len(self.variable_changes) + len(self.node_updates) + len(self.alerts)


class PreviewHarness:
    """In-memory canvas host.

    Supports:
    - ``click`` / ``type_into`` / ``submit``: fire the matching node events
    - ``fail_callback``: make one host callback raise, to exercise the
      engine's error handling
    - ``close``: unmount the canvas (resets the slot)
    """

    def __init__(
        self,
        data: ProjectData,
        settings: EngineSettings | None = None,
        name: str = "preview",
    ) -> None:
        self.data = data
        self.calls = HostCalls()
        self.recorder = PreviewRecorder(data.node_ids())
        self.slot = EngineSlot(name, settings=settings)
        self._failing: dict[str, Exception] = {}

        callbacks = self.recorder.bind(
            on_variable_change=self._on_variable_change,
            on_node_update=self._on_node_update,
            on_show_alert=self._on_show_alert,
        )
        self.slot.mount(
            build_context(data, on_diagnostic=self.calls.diagnostics.append, **callbacks)
        )

    def _raise_if_failing(self, callback: str) -> None:
        exc = self._failing.get(callback)
        if exc is not None:
            raise exc

    def _on_variable_change(self, name: str, value: Any) -> None:
        self.calls.variable_changes.append((name, value))
        self._raise_if_failing("on_variable_change")

    def _on_node_update(self, node_id: str, updates: dict[str, Any]) -> None:
        self.calls.node_updates.append((node_id, dict(updates)))
        self._raise_if_failing("on_node_update")

    def _on_show_alert(self, message: str) -> None:
        self.calls.alerts.append(message)
        self._raise_if_failing("on_show_alert")

    def fail_callback(self, callback: str, exc: Exception | None = None) -> None:
        self._failing[callback] = exc or RuntimeError(f"{callback} failed")

    @property
    def engine(self) -> EventEngine | None:
        return self.slot.get()

    @property
    def variables(self) -> dict[str, Any]:
        engine = self.engine
        return engine.get_debug_info().variables if engine else {}

    def trigger(
        self, node_id: str, event_type: str, event_data: dict[str, Any] | None = None
    ) -> int:
        engine = self.engine
        if engine is None:
            return 0
        return engine.execute_node_events(node_id, event_type, event_data)

    def click(self, node_id: str) -> int:
        return self.trigger(node_id, "onClick")

    def type_into(self, node_id: str, value: str) -> int:
        return self.trigger(node_id, "onChange", {"value": value})

    def submit(self, node_id: str) -> int:
        return self.trigger(node_id, "onSubmit")

    def close(self) -> None:
        self.slot.reset()
