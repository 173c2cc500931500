"""Binding an ``EventEngine`` to whichever canvas is currently mounted.

The editor canvas and the preview canvas each own an ``EngineSlot``. A slot
holds at most one live engine: ``initialize`` disposes whatever engine was
there before, and ``reset`` disposes the current one, so callbacks bound by
an unmounted canvas can never fire again.

Example::

    slot = EngineSlot("preview")
    with slot.session(build_context(project.data, on_show_alert=show)) as engine:
        engine.execute_node_events("button-1", "onClick")
    assert slot.get() is None
"""

import copy
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from canvasflow.config import EngineSettings
from canvasflow.engine import Diagnostic, EventContext, EventEngine
from canvasflow.model import ProjectData

logger = logging.getLogger(__name__)


def runtime_nodes(project_data: ProjectData) -> dict[str, dict[str, Any]]:
    """Index the project's nodes by id as engine runtime records."""
    records: dict[str, dict[str, Any]] = {}
    for node in project_data.nodes:
        records[node.id] = {
            "label": node.data.label,
            "props": dict(node.data.props or {}),
            "events": list(node.data.events or []),
        }
    return records


def build_context(
    project_data: ProjectData,
    on_variable_change: Callable[[str, Any], None] | None = None,
    on_node_update: Callable[[str, dict[str, Any]], None] | None = None,
    on_show_alert: Callable[[str], None] | None = None,
    on_diagnostic: Callable[[Diagnostic], None] | None = None,
) -> EventContext:
    """Fresh session state seeded from the project's variables."""
    return EventContext(
        variables=copy.deepcopy(project_data.settings.variables),
        nodes=runtime_nodes(project_data),
        on_variable_change=on_variable_change,
        on_node_update=on_node_update,
        on_show_alert=on_show_alert,
        on_diagnostic=on_diagnostic,
    )


class EngineSlot:
    """Owner of the single live engine of one canvas host."""

    def __init__(self, name: str = "canvas", settings: EngineSettings | None = None):
        self.name = name
        self.settings = settings or EngineSettings()
        self._engine: EventEngine | None = None

    def initialize(self, context: EventContext) -> EventEngine:
        """Install a new engine for ``context``, replacing any current one.

        Nothing carries over from the replaced engine.
        """
        if self._engine is not None and self._engine.is_active:
            logger.info("Session %s: replacing active engine", self.name)
            self._engine.dispose()
        self._engine = EventEngine(context, settings=self.settings, name=self.name)
        logger.info(
            "Session %s: engine initialized with %d nodes and %d variables",
            self.name,
            len(context.nodes),
            len(context.variables),
        )
        return self._engine

    def get(self) -> EventEngine | None:
        if self._engine is None or not self._engine.is_active:
            return None
        return self._engine

    def reset(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        logger.info("Session %s: engine reset", self.name)

    def mount(self, context: EventContext) -> EventEngine | None:
        """Follow the canvas: an engine exists only while there are nodes."""
        if not context.nodes:
            self.reset()
            return None
        return self.initialize(context)

    @contextmanager
    def session(self, context: EventContext) -> Iterator[EventEngine]:
        engine = self.initialize(context)
        try:
            yield engine
        finally:
            if self._engine is engine:
                self.reset()
            else:
                engine.dispose()
