"""Runtime interpreter for the events configured on canvas nodes.

An ``EventEngine`` holds the variable store and the per-node runtime records
of one mounted canvas. The host calls ``execute_node_events`` whenever the
user clicks, types into or submits a node; matching events run in
declaration order and their effects are reported back through the
callbacks bound on the ``EventContext``.

Misconfigured events never interrupt a session: unresolvable targets and
unknown action kinds are logged at warning level, failing host callbacks
are logged with their traceback, and all of them are reported to the
optional ``on_diagnostic`` hook and skipped.
"""

import dataclasses
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ValidationError

from canvasflow.config import EngineSettings
from canvasflow.expressions import interpolate
from canvasflow.model import (
    ACTION_TYPES,
    EVENT_TYPES,
    ActionBase,
    EventAction,
    NodeEvent,
    SetTextAction,
    SetVariableAction,
    ShowAlertAction,
    event_action_adapter,
)
from canvasflow.tracing import _NoopTracer, make_tracer

logger = logging.getLogger(__name__)

DiagnosticKind = Literal[
    "missing_target",
    "unknown_node",
    "unknown_action",
    "invalid_action",
    "invalid_event",
    "unknown_event_type",
    "callback_error",
    "disposed",
]


class Diagnostic(BaseModel):
    """Why an action or event silently did nothing."""

    kind: DiagnosticKind
    message: str
    node_id: str | None = None
    detail: dict[str, Any] = {}


class EngineDisposedError(RuntimeError):
    def __init__(self, operation: str, *args: object) -> None:
        self.operation = operation
        super().__init__(f"Cannot call {operation}() on a disposed event engine")


@dataclass
class EventContext:
    variables: dict[str, Any] = field(default_factory=dict)
    # node id -> runtime record: NodeData fields plus an ephemeral "value"
    nodes: dict[str, dict[str, Any]] = field(default_factory=dict)
    on_variable_change: Callable[[str, Any], None] | None = None
    on_node_update: Callable[[str, dict[str, Any]], None] | None = None
    on_show_alert: Callable[[str], None] | None = None
    on_diagnostic: Callable[[Diagnostic], None] | None = None


def _field_of(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _has_field(obj: Any, name: str) -> bool:
    if isinstance(obj, Mapping):
        return name in obj
    return hasattr(obj, name)


def _as_record(obj: Any) -> dict[str, Any]:
    """Plain-dict copy of a runtime record held as a mapping or a model."""
    if obj is None:
        return {}
    if isinstance(obj, Mapping):
        return dict(obj)
    if isinstance(obj, BaseModel):
        return obj.model_dump()
    return dict(vars(obj))


class EventEngine:
    def __init__(
        self,
        context: EventContext,
        settings: EngineSettings | None = None,
        name: str = "canvas",
        tracer: Any = None,
    ) -> None:
        self._context = context
        self.settings = settings or EngineSettings()
        self.name = name
        self.lifecycle: Literal["active", "disposed"] = "active"
        if tracer is None:
            tracer = make_tracer(name, self.settings.enable_tracing)
        self._tracer = tracer
        self._span: Any = None

    def __repr__(self) -> str:
        return f"EventEngine(name={self.name!r}, lifecycle={self.lifecycle!r})"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.lifecycle == "active"

    def dispose(self) -> None:
        """Release the context; every later call is a no-op or an error."""
        if self.lifecycle == "disposed":
            return
        self.lifecycle = "disposed"
        self._context = EventContext()
        self._tracer = _NoopTracer()

    def _require_active(self, operation: str) -> None:
        if self.lifecycle == "disposed":
            raise EngineDisposedError(operation)

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    def update_context(
        self, partial: Mapping[str, Any] | None = None, **changes: Any
    ) -> None:
        """Shallow-merge fields into the held context; last write wins."""
        self._require_active("update_context")
        merged = dict(partial or {})
        merged.update(changes)
        self._context = dataclasses.replace(self._context, **merged)

    def get_variable(self, name: str) -> Any:
        self._require_active("get_variable")
        return self._context.variables.get(name)

    def set_variable(self, name: str, value: Any) -> None:
        self._require_active("set_variable")
        self._context.variables[name] = value
        if self._context.on_variable_change is not None:
            self._context.on_variable_change(name, value)

    def get_node_value(self, node_id: str) -> Any:
        self._require_active("get_node_value")
        record = self._context.nodes.get(node_id)
        if record is None:
            return None
        return _field_of(record, "value")

    def set_node_value(self, node_id: str, value: Any) -> None:
        self._require_active("set_node_value")
        current = _as_record(self._context.nodes.get(node_id))
        self._context.nodes[node_id] = {**current, "value": value}
        if self._context.on_node_update is not None:
            self._context.on_node_update(node_id, {"value": value})

    def set_node_text(self, node_id: str, text: str) -> None:
        self._require_active("set_node_text")
        current = _as_record(self._context.nodes.get(node_id))
        self._context.nodes[node_id] = {**current, "label": text}
        if self._context.on_node_update is not None:
            self._context.on_node_update(node_id, {"label": text})

    def show_alert(self, message: str) -> None:
        self._require_active("show_alert")
        if self._context.on_show_alert is not None:
            self._context.on_show_alert(message)

    def node_values(self) -> dict[str, Any]:
        """Runtime values of the nodes that have one recorded."""
        self._require_active("node_values")
        return {
            node_id: _field_of(record, "value")
            for node_id, record in self._context.nodes.items()
            if _has_field(record, "value")
        }

    def evaluate_expression(self, expression: str) -> str:
        self._require_active("evaluate_expression")
        return interpolate(expression, self._context.variables, self.node_values())

    def get_debug_info(self) -> EventContext:
        return dataclasses.replace(
            self._context,
            variables=dict(self._context.variables),
            nodes=dict(self._context.nodes),
        )

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _skip(
        self,
        kind: DiagnosticKind,
        message: str,
        node_id: str | None = None,
        exc_info: bool = False,
        **detail: Any,
    ) -> None:
        if kind == "callback_error":
            logger.exception(message)
        else:
            logger.warning(message, exc_info=exc_info)
        self._tracer.record_skip(self._span, kind, message)
        hook = self._context.on_diagnostic
        if hook is None:
            return
        try:
            hook(Diagnostic(kind=kind, message=message, node_id=node_id, detail=detail))
        except Exception as e:
            logger.warning("Diagnostic hook raised, continuing: %s", e)

    def _coerce_action(
        self, action: Any, source_node_id: str | None
    ) -> EventAction | None:
        if isinstance(action, ActionBase):
            return action  # type: ignore[return-value]
        action_type = _field_of(action, "type")
        if action_type not in ACTION_TYPES:
            self._skip(
                "unknown_action",
                f"Unknown action type: {action_type}",
                node_id=source_node_id,
                action_type=action_type,
            )
            return None
        try:
            return event_action_adapter.validate_python(
                action, from_attributes=not isinstance(action, Mapping)
            )
        except ValidationError as exc:
            self._skip(
                "invalid_action",
                f"Malformed {action_type} action on node {source_node_id}: "
                f"{exc.error_count()} validation error(s)",
                node_id=source_node_id,
                errors=exc.errors(include_url=False),
            )
            return None

    def _interpolated(self, action: EventAction) -> EventAction:
        updates: dict[str, Any] = {"value": self.evaluate_expression(action.value)}
        if action.target is not None:
            updates["target"] = self.evaluate_expression(action.target)
        return action.model_copy(update=updates)

    def execute_action(self, action: Any, source_node_id: str | None = None) -> None:
        """Run one action; never raises."""
        if not self.is_active:
            logger.warning("Ignoring action on disposed engine %s", self.name)
            return
        try:
            parsed = self._coerce_action(action, source_node_id)
            if parsed is None:
                return
            if self.settings.interpolate_actions:
                parsed = self._interpolated(parsed)

            if isinstance(parsed, SetTextAction):
                target = parsed.target or source_node_id
                if not target:
                    self._skip(
                        "missing_target", "setText action has no target and no source node"
                    )
                    return
                if target not in self._context.nodes:
                    self._skip(
                        "unknown_node",
                        f"setText target node {target} does not exist",
                        node_id=source_node_id,
                        target=target,
                    )
                    return
                self.set_node_text(target, parsed.value)
            elif isinstance(parsed, SetVariableAction):
                if not parsed.target:
                    self._skip(
                        "missing_target",
                        f"setVariable action on node {source_node_id} has no target",
                        node_id=source_node_id,
                    )
                    return
                self.set_variable(parsed.target, parsed.value)
            elif isinstance(parsed, ShowAlertAction):
                self.show_alert(parsed.value)
            else:
                self._skip(
                    "unknown_action",
                    f"Unknown action type: {type(parsed).__name__}",
                    node_id=source_node_id,
                )
        except Exception as e:
            self._skip(
                "callback_error",
                f"Error executing action on node {source_node_id}: {e}",
                node_id=source_node_id,
                exc_info=True,
            )

    def execute_event(
        self,
        event: NodeEvent | Mapping[str, Any],
        source_node_id: str,
        event_data: Mapping[str, Any] | None = None,
    ) -> None:
        """Run one configured event; never raises.

        ``onChange`` events first copy ``event_data["value"]`` into the source
        node's runtime value, whatever the configured action does.
        """
        if not self.is_active:
            logger.warning("Ignoring event on disposed engine %s", self.name)
            return
        event_type = _field_of(event, "type")
        if event_type not in EVENT_TYPES:
            self._skip(
                "invalid_event",
                f"Unknown event type {event_type} on node {source_node_id}",
                node_id=source_node_id,
                event_type=event_type,
            )
            return
        logger.debug("Executing %s event on node %s", event_type, source_node_id)

        if event_type == "onChange" and event_data is not None and "value" in event_data:
            try:
                self.set_node_value(source_node_id, event_data["value"])
            except Exception as e:
                self._skip(
                    "callback_error",
                    f"Error mirroring input value of node {source_node_id}: {e}",
                    node_id=source_node_id,
                    exc_info=True,
                )

        action = _field_of(event, "action")
        if action is None:
            self._skip(
                "invalid_event",
                f"{event_type} event on node {source_node_id} has no action",
                node_id=source_node_id,
            )
            return
        self.execute_action(action, source_node_id)

    def execute_node_events(
        self,
        node_id: str,
        event_type: str,
        event_data: Mapping[str, Any] | None = None,
    ) -> int:
        """Run every event of ``node_id`` whose type is ``event_type``.

        Matches run synchronously in declaration order. Returns how many
        events matched; never raises.
        """
        if not self.is_active:
            logger.warning(
                "Ignoring %s on node %s: engine %s is disposed",
                event_type,
                node_id,
                self.name,
            )
            return 0
        if event_type not in EVENT_TYPES:
            self._skip(
                "unknown_event_type",
                f"Unknown event type {event_type} triggered on node {node_id}",
                node_id=node_id,
            )
            return 0

        outer_span = self._span
        with self._tracer.node_event(node_id, event_type) as span:
            self._span = span
            try:
                return self._dispatch(node_id, event_type, event_data)
            finally:
                self._span = outer_span

    def _dispatch(
        self,
        node_id: str,
        event_type: str,
        event_data: Mapping[str, Any] | None,
    ) -> int:
        record = self._context.nodes.get(node_id)
        if record is None:
            self._skip(
                "unknown_node",
                f"{event_type} triggered on unknown node {node_id}",
                node_id=node_id,
            )
            return 0
        events = _field_of(record, "events") or []
        if not isinstance(events, (list, tuple)):
            self._skip(
                "invalid_event",
                f"Events of node {node_id} are not a list",
                node_id=node_id,
            )
            return 0

        matching = [e for e in events if _field_of(e, "type") == event_type]
        for event in matching:
            try:
                self.execute_event(event, node_id, event_data)
            except Exception as e:
                self._skip(
                    "callback_error",
                    f"Error executing {event_type} event on node {node_id}: {e}",
                    node_id=node_id,
                    exc_info=True,
                )
        self._tracer.record_matched(self._span, len(matching))
        return len(matching)
