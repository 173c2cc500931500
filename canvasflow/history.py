import datetime
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class HistoryEntry(BaseModel):
    action: str
    timestamp: datetime.datetime = Field(default_factory=_now)
    data: Any = None


class PreviewSnapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    node_values: dict[str, Any] = Field(default_factory=dict, alias="nodeValues")
    variables: dict[str, Any] = Field(default_factory=dict)
    exported_at: datetime.datetime | None = Field(None, alias="exportedAt")


class PreviewRecorder:
    """Append-only log of what happened during a preview, for the debug panel.

    Besides the history it keeps its own copy of node values and variables,
    independent of the engine that produced them.
    """

    def __init__(
        self,
        node_ids: Iterable[str] = (),
        clock: Callable[[], datetime.datetime] = _now,
    ) -> None:
        self._clock = clock
        self.node_values: dict[str, Any] = {node_id: "" for node_id in node_ids}
        self.variables: dict[str, Any] = {}
        self.history: list[HistoryEntry] = []

    def record(self, action: str, data: Any = None) -> HistoryEntry:
        entry = HistoryEntry(action=action, timestamp=self._clock(), data=data)
        self.history.append(entry)
        logger.debug("Preview history: %s", action)
        return entry

    def update_node_value(self, node_id: str, value: Any) -> None:
        self.node_values[node_id] = value
        self.record(f"Node {node_id} value updated", {"nodeId": node_id, "value": value})

    def update_variable(self, name: str, value: Any) -> None:
        self.variables[name] = value
        self.record(f"Variable {name} updated", {"name": name, "value": value})

    def reconcile(self, node_ids: Iterable[str]) -> bool:
        """Re-key node values to the canvas' current node ids.

        Values of surviving ids are kept and new ids start empty. Returns
        False when the id set did not change.
        """
        ids = list(node_ids)
        if set(ids) == set(self.node_values) and len(ids) == len(self.node_values):
            return False
        self.node_values = {node_id: self.node_values.get(node_id, "") for node_id in ids}
        self.record("Node configuration changed", {"nodeCount": len(ids)})
        return True

    def reset(self, node_ids: Iterable[str] | None = None) -> None:
        ids = list(self.node_values) if node_ids is None else list(node_ids)
        self.node_values = {node_id: "" for node_id in ids}
        self.variables = {}
        self.history = []
        self.record("Preview data reset", {"nodeCount": len(ids)})

    def export_data(self) -> dict[str, Any]:
        snapshot = PreviewSnapshot(
            node_values=dict(self.node_values),
            variables=dict(self.variables),
            exported_at=self._clock(),
        )
        return snapshot.model_dump(mode="json", by_alias=True)

    def import_data(self, data: Mapping[str, Any]) -> None:
        snapshot = PreviewSnapshot.model_validate(data)
        if "nodeValues" in data or "node_values" in data:
            self.node_values = dict(snapshot.node_values)
        if "variables" in data:
            self.variables = dict(snapshot.variables)
        self.record("Data imported", dict(data))

    def bind(
        self,
        on_variable_change: Callable[[str, Any], None] | None = None,
        on_node_update: Callable[[str, dict[str, Any]], None] | None = None,
        on_show_alert: Callable[[str], None] | None = None,
    ) -> dict[str, Callable[..., None]]:
        """Engine callbacks that record into this recorder, then forward to the host.

        The result is meant to be splatted into ``build_context``.
        """

        def _variable_changed(name: str, value: Any) -> None:
            self.update_variable(name, value)
            if on_variable_change is not None:
                on_variable_change(name, value)

        def _node_updated(node_id: str, updates: dict[str, Any]) -> None:
            if "value" in updates:
                self.update_node_value(node_id, updates["value"])
            else:
                self.record(f"Node {node_id} updated", {"nodeId": node_id, **updates})
            if on_node_update is not None:
                on_node_update(node_id, updates)

        def _alert_shown(message: str) -> None:
            self.record("Alert shown", {"message": message})
            if on_show_alert is not None:
                on_show_alert(message)

        return {
            "on_variable_change": _variable_changed,
            "on_node_update": _node_updated,
            "on_show_alert": _alert_shown,
        }
