import datetime
import logging
import time
from typing import Any

from pydantic import ValidationError

from canvasflow.model import (
    NODE_TYPES,
    FlowEdge,
    FlowNode,
    NodeData,
    Position,
    Project,
    ProjectData,
    ProjectValidationError,
)

logger = logging.getLogger(__name__)

DEFAULT_LABELS: dict[str, str] = {
    "button": "Button",
    "text": "Text",
    "input": "Input",
}


class NodeNotFound(KeyError):
    def __init__(self, node_id: str, *args: object) -> None:
        self.node_id = node_id
        super().__init__(f"Node {node_id} is not part of the project")


class ProjectDocument:
    """In-memory editor state for one open project.

    Every mutation produces a freshly validated ``ProjectData`` and marks the
    document dirty until ``mark_saved`` is called after persisting.
    """

    def __init__(self, data: ProjectData, project: Project | None = None) -> None:
        self._data = data
        self.project = project
        self.has_unsaved_changes = False

    @classmethod
    def from_project(cls, project: Project) -> "ProjectDocument":
        return cls(project.data.model_copy(deep=True), project=project)

    @property
    def data(self) -> ProjectData:
        return self._data

    def _commit(self, **changes: Any) -> None:
        payload = {
            "nodes": self._data.nodes,
            "edges": self._data.edges,
            "settings": self._data.settings,
        }
        payload.update(changes)
        try:
            self._data = ProjectData(**payload)
        except ValidationError as exc:
            raise ProjectValidationError.from_pydantic(exc) from exc
        self.has_unsaved_changes = True

    def _index(self, node_id: str) -> int:
        for i, node in enumerate(self._data.nodes):
            if node.id == node_id:
                return i
        raise NodeNotFound(node_id)

    def create_node(
        self, node_type: str, position: tuple[float, float] | None = None
    ) -> FlowNode:
        """Add a new component with a default label and a time-based id."""
        if node_type not in NODE_TYPES:
            raise ProjectValidationError([f"type: unknown node type {node_type!r}"])
        existing = set(self._data.node_ids())
        node_id = f"{node_type}-{int(time.time() * 1000)}"
        suffix = 1
        while node_id in existing:
            node_id = f"{node_type}-{int(time.time() * 1000)}-{suffix}"
            suffix += 1
        x, y = position or (0.0, 0.0)
        node = FlowNode(
            id=node_id,
            type=node_type,  # type: ignore[arg-type]
            position=Position(x=x, y=y),
            data=NodeData(label=DEFAULT_LABELS[node_type], props={}),
        )
        self.add_node(node)
        return node

    def add_node(self, node: FlowNode) -> None:
        self._commit(nodes=[*self._data.nodes, node])
        logger.debug("Added node %s", node.id)

    def remove_node(self, node_id: str) -> None:
        """Drop a node and every edge touching it."""
        self._index(node_id)
        self._commit(
            nodes=[n for n in self._data.nodes if n.id != node_id],
            edges=[
                e
                for e in self._data.edges
                if e.source != node_id and e.target != node_id
            ],
        )
        logger.debug("Removed node %s", node_id)

    def update_node(self, node_id: str, **changes: Any) -> FlowNode:
        i = self._index(node_id)
        current = self._data.nodes[i].model_dump()
        current.update(changes)
        try:
            updated = FlowNode.model_validate(current)
        except ValidationError as exc:
            raise ProjectValidationError.from_pydantic(exc) from exc
        nodes = list(self._data.nodes)
        nodes[i] = updated
        self._commit(nodes=nodes)
        return updated

    def replace_nodes(self, nodes: list[FlowNode]) -> None:
        self._commit(nodes=list(nodes))

    def replace_edges(self, edges: list[FlowEdge]) -> None:
        self._commit(edges=list(edges))

    def update_settings(self, **partial: Any) -> None:
        current = self._data.settings.model_dump(by_alias=False)
        current.update(partial)
        self._commit(settings=current)

    def mark_saved(self) -> None:
        self.has_unsaved_changes = False
        if self.project is not None:
            self.project = self.project.model_copy(
                update={
                    "data": self._data.model_copy(deep=True),
                    "updated_at": datetime.datetime.now(datetime.timezone.utc),
                }
            )
