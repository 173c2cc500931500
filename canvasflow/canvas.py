"""Conversions between stored graph nodes and the canvas widget's nodes.

The canvas renders each component with a ``<type>Node`` renderer and keeps
the component type in ``data.componentType``. It also decorates nodes with
interaction state (selection, dragging, measured size, handle ids) that is
never persisted.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from canvasflow.model import (
    NODE_TYPES,
    FlowEdge,
    FlowNode,
    NodeData,
    Position,
    ProjectData,
)

_RENDERER_SUFFIX = "Node"


class CanvasNode(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    type: str = "default"
    position: Position
    data: dict[str, Any] = Field(default_factory=dict)


class CanvasEdge(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    source: str
    target: str
    type: str = "default"
    source_handle: str | None = Field(None, alias="sourceHandle")
    target_handle: str | None = Field(None, alias="targetHandle")


def renderer_for(node_type: str) -> str:
    if node_type in NODE_TYPES:
        return f"{node_type}{_RENDERER_SUFFIX}"
    return "default"


def to_canvas_node(node: FlowNode) -> CanvasNode:
    data = node.data.model_dump(mode="json", exclude_none=True)
    data["componentType"] = node.type
    return CanvasNode(
        id=node.id,
        type=renderer_for(node.type),
        position=node.position.model_copy(),
        data=data,
    )


def _component_type(canvas_node: CanvasNode) -> str:
    component_type = canvas_node.data.get("componentType")
    if component_type in NODE_TYPES:
        return component_type
    if canvas_node.type.endswith(_RENDERER_SUFFIX):
        stripped = canvas_node.type[: -len(_RENDERER_SUFFIX)]
        if stripped in NODE_TYPES:
            return stripped
    return "button"


def from_canvas_node(canvas_node: CanvasNode | dict[str, Any]) -> FlowNode:
    if not isinstance(canvas_node, CanvasNode):
        canvas_node = CanvasNode.model_validate(canvas_node)
    data = canvas_node.data
    return FlowNode(
        id=canvas_node.id,
        type=_component_type(canvas_node),  # type: ignore[arg-type]
        position=canvas_node.position.model_copy(),
        data=NodeData(
            label=data.get("label") or "",
            props=dict(data.get("props") or {}),
            events=list(data.get("events") or []),
        ),
    )


def to_canvas_edge(edge: FlowEdge) -> CanvasEdge:
    return CanvasEdge(
        id=edge.id,
        source=edge.source,
        target=edge.target,
        type=edge.type or "default",
    )


def from_canvas_edge(canvas_edge: CanvasEdge | dict[str, Any]) -> FlowEdge:
    if not isinstance(canvas_edge, CanvasEdge):
        canvas_edge = CanvasEdge.model_validate(canvas_edge)
    return FlowEdge(
        id=canvas_edge.id,
        source=canvas_edge.source,
        target=canvas_edge.target,
        type=canvas_edge.type,
    )


def project_to_canvas(data: ProjectData) -> tuple[list[CanvasNode], list[CanvasEdge]]:
    return (
        [to_canvas_node(n) for n in data.nodes],
        [to_canvas_edge(e) for e in data.edges],
    )


def canvas_to_project(
    nodes: list[CanvasNode | dict[str, Any]],
    edges: list[CanvasEdge | dict[str, Any]],
    base: ProjectData | None = None,
) -> ProjectData:
    """Rebuild a ``ProjectData`` from canvas state, keeping ``base`` settings."""
    settings = base.settings.model_copy(deep=True) if base else None
    payload: dict[str, Any] = {
        "nodes": [from_canvas_node(n) for n in nodes],
        "edges": [from_canvas_edge(e) for e in edges],
    }
    if settings is not None:
        payload["settings"] = settings
    return ProjectData(**payload)
