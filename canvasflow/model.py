import datetime
import uuid
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    model_validator,
)

NodeType = Literal["button", "text", "input"]
EventType = Literal["onClick", "onChange", "onSubmit"]
Theme = Literal["light", "dark"]

NODE_TYPES: tuple[str, ...] = ("button", "text", "input")
EVENT_TYPES: tuple[str, ...] = ("onClick", "onChange", "onSubmit")
ACTION_TYPES: tuple[str, ...] = ("setText", "setVariable", "showAlert")


class ProjectValidationError(ValueError):
    """Raised when a project payload does not match the persisted shape."""

    def __init__(self, issues: list[str], *args: object) -> None:
        self.issues = issues
        super().__init__("Invalid project data: " + "; ".join(issues), *args)

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "ProjectValidationError":
        issues = []
        for err in exc.errors():
            loc = ".".join(str(part) for part in err["loc"]) or "<root>"
            issues.append(f"{loc}: {err['msg']}")
        return cls(issues)


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


class ActionBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    target: str | None = None
    value: str


class SetTextAction(ActionBase):
    """Replace the label of ``target`` (or of the triggering node)."""

    type: Literal["setText"] = "setText"


class SetVariableAction(ActionBase):
    """Write ``value`` into the project variable named by ``target``."""

    type: Literal["setVariable"] = "setVariable"


class ShowAlertAction(ActionBase):
    """Ask the host to display ``value``."""

    type: Literal["showAlert"] = "showAlert"


EventAction = Annotated[
    Union[SetTextAction, SetVariableAction, ShowAlertAction],
    Field(discriminator="type"),
]

event_action_adapter: TypeAdapter[EventAction] = TypeAdapter(EventAction)


class NodeEvent(BaseModel):
    type: EventType
    action: EventAction


# ---------------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------------


class Position(BaseModel):
    x: float
    y: float


class NodeData(BaseModel):
    label: str
    props: dict[str, Any] | None = None
    events: list[NodeEvent] | None = None


class FlowNode(BaseModel):
    id: str
    type: NodeType
    position: Position
    data: NodeData


class FlowEdge(BaseModel):
    id: str
    source: str
    target: str
    type: str | None = None


class ProjectSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    theme: Theme = "light"
    preview_mode: bool = Field(False, alias="previewMode")
    variables: dict[str, Any] = Field(default_factory=dict)


class ProjectData(BaseModel):
    nodes: list[FlowNode] = Field(default_factory=list)
    edges: list[FlowEdge] = Field(default_factory=list)
    settings: ProjectSettings = Field(default_factory=ProjectSettings)

    @model_validator(mode="after")
    def _unique_node_ids(self) -> "ProjectData":
        seen: set[str] = set()
        duplicates: list[str] = []
        for node in self.nodes:
            if node.id in seen and node.id not in duplicates:
                duplicates.append(node.id)
            seen.add(node.id)
        if duplicates:
            raise ValueError(f"duplicate node ids: {', '.join(duplicates)}")
        return self

    def node(self, node_id: str) -> FlowNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def node_ids(self) -> list[str]:
        return [node.id for node in self.nodes]

    def dangling_edges(self) -> list[FlowEdge]:
        """Edges whose source or target is not a node of this graph."""
        ids = set(self.node_ids())
        return [e for e in self.edges if e.source not in ids or e.target not in ids]

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Project envelope
# ---------------------------------------------------------------------------


class Project(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str = Field(..., min_length=1)
    data: ProjectData
    created_at: datetime.datetime
    updated_at: datetime.datetime
    is_deleted: bool = False


class CreateProject(BaseModel):
    name: str = Field(..., min_length=1)
    data: ProjectData | None = None


class UpdateProject(BaseModel):
    name: str | None = Field(None, min_length=1)
    data: ProjectData | None = None


def new_project_data(
    theme: str = "light", variables: dict[str, Any] | None = None
) -> ProjectData:
    """Empty payload stored on project creation."""
    return ProjectData(
        settings=ProjectSettings(theme=theme, variables=dict(variables or {}))
    )


def validate_project_data(raw: Any) -> ProjectData:
    """Structurally validate a raw ``ProjectData`` payload.

    Missing settings fields, nodes and edges get their defaults. Raises
    ``ProjectValidationError`` for anything else (unknown node/event/action
    types, missing labels, duplicate node ids, malformed edges).
    """
    if isinstance(raw, ProjectData):
        return raw
    if not isinstance(raw, dict):
        raise ProjectValidationError(
            [f"<root>: expected an object, got {type(raw).__name__}"]
        )
    payload = dict(raw)
    payload.setdefault("settings", {})
    try:
        return ProjectData.model_validate(payload)
    except ValidationError as exc:
        raise ProjectValidationError.from_pydantic(exc) from exc


def validate_project(raw: Any) -> Project:
    try:
        return Project.model_validate(raw)
    except ValidationError as exc:
        raise ProjectValidationError.from_pydantic(exc) from exc
