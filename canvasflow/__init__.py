"""
canvasflow - event engine for a no-code visual programming canvas

Components placed on a canvas (buttons, texts, inputs) carry simple event
configurations. canvasflow validates and migrates the stored project graph,
interprets the configured events against a per-session variable store, and
records a preview history for debugging.
"""

__version__ = "0.1.0"

# Project graph
from canvasflow.model import (
    CreateProject,
    EventAction,
    FlowEdge,
    FlowNode,
    NodeData,
    NodeEvent,
    Position,
    Project,
    ProjectData,
    ProjectSettings,
    ProjectValidationError,
    SetTextAction,
    SetVariableAction,
    ShowAlertAction,
    UpdateProject,
    new_project_data,
    validate_project,
    validate_project_data,
)
from canvasflow.migration import load_project_data, migrate
from canvasflow.canvas import (
    CanvasEdge,
    CanvasNode,
    canvas_to_project,
    from_canvas_edge,
    from_canvas_node,
    project_to_canvas,
    to_canvas_edge,
    to_canvas_node,
)
from canvasflow.project import NodeNotFound, ProjectDocument
from canvasflow.templates import Template, TemplateNotFound, get_template_data, list_templates

# Runtime
from canvasflow.expressions import interpolate
from canvasflow.engine import Diagnostic, EngineDisposedError, EventContext, EventEngine
from canvasflow.session import EngineSlot, build_context, runtime_nodes
from canvasflow.history import HistoryEntry, PreviewRecorder

# Configuration
from canvasflow.config import EngineSettings, load_canvasflow_toml, load_settings

# Tracing
from canvasflow.tracing import CanvasflowTracer

# Testing
from canvasflow.testing import PreviewHarness

# Validation
from canvasflow.validation import ValidationReport, check_project, wiring_warnings

__all__ = [
    "__version__",
    # Project graph
    "CreateProject",
    "EventAction",
    "FlowEdge",
    "FlowNode",
    "NodeData",
    "NodeEvent",
    "Position",
    "Project",
    "ProjectData",
    "ProjectSettings",
    "ProjectValidationError",
    "SetTextAction",
    "SetVariableAction",
    "ShowAlertAction",
    "UpdateProject",
    "new_project_data",
    "validate_project",
    "validate_project_data",
    "load_project_data",
    "migrate",
    "CanvasEdge",
    "CanvasNode",
    "canvas_to_project",
    "from_canvas_edge",
    "from_canvas_node",
    "project_to_canvas",
    "to_canvas_edge",
    "to_canvas_node",
    "NodeNotFound",
    "ProjectDocument",
    "Template",
    "TemplateNotFound",
    "get_template_data",
    "list_templates",
    # Runtime
    "interpolate",
    "Diagnostic",
    "EngineDisposedError",
    "EventContext",
    "EventEngine",
    "EngineSlot",
    "build_context",
    "runtime_nodes",
    "HistoryEntry",
    "PreviewRecorder",
    # Configuration
    "EngineSettings",
    "load_canvasflow_toml",
    "load_settings",
    # Tracing
    "CanvasflowTracer",
    # Testing
    "PreviewHarness",
    # Validation
    "ValidationReport",
    "check_project",
    "wiring_warnings",
]
