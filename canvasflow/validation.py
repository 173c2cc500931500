"""Static checks for project payloads.

Structural problems make a payload unusable and are reported as errors.
Wiring problems that the engine would silently skip at runtime (dangling
edges, actions aimed at nodes that do not exist) are reported as warnings
so they can be surfaced before a preview runs.

Example::

    from canvasflow.validation import check_project

    report = check_project(raw_payload)
    for issue in report.errors + report.warnings:
        print(issue)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from canvasflow.expressions import placeholders
from canvasflow.migration import migrate, unwrap_project_payload
from canvasflow.model import ProjectData, ProjectValidationError, validate_project_data

# Events a component can actually emit on the canvas.
EMITTED_EVENTS: dict[str, set[str]] = {
    "button": {"onClick"},
    "text": set(),
    "input": {"onChange", "onSubmit"},
}


@dataclass
class ValidationReport:
    data: ProjectData | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def wiring_warnings(data: ProjectData) -> list[str]:
    """Return wiring problems the engine would skip without telling anyone.

    Checks performed:
    - every edge connects two existing nodes
    - ``setText`` targets name an existing node
    - ``setVariable`` actions have a target
    - ``#{id}`` placeholders name an existing node
    - events are of a kind the component can emit
    """
    warnings: list[str] = []
    ids = set(data.node_ids())

    for edge in data.dangling_edges():
        missing = [end for end in (edge.source, edge.target) if end not in ids]
        warnings.append(f"edge {edge.id}: references unknown node(s) {', '.join(missing)}")

    for node in data.nodes:
        for i, event in enumerate(node.data.events or []):
            where = f"node {node.id} event #{i} ({event.type})"
            action = event.action
            if event.type not in EMITTED_EVENTS[node.type]:
                warnings.append(f"{where}: a {node.type} never emits {event.type}")
            if action.type == "setText" and action.target and action.target not in ids:
                warnings.append(f"{where}: setText target {action.target} does not exist")
            if action.type == "setVariable" and not action.target:
                warnings.append(f"{where}: setVariable has no target variable")
            for kind, name in placeholders(action.value) + placeholders(action.target or ""):
                if kind == "node" and name not in ids:
                    warnings.append(f"{where}: placeholder #{{{name}}} names no node")
    return warnings


def check_project(raw: Any) -> ValidationReport:
    """Migrate, validate and lint a raw payload.

    Accepts either a bare ``ProjectData`` payload or a stored project row
    carrying it under ``data``.
    """
    report = ValidationReport()
    try:
        report.data = validate_project_data(migrate(unwrap_project_payload(raw)))
    except ProjectValidationError as exc:
        report.errors.extend(exc.issues)
        return report
    report.warnings.extend(wiring_warnings(report.data))
    return report
