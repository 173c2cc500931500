"""Upgrade project payloads saved under older, flatter shapes.

Early editor builds stored presentation settings directly on the node's
``data`` object and did not always write a ``label``. ``migrate`` rewrites
such payloads into the current ``ProjectData`` shape on a best-effort
basis instead of rejecting them. Migrating current data returns an equal
payload, so it is safe to run on every load.
"""

import copy
import logging
from typing import Any

from canvasflow.model import NODE_TYPES, ProjectData, validate_project_data

logger = logging.getLogger(__name__)

# Fields that belong under ``data.props`` but were once stored on ``data``.
PRESENTATION_FIELDS: tuple[str, ...] = (
    "text",
    "fontSize",
    "color",
    "fontWeight",
    "placeholder",
    "type",
    "required",
    "variant",
)

# Keys of ``data`` that are part of the current schema.
_NODE_DATA_KEYS = {"label", "props", "events"}


def _migrate_node(raw_node: Any) -> Any:
    if not isinstance(raw_node, dict):
        return raw_node
    node = dict(raw_node)

    node_type = node.get("type")
    if (
        isinstance(node_type, str)
        and node_type not in NODE_TYPES
        and node_type.endswith("Node")
        and node_type[: -len("Node")] in NODE_TYPES
    ):
        node["type"] = node_type[: -len("Node")]

    data = node.get("data")
    data = dict(data) if isinstance(data, dict) else {}

    component_type = data.pop("componentType", None)
    if node.get("type") not in NODE_TYPES and component_type in NODE_TYPES:
        node["type"] = component_type
    elif component_type is not None and component_type not in NODE_TYPES:
        logger.info(
            "Node %s: dropping unknown componentType %r", node.get("id"), component_type
        )

    props = data.get("props")
    props = dict(props) if isinstance(props, dict) else {}
    moved = False
    for field in PRESENTATION_FIELDS:
        if field in data:
            value = data.pop(field)
            props.setdefault(field, value)
            moved = True
    if moved or "props" in data:
        data["props"] = props

    if data.get("label") is None:
        data["label"] = f"{node.get('type')}-{node.get('id')}"

    node["data"] = data
    return node


def migrate(raw: Any) -> dict[str, Any]:
    """Return ``raw`` rewritten into the current ``ProjectData`` shape.

    The input is never mutated.
    """
    if isinstance(raw, ProjectData):
        return raw.to_json_dict()
    source = copy.deepcopy(raw) if isinstance(raw, dict) else {}

    result: dict[str, Any] = {}
    if not isinstance(source.get("nodes"), list):
        result["nodes"] = []
        result["edges"] = []
    else:
        result["nodes"] = [_migrate_node(n) for n in source["nodes"]]
        edges = source.get("edges")
        result["edges"] = edges if isinstance(edges, list) else []

    settings = source.get("settings")
    result["settings"] = settings if isinstance(settings, dict) else {}

    for key, value in source.items():
        result.setdefault(key, value)

    if result != source:
        logger.info(
            "Migrated project data to current shape (%d nodes)", len(result["nodes"])
        )
    return result


def unwrap_project_payload(raw: Any) -> Any:
    """Return the ``ProjectData`` part of a stored project row, or ``raw`` itself."""
    if isinstance(raw, dict) and isinstance(raw.get("data"), dict) and "nodes" not in raw:
        return raw["data"]
    return raw


def load_project_data(raw: Any) -> ProjectData:
    """Migrate then validate a stored payload."""
    return validate_project_data(migrate(raw))
