"""Starter projects offered when creating a new project."""

from typing import Any

from pydantic import BaseModel

from canvasflow.model import ProjectData


class TemplateNotFound(KeyError):
    def __init__(self, template_id: str, *args: object) -> None:
        self.template_id = template_id
        super().__init__(f"No template named {template_id!r}")


class Template(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    components: int
    data: ProjectData


def _text(node_id: str, x: float, y: float, label: str, **props: Any) -> dict[str, Any]:
    return {
        "id": node_id,
        "type": "text",
        "position": {"x": x, "y": y},
        "data": {"label": label, "props": props},
    }


def _on(event_type: str, action_type: str, value: str, target: str | None = None):
    action: dict[str, Any] = {"type": action_type, "value": value}
    if target is not None:
        action["target"] = target
    return {"type": event_type, "action": action}


_TEMPLATES: dict[str, dict[str, Any]] = {
    "hello-world": {
        "name": "Hello World",
        "description": "A text and a button that greets you.",
        "icon": "👋",
        "data": {
            "nodes": [
                _text(
                    "text-1", 100, 100, "Hello World text",
                    text="Hello, World!", fontSize=24, color="#000000", fontWeight="bold",
                ),
                {
                    "id": "button-1",
                    "type": "button",
                    "position": {"x": 100, "y": 200},
                    "data": {
                        "label": "Click button",
                        "props": {"text": "Click me", "variant": "primary"},
                        "events": [_on("onClick", "showAlert", "Hello, World!")],
                    },
                },
            ],
            "edges": [],
            "settings": {"theme": "light", "previewMode": False, "variables": {}},
        },
    },
    "form-example": {
        "name": "Sign-up form",
        "description": "Inputs that store what you type in variables.",
        "icon": "📝",
        "data": {
            "nodes": [
                _text(
                    "text-1", 100, 50, "Title",
                    text="Sign up", fontSize=20, color="#000000", fontWeight="bold",
                ),
                {
                    "id": "input-1",
                    "type": "input",
                    "position": {"x": 100, "y": 120},
                    "data": {
                        "label": "Name input",
                        "props": {
                            "placeholder": "Enter your name",
                            "type": "text",
                            "required": True,
                        },
                        "events": [
                            _on("onChange", "setVariable", "input_value", target="userName")
                        ],
                    },
                },
                {
                    "id": "input-2",
                    "type": "input",
                    "position": {"x": 100, "y": 200},
                    "data": {
                        "label": "Email input",
                        "props": {
                            "placeholder": "Enter your email address",
                            "type": "email",
                            "required": True,
                        },
                        "events": [
                            _on("onChange", "setVariable", "input_value", target="userEmail")
                        ],
                    },
                },
                {
                    "id": "button-1",
                    "type": "button",
                    "position": {"x": 100, "y": 280},
                    "data": {
                        "label": "Submit button",
                        "props": {"text": "Sign up", "variant": "primary"},
                        "events": [_on("onClick", "showAlert", "Signed up!")],
                    },
                },
            ],
            "edges": [],
            "settings": {
                "theme": "light",
                "previewMode": False,
                "variables": {"userName": "", "userEmail": ""},
            },
        },
    },
    "interactive-demo": {
        "name": "Counter",
        "description": "Buttons that change a counter variable.",
        "icon": "🔢",
        "data": {
            "nodes": [
                _text(
                    "text-1", 100, 50, "Title",
                    text="Counter app", fontSize=20, color="#000000", fontWeight="bold",
                ),
                _text(
                    "text-2", 100, 120, "Counter display",
                    text="0", fontSize=32, color="#0066cc", fontWeight="bold",
                ),
                {
                    "id": "button-1",
                    "type": "button",
                    "position": {"x": 50, "y": 200},
                    "data": {
                        "label": "Decrement button",
                        "props": {"text": "-", "variant": "secondary"},
                        "events": [_on("onClick", "setVariable", "-1", target="counter")],
                    },
                },
                {
                    "id": "button-2",
                    "type": "button",
                    "position": {"x": 120, "y": 200},
                    "data": {
                        "label": "Increment button",
                        "props": {"text": "+", "variant": "primary"},
                        "events": [_on("onClick", "setVariable", "1", target="counter")],
                    },
                },
                {
                    "id": "button-3",
                    "type": "button",
                    "position": {"x": 190, "y": 200},
                    "data": {
                        "label": "Reset button",
                        "props": {"text": "Reset", "variant": "ghost"},
                        "events": [_on("onClick", "setVariable", "0", target="counter")],
                    },
                },
                _text(
                    "text-3", 100, 280, "Description",
                    text="Press the buttons to change the counter",
                    fontSize=14, color="#666666", fontWeight="normal",
                ),
            ],
            "edges": [],
            "settings": {"theme": "light", "previewMode": False, "variables": {"counter": 0}},
        },
    },
}


def get_template_data(template_id: str) -> ProjectData:
    try:
        template = _TEMPLATES[template_id]
    except KeyError:
        raise TemplateNotFound(template_id) from None
    return ProjectData.model_validate(template["data"])


def list_templates() -> list[Template]:
    result = []
    for template_id, template in _TEMPLATES.items():
        data = get_template_data(template_id)
        result.append(
            Template(
                id=template_id,
                name=template["name"],
                description=template["description"],
                icon=template["icon"],
                components=len(data.nodes),
                data=data,
            )
        )
    return result
