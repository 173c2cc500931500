"""
Unit tests for canvasflow.cli module.
"""
import json

import click
import pytest
from click.testing import CliRunner

from canvasflow.cli import cli, parse_trigger
from canvasflow.templates import get_template_data


@pytest.fixture
def runner(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    return CliRunner()


def write_project(tmp_path, payload, name="project.json"):
    path = tmp_path / name
    path.write_text(json.dumps(payload))
    return str(path)


class TestParseTrigger:
    def test_plain(self):
        assert parse_trigger("button-1:onClick") == ("button-1", "onClick", None)

    def test_with_value(self):
        assert parse_trigger("input-1:onChange=a=b") == ("input-1", "onChange", {"value": "a=b"})

    def test_empty_value(self):
        assert parse_trigger("input-1:onChange=") == ("input-1", "onChange", {"value": ""})

    @pytest.mark.parametrize("spec", ["button-1", ":onClick", "button-1:"])
    def test_malformed(self, spec):
        with pytest.raises(click.BadParameter):
            parse_trigger(spec)


class TestValidateCommand:
    def test_valid(self, runner, tmp_path, alert_project):
        path = write_project(tmp_path, alert_project.to_json_dict())
        result = runner.invoke(cli, ["validate", path])
        assert result.exit_code == 0
        assert "valid project (1 nodes)" in result.output

    def test_invalid(self, runner, tmp_path):
        path = write_project(tmp_path, {"nodes": [{"id": "a", "type": "slider"}]})
        result = runner.invoke(cli, ["validate", path])
        assert result.exit_code == 1

    def test_not_json(self, runner, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{nope")
        result = runner.invoke(cli, ["validate", str(path)])
        assert result.exit_code == 1


class TestMigrateCommand:
    def test_writes_output(self, runner, tmp_path):
        legacy = {
            "nodes": [
                {"id": "t1", "type": "text", "position": {"x": 0, "y": 0}, "data": {"text": "Hi"}}
            ]
        }
        src = write_project(tmp_path, {"id": "p", "data": legacy})
        out = tmp_path / "out.json"

        result = runner.invoke(cli, ["migrate", src, "-o", str(out)])

        assert result.exit_code == 0
        migrated = json.loads(out.read_text())
        assert migrated["nodes"][0]["data"] == {"label": "text-t1", "props": {"text": "Hi"}}
        assert migrated["settings"]["theme"] == "light"


class TestTemplateCommands:
    def test_list(self, runner):
        result = runner.invoke(cli, ["templates"])
        assert result.exit_code == 0
        assert "hello-world" in result.output
        assert "interactive-demo" in result.output

    def test_dump(self, runner):
        result = runner.invoke(cli, ["template", "hello-world"])
        assert result.exit_code == 0
        assert json.loads(result.output) == get_template_data("hello-world").to_json_dict()

    def test_unknown(self, runner):
        result = runner.invoke(cli, ["template", "nope"])
        assert result.exit_code == 1


class TestPreviewCommand:
    def test_runs_triggers(self, runner, tmp_path):
        path = write_project(tmp_path, get_template_data("form-example").to_json_dict())

        result = runner.invoke(
            cli,
            ["preview", path, "-t", "input-1:onChange=Ada", "-t", "button-1:onClick"],
        )

        assert result.exit_code == 0
        assert "alert: Signed up!" in result.output
        summary = json.loads(result.output[result.output.index("{"):])
        assert summary["nodeValues"]["input-1"] == "Ada"
        assert summary["variables"]["userName"] == "input_value"

    def test_interpolate_flag(self, runner, tmp_path, alert_project):
        payload = alert_project.to_json_dict()
        payload["nodes"][0]["data"]["events"][0]["action"]["value"] = "Hi ${who}"
        payload["settings"]["variables"] = {"who": "Ada"}
        path = write_project(tmp_path, payload)

        result = runner.invoke(cli, ["preview", path, "--interpolate", "-t", "b1:onClick"])

        assert result.exit_code == 0
        assert "alert: Hi Ada" in result.output
