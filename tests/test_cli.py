import json
import runpy
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

from adapters.json_exporter import export_response_json
from cli.main import app
from core.services.response_assembler import AssembledResponse

runner = CliRunner()


def test_analyze_rejects_invalid_handle_without_network(monkeypatch):
    monkeypatch.setenv("COGSEC_AI_API_KEY", "test")
    result = runner.invoke(app, ["analyze", "not a handle!", "--json"])

    assert result.exit_code == 1
    assert "Invalid username" in json.loads(result.stdout)["error"]


def test_export_response_json(tmp_path):
    response = AssembledResponse(200, {"x": 1, "y": 2, "explanation": "ok"})
    path = export_response_json(identifier="jack", response=response, output_path=tmp_path / "out" / "jack.json")

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload == {"username": "jack", "status_code": 200, "body": {"x": 1, "y": 2, "explanation": "ok"}}


def test_checkout_entry_point_runs_the_cli(capsys, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["main.py"])
    namespace = runpy.run_path(str(Path(__file__).resolve().parents[1] / "main.py"))

    with pytest.raises(SystemExit) as excinfo:
        namespace["main"](["--help"])

    assert excinfo.value.code == 0
    assert "analyze" in capsys.readouterr().out
