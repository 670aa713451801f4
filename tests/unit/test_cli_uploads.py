from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest
from typer.testing import CliRunner

from cli.app import build_app
from cli.commands import uploads as uploads_command
from cli.commands import workflow as workflow_command
from cli.commands.shared import parse_key_values

PNG_DATA_URL = "data:image/png;base64,iVBORw0KGgo="

runner = CliRunner()


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch) -> Path:
    path = tmp_path / "data"
    monkeypatch.setenv("STUDYMARK_DATA_DIR", str(path))
    return path


def _invoke(app, args: list[str], **kwargs):
    return runner.invoke(app, args, **kwargs)


def test_add_list_encode_remove_across_invocations(data_dir: Path, png_file: Path) -> None:
    added = _invoke(uploads_command.app, ["add", str(png_file), "--name", "作业 1.png"])
    assert added.exit_code == 0, added.output
    record = json.loads(added.stdout)["records"][0]
    assert record["file_name"] == f"{record['id']}-___1.png"
    assert (data_dir / "uploads_manifest.json").exists()

    listed = _invoke(uploads_command.app, ["list", "--json"])
    assert listed.exit_code == 0
    payload = json.loads(listed.stdout)
    assert [item["id"] for item in payload["uploads"]] == [record["id"]]
    assert payload["total_bytes"] == png_file.stat().st_size

    encoded = _invoke(uploads_command.app, ["encode"])
    assert encoded.exit_code == 0
    assert json.loads(encoded.stdout)[0]["data_url"] == PNG_DATA_URL

    removed = _invoke(uploads_command.app, ["remove", record["id"]])
    assert removed.exit_code == 0
    assert not Path(record["local_path"]).exists()

    listed = _invoke(uploads_command.app, ["list", "--json"])
    assert json.loads(listed.stdout)["uploads"] == []


def test_add_data_url_from_stdin(data_dir: Path) -> None:
    result = _invoke(uploads_command.app, ["add-data-url", "-"], input=PNG_DATA_URL + "\n")

    assert result.exit_code == 0, result.output
    record = json.loads(result.stdout)
    assert record["mime_type"] == "image/png"
    assert record["file_name"].endswith(".png")


def test_invalid_data_url_exits_with_error(data_dir: Path) -> None:
    result = _invoke(uploads_command.app, ["add-data-url", "data:,hello"])

    assert result.exit_code == 1
    assert "Unsupported data URL provided" in result.output


def test_failed_batch_leaves_nothing_behind(data_dir: Path, png_file: Path, tmp_path: Path) -> None:
    result = _invoke(
        uploads_command.app, ["add", str(png_file), str(tmp_path / "missing.png")]
    )

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert list((data_dir / "uploads").iterdir()) == []


def test_partial_batch_reports_failures(data_dir: Path, png_file: Path) -> None:
    result = _invoke(
        uploads_command.app, ["add", "--partial", str(png_file), "ftp://example.com/a.png"]
    )

    assert result.exit_code == 1
    outcome = json.loads(result.stdout)
    assert len(outcome["records"]) == 1
    assert outcome["failures"][0]["index"] == 1


def test_name_requires_single_source(data_dir: Path, png_file: Path) -> None:
    result = _invoke(
        uploads_command.app, ["add", str(png_file), str(png_file), "--name", "x.png"]
    )

    assert result.exit_code != 0


def test_encode_unknown_id(data_dir: Path) -> None:
    result = _invoke(uploads_command.app, ["encode", "ghost"])

    assert result.exit_code == 1
    assert "Upload ghost not found" in result.output


def test_mark_error_and_clear(data_dir: Path, png_file: Path) -> None:
    added = _invoke(uploads_command.app, ["add", str(png_file)])
    upload_id = json.loads(added.stdout)["records"][0]["id"]

    marked = _invoke(uploads_command.app, ["mark-error", upload_id, "看不清"])
    assert marked.exit_code == 0
    assert json.loads(marked.stdout)["status"] == "error"

    cleared = _invoke(uploads_command.app, ["clear", "--yes"])
    assert cleared.exit_code == 0
    assert json.loads(cleared.stdout) == {"cleared": 1}
    assert list((data_dir / "uploads").iterdir()) == []


def test_encode_writes_output_file(data_dir: Path, png_file: Path, tmp_path: Path) -> None:
    _invoke(uploads_command.app, ["add", str(png_file)])
    target = tmp_path / "out" / "payload.json"

    result = _invoke(uploads_command.app, ["encode", "--output", str(target)])

    assert result.exit_code == 0
    assert json.loads(target.read_text(encoding="utf-8"))[0]["mime_type"] == "image/png"


def test_workflow_run_without_configuration(data_dir: Path, png_file: Path) -> None:
    _invoke(uploads_command.app, ["add", str(png_file)])

    result = _invoke(workflow_command.app, ["run", "--student-id", "s-1"])

    assert result.exit_code == 1
    assert "Missing DIFY_API_URL" in result.output


def test_workflow_run_prints_result(data_dir: Path, png_file: Path, monkeypatch) -> None:
    monkeypatch.setenv("DIFY_API_URL", "https://dify.example.com")
    monkeypatch.setenv("DIFY_API_KEY", "k")
    monkeypatch.setenv("DIFY_WORKFLOW_ID", "wf")
    _invoke(uploads_command.app, ["add", str(png_file)])

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": {"correction_summary": "全对"}})

    real_client = httpx.AsyncClient

    def fake_client(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return real_client(*args, **kwargs)

    monkeypatch.setattr("workflow.client.httpx.AsyncClient", fake_client)

    result = _invoke(
        workflow_command.app,
        ["run", "--student-id", "s-1", "--meta", "grade=5"],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["correction_summary"] == "全对"
    assert "raw" not in payload


def test_root_app_version_and_help() -> None:
    app = build_app()

    version = _invoke(app, ["--version"])
    assert version.exit_code == 0
    assert version.stdout.strip()

    help_result = _invoke(app, ["uploads", "--help"])
    assert help_result.exit_code == 0
    assert "add-data-url" in help_result.output


def test_parse_key_values() -> None:
    assert parse_key_values(["a=1", "b=x", "c={\"k\": true}"], option="--meta") == {
        "a": 1,
        "b": "x",
        "c": {"k": True},
    }
