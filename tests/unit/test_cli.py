"""Unit tests for the orgpilot command line."""

import asyncio
import io

import pytest

from orgpilot.api_client import APIError
from orgpilot.cli.main import build_parser, run, watch_view_mode
from orgpilot.models import OrgNode
from orgpilot.storage import MemoryStore, StorageBridge
from orgpilot.viewmode import ORG_VIEW, EventTarget, ViewModeStore, ViewModeSync


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    monkeypatch.setenv("ORGPILOT_ENV_PATH", str(tmp_path / "missing.env"))
    path = tmp_path / "orgpilot.yml"
    path.write_text(
        "\n".join(
            [
                "storage:",
                f"  cookie_path: {tmp_path / 'cookies.txt'}",
                f"  legacy_path: {tmp_path / 'local_storage.json'}",
            ]
        ),
        encoding="utf-8",
    )
    return path


@pytest.mark.unit
def test_view_mode_get_default(config_path):
    out = io.StringIO()
    assert run(["--config", str(config_path), "view-mode", "get", "org"], out=out) == 0
    assert out.getvalue() == "grid\n"


@pytest.mark.unit
def test_view_mode_set_then_get(config_path, tmp_path):
    assert run(["--config", str(config_path), "view-mode", "set", "task", "split"]) == 0

    out = io.StringIO()
    assert run(["--config", str(config_path), "view-mode", "get", "task"], out=out) == 0
    assert out.getvalue() == "split\n"
    assert "split" in (tmp_path / "local_storage.json").read_text(encoding="utf-8")


@pytest.mark.unit
def test_view_mode_set_illegal_value_is_usage_error(config_path, capsys):
    assert run(["--config", str(config_path), "view-mode", "set", "org", "table"]) == 2
    assert "Invalid view mode" in capsys.readouterr().err


@pytest.mark.unit
def test_unknown_feature_rejected_by_parser():
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args(["view-mode", "get", "calendar"])
    assert exc_info.value.code == 2


@pytest.mark.unit
def test_bad_base_url_is_usage_error(config_path):
    assert run(["--config", str(config_path), "--base-url", "org.test", "view-mode", "get", "org"]) == 2


@pytest.mark.unit
def test_reports_prints_rows(config_path, monkeypatch):
    reports = [
        OrgNode(id=43, full_name="Grace Report", title="Engineer"),
        OrgNode(id=44, full_name="Vacant", status="open"),
    ]

    async def fake_get_direct_reports(self, node_id, *, timeout=None):
        assert node_id == 42
        return reports

    monkeypatch.setattr("orgpilot.api_client.OrgAPIClient.get_direct_reports", fake_get_direct_reports)
    out = io.StringIO()

    assert run(["--config", str(config_path), "reports", "42"], out=out) == 0
    assert out.getvalue().splitlines() == ["43\tGrace Report\tEngineer", "44\tVacant\t[Open Position]"]


@pytest.mark.unit
def test_reports_api_error_exit_code(config_path, monkeypatch, capsys):
    async def failing(self, node_id, *, timeout=None):
        raise APIError("API request failed: 404", status_code=404, detail="Person not found")

    monkeypatch.setattr("orgpilot.api_client.OrgAPIClient.get_direct_reports", failing)

    assert run(["--config", str(config_path), "reports", "404"]) == 1
    assert "404" in capsys.readouterr().err


@pytest.mark.unit
@pytest.mark.asyncio
async def test_watch_prints_initial_and_polled_values():
    cookie, legacy = MemoryStore("cookie"), MemoryStore("local_storage")
    writer = ViewModeStore(StorageBridge(cookie, legacy), event_target=EventTarget())
    watcher = ViewModeStore(StorageBridge(cookie, legacy), event_target=EventTarget())
    sync = ViewModeSync(watcher, interval_s=0.01)
    shutdown = asyncio.Event()
    out = io.StringIO()

    task = asyncio.create_task(watch_view_mode(sync, ORG_VIEW, out, shutdown))
    await asyncio.sleep(0)
    writer.write(ORG_VIEW, "list")
    for _ in range(50):
        if "list" in out.getvalue():
            break
        await asyncio.sleep(0.01)
    shutdown.set()
    await task

    assert out.getvalue().splitlines() == ["org: grid", "org: list"]
