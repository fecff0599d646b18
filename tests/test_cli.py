"""Tests for the CLI commands and console output contract."""

import json
import re
from datetime import datetime

import pytest

from conftest import PROJECT_ID, FakeDlpService
from dlp_cli import cli
from dlp_cli.sdk import StoredInfoTypeClient

DATE_PATTERN = re.compile(r"Created: \d{1,2}/\d{1,2}/\d{4}, \d{1,2}:\d{2}:\d{2} (AM|PM)")


@pytest.fixture
def run(monkeypatch, fake_service: FakeDlpService, capsys):
    """Run the CLI in-process against the fake service; returns (exit_code, stdout)."""

    def factory(project_id: str) -> StoredInfoTypeClient:
        return StoredInfoTypeClient(project_id, service=fake_service)

    monkeypatch.setattr(cli, "StoredInfoTypeClient", factory)

    def _run(*args: str) -> tuple[int, str]:
        try:
            cli.main(["-c", PROJECT_ID, *args])
            code = 0
        except SystemExit as e:
            code = e.code or 0
        return code, capsys.readouterr().out

    return _run


class TestFormatDate:
    def test_matches_locale_pattern(self):
        assert re.fullmatch(r"\d{1,2}/\d{1,2}/\d{4}, \d{1,2}:\d{2}:\d{2} (AM|PM)", cli.format_date(1546344000))

    def test_uses_local_time(self):
        local = datetime.fromtimestamp(0)
        assert cli.format_date(0).startswith(f"{local.month}/{local.day}/{local.year}, ")

    def test_twelve_hour_clock(self):
        midnight = datetime(2020, 3, 4, 0, 5, 9).timestamp()
        noon = datetime(2020, 3, 4, 12, 5, 9).timestamp()
        assert cli.format_date(int(midnight)) == "3/4/2020, 12:05:09 AM"
        assert cli.format_date(int(noon)) == "3/4/2020, 12:05:09 PM"


class TestCreateCommand:
    def test_create_from_file_set(self, run):
        code, out = run("create", "-i", "gs://bucket/words.txt", "-o", "gs://bucket/", "-n", "my-stored-info-type")

        assert code == 0
        assert out.strip() == (
            f"Successfully created stored infoType projects/{PROJECT_ID}/storedInfoTypes/my-stored-info-type."
        )

    def test_create_from_table(self, run, fake_service):
        code, out = run(
            "create", "-p", "bq-project", "-d", "my_dataset", "-t", "my_table", "-f", "words", "-o", "gs://bucket/"
        )

        assert code == 0
        assert out.startswith("Successfully created stored infoType ")
        config = fake_service.requests[-1][1]["config"]
        assert config["largeCustomDictionary"]["bigQueryField"]["table"]["datasetId"] == "my_dataset"

    def test_create_with_invalid_id(self, run):
        code, out = run("create", "-i", "gs://bucket/words.txt", "-o", "gs://bucket/", "-n", "@@@@@")

        assert code == 1
        assert out.startswith("Error in createStoredInfoType: ")
        assert "@@@@@" in out

    def test_create_json_output(self, run):
        code, out = run("--json", "create", "-i", "gs://b/w.txt", "-o", "gs://b/", "-n", "x")

        assert code == 0
        data = json.loads(out)
        assert data["name"] == f"projects/{PROJECT_ID}/storedInfoTypes/x"
        assert data["pending_versions"][0]["state"] == "PENDING"


class TestListCommand:
    def test_list_pending_resource(self, run):
        run("create", "-i", "gs://bucket/words.txt", "-o", "gs://bucket/", "-n", "my-stored-info-type")

        code, out = run("list")

        assert code == 0
        assert f"Stored infoType: projects/{PROJECT_ID}/storedInfoTypes/my-stored-info-type:" in out
        assert "Pending versions:" in out
        assert "Current version:" not in out
        assert DATE_PATTERN.search(out)
        assert "State: PENDING" in out
        assert "Error count: 0" in out

    def test_list_current_version_with_errors(self, run, fake_service):
        name = f"projects/{PROJECT_ID}/storedInfoTypes/built"
        fake_service.stored_info_types[name] = {
            "name": name,
            "currentVersion": {
                "createTime": "2019-01-01T12:00:00Z",
                "state": "FAILED",
                "errors": [{"details": {"message": "a"}}, {"details": {"message": "b"}}],
            },
        }

        code, out = run("list")

        assert code == 0
        assert "Current version:" in out
        assert "State: FAILED" in out
        assert "Error count: 2" in out

    def test_list_json(self, run):
        run("create", "-i", "gs://b/w.txt", "-o", "gs://b/", "-n", "x")
        code, out = run("--json", "list")

        assert code == 0
        assert [s["name"] for s in json.loads(out)["data"]] == [f"projects/{PROJECT_ID}/storedInfoTypes/x"]


class TestDeleteCommand:
    def test_delete(self, run):
        run("create", "-i", "gs://b/w.txt", "-o", "gs://b/", "-n", "x")
        name = f"projects/{PROJECT_ID}/storedInfoTypes/x"

        code, out = run("delete", name)

        assert code == 0
        assert out.strip() == f"Successfully deleted stored infoType {name}."

    def test_delete_nonexistent(self, run):
        code, out = run("delete", "bad-stored-info-type-path")

        assert code == 1
        assert out.startswith("Error in deleteStoredInfoType: ")

    def test_delete_json_error(self, run):
        code, out = run("--json", "delete", "bad-stored-info-type-path")

        assert code == 1
        data = json.loads(out)
        assert data["operation"] == "deleteStoredInfoType"
        assert data["reason"] == "NOT_FOUND"
        assert data["status"] == 404


class TestParser:
    def test_no_command_prints_help(self, run):
        code, out = run()
        assert code == 0
        assert "create" in out

    def test_project_defaults_from_environment(self, monkeypatch):
        monkeypatch.setenv("GCLOUD_PROJECT", "env-project")
        args = cli.create_parser().parse_args(["list"])
        assert args.calling_project_id == "env-project"

    def test_delete_requires_name(self):
        with pytest.raises(SystemExit):
            cli.create_parser().parse_args(["delete"])
