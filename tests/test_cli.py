"""End-to-end tests of the gl-members command line."""

import json

import pytest
import responses

from conftest import api_member
from gl_members.cli import build_parser, main

MOCK_GITLAB_URL = "https://gitlab.example.com"
MOCK_API_URL = f"{MOCK_GITLAB_URL}/api/v4"
MEMBERS_URL = f"{MOCK_API_URL}/groups/456/members"


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setenv("GITLAB_TOKEN", "test-token")
    monkeypatch.setenv("GITLAB_URL", MOCK_GITLAB_URL)


@pytest.fixture
def declaration(tmp_path):
    path = tmp_path / "members.yaml"
    path.write_text(
        "group_id: 456\n"
        "members:\n"
        "  - {id: 1, access_level: owner}\n"
        "  - {id: 2, access_level: developer}\n"
    )
    return path


def list_members(*members):
    responses.add(responses.GET, MEMBERS_URL, json=list(members), headers={"x-total-pages": "1"})


class TestParser:
    def test_registered_commands(self):
        parser = build_parser()
        for command in ("apply", "plan", "refresh", "destroy", "import"):
            args = parser.parse_args([command, "x"] if command in ("apply", "plan", "import") else [command])
            assert args.command == command


class TestMain:
    def test_missing_token(self, monkeypatch, tmp_path):
        monkeypatch.delenv("GITLAB_TOKEN", raising=False)
        assert main(["--state", str(tmp_path / "s.json"), "refresh"]) == 1

    @responses.activate
    def test_apply_creates_then_updates(self, env, declaration, tmp_path):
        state_file = tmp_path / "state.json"
        responses.add(responses.POST, MEMBERS_URL, status=409)
        responses.add(responses.POST, MEMBERS_URL, json=api_member(2, 30), status=201)
        list_members(api_member(1, 50), api_member(2, 30))

        assert main(["--state", str(state_file), "apply", str(declaration)]) == 0

        state = json.loads(state_file.read_text())
        assert state["id"] == "456"
        assert state["status"] == "created"

        # Second run goes through update: nothing to change
        list_members(api_member(1, 50), api_member(2, 30))
        list_members(api_member(1, 50), api_member(2, 30))
        assert main(["--state", str(state_file), "apply", str(declaration)]) == 0
        assert [c.request.method for c in responses.calls] == ["POST", "POST", "GET", "GET", "GET"]
        assert json.loads(state_file.read_text())["status"] == "synced"

    @responses.activate
    def test_plan_does_not_write_state(self, env, declaration, tmp_path):
        state_file = tmp_path / "state.json"

        assert main(["--state", str(state_file), "plan", str(declaration)]) == 0

        assert len(responses.calls) == 0
        assert not state_file.exists()

    @responses.activate
    def test_refresh_vanished_group_clears_state(self, env, tmp_path, synced_state):
        state_file = tmp_path / "state.json"
        state_file.write_text(json.dumps(synced_state.to_dict()))
        responses.add(responses.GET, MEMBERS_URL, status=404)

        assert main(["--state", str(state_file), "refresh"]) == 0

        state = json.loads(state_file.read_text())
        assert state["id"] is None
        assert state["status"] == "absent"

    @responses.activate
    def test_fatal_api_error(self, env, tmp_path, synced_state):
        state_file = tmp_path / "state.json"
        state_file.write_text(json.dumps(synced_state.to_dict()))
        responses.add(responses.DELETE, f"{MEMBERS_URL}/2", status=500)

        assert main(["--state", str(state_file), "destroy"]) == 1

        # state untouched after the failure
        assert json.loads(state_file.read_text())["id"] == "456"

    def test_invalid_declaration(self, env, tmp_path):
        path = tmp_path / "members.yaml"
        path.write_text("group_id: 456\nmembers:\n  - {id: 1, access_level: admin}\n")

        assert main(["--state", str(tmp_path / "s.json"), "apply", str(path)]) == 1

    @responses.activate
    def test_import_refuses_other_group(self, env, tmp_path, synced_state):
        state_file = tmp_path / "state.json"
        state_file.write_text(json.dumps(synced_state.to_dict()))

        assert main(["--state", str(state_file), "import", "789"]) == 1
        assert len(responses.calls) == 0


class TestMaxRetriesFlag:
    @pytest.mark.parametrize("value", ["-1", "many"])
    def test_invalid_values_are_rejected(self, value, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--max-retries", value, "refresh"])
        assert exc_info.value.code == 2
        assert "--max-retries" in capsys.readouterr().err

    def test_zero_is_accepted(self):
        assert build_parser().parse_args(["--max-retries", "0", "refresh"]).max_retries == 0
