"""
tests/test_cli.py

The `itemsblocker` console commands, driven through Click's CliRunner.

Each invocation is a separate process lifetime: load on start, save on
exit. State carried between invocations therefore proves persistence.

Run:
    pytest tests/test_cli.py -v
"""

import json

import pytest
from click.testing import CliRunner

from itemsblocker.cli import cli


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "itemsblocker.yaml"
    path.write_text(
        "data_file: blocks.json\n"
        "participants:\n"
        "  42: Alice\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def run(config_file):
    runner = CliRunner()

    def invoke(*args):
        return runner.invoke(cli, ["--config", str(config_file), "--log-level", "ERROR", *args])

    return invoke


class TestBlockCommand:

    def test_block_global(self, run, tmp_path):
        result = run("block", "rifle.ak", "2h", "all")
        assert result.exit_code == 0, result.output
        assert "Blocked rifle.ak for everyone until" in result.output
        assert (tmp_path / "blocks.json").exists()

    def test_block_wipe(self, run):
        result = run("block", "rocket.warhead", "wipe")
        assert result.exit_code == 0
        assert "entire wipe" in result.output

    def test_block_participant_by_name(self, run):
        result = run("block", "metal.facemask", "player", "alice", "1d")
        assert result.exit_code == 0
        assert "for player 42" in result.output

    def test_rejected_block_exits_2(self, run):
        result = run("block", "rifle.ak", "later")
        assert result.exit_code == 2
        assert "Invalid duration" in result.output

    def test_participant_wipe_is_rejected(self, run):
        result = run("block", "rifle.ak", "wipe", "player", "42")
        assert result.exit_code == 2
        assert "concrete duration" in result.output


class TestUnblockCommand:

    def test_unblock_all(self, run):
        run("block", "rifle.ak", "2h", "all")
        result = run("unblock", "rifle.ak")
        assert result.exit_code == 0
        assert "scope global" in result.output
        assert "No active item blocks." in run("list").output

    def test_unblock_participant(self, run):
        run("block", "rifle.ak", "2h", "player", "42")
        run("block", "rifle.ak", "2h", "player", "43")
        assert run("unblock", "rifle.ak", "player", "42").exit_code == 0
        assert run("check", "rifle.ak", "42").exit_code == 0
        assert run("check", "rifle.ak", "43").exit_code == 1

    def test_unblock_without_rule_exits_2(self, run):
        result = run("unblock", "rifle.ak")
        assert result.exit_code == 2
        assert "No active blocks found" in result.output


class TestListCommand:

    def test_text(self, run):
        run("block", "rifle.ak", "2h", "all")
        run("block", "rocket.warhead", "wipe")
        result = run("list")
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "Active blocks:"
        assert lines[1].startswith("- rifle.ak: global for 0")
        assert lines[2] == "- rocket.warhead: wipe-global"

    def test_json(self, run):
        run("block", "metal.facemask", "1d", "player", "42")
        result = run("list", "--format", "json")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert len(data) == 1
        assert data[0]["item_id"] == "metal.facemask"
        scope = data[0]["scopes"][0]
        assert scope["kind"] == "participant"
        assert scope["participant_id"] == 42
        assert 0 < scope["remaining_seconds"] <= 86400

    def test_empty(self, run):
        result = run("list", "--format", "json")
        assert json.loads(result.output) == []


class TestWipeAndCheck:

    def test_wipe_clears_wipe_blocks_only(self, run):
        run("block", "rocket.warhead", "wipe")
        run("block", "rifle.ak", "2h", "all")

        result = run("wipe")
        assert result.exit_code == 0
        assert "cleared 1 wipe-global block(s)" in result.output

        assert run("check", "rocket.warhead", "42").exit_code == 0
        assert run("check", "rifle.ak", "42").exit_code == 1

    def test_check_output(self, run):
        run("block", "rifle.ak", "2h", "player", "42")
        blocked = run("check", "rifle.ak", "alice")
        assert blocked.exit_code == 1
        assert "rifle.ak: BLOCKED for 42" in blocked.output
        assert "allowed" in run("check", "rifle.ak", "99").output

    def test_check_unresolvable_participant(self, run):
        result = run("check", "rifle.ak", "nobody")
        assert result.exit_code == 2
        assert "Cannot resolve nobody" in result.output

    def test_missing_config_is_created(self, tmp_path):
        path = tmp_path / "fresh.yaml"
        result = CliRunner().invoke(cli, ["--config", str(path), "list"])
        assert result.exit_code == 0
        assert path.exists()
        assert "No active item blocks." in result.output
