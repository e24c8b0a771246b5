"""Tests for the depcriteria command-line interface."""

import json
import sys
from unittest.mock import patch

import pytest

from depcriteria.cli import main

from conftest import write


def run_cli(*argv):
    """Run main() with the given arguments, returning its exit code."""
    with patch.object(sys, "argv", ["depcriteria", *argv]):
        with pytest.raises(SystemExit) as exc_info:
            main()
    return exc_info.value.code


class TestCLIHelp:
    def test_help(self):
        assert run_cli("--help") == 0

    def test_version(self, capsys):
        assert run_cli("--version") == 0
        assert "depcriteria" in capsys.readouterr().out


class TestCLIRun:
    """Tests for resolving a file from the command line."""

    def test_outputs_json_array(self, repo, capsys):
        assert run_cli("src/app.ts", "--repo", str(repo), "--no-color") == 0
        output = json.loads(capsys.readouterr().out)

        assert isinstance(output, list)
        assert len(output) == 5
        package = next(item for item in output if item["importId"] == "@foo/bar")
        assert package == {
            "type": "package",
            "importId": "@foo/bar",
            "lookups": [
                {
                    "package": "third_party/js/@foo",
                    "call": {"id": "npm_library", "args": {"name": "^bar$"}, "label": "name"},
                }
            ],
        }
        file_item = next(item for item in output if item["importId"] == "./utils/helpers")
        assert file_item["lookup"]["file"] == "src/utils/helpers.ts"
        assert len(file_item["lookup"]["calls"]) == 3

    def test_repo_from_environment(self, repo, capsys, monkeypatch):
        monkeypatch.setenv("REPO", str(repo))
        assert run_cli(str(repo / "src" / "app.ts"), "--no-color") == 0
        assert len(json.loads(capsys.readouterr().out)) == 5

    def test_compact_by_default(self, repo, capsys):
        run_cli("src/app.ts", "--repo", str(repo))
        assert "\n" not in capsys.readouterr().out.strip()

    def test_pretty(self, repo, capsys):
        run_cli("src/app.ts", "--repo", str(repo), "--pretty")
        out = capsys.readouterr().out
        assert "\n  {" in out
        assert len(json.loads(out)) == 5

    def test_include_source(self, repo, capsys):
        assert run_cli("src/app.ts", "--repo", str(repo), "--include-source") == 0
        output = json.loads(capsys.readouterr().out)
        assert output[-1]["importId"] == ""
        assert output[-1]["lookup"]["file"] == "src/app.ts"

    def test_custom_tsconfig(self, repo, capsys):
        write(repo / "configs" / "empty.json", "{}")
        write(repo / "src" / "only_local.ts", "import { a } from './a';\n")
        code = run_cli(
            "src/only_local.ts",
            "--repo",
            str(repo),
            "--tsconfig",
            str(repo / "configs" / "empty.json"),
        )
        assert code == 0
        assert json.loads(capsys.readouterr().out)[0]["lookup"]["file"] == "src/a.js"


class TestCLIErrors:
    """Every failure exits non-zero with a message and no output."""

    def test_missing_file_argument(self, repo, capsys):
        assert run_cli("--repo", str(repo), "--no-color") == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "A file is required" in captured.err

    def test_missing_repo(self, repo, capsys, monkeypatch):
        monkeypatch.delenv("REPO", raising=False)
        assert run_cli("src/app.ts", "--no-color") == 1
        assert "repository root" in capsys.readouterr().err

    def test_unresolved_import(self, repo, capsys):
        write(repo / "src" / "broken.ts", "import x from './missing';\n")
        assert run_cli("src/broken.ts", "--repo", str(repo), "--no-color") == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Unable to resolve import id: ./missing" in captured.err

    def test_missing_source_file(self, repo, capsys):
        assert run_cli("src/nope.ts", "--repo", str(repo), "--no-color") == 1
        assert captured_err(capsys).startswith("Error: Unable to parse")

    def test_invalid_tsconfig(self, repo, capsys):
        (repo / "tsconfig.json").write_text("{ broken")
        assert run_cli("src/app.ts", "--repo", str(repo), "--no-color") == 1
        assert "Error loading TS config file" in capsys.readouterr().err


def captured_err(capsys):
    return capsys.readouterr().err.strip()
