"""Tests for ``aionr tools`` CLI command."""

from __future__ import annotations

import json

from click.testing import CliRunner

from aionr.cli import main


class TestToolsList:
    def test_table(self) -> None:
        result = CliRunner().invoke(main, ["tools", "list"])
        assert result.exit_code == 0
        assert "run_inference" in result.output
        assert "data_analysis" in result.output

    def test_json(self) -> None:
        result = CliRunner().invoke(main, ["tools", "list", "--json"])
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert [t["name"] for t in payload["tools"]] == ["run_inference", "data_analysis"]


class TestToolsResources:
    def test_static_catalog(self) -> None:
        result = CliRunner().invoke(main, ["tools", "resources"])
        assert result.exit_code == 0
        assert "aion-r://models/catalog" in result.output


class TestVersion:
    def test_version(self) -> None:
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output
