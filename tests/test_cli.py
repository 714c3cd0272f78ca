"""Tests for the CLI."""

import json

from typer.testing import CliRunner

from tag_intake.cli import app

runner = CliRunner()


class TestPlatformsCommand:
    """Test the platforms command."""

    def test_lists_defaults(self, tmp_path):
        result = runner.invoke(app, ["platforms", "--config", str(tmp_path / "missing.json")])
        assert result.exit_code == 0
        assert "google-dv360" in result.output
        assert "meta" not in result.output.lower().split()

    def test_all_includes_inactive(self, tmp_path):
        result = runner.invoke(
            app, ["platforms", "--all", "--config", str(tmp_path / "missing.json")]
        )
        assert result.exit_code == 0
        assert "Meta" in result.output

    def test_custom_config(self, tmp_path):
        path = tmp_path / "platforms.json"
        path.write_text(json.dumps({"platforms": [{"id": "acme", "name": "Acme DSP"}]}))
        result = runner.invoke(app, ["platforms", "--config", str(path)])
        assert result.exit_code == 0
        assert "acme" in result.output


class TestResolveCommand:
    """Test the resolve command."""

    def test_resolved(self):
        result = runner.invoke(app, ["resolve", "trad desk"])
        assert result.exit_code == 0
        assert "The Trade Desk" in result.output

    def test_suggestions(self):
        result = runner.invoke(app, ["resolve", "trde"])
        assert result.exit_code == 0
        assert "Did you mean" in result.output

    def test_no_match(self):
        result = runner.invoke(app, ["resolve", "zzzz"])
        assert result.exit_code == 1
