"""Tests for the wallcolors command-line interface."""

import json

import pytest
import yaml
from click.testing import CliRunner
from PIL import Image

from wallcolors import __version__
from wallcolors.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def white_image(tmp_path):
    path = tmp_path / "white.png"
    Image.new("RGB", (32, 32), (255, 255, 255)).save(path)
    return path


class TestCli:
    """Commands, output formats and failure exit codes."""

    def test_version(self, runner):
        result = runner.invoke(cli, ["--quiet", "version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_score_json(self, runner, tmp_path):
        histogram_file = tmp_path / "histogram.json"
        histogram_file.write_text(json.dumps({"#ff0000": 100, "#00ff00": 100}))

        result = runner.invoke(
            cli, ["--quiet", "score", str(histogram_file), "--hints", "1", "--format", "json"]
        )

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["main_colors"] == ["#ff0000", "#00ff00"]
        assert payload["color_hints"] == 1

    def test_score_table(self, runner, tmp_path):
        histogram_file = tmp_path / "histogram.json"
        histogram_file.write_text(json.dumps({"16711680": 3}))

        result = runner.invoke(cli, ["--quiet", "score", str(histogram_file)])

        assert result.exit_code == 0
        assert "#ff0000" in result.output

    def test_score_rejects_non_object(self, runner, tmp_path):
        histogram_file = tmp_path / "histogram.json"
        histogram_file.write_text("[1, 2, 3]")

        result = runner.invoke(cli, ["--quiet", "score", str(histogram_file)])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_extract_json(self, runner, white_image, tmp_path):
        output = tmp_path / "out" / "result.json"

        result = runner.invoke(
            cli,
            [
                "--quiet",
                "extract",
                str(white_image),
                "--budget",
                "fast",
                "--format",
                "json",
                "--output",
                str(output),
            ],
        )

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["main_colors"] == ["#ffffff"]
        assert payload["color_hints"] == 5
        assert json.loads(output.read_text()) == payload

    def test_extract_with_dim(self, runner, white_image):
        result = runner.invoke(
            cli,
            [
                "--quiet",
                "extract",
                str(white_image),
                "--budget",
                "fast",
                "--dim-amount",
                "1.0",
                "--format",
                "json",
            ],
        )

        assert result.exit_code == 0
        assert json.loads(result.stdout)["color_hints"] == 6

    def test_hints(self, runner, white_image):
        result = runner.invoke(cli, ["--quiet", "hints", str(white_image)])

        assert result.exit_code == 0
        assert "Mean luminance: 100.00" in result.output
        assert "Dark pixels: 0/1024" in result.output

    def test_init_config_yaml(self, runner, tmp_path):
        output = tmp_path / "wallcolors.yaml"

        result = runner.invoke(
            cli, ["--quiet", "init-config", "--output", str(output), "--profile", "fast"]
        )

        assert result.exit_code == 0
        assert yaml.safe_load(output.read_text())["quantization"]["budget"] == "fast"

    def test_config_file_is_used(self, runner, white_image, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(
            json.dumps({"quantization": {"budget": "fast"}, "output": {"format": "json"}})
        )

        result = runner.invoke(
            cli, ["--quiet", "--config", str(config_path), "extract", str(white_image)]
        )

        assert result.exit_code == 0
        assert json.loads(result.stdout)["main_colors"] == ["#ffffff"]

    def test_broken_config_file_exits_with_error(self, runner, white_image, tmp_path):
        config_path = tmp_path / "bad.json"
        config_path.write_text("{not json")

        result = runner.invoke(
            cli, ["--quiet", "--config", str(config_path), "extract", str(white_image)]
        )

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_null_config_value_is_reported(self, runner, white_image, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.dump({"quantization": {"fast_max_colors": None}}))

        result = runner.invoke(
            cli, ["--quiet", "--config", str(config_path), "extract", str(white_image)]
        )

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Error:" in result.output

    def test_null_config_value_does_not_block_version(self, runner, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.dump({"quantization": {"fast_max_colors": None}}))

        result = runner.invoke(cli, ["--quiet", "--config", str(config_path), "version"])

        assert result.exit_code == 0
        assert __version__ in result.output
