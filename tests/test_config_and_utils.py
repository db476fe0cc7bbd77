"""Tests for configuration, color utilities and logging setup."""

import json
import logging

import pytest
import torch
import yaml

from wallcolors.utils.color import (
    ColorConverter,
    color_to_hex,
    color_to_rgb,
    hex_to_rgb,
    parse_color,
    rgb_to_color,
)
from wallcolors.utils.config import Config, ConfigManager, QuantizationBudget
from wallcolors.utils.logging import PerformanceLogger, get_logger, setup_logging


class TestColorParsing:
    def test_hex_to_rgb(self):
        assert hex_to_rgb("#ff8000") == (255, 128, 0)
        assert hex_to_rgb("0x0000ff") == (0, 0, 255)

    def test_pack_and_unpack(self):
        assert rgb_to_color(0x12, 0x34, 0x56) == 0x123456
        assert color_to_rgb(0xFF123456) == (0x12, 0x34, 0x56)
        assert color_to_hex(0x00FF00) == "#00ff00"

    @pytest.mark.parametrize(
        "value, expected",
        [
            (0xFF0000, 0xFF0000),
            (0xFFFF0000, 0xFF0000),
            ("#00ff00", 0x00FF00),
            ("0x0000FF", 0x0000FF),
            ("255", 0x0000FF),
            ((1, 2, 3), 0x010203),
        ],
    )
    def test_parse_color(self, value, expected):
        assert parse_color(value) == expected

    @pytest.mark.parametrize("value", [None, -1, "#abc", "nope", (1, 2), (0, 0, 300), True])
    def test_parse_color_rejects(self, value):
        with pytest.raises(ValueError):
            parse_color(value)


class TestColorConverter:
    """Perceptual conversions on channel-last tensors."""

    def setup_method(self):
        self.converter = ColorConverter()

    def test_lightness_extremes(self):
        rgb = self.converter.as_tensor([[0, 0, 0], [255, 255, 255]])
        lightness = self.converter.lightness(rgb)

        assert lightness[0].item() == pytest.approx(0.0, abs=1e-3)
        assert lightness[1].item() == pytest.approx(100.0, abs=1e-3)

    def test_lab_of_red(self):
        lab = self.converter.rgb_to_lab(self.converter.as_tensor([255, 0, 0]))

        assert lab[0].item() == pytest.approx(53.24, abs=0.05)
        assert lab[1].item() > 75
        assert lab[2].item() > 60

    def test_contrast_ratio(self):
        white = self.converter.as_tensor([255, 255, 255])
        black = self.converter.as_tensor([0, 0, 0])

        assert self.converter.contrast_ratio(white, black).item() == pytest.approx(21.0, abs=1e-3)
        assert self.converter.contrast_ratio(black, black).item() == pytest.approx(1.0)

    def test_composite_over(self):
        fg = self.converter.as_tensor([[0, 0, 0]])
        bg = self.converter.as_tensor([[200, 100, 50]])
        rgb, alpha = self.converter.composite_over(
            fg, torch.tensor([0.5], dtype=self.converter.dtype),
            bg, torch.tensor([1.0], dtype=self.converter.dtype),
        )

        assert alpha.item() == pytest.approx(1.0)
        assert rgb[0].tolist() == pytest.approx([100.0, 50.0, 25.0])

    def test_composite_of_transparent_layers_is_black(self):
        zero = torch.tensor([0.0], dtype=self.converter.dtype)
        rgb, alpha = self.converter.composite_over(
            self.converter.as_tensor([[10, 20, 30]]), zero,
            self.converter.as_tensor([[40, 50, 60]]), zero,
        )

        assert alpha.item() == 0.0
        assert rgb[0].tolist() == [0.0, 0.0, 0.0]


class TestConfigManager:
    """Configuration defaults, files, environment and profiles."""

    def test_defaults(self):
        manager = ConfigManager()
        config = manager.get_extraction_config()

        assert isinstance(config, Config)
        assert config.dim_amount == 0.0
        assert config.quantization_budget is QuantizationBudget.HIGH_QUALITY
        assert config.max_extraction_area == 112 * 112
        assert manager.validate_config() == (True, [])

    def test_dotted_get_and_set(self):
        manager = ConfigManager()
        manager.set("extraction.dim_amount", 0.4)

        assert manager.get("extraction.dim_amount") == 0.4
        assert manager.get("missing.key", "fallback") == "fallback"

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"quantization": {"budget": "fast"}}))

        config = ConfigManager(path).get_extraction_config()

        assert config.quantization_budget is QuantizationBudget.FAST
        assert config.quality_max_colors == 128

    def test_save_and_reload_json(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        manager = ConfigManager()
        manager.apply_profile("fast")
        manager.save_config(path)

        assert json.loads(path.read_text())["quantization"]["budget"] == "fast"
        assert ConfigManager(path).get("quantization.budget") == "fast"

    def test_broken_file_raises(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")

        with pytest.raises(ValueError):
            ConfigManager(path)

    def test_non_mapping_file_raises(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ValueError):
            ConfigManager(path)

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("WALLCOLORS_DIM_AMOUNT", "0.25")
        monkeypatch.setenv("WALLCOLORS_BUDGET", "fast")
        monkeypatch.setenv("WALLCOLORS_MAX_AREA", "4096")

        config = ConfigManager.from_env().get_extraction_config()

        assert config.dim_amount == 0.25
        assert config.quantization_budget is QuantizationBudget.FAST
        assert config.max_extraction_area == 4096

    def test_validation_errors(self):
        manager = ConfigManager()
        manager.set("extraction.dim_amount", 1.5)
        manager.set("quantization.budget", "turbo")
        manager.set("output.format", "xml")

        is_valid, errors = manager.validate_config()

        assert not is_valid
        assert len(errors) == 3

    def test_validation_reports_wrong_types(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.dump(
                {
                    "extraction": {"max_extraction_area": "big"},
                    "quantization": {"fast_max_colors": None, "quality_max_colors": 0},
                }
            )
        )

        is_valid, errors = ConfigManager(path).validate_config()

        assert not is_valid
        assert errors == [
            "extraction.max_extraction_area must be an integer",
            "quantization.fast_max_colors must be an integer",
            "quantization.quality_max_colors must be positive",
        ]

    def test_validation_reports_non_mapping_section(self):
        manager = ConfigManager()
        manager.set("quantization", None)

        is_valid, errors = manager.validate_config()

        assert not is_valid
        assert "quantization must be a mapping" in errors

    def test_unknown_profile_raises(self):
        with pytest.raises(ValueError):
            ConfigManager().apply_profile("ludicrous")

    def test_budget_parsing(self):
        assert QuantizationBudget.parse("HIGH_QUALITY") is QuantizationBudget.HIGH_QUALITY
        assert QuantizationBudget.parse(QuantizationBudget.FAST) is QuantizationBudget.FAST
        with pytest.raises(ValueError):
            QuantizationBudget.parse("slow")


class TestLogging:
    def test_setup_logging_writes_file(self, tmp_path):
        log_file = tmp_path / "logs" / "wallcolors.log"
        setup_logging(level=logging.DEBUG, log_file=str(log_file), enable_colors=False)

        get_logger("wallcolors.test").debug("hello from test")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "hello from test" in log_file.read_text()
        setup_logging(level=logging.WARNING, enable_colors=False)

    def test_timer_without_start(self):
        assert PerformanceLogger().end_timer("never-started") == 0.0

    def test_timer_measures(self):
        perf = PerformanceLogger()
        perf.start_timer("work")
        assert perf.end_timer("work") >= 0.0
