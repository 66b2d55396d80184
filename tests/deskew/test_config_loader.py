"""
Unit tests for deskew config_loader module.
"""

from pathlib import Path

import pytest
import yaml

from album_vision.deskew.config_loader import (
    DEFAULT_CONFIG_PATH,
    DeskewConfig,
    get_default_config,
    load_config,
)


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_default_config(self):
        """Bundled config.yaml carries the documented constants."""
        config = load_config()

        assert isinstance(config, DeskewConfig)
        assert config.detection.blur_kernel_size == 5
        assert config.detection.approx_epsilon_ratio == pytest.approx(0.02)
        assert config.perspective.min_quad_area_fraction == pytest.approx(0.3)
        assert config.perspective.full_confidence_area_fraction == pytest.approx(0.8)
        assert config.perspective.warp_interpolation == "linear"
        assert config.rotation.fallback_confidence == pytest.approx(0.3)
        assert config.fold.hough_threshold == 100
        assert config.fold.min_length_ratio == pytest.approx(0.5)
        assert config.fold.max_line_gap == 30
        assert config.fold.max_horizontal_delta_px == pytest.approx(30)
        assert config.fold.center_tolerance_ratio == pytest.approx(0.2)
        assert config.review.confidence_threshold == pytest.approx(0.5)

    def test_bundled_file_matches_model_defaults(self):
        assert load_config(DEFAULT_CONFIG_PATH) == DeskewConfig()

    def test_load_custom_config(self, tmp_path):
        """Test loading a custom configuration file."""
        custom_config = {
            "perspective": {"min_quad_area_fraction": 0.4, "warp_interpolation": "cubic"},
            "fold": {"center_tolerance_ratio": 0.1},
        }
        config_path = tmp_path / "deskew.yaml"
        config_path.write_text(yaml.dump(custom_config), encoding="utf-8")

        config = load_config(config_path)

        assert config.perspective.min_quad_area_fraction == pytest.approx(0.4)
        assert config.perspective.warp_interpolation == "cubic"
        assert config.fold.center_tolerance_ratio == pytest.approx(0.1)
        # Unspecified sections keep their defaults
        assert config.rotation.fallback_confidence == pytest.approx(0.3)

    def test_empty_file_gives_defaults(self, tmp_path):
        config_path = tmp_path / "empty.yaml"
        config_path.write_text("", encoding="utf-8")

        assert load_config(config_path) == DeskewConfig()

    def test_missing_file_raises_error(self):
        with pytest.raises(FileNotFoundError):
            load_config(Path("nonexistent_config.yaml"))

    def test_even_blur_kernel_rejected(self, tmp_path):
        config_path = tmp_path / "bad.yaml"
        config_path.write_text(yaml.dump({"detection": {"blur_kernel_size": 4}}))

        with pytest.raises(ValueError, match="Invalid configuration file"):
            load_config(config_path)

    def test_unknown_interpolation_rejected(self, tmp_path):
        config_path = tmp_path / "bad.yaml"
        config_path.write_text(
            yaml.dump({"perspective": {"warp_interpolation": "bicubic-ish"}})
        )

        with pytest.raises(ValueError, match="Invalid configuration file"):
            load_config(config_path)

    def test_confidence_out_of_range_rejected(self, tmp_path):
        config_path = tmp_path / "bad.yaml"
        config_path.write_text(yaml.dump({"rotation": {"fallback_confidence": 1.2}}))

        with pytest.raises(ValueError, match="Invalid configuration file"):
            load_config(config_path)

    def test_non_mapping_rejected(self, tmp_path):
        config_path = tmp_path / "list.yaml"
        config_path.write_text(yaml.dump([1, 2, 3]))

        with pytest.raises(ValueError, match="expected a mapping"):
            load_config(config_path)


class TestGetDefaultConfig:
    def test_returns_bundled_values(self):
        assert get_default_config() == load_config(DEFAULT_CONFIG_PATH)

    def test_falls_back_to_model_defaults(self, monkeypatch, tmp_path):
        monkeypatch.setattr(
            "album_vision.deskew.config_loader.DEFAULT_CONFIG_PATH",
            tmp_path / "missing.yaml",
        )
        assert get_default_config() == DeskewConfig()
