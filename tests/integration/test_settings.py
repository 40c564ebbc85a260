"""Tests for src/integration/settings.py: YAML settings and env overrides."""

from __future__ import annotations

from pathlib import Path

import pytest

from src.core.range_bound.errors import InvalidParamsError
from src.core.range_bound.math import HOUR
from src.integration.settings import Settings, load_settings, settings_from_mapping

ROOT = Path(__file__).resolve().parents[2]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("RBS_LOG_LEVEL", raising=False)
    monkeypatch.delenv("RBS_HEART_FREQUENCY", raising=False)


class TestLoadSettings:
    def test_defaults(self):
        assert load_settings() == Settings()

    def test_shipped_default_config(self):
        s = load_settings(ROOT / "config" / "default.yaml")
        assert s.operator.regen_observe == 21
        assert s.range.wall_spread == 2_000
        assert s.heart.frequency == 8 * HOUR
        assert s.log_level == "INFO"

    def test_partial_file(self, tmp_path):
        path = tmp_path / "rbs.yaml"
        path.write_text("operator:\n  cushion_factor: 5000\nlogging:\n  level: debug\n", encoding="utf-8")
        s = load_settings(path)
        assert s.operator.cushion_factor == 5_000
        assert s.operator.reserve_factor == 1_000
        assert s.log_level == "DEBUG"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_settings(path) == Settings()

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("RBS_LOG_LEVEL", "warning")
        monkeypatch.setenv("RBS_HEART_FREQUENCY", "3600")
        s = load_settings()
        assert s.log_level == "WARNING"
        assert s.heart.frequency == 3_600

    def test_env_frequency_must_be_int(self, monkeypatch):
        monkeypatch.setenv("RBS_HEART_FREQUENCY", "hourly")
        with pytest.raises(InvalidParamsError):
            load_settings()


class TestValidation:
    @pytest.mark.parametrize(
        "root",
        [
            {"pricing": {}},
            {"range": {"wall": 10}},
            {"operator": {"version": 3}},
            {"logging": {"format": "json"}},
            {"logging": {"level": "LOUD"}},
            {"range": ["not", "a", "mapping"]},
        ],
    )
    def test_rejects(self, root):
        with pytest.raises(InvalidParamsError):
            settings_from_mapping(root)

    def test_invalid_values_surface_config_errors(self):
        with pytest.raises(InvalidParamsError):
            settings_from_mapping({"range": {"cushion_spread": 3_000, "wall_spread": 2_000}})

    def test_wrong_type(self):
        with pytest.raises(InvalidParamsError):
            settings_from_mapping({"heart": {"frequency": "fast"}})
