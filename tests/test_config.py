"""
Tests for YAML configuration loading.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from tutorslots.config import AppConfig, ViewConfig
from tutorslots.domain.models import DisplayMode, ViewFilter, Weekday


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadFromYaml:
    """Tests for AppConfig.load_from_yaml."""

    def test_minimal_config_uses_defaults(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, "tutor_id: 7\n"))

        assert config.tutor_id == 7
        assert config.api.base_url == "http://localhost:3000/api"
        assert config.week == tuple(Weekday)[:6]
        assert config.view.to_filter() == ViewFilter.full_day()
        assert config.data_file == tmp_path / "availability.json"

    def test_full_config(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, """
tutor_id: 42
api:
  base_url: "https://tutors.example.com/api/"
  timeout_seconds: 5
week_days: [Monday, Sunday, Monday]
view:
  start_hour: 8
  end_hour: 22
  display_mode: hourly
data_file: /tmp/slots.json
"""))

        assert config.api.base_url == "https://tutors.example.com/api"
        assert config.api.timeout_seconds == 5
        assert config.week == (Weekday.MONDAY, Weekday.SUNDAY)
        assert config.view.to_filter() == ViewFilter(8, 22, DisplayMode.HOURLY)
        assert config.data_file == Path("/tmp/slots.json")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="config.example.yaml"):
            AppConfig.load_from_yaml(tmp_path / "missing.yaml")

    def test_non_mapping_root(self, tmp_path):
        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(_write(tmp_path, "- 1\n- 2\n"))

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(_write(tmp_path, "tutor_id: [1\n"))


class TestValidation:
    """Field validators."""

    @pytest.mark.parametrize(
        "data",
        [
            {"tutor_id": 0},
            {"tutor_id": 1, "api": {"base_url": "localhost:3000"}},
            {"tutor_id": 1, "api": {"timeout_seconds": 0}},
            {"tutor_id": 1, "week_days": ["monday"]},
            {"tutor_id": 1, "week_days": []},
        ],
    )
    def test_rejects_bad_values(self, data):
        with pytest.raises(ValidationError):
            AppConfig(**data)

    @pytest.mark.parametrize("start,end", [(24, 24), (10, 10), (12, 9), (0, 25)])
    def test_rejects_bad_view_window(self, start, end):
        with pytest.raises(ValidationError):
            ViewConfig(start_hour=start, end_hour=end)
