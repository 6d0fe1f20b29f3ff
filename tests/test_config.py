"""
Tests for YAML configuration loading.
"""

import pytest

from vitago_availability.config import AppConfig, BusinessHoursConfig
from vitago_availability.domain.models import BusinessHours, parse_time


def write_config(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadFromYaml:
    """Tests for AppConfig.load_from_yaml."""

    def test_full_config(self, tmp_path):
        path = write_config(tmp_path, """
api_base_url: "https://api.example.com/api/"
slot_granularity_minutes: 15
booking_horizon_days: 14
business_hours:
  start: "08:00"
  end: "20:00"
  min_duration_hours: 1.5
  max_duration_hours: 6
service_durations:
  Oven Cleaning: 1
providers:
  - name: Anna
    provider_id: prov-anna
""")

        config = AppConfig.load_from_yaml(path)

        assert config.slot_granularity_minutes == 15
        assert config.booking_horizon_days == 14
        assert config.business_hours.to_domain() == BusinessHours(
            start=parse_time("08:00"),
            end=parse_time("20:00"),
            min_duration_minutes=90,
            max_duration_minutes=360,
        )
        assert config.build_catalog().duration_for("oven cleaning") == 1
        assert config.build_enumerator().granularity == 15

    def test_empty_file_uses_defaults(self, tmp_path):
        config = AppConfig.load_from_yaml(write_config(tmp_path, ""))

        assert config.timezone == "Europe/Stockholm"
        assert config.slot_granularity_minutes == 5
        assert config.business_hours.to_domain() == BusinessHours()
        assert config.build_catalog().duration_for("Deep Cleaning") == 4

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(write_config(tmp_path, "providers: [unclosed"))

    def test_root_must_be_mapping(self, tmp_path):
        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(write_config(tmp_path, "- just\n- a list\n"))


class TestValidation:
    """Tests for config validators."""

    @pytest.mark.parametrize("granularity", [0, 7, 45])
    def test_granularity_must_divide_an_hour(self, granularity):
        with pytest.raises(ValueError):
            AppConfig(slot_granularity_minutes=granularity)

    def test_business_hours_order(self):
        with pytest.raises(ValueError):
            BusinessHoursConfig(start="20:00", end="08:00")
        with pytest.raises(ValueError):
            BusinessHoursConfig(min_duration_hours=4, max_duration_hours=2)

    def test_business_hours_time_format(self):
        with pytest.raises(ValueError):
            BusinessHoursConfig(start="7am")

    def test_service_durations_must_be_positive(self):
        with pytest.raises(ValueError):
            AppConfig(service_durations={"Deep Cleaning": 0})

    def test_duplicate_providers(self):
        with pytest.raises(ValueError, match="Duplicate provider name"):
            AppConfig(providers=[
                {"name": "anna", "provider_id": "p1"},
                {"name": "Anna", "provider_id": "p2"},
            ])
        with pytest.raises(ValueError, match="Duplicate provider id"):
            AppConfig(providers=[
                {"name": "anna", "provider_id": "p1"},
                {"name": "erik", "provider_id": "p1"},
            ])


class TestProviders:
    """Tests for provider alias resolution."""

    def test_resolve_alias_and_raw_id(self):
        config = AppConfig(providers=[{"name": "Anna", "provider_id": "prov-anna"}])

        assert config.resolve_provider("anna") == "prov-anna"
        assert config.resolve_provider("prov-erik") == "prov-erik"
        assert config.find_provider_by_name("erik") is None
