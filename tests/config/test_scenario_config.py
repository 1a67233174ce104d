"""
Tests for scenario configuration
"""
from pathlib import Path

import pytest

from solar_economics.config import ScenarioConfig
from solar_economics.infrastructure.tariffs import ScheduleValidationError

EXAMPLE_CONFIG = Path(__file__).resolve().parents[2] / "configs" / "example_scenario.yaml"

BASE_YAML = """
installation:
  name: test
  latitude: 37.4
  longitude: -5.9
  panel_groups:
    - name: south
      panel_wp: 450
      num_panels: 10
      obstacles:
        - name: wall
          height: 5
          direction: south
          angular_width_deg: 90
          distance: 5
tariff_schedules:
  - name: 2.0TD
    type: 2.0TD
  - name: flat
    type: flat
offers:
  - name: regulated
    tariff_schedule: 2.0TD
    energy_prices: {punta: 0.2, llano: 0.15, valle: 0.1}
    contracted_power_kw: 4.6
    power_prices: {punta: 0.08, valle: 0.01}
  - name: flat
    tariff_schedule: flat
    power_tariff_schedule: 2.0TD
    energy_prices: {flat: 0.16}
batteries:
  - name: small
    capacity_kwh: 5
    max_power_w: 2500
data_sources:
  consumption_file: data/consumption.csv
"""


def write_config(tmp_path, text):
    path = tmp_path / "scenario.yaml"
    path.write_text(text)
    return path


class TestScenarioConfigLoading:
    """Test YAML loading"""

    def test_load_from_yaml(self, tmp_path):
        """Entities, legacy geometry and paths are parsed"""
        config = ScenarioConfig.from_yaml(write_config(tmp_path, BASE_YAML))

        group = config.installation.panel_groups[0]
        assert group.peak_power_wp == 4500
        assert group.obstacles[0].azimuth_deg == 180
        assert group.obstacles[0].width_m == pytest.approx(10.0)
        assert set(config.tariff_schedules) == {"2.0TD", "flat"}
        assert config.offers[1].power_schedule_name == "2.0TD"
        assert config.batteries[0].capacity_kwh == 5
        assert config.data_sources.consumption_file == str((tmp_path / "data" / "consumption.csv").resolve())
        assert config.simulation.include_no_battery is True

        config.validate()

    def test_example_config_is_valid(self):
        config = ScenarioConfig.from_yaml(EXAMPLE_CONFIG)
        config.validate()
        assert config.uses_market_prices is True
        assert config.tariff_schedules["verano_invierno"].type == "custom"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ScenarioConfig.from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ValueError):
            ScenarioConfig.from_yaml(write_config(tmp_path, "installation: [unclosed"))

    def test_empty_yaml(self, tmp_path):
        with pytest.raises(ValueError):
            ScenarioConfig.from_yaml(write_config(tmp_path, ""))

    def test_missing_installation(self, tmp_path):
        with pytest.raises(ValueError, match="installation"):
            ScenarioConfig.from_yaml(write_config(tmp_path, "offers: []\n"))

    def test_unknown_offer_field(self, tmp_path):
        text = BASE_YAML.replace("contracted_power_kw: 4.6", "contracted_power: 4.6")
        with pytest.raises(ValueError):
            ScenarioConfig.from_yaml(write_config(tmp_path, text))

    def test_duplicate_schedule_names(self, tmp_path):
        text = BASE_YAML.replace("  - name: flat\n    type: flat", "  - name: 2.0TD\n    type: flat")
        with pytest.raises(ValueError, match="Duplicate"):
            ScenarioConfig.from_yaml(write_config(tmp_path, text))

    def test_path_traversal_rejected(self, tmp_path):
        """Data paths must stay within the config directory"""
        text = BASE_YAML.replace("data/consumption.csv", "../../etc/passwd")
        with pytest.raises(ValueError, match="outside base directory"):
            ScenarioConfig.from_yaml(write_config(tmp_path, text))

    def test_to_yaml_round_trip(self, tmp_path):
        config = ScenarioConfig.from_yaml(write_config(tmp_path, BASE_YAML))
        out = tmp_path / "saved.yaml"

        config.to_yaml(out)
        reloaded = ScenarioConfig.from_yaml(out)

        assert reloaded.offers == config.offers
        assert reloaded.batteries == config.batteries
        assert reloaded.installation.panel_groups == config.installation.panel_groups
        assert reloaded.data_sources.consumption_file == config.data_sources.consumption_file


class TestScenarioConfigValidation:
    """Test validate()"""

    def test_unknown_schedule_reference(self, tmp_path):
        config = ScenarioConfig.from_yaml(write_config(tmp_path, BASE_YAML))
        config.offers[0].tariff_schedule = "missing"
        with pytest.raises(ValueError, match="missing"):
            config.validate()

    def test_duplicate_offer_names(self, tmp_path):
        config = ScenarioConfig.from_yaml(write_config(tmp_path, BASE_YAML))
        config.offers[1].name = "regulated"
        with pytest.raises(ValueError, match="unique"):
            config.validate()

    def test_market_offer_needs_price_source(self, tmp_path):
        config = ScenarioConfig.from_yaml(write_config(tmp_path, BASE_YAML))
        config.offers[0].use_market_prices = True
        with pytest.raises(ValueError, match="market prices"):
            config.validate()

        config.simulation.fetch_market_prices = True
        config.validate()

    def test_no_battery_options(self, tmp_path):
        config = ScenarioConfig.from_yaml(write_config(tmp_path, BASE_YAML))
        config.batteries = []
        config.simulation.include_no_battery = False
        with pytest.raises(ValueError):
            config.validate()

    def test_invalid_price_unit(self, tmp_path):
        config = ScenarioConfig.from_yaml(write_config(tmp_path, BASE_YAML))
        config.data_sources.market_prices_unit = "GWh"
        with pytest.raises(ValueError):
            config.validate()

    def test_invalid_max_workers(self, tmp_path):
        config = ScenarioConfig.from_yaml(write_config(tmp_path, BASE_YAML))
        config.simulation.max_workers = 0
        with pytest.raises(ValueError):
            config.validate()

    def test_invalid_custom_schedule(self, tmp_path):
        """Custom schedules that leave gaps fail validation"""
        text = BASE_YAML.replace(
            "  - name: flat\n    type: flat",
            "  - name: flat\n    type: custom\n    date_ranges:\n"
            "      - {name: winter, start_month: 1, start_day: 1, end_month: 6, end_day: 30, "
            "time_slots: [{name: all, start_hour: 0, end_hour: 24}]}",
        )
        config = ScenarioConfig.from_yaml(write_config(tmp_path, text))
        with pytest.raises(ScheduleValidationError):
            config.validate()

    def test_energy_price_missing_for_period(self, tmp_path):
        """A casing typo leaves llano and valle unpriced"""
        text = BASE_YAML.replace("{punta: 0.2, llano: 0.15, valle: 0.1}", "{punta: 0.2, Valle: 0.1}")
        config = ScenarioConfig.from_yaml(write_config(tmp_path, text))
        with pytest.raises(ValueError, match="energy_prices missing for periods \\['llano', 'valle'\\]"):
            config.validate()

    def test_market_offer_needs_no_energy_prices(self, tmp_path):
        config = ScenarioConfig.from_yaml(write_config(tmp_path, BASE_YAML))
        config.offers[0].use_market_prices = True
        config.offers[0].energy_prices = {}
        config.simulation.fetch_market_prices = True
        config.validate()

    def test_custom_schedule_slots_need_prices(self, tmp_path):
        """Weekend slot names of custom schedules need a price too"""
        text = BASE_YAML.replace(
            "  - name: flat\n    type: flat",
            "  - name: flat\n    type: custom\n    date_ranges:\n"
            "      - {name: year, start_month: 1, start_day: 1, end_month: 12, end_day: 31, "
            "weekend_behavior: specific, weekend_slot_name: weekend, "
            "time_slots: [{name: flat, start_hour: 0, end_hour: 24}]}",
        )
        config = ScenarioConfig.from_yaml(write_config(tmp_path, text))
        with pytest.raises(ValueError, match="weekend"):
            config.validate()

        config.offers[1].energy_prices["weekend"] = 0.1
        config.validate()

    def test_power_price_missing_for_period(self, tmp_path):
        config = ScenarioConfig.from_yaml(write_config(tmp_path, BASE_YAML))
        config.offers[0].power_prices = {"punta": 0.08}
        with pytest.raises(ValueError, match="power_prices missing for periods \\['valle'\\]"):
            config.validate()

    def test_contracted_power_without_power_prices(self, tmp_path):
        config = ScenarioConfig.from_yaml(write_config(tmp_path, BASE_YAML))
        config.offers[0].power_prices = {}
        with pytest.raises(ValueError, match="power_prices"):
            config.validate()

    def test_contracted_power_per_period(self, tmp_path):
        """Per-period contracted power must cover every power period"""
        config = ScenarioConfig.from_yaml(write_config(tmp_path, BASE_YAML))
        config.offers[0].contracted_power_kw = {"punta": 4.6, "llano": 4.6}
        with pytest.raises(ValueError, match="contracted_power_kw missing for periods \\['valle'\\]"):
            config.validate()

        config.offers[0].contracted_power_kw = {"punta": 4.6, "valle": 6.9}
        config.validate()
