#!/usr/bin/env python3
"""
Test script for configuration loading and validation.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from laborscout.config import Config, generate_example_config, has_real_api_key, load_config


def write_config(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return str(path)


def test_defaults():
    config = Config()
    assert config.search.default_radius_km == 50.0
    assert config.map.fallback_list_size == 3
    assert config.positioning.timeout == 10.0
    assert config.validate() == []


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))


def test_env_var_selects_file(tmp_path, monkeypatch):
    path = write_config(tmp_path, "search:\n  default_radius_km: 12\n")
    monkeypatch.setenv("LABORSCOUT_CONFIG", path)
    assert load_config().search.default_radius_km == 12


def test_empty_file_uses_defaults(tmp_path):
    config = load_config(write_config(tmp_path, ""))
    assert config.geocoding.provider == "nominatim"
    assert config.positioning.provider == "none"


def test_sections_override_defaults(tmp_path):
    config = load_config(write_config(tmp_path, """
geocoding:
  provider: Google
  api_key: abc123
positioning:
  provider: static
  latitude: 40.758
  longitude: -73.9855
search:
  sort_by_distance: true
map:
  fallback_list_size: 5
database:
  db_path: /tmp/labor.db
"""))
    assert config.geocoding.provider == "google"
    assert config.geocoding.api_key == "abc123"
    assert config.positioning.latitude == 40.758
    assert config.search.sort_by_distance is True
    assert config.search.default_radius_km == 50.0
    assert config.map.fallback_list_size == 5
    assert config.map.zoom == 12
    assert config.database.db_path == "/tmp/labor.db"


def test_static_positioning_needs_coordinates(tmp_path):
    path = write_config(tmp_path, "positioning:\n  provider: static\n")
    with pytest.raises(ValueError, match="requires latitude and longitude"):
        load_config(path)


def test_validation_collects_every_error(tmp_path):
    path = write_config(tmp_path, """
geocoding:
  provider: bing
search:
  default_radius_km: 0
map:
  fallback_list_size: -1
""")
    with pytest.raises(ValueError) as excinfo:
        load_config(path)
    message = str(excinfo.value)
    assert "geocoding.provider" in message
    assert "default_radius_km" in message
    assert "fallback_list_size" in message


def test_placeholder_keys_are_not_real():
    assert not has_real_api_key(None)
    assert not has_real_api_key("")
    assert not has_real_api_key("demo_google_maps_key")
    assert has_real_api_key("AIzaSyExample")


def test_example_config_loads(tmp_path):
    path = tmp_path / "config.example.yaml"
    generate_example_config(str(path))
    config = load_config(str(path))
    assert config.positioning.provider == "ip"
    assert config.map.api_key is None


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
