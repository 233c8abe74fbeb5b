"""
Configuration management for Labor Scout.

Handles loading and validating configuration from YAML files.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

# Placeholder key shipped in example environments; treated as "not configured"
PLACEHOLDER_API_KEYS = {"", "demo_google_maps_key"}

GEOCODING_PROVIDERS = ("none", "nominatim", "google")
POSITIONING_PROVIDERS = ("none", "static", "ip")


def has_real_api_key(api_key: Optional[str]) -> bool:
    """Returns True if the key is set and is not a known placeholder."""
    return api_key is not None and api_key.strip() not in PLACEHOLDER_API_KEYS


@dataclass
class GeocodingConfig:
    """Forward/reverse geocoding provider settings."""
    provider: str = "nominatim"  # none, nominatim or google
    api_key: Optional[str] = None  # Required for google
    user_agent: str = "laborscout/1.0"
    timeout: float = 10.0


@dataclass
class PositioningConfig:
    """Settings for resolving the caller's current position."""
    provider: str = "none"  # none, static or ip
    latitude: Optional[float] = None  # Used by the static provider
    longitude: Optional[float] = None
    ip_lookup_url: str = "https://ipapi.co/json/"
    timeout: float = 10.0


@dataclass
class SearchConfig:
    """Job search defaults."""
    default_radius_km: float = 50.0
    sort_by_distance: bool = False  # Nearest-first instead of newest-first


@dataclass
class MapConfig:
    """Map presentation settings."""
    api_key: Optional[str] = None
    fallback_list_size: int = 3
    default_latitude: float = 40.7128
    default_longitude: float = -74.0060
    zoom: int = 12


@dataclass
class DatabaseConfig:
    """Database configuration."""
    db_path: str = "jobs.db"


@dataclass
class SessionConfig:
    """Where the signed-in user's session is persisted between runs."""
    path: str = ".laborscout_session.json"


@dataclass
class Config:
    """Main configuration container."""
    geocoding: GeocodingConfig = field(default_factory=GeocodingConfig)
    positioning: PositioningConfig = field(default_factory=PositioningConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    map: MapConfig = field(default_factory=MapConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    session: SessionConfig = field(default_factory=SessionConfig)

    def validate(self) -> list[str]:
        """
        Validate the configuration and return a list of errors.

        Returns:
            List of validation error messages. Empty if valid.
        """
        errors = []

        if self.geocoding.provider not in GEOCODING_PROVIDERS:
            errors.append(
                f"geocoding.provider must be one of {', '.join(GEOCODING_PROVIDERS)}, "
                f"got '{self.geocoding.provider}'"
            )
        if self.geocoding.timeout <= 0:
            errors.append(f"geocoding.timeout must be positive, got {self.geocoding.timeout}")

        pos = self.positioning
        if pos.provider not in POSITIONING_PROVIDERS:
            errors.append(
                f"positioning.provider must be one of {', '.join(POSITIONING_PROVIDERS)}, "
                f"got '{pos.provider}'"
            )
        if pos.provider == "static":
            if pos.latitude is None or pos.longitude is None:
                errors.append("positioning: static provider requires latitude and longitude")
            else:
                if not -90 <= pos.latitude <= 90:
                    errors.append(
                        f"positioning.latitude must be between -90 and 90, got {pos.latitude}"
                    )
                if not -180 <= pos.longitude <= 180:
                    errors.append(
                        f"positioning.longitude must be between -180 and 180, got {pos.longitude}"
                    )
        if pos.timeout <= 0:
            errors.append(f"positioning.timeout must be positive, got {pos.timeout}")

        if self.search.default_radius_km <= 0:
            errors.append(
                f"search.default_radius_km must be positive, got {self.search.default_radius_km}"
            )

        if self.map.fallback_list_size < 0:
            errors.append(
                f"map.fallback_list_size must not be negative, got {self.map.fallback_list_size}"
            )
        if not -90 <= self.map.default_latitude <= 90:
            errors.append(
                f"map.default_latitude must be between -90 and 90, got {self.map.default_latitude}"
            )
        if not -180 <= self.map.default_longitude <= 180:
            errors.append(
                f"map.default_longitude must be between -180 and 180, "
                f"got {self.map.default_longitude}"
            )

        return errors


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.
                    Defaults to 'config.yaml' in the current directory.

    Returns:
        Validated Config object.

    Raises:
        FileNotFoundError: If the configuration file doesn't exist.
        ValueError: If the configuration is invalid.
    """
    if config_path is None:
        config_path = os.environ.get("LABORSCOUT_CONFIG", "config.yaml")

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path}. "
            "Please create a config.yaml file or set LABORSCOUT_CONFIG environment variable."
        )

    with open(path, "r") as f:
        raw_config = yaml.safe_load(f) or {}

    config = Config()

    if "geocoding" in raw_config:
        geo_data = raw_config["geocoding"] or {}
        config.geocoding = GeocodingConfig(
            provider=str(geo_data.get("provider", config.geocoding.provider)).lower(),
            api_key=geo_data.get("api_key", config.geocoding.api_key),
            user_agent=geo_data.get("user_agent", config.geocoding.user_agent),
            timeout=geo_data.get("timeout", config.geocoding.timeout),
        )

    if "positioning" in raw_config:
        pos_data = raw_config["positioning"] or {}
        config.positioning = PositioningConfig(
            provider=str(pos_data.get("provider", config.positioning.provider)).lower(),
            latitude=pos_data.get("latitude", config.positioning.latitude),
            longitude=pos_data.get("longitude", config.positioning.longitude),
            ip_lookup_url=pos_data.get("ip_lookup_url", config.positioning.ip_lookup_url),
            timeout=pos_data.get("timeout", config.positioning.timeout),
        )

    if "search" in raw_config:
        search_data = raw_config["search"] or {}
        config.search = SearchConfig(
            default_radius_km=search_data.get(
                "default_radius_km", config.search.default_radius_km
            ),
            sort_by_distance=search_data.get(
                "sort_by_distance", config.search.sort_by_distance
            ),
        )

    if "map" in raw_config:
        map_data = raw_config["map"] or {}
        config.map = MapConfig(
            api_key=map_data.get("api_key", config.map.api_key),
            fallback_list_size=map_data.get("fallback_list_size", config.map.fallback_list_size),
            default_latitude=map_data.get("default_latitude", config.map.default_latitude),
            default_longitude=map_data.get("default_longitude", config.map.default_longitude),
            zoom=map_data.get("zoom", config.map.zoom),
        )

    if "database" in raw_config:
        db_data = raw_config["database"] or {}
        config.database = DatabaseConfig(
            db_path=db_data.get("db_path", config.database.db_path),
        )

    if "session" in raw_config:
        session_data = raw_config["session"] or {}
        config.session = SessionConfig(
            path=session_data.get("path", config.session.path),
        )

    # Validate configuration
    errors = config.validate()
    if errors:
        raise ValueError(
            "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        )

    return config


def generate_example_config(output_path: str = "config.example.yaml") -> None:
    """
    Generate an example configuration file with all available options.

    Args:
        output_path: Path where the example config will be written.
    """
    example_config = """# Labor Scout Configuration
# Copy this file to config.yaml and customize for your needs.

# Address <-> coordinate lookups
geocoding:
  provider: "nominatim"  # none, nominatim or google
  # api_key: "your-google-maps-key"  # Required when provider is google
  user_agent: "laborscout/1.0"
  timeout: 10  # seconds

# Where "jobs near me" searches start from
positioning:
  provider: "ip"  # none, static or ip
  # latitude: 40.7580  # static provider only
  # longitude: -73.9855
  ip_lookup_url: "https://ipapi.co/json/"
  timeout: 10  # seconds

# Search defaults
search:
  default_radius_km: 50
  sort_by_distance: false  # true = nearest first, false = newest first

# Map presentation. Without an api_key the map degrades to a short list.
map:
  # api_key: "your-google-maps-key"
  fallback_list_size: 3
  default_latitude: 40.7128
  default_longitude: -74.0060
  zoom: 12

# Database Settings
database:
  db_path: "jobs.db"

# Signed-in user
session:
  path: ".laborscout_session.json"
"""

    with open(output_path, "w") as f:
        f.write(example_config)

    print(f"Example configuration written to: {output_path}")
