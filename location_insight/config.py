"""
Configuration settings for Location Insight Generator
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


@dataclass
class APIConfig:
    """HERE API endpoints and configuration"""
    discover_url: str = "https://discover.search.hereapi.com/v1/discover"
    revgeocode_url: str = "https://revgeocode.search.hereapi.com/v1/revgeocode"
    browse_url: str = "https://browse.search.hereapi.com/v1/browse"
    geocode_url: str = "https://geocode.search.hereapi.com/v1/geocode"

    # Result limits per endpoint
    discover_limit: int = 50
    browse_limit: int = 30

    # Environment variable holding the API key (also read from .env)
    api_key_env: str = "HERE_API_KEY"

    # Request settings (no retries: a failed source is just missing data)
    request_timeout: int = 15
    max_workers: int = 3

    # User agent for API requests
    user_agent: str = "LocationInsightGenerator/1.0"


@dataclass
class MapAnalysisConfig:
    """Aerial/map detection settings"""
    # Spatial grid: (2 * half_size + 1)^2 cells around the centre
    grid_half_size: int = 5
    grid_cell_deg: float = 0.005  # ~500m

    # Image canvas the bounding boxes are expressed in (pixels)
    canvas_width: int = 800
    canvas_height: int = 600

    # Place count above which the data is considered rich
    rich_place_threshold: int = 10
    dense_place_threshold: int = 15

    # Base confidence per category
    base_confidence: Dict[str, float] = field(default_factory=lambda: {
        "building": 0.92,
        "road": 0.88,
        "tree": 0.85,
        "water": 0.90,
        "vehicle": 0.78,
        "infrastructure": 0.82,
    })

    # Clamp band per category (min, max)
    confidence_bands: Dict[str, Tuple[float, float]] = field(default_factory=lambda: {
        "building": (0.65, 0.98),
        "road": (0.65, 0.98),
        "tree": (0.65, 0.98),
        "water": (0.65, 0.98),
        "vehicle": (0.65, 0.98),
        "infrastructure": (0.65, 0.98),
    })

    # Base bounding box sizes (width, height) in pixels
    object_sizes: Dict[str, Tuple[float, float]] = field(default_factory=lambda: {
        "building": (40, 60),
        "building:commercial": (60, 80),
        "building:industrial": (80, 40),
        "road": (80, 20),
        "tree": (15, 20),
        "water": (100, 80),
        "vehicle": (12, 8),
        "vehicle:truck": (18, 12),
        "vehicle:bus": (20, 10),
        "infrastructure": (25, 30),
    })

    # Score bounds
    air_quality_bounds: Tuple[int, int] = (20, 150)
    infrastructure_score_cap: int = 95
    environmental_score_floor: int = 30


@dataclass
class StreetViewConfig:
    """Street-view detection settings"""
    canvas_width: int = 800
    canvas_height: int = 500
    detection_confidence: float = 0.94

    # Weighted weather draw
    weather_weights: List[Tuple[str, float]] = field(default_factory=lambda: [
        ("clear", 0.5),
        ("cloudy", 0.3),
        ("rainy", 0.15),
        ("foggy", 0.05),
    ])


@dataclass
class InsightConfig:
    """Top-level configuration"""
    # Output settings
    output_dir: str = "output"

    # Feature flags
    enable_place_data: bool = True  # Query HERE for supplementary place data

    api: APIConfig = field(default_factory=APIConfig)
    map_analysis: MapAnalysisConfig = field(default_factory=MapAnalysisConfig)
    street_view: StreetViewConfig = field(default_factory=StreetViewConfig)


# Global config instance
config = InsightConfig()


def get_config() -> InsightConfig:
    """Get global configuration"""
    return config


def validate_config(config: InsightConfig) -> None:
    """
    Validate that all required configuration values are set.
    Raises ValueError if any required value is missing or invalid.
    """
    errors = []

    if not hasattr(config, 'api') or config.api is None:
        errors.append("api configuration is required but not set")
    else:
        for name in ("discover_url", "revgeocode_url", "browse_url", "geocode_url"):
            if not getattr(config.api, name, None):
                errors.append(f"api.{name} is required but not set")
        if config.api.request_timeout is None or config.api.request_timeout <= 0:
            errors.append(f"api.request_timeout must be positive, got {config.api.request_timeout}")
        if config.api.max_workers is None or config.api.max_workers < 1:
            errors.append(f"api.max_workers must be at least 1, got {config.api.max_workers}")

    if not hasattr(config, 'map_analysis') or config.map_analysis is None:
        errors.append("map_analysis configuration is required but not set")
    else:
        ma = config.map_analysis
        if ma.grid_half_size < 0:
            errors.append(f"map_analysis.grid_half_size must be >= 0, got {ma.grid_half_size}")
        if ma.grid_cell_deg <= 0:
            errors.append(f"map_analysis.grid_cell_deg must be positive, got {ma.grid_cell_deg}")
        for category, (low, high) in ma.confidence_bands.items():
            if not 0.0 <= low <= high <= 1.0:
                errors.append(f"map_analysis.confidence_bands[{category}] must lie within [0, 1], got ({low}, {high})")
        missing = set(ma.base_confidence) - set(ma.confidence_bands)
        if missing:
            errors.append(f"map_analysis.confidence_bands missing categories: {sorted(missing)}")
        low, high = ma.air_quality_bounds
        if low > high:
            errors.append(f"map_analysis.air_quality_bounds inverted: ({low}, {high})")

    if not hasattr(config, 'street_view') or config.street_view is None:
        errors.append("street_view configuration is required but not set")
    else:
        sv = config.street_view
        if sv.canvas_width <= 0 or sv.canvas_height <= 0:
            errors.append(f"street_view canvas must be positive, got {sv.canvas_width}x{sv.canvas_height}")
        if not sv.weather_weights or sum(w for _, w in sv.weather_weights) <= 0:
            errors.append("street_view.weather_weights must contain a positive weight")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ValueError(error_msg)
