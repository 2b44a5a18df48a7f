"""
Location report: population, air quality and road development figures
derived from a finished map analysis
"""

import math
import random
from collections import Counter
from typing import Optional

from ..models import (
    MapAnalysisResult, LocationReport, PopulationReport, AirQualityReport,
    Pollutants, RoadDevelopmentReport,
)
from .sampling import clamp


def air_quality_rating(index: int) -> str:
    """US AQI bands"""
    if index <= 50:
        return "Good"
    if index <= 100:
        return "Moderate"
    if index <= 150:
        return "Unhealthy for Sensitive Groups"
    return "Unhealthy"


def build_location_report(result: MapAnalysisResult, rng: Optional[random.Random] = None) -> LocationReport:
    """
    Summarise a map analysis into the three report tabs

    Args:
        result: Completed map analysis
        rng: Random source for the figures the analysis does not carry

    Returns:
        LocationReport
    """
    rng = rng or random.Random()
    scores = result.analysis
    detection = result.detection

    # Pollutants scale with the index so the numbers agree with the rating
    aqi = scores.air_quality_index
    pollution = aqi / 150
    pollutants = Pollutants(
        pm25=math.floor(5 + pollution * 45 * (0.8 + rng.random() * 0.4)),
        pm10=math.floor(10 + pollution * 90 * (0.8 + rng.random() * 0.4)),
        o3=math.floor(20 + pollution * 60 * rng.random()),
        no2=math.floor(10 + pollution * 40 * rng.random()),
    )

    density_base = {"high": 4000, "medium": 2000, "low": 1000}[scores.development_level]
    population = PopulationReport(
        total=scores.population_estimate,
        density=math.floor(density_base + rng.random() * 1000),
        growth=round(rng.random() * 5, 1),
    )

    main_roads = sum(1 for r in result.roads if r.type in ("highway", "main"))
    conditions = Counter(r.condition for r in result.roads)
    dominant_condition = conditions.most_common(1)[0][0] if conditions else "fair"
    road_count = max(1, len(result.roads))
    congestion = int(clamp(round(len(detection.vehicles) / road_count * 25), 0, 100))

    road_development = RoadDevelopmentReport(
        total_roads=len(result.roads),
        main_roads=main_roads,
        local_roads=len(result.roads) - main_roads,
        condition=dominant_condition,
        congestion_level=congestion,
    )

    return LocationReport(
        location=result.location,
        population=population,
        air_quality=AirQualityReport(
            index=aqi,
            rating=air_quality_rating(aqi),
            pollutants=pollutants,
        ),
        road_development=road_development,
    )
