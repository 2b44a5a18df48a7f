"""
Main Pipeline Orchestrator for Location Analysis

Map (aerial) analysis:

  1. Input: location name + (lat, lng)
  2. Fetch supplementary place data (HERE discover / revgeocode / browse)
  3. Derive location heuristics (urban, coastal, dense, ...)
  4. Compute per-category object counts
  5. Lay out synthetic detections on a spatial grid
  6. Score population, air quality, development, infrastructure, environment
  7. Assemble MapAnalysisResult

Street-view analysis:

  1. Input: location name + (lat, lng) + heading + pitch
  2. Derive location heuristics from keywords
  3. Compute visible object counts for the view angle
  4. Lay out synthetic detections on the panorama canvas
  5. Label the scene (density, traffic, pedestrians, quality, time, weather)
  6. Assemble StreetViewAnalysisResult

Data Sources:
  - HERE Search APIs (optional): places, reverse geocode, browse, geocode
"""

import json
import math
import os
import random
import time
from datetime import datetime
from typing import Optional, Tuple

from loguru import logger

from .config import get_config, InsightConfig
from .models import (
    MapAnalysisResult, MapDetectionResult, AnalysisScores, BuildingSummary,
    RoadSummary, VegetationSummary, WaterBodySummary, PlaceDataBundle,
    StreetViewAnalysisResult, StreetViewDetectionResult, StreetViewScene,
    StreetViewMetadata, GeocodedLocation, LocationReport,
)
from .providers import MapProvider, HereMapProvider, ProviderState
from .collectors import HerePlacesCollector, GeocodingError
from .collectors.here import HereResponseParser
from .analysis import (
    profile_location, profile_street_location,
    calculate_map_object_counts, calculate_street_object_counts,
    MapObjectDetector, StreetViewDetector, build_location_report,
)
from .analysis.map_scoring import (
    calculate_population_estimate, calculate_air_quality_index,
    calculate_development_level, calculate_infrastructure_score,
    calculate_environmental_score, calculate_overall_confidence,
)
from .analysis.street_scene import (
    determine_urban_density, determine_traffic_level, determine_pedestrian_activity,
    extract_building_types, determine_infrastructure_quality, determine_time_of_day,
    determine_weather_conditions,
)


Coordinates = Tuple[float, float]


class AnalysisError(RuntimeError):
    """An analysis failed as a whole; no partial result is returned"""


def validate_coordinates(coordinates: Coordinates) -> Coordinates:
    """Check a (lat, lng) pair and return it as floats"""
    try:
        lat, lng = (float(c) for c in coordinates)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Coordinates must be a (lat, lng) pair, got {coordinates!r}") from e
    if not (math.isfinite(lat) and -90 <= lat <= 90):
        raise ValueError(f"Latitude must be within [-90, 90], got {lat}")
    if not (math.isfinite(lng) and -180 <= lng <= 180):
        raise ValueError(f"Longitude must be within [-180, 180], got {lng}")
    return lat, lng


class LocationAnalysisPipeline:
    """
    Main pipeline generating map and street-view analyses for a location

    Usage:
        pipeline = LocationAnalysisPipeline(rng=random.Random(7))
        result = pipeline.analyze_map("Times Square New York", (40.7580, -73.9855))
        pipeline.save(result, "output/times_square.json")
    """

    def __init__(
        self,
        config: Optional[InsightConfig] = None,
        rng: Optional[random.Random] = None,
        provider: Optional[MapProvider] = None,
        place_collector: Optional[HerePlacesCollector] = None,
        cache_dir: Optional[str] = None
    ):
        self.config = config or get_config()
        self.rng = rng or random.Random()
        self.cache_dir = cache_dir

        self.provider = provider
        if place_collector is None and self.config.enable_place_data:
            if self.provider is None:
                self.provider = HereMapProvider(config=self.config)
            if self.provider.state == ProviderState.UNINITIALIZED:
                self.provider.initialize()
            client = getattr(self.provider, "client", None) if self.provider.ready else None
            place_collector = HerePlacesCollector(client, cache_dir=cache_dir, api_config=self.config.api)
        self.place_collector = place_collector

        self.map_detector = MapObjectDetector(self.rng, self.config.map_analysis)
        self.street_detector = StreetViewDetector(self.rng, self.config.street_view)

    # ============================================================
    # Map analysis
    # ============================================================

    def analyze_map(
        self,
        location: str,
        coordinates: Coordinates,
        request_id: Optional[int] = None
    ) -> MapAnalysisResult:
        """
        Run the aerial analysis for one location

        Args:
            location: Free-text location name
            coordinates: (lat, lng) in decimal degrees
            request_id: Optional id assigned by an AnalysisSession

        Returns:
            MapAnalysisResult

        Raises:
            ValueError: Invalid coordinates
            AnalysisError: Anything else going wrong during synthesis
        """
        coordinates = validate_coordinates(coordinates)
        location = location or ""
        logger.info(f"Starting map analysis for {location or 'unnamed location'} {coordinates}")
        start = time.perf_counter()

        try:
            # Place data is fetched once and shared by every stage below
            place_data = self._fetch_place_data(coordinates, location)
            ma = self.config.map_analysis

            profile = profile_location(location, coordinates, place_data, ma.dense_place_threshold)
            counts = calculate_map_object_counts(profile)
            place_count = HereResponseParser.item_count(place_data.places) if place_data else 0
            rich_data = place_count > ma.rich_place_threshold

            detections = self.map_detector.detect(profile, counts, coordinates, rich_data=rich_data)
            total_objects = sum(len(objects) for objects in detections.values())

            detection = MapDetectionResult(
                **detections,
                total_objects=total_objects,
                processing_time_ms=int((time.perf_counter() - start) * 1000),
                confidence=calculate_overall_confidence(place_data, profile),
                image_processed=True,
                here_api_called=bool(place_data and place_data.any_source)
            )

            scores = AnalysisScores(
                population_estimate=calculate_population_estimate(profile, self.rng),
                air_quality_index=calculate_air_quality_index(profile, self.rng, ma.air_quality_bounds),
                development_level=calculate_development_level(
                    len(detection.buildings), len(detection.infrastructure)
                ),
                infrastructure_score=calculate_infrastructure_score(total_objects, ma.infrastructure_score_cap),
                environmental_score=calculate_environmental_score(
                    len(detection.trees), total_objects, ma.environmental_score_floor
                ),
            )

            result = MapAnalysisResult(
                request_id=request_id,
                location=location,
                coordinates=coordinates,
                buildings=self._building_summaries(detection),
                roads=self._road_summaries(detection, coordinates),
                vegetation=self._vegetation_summaries(detection),
                water_bodies=self._water_summaries(detection),
                analysis=scores,
                detection=detection,
                place_data=place_data
            )
        except Exception as e:
            logger.error(f"Map analysis failed for {location}: {e}")
            raise AnalysisError(f"Failed to analyze location: {e}") from e

        logger.info(f"Map analysis complete: {total_objects} objects, "
                    f"development {scores.development_level}, AQI {scores.air_quality_index}, "
                    f"confidence {detection.confidence * 100:.1f}%")
        return result

    def _fetch_place_data(self, coordinates: Coordinates, location: str) -> Optional[PlaceDataBundle]:
        if self.place_collector is None:
            return None
        return self.place_collector.fetch_place_data(coordinates, location)

    def _building_summaries(self, detection: MapDetectionResult):
        return [
            BuildingSummary(
                id=obj.id,
                type=obj.properties.building_type,
                coordinates=obj.coordinates,
                height=obj.properties.height,
                area=obj.bounding_box.area,
                confidence=obj.confidence
            )
            for obj in detection.buildings
        ]

    def _road_summaries(self, detection: MapDetectionResult, center: Coordinates):
        """Road detections as short polylines scattered around the centre"""
        roads = []
        for obj in detection.roads:
            points = [
                (center[0] + (self.rng.random() - 0.5) * 0.02, center[1] + (self.rng.random() - 0.5) * 0.02)
                for _ in range(math.floor(self.rng.random() * 5) + 3)
            ]
            roads.append(RoadSummary(
                id=obj.id,
                type=obj.subtype,
                coordinates=points,
                width=math.floor(self.rng.random() * 20) + 5,
                condition=obj.properties.condition,
                confidence=obj.confidence
            ))
        return roads

    def _vegetation_summaries(self, detection: MapDetectionResult):
        return [
            VegetationSummary(
                id=obj.id,
                type=obj.properties.vegetation_type,
                coordinates=obj.coordinates,
                area=obj.bounding_box.area,
                density=obj.confidence,
                confidence=obj.confidence
            )
            for obj in detection.trees
        ]

    def _water_summaries(self, detection: MapDetectionResult):
        return [
            WaterBodySummary(
                id=obj.id,
                type=obj.properties.water_type,
                coordinates=[obj.coordinates],
                area=obj.bounding_box.area,
                confidence=obj.confidence
            )
            for obj in detection.water
        ]

    # ============================================================
    # Street-view analysis
    # ============================================================

    def analyze_street_view(
        self,
        location: str,
        coordinates: Coordinates,
        heading: float = 0.0,
        pitch: float = 0.0,
        request_id: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> StreetViewAnalysisResult:
        """
        Run the street-view analysis for one camera position

        Args:
            location: Free-text location name
            coordinates: (lat, lng) in decimal degrees
            heading: Camera yaw in degrees
            pitch: Camera tilt in degrees, -90 (down) to 90 (up)
            request_id: Optional id assigned by an AnalysisSession
            now: Clock used for the time-of-day label (defaults to local time)

        Returns:
            StreetViewAnalysisResult

        Raises:
            ValueError: Invalid coordinates or camera angles
            AnalysisError: Anything else going wrong during synthesis
        """
        coordinates = validate_coordinates(coordinates)
        if not math.isfinite(heading):
            raise ValueError(f"Heading must be finite, got {heading}")
        if not (math.isfinite(pitch) and -90 <= pitch <= 90):
            raise ValueError(f"Pitch must be within [-90, 90], got {pitch}")

        location = location or ""
        logger.info(f"Starting street view analysis for {location or 'unnamed location'} "
                    f"at heading {heading}°, pitch {pitch}°")
        start = time.perf_counter()

        try:
            profile = profile_street_location(location, coordinates)
            counts = calculate_street_object_counts(profile, heading, pitch)
            objects = self.street_detector.detect(profile, counts, pitch)
            total_objects = sum(len(items) for items in objects.values())

            detection = StreetViewDetectionResult(
                **objects,
                total_objects=total_objects,
                processing_time_ms=int((time.perf_counter() - start) * 1000),
                confidence=self.config.street_view.detection_confidence,
                image_processed=True
            )

            scene = StreetViewScene(
                urban_density=determine_urban_density(
                    len(detection.buildings), len(detection.infrastructure), total_objects
                ),
                traffic_level=determine_traffic_level(len(detection.vehicles)),
                pedestrian_activity=determine_pedestrian_activity(len(detection.pedestrians)),
                building_types=extract_building_types(detection.buildings),
                infrastructure_quality=determine_infrastructure_quality(detection.infrastructure),
                time_of_day=determine_time_of_day(now),
                weather_conditions=determine_weather_conditions(
                    self.rng, self.config.street_view.weather_weights
                ),
            )

            result = StreetViewAnalysisResult(
                request_id=request_id,
                detection=detection,
                scene=scene,
                metadata=StreetViewMetadata(
                    location=location,
                    coordinates=coordinates,
                    heading=heading,
                    pitch=pitch
                )
            )
        except Exception as e:
            logger.error(f"Street view analysis failed for {location}: {e}")
            raise AnalysisError(f"Failed to analyze street view: {e}") from e

        logger.info(f"Street view analysis complete: {total_objects} objects, "
                    f"density {scene.urban_density}, traffic {scene.traffic_level}")
        return result

    # ============================================================
    # Search, report, output
    # ============================================================

    def search_location(self, query: str) -> GeocodedLocation:
        """
        Forward-geocode a free-text query via HERE

        Raises:
            ValueError: Blank query
            GeocodingError: Provider unavailable, request failed or no match
        """
        if not query or not query.strip():
            raise ValueError("Please enter a location")
        client = getattr(self.provider, "client", None) if self.provider and self.provider.ready else None
        if client is None:
            raise GeocodingError("HERE API key not configured - cannot search locations")
        return client.geocode(query)

    def build_report(self, result: MapAnalysisResult) -> LocationReport:
        return build_location_report(result, self.rng)

    def save(self, result, output_path: str) -> str:
        """Save an analysis result to a JSON file"""
        os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(result.model_dump(), f, indent=2, ensure_ascii=False)

        logger.info(f"Saved analysis to {output_path}")
        return output_path

    def close(self) -> None:
        if self.provider is not None:
            self.provider.dispose()
