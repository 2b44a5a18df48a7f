"""
Pydantic models for location analysis results

Detected objects carry a closed, per-category properties model instead of an
open key/value bag. The ``kind`` field discriminates the union.
"""

from datetime import datetime
from typing import Annotated, List, Optional, Dict, Any, Literal, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field


Coordinates = Tuple[float, float]  # (lat, lng)

Condition = Literal["excellent", "good", "fair", "poor"]
Level = Literal["low", "medium", "high"]


class BoundingBox(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height


# ============================================================
# Map (aerial) properties
# ============================================================

class BuildingProperties(BaseModel):
    kind: Literal["building"] = "building"
    building_type: str
    height: int
    floors: int
    year_built: int
    condition: Condition


class RoadProperties(BaseModel):
    kind: Literal["road"] = "road"
    road_type: str
    lanes: int
    speed_limit: int
    condition: Condition
    material: str


class TreeProperties(BaseModel):
    kind: Literal["tree"] = "tree"
    vegetation_type: str
    height: int
    canopy_diameter: float
    health: Condition
    age: int


class WaterProperties(BaseModel):
    kind: Literal["water"] = "water"
    water_type: str
    depth: int
    clarity: str
    flow: Literal["flowing", "still"]


class VehicleProperties(BaseModel):
    kind: Literal["vehicle"] = "vehicle"
    vehicle_type: str
    color: str
    moving: bool
    speed: float = 0.0  # km/h
    direction: float  # degrees


class InfrastructureProperties(BaseModel):
    kind: Literal["infrastructure"] = "infrastructure"
    infrastructure_type: str
    material: str
    condition: Condition


MapObjectProperties = Annotated[
    Union[
        BuildingProperties,
        RoadProperties,
        TreeProperties,
        WaterProperties,
        VehicleProperties,
        InfrastructureProperties,
    ],
    Field(discriminator="kind"),
]


class DetectedObject(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    category: Literal["building", "road", "tree", "water", "vehicle", "infrastructure"]
    subtype: str
    coordinates: Coordinates
    bounding_box: BoundingBox
    confidence: float = Field(ge=0.0, le=1.0)
    properties: MapObjectProperties


# ============================================================
# Street-view properties
# ============================================================

class StreetBuildingProperties(BaseModel):
    kind: Literal["street_building"] = "street_building"
    building_type: str
    stories: int
    has_entrance: bool
    material: str
    condition: Condition
    has_signage: bool
    architectural_style: str


class PedestrianProperties(BaseModel):
    kind: Literal["pedestrian"] = "pedestrian"
    activity: str
    is_group: bool
    has_backpack: bool
    direction: str
    clothing: str
    age: str


class StreetVehicleProperties(BaseModel):
    kind: Literal["street_vehicle"] = "street_vehicle"
    vehicle_type: str
    color: str
    direction: str
    is_moving: bool
    has_lights: bool
    condition: Condition


class StreetInfrastructureProperties(BaseModel):
    kind: Literal["street_infrastructure"] = "street_infrastructure"
    infra_type: str
    material: str
    condition: Condition
    has_text: bool
    is_illuminated: bool


class StreetVegetationProperties(BaseModel):
    kind: Literal["street_vegetation"] = "street_vegetation"
    veg_type: str
    size: str
    health: Condition
    season: str
    has_flowers: bool


StreetObjectProperties = Annotated[
    Union[
        StreetBuildingProperties,
        PedestrianProperties,
        StreetVehicleProperties,
        StreetInfrastructureProperties,
        StreetVegetationProperties,
    ],
    Field(discriminator="kind"),
]


class StreetViewDetectedObject(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    category: Literal["building", "pedestrian", "vehicle", "infrastructure", "vegetation"]
    subtype: str
    bounding_box: BoundingBox
    confidence: float = Field(ge=0.0, le=1.0)
    properties: StreetObjectProperties
    distance: Optional[float] = Field(default=None, gt=0.0)  # meters


# ============================================================
# External place data
# ============================================================

class PlaceDataBundle(BaseModel):
    """Raw HERE responses for one map analysis call; each source may be None"""
    places: Optional[Dict[str, Any]] = None
    geocode: Optional[Dict[str, Any]] = None
    browse: Optional[Dict[str, Any]] = None
    coordinates: Coordinates
    location: str
    data_quality: int = Field(default=0, ge=0, le=100)
    error: Optional[str] = None

    @property
    def any_source(self) -> bool:
        return any(source is not None for source in (self.places, self.geocode, self.browse))


class GeocodedLocation(BaseModel):
    title: str
    coordinates: Coordinates
    address_label: Optional[str] = None


# ============================================================
# Map analysis result
# ============================================================

class MapDetectionResult(BaseModel):
    buildings: List[DetectedObject] = Field(default_factory=list)
    roads: List[DetectedObject] = Field(default_factory=list)
    trees: List[DetectedObject] = Field(default_factory=list)
    water: List[DetectedObject] = Field(default_factory=list)
    vehicles: List[DetectedObject] = Field(default_factory=list)
    infrastructure: List[DetectedObject] = Field(default_factory=list)
    total_objects: int
    processing_time_ms: int
    confidence: float
    image_processed: bool = True
    here_api_called: bool = False


class BuildingSummary(BaseModel):
    id: str
    type: str
    coordinates: Coordinates
    height: int
    area: float
    confidence: float


class RoadSummary(BaseModel):
    id: str
    type: Literal["highway", "main", "local", "pedestrian"]
    coordinates: List[Coordinates]
    width: int
    condition: Condition
    confidence: float


class VegetationSummary(BaseModel):
    id: str
    type: str
    coordinates: Coordinates
    area: float
    density: float
    confidence: float


class WaterBodySummary(BaseModel):
    id: str
    type: str
    coordinates: List[Coordinates]
    area: float
    confidence: float


class AnalysisScores(BaseModel):
    population_estimate: int
    air_quality_index: int = Field(ge=0)
    development_level: Level
    infrastructure_score: int = Field(ge=0, le=100)
    environmental_score: int = Field(ge=0, le=100)


class MapAnalysisResult(BaseModel):
    request_id: Optional[int] = None
    location: str
    coordinates: Coordinates
    buildings: List[BuildingSummary] = Field(default_factory=list)
    roads: List[RoadSummary] = Field(default_factory=list)
    vegetation: List[VegetationSummary] = Field(default_factory=list)
    water_bodies: List[WaterBodySummary] = Field(default_factory=list)
    analysis: AnalysisScores
    detection: MapDetectionResult
    place_data: Optional[PlaceDataBundle] = None
    computed_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())


# ============================================================
# Street-view analysis result
# ============================================================

class StreetViewDetectionResult(BaseModel):
    buildings: List[StreetViewDetectedObject] = Field(default_factory=list)
    pedestrians: List[StreetViewDetectedObject] = Field(default_factory=list)
    vehicles: List[StreetViewDetectedObject] = Field(default_factory=list)
    infrastructure: List[StreetViewDetectedObject] = Field(default_factory=list)
    vegetation: List[StreetViewDetectedObject] = Field(default_factory=list)
    total_objects: int
    processing_time_ms: int
    confidence: float
    image_processed: bool = True


class StreetViewScene(BaseModel):
    urban_density: Level
    traffic_level: Literal["light", "moderate", "heavy"]
    pedestrian_activity: Literal["low", "moderate", "high"]
    building_types: List[str] = Field(default_factory=list)
    infrastructure_quality: Condition
    time_of_day: Literal["morning", "afternoon", "evening", "night"]
    weather_conditions: Literal["clear", "cloudy", "rainy", "foggy"]


class StreetViewMetadata(BaseModel):
    location: str
    coordinates: Coordinates
    heading: float
    pitch: float
    timestamp: str = Field(default_factory=lambda: datetime.utcnow().isoformat())


class StreetViewAnalysisResult(BaseModel):
    request_id: Optional[int] = None
    detection: StreetViewDetectionResult
    scene: StreetViewScene
    metadata: StreetViewMetadata


# ============================================================
# Location report
# ============================================================

class PopulationReport(BaseModel):
    total: int
    density: int  # people per km2
    growth: float  # percent per year


class Pollutants(BaseModel):
    pm25: int
    pm10: int
    o3: int
    no2: int


class AirQualityReport(BaseModel):
    index: int
    rating: str
    pollutants: Pollutants


class RoadDevelopmentReport(BaseModel):
    total_roads: int
    main_roads: int
    local_roads: int
    condition: Condition
    congestion_level: int = Field(ge=0, le=100)


class LocationReport(BaseModel):
    location: str
    population: PopulationReport
    air_quality: AirQualityReport
    road_development: RoadDevelopmentReport
