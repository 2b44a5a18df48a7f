"""
Aerial object detection (synthetic)

Lays out detected buildings, roads, trees, water, vehicles and infrastructure
around a centre point. Buildings, trees, vehicles and infrastructure are
placed on an 11x11 lattice of ~500m cells; roads follow a radial pattern and
water is scattered radially with enlarged boxes.
"""

import math
import random
from typing import List, Optional, Tuple

from loguru import logger

from ..config import get_config, MapAnalysisConfig
from ..models import (
    DetectedObject, BoundingBox,
    BuildingProperties, RoadProperties, TreeProperties, WaterProperties,
    VehicleProperties, InfrastructureProperties,
)
from .location_profile import LocationProfile
from .object_counts import MapObjectCounts
from .sampling import weighted_choice, jitter, chance, clamp


Coordinates = Tuple[float, float]

BUILDING_TYPES = ["residential", "commercial", "industrial", "mixed"]
ROAD_TYPE_WEIGHTS = [("highway", 0.1), ("main", 0.3), ("local", 0.5), ("pedestrian", 0.1)]
WATER_TYPES = ["river", "lake", "pond", "stream"]
CONDITIONS = ["excellent", "good", "fair", "poor"]

URBAN_INFRASTRUCTURE = ["traffic_light", "street_sign", "utility_pole", "antenna", "transformer"]
RURAL_INFRASTRUCTURE = ["power_line", "water_tower", "bridge", "fence"]

INFRASTRUCTURE_MATERIALS = {
    "traffic_light": "metal",
    "street_sign": "aluminum",
    "utility_pole": "wood",
    "antenna": "steel",
    "transformer": "metal",
    "power_line": "aluminum",
    "water_tower": "steel",
    "bridge": "concrete",
    "fence": "wood",
}


def create_spatial_grid(center: Coordinates, cell_size: float, half_size: int = 5) -> List[Coordinates]:
    """Lattice of (2*half_size+1)^2 cell centres around ``center``, row by row"""
    lat, lng = center
    return [
        (lat + i * cell_size, lng + j * cell_size)
        for i in range(-half_size, half_size + 1)
        for j in range(-half_size, half_size + 1)
    ]


class MapObjectDetector:
    """
    Synthesizes aerial detections for one location

    Usage:
        detector = MapObjectDetector(random.Random(42))
        objects = detector.detect(profile, counts, (40.758, -73.9855), rich_data=True)
    """

    def __init__(self, rng: Optional[random.Random] = None, config: Optional[MapAnalysisConfig] = None):
        self.rng = rng or random.Random()
        self.config = config or get_config().map_analysis

    def detect(
        self,
        profile: LocationProfile,
        counts: MapObjectCounts,
        center: Coordinates,
        rich_data: bool = False
    ) -> dict:
        """
        Generate all categories

        Args:
            profile: Location heuristics
            counts: Target count per category
            center: (lat, lng)
            rich_data: True when the place list is large enough to boost confidence

        Returns:
            Dict of category name -> list of DetectedObject
        """
        grid = create_spatial_grid(center, self.config.grid_cell_deg, self.config.grid_half_size)

        result = {
            "buildings": self.generate_buildings(counts.buildings, grid, rich_data),
            "roads": self.generate_road_network(counts.roads, center, rich_data),
            "trees": self.generate_vegetation_clusters(counts.trees, grid, profile),
            "water": self.generate_water_features(counts.water, center, profile, rich_data),
            "vehicles": self.generate_traffic_pattern(counts.vehicles, grid, profile),
            "infrastructure": self.generate_infrastructure(counts.infrastructure, grid, profile, rich_data),
        }

        logger.debug("Map detections: " + ", ".join(f"{len(v)} {k}" for k, v in result.items()))
        return result

    # ============================================================
    # Placement strategies
    # ============================================================

    def generate_buildings(self, count: int, grid: List[Coordinates], rich_data: bool) -> List[DetectedObject]:
        """Clusters of ~8 buildings spread evenly over the grid"""
        objects = []
        if count <= 0:
            return objects

        clusters = min(math.ceil(count / 8), len(grid))
        per_cluster = math.ceil(count / clusters)
        stride = len(grid) // clusters

        for cluster in range(clusters):
            cell_lat, cell_lng = grid[cluster * stride]
            for _ in range(per_cluster):
                if len(objects) >= count:
                    break
                coords = (cell_lat + jitter(self.rng, 0.002), cell_lng + jitter(self.rng, 0.002))
                subtype = self.rng.choice(BUILDING_TYPES)
                objects.append(self._create_object("building", len(objects), coords, subtype, rich_data))

        return objects

    def generate_road_network(self, count: int, center: Coordinates, rich_data: bool) -> List[DetectedObject]:
        """Roads fanned out around the centre, mostly local"""
        objects = []
        for i in range(count):
            road_type = weighted_choice(self.rng, ROAD_TYPE_WEIGHTS, "local")
            angle = (i / count) * 2 * math.pi + self.rng.random() * 0.5
            distance = 0.001 + self.rng.random() * 0.004
            coords = (center[0] + math.cos(angle) * distance, center[1] + math.sin(angle) * distance)
            objects.append(self._create_object("road", i, coords, road_type, rich_data))
        return objects

    def generate_vegetation_clusters(
        self,
        count: int,
        grid: List[Coordinates],
        profile: LocationProfile
    ) -> List[DetectedObject]:
        """Trees in clumps; bigger clumps where there are parks"""
        objects = []
        cluster_sizes = [8, 12, 15] if profile.has_parks else [3, 5, 7]
        remaining = count

        while remaining > 0:
            cluster_size = min(self.rng.choice(cluster_sizes), remaining)
            cell_lat, cell_lng = self.rng.choice(grid)
            for _ in range(cluster_size):
                coords = (cell_lat + jitter(self.rng, 0.001), cell_lng + jitter(self.rng, 0.001))
                tree_type = self._tree_type(profile)
                objects.append(self._create_object("tree", len(objects), coords, tree_type, False))
            remaining -= cluster_size

        return objects

    def generate_water_features(
        self,
        count: int,
        center: Coordinates,
        profile: LocationProfile,
        rich_data: bool
    ) -> List[DetectedObject]:
        """Few, large water bodies near the centre"""
        objects = []
        for i in range(count):
            distance = self.rng.random() * 0.003
            angle = self.rng.random() * 2 * math.pi
            coords = (center[0] + math.cos(angle) * distance, center[1] + math.sin(angle) * distance)
            water_type = self._water_type(profile)
            objects.append(self._create_object("water", i, coords, water_type, rich_data, size_scale=2.0))
        return objects

    def generate_traffic_pattern(
        self,
        count: int,
        grid: List[Coordinates],
        profile: LocationProfile
    ) -> List[DetectedObject]:
        """Vehicles concentrated on every 2nd (commercial) or 3rd grid cell"""
        step = 2 if profile.is_commercial else 3
        traffic_cells = [cell for index, cell in enumerate(grid) if index % step == 0] or grid[:1]

        objects = []
        for i in range(count):
            cell_lat, cell_lng = traffic_cells[i % len(traffic_cells)]
            coords = (cell_lat + jitter(self.rng, 0.0005), cell_lng + jitter(self.rng, 0.0005))
            vehicle_type = self._vehicle_type(profile)
            objects.append(self._create_object("vehicle", i, coords, vehicle_type, False))
        return objects

    def generate_infrastructure(
        self,
        count: int,
        grid: List[Coordinates],
        profile: LocationProfile,
        rich_data: bool
    ) -> List[DetectedObject]:
        """One item per grid cell in order, wrapping around"""
        types = URBAN_INFRASTRUCTURE if rich_data else RURAL_INFRASTRUCTURE
        objects = []
        for i in range(count):
            cell_lat, cell_lng = grid[i % len(grid)]
            coords = (cell_lat + jitter(self.rng, 0.001), cell_lng + jitter(self.rng, 0.001))
            objects.append(self._create_object("infrastructure", i, coords, self.rng.choice(types), rich_data))
        return objects

    # ============================================================
    # Object construction
    # ============================================================

    def _create_object(
        self,
        category: str,
        index: int,
        coords: Coordinates,
        subtype: str,
        rich_data: bool,
        size_scale: float = 1.0
    ) -> DetectedObject:
        base_width, base_height = self._object_size(category, subtype)
        width = base_width + jitter(self.rng, base_width * 0.3)
        height = base_height + jitter(self.rng, base_height * 0.3)

        return DetectedObject(
            id=f"{category}_{index}",
            category=category,
            subtype=subtype,
            coordinates=coords,
            bounding_box=BoundingBox(
                x=self.rng.random() * self.config.canvas_width,
                y=self.rng.random() * self.config.canvas_height,
                width=width * size_scale,
                height=height * size_scale
            ),
            confidence=self._confidence(category, rich_data),
            properties=self._properties(category, subtype)
        )

    def _object_size(self, category: str, subtype: str) -> Tuple[float, float]:
        sizes = self.config.object_sizes
        return sizes.get(f"{category}:{subtype}") or sizes.get(category) or (30, 30)

    def _confidence(self, category: str, rich_data: bool) -> float:
        """Category base, +0.05 with rich place data, +/-0.05 noise, clamped to the category band"""
        confidence = self.config.base_confidence.get(category, 0.8)
        if rich_data:
            confidence += 0.05
        confidence += jitter(self.rng, 0.1)
        low, high = self.config.confidence_bands.get(category, (0.65, 0.98))
        return clamp(confidence, low, high)

    def _properties(self, category: str, subtype: str):
        rng = self.rng

        if category == "building":
            height = self._building_height(subtype)
            return BuildingProperties(
                building_type=subtype,
                height=height,
                floors=math.ceil(height / 3.5),
                year_built=1950 + math.floor(rng.random() * 70),
                condition=rng.choice(CONDITIONS)
            )

        if category == "road":
            return RoadProperties(
                road_type=subtype,
                lanes=self._lane_count(subtype),
                speed_limit=self._speed_limit(subtype),
                condition=rng.choice(CONDITIONS),
                material=rng.choice(["asphalt", "concrete", "gravel"])
            )

        if category == "tree":
            height = self._tree_height(subtype)
            return TreeProperties(
                vegetation_type=subtype,
                height=height,
                canopy_diameter=height * (0.6 + rng.random() * 0.4),
                health=rng.choice(CONDITIONS),
                age=math.floor(rng.random() * 50) + 5
            )

        if category == "water":
            return WaterProperties(
                water_type=subtype,
                depth=self._water_depth(subtype),
                clarity=rng.choice(["clear", "murky", "polluted"]),
                flow="flowing" if subtype == "river" else "still"
            )

        if category == "vehicle":
            moving = chance(rng, 0.3)  # 70% moving
            return VehicleProperties(
                vehicle_type=subtype,
                color=rng.choice(["white", "black", "silver", "blue", "red"]),
                moving=moving,
                speed=rng.random() * 60 + 10 if moving else 0.0,
                direction=rng.random() * 360
            )

        if category == "infrastructure":
            return InfrastructureProperties(
                infrastructure_type=subtype,
                material=INFRASTRUCTURE_MATERIALS.get(subtype, "metal"),
                condition=rng.choice(CONDITIONS)
            )

        raise ValueError(f"Unknown object category: {category}")

    # ============================================================
    # Subtype and attribute draws
    # ============================================================

    def _tree_type(self, profile: LocationProfile) -> str:
        if profile.is_coastal:
            return self.rng.choice(["palm", "mangrove", "coastal_pine"])
        if profile.is_urban:
            return self.rng.choice(["street_tree", "ornamental", "shade_tree"])
        return self.rng.choice(["oak", "maple", "pine", "birch", "elm"])

    def _water_type(self, profile: LocationProfile) -> str:
        # Named water features nearby decide the type
        for place in profile.places:
            title = place.title.lower()
            for water_type in ("river", "lake", "pond", "stream"):
                if water_type in title:
                    return water_type
        return self.rng.choice(WATER_TYPES)

    def _vehicle_type(self, profile: LocationProfile) -> str:
        if profile.is_commercial:
            return self.rng.choice(["car", "truck", "van", "delivery"])
        if profile.is_urban:
            return self.rng.choice(["car", "taxi", "bus", "motorcycle"])
        return self.rng.choice(["car", "pickup", "suv"])

    def _building_height(self, building_type: str) -> int:
        ranges = {
            "residential": (8, 12),
            "commercial": (15, 25),
            "industrial": (6, 8),
            "mixed": (10, 20),
        }
        if building_type not in ranges:
            return 10
        low, span = ranges[building_type]
        return math.floor(low + self.rng.random() * span)

    def _lane_count(self, road_type: str) -> int:
        if road_type == "highway":
            return 4 + math.floor(self.rng.random() * 4)
        if road_type == "main":
            return 2 + math.floor(self.rng.random() * 3)
        if road_type == "local":
            return 1 + math.floor(self.rng.random() * 2)
        if road_type == "pedestrian":
            return 0
        return 2

    def _speed_limit(self, road_type: str) -> int:
        if road_type == "highway":
            return 80 + math.floor(self.rng.random() * 40)
        if road_type == "main":
            return 40 + math.floor(self.rng.random() * 20)
        if road_type == "local":
            return 20 + math.floor(self.rng.random() * 20)
        if road_type == "pedestrian":
            return 5
        return 50

    def _tree_height(self, tree_type: str) -> int:
        ranges = {
            "oak": (15, 15),
            "pine": (20, 20),
            "palm": (8, 12),
            "street_tree": (5, 10),
            "ornamental": (3, 7),
        }
        if tree_type not in ranges:
            return 10
        low, span = ranges[tree_type]
        return math.floor(low + self.rng.random() * span)

    def _water_depth(self, water_type: str) -> int:
        ranges = {
            "river": (2, 8),
            "lake": (5, 45),
            "pond": (1, 3),
            "stream": (0.5, 1.5),
        }
        if water_type not in ranges:
            return 3
        low, span = ranges[water_type]
        return math.floor(low + self.rng.random() * span)
