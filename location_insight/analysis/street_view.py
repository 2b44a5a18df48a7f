"""
Street-view object detection (synthetic)

Objects are laid out in screen space on a panoramic canvas. Buildings sit on
the horizon, pedestrians and vehicles are anchored to the bottom edge, trees
hug the left/right edges and ground cover sits low. Pitch scales sizes and
visibility.
"""

import math
import random
from typing import List, Optional, Tuple

from ..config import get_config, StreetViewConfig
from ..models import (
    StreetViewDetectedObject, BoundingBox,
    StreetBuildingProperties, PedestrianProperties, StreetVehicleProperties,
    StreetInfrastructureProperties, StreetVegetationProperties,
)
from .location_profile import LocationProfile
from .object_counts import StreetObjectCounts
from .sampling import chance, clamp


CONDITIONS = ["poor", "fair", "good", "excellent"]

COMMERCIAL_BUILDINGS = ["storefront", "office_building", "restaurant", "hotel", "retail", "bank"]
RESIDENTIAL_BUILDINGS = ["apartment", "house", "townhouse", "residential", "condo"]
MIXED_BUILDINGS = ["mixed_use", "office_building", "institutional", "industrial", "government"]

PEDESTRIAN_ACTIVITIES = ["walking", "standing", "sitting", "cycling", "jogging", "waiting"]

VEHICLE_TYPES = ["car", "truck", "bus", "motorcycle", "taxi", "delivery_van", "suv", "bicycle"]

URBAN_INFRASTRUCTURE = [
    "traffic_light", "street_sign", "bus_stop", "bench", "trash_can",
    "street_lamp", "fire_hydrant", "crosswalk", "parking_meter",
]
RURAL_INFRASTRUCTURE = ["street_sign", "utility_pole", "mailbox", "fence", "street_lamp", "stop_sign"]

URBAN_VEGETATION = ["street_tree", "planter", "small_bush", "flower_bed", "hedge", "lawn"]
RURAL_VEGETATION = ["tree", "bush", "grass", "forest", "hedge", "wildflowers"]


class StreetViewDetector:
    """Synthesizes detections for one street-view frame"""

    def __init__(self, rng: Optional[random.Random] = None, config: Optional[StreetViewConfig] = None):
        self.rng = rng or random.Random()
        self.config = config or get_config().street_view
        self.width = self.config.canvas_width
        self.height = self.config.canvas_height

    def detect(self, profile: LocationProfile, counts: StreetObjectCounts, pitch: float) -> dict:
        return {
            "buildings": self.generate_buildings(counts.buildings, profile, pitch),
            "pedestrians": self.generate_pedestrians(counts.pedestrians, pitch),
            "vehicles": self.generate_vehicles(counts.vehicles, pitch),
            "infrastructure": self.generate_infrastructure(counts.infrastructure, profile, pitch),
            "vegetation": self.generate_vegetation(counts.vegetation, profile, pitch),
        }

    def _uniform(self, low: float, span: float) -> float:
        return low + self.rng.random() * span

    def generate_buildings(self, count: int, profile: LocationProfile, pitch: float) -> List[StreetViewDetectedObject]:
        rng = self.rng
        if profile.is_commercial:
            building_types = COMMERCIAL_BUILDINGS
        elif profile.is_residential:
            building_types = RESIDENTIAL_BUILDINGS
        else:
            building_types = MIXED_BUILDINGS

        pitch_multiplier = max(0.3, 1 + pitch / 90)
        buildings = []
        for i in range(count):
            building_type = rng.choice(building_types)
            height = self._uniform(120, 180) * pitch_multiplier
            width = self._uniform(80, 200)

            # Spread across the panorama, base near the horizon
            x = (i / count) * self.width + (rng.random() - 0.5) * 100
            y = max(0, self.height / 2 - height + rng.random() * 80)

            storefront = "store" in building_type or "restaurant" in building_type
            properties = StreetBuildingProperties(
                building_type=building_type,
                stories=math.floor(2 + rng.random() * 15),
                has_entrance=chance(rng, 0.2),
                material=rng.choice(["brick", "concrete", "glass", "stone", "wood", "steel"]),
                condition=rng.choice(CONDITIONS),
                has_signage=chance(rng, 0.1) if storefront else chance(rng, 0.7),
                architectural_style=rng.choice(["modern", "classical", "contemporary", "traditional"])
            )

            buildings.append(StreetViewDetectedObject(
                id=f"building_{i}",
                category="building",
                subtype=building_type,
                bounding_box=BoundingBox(
                    x=clamp(x, 0, max(0, self.width - width)),
                    y=max(0, y),
                    width=width,
                    height=height
                ),
                confidence=self._uniform(0.88, 0.11),
                properties=properties,
                distance=self._uniform(5, 25)
            ))

        return buildings

    def generate_pedestrians(self, count: int, pitch: float) -> List[StreetViewDetectedObject]:
        rng = self.rng
        pedestrians = []
        for _ in range(count):
            # Looking up hides some of the street level
            if pitch > 30 and rng.random() > 0.6:
                continue

            height = self._uniform(60, 80) * max(0.5, 1 - pitch / 180)
            width = height / 3.5
            x = rng.random() * (self.width - width)
            y = self.height - height - rng.random() * 50

            activity = rng.choice(PEDESTRIAN_ACTIVITIES)
            properties = PedestrianProperties(
                activity=activity,
                is_group=chance(rng, 0.75),
                has_backpack=chance(rng, 0.6),
                direction=rng.choice(["towards", "away", "crossing", "parallel"]),
                clothing=rng.choice(["casual", "business", "athletic", "formal"]),
                age=rng.choice(["child", "adult", "elderly"])
            )

            pedestrians.append(StreetViewDetectedObject(
                id=f"pedestrian_{len(pedestrians)}",
                category="pedestrian",
                subtype=activity,
                bounding_box=BoundingBox(x=x, y=y, width=width, height=height),
                confidence=self._uniform(0.78, 0.2),
                properties=properties,
                distance=self._uniform(1, 20)
            ))

        return pedestrians

    def _vehicle_size(self, vehicle_type: str) -> Tuple[float, float]:
        if vehicle_type in ("truck", "bus"):
            return self._uniform(100, 80), self._uniform(60, 40)
        if vehicle_type in ("motorcycle", "bicycle"):
            return self._uniform(40, 30), self._uniform(40, 30)
        return self._uniform(70, 50), self._uniform(45, 25)

    def generate_vehicles(self, count: int, pitch: float) -> List[StreetViewDetectedObject]:
        rng = self.rng
        pitch_factor = max(0.4, 1 - abs(pitch) / 180)
        vehicles = []
        for i in range(count):
            vehicle_type = rng.choice(VEHICLE_TYPES)
            base_width, base_height = self._vehicle_size(vehicle_type)
            width = base_width * pitch_factor
            height = base_height * pitch_factor

            # On the road: bottom of the frame
            x = rng.random() * (self.width - width)
            y = self.height - height - rng.random() * 30

            properties = StreetVehicleProperties(
                vehicle_type=vehicle_type,
                color=rng.choice(["red", "blue", "black", "white", "silver", "gray", "green", "yellow"]),
                direction=rng.choice(["towards", "away", "parked", "turning"]),
                is_moving=chance(rng, 0.25),
                has_lights=chance(rng, 0.7),
                condition=rng.choice(CONDITIONS)
            )

            vehicles.append(StreetViewDetectedObject(
                id=f"vehicle_{i}",
                category="vehicle",
                subtype=vehicle_type,
                bounding_box=BoundingBox(x=x, y=y, width=width, height=height),
                confidence=self._uniform(0.82, 0.16),
                properties=properties,
                distance=self._uniform(2, 25)
            ))

        return vehicles

    def _infrastructure_box(self, infra_type: str) -> Tuple[float, float, float, float]:
        rng = self.rng
        if infra_type == "traffic_light":
            width, height = self._uniform(25, 15), self._uniform(80, 40)
            return rng.random() * (self.width - width), self._uniform(30, 100), width, height
        if infra_type == "street_lamp":
            width, height = self._uniform(15, 10), self._uniform(120, 80)
            return self._uniform(50, self.width - 100), self._uniform(10, 50), width, height
        if infra_type == "utility_pole":
            width, height = self._uniform(12, 8), self._uniform(180, 120)
            return self._uniform(100, self.width - 200), 0.0, width, height
        width, height = self._uniform(25, 50), self._uniform(40, 60)
        return rng.random() * (self.width - width), self.height - height - rng.random() * 100, width, height

    def generate_infrastructure(
        self,
        count: int,
        profile: LocationProfile,
        pitch: float
    ) -> List[StreetViewDetectedObject]:
        rng = self.rng
        infra_types = URBAN_INFRASTRUCTURE if profile.is_urban else RURAL_INFRASTRUCTURE
        infrastructure = []
        for i in range(count):
            infra_type = rng.choice(infra_types)
            x, y, width, height = self._infrastructure_box(infra_type)
            if pitch > 20:
                height *= 1.2  # Tall street furniture shows more when looking up

            properties = StreetInfrastructureProperties(
                infra_type=infra_type,
                material=rng.choice(["metal", "plastic", "concrete", "wood", "aluminum"]),
                condition=rng.choice(CONDITIONS),
                has_text=chance(rng, 0.1) if "sign" in infra_type else chance(rng, 0.8),
                is_illuminated=chance(rng, 0.2) if infra_type in ("traffic_light", "street_lamp") else False
            )

            infrastructure.append(StreetViewDetectedObject(
                id=f"infrastructure_{i}",
                category="infrastructure",
                subtype=infra_type,
                bounding_box=BoundingBox(
                    x=clamp(x, 0, max(0, self.width - width)),
                    y=clamp(y, 0, max(0, self.height - height)),
                    width=width,
                    height=height
                ),
                confidence=self._uniform(0.76, 0.22),
                properties=properties,
                distance=self._uniform(1, 15)
            ))

        return infrastructure

    def _vegetation_box(self, veg_type: str) -> Tuple[float, float, float, float]:
        rng = self.rng
        if veg_type in ("tree", "street_tree"):
            width, height = self._uniform(60, 120), self._uniform(120, 250)
            # Left or right edge of the frame
            if rng.random() > 0.5:
                x = rng.random() * 150
            else:
                x = self.width - width - rng.random() * 150
            return x, max(0, self.height / 2 - height), width, height
        if veg_type == "forest":
            width, height = self._uniform(250, 300), self._uniform(180, 150)
            x = -100 if rng.random() > 0.5 else self.width - width + 100
            return x, self._uniform(30, 100), width, height
        width, height = self._uniform(40, 80), self._uniform(25, 60)
        return rng.random() * (self.width - width), self.height - height - rng.random() * 80, width, height

    def generate_vegetation(
        self,
        count: int,
        profile: LocationProfile,
        pitch: float
    ) -> List[StreetViewDetectedObject]:
        rng = self.rng
        veg_types = URBAN_VEGETATION if profile.is_urban else RURAL_VEGETATION
        vegetation = []
        for i in range(count):
            veg_type = rng.choice(veg_types)
            x, y, width, height = self._vegetation_box(veg_type)
            if pitch < -20:
                height *= 0.7

            properties = StreetVegetationProperties(
                veg_type=veg_type,
                size=rng.choice(["small", "medium", "large"]),
                health=rng.choice(CONDITIONS),
                season=rng.choice(["spring", "summer", "fall", "winter"]),
                has_flowers=True if veg_type in ("flower_bed", "wildflowers") else chance(rng, 0.7)
            )

            vegetation.append(StreetViewDetectedObject(
                id=f"vegetation_{i}",
                category="vegetation",
                subtype=veg_type,
                bounding_box=BoundingBox(
                    x=clamp(x, 0, max(0, self.width - width)),
                    y=clamp(y, 0, max(0, self.height - height)),
                    width=width,
                    height=height
                ),
                confidence=self._uniform(0.72, 0.26),
                properties=properties,
                distance=self._uniform(1, 20)
            ))

        return vegetation
