"""
Place data caching

Keeps one JSON file per rounded coordinate pair so repeated analyses of the
same spot skip the three HERE requests. Entries older than ``max_age_hours``
are ignored (place listings change; addresses rarely do, but they share a file).
"""

import json
import hashlib
import time
from pathlib import Path
from typing import Dict, Any, Optional, Tuple
from loguru import logger


class PlaceDataCache:
    """Disk cache of place bundles keyed by coordinates rounded to 5 decimals (~1 m)"""

    def __init__(self, cache_dir: Optional[str] = None, max_age_hours: Optional[float] = 24.0):
        self.cache_dir = Path(cache_dir) if cache_dir else None
        self.max_age_hours = max_age_hours

    @property
    def enabled(self) -> bool:
        return self.cache_dir is not None

    def path_for(self, coordinates: Tuple[float, float]) -> Optional[Path]:
        if not self.enabled:
            return None
        lat, lng = coordinates
        digest = hashlib.md5(f"{lat:.5f},{lng:.5f}".encode()).hexdigest()[:12]
        return self.cache_dir / f"here_{digest}.json"

    def get(self, coordinates: Tuple[float, float]) -> Optional[Dict[str, Any]]:
        """Cached bundle fields for the coordinates, or None when missing, expired or unreadable"""
        path = self.path_for(coordinates)
        if path is None or not path.exists():
            return None

        if self.max_age_hours is not None:
            age_hours = (time.time() - path.stat().st_mtime) / 3600
            if age_hours > self.max_age_hours:
                logger.debug(f"Place cache entry expired ({age_hours:.1f}h old): {path.name}")
                return None

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable place cache {path}: {e}")
            return None

        logger.info(f"Using cached place data: {path.name}")
        return data

    def put(self, coordinates: Tuple[float, float], data: Dict[str, Any]) -> Optional[Path]:
        path = self.path_for(coordinates)
        if path is None:
            return None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not write place cache {path}: {e}")
            return None
        logger.debug(f"Cached place data: {path.name}")
        return path
