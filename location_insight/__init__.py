"""
Location Insight Generator

Synthetic map and street-view analysis for a location, optionally enriched
with HERE place data.
"""

from .config import get_config, validate_config, InsightConfig
from .pipeline import LocationAnalysisPipeline, AnalysisError
from .session import AnalysisSession
from .providers import HereMapProvider, ProviderState

__version__ = "1.0.0"

__all__ = [
    "get_config",
    "validate_config",
    "InsightConfig",
    "LocationAnalysisPipeline",
    "AnalysisError",
    "AnalysisSession",
    "HereMapProvider",
    "ProviderState",
]
