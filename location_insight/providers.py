"""
Map provider capability

A provider owns the credentials and HTTP session for one map/search backend.
It is created, initialized and disposed explicitly and handed to whatever
needs it, instead of being looked up from module-level state.
"""

import os
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Optional

import requests
from loguru import logger

from .config import get_config, InsightConfig
from .collectors.here import HereAPIClient

try:
    from dotenv import load_dotenv
    HAS_DOTENV = True
except ImportError:
    HAS_DOTENV = False


class ProviderState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FAILED = "failed"
    DISPOSED = "disposed"


class MapProvider(ABC):
    """Lifecycle: initialize() -> READY | FAILED, then dispose()"""

    def __init__(self):
        self.state = ProviderState.UNINITIALIZED

    @abstractmethod
    def initialize(self) -> ProviderState:
        ...

    @abstractmethod
    def dispose(self) -> None:
        ...

    @property
    def ready(self) -> bool:
        return self.state == ProviderState.READY

    def __enter__(self):
        self.initialize()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.dispose()
        return False


def load_env_file() -> bool:
    """Load a .env file from the project root, cwd or home directory"""
    if not HAS_DOTENV:
        logger.warning("python-dotenv not installed - .env file support unavailable")
        return False

    env_paths = [
        Path(__file__).parent.parent / ".env",  # Project root
        Path.cwd() / ".env",  # Current working directory
        Path.home() / ".env",  # Home directory
    ]
    for env_path in env_paths:
        if env_path.exists():
            load_dotenv(env_path, override=False)  # Don't override existing env vars
            logger.info(f"Loaded .env file from {env_path}")
            return True

    logger.debug("No .env file found in common locations")
    return False


class HereMapProvider(MapProvider):
    """
    HERE search provider

    Reads the API key from the environment (after loading .env) unless one is
    passed in. Without a key the provider ends up FAILED and analyses run
    without place data.
    """

    def __init__(self, api_key: Optional[str] = None, config: Optional[InsightConfig] = None):
        super().__init__()
        self.config = config or get_config()
        self._api_key = api_key
        self.session: Optional[requests.Session] = None
        self.client: Optional[HereAPIClient] = None

    def initialize(self) -> ProviderState:
        if self.state == ProviderState.READY:
            return self.state

        if self._api_key is None:
            load_env_file()
            self._api_key = os.getenv(self.config.api.api_key_env, "")

        if not self._api_key:
            logger.error(f"{self.config.api.api_key_env} not set - place data will be unavailable")
            logger.info(f"Please set {self.config.api.api_key_env} in .env file or environment variable")
            self.state = ProviderState.FAILED
            return self.state

        self.session = requests.Session()
        self.client = HereAPIClient(self._api_key, session=self.session, config=self.config.api)
        self.state = ProviderState.READY
        logger.debug("HERE provider ready")
        return self.state

    def dispose(self) -> None:
        if self.session is not None:
            self.session.close()
        self.session = None
        self.client = None
        self.state = ProviderState.DISPOSED
