"""
Analysis session

Runs analyses in the background and makes sure only the newest request per
channel ("map", "street_view") is delivered. Every submission gets a
monotonically increasing request id; a result that resolves after a newer
request was issued is discarded instead of overwriting the newer one.
"""

import itertools
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional

from loguru import logger

from .pipeline import LocationAnalysisPipeline


MAP_CHANNEL = "map"
STREET_VIEW_CHANNEL = "street_view"


class AnalysisSession:
    """
    Usage:
        with AnalysisSession(pipeline) as session:
            session.submit_map("Times Square New York", (40.758, -73.9855), on_result=render)
            ...
            session.latest("map")

    The pipeline's random source is shared by every worker. With more than one
    worker, concurrent analyses interleave their draws, so a seeded pipeline
    only reproduces its output when the session runs with ``max_workers=1``.
    """

    def __init__(self, pipeline: LocationAnalysisPipeline, max_workers: int = 2):
        self.pipeline = pipeline
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="analysis")
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        # Reentrant: a callback may submit a request that completes immediately
        self._delivery_lock = threading.RLock()
        self._latest_ids: Dict[str, int] = {}
        self._latest_results: Dict[str, Any] = {}
        self._errors: Dict[str, BaseException] = {}

    def _next_id(self, channel: str) -> int:
        with self._lock:
            request_id = next(self._ids)
            self._latest_ids[channel] = request_id
            return request_id

    def is_current(self, channel: str, request_id: int) -> bool:
        with self._lock:
            return self._latest_ids.get(channel) == request_id

    def submit_map(
        self,
        location: str,
        coordinates,
        on_result: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None
    ) -> Future:
        request_id = self._next_id(MAP_CHANNEL)
        future = self._executor.submit(self.pipeline.analyze_map, location, coordinates, request_id)
        future.add_done_callback(lambda f: self._deliver(MAP_CHANNEL, request_id, f, on_result, on_error))
        return future

    def submit_street_view(
        self,
        location: str,
        coordinates,
        heading: float = 0.0,
        pitch: float = 0.0,
        on_result: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None
    ) -> Future:
        request_id = self._next_id(STREET_VIEW_CHANNEL)
        future = self._executor.submit(
            self.pipeline.analyze_street_view, location, coordinates, heading, pitch, request_id
        )
        future.add_done_callback(lambda f: self._deliver(STREET_VIEW_CHANNEL, request_id, f, on_result, on_error))
        return future

    def _deliver(
        self,
        channel: str,
        request_id: int,
        future: Future,
        on_result: Optional[Callable[[Any], None]],
        on_error: Optional[Callable[[BaseException], None]]
    ) -> None:
        error = future.exception()
        # Held across the id check and the callback: a newer delivery waits
        # until this one has finished, so callbacks never end on a stale result
        with self._delivery_lock:
            with self._lock:
                if self._latest_ids.get(channel) != request_id:
                    logger.info(f"Discarding stale {channel} result for request {request_id} "
                                f"(latest is {self._latest_ids.get(channel)})")
                    return
                if error is None:
                    self._latest_results[channel] = future.result()
                    self._errors.pop(channel, None)
                else:
                    self._errors[channel] = error

            if error is not None:
                logger.error(f"{channel} request {request_id} failed: {error}")
                if on_error is not None:
                    on_error(error)
            elif on_result is not None:
                on_result(future.result())

    def latest(self, channel: str = MAP_CHANNEL) -> Optional[Any]:
        """Most recent accepted result for the channel (None until one arrives)"""
        with self._lock:
            return self._latest_results.get(channel)

    def latest_error(self, channel: str = MAP_CHANNEL) -> Optional[BaseException]:
        with self._lock:
            return self._errors.get(channel)

    def close(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
