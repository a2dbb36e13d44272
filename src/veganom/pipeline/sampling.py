"""Background point-sampling worker.

Map clicks arrive faster than a long series can be sampled. The worker
serves them one at a time against an AnomalyContext; a new request cancels
the one in flight and any still queued, so only the newest click's result
is ever delivered.
"""

import logging
import queue
import threading
from typing import Optional

from veganom.anomaly.sampler import Coordinate
from veganom.contracts import InvalidCoordinate, SamplingCancelled
from veganom.pipeline.context import AnomalyContext

__all__ = ['SamplingWorker']

logger = logging.getLogger(__name__)


class SamplingWorker(threading.Thread):
    """Serve point-sample requests in a daemon thread.

    Results go to ``output_queue`` as dicts:

    - ``request_id``: id returned by :meth:`submit`
    - ``coordinate``: the requested coordinate
    - ``samples``: list of (timestamp, value), possibly empty

    A malformed coordinate or an unexpected sampling failure is delivered
    with an ``error`` key (the exception message) instead of ``samples``.

    Example usage::

        worker = SamplingWorker(context)
        worker.start()
        worker.submit((85.3, 27.7))
        result = worker.output_queue.get(timeout=5)
        worker.stop()
    """

    def __init__(self, context: AnomalyContext,
                 output_queue: Optional[queue.Queue] = None,
                 name: str = "SamplingWorker"):
        super().__init__(daemon=True, name=name)
        self.context = context
        self.output_queue = output_queue if output_queue is not None else queue.Queue()
        self._requests = queue.Queue()
        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._latest_id = 0
        self._cancel_event = threading.Event()

    def submit(self, coordinate: Coordinate) -> int:
        """Queue a request and supersede every earlier one."""
        with self._lock:
            self._latest_id += 1
            request_id = self._latest_id
            self._cancel_event.set()
            self._cancel_event = threading.Event()
            self._requests.put((request_id, coordinate, self._cancel_event))
        logger.debug("Sample request %d queued: %s", request_id, coordinate)
        return request_id

    def stop(self):
        """Signal worker to stop and cancel any in-flight request."""
        self._stop_event.set()
        with self._lock:
            self._cancel_event.set()

    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def _is_latest(self, request_id: int) -> bool:
        with self._lock:
            return request_id == self._latest_id

    def _deliver(self, request_id: int, result: dict):
        # Same lock as submit(): no newer id can appear between check and put.
        with self._lock:
            if request_id != self._latest_id:
                logger.debug("Sample request %d superseded before delivery", request_id)
                return
            self.output_queue.put(result)

    def _serve(self, request_id: int, coordinate: Coordinate, cancel_event: threading.Event):
        if not self._is_latest(request_id):
            logger.debug("Skipping superseded sample request %d", request_id)
            return
        try:
            samples = self.context.sample_at_point(coordinate, cancel_event)
        except SamplingCancelled:
            logger.debug("Sample request %d cancelled", request_id)
            return
        except InvalidCoordinate as e:
            logger.warning("Rejected sample request %d: %s", request_id, e)
            self._deliver(request_id, {
                "request_id": request_id,
                "coordinate": coordinate,
                "error": str(e),
            })
            return
        self._deliver(request_id, {
            "request_id": request_id,
            "coordinate": coordinate,
            "samples": samples,
        })

    def run(self):
        """Main worker loop (runs in thread)."""
        logger.info("Sampling worker started")

        while not self.stopped():
            try:
                request_id, coordinate, cancel_event = self._requests.get(timeout=0.1)
            except queue.Empty:
                continue
            try:
                self._serve(request_id, coordinate, cancel_event)
            except Exception as e:
                logger.exception("Sample request %d failed", request_id)
                self._deliver(request_id, {
                    "request_id": request_id,
                    "coordinate": coordinate,
                    "error": f"{type(e).__name__}: {e}",
                })
            finally:
                self._requests.task_done()

        logger.info("Sampling worker stopped")
