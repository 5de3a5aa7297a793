"""Lane-partitioned parallel sampling with a producer/consumer queue.

The raster is split into ``lanes`` evenly spaced starting rows. Each batch
traces ``samples_per_lane`` consecutive pixels from every lane in a single
parallel kernel launch, then every lane moves forward by that many pixels,
wrapping around the raster.

Batches of (pixel index, radiance) pairs travel from the producer to the
consumer over a bounded queue. The consumer is whoever calls drain(): it
owns the Sensor, applies samples in arrival order and never blocks. The
producer is either the caller itself (step()) or a background thread
(start()/stop()) that checks a stop event between batches.

Example:
    >>> tracer = Tracer(load_scene("spheres"), RenderSettings(width=320, height=240))
    >>> parallel = ParallelTracer(tracer)
    >>> parallel.start()
    >>> while window.running:
    ...     parallel.drain(screen)
    >>> parallel.stop()
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from pathlight.core.tracer import Tracer
from pathlight.preview.screen import Screen

logger = logging.getLogger(__name__)

# Seconds the producer waits on a full queue before re-checking for stop
_PUT_TIMEOUT = 0.1


@dataclass
class SampleBatch:
    """Samples produced by one parallel launch.

    Attributes:
        indices: Raster indices, shape (n,).
        radiance: Radiance samples, shape (n, 3).
    """

    indices: npt.NDArray[np.int32]
    radiance: npt.NDArray[np.float64]

    def __len__(self) -> int:
        return len(self.indices)


class ParallelTracer:
    """Drive a Tracer in lane-partitioned batches.

    Attributes:
        tracer: The tracer whose scene, settings and sensor are used.
        lanes: Number of lanes.
        samples_per_lane: Pixels each lane traces per batch.
    """

    def __init__(self, tracer: Tracer) -> None:
        settings = tracer.settings
        dimensions = tracer.dimensions

        self.tracer = tracer
        self.lanes = settings.lanes
        self.samples_per_lane = settings.samples_per_lane

        # Lanes past the last row wrap around the raster
        rows_per_lane = max(dimensions.height // self.lanes, 1)
        self._lane_starts = np.array(
            [lane * rows_per_lane * dimensions.width for lane in range(self.lanes)],
            dtype=np.int64,
        )
        self._offset = 0

        self._queue: queue.Queue[SampleBatch] = queue.Queue(maxsize=settings.queue_size)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        """Whether the background producer is alive."""
        return self._thread is not None and self._thread.is_alive()

    def produce(self) -> SampleBatch:
        """Trace one batch and advance every lane.

        Only one thread may produce at a time.
        """
        start = time.perf_counter()
        indices, radiance = self.tracer.trace(self._lane_starts + self._offset, self.samples_per_lane)
        self._offset = (self._offset + self.samples_per_lane) % self.tracer.dimensions.pixel_count
        logger.debug(f"Produced {len(indices)} samples in {time.perf_counter() - start:.4f}s")
        return SampleBatch(indices, radiance)

    def consume(self, batch: SampleBatch, screen: Screen | None = None) -> None:
        """Apply a batch to the sensor and write the touched pixels."""
        sensor = self.tracer.sensor
        sensor.add_samples(batch.indices, batch.radiance)
        if screen is not None:
            touched = np.unique(batch.indices)
            for index, (r, g, b) in zip(touched.tolist(), sensor.colors_at(touched).tolist()):
                screen.write(index, r, g, b)

    def step(self, screen: Screen | None = None) -> int:
        """Produce and consume one batch on the calling thread.

        Returns:
            The number of samples applied.

        Raises:
            RuntimeError: If the background producer is running.
        """
        if self.running:
            raise RuntimeError("step() cannot be used while the background producer is running")
        batch = self.produce()
        self.consume(batch, screen)
        return len(batch)

    def drain(self, screen: Screen | None = None, max_batches: int | None = None) -> int:
        """Apply the batches queued on entry without blocking.

        Batches the producer adds during the call are left for the next call.

        Args:
            screen: Optional sink for the touched pixels.
            max_batches: Upper bound on batches applied in this call.

        Returns:
            The number of samples applied.
        """
        pending = self._queue.qsize()
        if max_batches is not None:
            pending = min(pending, max_batches)
        applied = 0
        for _ in range(pending):
            try:
                batch = self._queue.get_nowait()
            except queue.Empty:
                break
            self.consume(batch, screen)
            applied += len(batch)
        return applied

    def start(self) -> None:
        """Start the background producer.

        The first batch is produced on the calling thread so that kernel
        compilation happens before the worker starts.

        Raises:
            RuntimeError: If the producer is already running.
        """
        if self.running:
            raise RuntimeError("Background producer is already running")
        self._stop_event.clear()
        try:
            self._queue.put_nowait(self.produce())
        except queue.Full:
            logger.debug("Queue full; warm-up batch discarded")
        self._thread = threading.Thread(target=self._run, name="pathlight-producer", daemon=True)
        self._thread.start()
        logger.info(
            f"Producer started: {self.lanes} lanes x {self.samples_per_lane} samples per batch"
        )

    def stop(self, timeout: float | None = None) -> None:
        """Signal the producer to stop and wait for it.

        Batches already queued stay available to drain().
        """
        if self._thread is None:
            return
        self._stop_event.set()
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("Producer did not stop within the timeout")
        else:
            self._thread = None
            logger.info("Producer stopped")

    def _run(self) -> None:
        while not self._stop_event.is_set():
            batch = self.produce()
            while not self._stop_event.is_set():
                try:
                    self._queue.put(batch, timeout=_PUT_TIMEOUT)
                    break
                except queue.Full:
                    continue

    def __enter__(self) -> "ParallelTracer":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()
