"""
Per-pixel Monte Carlo sampling and the parallel scanline scheduler.

Rows of the image are split into contiguous blocks, one worker thread per
block. Workers share the read-only scene and camera, each owns a private
random generator, and every finished row is sent as a ``RenderResult``
through a single queue to whoever consumes the render.
"""
import logging
import math
import queue
import threading
import time
from dataclasses import dataclass
from typing import Iterator, List, NamedTuple, Optional, Set, Tuple

import numpy as np
from tqdm import tqdm

from .camera import Camera
from .errors import InvalidConfigurationError, RenderError
from .raytracer import MAX_DEPTH, T_MIN, trace
from .vec3 import Vec3
from .world import Scene

logger = logging.getLogger(__name__)

# Multiplier for 8-bit quantization, keeps 1.0 inside 255
QUANTIZE_SCALE = 255.99


@dataclass(frozen=True)
class RenderSettings:
    """
    Image size and sampling parameters for one render.
    """
    width: int
    height: int
    samples: int = 100
    num_threads: int = 4
    max_depth: int = MAX_DEPTH
    t_min: float = T_MIN

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise InvalidConfigurationError(
                f"image size must be positive, got {self.width}x{self.height}"
            )
        if self.samples <= 0:
            raise InvalidConfigurationError(f"samples per pixel must be positive, got {self.samples}")
        if self.num_threads <= 0:
            raise InvalidConfigurationError(f"thread count must be positive, got {self.num_threads}")
        if self.max_depth < 0:
            raise InvalidConfigurationError(f"bounce depth must not be negative, got {self.max_depth}")
        if not self.t_min > 0:
            raise InvalidConfigurationError(f"minimum hit distance must be positive, got {self.t_min}")

    @property
    def pitch(self) -> int:
        """Bytes per row of RGB output."""
        return 3 * self.width


class RenderResult(NamedTuple):
    """
    One finished scanline.

    ``row_index`` counts from the bottom of the image; ``pixel_bytes``
    holds one RGB triple per column, left to right.
    """
    row_index: int
    pixel_bytes: bytes


class _WorkerFailure(NamedTuple):
    rows: range
    error: BaseException


def sample_pixel(scene: Scene, camera: Camera, column: int, row: int,
                 width: int, height: int, samples: int, rng: np.random.Generator,
                 max_depth: int = MAX_DEPTH, t_min: float = T_MIN) -> Vec3:
    """
    Average ``samples`` jittered radiance estimates for one pixel.

    Parameters
    ----------
    scene : Scene
        The scene to render
    camera : Camera
        Camera producing the primary rays
    column : int
        Pixel column, 0 at the left edge
    row : int
        Pixel row, 0 at the bottom edge
    width : int
        Image width in pixels
    height : int
        Image height in pixels
    samples : int
        Number of rays averaged for the pixel
    rng : np.random.Generator
        Random source owned by the calling worker
    max_depth : int, optional
        Bounce budget per path, by default 50
    t_min : float, optional
        Minimum accepted hit distance, by default 0.001

    Returns
    -------
    Vec3
        Linear (not gamma corrected) RGB color
    """
    color = np.zeros(3, dtype=np.float32)
    for _ in range(samples):
        u = (column + rng.random()) / width
        v = (row + rng.random()) / height
        ray = camera.get_ray(u, v)
        color += trace(ray, scene, rng, max_depth=max_depth, t_min=t_min)
    return color / np.float32(samples)


def to_rgb8(color: Vec3) -> Tuple[int, int, int]:
    """
    Gamma-correct and quantize a linear color to 8-bit channels.

    Channels are clamped to [0, 1] first, so bright sums saturate at 255
    instead of wrapping around.
    """
    corrected = np.sqrt(np.clip(color, 0.0, 1.0))
    r, g, b = (int(math.floor(QUANTIZE_SCALE * float(c))) for c in corrected)
    return r, g, b


def render_row(scene: Scene, camera: Camera, row: int,
               settings: RenderSettings, rng: np.random.Generator) -> RenderResult:
    """Compute every pixel of one scanline."""
    pixels = bytearray()
    for column in range(settings.width):
        color = sample_pixel(scene, camera, column, row, settings.width, settings.height,
                             settings.samples, rng, settings.max_depth, settings.t_min)
        pixels.extend(to_rgb8(color))
    return RenderResult(row, bytes(pixels))


def partition_rows(height: int, num_threads: int) -> List[range]:
    """
    Split ``height`` rows into ``num_threads`` contiguous blocks.

    All blocks have ``height // num_threads`` rows except the last, which
    also takes the remainder. Blocks may be empty when there are more
    threads than rows.
    """
    if num_threads <= 0:
        raise InvalidConfigurationError(f"thread count must be positive, got {num_threads}")
    block = height // num_threads
    blocks = [range(i * block, (i + 1) * block) for i in range(num_threads - 1)]
    blocks.append(range((num_threads - 1) * block, height))
    return blocks


def _render_block(rows: range, scene: Scene, camera: Camera, settings: RenderSettings,
                  rng: np.random.Generator, results: "queue.Queue") -> None:
    logger.debug("Worker %s starting rows %d-%d",
                 threading.current_thread().name, rows.start, rows.stop - 1)
    try:
        for row in rows:
            results.put(render_row(scene, camera, row, settings, rng))
    except Exception as exc:
        logger.error("Worker %s failed: %s", threading.current_thread().name, exc)
        results.put(_WorkerFailure(rows, exc))
        return
    logger.debug("Worker %s finished", threading.current_thread().name)


class RenderJob:
    """
    Handle on a running render.

    Only the consumer thread should call the ``next_result``/``poll``/
    ``results`` methods.
    """
    def __init__(self, settings: RenderSettings, results: "queue.Queue",
                 threads: List[threading.Thread]) -> None:
        self.settings = settings
        self.threads = threads
        self._results = results
        self._delivered = 0
        self.started_at = time.perf_counter()

    @property
    def delivered(self) -> int:
        """Number of rows handed to the consumer so far."""
        return self._delivered

    @property
    def done(self) -> bool:
        return self._delivered >= self.settings.height

    def _check(self, item) -> RenderResult:
        if isinstance(item, _WorkerFailure):
            raise RenderError(
                f"render worker for rows {item.rows.start}-{item.rows.stop - 1} failed"
            ) from item.error
        return item

    def next_result(self, timeout: Optional[float] = None) -> RenderResult:
        """
        Wait for the next finished row.

        Parameters
        ----------
        timeout : Optional[float], optional
            Seconds to wait, by default None (wait forever)

        Returns
        -------
        RenderResult
            The next row to arrive; rows arrive in no particular order

        Raises
        ------
        queue.Empty
            If ``timeout`` elapsed without a row arriving
        RenderError
            If a worker failed
        """
        result = self._check(self._results.get(timeout=timeout))
        self._delivered += 1
        return result

    def poll(self) -> List[RenderResult]:
        """
        Return every row that has already arrived, without waiting.

        Rows are only counted as delivered once they are returned; if a
        worker failure is found while draining, the rows drained so far are
        dropped uncounted and ``RenderError`` is raised.
        """
        rows = []
        while True:
            try:
                item = self._results.get_nowait()
            except queue.Empty:
                break
            rows.append(self._check(item))
        self._delivered += len(rows)
        return rows

    def results(self) -> Iterator[RenderResult]:
        """Yield the remaining rows until the whole image was delivered."""
        while not self.done:
            yield self.next_result()

    def join(self, timeout: Optional[float] = None) -> None:
        for thread in self.threads:
            thread.join(timeout)


def start_render(scene: Scene, camera: Camera, settings: RenderSettings,
                 seed: Optional[int] = None) -> RenderJob:
    """
    Launch the worker threads for a render and return immediately.

    Parameters
    ----------
    scene : Scene
        The scene to render; must not be modified until the render is done
    camera : Camera
        Camera producing the primary rays
    settings : RenderSettings
        Image size and sampling parameters
    seed : Optional[int], optional
        Seed for the per-worker random streams, by default None (fresh
        entropy). With a seed and a fixed thread count the image is
        reproducible.

    Returns
    -------
    RenderJob
        Handle used to receive the finished rows
    """
    blocks = partition_rows(settings.height, settings.num_threads)
    streams = np.random.SeedSequence(seed).spawn(len(blocks))
    results: "queue.Queue" = queue.Queue()

    threads = []
    for index, (rows, stream) in enumerate(zip(blocks, streams)):
        if not rows:
            continue
        thread = threading.Thread(
            target=_render_block,
            args=(rows, scene, camera, settings, np.random.default_rng(stream), results),
            name=f"render-worker-{index}",
            daemon=True,
        )
        threads.append(thread)

    logger.info("Rendering %dx%d, %d samples per pixel, %d worker threads",
                settings.width, settings.height, settings.samples, len(threads))
    job = RenderJob(settings, results, threads)
    for thread in threads:
        thread.start()
    return job


def render_parallel(scene: Scene, camera: Camera, settings: RenderSettings,
                    seed: Optional[int] = None) -> Iterator[RenderResult]:
    """Start a render and yield its rows as they arrive."""
    job = start_render(scene, camera, settings, seed)
    yield from job.results()


class FrameBuffer:
    """
    Consumer-side RGB byte buffer filled one scanline at a time.

    Rows are stored top-down (display order); a result's bottom-based
    ``row_index`` is flipped when it is written.
    """
    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.pitch = 3 * width
        self.buffer = bytearray(self.pitch * height)
        self.rows_received: Set[int] = set()

    @property
    def complete(self) -> bool:
        return len(self.rows_received) == self.height

    def put(self, result: RenderResult) -> None:
        """
        Copy one scanline into the buffer.

        Raises
        ------
        ValueError
            If the row index is out of range, the payload has the wrong
            length, or the row was already received
        """
        row = result.row_index
        if not 0 <= row < self.height:
            raise ValueError(f"row index {row} outside image of height {self.height}")
        if len(result.pixel_bytes) != self.pitch:
            raise ValueError(
                f"row {row} has {len(result.pixel_bytes)} bytes, expected {self.pitch}"
            )
        if row in self.rows_received:
            raise ValueError(f"row {row} received twice")

        offset = (self.height - 1 - row) * self.pitch
        self.buffer[offset:offset + self.pitch] = result.pixel_bytes
        self.rows_received.add(row)

    def to_array(self) -> np.ndarray:
        """Copy of the image as uint8 array of shape (height, width, 3), top row first."""
        return np.frombuffer(bytes(self.buffer), dtype=np.uint8).reshape(self.height, self.width, 3).copy()


def render_image(scene: Scene, camera: Camera, settings: RenderSettings,
                 seed: Optional[int] = None, progress: bool = False) -> np.ndarray:
    """
    Render a complete image, blocking until every row has arrived.

    Parameters
    ----------
    scene : Scene
        The scene to render
    camera : Camera
        Camera producing the primary rays
    settings : RenderSettings
        Image size and sampling parameters
    seed : Optional[int], optional
        Seed for the per-worker random streams, by default None
    progress : bool, optional
        Show a progress bar over received rows, by default False

    Returns
    -------
    np.ndarray
        uint8 RGB image of shape (height, width, 3), top row first
    """
    frame = FrameBuffer(settings.width, settings.height)
    job = start_render(scene, camera, settings, seed)
    with tqdm(total=settings.height, unit="row", disable=not progress) as bar:
        for result in job.results():
            frame.put(result)
            bar.update(1)
    job.join()
    logger.info("Render finished in %.2f s", time.perf_counter() - job.started_at)
    return frame.to_array()
