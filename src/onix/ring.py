"""
Ring: the entropy indicator window.

A passive observer. Each frame samples the published entropy and draws a
ring whose colour runs from green/gold (coherent) to red (hallucination)
and whose radius pulses with the entropy. Closing the window, pressing
Escape, or losing the display ends only this thread.
"""

from __future__ import annotations

import math
import threading
from typing import Callable, Optional, Tuple

import cv2
import numpy as np

from onix.config import DisplayConfig

BACKGROUND_RGB = (5, 5, 16)
RING_POINTS = 1200
RING_STEP_DEG = 0.3
ESCAPE = 27


def _saturate(value: float) -> int:
    """Colour channel from a float: truncated, clamped to [0, 255], NaN as 0."""
    if math.isnan(value) or value <= 0.0:
        return 0
    return int(min(value, 255.0))


def _pixel(coords: np.ndarray) -> np.ndarray:
    """Truncate coordinates to pixels; NaN and negatives land on 0."""
    return np.clip(np.nan_to_num(coords, nan=0.0), 0.0, None).astype(np.int64)


def ring_color(entropy: float) -> Tuple[int, int, int]:
    """RGB colour for an entropy value in [0, 1]; NaN gives black."""
    red = _saturate(entropy * 255.0)
    green = _saturate((1.0 - entropy) * 200.0 + 55.0)
    return red, green, 0


def ring_radius(entropy: float) -> float:
    return 160.0 + math.sin(entropy * 40.0) * 10.0


def render_frame(entropy: float, width: int = 600, height: int = 600) -> np.ndarray:
    """
    Draw one frame.

    Args:
        entropy: Sampled entropy.
        width: Frame width in pixels.
        height: Frame height in pixels.

    Returns:
        BGR uint8 image of shape (height, width, 3).
    """
    frame = np.empty((height, width, 3), dtype=np.uint8)
    frame[:] = BACKGROUND_RGB[::-1]

    cx, cy = width / 2.0, height / 2.0
    radius = ring_radius(entropy)
    theta = np.radians(np.arange(RING_POINTS) * RING_STEP_DEG)
    xs = _pixel(cx + radius * np.cos(theta))
    ys = _pixel(cy + radius * np.sin(theta))
    inside = (xs >= 0) & (xs < width) & (ys >= 0) & (ys < height)
    idx = ys[inside] * width + xs[inside]

    # Glow pixels are offset on the flat buffer, so +1 may spill into the next row.
    flat = frame.reshape(-1, 3)
    bgr = ring_color(entropy)[::-1]
    for offset in (0, 1, width):
        spot = idx + offset
        flat[spot[spot < flat.shape[0]]] = bgr
    return frame


class RingDisplay:
    """
    Background thread showing the entropy ring.

    Args:
        sample: Callable returning the current entropy; must not block long.
        config: Window geometry and frame cadence.
    """

    def __init__(
        self,
        sample: Callable[[], float],
        config: Optional[DisplayConfig] = None,
    ) -> None:
        self.sample = sample
        self.config = config or DisplayConfig()
        self.frames = 0
        self.error: Optional[str] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "RingDisplay":
        self._thread = threading.Thread(target=self.run, name="onix-ring", daemon=True)
        self._thread.start()
        return self

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _window_open(self) -> bool:
        return cv2.getWindowProperty(self.config.title, cv2.WND_PROP_VISIBLE) >= 1

    def run(self) -> None:
        """Frame loop; returns when the window goes away or stop() is called."""
        cfg = self.config
        try:
            cv2.namedWindow(cfg.title, cv2.WINDOW_AUTOSIZE)
            while not self._stop.is_set():
                frame = render_frame(self.sample(), cfg.width, cfg.height)
                cv2.imshow(cfg.title, frame)
                self.frames += 1
                if cv2.waitKey(cfg.frame_interval_ms) & 0xFF == ESCAPE:
                    break
                if not self._window_open():
                    break
            cv2.destroyAllWindows()
        except cv2.error as exc:
            self.error = str(exc)
