"""Tests for the entropy ring renderer and display thread."""

import math

import cv2
import numpy as np

from onix import ring
from onix.config import DisplayConfig
from onix.ring import RingDisplay, render_frame, ring_color, ring_radius


class TestRingGeometry:
    """Pure colour and radius mapping."""

    def test_low_entropy_is_green(self):
        """Zero entropy maps to full green, no red."""
        assert ring_color(0.0) == (0, 255, 0)

    def test_high_entropy_is_red(self):
        """Unit entropy maps to full red with a green floor."""
        assert ring_color(1.0) == (255, 55, 0)

    def test_nan_is_black(self):
        """NaN entropy saturates both colour channels to zero."""
        assert ring_color(float("nan")) == (0, 0, 0)
        assert math.isnan(ring_radius(float("nan")))

    def test_nan_ring_collapses_to_origin(self):
        """A NaN radius puts every ring point at pixel (0, 0) plus its glow."""
        frame = render_frame(float("nan"))
        for y, x in ((0, 0), (0, 1), (1, 0)):
            assert tuple(frame[y, x]) == (0, 0, 0)
        assert tuple(frame[300, 460]) == (16, 5, 5)
        assert tuple(frame[1, 1]) == (16, 5, 5)

    def test_radius_pulses(self):
        """Radius is 160 + 10 sin(40 e)."""
        assert ring_radius(0.0) == 160.0
        assert ring_radius(0.5) == 160.0 + math.sin(20.0) * 10.0


class TestRenderFrame:
    """Frame rendering."""

    def test_shape_and_background(self):
        """Frame is BGR uint8 on the void background."""
        frame = render_frame(0.0)
        assert frame.shape == (600, 600, 3)
        assert frame.dtype == np.uint8
        assert tuple(frame[0, 0]) == (16, 5, 5)
        assert tuple(frame[300, 300]) == (16, 5, 5)

    def test_ring_point_and_glow(self):
        """The 0° point and its glow pixels carry the ring colour."""
        frame = render_frame(0.0)
        green = (0, 255, 0)
        assert tuple(frame[300, 460]) == green
        assert tuple(frame[300, 461]) == green
        assert tuple(frame[301, 460]) == green

    def test_high_entropy_colour_and_radius(self):
        """A blocked-range entropy draws a red ring at the pulsed radius."""
        frame = render_frame(1.0)
        x = int(300 + ring_radius(1.0))
        assert tuple(frame[300, x]) == (0, 55, 255)

    def test_small_frame_clips(self):
        """Points outside the frame are skipped."""
        frame = render_frame(0.0, width=100, height=100)
        assert frame.shape == (100, 100, 3)
        assert tuple(frame[50, 50]) == (16, 5, 5)


class TestRingDisplay:
    """Display thread behaviour with the window calls stubbed."""

    def _stub_cv2(self, monkeypatch, keys, visible=1.0):
        shown = []
        keys = list(keys)
        monkeypatch.setattr(ring.cv2, "namedWindow", lambda *a, **k: None)
        monkeypatch.setattr(ring.cv2, "imshow", lambda title, frame: shown.append(frame))
        monkeypatch.setattr(ring.cv2, "waitKey", lambda delay: keys.pop(0) if keys else -1)
        monkeypatch.setattr(ring.cv2, "getWindowProperty", lambda *a: visible)
        monkeypatch.setattr(ring.cv2, "destroyAllWindows", lambda: None)
        return shown

    def test_escape_closes(self, monkeypatch):
        """Escape ends the frame loop."""
        shown = self._stub_cv2(monkeypatch, [-1, -1, 27])
        display = RingDisplay(lambda: 0.25)
        display.run()
        assert display.frames == 3
        assert len(shown) == 3
        assert display.error is None

    def test_window_closed(self, monkeypatch):
        """A window that is no longer visible ends the loop."""
        self._stub_cv2(monkeypatch, [-1], visible=0.0)
        display = RingDisplay(lambda: 0.25)
        display.run()
        assert display.frames == 1

    def test_frames_follow_samples(self, monkeypatch):
        """Each frame is rendered from a fresh sample."""
        shown = self._stub_cv2(monkeypatch, [-1, 27])
        samples = iter([0.0, 1.0])
        display = RingDisplay(lambda: next(samples), DisplayConfig(width=600, height=600))
        display.run()
        assert tuple(shown[0][300, 460]) == (0, 255, 0)
        x = int(300 + ring_radius(1.0))
        assert tuple(shown[1][300, x]) == (0, 55, 255)

    def test_missing_display_ends_quietly(self, monkeypatch):
        """A GUI failure is recorded and ends only the display thread."""

        def fail(*args, **kwargs):
            raise cv2.error("no display")

        monkeypatch.setattr(ring.cv2, "namedWindow", fail)
        display = RingDisplay(lambda: 0.0).start()
        display.stop(timeout=2.0)
        assert not display.alive
        assert display.error is not None
