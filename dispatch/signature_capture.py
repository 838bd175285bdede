"""
Purpose: Proof of delivery (PoD) capture.
What it does:
Records a free-hand signature drawn on a fixed-size pad and gates the final
Delivered transition on it being non-empty.

- SignaturePad is the drawing surface: it owns the pointer listeners and
  fans pointer events (move / end) out to whoever is registered.
- SignatureCapture is the recorder: begin(origin) starts a stroke and
  registers its move + end handlers, every move while engaged adds a line
  segment from the previous point, end() stops recording and unregisters
  every handler that begin registered.

Strokes accumulate on the same pad until clear(). The image is ephemeral:
it is never uploaded and the session discards it when the order closes.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Tuple

import numpy as np

Point = Tuple[float, float]  # (x, y) in pad pixels
Segment = Tuple[Point, Point]
Handler = Callable[..., None]

MOVE = "move"
END = "end"


class SignatureRequired(Exception):
    """Raised when a delivery is closed without a captured signature."""
    pass


class SignaturePad:
    """
    Fixed-size drawing surface. Presentation adapters translate mouse / touch
    events into move() and release() calls.
    """

    def __init__(self, width: int = 300, height: int = 150):
        if width <= 0 or height <= 0:
            raise ValueError("Signature pad must have a positive size")
        self.width = width
        self.height = height
        self._listeners: Dict[str, List[Handler]] = {MOVE: [], END: []}

    def add_listener(self, event: str, handler: Handler) -> None:
        self._listeners[event].append(handler)

    def remove_listener(self, event: str, handler: Handler) -> None:
        self._listeners[event].remove(handler)

    def listener_count(self, event: Optional[str] = None) -> int:
        if event is not None:
            return len(self._listeners[event])
        return sum(len(handlers) for handlers in self._listeners.values())

    def clamp(self, point: Point) -> Point:
        x, y = point
        return (min(max(x, 0), self.width - 1), min(max(y, 0), self.height - 1))

    # --- pointer events ---

    def move(self, point: Point) -> None:
        #copy: a handler may unregister itself while we iterate
        for handler in list(self._listeners[MOVE]):
            handler(point)

    def release(self) -> None:
        for handler in list(self._listeners[END]):
            handler()


@dataclass(frozen=True, eq=False)
class SignatureImage:
    """
    Raster of the captured signature: pixels[y, x] == 1 where ink was laid.
    """
    width: int
    height: int
    pixels: np.ndarray
    segments: Tuple[Segment, ...] = field(default_factory=tuple)

    @property
    def ink_pixels(self) -> int:
        return int(self.pixels.sum())


class SignatureCapture:
    """
    Pointer-gesture recorder bound to one SignaturePad.
    """

    def __init__(self, pad: SignaturePad):
        self.pad = pad
        self._segments: List[Segment] = []
        self._last_point: Optional[Point] = None
        # handlers registered by the open gesture, released together on end()
        self._registered: List[Tuple[str, Handler]] = []

    @property
    def engaged(self) -> bool:
        return bool(self._registered)

    @property
    def segments(self) -> List[Segment]:
        return list(self._segments)

    def begin(self, origin: Point) -> None:
        """
        Start a stroke at origin. A gesture that is still open is ended first,
        so handlers never stack up across repeated presses.
        """
        if self.engaged:
            self.end()

        self._last_point = self.pad.clamp(origin)
        self._register(MOVE, self._on_move)
        self._register(END, self.end)

    def end(self) -> None:
        """
        Stop recording and release every handler this gesture registered.
        Safe to call when no gesture is open.
        """
        while self._registered:
            event, handler = self._registered.pop()
            self.pad.remove_listener(event, handler)
        self._last_point = None

    @contextmanager
    def gesture(self, origin: Point) -> Iterator[SignatureCapture]:
        self.begin(origin)
        try:
            yield self
        finally:
            self.end()

    def is_empty(self) -> bool:
        return not self._segments

    def clear(self) -> None:
        self.end()
        self._segments = []

    def snapshot(self) -> SignatureImage:
        """
        Rasterise the recorded segments onto a pad-sized bitmap.
        """
        pixels = np.zeros((self.pad.height, self.pad.width), dtype=np.uint8)
        for (x0, y0), (x1, y1) in self._segments:
            steps = int(max(abs(x1 - x0), abs(y1 - y0))) + 1
            xs = np.rint(np.linspace(x0, x1, steps)).astype(int)
            ys = np.rint(np.linspace(y0, y1, steps)).astype(int)
            pixels[ys, xs] = 1
        return SignatureImage(
            width=self.pad.width,
            height=self.pad.height,
            pixels=pixels,
            segments=tuple(self._segments),
        )

    # --- internals ---

    def _register(self, event: str, handler: Handler) -> None:
        self.pad.add_listener(event, handler)
        self._registered.append((event, handler))

    def _on_move(self, point: Point) -> None:
        if self._last_point is None:
            return
        point = self.pad.clamp(point)
        self._segments.append((self._last_point, point))
        self._last_point = point
