"""Monocular distance estimation from the pixel height of a detected object."""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path
from types import TracebackType

from distdet.detection import Detection

REAL_HEIGHT_CM = 23.0
LOG_HEADER = "timestamp_ms,pixel_height,estimated_distance_cm,confidence\n"
DEFAULT_FPS = 20.0

_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _fmt(value: float) -> str:
    return format(value, "g")


def estimate_distance(real_height: float, focal_length: float, pixel_height: float) -> float:
    """Distance to an object of known height from its height in pixels."""
    if pixel_height == 0:
        raise ValueError("pixel height must be non-zero")
    return (real_height * focal_length) / pixel_height


def calibrate_focal_length(
    pixel_height: float, real_distance: float, real_height: float = REAL_HEIGHT_CM
) -> float:
    """Focal length in pixels from an object seen at a known distance."""
    if real_height == 0:
        raise ValueError("real height must be non-zero")
    return (pixel_height * real_distance) / real_height


def read_focal_length(path: str | Path) -> float | None:
    """Read a stored focal length; None when absent or not positive."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    match = _NUMBER.match(text.lstrip())
    if match is None:
        return None
    value = float(match.group())
    return value if value > 0 else None


def write_focal_length(path: str | Path, focal_length: float) -> None:
    """Store a focal length as text."""
    Path(path).write_text(_fmt(focal_length), encoding="utf-8")


def best_detection(detections: Iterable[Detection]) -> Detection | None:
    """The most confident detection; on ties the later one wins."""
    best = None
    max_conf = 0.0
    for detection in detections:
        if detection.confidence >= max_conf:
            max_conf = detection.confidence
            best = detection
    return best


class DistanceLog:
    """CSV log of distance estimates."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._file = open(self.path, "w", encoding="utf-8", newline="")
        self._file.write(LOG_HEADER)

    def record(
        self, timestamp_ms: int, pixel_height: float, distance: float, confidence: float
    ) -> None:
        self._file.write(
            f"{int(timestamp_ms)},{_fmt(pixel_height)},{_fmt(distance)},{_fmt(confidence)}\n"
        )

    def close(self) -> None:
        self._file.close()

    @property
    def closed(self) -> bool:
        return self._file.closed

    def __enter__(self) -> DistanceLog:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class FpsCounter:
    """Frames-per-second estimate refreshed about once a second."""

    def __init__(self, start: float) -> None:
        self.start = start
        self.frames = 0
        self.fps = DEFAULT_FPS

    def tick(self, now: float) -> float:
        """Count one frame at time ``now`` (seconds) and return the current rate."""
        self.frames += 1
        elapsed_ms = int((now - self.start) * 1000)
        seconds = elapsed_ms / 1000
        if seconds >= 1.0:
            self.fps = self.frames / seconds
            self.frames = 0
            self.start = now
        return self.fps