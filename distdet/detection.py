"""Decoding of YOLO-style network output into boxed detections."""

from __future__ import annotations

import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

DEFAULT_MODEL_SHAPE = (640, 640)


@dataclass(frozen=True)
class Box:
    """An integer axis-aligned rectangle."""

    left: int
    top: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    def iou(self, other: Box) -> float:
        """Intersection over union of two boxes."""
        total = self.area + other.area
        if total <= 0:
            return 1.0
        inter_w = min(self.right, other.right) - max(self.left, other.left)
        inter_h = min(self.bottom, other.bottom) - max(self.top, other.top)
        inter = inter_w * inter_h if inter_w > 0 and inter_h > 0 else 0
        return inter / (total - inter)


@dataclass
class Detection:
    """One detected object."""

    class_id: int = 0
    class_name: str = ""
    confidence: float = 0.0
    color: tuple[int, int, int] = (0, 0, 0)
    box: Box = field(default_factory=lambda: Box(0, 0, 0, 0))


def nms_boxes(
    boxes: Sequence[Box],
    scores: Sequence[float],
    score_threshold: float,
    nms_threshold: float,
) -> list[int]:
    """Greedy non-maximum suppression; returns indices of the kept boxes."""
    if len(boxes) != len(scores):
        raise ValueError("boxes and scores must have the same length")
    candidates = sorted(
        (i for i, score in enumerate(scores) if score > score_threshold),
        key=lambda i: scores[i],
        reverse=True,
    )
    kept: list[int] = []
    for idx in candidates:
        if all(boxes[idx].iou(boxes[k]) <= nms_threshold for k in kept):
            kept.append(idx)
    return kept


def format_to_square(image: np.ndarray) -> np.ndarray:
    """Pad an image with zeros on the right and bottom to make it square."""
    rows, cols = image.shape[:2]
    side = max(rows, cols)
    result = np.zeros((side, side) + image.shape[2:], dtype=image.dtype)
    result[:rows, :cols] = image
    return result


def _resize_bilinear(image: np.ndarray, width: int, height: int) -> np.ndarray:
    src = image.astype(np.float32)
    rows, cols = src.shape[:2]
    if (rows, cols) == (height, width):
        return src

    def axis(dst: int, size: int) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        pos = (np.arange(dst, dtype=np.float64) + 0.5) * (size / dst) - 0.5
        pos = np.clip(pos, 0, size - 1)
        lo = np.floor(pos).astype(np.intp)
        hi = np.minimum(lo + 1, size - 1)
        return lo, hi, (pos - lo).astype(np.float32)

    y0, y1, wy = axis(height, rows)
    x0, x1, wx = axis(width, cols)
    wx = wx[None, :, None]
    wy = wy[:, None, None]
    top = src[y0][:, x0] * (1 - wx) + src[y0][:, x1] * wx
    bottom = src[y1][:, x0] * (1 - wx) + src[y1][:, x1] * wx
    return top * (1 - wy) + bottom * wy


def blob_from_image(image: np.ndarray, size: tuple[int, int]) -> np.ndarray:
    """Resize to ``size`` (width, height), scale to [0, 1], swap R and B, return NCHW."""
    width, height = size
    if image.ndim == 2:
        image = image[:, :, None]
    resized = _resize_bilinear(image, int(width), int(height))
    if resized.shape[2] >= 3:
        order = [2, 1, 0, *range(3, resized.shape[2])]
        resized = resized[:, :, order]
    scaled = resized * np.float32(1.0 / 255.0)
    return np.ascontiguousarray(scaled.transpose(2, 0, 1)[None], dtype=np.float32)


def load_classes(path: str | Path) -> list[str]:
    """Read one class name per line."""
    with open(path, encoding="utf-8", newline="") as handle:
        lines = handle.read().split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def decode_output(
    output: np.ndarray,
    num_classes: int,
    x_factor: float,
    y_factor: float,
    confidence_threshold: float,
    score_threshold: float,
) -> list[tuple[Box, float, int]]:
    """Turn raw network output into (box, confidence, class id) candidates.

    Output laid out as (rows, 5 + classes) is read as YOLOv5; when the second
    dimension is larger than the first it is read transposed as YOLOv8.
    """
    data = np.asarray(output, dtype=np.float32)
    if data.ndim == 3:
        data = data[0]
    if data.ndim != 2:
        raise ValueError("output must be two- or three-dimensional")
    rows, dims = data.shape
    yolov8 = dims > rows
    if yolov8:
        data = data.T

    if yolov8:
        scores = data[:, 4 : 4 + num_classes]
        class_ids = np.argmax(scores, axis=1)
        best = scores.max(axis=1)
        mask = best > score_threshold
        confidences = best
    else:
        objectness = data[:, 4]
        scores = data[:, 5 : 5 + num_classes]
        class_ids = np.argmax(scores, axis=1)
        best = scores.max(axis=1)
        mask = (objectness >= confidence_threshold) & (best > score_threshold)
        confidences = objectness

    coords = data[:, :4].astype(np.float64)
    x, y, w, h = coords.T
    lefts = np.trunc((x - 0.5 * w) * x_factor)
    tops = np.trunc((y - 0.5 * h) * y_factor)
    widths = np.trunc(w * x_factor)
    heights = np.trunc(h * y_factor)

    return [
        (
            Box(int(lefts[i]), int(tops[i]), int(widths[i]), int(heights[i])),
            float(confidences[i]),
            int(class_ids[i]),
        )
        for i in np.flatnonzero(mask)
    ]


class Inference:
    """Runs a detection network on images and returns filtered detections.

    ``network`` is any callable that takes an NCHW float blob and returns the
    raw output array (or a sequence whose first item is that array).
    """

    confidence_threshold: float = 0.25
    score_threshold: float = 0.65
    nms_threshold: float = 0.50
    letterbox_square: bool = True

    def __init__(
        self,
        network: Callable[[np.ndarray], object],
        classes: Sequence[str],
        model_shape: tuple[int, int] = DEFAULT_MODEL_SHAPE,
    ) -> None:
        self.network = network
        self.classes = list(classes)
        self.model_shape = (int(model_shape[0]), int(model_shape[1]))
        self._rng = random.Random()

    def run(self, image: np.ndarray) -> list[Detection]:
        width, height = self.model_shape
        model_input = image
        if self.letterbox_square and width == height:
            model_input = format_to_square(model_input)

        blob = blob_from_image(model_input, self.model_shape)
        output = self.network(blob)
        if isinstance(output, (list, tuple)):
            output = output[0]

        x_factor = model_input.shape[1] / width
        y_factor = model_input.shape[0] / height
        candidates = decode_output(
            np.asarray(output),
            len(self.classes),
            x_factor,
            y_factor,
            self.confidence_threshold,
            self.score_threshold,
        )
        boxes = [box for box, _, _ in candidates]
        confidences = [conf for _, conf, _ in candidates]
        kept = nms_boxes(boxes, confidences, self.score_threshold, self.nms_threshold)

        detections = []
        for idx in kept:
            box, confidence, class_id = candidates[idx]
            color = tuple(self._rng.randint(100, 255) for _ in range(3))
            detections.append(
                Detection(
                    class_id=class_id,
                    class_name=self.classes[class_id],
                    confidence=confidence,
                    color=color,
                    box=box,
                )
            )
        return detections