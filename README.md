# distdet

Decode YOLOv5 and YOLOv8 detector output into boxed detections and estimate
how far away an object of known height is, using a pinhole-camera model.

## Install

    pip install distdet

For running the tests:

    pip install "distdet[test]"

## Detection

`distdet.detection` works on plain NumPy arrays:

- `format_to_square(image)` pads an image with zeros on the right and bottom
  so that it becomes square.
- `blob_from_image(image, size)` resizes an image bilinearly to `size`
  (width, height), swaps the first and third channels (BGR to RGB), scales
  pixel values to `[0, 1]` and returns a float32 NCHW blob.
- `decode_output(output, num_classes, x_factor, y_factor,
  confidence_threshold, score_threshold)` turns a raw network output of shape
  `(rows, dims)` or `(1, rows, dims)` into a list of `(Box, confidence,
  class_id)` candidates. When the second dimension is larger than the first
  the output is read transposed, as YOLOv8 (`x, y, w, h` then class scores);
  otherwise as YOLOv5 (`x, y, w, h`, objectness, then class scores). YOLOv5
  rows need objectness `>= confidence_threshold` and a best class score
  `> score_threshold`, and keep the objectness as confidence; YOLOv8 rows
  need a best class score `> score_threshold` and keep that score.
- `nms_boxes(boxes, scores, score_threshold, nms_threshold)` performs greedy
  non-maximum suppression and returns the indices of the kept boxes, highest
  score first. It raises `ValueError` if the two sequences differ in length.
- `load_classes(path)` reads class names, one per line.

`Box` is a frozen dataclass with `left`, `top`, `width` and `height`, plus the
properties `right`, `bottom` and `area` and an `iou(other)` method.

`Inference` ties these together around any network object: a callable that
takes a blob and returns the raw output array (or a list or tuple whose first
item is that array).

```python
from distdet.detection import Inference, load_classes

classes = load_classes("classes.txt")
inference = Inference(network, classes, (640, 640))
for detection in inference.run(frame):
    print(detection.class_name, detection.confidence, detection.box)
```

When the model shape is square, `run` pads the frame to a square first, and
box coordinates are scaled back to the (padded) frame size. Each `Detection`
has a `class_id`, a `class_name`, a `confidence`, a random display `color`
(each channel between 100 and 255) and a `box`. The thresholds are class
attributes of `Inference` that can be changed per instance:
`confidence_threshold` (0.25), `score_threshold` (0.65), `nms_threshold`
(0.50) and `letterbox_square` (`True`).

## Distance

`distdet.distance` covers calibration and the distance estimate:

```python
from distdet.distance import (
    REAL_HEIGHT_CM, best_detection, calibrate_focal_length, estimate_distance,
    read_focal_length, write_focal_length,
)

focal = calibrate_focal_length(pixel_height=120, real_distance=100)
write_focal_length("focal.txt", focal)
focal = read_focal_length("focal.txt")

detection = best_detection(detections)
if detection is not None and focal is not None:
    distance = estimate_distance(REAL_HEIGHT_CM, focal, detection.box.height)
```

- `calibrate_focal_length(pixel_height, real_distance, real_height=23.0)`
  returns `pixel_height * real_distance / real_height`.
- `estimate_distance(real_height, focal_length, pixel_height)` returns
  `real_height * focal_length / pixel_height`; a zero pixel height raises
  `ValueError`.
- `read_focal_length(path)` returns the number at the start of the file, or
  `None` when the file is missing, holds no number, or the value is not
  positive.
- `best_detection(detections)` returns the most confident detection (the
  later one on ties), or `None` for an empty input.

`DistanceLog(path)` creates a CSV file with the header
`timestamp_ms,pixel_height,estimated_distance_cm,confidence`; `record(...)`
appends a row and `close()` closes it. It can also be used as a context
manager.

`FpsCounter(start)` counts frames through `tick(now)`, with times in seconds,
and refreshes its rate once at least a second has passed; until then it
reports 20.0.

## What it does not do

There is no command and no camera loop: the package does not capture video,
load ONNX model files, draw boxes or show windows. Supply frames as NumPy
arrays and the network as a callable of your own.