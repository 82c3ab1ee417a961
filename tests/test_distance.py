import pytest

from distdet.detection import Box, Detection
from distdet.distance import (
    DEFAULT_FPS,
    LOG_HEADER,
    REAL_HEIGHT_CM,
    DistanceLog,
    FpsCounter,
    best_detection,
    calibrate_focal_length,
    estimate_distance,
    read_focal_length,
    write_focal_length,
)


def test_calibration_round_trip():
    focal = calibrate_focal_length(120.0, 150.0, REAL_HEIGHT_CM)
    assert estimate_distance(REAL_HEIGHT_CM, focal, 120.0) == pytest.approx(150.0)


def test_distance_inversely_proportional_to_pixel_height():
    near = estimate_distance(REAL_HEIGHT_CM, 600.0, 200.0)
    far = estimate_distance(REAL_HEIGHT_CM, 600.0, 100.0)
    assert far == pytest.approx(2 * near)


def test_estimate_distance_zero_height():
    with pytest.raises(ValueError):
        estimate_distance(REAL_HEIGHT_CM, 600.0, 0)


def test_calibrate_default_real_height():
    assert calibrate_focal_length(50.0, 100.0) == calibrate_focal_length(50.0, 100.0, 23.0)


def test_focal_length_file_round_trip(tmp_path):
    path = tmp_path / "focal.txt"
    write_focal_length(path, 512.25)
    assert read_focal_length(path) == 512.25


def test_read_focal_length_missing(tmp_path):
    assert read_focal_length(tmp_path / "focal.txt") is None


@pytest.mark.parametrize("content", ["-3", "0", "abc", ""])
def test_read_focal_length_invalid(tmp_path, content):
    path = tmp_path / "focal.txt"
    path.write_text(content)
    assert read_focal_length(path) is None


def test_read_focal_length_leading_number(tmp_path):
    path = tmp_path / "focal.txt"
    path.write_text("  640.5 px\n")
    assert read_focal_length(path) == 640.5


def _det(conf):
    return Detection(confidence=conf, box=Box(0, 0, 1, 1))


def test_best_detection_picks_highest():
    dets = [_det(0.3), _det(0.9), _det(0.5)]
    assert best_detection(dets) is dets[1]


def test_best_detection_tie_prefers_last():
    dets = [_det(0.8), _det(0.8)]
    assert best_detection(dets) is dets[1]


def test_best_detection_empty():
    assert best_detection([]) is None


def test_distance_log(tmp_path):
    path = tmp_path / "log.csv"
    with DistanceLog(path) as log:
        log.record(1000, 100.0, 115.0, 0.9)
    assert log.closed
    assert path.read_text() == LOG_HEADER + "1000,100,115,0.9\n"


def test_distance_log_header_fixed(tmp_path):
    path = tmp_path / "log.csv"
    log = DistanceLog(path)
    log.close()
    assert path.read_text() == "timestamp_ms,pixel_height,estimated_distance_cm,confidence\n"


def test_fps_counter_default_until_one_second():
    counter = FpsCounter(0.0)
    assert counter.tick(0.5) == DEFAULT_FPS == 20.0


def test_fps_counter_updates_and_resets():
    counter = FpsCounter(0.0)
    counter.tick(0.5)
    assert counter.tick(1.0) == pytest.approx(2.0)
    assert counter.frames == 0
    assert counter.start == 1.0
    assert counter.tick(1.2) == pytest.approx(2.0)