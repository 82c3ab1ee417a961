"""YOLO output decoding, non-maximum suppression and monocular distance estimation."""

__version__ = "0.1.0"
__all__ = ["detection", "distance"]