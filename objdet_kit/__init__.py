"""
Decoding and suppression of raw YOLO-style detector outputs.

Raw (rows, 5 + C) outputs are turned into confidence-filtered candidates,
thinned with greedy NMS and numbered into `BoundingBox` records. The decoding
core needs only NumPy; OpenCV is used for preprocessing, the Darknet engine
and drawing, and other runtimes are optional backends.
"""

from .types import BoundingBox, Candidate, Rect
from .decode import OutputShapeError, decode
from .nms import NMSConfig, iou, suppress
from .postprocess import DetectionPostConfig, DetectionPostprocessor, assemble
from .preprocess import PreprocessConfig, make_tensor
from .metadata import load_class_names
from .visualize import render, show_image
from .config import DetectorConfig, load_detector_config
from .runtime import ObjectDetector, detect_objects, load_detector

__all__ = [
    "BoundingBox",
    "Candidate",
    "Rect",
    "OutputShapeError",
    "decode",
    "NMSConfig",
    "iou",
    "suppress",
    "DetectionPostConfig",
    "DetectionPostprocessor",
    "assemble",
    "PreprocessConfig",
    "make_tensor",
    "load_class_names",
    "render",
    "show_image",
    "DetectorConfig",
    "load_detector_config",
    "ObjectDetector",
    "detect_objects",
    "load_detector",
]
