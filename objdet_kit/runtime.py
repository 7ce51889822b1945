from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

import numpy as np

from .backends import InferenceEngine, create_backend
from .config import DetectorConfig, load_detector_config
from .metadata import load_class_names
from .postprocess import DetectionPostConfig, DetectionPostprocessor
from .preprocess import PreprocessConfig, make_tensor_from_config
from .types import BoundingBox
from .visualize import render, show_image

PathLike = Union[str, Path]
DisplayFn = Callable[[np.ndarray], None]

LOG = logging.getLogger("objdet.runtime")


class ObjectDetector:
    """
    Detection pipeline: preprocess -> inference -> decode/NMS/assemble.

    The engine is built once and reused for every call; calls share no other
    state. Expects BGR images (OpenCV-style) as `np.ndarray` and returns a
    list of `BoundingBox` in source image pixels.
    """

    def __init__(
        self,
        engine: InferenceEngine,
        class_names: Sequence[str] = (),
        *,
        post_cfg: DetectionPostConfig = DetectionPostConfig(),
        preprocess_cfg: PreprocessConfig = PreprocessConfig(),
        display: Optional[DisplayFn] = None,
    ):
        self.engine = engine
        self.class_names = list(class_names)
        self.preprocess_cfg = preprocess_cfg
        self.post = DetectionPostprocessor(post_cfg, num_classes=len(self.class_names) or None)
        self.display = display if display is not None else show_image

    def preprocess(self, image_bgr: np.ndarray) -> np.ndarray:
        if image_bgr is None or not hasattr(image_bgr, "shape"):
            raise TypeError("image_bgr must be a NumPy array (BGR).")
        if image_bgr.ndim != 3 or image_bgr.shape[2] != 3:
            raise ValueError(f"Expected image shape (H, W, 3), got {getattr(image_bgr, 'shape', None)}")
        return make_tensor_from_config(image_bgr, self.preprocess_cfg)

    def detect(self, image_bgr: np.ndarray, visualize: bool = False) -> List[BoundingBox]:
        blob = self.preprocess(image_bgr)
        outputs = self.engine.forward(blob)
        h, w = image_bgr.shape[:2]
        boxes = self.post.process(outputs, image_size=(w, h))
        LOG.debug("detected %d boxes", len(boxes))

        if visualize:
            self._visualize(image_bgr, boxes)
        return boxes

    __call__ = detect

    def _visualize(self, image_bgr: np.ndarray, boxes: List[BoundingBox]) -> None:
        # Display trouble (no GUI, unknown class id) must not cost the caller its boxes.
        try:
            vis = render(image_bgr, boxes, self.class_names)
            self.display(vis)
        except Exception:
            LOG.warning("visualization failed; returning detections without display", exc_info=True)


def load_detector(
    cfg: Union[DetectorConfig, PathLike],
    *,
    display: Optional[DisplayFn] = None,
    onnx_providers: Optional[Sequence[str]] = None,
    torch_device: str = "cpu",
) -> ObjectDetector:
    """
    Build a reusable detector from a `DetectorConfig` or a path to its JSON form.

    Typical usage:
        detector = load_detector("models/yolov3.json")
        boxes = detector.detect(cv2.imread("frame.png"))
    """

    if not isinstance(cfg, DetectorConfig):
        cfg = load_detector_config(Path(cfg))

    engine = create_backend(
        cfg.model_config,
        cfg.model_weights,
        backend=cfg.backend,
        onnx_providers=onnx_providers,
        torch_device=torch_device,
    )
    class_names = load_class_names(cfg.classes_file) if cfg.classes_file else []
    return ObjectDetector(
        engine,
        class_names,
        post_cfg=cfg.post_config(),
        preprocess_cfg=cfg.preprocess_config(),
        display=display,
    )


def detect_objects(
    image_bgr: np.ndarray,
    conf_threshold: float,
    nms_threshold: float,
    classes_file: PathLike,
    model_config: PathLike,
    model_weights: PathLike,
    visualize: bool = False,
    *,
    display: Optional[DisplayFn] = None,
) -> List[BoundingBox]:
    """
    One-shot detection: load class names and the Darknet model, run one image.

    Loads the model on every call; use `load_detector` to keep it around.
    """

    cfg = DetectorConfig(
        model_config=str(model_config),
        model_weights=str(model_weights),
        classes_file=str(classes_file),
        conf_threshold=conf_threshold,
        nms_threshold=nms_threshold,
    )
    detector = load_detector(cfg, display=display)
    return detector.detect(image_bgr, visualize=visualize)
