from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np


PathLike = Union[str, Path]

LOG = logging.getLogger("objdet.backends.darknet")


@dataclass(frozen=True)
class DarknetBackendConfig:
    """
    Configuration for Darknet models run through OpenCV's DNN module.

    - preferable_backend / preferable_target: names of `cv2.dnn` constants,
      e.g. "DNN_BACKEND_OPENCV" + "DNN_TARGET_CPU" (default) or
      "DNN_BACKEND_CUDA" + "DNN_TARGET_CUDA".
    - output_names: override the unconnected output layers if needed
    """

    preferable_backend: str = "DNN_BACKEND_OPENCV"
    preferable_target: str = "DNN_TARGET_CPU"
    output_names: Optional[Sequence[str]] = None


class DarknetBackend:
    """
    Darknet (.cfg + .weights) inference through `cv2.dnn`.

    The network is read once at construction; `forward` can then be called
    for any number of images. Returns one (rows, 5 + C) array per YOLO
    output layer.
    """

    def __init__(
        self,
        model_config: PathLike,
        model_weights: PathLike,
        cfg: DarknetBackendConfig = DarknetBackendConfig(),
    ):
        try:
            import cv2  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError("OpenCV is required for the Darknet backend. Install with `pip install opencv-python`.") from e
        if not hasattr(getattr(cv2, "dnn", None), "readNetFromDarknet"):
            raise ImportError(
                f"OpenCV {getattr(cv2, '__version__', '?')} has no Darknet reader (removed in OpenCV 5). "
                "Install a 4.x release with `pip install 'opencv-python>=4.5,<5'`."
            )

        self._cv2 = cv2
        self.model_config = Path(model_config)
        self.model_weights = Path(model_weights)
        for p in (self.model_config, self.model_weights):
            if not p.exists():
                raise FileNotFoundError(str(p))

        try:
            net = cv2.dnn.readNetFromDarknet(str(self.model_config), str(self.model_weights))
        except cv2.error as e:
            raise RuntimeError(f"Failed to load Darknet model {self.model_config} / {self.model_weights}") from e
        if net is None or net.empty():
            raise RuntimeError(f"Failed to load Darknet model {self.model_config} / {self.model_weights}")

        net.setPreferableBackend(getattr(cv2.dnn, cfg.preferable_backend))
        net.setPreferableTarget(getattr(cv2.dnn, cfg.preferable_target))
        self.net = net

        if cfg.output_names is not None:
            self.output_names = list(cfg.output_names)
        else:
            self.output_names = list(net.getUnconnectedOutLayersNames())
        LOG.info("loaded Darknet model %s (outputs: %s)", self.model_config.name, ", ".join(self.output_names))

    def forward(self, blob: np.ndarray, output_names: Optional[Sequence[str]] = None) -> List[np.ndarray]:
        names = list(output_names) if output_names is not None else self.output_names
        self.net.setInput(blob)
        outputs = self.net.forward(names)
        return [np.asarray(o) for o in outputs]
