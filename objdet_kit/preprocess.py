from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class PreprocessConfig:
    """
    Blob parameters matching the network's training convention.

    Defaults fit Darknet YOLOv3: 416x416 input, pixels scaled to [0, 1],
    no mean subtraction, BGR order kept, no crop.
    """

    target_size: Tuple[int, int] = (416, 416)
    scale_factor: float = 1 / 255.0
    mean: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    swap_rb: bool = False
    crop: bool = False

    def __post_init__(self) -> None:
        w, h = self.target_size
        if w <= 0 or h <= 0:
            raise ValueError(f"target_size must be positive, got {self.target_size}")
        if self.scale_factor <= 0:
            raise ValueError("scale_factor must be > 0")


def make_tensor(
    image: np.ndarray,
    target_size: Tuple[int, int] = (416, 416),
    scale_factor: float = 1 / 255.0,
    mean: Sequence[float] = (0.0, 0.0, 0.0),
    swap_rb: bool = False,
    crop: bool = False,
) -> np.ndarray:
    """
    Build the NCHW float32 blob the network expects from an HWC image.

    Thin wrapper over OpenCV's `cv2.dnn.blobFromImage`: resize (or
    aspect-preserving resize + centre crop), optional swap of channels 0 and 2,
    mean subtraction, then scaling.

    Args:
        image: (H, W, C) or (H, W) array, usually BGR uint8.
        target_size: (width, height) of the network input.
        scale_factor: multiplier applied after mean subtraction.
        mean: per-channel mean, in the channel order after any swap.
        swap_rb: swap channels 0 and 2 (BGR <-> RGB); a 4th channel stays put.
        crop: keep aspect ratio and centre-crop instead of stretching.

    Returns:
        Array shaped (1, C, target_h, target_w).
    """

    try:
        import cv2  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError("OpenCV is required for make_tensor(). Install with `pip install opencv-python`.") from e

    if image is None or not hasattr(image, "shape"):
        raise TypeError("image must be a NumPy array.")
    if image.ndim not in (2, 3) or image.size == 0:
        raise ValueError(f"Expected a non-empty (H, W) or (H, W, C) image, got shape {getattr(image, 'shape', None)}")

    if image.dtype not in (np.uint8, np.float32):
        image = image.astype(np.float32)

    # Scalar semantics: missing channels get a zero mean
    mean4 = tuple(float(m) for m in mean)[:4]
    mean4 = mean4 + (0.0,) * (4 - len(mean4))

    new_w, new_h = target_size
    blob = cv2.dnn.blobFromImage(
        image,
        scalefactor=float(scale_factor),
        size=(int(new_w), int(new_h)),
        mean=mean4,
        swapRB=bool(swap_rb),
        crop=bool(crop),
        ddepth=cv2.CV_32F,
    )
    return np.ascontiguousarray(blob, dtype=np.float32)


def make_tensor_from_config(image: np.ndarray, cfg: PreprocessConfig) -> np.ndarray:
    return make_tensor(
        image,
        target_size=cfg.target_size,
        scale_factor=cfg.scale_factor,
        mean=cfg.mean,
        swap_rb=cfg.swap_rb,
        crop=cfg.crop,
    )
