from __future__ import annotations

from typing import Iterable, Sequence, Tuple

import numpy as np

from .types import BoundingBox


def _require_cv2(fn_name: str):
    try:
        import cv2  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError(f"OpenCV is required for {fn_name}(). Install with `pip install opencv-python`.") from e
    return cv2


def format_label(box: BoundingBox, class_names: Sequence[str]) -> str:
    if box.class_id < 0 or box.class_id >= len(class_names):
        raise IndexError(f"class id {box.class_id} has no name ({len(class_names)} classes loaded)")
    return f"{class_names[box.class_id]}:{box.confidence:.2f}"


def render(
    image: np.ndarray,
    boxes: Iterable[BoundingBox],
    class_names: Sequence[str],
    *,
    box_color: Tuple[int, int, int] = (0, 255, 0),
    box_thickness: int = 2,
) -> np.ndarray:
    """
    Draw boxes and "<name>:<confidence>" labels on a copy of a BGR image.

    The label sits on a white background above the box's top edge, pushed
    down when the box touches the top of the image.
    """

    cv2 = _require_cv2("render")

    if image is None or not hasattr(image, "shape"):
        raise TypeError("image must be a NumPy array (BGR).")
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected image shape (H, W, 3), got {getattr(image, 'shape', None)}")

    out = image.copy()

    for box in boxes:
        left, top = box.roi.x, box.roi.y
        cv2.rectangle(
            out,
            (left, top),
            (left + box.roi.width, top + box.roi.height),
            box_color,
            box_thickness,
        )

        label = format_label(box, class_names)
        (tw, th), baseline = cv2.getTextSize(label, cv2.FONT_ITALIC, 0.5, 1)
        top = max(top, th)

        cv2.rectangle(
            out,
            (left, top - int(round(1.5 * th))),
            (left + int(round(1.5 * tw)), top + baseline),
            (255, 255, 255),
            cv2.FILLED,
        )
        cv2.putText(out, label, (left, top), cv2.FONT_ITALIC, 0.75, (0, 0, 0), 1)

    return out


def show_image(image: np.ndarray, window_name: str = "Object classification", wait: bool = True) -> None:
    """
    Show an image in a resizable window; with `wait`, block until a key is pressed.
    """

    cv2 = _require_cv2("show_image")
    cv2.namedWindow(window_name, cv2.WINDOW_NORMAL)
    cv2.imshow(window_name, image)
    if wait:
        cv2.waitKey(0)
        cv2.destroyWindow(window_name)
