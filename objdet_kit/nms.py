from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .types import Candidate, Rect


@dataclass(frozen=True)
class NMSConfig:
    # Joint suppression across classes; False runs NMS per class and merges.
    class_agnostic: bool = True
    # Keep at most this many boxes (0 = no limit).
    top_k: int = 0

    def __post_init__(self) -> None:
        if self.top_k < 0:
            raise ValueError("top_k must be >= 0")


def iou(a: Rect, b: Rect) -> float:
    """
    Intersection over union of two pixel rectangles (0 when the union is empty).
    """

    inter = a.intersection(b).area
    union = a.area + b.area - inter
    if union <= 0:
        return 0.0
    return inter / union


def _greedy(rects: np.ndarray, scores: np.ndarray, nms_threshold: float, top_k: int) -> List[int]:
    """
    NumPy greedy NMS. `rects` is (N, 4) as x, y, w, h. Returns indices kept,
    highest score first.
    """

    x1 = rects[:, 0]
    y1 = rects[:, 1]
    x2 = x1 + rects[:, 2]
    y2 = y1 + rects[:, 3]
    areas = np.maximum(rects[:, 2], 0) * np.maximum(rects[:, 3], 0)

    # stable so equal scores keep their input order
    order = np.argsort(-scores, kind="stable")
    keep: List[int] = []

    while order.size > 0:
        i = int(order[0])
        keep.append(i)
        if top_k and len(keep) >= top_k:
            break

        rest = order[1:]
        w = np.maximum(0, np.minimum(x2[i], x2[rest]) - np.maximum(x1[i], x1[rest]))
        h = np.maximum(0, np.minimum(y2[i], y2[rest]) - np.maximum(y1[i], y1[rest]))
        inter = (w * h).astype(np.float64)
        union = areas[i] + areas[rest] - inter
        overlap = np.divide(inter, union, out=np.zeros_like(inter), where=union > 0)

        order = rest[overlap <= nms_threshold]

    return keep


def suppress(
    candidates: Sequence[Candidate],
    conf_threshold: float,
    nms_threshold: float,
    cfg: Optional[NMSConfig] = None,
) -> List[int]:
    """
    Greedy non-maximum suppression over decoded candidates.

    Candidates scoring at or below `conf_threshold` are ignored. Among the
    rest, the highest-confidence box is kept and every remaining box whose IoU
    with it exceeds `nms_threshold` is dropped, until none remain. By default
    boxes of all classes compete with each other.

    Returns:
        Indices into `candidates`, highest confidence first.
    """

    cfg = cfg or NMSConfig()
    if not candidates:
        return []

    rects = np.array(
        [[r.x, r.y, r.width, r.height] for r in (c.rect for c in candidates)],
        dtype=np.int64,
    )
    scores = np.array([c.confidence for c in candidates], dtype=np.float64)
    class_ids = np.array([c.class_id for c in candidates], dtype=np.int64)

    eligible = np.flatnonzero(scores > conf_threshold)
    if eligible.size == 0:
        return []

    if cfg.class_agnostic:
        local = _greedy(rects[eligible], scores[eligible], nms_threshold, cfg.top_k)
        return [int(eligible[i]) for i in local]

    kept: List[int] = []
    for cls in np.unique(class_ids[eligible]):
        idx = eligible[class_ids[eligible] == cls]
        local = _greedy(rects[idx], scores[idx], nms_threshold, cfg.top_k)
        kept.extend(int(idx[i]) for i in local)

    kept.sort(key=lambda i: -scores[i])
    if cfg.top_k:
        kept = kept[: cfg.top_k]
    return kept
