from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Union

import numpy as np

from .types import Candidate

LOG = logging.getLogger("objdet.decode")

# [cx, cy, w, h, objectness] precede the class scores in every row
GEOMETRY_CHANNELS = 4
RESERVED_CHANNELS = 5

RawOutputs = Union[np.ndarray, Sequence[np.ndarray]]


class OutputShapeError(ValueError):
    """Raised when a raw network output does not have the (rows, 5 + C) layout."""


def _as_rows(output: np.ndarray, num_classes: Optional[int]) -> np.ndarray:
    p = np.asarray(output)
    if p.ndim == 3:
        if p.shape[0] != 1:
            raise OutputShapeError(f"Batch > 1 is not supported (got shape {p.shape}). Pass one image at a time.")
        p = p[0]
    if p.ndim == 1 and p.size == 0:
        return p.reshape(0, RESERVED_CHANNELS + 1)
    if p.ndim != 2:
        raise OutputShapeError(f"Expected a 2-D output (rows, 5 + num_classes), got shape {p.shape}")

    channels = p.shape[1]
    if channels <= RESERVED_CHANNELS:
        raise OutputShapeError(
            f"Output has {channels} channels; need at least {RESERVED_CHANNELS + 1} "
            "(4 geometry + 1 objectness + class scores)"
        )
    if num_classes is not None and channels - RESERVED_CHANNELS < num_classes:
        raise OutputShapeError(
            f"Output carries {channels - RESERVED_CHANNELS} class scores but the class table has {num_classes} names"
        )

    if not np.issubdtype(p.dtype, np.floating):
        p = p.astype(np.float32)
    return p


def decode(
    raw_outputs: RawOutputs,
    image_width: int,
    image_height: int,
    conf_threshold: float,
    num_classes: Optional[int] = None,
) -> List[Candidate]:
    """
    Turn raw detector outputs into confidence-filtered candidates.

    Each output is shaped (rows, 5 + C): [cx, cy, w, h, objectness, scores...]
    with geometry as fractions of the image size. The class id is the argmax
    of the scores and the confidence is that score; rows whose confidence is
    not strictly greater than `conf_threshold` are dropped.

    Args:
        raw_outputs: one array or a sequence of arrays (one per output layer).
        image_width, image_height: size of the source image in pixels.
        conf_threshold: minimum class score (exclusive).
        num_classes: if given, outputs must carry at least this many scores.

    Returns:
        Candidates in row order, output by output.
    """

    if isinstance(raw_outputs, np.ndarray):
        raw_outputs = [raw_outputs]

    candidates: List[Candidate] = []
    for output in raw_outputs:
        p = _as_rows(output, num_classes)
        if p.shape[0] == 0:
            continue

        scores = p[:, RESERVED_CHANNELS:]
        class_ids = np.argmax(scores, axis=1)
        confidences = scores[np.arange(scores.shape[0]), class_ids]

        # Compare at the output's own precision so a score equal to the
        # threshold never slips through on float rounding.
        keep = np.flatnonzero(confidences > p.dtype.type(conf_threshold))
        if keep.size == 0:
            continue

        geometry = p[keep, :GEOMETRY_CHANNELS].astype(np.float32)
        scale = np.array([image_width, image_height, image_width, image_height], dtype=np.float32)
        pixels = np.trunc(geometry * scale).astype(np.int64)

        for row, (cx, cy, w, h) in zip(keep, pixels):
            candidates.append(
                Candidate(
                    center_x=int(cx),
                    center_y=int(cy),
                    width=int(w),
                    height=int(h),
                    class_id=int(class_ids[row]),
                    confidence=float(confidences[row]),
                )
            )

    LOG.debug("decoded %d candidates above conf %.3f", len(candidates), conf_threshold)
    return candidates
