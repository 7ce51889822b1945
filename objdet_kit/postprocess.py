from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .decode import RawOutputs, decode
from .nms import NMSConfig, suppress
from .types import BoundingBox, Candidate


def assemble(candidates: Sequence[Candidate], kept_indices: Sequence[int]) -> List[BoundingBox]:
    """
    Package surviving candidates as BoundingBox records, numbering them
    0..N-1 in the order of `kept_indices`.
    """

    boxes: List[BoundingBox] = []
    for idx in kept_indices:
        if idx < 0 or idx >= len(candidates):
            raise IndexError(f"kept index {idx} out of range for {len(candidates)} candidates")
        cand = candidates[idx]
        boxes.append(
            BoundingBox(
                roi=cand.rect,
                class_id=cand.class_id,
                confidence=cand.confidence,
                box_id=len(boxes),
            )
        )
    return boxes


@dataclass(frozen=True)
class DetectionPostConfig:
    """
    Thresholds for turning raw outputs into final boxes.
    """

    conf_threshold: float = 0.2
    nms_threshold: float = 0.4
    # If True, boxes of different classes suppress each other (reference behavior).
    class_agnostic_nms: bool = True
    # Keep at most this many boxes after NMS (0 = no limit).
    top_k: int = 0

    def __post_init__(self) -> None:
        if not 0.0 <= self.conf_threshold <= 1.0:
            raise ValueError("conf_threshold must be within [0, 1]")
        if not 0.0 <= self.nms_threshold <= 1.0:
            raise ValueError("nms_threshold must be within [0, 1]")
        if self.top_k < 0:
            raise ValueError("top_k must be >= 0")


class DetectionPostprocessor:
    """
    decode -> suppress -> assemble for the outputs of one image.

    Holds no per-call state, so a single instance can serve any number of
    independent calls.
    """

    def __init__(self, cfg: DetectionPostConfig = DetectionPostConfig(), num_classes: Optional[int] = None):
        self.cfg = cfg
        self.num_classes = num_classes
        self._nms_cfg = NMSConfig(class_agnostic=cfg.class_agnostic_nms, top_k=cfg.top_k)

    def process(self, outputs: RawOutputs, image_size: Tuple[int, int]) -> List[BoundingBox]:
        """
        Args:
            outputs: raw network outputs for a single image
            image_size: (width, height) of the source image
        """

        width, height = image_size
        candidates = decode(outputs, width, height, self.cfg.conf_threshold, num_classes=self.num_classes)
        if not candidates:
            return []
        kept = suppress(candidates, self.cfg.conf_threshold, self.cfg.nms_threshold, self._nms_cfg)
        return assemble(candidates, kept)
