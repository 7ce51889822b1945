import itertools
import unittest

import numpy as np

from objdet_kit.nms import NMSConfig, iou, suppress
from objdet_kit.types import Candidate, Rect


def _cand(x: int, y: int, w: int, h: int, score: float, class_id: int = 0) -> Candidate:
    # top-left corner in, so cand.rect == Rect(x, y, w, h)
    return Candidate(center_x=x + w // 2, center_y=y + h // 2, width=w, height=h, class_id=class_id, confidence=score)


class TestIoU(unittest.TestCase):
    def test_partial_overlap(self) -> None:
        self.assertAlmostEqual(iou(Rect(0, 0, 10, 10), Rect(5, 0, 10, 10)), 50 / 150)

    def test_identical_and_disjoint(self) -> None:
        self.assertEqual(iou(Rect(0, 0, 10, 10), Rect(0, 0, 10, 10)), 1.0)
        self.assertEqual(iou(Rect(0, 0, 10, 10), Rect(20, 20, 10, 10)), 0.0)
        # touching edges do not overlap
        self.assertEqual(iou(Rect(0, 0, 10, 10), Rect(10, 0, 10, 10)), 0.0)

    def test_empty_union(self) -> None:
        self.assertEqual(iou(Rect(0, 0, 0, 0), Rect(0, 0, 0, 0)), 0.0)


class TestSuppress(unittest.TestCase):
    def test_same_class_high_overlap_keeps_best(self) -> None:
        cands = [_cand(0, 0, 100, 100, 0.8), _cand(0, 0, 100, 90, 0.9)]
        self.assertAlmostEqual(iou(cands[0].rect, cands[1].rect), 0.9)
        self.assertEqual(suppress(cands, 0.5, 0.5), [1])

    def test_different_classes_suppressed_jointly(self) -> None:
        cands = [_cand(0, 0, 100, 100, 0.8, class_id=0), _cand(0, 0, 100, 90, 0.9, class_id=1)]
        self.assertEqual(suppress(cands, 0.5, 0.5), [1])

    def test_per_class_keeps_different_classes(self) -> None:
        cands = [_cand(0, 0, 100, 100, 0.8, class_id=0), _cand(0, 0, 100, 90, 0.9, class_id=1)]
        kept = suppress(cands, 0.5, 0.5, NMSConfig(class_agnostic=False))
        self.assertEqual(kept, [1, 0])

    def test_overlap_equal_to_threshold_survives(self) -> None:
        # IoU exactly 0.5: only strictly greater overlaps are removed
        cands = [_cand(0, 0, 100, 100, 0.9), _cand(0, 0, 100, 50, 0.8)]
        self.assertEqual(iou(cands[0].rect, cands[1].rect), 0.5)
        self.assertEqual(suppress(cands, 0.1, 0.5), [0, 1])

    def test_returns_descending_confidence(self) -> None:
        cands = [
            _cand(0, 0, 10, 10, 0.6),
            _cand(100, 100, 10, 10, 0.9),
            _cand(200, 200, 10, 10, 0.7),
        ]
        self.assertEqual(suppress(cands, 0.5, 0.5), [1, 2, 0])

    def test_equal_scores_keep_input_order(self) -> None:
        cands = [_cand(0, 0, 10, 10, 0.7), _cand(100, 100, 10, 10, 0.7)]
        self.assertEqual(suppress(cands, 0.5, 0.5), [0, 1])

    def test_low_scores_ignored(self) -> None:
        cands = [_cand(0, 0, 10, 10, 0.5), _cand(100, 100, 10, 10, 0.9)]
        self.assertEqual(suppress(cands, 0.5, 0.5), [1])

    def test_top_k(self) -> None:
        cands = [_cand(i * 50, 0, 10, 10, 0.9 - i * 0.01) for i in range(5)]
        self.assertEqual(suppress(cands, 0.1, 0.5, NMSConfig(top_k=2)), [0, 1])
        self.assertEqual(suppress(cands, 0.1, 0.5, NMSConfig(top_k=2, class_agnostic=False)), [0, 1])

    def test_negative_top_k_rejected(self) -> None:
        with self.assertRaises(ValueError):
            NMSConfig(top_k=-1)

    def test_empty(self) -> None:
        self.assertEqual(suppress([], 0.5, 0.5), [])

    def test_survivors_never_overlap_beyond_threshold(self) -> None:
        rng = np.random.default_rng(0)
        cands = []
        for _ in range(200):
            x, y = rng.integers(0, 300, size=2)
            w, h = rng.integers(10, 120, size=2)
            cands.append(_cand(int(x), int(y), int(w), int(h), float(rng.uniform(0.3, 1.0)), int(rng.integers(0, 3))))

        for thr in (0.3, 0.5, 0.7):
            kept = suppress(cands, 0.3, thr)
            self.assertGreater(len(kept), 0)
            self.assertEqual(len(set(kept)), len(kept))
            for i, j in itertools.combinations(kept, 2):
                self.assertLessEqual(iou(cands[i].rect, cands[j].rect), thr)


if __name__ == "__main__":
    unittest.main()
