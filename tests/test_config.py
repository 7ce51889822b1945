import json
import tempfile
import unittest
from pathlib import Path

from objdet_kit.config import DetectorConfig, load_detector_config


class TestDetectorConfig(unittest.TestCase):
    def _write_config(self, payload: dict) -> Path:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        path = Path(tmpdir.name) / "detector.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    def test_load_ok(self) -> None:
        path = self._write_config(
            {
                "model_config": "yolo/yolov3.cfg",
                "model_weights": "yolo/yolov3.weights",
                "classes_file": "/data/coco.names",
                "conf_threshold": 0.3,
                "nms_threshold": 0.45,
                "input_size": 608,
                "swap_rb": True,
            }
        )
        cfg = load_detector_config(path)
        self.assertIsInstance(cfg, DetectorConfig)
        base = path.parent.resolve()
        self.assertEqual(cfg.model_config, str(base / "yolo" / "yolov3.cfg"))
        self.assertEqual(cfg.model_weights, str(base / "yolo" / "yolov3.weights"))
        self.assertEqual(cfg.classes_file, "/data/coco.names")
        self.assertEqual(cfg.conf_threshold, 0.3)
        self.assertEqual(cfg.input_size, (608, 608))
        self.assertTrue(cfg.swap_rb)
        self.assertTrue(cfg.class_agnostic_nms)

    def test_defaults_match_darknet_yolov3(self) -> None:
        cfg = load_detector_config(self._write_config({"model_config": "m.onnx"}))
        self.assertIsNone(cfg.model_weights)
        self.assertEqual(cfg.input_size, (416, 416))
        self.assertAlmostEqual(cfg.scale_factor, 1 / 255.0)
        self.assertEqual(cfg.mean, (0.0, 0.0, 0.0))
        self.assertFalse(cfg.crop)

    def test_sub_configs(self) -> None:
        cfg = DetectorConfig(model_config="m.cfg", conf_threshold=0.6, top_k=10, input_size=(320, 256))
        post = cfg.post_config()
        self.assertEqual((post.conf_threshold, post.nms_threshold, post.top_k), (0.6, 0.4, 10))
        self.assertEqual(cfg.preprocess_config().target_size, (320, 256))

    def test_unknown_keys_rejected(self) -> None:
        path = self._write_config({"model_config": "m.cfg", "extra": 1})
        with self.assertRaises(ValueError):
            load_detector_config(path)

    def test_missing_model_config_rejected(self) -> None:
        with self.assertRaises(ValueError):
            load_detector_config(self._write_config({"conf_threshold": 0.5}))

    def test_invalid_values_rejected(self) -> None:
        for payload in (
            {"model_config": "m.cfg", "conf_threshold": 2.0},
            {"model_config": "m.cfg", "nms_threshold": "0.4"},
            {"model_config": "m.cfg", "swap_rb": 1},
            {"model_config": "m.cfg", "input_size": [416]},
            {"model_config": "m.cfg", "input_size": 16},
            {"model_config": "m.cfg", "top_k": -1},
        ):
            with self.subTest(payload=payload):
                with self.assertRaises(ValueError):
                    load_detector_config(self._write_config(payload))

    def test_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_detector_config(Path("/nonexistent/detector.json"))

    def test_invalid_json(self) -> None:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        path = Path(tmpdir.name) / "detector.json"
        path.write_text("{not json", encoding="utf-8")
        with self.assertRaises(ValueError):
            load_detector_config(path)


if __name__ == "__main__":
    unittest.main()
