from __future__ import annotations

import argparse
import logging
from typing import List, Optional, Sequence

from .config import DetectorConfig, load_detector_config
from .runtime import load_detector
from .types import BoundingBox


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run YOLO object detection on an image and list the boxes.")
    parser.add_argument("--image", required=True, help="Path to an input image.")
    parser.add_argument("--config", default=None, help="Detector JSON config; other model flags are ignored when set.")
    parser.add_argument("--model-config", default="dat/yolo/yolov3.cfg", help="Model topology (.cfg) or single-file model (.onnx/.pt).")
    parser.add_argument("--model-weights", default="dat/yolo/yolov3.weights", help="Darknet weights file.")
    parser.add_argument("--classes", default="dat/yolo/coco.names", help="Newline-delimited class names.")
    parser.add_argument("--backend", default=None, help="Force backend: darknet / onnxruntime / torchscript.")
    parser.add_argument("--conf", type=float, default=0.2, help="Confidence threshold.")
    parser.add_argument("--nms", type=float, default=0.4, help="IoU threshold for NMS.")
    parser.add_argument("--per-class-nms", action="store_true", help="Only suppress overlapping boxes of the same class.")
    parser.add_argument("--imgsz", type=int, default=416, help="Network input size (square).")
    parser.add_argument("--show", action="store_true", help="Show a window with the visualized detections.")
    parser.add_argument("--out", default=None, help="Optional output path for the visualized image.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser


def config_from_args(args: argparse.Namespace) -> DetectorConfig:
    if args.config:
        return load_detector_config(args.config)
    if args.imgsz < 32:
        raise ValueError("--imgsz must be >= 32")
    return DetectorConfig(
        model_config=args.model_config,
        model_weights=args.model_weights,
        classes_file=args.classes,
        backend=args.backend,
        conf_threshold=args.conf,
        nms_threshold=args.nms,
        class_agnostic_nms=not args.per_class_nms,
        input_size=(args.imgsz, args.imgsz),
    )


def format_box(box: BoundingBox, class_names: Sequence[str]) -> str:
    name = class_names[box.class_id] if 0 <= box.class_id < len(class_names) else str(box.class_id)
    r = box.roi
    return f"{box.box_id}\t{name}\t{box.confidence:.3f}\t{r.x}\t{r.y}\t{r.width}\t{r.height}"


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    import cv2  # type: ignore

    img = cv2.imread(args.image)
    if img is None:
        raise FileNotFoundError(f"Could not read image at path: {args.image}")

    detector = load_detector(config_from_args(args))
    boxes = detector.detect(img, visualize=args.show)

    if args.out:
        from .visualize import render

        vis = render(img, boxes, detector.class_names)
        ok = cv2.imwrite(args.out, vis)
        if not ok:
            raise RuntimeError(f"Failed to write output image: {args.out}")

    for box in boxes:
        print(format_box(box, detector.class_names))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
