from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .postprocess import DetectionPostConfig
from .preprocess import PreprocessConfig


@dataclass(frozen=True)
class DetectorConfig:
    model_config: str
    model_weights: Optional[str] = None
    classes_file: Optional[str] = None
    backend: Optional[str] = None
    conf_threshold: float = 0.2
    nms_threshold: float = 0.4
    class_agnostic_nms: bool = True
    top_k: int = 0
    input_size: Tuple[int, int] = (416, 416)
    scale_factor: float = 1 / 255.0
    mean: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    swap_rb: bool = False
    crop: bool = False

    def __post_init__(self) -> None:
        if not self.model_config:
            raise ValueError("model_config must be a non-empty path")
        if not 0.0 <= self.conf_threshold <= 1.0:
            raise ValueError("conf_threshold must be within [0, 1]")
        if not 0.0 <= self.nms_threshold <= 1.0:
            raise ValueError("nms_threshold must be within [0, 1]")
        if self.top_k < 0:
            raise ValueError("top_k must be >= 0")
        if len(self.input_size) != 2 or min(self.input_size) < 32:
            raise ValueError("input_size must be (width, height) with both >= 32")
        if self.scale_factor <= 0:
            raise ValueError("scale_factor must be > 0")
        if len(self.mean) != 3:
            raise ValueError("mean must have 3 values")

    def post_config(self) -> DetectionPostConfig:
        return DetectionPostConfig(
            conf_threshold=self.conf_threshold,
            nms_threshold=self.nms_threshold,
            class_agnostic_nms=self.class_agnostic_nms,
            top_k=self.top_k,
        )

    def preprocess_config(self) -> PreprocessConfig:
        return PreprocessConfig(
            target_size=self.input_size,
            scale_factor=self.scale_factor,
            mean=self.mean,
            swap_rb=self.swap_rb,
            crop=self.crop,
        )


def _require_str(payload: Dict[str, Any], key: str) -> str:
    if key not in payload:
        raise ValueError(f"Missing required key: {key}")
    value = payload[key]
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value


def _optional_str(payload: Dict[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"{key} must be a string if provided")
    return value


def _number(payload: Dict[str, Any], key: str, default: float) -> float:
    value = payload.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number")
    return float(value)


def _flag(payload: Dict[str, Any], key: str, default: bool) -> bool:
    value = payload.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false")
    return value


def _resolve(base: Path, value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    p = Path(value)
    return str(p if p.is_absolute() else (base / p).resolve())


def load_detector_config(path: Path) -> DetectorConfig:
    """
    Read a detector JSON config. Relative model/class paths resolve against
    the directory holding the config file.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Detector config not found: {path}")
    raw = path.read_text(encoding="utf-8")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid detector config JSON: {path}") from exc
    if not isinstance(payload, dict):
        raise ValueError("Detector config must be a JSON object")

    allowed = {
        "model_config",
        "model_weights",
        "classes_file",
        "backend",
        "conf_threshold",
        "nms_threshold",
        "class_agnostic_nms",
        "top_k",
        "input_size",
        "scale_factor",
        "mean",
        "swap_rb",
        "crop",
    }
    unknown = sorted(set(payload.keys()) - allowed)
    if unknown:
        raise ValueError(f"Unknown detector config keys: {unknown}")

    base = path.parent.resolve()

    top_k = payload.get("top_k", 0)
    if isinstance(top_k, bool) or not isinstance(top_k, int):
        raise ValueError("top_k must be an integer")

    input_size = payload.get("input_size", [416, 416])
    if isinstance(input_size, int) and not isinstance(input_size, bool):
        input_size = [input_size, input_size]
    if not isinstance(input_size, list) or len(input_size) != 2 or not all(isinstance(v, int) for v in input_size):
        raise ValueError("input_size must be an integer or a [width, height] pair")

    mean = payload.get("mean", [0.0, 0.0, 0.0])
    if not isinstance(mean, list) or not all(isinstance(v, (int, float)) for v in mean):
        raise ValueError("mean must be a list of numbers")

    return DetectorConfig(
        model_config=_resolve(base, _require_str(payload, "model_config")),
        model_weights=_resolve(base, _optional_str(payload, "model_weights")),
        classes_file=_resolve(base, _optional_str(payload, "classes_file")),
        backend=_optional_str(payload, "backend"),
        conf_threshold=_number(payload, "conf_threshold", 0.2),
        nms_threshold=_number(payload, "nms_threshold", 0.4),
        class_agnostic_nms=_flag(payload, "class_agnostic_nms", True),
        top_k=top_k,
        input_size=(input_size[0], input_size[1]),
        scale_factor=_number(payload, "scale_factor", 1 / 255.0),
        mean=tuple(float(v) for v in mean),
        swap_rb=_flag(payload, "swap_rb", False),
        crop=_flag(payload, "crop", False),
    )
