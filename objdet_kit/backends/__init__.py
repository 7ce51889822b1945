"""
Inference backends for objdet_kit.

Every backend exposes `forward(blob, output_names=None) -> List[np.ndarray]`
and an `output_names` attribute. Runtimes are imported lazily so the decoding
core works without installing any of them.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Union

import numpy as np


PathLike = Union[str, Path]


class InferenceEngine(Protocol):
    # Names `forward` returns by default; may stay empty until the first call
    # for runtimes that only learn their outputs by running (TorchScript).
    output_names: List[str]

    def forward(self, blob: np.ndarray, output_names: Optional[Sequence[str]] = None) -> List[np.ndarray]:
        ...


def infer_backend_name(model_path: PathLike) -> str:
    suffix = Path(model_path).suffix.lower()
    if suffix in {".cfg", ".weights"}:
        return "darknet"
    if suffix == ".onnx":
        return "onnxruntime"
    if suffix in {".torchscript", ".ts", ".pt"}:
        return "torchscript"
    raise ValueError(f"Could not infer backend from extension '{suffix}'. Pass backend=... explicitly.")


def create_backend(
    model_config: PathLike,
    model_weights: Optional[PathLike] = None,
    *,
    backend: Optional[str] = None,
    onnx_providers: Optional[Sequence[str]] = None,
    torch_device: str = "cpu",
) -> InferenceEngine:
    """
    Construct an inference engine.

    Darknet needs both the topology (`model_config`, a .cfg) and the weights;
    single-file formats (ONNX, TorchScript) take the model as `model_config`.
    """

    chosen = (backend or infer_backend_name(model_config)).lower()

    if chosen == "darknet":
        from .darknet_backend import DarknetBackend

        if model_weights is None:
            raise ValueError("Darknet models need both a .cfg topology and a .weights file.")
        return DarknetBackend(model_config, model_weights)

    if chosen == "onnxruntime":
        from .onnxruntime_backend import OnnxRuntimeBackend, OnnxRuntimeBackendConfig

        return OnnxRuntimeBackend(model_config, OnnxRuntimeBackendConfig(providers=onnx_providers))

    if chosen == "torchscript":
        from .torchscript_backend import TorchScriptBackend, TorchScriptBackendConfig

        return TorchScriptBackend(model_config, TorchScriptBackendConfig(device=torch_device))

    raise ValueError(f"Unsupported backend: {chosen!r}")


__all__ = ["InferenceEngine", "create_backend", "infer_backend_name"]
