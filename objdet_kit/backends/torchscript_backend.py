from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np


PathLike = Union[str, Path]


@dataclass(frozen=True)
class TorchScriptBackendConfig:
    """
    Configuration for TorchScript inference.

    - device: "cpu" or "cuda" (if available)
    - half: cast input to float16 (only if the model expects it)
    """

    device: str = "cpu"
    half: bool = False


class TorchScriptBackend:
    """
    TorchScript backend using `torch.jit.load`.

    Models returning a tuple/list are treated as one output per element;
    outputs are named "output0", "output1", ... in that order. TorchScript
    does not expose the output count without running the model, so
    `output_names` is empty until the first `forward` call.
    """

    def __init__(self, model_path: PathLike, cfg: TorchScriptBackendConfig = TorchScriptBackendConfig()):
        try:
            import torch  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError("torch is required for the TorchScript backend. Install with `pip install torch`.") from e

        self._torch = torch
        self.model_path = Path(model_path)
        if not self.model_path.exists():
            raise FileNotFoundError(str(self.model_path))

        self.device = torch.device(cfg.device)
        self.half = cfg.half

        try:
            model = torch.jit.load(str(self.model_path), map_location=self.device)
        except Exception as e:
            raise RuntimeError(f"Failed to load TorchScript model: {self.model_path}") from e
        model.eval()
        self.model = model
        self.output_names: List[str] = []

    def forward(self, blob: np.ndarray, output_names: Optional[Sequence[str]] = None) -> List[np.ndarray]:
        torch = self._torch
        x = torch.as_tensor(blob, device=self.device)
        x = x.half() if self.half else x.float()
        x = x.contiguous()

        with torch.no_grad():
            y = self.model(x)

        ys = list(y) if isinstance(y, (tuple, list)) else [y]
        self.output_names = [f"output{i}" for i in range(len(ys))]
        if output_names is not None:
            ys = [ys[self.output_names.index(name)] for name in output_names]

        return [t.detach().to("cpu").float().numpy() for t in ys]
