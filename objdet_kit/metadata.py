from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Union

LOG = logging.getLogger("objdet.metadata")


def load_class_names(classes_path: Union[str, Path]) -> List[str]:
    """
    Load class names from a newline-delimited text file such as `coco.names`.

    Line N (zero-based) is the name of class id N. Only line terminators are
    stripped, so a name may keep inner or trailing spaces. A missing file
    gives an empty table; boxes then render without a resolvable name.
    """

    path = Path(classes_path)
    if not path.exists():
        LOG.warning("class names file not found: %s (continuing with an empty table)", path)
        return []

    with open(path, "r", encoding="utf-8") as f:
        names = [raw.rstrip("\r\n") for raw in f]

    LOG.debug("loaded %d class names from %s", len(names), path)
    return names
