from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml


def load_options(path: str | Path | None) -> Dict[str, Any]:
    """Load import options from a YAML (or JSON) mapping. A missing path gives no options."""
    if path is None:
        return {}
    path = Path(path)
    with path.open("r", encoding="utf-8") as fh:
        payload = yaml.safe_load(fh) or {}
    if not isinstance(payload, dict):
        raise ValueError(f"Import options in {path} must be a mapping, got {type(payload).__name__}")
    return payload
