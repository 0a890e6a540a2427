"""
Boundary parsers: form/CLI text → typed values, plus catalog file loading.

The calculators only accept numbers and known enumerants. Everything typed by
a technician (decimal commas, stray spaces, "R-410a", "TXV") is normalised
here first.
"""
from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .diagnostics import normalize_refrigerant
from .materials import Catalog, normalize_catalog
from .numeric import is_finite


def parse_number(s: Union[str, float, int]) -> float:
    """Parse a form value; raises ValueError naming the offending text."""
    if isinstance(s, (int, float)) and not isinstance(s, bool):
        if not is_finite(s):
            raise ValueError(f"Invalid numeric value: '{s}'")
        return float(s)
    s_clean = str(s).strip().replace("\u00A0", "").replace(" ", "").replace(",", ".")
    try:
        v = float(s_clean)
    except ValueError as e:
        raise ValueError(f"Invalid numeric value: '{s}'") from e
    if not is_finite(v):
        raise ValueError(f"Invalid numeric value: '{s}'")
    return v


def parse_optional_number(s: Union[str, float, int, None]) -> Optional[float]:
    """Like parse_number, but a blank field is None."""
    if s is None or (isinstance(s, str) and not s.strip()):
        return None
    return parse_number(s)


def parse_refrigerant(s: Optional[str]) -> str:
    return normalize_refrigerant(s)


def parse_metering_device(s: Optional[str]) -> str:
    """'TXV' / ' txv ' → 'txv'; anything else → 'fixed'."""
    return "txv" if (s or "txv").strip().lower() == "txv" else "fixed"


def parse_split(s: str) -> Union[int, List[float]]:
    """'3' → 3 equal parts; '0.4, 0.35, 0.25' or '40/35/25' → ratios."""
    text = s.strip()
    if not text:
        raise ValueError("Empty split")
    if text.isdigit():
        n = int(text)
        if n <= 0:
            raise ValueError(f"Invalid split count: '{s}'")
        return n
    sep = "/" if "/" in text else ";" if ";" in text else ","
    return [parse_number(p) for p in text.split(sep) if p.strip()]


def read_json(path: Union[str, Path]) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def default_catalog_raw() -> Dict[str, Any]:
    """The sample catalog bundled with the package."""
    ref = resources.files("fieldbuddy").joinpath("data/materials.json")
    return json.loads(ref.read_text(encoding="utf-8"))


def load_catalog(path: Union[str, Path, None] = None) -> Catalog:
    """Load and normalise a catalog file; None loads the bundled catalog."""
    raw = default_catalog_raw() if path is None else read_json(path)
    catalog = normalize_catalog(raw)
    logging.getLogger(__name__).debug(
        "catalog %s loaded: %d categories", catalog.version or "?", len(catalog.categories)
    )
    return catalog


def parse_segment(s: str) -> Dict[str, Any]:
    """'elbow-90-smooth:4' → fitting plus 4 ft of run; '25' → plain 25 ft run."""
    kind, _, length = s.strip().rpartition(":")
    return {"length_ft": parse_number(length), "type": kind.strip() or None}
