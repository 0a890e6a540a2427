from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..materials import Catalog, Selection


@dataclass
class UIState:
    tech: str = ""
    store_path: Optional[str] = None
    catalog: Optional[Catalog] = None
    selection: Selection = field(default_factory=dict)
    plan: Dict[str, Any] = field(default_factory=dict)
    diagnosis: Dict[str, Any] = field(default_factory=dict)
