"""
Materials catalog helpers: normalisation, search, selection and takeoff text.

A selection is an explicit mapping MaterialKey → quantity. Functions return a
new mapping and never mutate their inputs; the caller (UI state, report)
owns the result.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .numeric import is_finite, round_half_up


@dataclass(frozen=True, order=True)
class MaterialKey:
    """Catalog identity of an item: (category, item name)."""
    category: str
    name: str

    def __str__(self) -> str:
        return f"{self.name} ({self.category})"


@dataclass(frozen=True)
class CatalogItem:
    name: str
    spec: str = ""
    sku: str = ""
    price: Optional[float] = None


@dataclass(frozen=True)
class Category:
    name: str
    items: Tuple[CatalogItem, ...] = ()


@dataclass(frozen=True)
class Catalog:
    version: str = ""
    categories: Tuple[Category, ...] = ()


@dataclass(frozen=True)
class CatalogRow:
    key: MaterialKey
    category: str
    name: str
    spec: str
    sku: str
    price: Optional[float]


@dataclass(frozen=True)
class CostSummary:
    lines: List[str] = field(default_factory=list)
    subtotal: float = 0.0
    missing_prices: List[MaterialKey] = field(default_factory=list)


Selection = Dict[MaterialKey, int]


def _to_str(v: Any) -> str:
    return "" if v is None else str(v)


def _to_num_or_none(v: Any) -> Optional[float]:
    if isinstance(v, bool) or v is None:
        return None
    try:
        n = float(v)
    except (TypeError, ValueError):
        return None
    return n if is_finite(n) else None


def _clamp_qty(q: Any) -> int:
    n = _to_num_or_none(q)
    x = round_half_up(n) if n is not None else 0
    return max(0, x)


def normalize_catalog(raw: Optional[Mapping[str, Any]]) -> Catalog:
    """Coerce a raw catalog document into a Catalog.

    Categories without a name, items without a name and categories left
    with no items are dropped. A non-numeric price becomes None.
    """
    raw = raw or {}
    cats = raw.get("categories")
    cats = cats if isinstance(cats, list) else []
    out: List[Category] = []
    for c in cats:
        if not isinstance(c, Mapping):
            continue
        name = _to_str(c.get("name"))
        if not name:
            continue
        items_raw = c.get("items")
        items_raw = items_raw if isinstance(items_raw, list) else []
        items = tuple(
            CatalogItem(
                name=_to_str(i.get("name")),
                spec=_to_str(i.get("spec")),
                sku=_to_str(i.get("sku")),
                price=_to_num_or_none(i.get("price")),
            )
            for i in items_raw
            if isinstance(i, Mapping) and _to_str(i.get("name"))
        )
        if items:
            out.append(Category(name=name, items=items))
    return Catalog(version=_to_str(raw.get("version")), categories=tuple(out))


def search_catalog(catalog: Catalog, query: Optional[str]) -> Catalog:
    """Case-insensitive substring search over item name, spec and SKU."""
    q = _to_str(query).strip().lower()
    if not q:
        return catalog
    cats = []
    for c in catalog.categories:
        items = tuple(it for it in c.items if q in f"{it.name} {it.spec} {it.sku}".lower())
        if items:
            cats.append(Category(name=c.name, items=items))
    return Catalog(version=catalog.version, categories=tuple(cats))


def flatten(catalog: Catalog) -> List[CatalogRow]:
    return [
        CatalogRow(
            key=MaterialKey(c.name, it.name),
            category=c.name,
            name=it.name,
            spec=it.spec,
            sku=it.sku,
            price=it.price,
        )
        for c in catalog.categories
        for it in c.items
    ]


def set_quantity(selection: Mapping[MaterialKey, int], key: MaterialKey, qty: Any) -> Selection:
    """Copy of the selection with key set to qty; a zero quantity removes the key."""
    out = dict(selection)
    n = _clamp_qty(qty)
    if n:
        out[key] = n
    else:
        out.pop(key, None)
    return out


def merge_selections(a: Optional[Mapping[MaterialKey, int]] = None, b: Optional[Mapping[MaterialKey, int]] = None) -> Selection:
    """Sum quantities of two selections (b added onto a)."""
    out = dict(a or {})
    for key, qty in (b or {}).items():
        n = _clamp_qty(qty)
        if not n:
            continue
        total = _clamp_qty(out.get(key, 0) + n)
        if total:
            out[key] = total
        else:
            out.pop(key, None)
    return out


def _positive_entries(selection: Mapping[MaterialKey, int]) -> List[Tuple[MaterialKey, int]]:
    return sorted((k, q) for k, q in selection.items() if q and q > 0)


def format_selected_for_text(selection: Mapping[MaterialKey, int], now: Optional[datetime] = None) -> str:
    """Plain-text material takeoff sorted by category, then item name."""
    entries = _positive_entries(selection)
    if not entries:
        return "Nothing selected."
    now = now or datetime.now()
    lines = [
        "Field Buddy Pro — Material Takeoff",
        f"Date: {now.strftime('%Y-%m-%d %H:%M')}",
        "",
    ]
    for key, qty in entries:
        lines.append(f"{qty} × {key.name}  —  {key.category}")
    return "\n".join(lines)


def extend_with_pricing(catalog: Catalog, price_map: Optional[Mapping[MaterialKey, Any]] = None) -> Catalog:
    """New catalog with prices from price_map applied; unknown keys keep their price."""
    price_map = price_map or {}
    cats = []
    for c in catalog.categories:
        items = []
        for it in c.items:
            p = _to_num_or_none(price_map.get(MaterialKey(c.name, it.name)))
            items.append(replace(it, price=p if p is not None else it.price))
        cats.append(Category(name=c.name, items=tuple(items)))
    return Catalog(version=catalog.version, categories=tuple(cats))


def summarize_selection_cost(
    selection: Mapping[MaterialKey, int],
    price_map: Optional[Mapping[MaterialKey, Any]] = None,
) -> CostSummary:
    """Priced takeoff lines, subtotal and the keys with no price."""
    price_map = price_map or {}
    lines: List[str] = []
    missing: List[MaterialKey] = []
    subtotal = 0.0
    for key, qty in _positive_entries(selection):
        price = _to_num_or_none(price_map.get(key))
        if price is None:
            missing.append(key)
            lines.append(f"{qty} × {key.name} — {key.category} : $N/A")
            continue
        line_total = round(qty * price, 2)
        subtotal += line_total
        lines.append(f"{qty} × {key.name} — {key.category} : ${price:.2f}  →  ${line_total:.2f}")
    return CostSummary(lines=lines, subtotal=round(subtotal, 2), missing_prices=missing)


def price_map_from_catalog(catalog: Catalog) -> Dict[MaterialKey, float]:
    return {r.key: r.price for r in flatten(catalog) if r.price is not None}


def sort_categories(catalog: Catalog, preferred_order: Sequence[str] = ()) -> Catalog:
    """Preferred category names first (in that order), the rest alphabetically."""
    order = {n: i for i, n in enumerate(preferred_order)}
    big = len(order)
    cats = sorted(catalog.categories, key=lambda c: (order.get(c.name, big), c.name))
    return Catalog(version=catalog.version, categories=tuple(cats))


def sort_items_in_category(catalog: Catalog, key: Optional[Callable[[CatalogItem], Any]] = None) -> Catalog:
    key = key or (lambda it: it.name)
    cats = tuple(Category(name=c.name, items=tuple(sorted(c.items, key=key))) for c in catalog.categories)
    return Catalog(version=catalog.version, categories=cats)
