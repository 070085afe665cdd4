from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from services import catalog_data
from services.catalog_data import KitEntry

logger = logging.getLogger(__name__)


class ItemNotFoundError(LookupError):
    def __init__(self, query: str):
        super().__init__(f"No item {query} found.")
        self.query = query


def _is_numeric_id(raw: str) -> bool:
    try:
        return str(int(raw)) == raw
    except ValueError:
        return False


def _match_distance(query: str, candidate: str) -> Optional[int]:
    """Length difference when one string contains the other, else None."""
    if len(candidate) > len(query):
        return len(candidate) - len(query) if query in candidate else None
    return len(query) - len(candidate) if candidate in query else None


class ItemCatalog:
    """Canonical item names mapped to identifiers, bucketed by first character.

    Built once at startup and read-only afterwards. Bucket contents are kept
    sorted so approximate matching always scans candidates in the same order.
    """

    def __init__(
        self,
        items: Mapping[str, object],
        kits: Optional[Mapping[str, List[KitEntry]]] = None,
    ):
        table: Dict[str, str] = {}
        for name, identifier in items.items():
            key = " ".join(str(name or "").strip().lower().split())
            if not key:
                continue
            table[key] = str(identifier).strip()
        self._items = MappingProxyType(table)

        buckets: Dict[str, List[str]] = {}
        for name in table:
            buckets.setdefault(name[0], []).append(name)
        self._buckets: Mapping[str, Tuple[str, ...]] = MappingProxyType(
            {first: tuple(sorted(names)) for first, names in buckets.items()}
        )

        self._kits = MappingProxyType({str(k).strip().lower(): list(v) for k, v in (kits or {}).items()})

    @classmethod
    def from_config(cls, config: Optional[Dict[str, object]] = None) -> "ItemCatalog":
        cfg = config or {}
        catalog_cfg = cfg.get("catalog", {}) if isinstance(cfg.get("catalog"), dict) else {}

        items: Dict[str, object] = dict(catalog_data.ITEMS)
        extra_items = catalog_cfg.get("items", {})
        if isinstance(extra_items, dict):
            items.update(extra_items)

        kits: Dict[str, List[KitEntry]] = {k: list(v) for k, v in catalog_data.KITS.items()}
        extra_kits = catalog_cfg.get("kits", {})
        if isinstance(extra_kits, dict):
            for label, entries in extra_kits.items():
                if not isinstance(entries, list):
                    logger.warning("Ignoring kit %r: entries must be a list", label)
                    continue
                kits[str(label)] = [
                    (str(e[0]), int(e[1])) if isinstance(e, (list, tuple)) and len(e) == 2 else str(e)
                    for e in entries
                ]

        catalog = cls(items, kits)
        logger.debug("Loaded catalog with %d items and %d kits", len(catalog), len(kits))
        return catalog

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._items

    @property
    def items(self) -> Mapping[str, str]:
        return self._items

    @property
    def kits(self) -> Mapping[str, List[KitEntry]]:
        return self._kits

    def bucket(self, first: str) -> Tuple[str, ...]:
        return self._buckets.get(first, ())

    def kit_names(self) -> List[str]:
        return list(self._kits.keys())

    def get_kit(self, label: str) -> Optional[List[KitEntry]]:
        return self._kits.get(str(label or "").strip().lower())

    def resolve_key(self, query: str) -> str:
        """Find the canonical name for an approximate, lowercase query.

        Exact names win outright. Otherwise every name in the query's bucket
        that contains the query (or is contained by it) is a candidate and the
        smallest length difference wins; ties keep the alphabetically first.
        """
        key = str(query or "").lower()
        if not key:
            raise ItemNotFoundError(key)

        candidates = self._buckets.get(key[0])
        if not candidates:
            raise ItemNotFoundError(key)
        if key in self._items:
            return key

        best_key: Optional[str] = None
        best_diff: Optional[int] = None
        for candidate in candidates:
            diff = _match_distance(key, candidate)
            if diff is None:
                continue
            if best_diff is None or diff < best_diff:
                best_key, best_diff = candidate, diff

        if best_key is None:
            raise ItemNotFoundError(key)
        return best_key

    def resolve(self, raw: str) -> str:
        """Resolve user input to an item identifier.

        Integers pass through untouched; anything else goes through
        :meth:`resolve_key`. Raises :class:`ItemNotFoundError` on a miss.
        """
        text = str(raw or "")
        if _is_numeric_id(text):
            return text
        return self._items[self.resolve_key(text)]
