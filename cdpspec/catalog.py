"""Catalog merge engine.

Authoritative records (from the store) and generated records (from AI
lookups in this session) are combined into one view: authoritative first,
deduplicated by normalized label with the first record winning, then
stably sorted by raw label.
"""

from typing import Iterable, List, Optional, Sequence

from .models import CatalogRecord, Origin
from .normalize import normalize


def merge_catalog(
    authoritative: Iterable[CatalogRecord],
    generated: Iterable[CatalogRecord],
    dedupe: bool = True,
) -> List[CatalogRecord]:
    combined = list(authoritative) + list(generated)
    if dedupe:
        seen = set()
        unique: List[CatalogRecord] = []
        for rec in combined:
            key = normalize(rec.label)
            if key in seen:
                continue
            seen.add(key)
            unique.append(rec)
        combined = unique
    # sorted() is stable, so equal labels keep their concatenation order
    return sorted(combined, key=lambda r: r.label)


class CatalogState:
    """Owns both source collections and a cached merged view.

    Every mutation drops the cache, so the next read of ``view`` always
    reflects the latest inputs.
    """

    def __init__(self, dedupe: bool = True):
        self.dedupe = dedupe
        self._authoritative: List[CatalogRecord] = []
        self._generated: List[CatalogRecord] = []
        self._next_sequence = 0
        self._view: Optional[List[CatalogRecord]] = None

    @property
    def authoritative(self) -> Sequence[CatalogRecord]:
        return tuple(self._authoritative)

    @property
    def generated(self) -> Sequence[CatalogRecord]:
        return tuple(self._generated)

    @property
    def view(self) -> List[CatalogRecord]:
        if self._view is None:
            self._view = merge_catalog(self._authoritative, self._generated, self.dedupe)
        return list(self._view)

    def replace_authoritative(self, records: Iterable[CatalogRecord]) -> None:
        """Swap in a freshly loaded catalog wholesale."""
        self._authoritative = list(records)
        self._view = None

    def add_generated(self, label: str, dac: Optional[str], laser: Optional[str]) -> CatalogRecord:
        """Prepend a session-only record built from an AI specification lookup."""
        record = CatalogRecord(
            label=label,
            dac=dac,
            laser=laser,
            origin=Origin.GENERATED,
            sequence=self._next_sequence,
        )
        self._next_sequence += 1
        self._generated.insert(0, record)
        self._view = None
        return record
