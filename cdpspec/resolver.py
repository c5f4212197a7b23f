from typing import Iterable, List, Optional, Sequence

from .models import CatalogRecord
from .normalize import contains_either_way, normalize


def _record_fingerprints(record: CatalogRecord, include_specs: bool) -> List[str]:
    prints = [normalize(record.label)]
    if include_specs:
        prints.append(normalize(record.dac))
        prints.append(normalize(record.laser))
    return prints


def filter_records(
    view: Sequence[CatalogRecord],
    query: Optional[str],
    include_specs: bool = False,
) -> List[CatalogRecord]:
    """Keep the records whose label contains the query or is contained in it.

    A blank query (or one with no alphanumerics at all) returns the view
    unchanged.  ``include_specs`` widens the test to the dac/laser text.
    """
    if not query or not query.strip():
        return list(view)
    term = normalize(query)
    if not term:
        return list(view)
    return [
        rec for rec in view
        if any(contains_either_way(fp, term) for fp in _record_fingerprints(rec, include_specs))
    ]


def has_match(records: Iterable[CatalogRecord], label: Optional[str]) -> bool:
    """Whether any record label matches ``label`` in either containment direction."""
    term = normalize(label)
    if not term:
        return False
    return any(contains_either_way(normalize(rec.label), term) for rec in records)
