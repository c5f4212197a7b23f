"""catalog_source.py — authoritative catalog reader.

The whole catalog is pulled into memory with windowed reads: pages of
``page_size`` rows ordered by label, starting at offset 0, one request at a
time.  A short (or empty) page marks the end of the data.  Any page failure
aborts the load and nothing read so far is returned.
"""

import logging
import time
from typing import Any, Dict, List, Optional, Sequence

from supabase import create_client

from .config import Settings
from .errors import CatalogConnectionError
from .models import CatalogRecord, Origin
from .seed_catalog import SEED_ROWS

logger = logging.getLogger("cdpspec-api")

PAGE_SIZE = 1000


class CatalogSource:
    """Paginated reader.  Subclasses supply ``fetch_page``."""

    def __init__(self, label_column: str = "model", page_size: int = PAGE_SIZE):
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.label_column = label_column
        self.page_size = page_size

    def fetch_page(self, offset: int, limit: int) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def ensure_ready(self) -> None:
        """Raise CatalogConnectionError before any page when the store is unusable."""

    def load_all(self) -> List[CatalogRecord]:
        self.ensure_ready()
        rows: List[Dict[str, Any]] = []
        offset = 0
        pages = 0
        t0 = time.time()
        while True:
            try:
                page = self.fetch_page(offset, self.page_size)
            except CatalogConnectionError:
                raise
            except Exception as exc:
                logger.warning(f"Catalog page at offset {offset} failed: {exc}")
                raise CatalogConnectionError(f"catalog page at offset {offset} failed: {exc}") from exc
            pages += 1
            if not page:
                break
            rows.extend(page)
            if len(page) < self.page_size:
                break
            offset += self.page_size
        records = self.to_records(rows)
        logger.info(
            f"Loaded {len(records)} catalog records in {pages} page(s)",
            extra={"duration_ms": int((time.time() - t0) * 1000)},
        )
        return records

    def to_records(self, rows: Sequence[Dict[str, Any]]) -> List[CatalogRecord]:
        out: List[CatalogRecord] = []
        for r in rows:
            label = (r.get(self.label_column) or "").strip()
            if not label:
                logger.warning(f"Skipping catalog row without a label: {r.get('id')!r}")
                continue
            rid = r.get("id")
            out.append(
                CatalogRecord(
                    label=label,
                    dac=r.get("dac"),
                    laser=r.get("laser"),
                    origin=Origin.AUTHORITATIVE,
                    identity=str(rid) if rid is not None else None,
                )
            )
        return out


class SupabaseCatalogSource(CatalogSource):
    """Reads the catalog table through a supabase-py client."""

    def __init__(self, client: Optional[Any], table: str = "cdp_models", **kwargs):
        super().__init__(**kwargs)
        self.client = client
        self.table = table

    def ensure_ready(self) -> None:
        if self.client is None:
            raise CatalogConnectionError("catalog store is not configured")

    def fetch_page(self, offset: int, limit: int) -> List[Dict[str, Any]]:
        res = (
            self.client.table(self.table)
            .select("*")
            .order(self.label_column, desc=False)
            .range(offset, offset + limit - 1)
            .execute()
        )
        return list(res.data or [])


class MemoryCatalogSource(CatalogSource):
    """In-process rows, paginated the same way as the remote table."""

    def __init__(self, rows: Optional[Sequence[Dict[str, Any]]] = None, **kwargs):
        super().__init__(**kwargs)
        base = SEED_ROWS if rows is None else rows
        self.rows = sorted(base, key=lambda r: r.get(self.label_column) or "")

    def fetch_page(self, offset: int, limit: int) -> List[Dict[str, Any]]:
        return [dict(r) for r in self.rows[offset:offset + limit]]


def build_catalog_source(settings: Settings) -> CatalogSource:
    """Pick the catalog backend named by the settings."""
    common = {"label_column": settings.catalog_label_column, "page_size": settings.catalog_page_size}
    if settings.catalog_backend == "memory":
        return MemoryCatalogSource(**common)
    if settings.catalog_backend != "supabase":
        raise ValueError(f"unknown catalog backend: {settings.catalog_backend}")
    client = None
    if settings.supabase_configured:
        try:
            client = create_client(settings.supabase_url, settings.supabase_key)
        except Exception as exc:
            logger.error(f"Supabase client could not be created: {exc}")
    else:
        logger.warning("SUPABASE_URL / SUPABASE_ANON_KEY not set; catalog loads will fail")
    return SupabaseCatalogSource(client, table=settings.catalog_table, **common)
