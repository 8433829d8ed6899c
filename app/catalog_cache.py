"""
Two-tier catalog cache

Memory first, then the persistent store, then the network. The network is
the source of truth; every successful fetch is written through to the
persistent store. Payloads are replaced wholesale, never patched, so two
callers racing on the same key can at worst fetch twice.
"""
import json
from typing import Callable, Dict, List, Optional

import structlog

from constants import BUSINESS_SHEET_URL, BUSINESSES_KEY, PRODUCTS_KEY_PREFIX, TIME_KEY_SUFFIX
from csv_parser import parse_business_rows, parse_product_rows
from exceptions import FetchError, ValidationError
from records import (
    BusinessRecord,
    CacheEntry,
    ProductRecord,
    products_from_dict,
    products_to_dict,
)
from utils import encode_storage_key, epoch_millis


def products_key(sheet_url: str) -> str:
    return f"{PRODUCTS_KEY_PREFIX}{encode_storage_key(sheet_url)}"


class CatalogCache:
    """
    Business and product rosters with memory, persistent and network tiers.

    Args:
        store: persistent store with get/set/delete over strings
        fetcher: object with fetch_text(url) -> str raising FetchError
        business_sheet_url: published CSV of the business roster
        logger: structlog-style logger
        clock: returns the current time in epoch millis
    """

    def __init__(
        self,
        store,
        fetcher,
        business_sheet_url: str = BUSINESS_SHEET_URL,
        logger=None,
        clock: Callable[[], int] = epoch_millis,
    ):
        self.store = store
        self.fetcher = fetcher
        self.business_sheet_url = business_sheet_url
        self.logger = logger or structlog.get_logger("catalog_cache")
        self.clock = clock
        self._businesses: Optional[CacheEntry] = None
        self._products: Dict[str, CacheEntry] = {}
        self._network_fetches = 0

    # ---- persistent tier (best effort) ----

    def _store_get(self, key: str) -> Optional[str]:
        try:
            return self.store.get(key)
        except Exception as e:
            self.logger.warning("Persistent store read failed", key=key, error=str(e))
            return None

    def _store_set(self, key: str, value: str):
        try:
            self.store.set(key, value)
        except Exception as e:
            self.logger.warning("Persistent store write failed", key=key, error=str(e))

    def _hydrate_businesses(self) -> List[BusinessRecord]:
        raw = self._store_get(BUSINESSES_KEY)
        if not raw:
            return []
        try:
            businesses = [BusinessRecord.from_dict(item) for item in json.loads(raw)]
        except (ValueError, TypeError, AttributeError) as e:
            self.logger.warning("Ignoring unreadable persisted businesses", error=str(e))
            return []
        return [b for b in businesses if b.is_visible]

    def _hydrate_products(self, sheet_url: str) -> Dict[str, List[ProductRecord]]:
        raw = self._store_get(products_key(sheet_url))
        if not raw:
            return {}
        try:
            return products_from_dict(json.loads(raw))
        except (ValueError, TypeError, AttributeError) as e:
            self.logger.warning("Ignoring unreadable persisted products", sheet_url=sheet_url, error=str(e))
            return {}

    # ---- businesses ----

    def load_businesses(self) -> List[BusinessRecord]:
        """Visible businesses, from the fastest tier that has any"""
        if self._businesses is not None and self._businesses.payload:
            return self._businesses.payload

        businesses = self._hydrate_businesses()
        if businesses:
            self.logger.debug("Businesses hydrated from persistent store", count=len(businesses))
            self._businesses = CacheEntry(BUSINESSES_KEY, businesses, self.clock())
            return businesses

        return self.refresh_businesses()

    def refresh_businesses(self) -> List[BusinessRecord]:
        """Fetch the roster from the network and write it through"""
        self._network_fetches += 1
        csv_text = self.fetcher.fetch_text(self.business_sheet_url)
        if not csv_text or not csv_text.strip():
            raise FetchError("Empty response from server")

        businesses = parse_business_rows(csv_text)
        self.logger.info("Parsed businesses", count=len(businesses))
        if not businesses:
            raise FetchError("No valid businesses found in CSV data")

        fetched_at = self.clock()
        self._store_set(BUSINESSES_KEY, json.dumps([b.to_dict() for b in businesses]))
        self._businesses = CacheEntry(BUSINESSES_KEY, businesses, fetched_at)
        return businesses

    # ---- products ----

    def load_products(self, sheet_url: str) -> Dict[str, List[ProductRecord]]:
        """Products of one sheet grouped by category"""
        if not sheet_url or not sheet_url.strip():
            raise ValidationError("Product sheet URL is required")

        entry = self._products.get(sheet_url)
        if entry is not None and entry.payload:
            return entry.payload

        products = self._hydrate_products(sheet_url)
        if products:
            self.logger.debug("Products hydrated from persistent store", sheet_url=sheet_url)
            self._products[sheet_url] = CacheEntry(products_key(sheet_url), products, self.clock())
            return products

        return self.refresh_products(sheet_url)

    def refresh_products(self, sheet_url: str) -> Dict[str, List[ProductRecord]]:
        """Fetch one product sheet from the network and write it through"""
        if not sheet_url or not sheet_url.strip():
            raise ValidationError("Product sheet URL is required")

        self._network_fetches += 1
        csv_text = self.fetcher.fetch_text(sheet_url)
        if not csv_text or not csv_text.strip():
            raise FetchError("Empty response from server")

        products = parse_product_rows(csv_text)
        count = sum(len(items) for items in products.values())
        self.logger.info("Parsed products", sheet_url=sheet_url, count=count, categories=len(products))
        if not products:
            raise FetchError("No valid products found in CSV data")

        fetched_at = self.clock()
        key = products_key(sheet_url)
        self._store_set(key, json.dumps(products_to_dict(products)))
        self._store_set(f"{key}{TIME_KEY_SUFFIX}", str(fetched_at))
        self._products[sheet_url] = CacheEntry(key, products, fetched_at)
        return products

    # ---- inspection ----

    def business_entry(self) -> Optional[CacheEntry]:
        return self._businesses

    def product_entry(self, sheet_url: str) -> Optional[CacheEntry]:
        return self._products.get(sheet_url)

    def invalidate(self, sheet_url: Optional[str] = None):
        """Drop memory entries; the persistent store is left alone"""
        if sheet_url is None:
            self._businesses = None
            self._products.clear()
            self.logger.info("Catalog memory cache cleared")
        else:
            self._products.pop(sheet_url, None)

    def stats(self) -> Dict:
        return {
            "businesses": len(self._businesses.payload) if self._businesses else 0,
            "businesses_fetched_at": self._businesses.fetched_at if self._businesses else None,
            "product_sheets": len(self._products),
            "network_fetches": self._network_fetches,
        }
