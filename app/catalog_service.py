"""
Catalog query layer

Sits on top of CatalogCache and decides when cached data is stale enough
to refetch. The cache itself never expires anything.
"""
import logging
from typing import Dict, List, Optional

from catalog_cache import CatalogCache
from exceptions import FetchError
from records import BusinessRecord, ProductRecord

logger = logging.getLogger("main")


class CatalogService:
    def __init__(self, cache: CatalogCache, stale_time: int = 1800):
        self.cache = cache
        self.stale_time = stale_time

    def _is_stale(self, entry) -> bool:
        if entry is None:
            return False
        return entry.age_seconds(self.cache.clock()) >= self.stale_time

    def get_businesses(self) -> List[BusinessRecord]:
        entry = self.cache.business_entry()
        if self._is_stale(entry):
            try:
                return self.cache.refresh_businesses()
            except FetchError as e:
                logger.warning(f"Serving stale businesses after failed refetch: {e.message}")
                return entry.payload
        return self.cache.load_businesses()

    def get_business(self, business_id: str) -> Optional[BusinessRecord]:
        for business in self.get_businesses():
            if business.id == business_id:
                return business
        return None

    def get_products(self, business_id: str) -> Optional[Dict[str, List[ProductRecord]]]:
        """Products of a business, or None when the business is unknown"""
        business = self.get_business(business_id)
        if business is None:
            return None

        entry = self.cache.product_entry(business.product_sheet_url)
        if self._is_stale(entry):
            try:
                return self.cache.refresh_products(business.product_sheet_url)
            except FetchError as e:
                logger.warning(f"Serving stale products for {business_id} after failed refetch: {e.message}")
                return entry.payload
        return self.cache.load_products(business.product_sheet_url)

    def refresh(self) -> List[BusinessRecord]:
        """Refetch the roster regardless of age"""
        return self.cache.refresh_businesses()
