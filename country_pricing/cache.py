"""Best-effort country cache with a fixed freshness window.

Nothing in here raises: storage and parse failures are logged and read back
as "nothing cached", so pricing never waits on the cache.
"""
import json
import logging
import time
from typing import Callable, Optional

from country_pricing.models import AppliedPricingState, CachedCountry, CountryRecord
from country_pricing.storage import KeyValueStore

log = logging.getLogger(__name__)

COUNTRY_KEY = "userCountryData"
TIMESTAMP_KEY = "userCountryTimestamp"
REGION_KEY = "appliedPricingRegion"
CURRENCY_KEY = "appliedPricingCurrency"

ALL_KEYS = (COUNTRY_KEY, TIMESTAMP_KEY, REGION_KEY, CURRENCY_KEY)

DAY_SECONDS = 24 * 60 * 60


class CacheStore:
    def __init__(
        self,
        store: KeyValueStore,
        max_age: float = DAY_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.max_age = max_age
        self.clock = clock

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def read(self) -> Optional[CachedCountry]:
        """Return the cached country, or None if missing, corrupt or stale."""
        try:
            payload = self.store.get(COUNTRY_KEY)
            stamp = self.store.get(TIMESTAMP_KEY)
            if not payload or not stamp:
                return None
            captured_at = int(stamp)
            age_ms = self._now_ms() - captured_at
            if age_ms >= self.max_age * 1000:
                log.debug("Cached country is stale (%.1fh old)", age_ms / 3_600_000)
                return None
            data = json.loads(payload)
            if not isinstance(data, dict):
                raise ValueError("country payload is not an object")
            return CachedCountry(CountryRecord.from_dict(data), captured_at)
        except Exception as e:
            log.error("Error reading country cache: %s", e)
            return None

    def write(self, record: CountryRecord):
        try:
            self.store.set(COUNTRY_KEY, json.dumps(record.to_dict()))
            self.store.set(TIMESTAMP_KEY, str(self._now_ms()))
            log.info("Country data cached successfully: %s (%s)", record.country_code, record.source)
        except Exception as e:
            log.error("Error caching country data: %s", e)

    def captured_at(self) -> Optional[int]:
        """Raw capture timestamp in epoch ms, regardless of freshness."""
        try:
            stamp = self.store.get(TIMESTAMP_KEY)
            return int(stamp) if stamp else None
        except Exception as e:
            log.error("Error reading cache timestamp: %s", e)
            return None

    def read_applied(self) -> Optional[AppliedPricingState]:
        try:
            region = self.store.get(REGION_KEY)
            if not region:
                return None
            return AppliedPricingState(region, self.store.get(CURRENCY_KEY) or "")
        except Exception as e:
            log.error("Error reading applied pricing: %s", e)
            return None

    def write_applied(self, state: AppliedPricingState):
        try:
            self.store.set(REGION_KEY, state.region)
            self.store.set(CURRENCY_KEY, state.currency)
        except Exception as e:
            log.error("Error storing pricing info: %s", e)

    def clear_applied(self):
        try:
            self.store.delete(REGION_KEY, CURRENCY_KEY)
        except Exception as e:
            log.error("Error clearing pricing info: %s", e)

    def clear(self):
        try:
            self.store.delete(*ALL_KEYS)
            log.info("Cache cleared successfully")
        except Exception as e:
            log.error("Error clearing cache: %s", e)
