"""Manual control surface for operators and tests."""
import logging
from typing import Callable, Optional

from country_pricing.models import CountryRecord
from country_pricing.orchestrator import PricingSystem
from country_pricing.patcher import PatchResult

log = logging.getLogger(__name__)


class CountryPricing:
    def __init__(self, system: PricingSystem, reload: Optional[Callable[[], None]] = None):
        self.system = system
        self._reload = reload or system.reload

    def force_region(self, country_code: str, country_name: str = "") -> Optional[PatchResult]:
        """Apply a country's pricing without asking any provider."""
        record = CountryRecord(country_code, country_name, "manual")
        log.info("Forcing pricing for %s", record.country_code)
        self.system.cache.write(record)
        return self.system.apply_country_pricing(record)

    def force_australia(self) -> Optional[PatchResult]:
        return self.force_region("AU", "Australia")

    def force_bangladesh(self) -> Optional[PatchResult]:
        return self.force_region("BD", "Bangladesh")

    def clear_cache(self):
        self.system.cache.clear()

    def get_info(self) -> dict:
        cache = self.system.cache
        cached = cache.read()
        applied = cache.read_applied()
        captured_at = cache.captured_at()
        default = self.system.catalog.default
        return {
            "country": cached.record.to_dict() if cached else None,
            "region": applied.region if applied else default.region,
            "currency": applied.currency if applied else default.currency,
            "cache_age": cached_age(cache.clock(), captured_at),
        }

    def refresh(self):
        """Drop all cached state and reload the page with default pricing."""
        log.info("Manual refresh requested")
        self.system.cache.clear()
        self._reload()


def cached_age(now: float, captured_at: Optional[int]) -> Optional[float]:
    if captured_at is None:
        return None
    return now - captured_at / 1000
