"""Cache read → optimistic apply → background refresh → conditional re-apply."""
import asyncio
import logging
from enum import Enum
from typing import Callable, Optional

from country_pricing.cache import CacheStore
from country_pricing.catalog import PriceCatalog, build_catalog
from country_pricing.config import Config, configure_logging
from country_pricing.document import HtmlDocument, wait_for_elements
from country_pricing.locator import AllProvidersFailedError, Locator, default_providers
from country_pricing.models import AppliedPricingState, CachedCountry, CountryRecord
from country_pricing.patcher import PatchResult, TextPatcher
from country_pricing.storage import KeyValueStore

log = logging.getLogger(__name__)


class PricingState(str, Enum):
    IDLE = "idle"
    CACHE_CHECKED = "cache_checked"
    OPTIMISTICALLY_APPLIED = "optimistically_applied"
    REFRESH_PENDING = "refresh_pending"
    SETTLED = "settled"


class PricingSystem:
    def __init__(
        self,
        document: HtmlDocument,
        cache: CacheStore,
        locator: Locator,
        catalog: Optional[PriceCatalog] = None,
        patcher: Optional[TextPatcher] = None,
        config: Optional[Config] = None,
    ):
        self.document = document
        self.cache = cache
        self.locator = locator
        self.catalog = catalog or build_catalog()
        self.patcher = patcher or TextPatcher(document)
        self.config = config or Config()
        self.state = PricingState.IDLE
        self.applied_region: Optional[str] = None
        self.settled_region: Optional[str] = None

    # ── Applying ─────────────────────────────────────────

    def apply_country_pricing(self, record: CountryRecord) -> Optional[PatchResult]:
        """Patch the page for the record's region. Returns None when nothing was patched."""
        region = self.catalog.region_for(record.country_code)
        log.info("Applying country-specific pricing: %s (%s)", record.country_name, record.country_code)

        if self.applied_region is not None and self.applied_region != region:
            # prior patch removed the default literals; start over from the page as rendered
            self.document.restore_baseline()
            self.applied_region = None
            self.cache.clear_applied()

        if self.catalog.is_default(region):
            log.info("Other country - keeping default %s pricing", self.catalog.default.currency)
            return None

        table = self.catalog.lookup(region)
        result = self.patcher.apply_table(table)
        self.applied_region = region
        self.cache.write_applied(AppliedPricingState(region, table.currency))
        return result

    # ── Initialization ───────────────────────────────────

    async def _apply_cached(self, cached: Optional[CachedCountry]):
        if cached is None:
            return
        log.info("Using cached country data: %s", cached.record.country_code)
        self.apply_country_pricing(cached.record)
        self.state = PricingState.OPTIMISTICALLY_APPLIED

    async def _refresh(self, cached: Optional[CachedCountry], optimistic: asyncio.Task) -> Optional[str]:
        self.state = PricingState.REFRESH_PENDING
        try:
            fresh = await self.locator.detect()
        except AllProvidersFailedError as e:
            await optimistic
            if cached is None:
                log.error("Country detection failed, keeping default pricing (%d providers tried)", len(e.failures))
            else:
                log.warning("Country detection failed, keeping cached %s pricing", cached.record.country_code)
            return self.applied_region

        self.cache.write(fresh)
        # the page may only change once the optimistic patch is done
        await optimistic
        fresh_region = self.catalog.region_for(fresh.country_code)
        if self.applied_region is None or fresh_region != self.applied_region:
            self.apply_country_pricing(fresh)
        return self.applied_region

    async def init(self) -> str:
        """Run one initialization cycle and return the region the page settled on."""
        log.info("Initializing country-based pricing system")
        self.state = PricingState.IDLE
        try:
            cached = self.cache.read()
            self.state = PricingState.CACHE_CHECKED
            optimistic = asyncio.ensure_future(self._apply_cached(cached))
            refresh = asyncio.ensure_future(self._refresh(cached, optimistic))
            await asyncio.gather(optimistic, refresh)
        except Exception as e:
            log.exception("Error during initialization: %s", e)
        self.state = PricingState.SETTLED
        self.settled_region = self.applied_region or self.catalog.default.region
        return self.settled_region

    async def start(self) -> str:
        """Wait for the pricing markup to render, then initialize."""
        found = await wait_for_elements(
            self.document, self.config.READY_SELECTOR, timeout=self.config.READY_TIMEOUT
        )
        if not found:
            log.warning("No %r elements rendered after %.1fs", self.config.READY_SELECTOR, self.config.READY_TIMEOUT)
        if self.config.INIT_DELAY:
            await asyncio.sleep(self.config.INIT_DELAY)
        return await self.init()

    # ── Reset ────────────────────────────────────────────

    def reload(self):
        """Return the page to its unpatched markup and the machine to IDLE."""
        self.document.restore_baseline()
        self.applied_region = None
        self.settled_region = None
        self.state = PricingState.IDLE


def create_pricing_system(
    markup: str,
    config: Optional[Config] = None,
    locator: Optional[Locator] = None,
    clock: Optional[Callable[[], float]] = None,
) -> PricingSystem:
    config = config or Config.from_env()
    config.validate()
    configure_logging(config.LOG_LEVEL)
    store = KeyValueStore(config.REDIS_URL, config.KEY_PREFIX)
    cache = CacheStore(store, max_age=config.cache_seconds)
    if clock is not None:
        cache.clock = clock
    locator = locator or Locator(default_providers(config), timeout=config.API_TIMEOUT)
    return PricingSystem(HtmlDocument(markup), cache, locator, config=config)
