"""Tests for the manual control surface."""
import pytest

from country_pricing.cache import CacheStore
from country_pricing.controls import CountryPricing, cached_age
from country_pricing.document import HtmlDocument
from country_pricing.models import CountryRecord
from country_pricing.orchestrator import PricingState, PricingSystem
from country_pricing.storage import KeyValueStore

from conftest import ScriptedLocator


@pytest.fixture
def locator():
    return ScriptedLocator()


@pytest.fixture
def system(page_html, cache, locator):
    return PricingSystem(HtmlDocument(page_html), cache, locator)


@pytest.fixture
def controls(system):
    return CountryPricing(system)


class TestForceRegion:
    def test_force_australia_skips_locator(self, controls, system, locator):
        result = controls.force_australia()
        assert result.changed
        assert locator.calls == 0
        assert "Brand+video A$3500 or A$1750/month" in system.document.text
        cached = system.cache.read()
        assert cached.record == CountryRecord("AU")
        assert cached.record.source == "manual"

    @pytest.mark.asyncio
    async def test_force_matches_detection(self, page_html, cache, clock, controls, system):
        detected = PricingSystem(
            HtmlDocument(page_html),
            CacheStore(KeyValueStore(), clock=clock),
            ScriptedLocator(CountryRecord("BD", "Bangladesh", "ipapi.co")),
        )
        await detected.init()
        controls.force_bangladesh()
        assert system.document.html == detected.document.html

    def test_force_other_region_after_australia(self, controls, system):
        controls.force_australia()
        controls.force_bangladesh()
        assert "A$" not in system.document.text
        assert "Custom pricing available!" in system.document.text

    def test_force_unknown_country_keeps_default(self, controls, system, page_html):
        assert controls.force_region("fr", "France") is None
        assert system.document.html == HtmlDocument(page_html).html


class TestInfo:
    def test_defaults_when_nothing_stored(self, controls):
        assert controls.get_info() == {
            "country": None,
            "region": "DEFAULT",
            "currency": "USD",
            "cache_age": None,
        }

    def test_after_force(self, controls, clock):
        controls.force_bangladesh()
        clock.advance(2)
        info = controls.get_info()
        assert info["country"] == {"countryCode": "BD", "countryName": "Bangladesh", "source": "manual"}
        assert info["region"] == "BD"
        assert info["currency"] == "BDT"
        assert info["cache_age"] == pytest.approx(7200)

    def test_stale_country_still_reports_age(self, controls, clock):
        controls.force_australia()
        clock.advance(30)
        info = controls.get_info()
        assert info["country"] is None
        assert info["region"] == "AU"
        assert info["cache_age"] == pytest.approx(30 * 3600)

    def test_cached_age_helper(self):
        assert cached_age(10.0, 4000) == pytest.approx(6.0)
        assert cached_age(10.0, None) is None


class TestClearAndRefresh:
    def test_clear_cache(self, controls):
        controls.force_australia()
        controls.clear_cache()
        info = controls.get_info()
        assert info["country"] is None
        assert info["region"] == "DEFAULT"

    def test_refresh_reloads_default_page(self, controls, system, page_html):
        controls.force_australia()
        controls.refresh()
        assert system.document.html == HtmlDocument(page_html).html
        assert system.state == PricingState.IDLE
        assert system.applied_region is None
        assert system.cache.read() is None

    def test_refresh_uses_reload_hook(self, system):
        reloads = []
        controls = CountryPricing(system, reload=lambda: reloads.append(True))
        controls.force_australia()
        controls.refresh()
        assert reloads == [True]
        assert system.cache.read_applied() is None

    @pytest.mark.asyncio
    async def test_init_after_refresh_starts_clean(self, controls, system, locator):
        controls.force_australia()
        controls.refresh()
        assert await system.init() == "DEFAULT"
        assert locator.calls == 1
